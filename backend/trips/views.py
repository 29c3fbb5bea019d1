import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.db.models import Count
from django.shortcuts import get_object_or_404
from backend.core.currency import totals_to_strings, subtract_totals
from backend.core.excel import build_workbook, workbook_response
from backend.core.exceptions import DispatchError
from backend.core.permissions import IsStaffMember
from backend.core.utils import create_audit_log
from backend.inventory.serializers import TripDispatchItemSerializer
from backend.shipments.serializers import ShipmentSerializer
from backend.shipments.status import TRIP_STATUS_LABELS
from .filters import TripFilter
from .models import Trip, TripStation
from .serializers import (
    TripSerializer, TripListSerializer, TripStatusSerializer, TripShipmentsSerializer, ManifestSerializer
)
from .services import assign_shipments, release_shipments, create_manifest, change_trip_status, delete_trip

logger = logging.getLogger('backend.trips')


def _trip_detail_data(trip):
    data = TripSerializer(trip).data
    data['shipments'] = ShipmentSerializer(
        trip.shipments.select_related('vehicle', 'station'), many=True
    ).data
    data['dispatched_items'] = TripDispatchItemSerializer(trip.dispatched_items.all(), many=True).data
    return data


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def trip_list_create(request):
    """List trips or create a trip with its stations"""
    if request.method == 'GET':
        queryset = Trip.objects.annotate(
            shipments_count=Count('shipments', distinct=True),
            stations_count=Count('stations', distinct=True),
        )
        queryset = TripFilter(request.query_params, queryset=queryset).qs
        serializer = TripListSerializer(queryset, many=True)
        return Response(serializer.data)
    else:  # POST
        data = request.data.copy()
        stations_data = data.pop('stations', [])

        serializer = TripSerializer(data=data, context={'stations_data': stations_data, 'request': request})
        if serializer.is_valid():
            try:
                trip = serializer.save(created_by=request.user)
            except DispatchError as e:
                return Response(e.as_response_data(), status=status.HTTP_400_BAD_REQUEST)
            create_audit_log(
                request=request,
                action='trip_create',
                model_name='Trip',
                object_id=trip.pk,
                object_name=trip.trip_name,
                object_reference=trip.vehicle_number,
            )
            return Response(_trip_detail_data(trip), status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffMember])
def trip_detail(request, pk):
    """Retrieve, update (header and expenses) or delete a trip"""
    trip = get_object_or_404(Trip, pk=pk)

    if request.method == 'GET':
        return Response(_trip_detail_data(trip))
    elif request.method in ('PUT', 'PATCH'):
        old_status = trip.status
        serializer = TripSerializer(trip, data=request.data, partial=True)
        if serializer.is_valid():
            with transaction.atomic():
                trip = serializer.save()
                if trip.status != old_status:
                    change_trip_status(trip, trip.status, user=request.user)
            return Response(_trip_detail_data(trip))
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        trip_name = trip.trip_name
        released = delete_trip(trip, user=request.user)
        create_audit_log(
            request=request,
            action='trip_delete',
            model_name='Trip',
            object_id=pk,
            object_name=trip_name,
            changes={'released_shipments': released},
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def trip_change_status(request, pk):
    """Change the trip status; every shipment on the trip follows"""
    trip = get_object_or_404(Trip, pk=pk)
    serializer = TripStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_status = trip.status
    new_status = serializer.validated_data['status']
    updated = change_trip_status(trip, new_status, user=request.user)
    create_audit_log(
        request=request,
        action='trip_status',
        model_name='Trip',
        object_id=trip.pk,
        object_name=trip.trip_name,
        changes={'status': {'old': old_status, 'new': new_status}, 'shipments_updated': updated},
    )
    return Response({'trip': TripListSerializer(trip).data, 'shipments_updated': updated})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def trip_assign_shipments(request, pk):
    """Add shipments to a trip, optionally to one of its stations"""
    trip = get_object_or_404(Trip, pk=pk)
    serializer = TripShipmentsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    station = None
    station_id = serializer.validated_data.get('station')
    if station_id:
        station = get_object_or_404(TripStation, pk=station_id, trip=trip)
    try:
        with transaction.atomic():
            shipments = assign_shipments(trip, serializer.validated_data['shipment_ids'], station=station)
    except DispatchError as e:
        return Response(e.as_response_data(), status=status.HTTP_400_BAD_REQUEST)
    return Response({'assigned': len(shipments), 'trip': TripSerializer(trip).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def trip_unassign_shipments(request, pk):
    """Take shipments off a trip; they go back to pending"""
    trip = get_object_or_404(Trip, pk=pk)
    serializer = TripShipmentsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    shipments = list(trip.shipments.filter(pk__in=serializer.validated_data['shipment_ids']))
    with transaction.atomic():
        release_shipments(shipments, user=request.user, notes=f"Removed from trip {trip.trip_name}")
    return Response({'unassigned': len(shipments), 'trip': TripSerializer(trip).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def trip_manifest(request):
    """Create a manifest trip from unassigned shipments and a vehicle"""
    serializer = ManifestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        trip = create_manifest(
            data['vehicle'], data['shipment_ids'], user=request.user,
            trip_name=data['trip_name'], notes=data['notes']
        )
    except DispatchError as e:
        return Response(e.as_response_data(), status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='manifest_create',
        model_name='Trip',
        object_id=trip.pk,
        object_name=trip.trip_name,
        object_reference=trip.vehicle_number,
        changes={'shipment_ids': data['shipment_ids']},
    )
    return Response(_trip_detail_data(trip), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffMember])
def trip_totals(request, pk):
    """Collections, expenses and profit per currency"""
    trip = get_object_or_404(Trip, pk=pk)
    collections = trip.collection_totals()
    expenses = trip.expense_totals()
    return Response({
        'trip_id': trip.pk,
        'collections': totals_to_strings(collections),
        'expenses': totals_to_strings(expenses),
        'profit': totals_to_strings(subtract_totals(collections, expenses)),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffMember])
def trip_export(request, pk):
    """Trip sheet: header, stations, shipments, dispatched branch items and totals"""
    trip = get_object_or_404(Trip, pk=pk)

    info_rows = [
        ['اسم الرحلة', trip.trip_name],
        ['السيارة', trip.vehicle_number],
        ['الوجهة', trip.destination],
        ['المالك', trip.owner_name],
        ['تاريخ المغادرة', trip.departure_date.isoformat() if trip.departure_date else ''],
        ['الحالة', TRIP_STATUS_LABELS.get(trip.status, trip.status)],
    ]
    station_rows = [
        [s.order_index + 1, s.station_name, s.driver_name, s.commission_percentage, s.shipments.count()]
        for s in trip.stations.all()
    ]
    shipment_rows = []
    for shipment in trip.shipments.select_related('station'):
        collectible = totals_to_strings(shipment.collectible_totals())
        shipment_rows.append([
            shipment.shipment_number,
            shipment.station.station_name if shipment.station else '',
            shipment.recipient_name,
            shipment.recipient_phone,
            shipment.governorate,
            shipment.parcel_count,
            ' + '.join(f"{amount} {currency}" for currency, amount in collectible.items()),
            shipment.status_label,
        ])
    item_rows = [
        [item.bol_number, item.item_description, item.quantity, item.item_value, item.item_currency,
         item.recipient_name, item.destination_governorate]
        for item in trip.dispatched_items.all()
    ]
    collections = trip.collection_totals()
    expenses = trip.expense_totals()
    profit = subtract_totals(collections, expenses)
    total_rows = [
        [currency, collections.get(currency, 0), expenses.get(currency, 0), profit.get(currency, 0)]
        for currency in sorted(set(collections) | set(expenses))
    ]

    wb = build_workbook([
        ('Trip', ['البيان', 'القيمة'], info_rows),
        ('Stations', ['#', 'المحطة', 'السائق', 'نسبة العمولة', 'عدد الشحنات'], station_rows),
        ('Shipments', ['رقم الشحنة', 'المحطة', 'المستلم', 'الهاتف', 'المحافظة', 'الطرود',
                       'المبلغ المطلوب', 'الحالة'], shipment_rows),
        ('Branch Items', ['رقم البوليصة', 'الوصف', 'الكمية', 'القيمة', 'العملة', 'المستلم', 'المحافظة'],
         item_rows),
        ('Totals', ['العملة', 'التحصيل', 'المصاريف', 'الربح'], total_rows),
    ])
    return workbook_response(wb, f"trip_{trip.pk}.xlsx")
