import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Count, F, IntegerField, Sum
from django.db.models.functions import Coalesce
from django.shortcuts import get_object_or_404
from django.utils import timezone
from backend.core.excel import export_response
from backend.core.exceptions import DispatchError
from backend.core.permissions import IsStaffMember
from backend.core.utils import create_audit_log
from backend.trips.serializers import TripSerializer
from .dispatch import bulk_dispatch, dispatch_item
from .filters import BranchEntryFilter
from .models import BranchEntry, BranchEntryItem
from .serializers import (
    BranchEntrySerializer, BranchEntryListSerializer, BranchEntryItemSerializer,
    BranchEntryLinkSerializer, DispatchItemSerializer, BulkDispatchSerializer
)

logger = logging.getLogger('backend.inventory')


def _annotated_entries(request):
    queryset = BranchEntry.objects.annotate(
        items_count=Count('items'),
        total_quantity=Coalesce(Sum('items__item_quantity'), 0, output_field=IntegerField()),
        dispatched_total=Coalesce(Sum('items__dispatched_quantity'), 0, output_field=IntegerField()),
    )
    return BranchEntryFilter(request.query_params, queryset=queryset).qs


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def branch_entry_list_create(request):
    """List branch entries or create one with its items"""
    if request.method == 'GET':
        serializer = BranchEntryListSerializer(_annotated_entries(request), many=True)
        return Response(serializer.data)
    else:  # POST
        data = request.data.copy()
        items_data = data.pop('items', [])

        serializer = BranchEntrySerializer(data=data, context={'items_data': items_data, 'request': request})
        if serializer.is_valid():
            entry = serializer.save(created_by=request.user)
            create_audit_log(
                request=request,
                action='create',
                model_name='BranchEntry',
                object_id=entry.pk,
                object_name=entry.branch_name,
                object_reference=entry.bol_number,
            )
            return Response(BranchEntrySerializer(entry).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffMember])
def branch_entry_detail(request, pk):
    """Retrieve, update or delete a branch entry"""
    entry = get_object_or_404(BranchEntry, pk=pk)

    if request.method == 'GET':
        return Response(BranchEntrySerializer(entry).data)
    elif request.method in ('PUT', 'PATCH'):
        data = request.data.copy()
        items_data = data.pop('items', None)

        serializer = BranchEntrySerializer(
            entry,
            data=data,
            partial=request.method == 'PATCH',
            context={'items_data': items_data, 'request': request}
        )
        if serializer.is_valid():
            entry = serializer.save()
            return Response(BranchEntrySerializer(entry).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if entry.has_dispatched_items:
            return Response(
                {'error': 'Cannot delete an entry after part of it was dispatched.'},
                status=status.HTTP_400_BAD_REQUEST
            )
        create_audit_log(
            request=request,
            action='delete',
            model_name='BranchEntry',
            object_id=entry.pk,
            object_reference=entry.bol_number,
        )
        entry.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def branch_entry_item_dispatch(request, pk):
    """Dispatch part of one item to a customer or to another branch"""
    get_object_or_404(BranchEntryItem, pk=pk)
    serializer = DispatchItemSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        item, record = dispatch_item(
            pk,
            data['amount'],
            data['destination_type'],
            user=request.user,
            customer_name=data['customer_name'],
            customer_phone=data['customer_phone'],
            destination_governorate=data['destination_governorate'],
            target_branch_name=data['target_branch_name'],
            notes=data['notes'],
        )
    except DispatchError as e:
        return Response(e.as_response_data(), status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='item_dispatch',
        model_name='BranchEntryItem',
        object_id=item.pk,
        object_name=item.item_description,
        object_reference=item.entry.bol_number,
        changes={'amount': data['amount'], 'destination_type': data['destination_type']},
    )
    return Response(BranchEntryItemSerializer(item).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def branch_entry_bulk_dispatch(request):
    """Send the whole remainder of the selected entries on a new trip"""
    serializer = BulkDispatchSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = dict(serializer.validated_data)
    entry_ids = data.pop('entry_ids')
    vehicle = data.pop('vehicle')
    cities = data.pop('destination_cities')
    notes = data.pop('notes')
    try:
        trip, dispatched = bulk_dispatch(entry_ids, vehicle, cities, user=request.user, notes=notes, expenses=data)
    except DispatchError as e:
        return Response(e.as_response_data(), status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='bulk_dispatch',
        model_name='Trip',
        object_id=trip.pk,
        object_name=trip.trip_name,
        object_reference=trip.vehicle_number,
        changes={'entry_ids': entry_ids, 'items_dispatched': dispatched},
    )
    return Response(
        {'trip': TripSerializer(trip).data, 'items_dispatched': dispatched},
        status=status.HTTP_201_CREATED
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffMember])
def branch_entry_pending(request):
    """Incoming entries that still hold goods"""
    queryset = _annotated_entries(request).filter(
        entry_type='incoming', total_quantity__gt=F('dispatched_total')
    )
    serializer = BranchEntrySerializer(queryset.prefetch_related('items__dispatch_history'), many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffMember])
def branch_entry_fully_dispatched(request):
    """Entries whose every item has left the branch"""
    queryset = _annotated_entries(request).filter(
        items_count__gt=0, total_quantity=F('dispatched_total')
    )
    serializer = BranchEntrySerializer(queryset.prefetch_related('items__dispatch_history'), many=True)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def branch_entry_link_vehicle(request, pk):
    """Link a BOL to the vehicle that carries it"""
    entry = get_object_or_404(BranchEntry, pk=pk)
    serializer = BranchEntryLinkSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    vehicle = data['vehicle']
    entry.vehicle = vehicle
    entry.vehicle_name = vehicle.vehicle_number
    entry.sender_name = data['sender_name']
    entry.converted_value = data['converted_value']
    entry.converted_value_currency = data['converted_value_currency']
    entry.percentage_share = data['percentage_share']
    entry.vehicle_rental_fee = data['vehicle_rental_fee']
    entry.additional_fee = data['additional_fee']
    entry.additional_fee_currency = data['additional_fee_currency']
    entry.additional_fee_payment_method = data['additional_fee_payment_method']
    entry.custom_fees = [
        {
            'name': fee['name'],
            'amount': str(fee['amount']),
            'currency': fee['currency'],
            'payment_method': fee['payment_method'],
        }
        for fee in data['custom_fees']
    ]
    entry.link_notes = data['notes']
    entry.linked_at = timezone.now()
    entry.status = 'linked'
    entry.save()

    create_audit_log(
        request=request,
        action='bol_link',
        model_name='BranchEntry',
        object_id=entry.pk,
        object_name=vehicle.vehicle_number,
        object_reference=entry.bol_number,
    )
    return Response(BranchEntrySerializer(entry).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffMember])
def branch_entry_export(request):
    """One row per item of the filtered entries"""
    headers = [
        'رقم البوليصة', 'النوع', 'الفرع', 'الحالة', 'مرجع الفرع المرسل', 'الوصف', 'الكمية',
        'الكمية المخرجة', 'المتبقي', 'الوزن', 'القيمة', 'العملة', 'المستلم', 'هاتف المستلم',
        'المحافظة', 'حالة البند', 'تاريخ الإدخال',
    ]
    rows = []
    entries = _annotated_entries(request).prefetch_related('items')
    for entry in entries:
        for item in entry.items.all():
            rows.append([
                entry.bol_number,
                entry.get_entry_type_display(),
                entry.branch_name,
                entry.get_status_display(),
                item.sending_branch_reference,
                item.item_description,
                item.item_quantity,
                item.dispatched_quantity,
                item.remaining_quantity,
                item.item_weight,
                item.item_value,
                item.item_currency,
                item.recipient_name,
                item.recipient_phone,
                item.destination_governorate,
                item.get_item_status_display(),
                entry.created_at.strftime('%Y-%m-%d'),
            ])
    return export_response('branch_entries.xlsx', 'Branch Entries', headers, rows)
