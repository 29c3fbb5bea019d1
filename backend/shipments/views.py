import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.db import transaction
from django.db.models import Q, Count
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from backend.core.currency import merge_totals, totals_to_strings
from backend.core.excel import export_response
from backend.core.permissions import IsStaffMember
from backend.core.utils import create_audit_log
from .filters import ShipmentFilter
from .labels import generate_shipment_label
from .models import Shipment
from .serializers import (
    ShipmentSerializer, ShipmentStatusChangeSerializer, ShipmentBulkStatusSerializer,
    ShipmentTrackingSerializer, ShipmentStatusUpdateSerializer
)
from .services import apply_status, apply_status_to_all, record_status
from .status import SHIPMENT_STATUS_LABELS

logger = logging.getLogger('backend.shipments')


def _filtered_shipments(request):
    queryset = Shipment.objects.select_related('vehicle', 'trip', 'station', 'created_by')
    return ShipmentFilter(request.query_params, queryset=queryset).qs


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def shipment_list_create(request):
    """List shipments (filterable) or create a new shipment"""
    if request.method == 'GET':
        serializer = ShipmentSerializer(_filtered_shipments(request), many=True)
        return Response(serializer.data)
    else:
        serializer = ShipmentSerializer(data=request.data)
        if serializer.is_valid():
            with transaction.atomic():
                shipment = serializer.save(created_by=request.user)
                record_status(shipment, shipment.status, user=request.user, notes='Shipment created')
            create_audit_log(
                request=request,
                action='shipment_create',
                model_name='Shipment',
                object_id=shipment.pk,
                object_name=shipment.recipient_name,
                object_reference=shipment.shipment_number,
            )
            logger.info(f"Shipment {shipment.shipment_number} created by {request.user.username}")
            return Response(ShipmentSerializer(shipment).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffMember])
def shipment_detail(request, pk):
    """Retrieve, update or delete a shipment"""
    shipment = get_object_or_404(Shipment, pk=pk)

    if request.method == 'GET':
        data = ShipmentSerializer(shipment).data
        data['history'] = ShipmentStatusUpdateSerializer(shipment.status_updates.all(), many=True).data
        return Response(data)
    elif request.method in ('PUT', 'PATCH'):
        old_status = shipment.status
        serializer = ShipmentSerializer(shipment, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            with transaction.atomic():
                shipment = serializer.save()
                if shipment.status != old_status:
                    record_status(shipment, shipment.status, user=request.user, notes='Updated from edit form')
            return Response(ShipmentSerializer(shipment).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request,
            action='delete',
            model_name='Shipment',
            object_id=shipment.pk,
            object_reference=shipment.shipment_number,
        )
        shipment.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def shipment_change_status(request, pk):
    """Change a shipment's status and append it to the tracking history"""
    shipment = get_object_or_404(Shipment, pk=pk)
    serializer = ShipmentStatusChangeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_status = shipment.status
    data = serializer.validated_data
    with transaction.atomic():
        apply_status(shipment, data['status'], user=request.user, notes=data['notes'], location=data['location'])
    create_audit_log(
        request=request,
        action='shipment_status',
        model_name='Shipment',
        object_id=shipment.pk,
        object_reference=shipment.shipment_number,
        changes={'status': {'old': old_status, 'new': shipment.status}},
    )
    return Response(ShipmentSerializer(shipment).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def shipment_bulk_status(request):
    """Apply one status to several shipments"""
    serializer = ShipmentBulkStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    shipments = list(Shipment.objects.filter(pk__in=data['shipment_ids']))
    missing = set(data['shipment_ids']) - {s.pk for s in shipments}
    if missing:
        return Response({'error': f'Shipments not found: {sorted(missing)}'}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        changed = apply_status_to_all(shipments, data['status'], user=request.user, notes=data['notes'])
    return Response({'updated': len(shipments), 'changed': changed, 'status': data['status']})


@api_view(['GET'])
@permission_classes([AllowAny])
def shipment_track(request, shipment_number):
    """Public tracking by shipment number"""
    shipment = Shipment.objects.filter(shipment_number__iexact=shipment_number.strip()).first()
    if shipment is None:
        return Response({'error': 'No shipment found with this number'}, status=status.HTTP_404_NOT_FOUND)
    return Response(ShipmentTrackingSerializer(shipment).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_shipments(request):
    """Customer portal: shipments sent to or from the user's phone number"""
    phone = (request.user.phone or '').strip()
    if not phone:
        return Response({'shipments': [], 'message': 'Add a phone number to your profile to see your shipments'})

    # Matching both phones still yields one row
    shipments = Shipment.objects.filter(
        Q(sender_phone=phone) | Q(recipient_phone=phone)
    ).order_by('-created_at')
    serializer = ShipmentSerializer(shipments, many=True)
    return Response({'shipments': serializer.data})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffMember])
def shipment_label(request, pk):
    """PNG label with the shipment barcode"""
    shipment = get_object_or_404(Shipment, pk=pk)
    png = generate_shipment_label(
        shipment_number=shipment.shipment_number,
        recipient_name=shipment.recipient_name,
        governorate=shipment.governorate,
        sender_name=shipment.sender_name,
        parcel_count=shipment.parcel_count,
    )
    response = HttpResponse(png, content_type='image/png')
    response['Content-Disposition'] = f'inline; filename="{shipment.shipment_number}.png"'
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffMember])
def shipment_summary(request):
    """Counts per status and amounts to collect per currency for the filtered set"""
    shipments = _filtered_shipments(request)
    by_status = {
        row['status']: row['count']
        for row in shipments.order_by().values('status').annotate(count=Count('id'))
    }
    collectible = {}
    for shipment in shipments:
        collectible = merge_totals(collectible, shipment.collectible_totals())
    return Response({
        'total': sum(by_status.values()),
        'by_status': [
            {'status': code, 'label': label, 'count': by_status.get(code, 0)}
            for code, label in SHIPMENT_STATUS_LABELS.items()
        ],
        'collectible_totals': totals_to_strings(collectible),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffMember])
def shipment_export(request):
    """Export the filtered shipments to xlsx"""
    headers = [
        'رقم الشحنة', 'المرسل', 'هاتف المرسل', 'المستلم', 'هاتف المستلم', 'المحافظة',
        'عدد الطرود', 'الوزن', 'قيمة البضاعة', 'عملة البضاعة', 'أجور الشحن', 'عملة الشحن',
        'طريقة الدفع', 'الحوالة', 'المبلغ المطلوب تحصيله', 'الحالة', 'السيارة', 'تاريخ الإنشاء',
    ]
    rows = []
    for shipment in _filtered_shipments(request):
        collectible = totals_to_strings(shipment.collectible_totals())
        rows.append([
            shipment.shipment_number,
            shipment.sender_name,
            shipment.sender_phone,
            shipment.recipient_name,
            shipment.recipient_phone,
            shipment.governorate,
            shipment.parcel_count,
            shipment.weight,
            shipment.goods_value,
            shipment.goods_currency,
            shipment.shipping_fee,
            shipment.shipping_fee_currency,
            'دفع عند الاستلام' if shipment.shipping_fee_payment_method == 'collect' else 'مدفوع مسبقاً',
            shipment.hwala_fee,
            ' + '.join(f"{amount} {currency}" for currency, amount in collectible.items()),
            shipment.status_label,
            shipment.vehicle.vehicle_number if shipment.vehicle else '',
            shipment.created_at.strftime('%Y-%m-%d %H:%M'),
        ])
    return export_response('shipments.xlsx', 'Shipments', headers, rows)
