import logging
from datetime import datetime
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from backend.core.currency import CENT, to_decimal, totals_to_strings
from backend.core.excel import export_response
from backend.core.permissions import is_admin_user
from backend.core.utils import create_audit_log
from backend.parties.models import Customer
from backend.trips.models import TripStation
from .commissions import (
    compute_commissions, filter_commissions, commission_totals, driver_summary, set_commission_status
)
from .filters import TransactionFilter, TransferFilter
from .ledger import journal_stats, debts_summary, customer_statement, transfer_stats
from .models import FinancialTransaction, BranchTransfer
from .serializers import (
    FinancialTransactionSerializer, BranchTransferSerializer, TransferStatusSerializer, CommissionStatusSerializer
)

logger = logging.getLogger('backend.finance')

FINANCE_FORBIDDEN = 'Only Admin users can access finance'

TRANSACTION_TYPE_LABELS = {
    'debt': 'دين',
    'payment': 'دفعة',
    'income': 'إيراد',
    'expense': 'مصروف',
}

TRANSFER_STATUS_LABELS = {
    'pending': 'معلق',
    'confirmed': 'مؤكد',
    'completed': 'مكتمل',
}


def _forbidden():
    return Response({'error': FINANCE_FORBIDDEN}, status=status.HTTP_403_FORBIDDEN)


def _money(value):
    return str(to_decimal(value).quantize(CENT))


# Daily journal
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def transaction_list_create(request):
    """List journal transactions (filterable) or add one"""
    if not is_admin_user(request.user):
        return _forbidden()
    if request.method == 'GET':
        queryset = TransactionFilter(
            request.query_params,
            queryset=FinancialTransaction.objects.select_related('created_by')
        ).qs
        serializer = FinancialTransactionSerializer(queryset, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = FinancialTransactionSerializer(data=request.data)
        if serializer.is_valid():
            transaction = serializer.save(created_by=request.user)
            create_audit_log(
                request=request,
                action='transaction_add',
                model_name='FinancialTransaction',
                object_id=transaction.pk,
                object_name=transaction.customer_name or transaction.description[:100],
                object_reference=transaction.reference,
                changes={'amount': str(transaction.amount), 'currency': transaction.currency,
                         'type': transaction.transaction_type},
            )
            return Response(FinancialTransactionSerializer(transaction).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def transaction_detail(request, pk):
    if not is_admin_user(request.user):
        return _forbidden()
    transaction = get_object_or_404(FinancialTransaction, pk=pk)

    if request.method == 'GET':
        return Response(FinancialTransactionSerializer(transaction).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = FinancialTransactionSerializer(transaction, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request,
            action='delete',
            model_name='FinancialTransaction',
            object_id=transaction.pk,
            object_reference=transaction.reference,
        )
        transaction.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def journal_statistics(request):
    """Per-currency totals for the journal header, honouring the list filters"""
    if not is_admin_user(request.user):
        return _forbidden()
    queryset = TransactionFilter(request.query_params, queryset=FinancialTransaction.objects.all()).qs
    stats = journal_stats(queryset)
    return Response({
        'totals_by_type': {key: totals_to_strings(value) for key, value in stats['totals_by_type'].items()},
        'net': totals_to_strings(stats['net']),
        'cash_net': totals_to_strings(stats['cash_net']),
        'today_totals': totals_to_strings(stats['today_totals']),
        'today_net': totals_to_strings(stats['today_net']),
        'today_count': stats['today_count'],
        'month_count': stats['month_count'],
        'total_count': stats['total_count'],
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def debts_list(request):
    """Outstanding balance per customer and currency"""
    if not is_admin_user(request.user):
        return _forbidden()
    rows = debts_summary(FinancialTransaction.objects.all(), search=request.query_params.get('search'))
    for row in rows:
        for field in ('total_debt', 'total_paid', 'balance'):
            row[field] = _money(row[field])
    return Response(rows)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_statement_view(request, customer_id):
    """Debts and payments of one customer with a running balance"""
    if not is_admin_user(request.user):
        return _forbidden()
    customer = get_object_or_404(Customer, pk=customer_id)
    lines, balances = customer_statement(FinancialTransaction.objects.filter(customer=customer))
    for line in lines:
        for field in ('debit', 'credit', 'balance'):
            line[field] = _money(line[field])
    return Response({
        'customer': {'id': customer.pk, 'name': customer.name, 'phone': customer.phone},
        'lines': lines,
        'balances': totals_to_strings(balances),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def transaction_export(request):
    if not is_admin_user(request.user):
        return _forbidden()
    queryset = TransactionFilter(request.query_params, queryset=FinancialTransaction.objects.all()).qs
    headers = ['رقم المرجع', 'التاريخ', 'الوقت', 'النوع', 'المبلغ', 'العملة', 'الوصف', 'العميل', 'الهاتف', 'الفرع']
    rows = [
        [t.reference, t.date.isoformat(), t.time.strftime('%H:%M') if t.time else '',
         TRANSACTION_TYPE_LABELS.get(t.transaction_type, t.transaction_type), t.amount, t.currency,
         t.description, t.customer_name, t.customer_phone, t.branch_name]
        for t in queryset
    ]
    return export_response('daily_journal.xlsx', 'Daily Journal', headers, rows)


# Branch transfers
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def transfer_list_create(request):
    if not is_admin_user(request.user):
        return _forbidden()
    if request.method == 'GET':
        queryset = TransferFilter(
            request.query_params,
            queryset=BranchTransfer.objects.select_related('from_branch', 'to_branch')
        ).qs
        return Response(BranchTransferSerializer(queryset, many=True).data)
    else:  # POST
        serializer = BranchTransferSerializer(data=request.data)
        if serializer.is_valid():
            transfer = serializer.save(created_by=request.user)
            create_audit_log(
                request=request,
                action='transfer_add',
                model_name='BranchTransfer',
                object_id=transfer.pk,
                object_name=f"{transfer.from_branch_name} -> {transfer.to_branch_name}",
                object_reference=transfer.transfer_number,
                changes={'amount': str(transfer.amount), 'currency': transfer.currency},
            )
            return Response(BranchTransferSerializer(transfer).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def transfer_detail(request, pk):
    if not is_admin_user(request.user):
        return _forbidden()
    transfer = get_object_or_404(BranchTransfer, pk=pk)

    if request.method == 'GET':
        return Response(BranchTransferSerializer(transfer).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = BranchTransferSerializer(transfer, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request,
            action='delete',
            model_name='BranchTransfer',
            object_id=transfer.pk,
            object_reference=transfer.transfer_number,
        )
        transfer.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def transfer_change_status(request, pk):
    if not is_admin_user(request.user):
        return _forbidden()
    transfer = get_object_or_404(BranchTransfer, pk=pk)
    serializer = TransferStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_status = transfer.status
    transfer.status = serializer.validated_data['status']
    transfer.save(update_fields=['status', 'updated_at'])
    create_audit_log(
        request=request,
        action='transfer_status',
        model_name='BranchTransfer',
        object_id=transfer.pk,
        object_reference=transfer.transfer_number,
        changes={'status': {'old': old_status, 'new': transfer.status}},
    )
    return Response(BranchTransferSerializer(transfer).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def transfer_statistics(request):
    if not is_admin_user(request.user):
        return _forbidden()
    queryset = TransferFilter(request.query_params, queryset=BranchTransfer.objects.all()).qs
    stats = transfer_stats(queryset)
    for key in ('total_sent', 'total_received', 'total_confirmed'):
        stats[key] = totals_to_strings(stats[key])
    return Response(stats)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def transfer_export(request):
    if not is_admin_user(request.user):
        return _forbidden()
    queryset = TransferFilter(request.query_params, queryset=BranchTransfer.objects.all()).qs
    headers = ['رقم التحويل', 'التاريخ', 'من فرع', 'إلى فرع', 'المبلغ', 'العملة', 'النوع', 'الحالة', 'الوصف']
    rows = [
        [t.transfer_number, t.date.isoformat(), t.from_branch_name, t.to_branch_name, t.amount, t.currency,
         t.get_transfer_type_display(), TRANSFER_STATUS_LABELS.get(t.status, t.status), t.description]
        for t in queryset
    ]
    return export_response('branch_transfers.xlsx', 'Branch Transfers', headers, rows)


# Driver commissions
def _date_param(params, name):
    """YYYY-MM-DD query parameter as a date; blank means no filter"""
    value = params.get(name)
    if not value:
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError({'error': f"Invalid {name} '{value}', expected YYYY-MM-DD", 'field': name})


def _filtered_commissions(request):
    params = request.query_params
    date_from = _date_param(params, 'date_from')
    date_to = _date_param(params, 'date_to')
    min_amount = params.get('min_amount')
    return filter_commissions(
        compute_commissions(),
        driver=params.get('driver'),
        status=params.get('status'),
        date_from=date_from,
        date_to=date_to,
        only_with_amount=params.get('only_with_amount', '').lower() in ('true', '1', 'yes'),
        min_amount=to_decimal(min_amount) if min_amount not in (None, '') else None,
    )


def _commission_row_data(row):
    data = dict(row)
    data['commission_percentage'] = _money(row['commission_percentage'])
    data['base_amount'] = _money(row['base_amount'])
    data['commission_amount'] = _money(row['commission_amount'])
    return data


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def commission_list(request):
    """Commission rows, totals and per-driver summary for the filtered set"""
    if not is_admin_user(request.user):
        return _forbidden()
    rows = _filtered_commissions(request)
    totals = commission_totals(rows)
    drivers = driver_summary(rows)
    for summary in drivers:
        for key in ('total', 'paid', 'pending'):
            summary[key] = totals_to_strings(summary[key])
    return Response({
        'commissions': [_commission_row_data(row) for row in rows],
        'totals': {key: totals_to_strings(value) for key, value in totals.items()},
        'drivers': drivers,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def commission_update_status(request, station_id):
    """Mark the commission of a trip station as paid or pending"""
    if not is_admin_user(request.user):
        return _forbidden()
    station = get_object_or_404(TripStation, pk=station_id)
    serializer = CommissionStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    payment = set_commission_status(
        station, serializer.validated_data['status'], user=request.user, notes=serializer.validated_data['notes']
    )
    create_audit_log(
        request=request,
        action='commission_status',
        model_name='CommissionPayment',
        object_id=payment.pk,
        object_name=station.driver_name,
        object_reference=station.commission_key,
        changes={'status': payment.status},
    )
    return Response({
        'commission_id': station.commission_key,
        'station_id': station.pk,
        'status': payment.status,
        'payment_date': payment.payment_date,
        'notes': payment.notes,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def commission_export(request):
    if not is_admin_user(request.user):
        return _forbidden()
    rows = _filtered_commissions(request)
    headers = ['السائق', 'الرحلة', 'المحطة', 'النسبة المئوية', 'أجور الشحن المحصلة', 'مبلغ الأجرة', 'العملة',
               'تاريخ الرحلة', 'الحالة']
    sheet_rows = [
        [row['driver_name'], row['trip_name'], row['station_name'], f"{row['commission_percentage']}%",
         row['base_amount'], row['commission_amount'], row['currency'], row['trip_date'].isoformat(),
         'تم الدفع' if row['status'] == 'paid' else 'معلق']
        for row in rows
    ]
    return export_response('driver_commissions.xlsx', 'Driver Commissions', headers, sheet_rows)
