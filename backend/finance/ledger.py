"""
Journal arithmetic. Every figure is kept per currency; amounts in different
currencies are never added together.
"""
from django.db.models import Count
from django.utils import timezone

from backend.core.currency import ZERO, aggregate_by_currency, subtract_totals

TRANSACTION_TYPES = ['income', 'payment', 'expense', 'debt']


def net_totals(queryset):
    """Outstanding balance: debt - payment, per currency"""
    debts = aggregate_by_currency(queryset.filter(transaction_type='debt'))
    payments = aggregate_by_currency(queryset.filter(transaction_type='payment'))
    return subtract_totals(debts, payments)


def cash_totals(queryset):
    """income - expense, per currency"""
    income = aggregate_by_currency(queryset.filter(transaction_type='income'))
    expenses = aggregate_by_currency(queryset.filter(transaction_type='expense'))
    return subtract_totals(income, expenses)


def journal_stats(queryset):
    """Totals per type, net, today's figures and counts for the journal header"""
    today = timezone.localdate()
    by_type = {}
    for transaction_type in TRANSACTION_TYPES:
        by_type[transaction_type] = aggregate_by_currency(queryset.filter(transaction_type=transaction_type))

    today_qs = queryset.filter(date=today)
    return {
        'totals_by_type': by_type,
        'net': net_totals(queryset),
        'cash_net': cash_totals(queryset),
        'today_totals': aggregate_by_currency(today_qs),
        'today_net': net_totals(today_qs),
        'today_count': today_qs.count(),
        'month_count': queryset.filter(date__year=today.year, date__month=today.month).count(),
        'total_count': queryset.count(),
    }


def _customer_key(row):
    if row['customer_id']:
        return ('id', row['customer_id'])
    return ('name', row['customer_name'], row['customer_phone'])


def debts_summary(queryset, search=None):
    """
    One row per customer and currency: total debt, total paid and
    balance = debt - paid. Sorted by balance, largest first.
    """
    rows = {}
    values = (
        queryset.filter(transaction_type__in=['debt', 'payment'])
        .order_by()
        .values('customer_id', 'customer_name', 'customer_phone', 'currency', 'transaction_type', 'amount', 'date')
    )
    for row in values:
        if not row['customer_id'] and not row['customer_name']:
            continue
        key = _customer_key(row) + (row['currency'],)
        summary = rows.setdefault(key, {
            'customer_id': row['customer_id'],
            'customer_name': row['customer_name'],
            'customer_phone': row['customer_phone'],
            'currency': row['currency'],
            'total_debt': ZERO,
            'total_paid': ZERO,
            'transactions_count': 0,
            'last_transaction_date': None,
        })
        if row['transaction_type'] == 'debt':
            summary['total_debt'] += row['amount']
        else:
            summary['total_paid'] += row['amount']
        summary['transactions_count'] += 1
        if summary['last_transaction_date'] is None or row['date'] > summary['last_transaction_date']:
            summary['last_transaction_date'] = row['date']

    result = []
    search = (search or '').strip().lower()
    for summary in rows.values():
        if search and search not in (summary['customer_name'] or '').lower() \
                and search not in (summary['customer_phone'] or '').lower():
            continue
        summary['balance'] = summary['total_debt'] - summary['total_paid']
        result.append(summary)
    result.sort(key=lambda s: s['balance'], reverse=True)
    return result


def customer_statement(queryset):
    """
    Chronological debt/payment lines with a running balance per currency.
    Returns (lines, closing balances).
    """
    balances = {}
    lines = []
    ordered = queryset.filter(transaction_type__in=['debt', 'payment']).order_by('date', 'time', 'id')
    for transaction in ordered:
        sign = 1 if transaction.transaction_type == 'debt' else -1
        balances[transaction.currency] = balances.get(transaction.currency, ZERO) + sign * transaction.amount
        lines.append({
            'id': transaction.pk,
            'reference': transaction.reference,
            'date': transaction.date,
            'transaction_type': transaction.transaction_type,
            'description': transaction.description,
            'debit': transaction.amount if sign > 0 else ZERO,
            'credit': transaction.amount if sign < 0 else ZERO,
            'currency': transaction.currency,
            'balance': balances[transaction.currency],
        })
    return lines, balances


def transfer_stats(queryset):
    """Sent, received and confirmed totals per currency plus counts"""
    today = timezone.localdate()
    status_counts = {
        row['status']: row['count']
        for row in queryset.order_by().values('status').annotate(count=Count('id'))
    }
    return {
        'total_sent': aggregate_by_currency(queryset.filter(transfer_type='send')),
        'total_received': aggregate_by_currency(queryset.filter(transfer_type='receive')),
        'total_confirmed': aggregate_by_currency(queryset.filter(transfer_type='confirm')),
        'pending_count': status_counts.get('pending', 0),
        'today_count': queryset.filter(date=today).count(),
        'month_count': queryset.filter(date__year=today.year, date__month=today.month).count(),
        'total_count': queryset.count(),
    }
