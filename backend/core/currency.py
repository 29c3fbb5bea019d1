"""
Multi-currency helpers.

Amounts in different currencies are never added together. Every total in the
system is a dict mapping a currency code to a Decimal.
"""
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db.models import Sum

CURRENCY_CHOICES = [
    ('USD', 'US Dollar'),
    ('TRY', 'Turkish Lira'),
    ('SYP', 'Syrian Pound'),
]

ZERO = Decimal('0.00')
CENT = Decimal('0.01')


def default_currency():
    return getattr(settings, 'DEFAULT_CURRENCY', 'USD')


def to_decimal(value):
    """Coerce user or model input to Decimal, treating blanks and garbage as zero"""
    if value is None or value == '':
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return ZERO


def add_amount(totals, currency, amount):
    """Accumulate amount into totals[currency]; zero amounts are skipped"""
    amount = to_decimal(amount)
    if amount == 0:
        return totals
    currency = currency or default_currency()
    totals[currency] = totals.get(currency, ZERO) + amount
    return totals


def sum_by_currency(pairs):
    """Sum an iterable of (currency, amount) pairs"""
    totals = {}
    for currency, amount in pairs:
        add_amount(totals, currency, amount)
    return totals


def merge_totals(*many):
    merged = {}
    for totals in many:
        for currency, amount in totals.items():
            add_amount(merged, currency, amount)
    return merged


def subtract_totals(left, right):
    """left - right per currency; currencies present on either side are kept"""
    result = dict(left)
    for currency, amount in right.items():
        result[currency] = result.get(currency, ZERO) - to_decimal(amount)
    return result


def scale_totals(totals, factor):
    factor = to_decimal(factor)
    return {currency: amount * factor for currency, amount in totals.items()}


def totals_to_strings(totals):
    """Serialize totals for JSON responses (sorted, two decimal places)"""
    return {
        currency: str(to_decimal(amount).quantize(CENT))
        for currency, amount in sorted(totals.items())
    }


def aggregate_by_currency(queryset, amount_field='amount', currency_field='currency'):
    """Database-side SUM grouped by currency"""
    rows = queryset.order_by().values(currency_field).annotate(total=Sum(amount_field))
    return sum_by_currency((row[currency_field], row['total']) for row in rows)
