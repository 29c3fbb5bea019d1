"""
Driver commissions.

A driver earns commission_percentage of the shipping fees collected on
delivery for the shipments of their station, separately in each currency.
Payment state is saved per station in CommissionPayment; without a saved
state a station counts as paid once its trip is delivered.
"""
import logging

from django.db import transaction
from django.utils import timezone

from backend.core.currency import CENT, ZERO, add_amount, default_currency, sum_by_currency
from backend.shipments.status import DELIVERED
from backend.trips.models import TripStation
from .models import CommissionPayment

logger = logging.getLogger('backend.finance')


def _station_status(station):
    payment = getattr(station, 'commission_payment', None)
    if payment is not None:
        return payment.status, payment.payment_date
    return ('paid' if station.trip.status == DELIVERED else 'pending'), None


def station_commission_rows(station):
    """One row per currency of the station's collected shipping fees"""
    collected = []
    for shipment in station.shipments.all():
        fee = shipment.collected_shipping_fee()
        if fee:
            collected.append((shipment.pk, fee))
    base = sum_by_currency(fee for _, fee in collected)
    if not base:
        base = {default_currency(): ZERO}

    status, payment_date = _station_status(station)
    trip = station.trip
    trip_date = trip.departure_date or timezone.localtime(trip.created_at).date()
    rows = []
    for currency, base_amount in sorted(base.items()):
        amount = (base_amount * station.commission_percentage / 100).quantize(CENT)
        rows.append({
            'commission_id': station.commission_key,
            'station_id': station.pk,
            'trip_id': trip.pk,
            'trip_name': trip.trip_name,
            'trip_status': trip.status,
            'trip_date': trip_date,
            'driver_id': station.driver_id,
            'driver_name': station.driver_name,
            'station_name': station.station_name,
            'commission_percentage': station.commission_percentage,
            'currency': currency,
            'base_amount': base_amount,
            'commission_amount': amount,
            'shipments_count': len(collected),
            'shipment_ids': [pk for pk, _ in collected],
            'status': status,
            'payment_date': payment_date,
        })
    return rows


def compute_commissions(stations=None):
    if stations is None:
        stations = TripStation.objects.filter(driver__isnull=False, commission_percentage__gt=0)
    stations = stations.select_related('trip', 'commission_payment').prefetch_related('shipments')
    rows = []
    for station in stations:
        rows.extend(station_commission_rows(station))
    return rows


def filter_commissions(rows, driver=None, status=None, date_from=None, date_to=None,
                       only_with_amount=False, min_amount=None):
    result = []
    for row in rows:
        if driver and str(row['driver_id']) != str(driver):
            continue
        if status and row['status'] != status:
            continue
        if date_from and row['trip_date'] < date_from:
            continue
        if date_to and row['trip_date'] > date_to:
            continue
        if only_with_amount and row['commission_amount'] <= 0:
            continue
        if min_amount is not None and row['commission_amount'] < min_amount:
            continue
        result.append(row)
    return result


def commission_totals(rows):
    totals = {'total': {}, 'paid': {}, 'pending': {}}
    for row in rows:
        add_amount(totals['total'], row['currency'], row['commission_amount'])
        add_amount(totals[row['status']], row['currency'], row['commission_amount'])
    return totals


def driver_summary(rows):
    """Per driver: amounts per currency, distinct trips and shipments"""
    drivers = {}
    for row in rows:
        summary = drivers.setdefault(row['driver_id'], {
            'driver_id': row['driver_id'],
            'driver_name': row['driver_name'],
            'total': {},
            'paid': {},
            'pending': {},
            'trips': set(),
            'stations': {},
        })
        add_amount(summary['total'], row['currency'], row['commission_amount'])
        add_amount(summary[row['status']], row['currency'], row['commission_amount'])
        summary['trips'].add(row['trip_id'])
        # Currency rows of one station share the same shipments
        summary['stations'][row['station_id']] = row['shipments_count']

    result = []
    for summary in drivers.values():
        summary['trip_count'] = len(summary.pop('trips'))
        summary['shipment_count'] = sum(summary.pop('stations').values())
        result.append(summary)
    result.sort(key=lambda s: s['driver_name'] or '')
    return result


@transaction.atomic
def set_commission_status(station, status, user=None, notes=''):
    """Save the payment state of a station; paying stamps the payment date"""
    payment, _ = CommissionPayment.objects.update_or_create(
        station=station,
        defaults={
            'status': status,
            'payment_date': timezone.now() if status == 'paid' else None,
            'notes': notes or '',
            'updated_by': user,
        }
    )
    logger.info(f"Commission {station.commission_key} marked {status}")
    return payment
