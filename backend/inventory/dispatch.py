"""
Taking goods out of branch entries.

dispatch_item() moves part of one line to a customer or another branch;
bulk_dispatch() empties every selected line onto a new trip. Both are
all-or-nothing and leave a DispatchRecord per line touched.
"""
import logging
import re

from django.db import transaction

from backend.core.exceptions import DispatchError
from backend.shipments.status import IN_TRANSIT
from backend.trips.models import Trip
from .models import BranchEntryItem, DispatchRecord, TripDispatchItem

logger = logging.getLogger('backend.inventory')

TRIP_EXPENSE_FIELDS = [
    'office_expenses', 'office_expenses_currency', 'car_expenses', 'car_expenses_currency',
    'vehicle_rental', 'expense1_name', 'expense1_value', 'expense1_currency',
    'expense2_name', 'expense2_value', 'expense2_currency',
]


def parse_cities(value):
    """Accept a list or a comma separated string (Latin or Arabic commas)"""
    if isinstance(value, (list, tuple)):
        parts = value
    else:
        parts = re.split(r'[,،]', value or '')
    return [part.strip() for part in parts if part and str(part).strip()]


@transaction.atomic
def dispatch_item(item_id, amount, destination_type, user=None, customer_name='', customer_phone='',
                  destination_governorate='', target_branch_name='', notes=''):
    item = BranchEntryItem.objects.select_for_update().select_related('entry').get(pk=item_id)
    remaining = item.remaining_quantity

    if amount is None or amount < 1 or amount > remaining:
        raise DispatchError(f"Quantity to dispatch must be between 1 and {remaining}.", field='amount')
    if destination_type == 'customer':
        if not (customer_name or '').strip() or not (destination_governorate or '').strip():
            raise DispatchError('Recipient name and destination governorate are required.', field='customer_name')
    elif destination_type == 'branch':
        if not (target_branch_name or '').strip():
            raise DispatchError('Target branch name is required.', field='target_branch_name')
    else:
        raise DispatchError(f"Unknown destination type '{destination_type}'.", field='destination_type')

    item.dispatched_quantity += amount
    item.refresh_item_status()
    item.save(update_fields=['dispatched_quantity', 'item_status'])

    record = DispatchRecord.objects.create(
        item=item,
        dispatched_amount=amount,
        destination_type=destination_type,
        customer_name=customer_name.strip() if destination_type == 'customer' else '',
        customer_phone=(customer_phone or '').strip() if destination_type == 'customer' else '',
        destination_governorate=destination_governorate.strip() if destination_type == 'customer' else '',
        target_branch_name=target_branch_name.strip() if destination_type == 'branch' else '',
        notes=notes or '',
        recorded_by=user,
    )
    logger.info(f"Dispatched {amount} of item {item.pk} ({item.entry.bol_number}) to {destination_type}")
    return item, record


@transaction.atomic
def bulk_dispatch(entry_ids, vehicle, destination_cities, user=None, notes='', expenses=None):
    """
    Dispatch the full remaining quantity of every line of the selected
    entries to one new in-transit trip. Returns (trip, dispatched line count).
    """
    if vehicle is None:
        raise DispatchError('Select a vehicle.', field='vehicle')
    cities = parse_cities(destination_cities)
    if not cities:
        raise DispatchError('Enter at least one destination city.', field='destination_cities')

    items = list(
        BranchEntryItem.objects.select_for_update()
        .select_related('entry')
        .filter(entry_id__in=entry_ids)
        .order_by('entry_id', 'order_index')
    )
    dispatchable = [item for item in items if item.remaining_quantity > 0]
    if not dispatchable:
        raise DispatchError('No items with a remaining quantity in the selected entries.')

    cities_text = ', '.join(cities)
    trip_fields = {field: value for field, value in (expenses or {}).items() if field in TRIP_EXPENSE_FIELDS}
    trip = Trip.objects.create(
        trip_name=f"Bulk dispatch {vehicle.vehicle_number} - {cities_text}",
        source='bulk_dispatch',
        vehicle=vehicle,
        vehicle_number=vehicle.vehicle_number,
        owner_name=vehicle.owner_name,
        destination=cities_text,
        destination_cities=cities,
        status=IN_TRANSIT,
        notes=notes or '',
        created_by=user,
        **trip_fields
    )

    for item in dispatchable:
        amount = item.remaining_quantity
        item.dispatched_quantity += amount
        item.refresh_item_status()
        item.assigned_trip = trip
        item.save(update_fields=['dispatched_quantity', 'item_status', 'assigned_trip'])

        DispatchRecord.objects.create(
            item=item,
            dispatched_amount=amount,
            destination_type='bulk_dispatch_trip',
            trip=trip,
            destination_cities=cities_text,
            notes=f"Bulk dispatch to {cities_text}. {notes or ''}".strip(),
            recorded_by=user,
        )
        TripDispatchItem.objects.create(
            trip=trip,
            source_item=item,
            bol_number=item.entry.bol_number,
            order_index=item.order_index,
            item_description=item.item_description,
            quantity=amount,
            item_value=item.item_value,
            item_currency=item.item_currency,
            recipient_name=item.recipient_name,
            recipient_phone=item.recipient_phone,
            destination_governorate=item.destination_governorate,
        )

    logger.info(f"Bulk dispatch trip {trip.pk}: {len(dispatchable)} items on {vehicle.vehicle_number} to {cities_text}")
    return trip, len(dispatchable)
