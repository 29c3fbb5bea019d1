import logging

from django.db import transaction

from .models import Customer

logger = logging.getLogger('backend.parties')

SYNC_NOTE = 'مستخرج من الشحنات'


def collect_shipment_parties(shipments):
    """
    Return {(name, phone): customer_type} for every sender and recipient
    appearing in the given shipments. A pair seen in both roles is 'both'.
    Rows missing either a name or a phone are ignored.
    """
    parties = {}

    def remember(name, phone, role):
        name = (name or '').strip()
        phone = (phone or '').strip()
        if not name or not phone:
            return
        key = (name, phone)
        previous = parties.get(key)
        parties[key] = role if previous in (None, role) else 'both'

    for shipment in shipments:
        remember(shipment.sender_name, shipment.sender_phone, 'sender')
        remember(shipment.recipient_name, shipment.recipient_phone, 'receiver')
    return parties


@transaction.atomic
def sync_customers_from_shipments(shipments):
    """Create a Customer for every shipment party that has none yet"""
    parties = collect_shipment_parties(shipments)
    existing = set(Customer.objects.values_list('name', 'phone'))

    created = []
    for (name, phone), customer_type in sorted(parties.items()):
        if (name, phone) in existing:
            continue
        created.append(Customer.objects.create(
            name=name,
            phone=phone,
            customer_type=customer_type,
            notes=SYNC_NOTE,
            extracted_from_shipments=True,
        ))
    logger.info(f"Synced customers from shipments: {len(created)} created, {len(parties) - len(created)} already present")
    return created
