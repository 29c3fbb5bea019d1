"""
Status transitions for shipments. Every change goes through apply_status()
so the tracking history stays complete.
"""
import logging

from .models import ShipmentStatusUpdate

logger = logging.getLogger('backend.shipments')


def record_status(shipment, status, user=None, notes='', location=''):
    return ShipmentStatusUpdate.objects.create(
        shipment=shipment,
        status=status,
        location=location or '',
        notes=notes or '',
        created_by=user if user and user.is_authenticated else None,
    )


def apply_status(shipment, status, user=None, notes='', location='', **fields):
    """
    Set the shipment status (and any extra model fields) and save.
    A history row is written only when the status actually changes.
    Returns True when the status changed.
    """
    changed = shipment.status != status
    update_fields = ['status', 'updated_at']
    for name, value in fields.items():
        setattr(shipment, name, value)
        update_fields.append(name)
    shipment.status = status
    shipment.save(update_fields=update_fields)
    if changed:
        record_status(shipment, status, user=user, notes=notes, location=location)
    return changed


def apply_status_to_all(shipments, status, user=None, notes='', **fields):
    """apply_status() over an iterable; returns the number of status changes"""
    changed = 0
    for shipment in shipments:
        if apply_status(shipment, status, user=user, notes=notes, **fields):
            changed += 1
    logger.info(f"Status '{status}' applied to shipments ({changed} changed)")
    return changed
