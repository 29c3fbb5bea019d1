"""
Status vocabulary for shipments and trips.

Statuses are stored as short codes; the Arabic labels are what the office
staff see. Input may arrive as a code, as an Arabic label or as one of the
historical English spellings, so everything goes through normalize_*().
"""

RECEIVED = 'received'
PENDING = 'pending'
IN_TRANSIT = 'in_transit'
ARRIVED = 'arrived'
DELIVERED = 'delivered'
RETURNED = 'returned'

SHIPMENT_STATUS_CHOICES = [
    (RECEIVED, 'تم الاستلام من المرسل'),
    (PENDING, 'معلق'),
    (IN_TRANSIT, 'قيد النقل'),
    (ARRIVED, 'وصلت الوجهة'),
    (DELIVERED, 'تم التسليم'),
    (RETURNED, 'مرتجع'),
]

TRIP_STATUS_CHOICES = [
    (PENDING, 'قيد الانتظار'),
    (IN_TRANSIT, 'قيد النقل'),
    (DELIVERED, 'تم التسليم'),
]

SHIPMENT_STATUS_LABELS = dict(SHIPMENT_STATUS_CHOICES)
TRIP_STATUS_LABELS = dict(TRIP_STATUS_CHOICES)

# Trip status -> status forced on every shipment of the trip
TRIP_TO_SHIPMENT_STATUS = {
    PENDING: PENDING,
    IN_TRANSIT: IN_TRANSIT,
    DELIVERED: DELIVERED,
}

_ALIASES = {
    'in-transit': IN_TRANSIT,
    'in transit': IN_TRANSIT,
    'intransit': IN_TRANSIT,
    'planned': PENDING,
    'waiting': PENDING,
    'قيد الانتظار': PENDING,
}


def _normalize(value, choices):
    if value is None:
        return None
    text = str(value).strip()
    codes = {code for code, _ in choices}
    if text in codes:
        return text
    for code, label in choices:
        if text == label:
            return code
    alias = _ALIASES.get(text.lower(), _ALIASES.get(text))
    if alias in codes:
        return alias
    lowered = text.lower().replace('-', '_').replace(' ', '_')
    return lowered if lowered in codes else None


def normalize_shipment_status(value):
    """Return the shipment status code for value, or None if unknown"""
    return _normalize(value, SHIPMENT_STATUS_CHOICES)


def normalize_trip_status(value):
    """Return the trip status code for value, or None if unknown"""
    return _normalize(value, TRIP_STATUS_CHOICES)
