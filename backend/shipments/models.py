import uuid
from decimal import Decimal

from django.db import models

from backend.core.currency import CURRENCY_CHOICES, sum_by_currency
from backend.core.models import User
from backend.fleet.models import Vehicle
from .status import SHIPMENT_STATUS_CHOICES, SHIPMENT_STATUS_LABELS, RECEIVED


def generate_shipment_number():
    """SHP- followed by eight upper-case hex characters"""
    shipment_number = f"SHP-{str(uuid.uuid4())[:8].upper()}"
    while Shipment.objects.filter(shipment_number=shipment_number).exists():
        shipment_number = f"SHP-{str(uuid.uuid4())[:8].upper()}"
    return shipment_number


class Shipment(models.Model):
    """A single parcel record tracked end-to-end"""
    PAYMENT_METHOD_CHOICES = [
        ('collect', 'Collect On Delivery'),
        ('prepaid', 'Prepaid'),
    ]

    shipment_number = models.CharField(max_length=20, unique=True, editable=False)

    recipient_name = models.CharField(max_length=200)
    recipient_phone = models.CharField(max_length=30, blank=True, db_index=True)
    sender_name = models.CharField(max_length=200, blank=True)
    sender_phone = models.CharField(max_length=30, blank=True, db_index=True)
    governorate = models.CharField(max_length=100, blank=True)
    parcel_count = models.PositiveIntegerField(default=1)
    parcel_type = models.CharField(max_length=100, blank=True)
    courier_name = models.CharField(max_length=200, blank=True)
    weight = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    notes = models.TextField(blank=True)

    goods_value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    goods_currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    shipping_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    shipping_fee_currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    shipping_fee_payment_method = models.CharField(max_length=10, choices=PAYMENT_METHOD_CHOICES, default='collect')
    hwala_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    hwala_fee_currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    hwala_fee_payment_method = models.CharField(max_length=10, choices=PAYMENT_METHOD_CHOICES, default='collect')
    internal_transfer_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    internal_transfer_fee_currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    custom_fee1_name = models.CharField(max_length=100, blank=True)
    custom_fee1_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    custom_fee1_currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    custom_fee2_name = models.CharField(max_length=100, blank=True)
    custom_fee2_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    custom_fee2_currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')

    status = models.CharField(max_length=20, choices=SHIPMENT_STATUS_CHOICES, default=RECEIVED, db_index=True)
    vehicle = models.ForeignKey(Vehicle, on_delete=models.SET_NULL, null=True, blank=True, related_name='shipments')
    trip = models.ForeignKey('trips.Trip', on_delete=models.SET_NULL, null=True, blank=True, related_name='shipments')
    station = models.ForeignKey('trips.TripStation', on_delete=models.SET_NULL, null=True, blank=True, related_name='shipments')

    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='shipments_created')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.shipment_number

    class Meta:
        db_table = 'shipments'
        ordering = ['-created_at']

    def save(self, *args, **kwargs):
        if not self.shipment_number:
            self.shipment_number = generate_shipment_number()
        super().save(*args, **kwargs)

    @property
    def status_label(self):
        return SHIPMENT_STATUS_LABELS.get(self.status, self.status)

    def collectible_totals(self):
        """
        What the courier collects from the recipient, per currency:
        goods value, shipping and hwala fees when paid on delivery, and
        custom fees that have a name.
        """
        pairs = [(self.goods_currency, self.goods_value)]
        if self.shipping_fee_payment_method == 'collect':
            pairs.append((self.shipping_fee_currency, self.shipping_fee))
        if self.hwala_fee_payment_method == 'collect':
            pairs.append((self.hwala_fee_currency, self.hwala_fee))
        if self.custom_fee1_name.strip():
            pairs.append((self.custom_fee1_currency, self.custom_fee1_amount))
        if self.custom_fee2_name.strip():
            pairs.append((self.custom_fee2_currency, self.custom_fee2_amount))
        return sum_by_currency((currency, amount) for currency, amount in pairs if amount and amount > 0)

    def collected_shipping_fee(self):
        """(currency, amount) of the shipping fee collected on delivery, else None"""
        if self.shipping_fee_payment_method != 'collect' or not self.shipping_fee or self.shipping_fee <= 0:
            return None
        return self.shipping_fee_currency, self.shipping_fee


class ShipmentStatusUpdate(models.Model):
    """One entry of a shipment's tracking history"""
    shipment = models.ForeignKey(Shipment, on_delete=models.CASCADE, related_name='status_updates')
    status = models.CharField(max_length=20, choices=SHIPMENT_STATUS_CHOICES)
    location = models.CharField(max_length=200, blank=True)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='shipment_status_updates')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.shipment.shipment_number}: {self.status}"

    class Meta:
        db_table = 'shipment_status_updates'
        ordering = ['created_at', 'id']
