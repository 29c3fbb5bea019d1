import re
from decimal import Decimal

from django.db import models
from django.utils import timezone

from backend.core.currency import CURRENCY_CHOICES
from backend.core.models import User
from backend.fleet.models import Vehicle
from backend.locations.models import Branch
from backend.trips.models import Trip


def generate_bol_number(year=None):
    """BOL-{year}-{NNN}: one more than the highest number issued this year"""
    year = year or timezone.now().year
    prefix = f"BOL-{year}-"
    max_number = 0
    pattern = re.compile(rf"^BOL-{year}-(\d+)$")
    for bol_number in BranchEntry.objects.filter(bol_number__startswith=prefix).values_list('bol_number', flat=True):
        match = pattern.match(bol_number)
        if match:
            max_number = max(max_number, int(match.group(1)))
    return f"{prefix}{str(max_number + 1).zfill(3)}"


class BranchEntry(models.Model):
    """A bill of lading recording goods arriving at or leaving a branch"""
    ENTRY_TYPE_CHOICES = [
        ('incoming', 'Incoming'),
        ('outgoing', 'Outgoing'),
    ]

    STATUS_CHOICES = [
        ('open', 'Open'),
        ('linked', 'Linked To Vehicle'),
    ]

    PAYMENT_METHOD_CHOICES = [
        ('prepaid', 'Prepaid'),
        ('collect', 'Collect On Delivery'),
    ]

    bol_number = models.CharField(max_length=30, unique=True)
    entry_type = models.CharField(max_length=10, choices=ENTRY_TYPE_CHOICES, default='incoming', db_index=True)
    branch = models.ForeignKey(Branch, on_delete=models.PROTECT, null=True, blank=True, related_name='entries')
    branch_name = models.CharField(max_length=200, blank=True)
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='open')

    # Filled in when the BOL is linked to a vehicle
    vehicle = models.ForeignKey(Vehicle, on_delete=models.SET_NULL, null=True, blank=True, related_name='branch_entries')
    vehicle_name = models.CharField(max_length=100, blank=True)
    sender_name = models.CharField(max_length=200, blank=True)
    converted_value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    converted_value_currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    percentage_share = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    vehicle_rental_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    additional_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    additional_fee_currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    additional_fee_payment_method = models.CharField(max_length=10, choices=PAYMENT_METHOD_CHOICES, default='prepaid')
    custom_fees = models.JSONField(default=list, blank=True)
    link_notes = models.TextField(blank=True)
    linked_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='branch_entries')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.bol_number

    class Meta:
        db_table = 'branch_entries'
        ordering = ['-created_at']
        verbose_name_plural = 'Branch entries'

    def save(self, *args, **kwargs):
        if not self.bol_number:
            self.bol_number = generate_bol_number()
        if self.branch_id and not self.branch_name:
            self.branch_name = self.branch.name
        super().save(*args, **kwargs)

    @property
    def remaining_quantity(self):
        return sum(item.remaining_quantity for item in self.items.all())

    @property
    def has_dispatched_items(self):
        return any(item.dispatched_quantity > 0 for item in self.items.all())


class BranchEntryItem(models.Model):
    """One line of a branch entry; dispatched out in one or more steps"""
    ITEM_STATUS_CHOICES = [
        ('received', 'Received'),
        ('partially_dispatched', 'Partially Dispatched'),
        ('fully_dispatched', 'Fully Dispatched'),
    ]

    entry = models.ForeignKey(BranchEntry, on_delete=models.CASCADE, related_name='items')
    order_index = models.PositiveIntegerField(default=0)
    sending_branch_reference = models.CharField(max_length=100, blank=True)
    item_description = models.CharField(max_length=255)
    item_quantity = models.PositiveIntegerField(default=1)
    dispatched_quantity = models.PositiveIntegerField(default=0)
    item_weight = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    item_value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    item_currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    recipient_name = models.CharField(max_length=200, blank=True)
    recipient_phone = models.CharField(max_length=30, blank=True)
    destination_governorate = models.CharField(max_length=100, blank=True)
    item_notes = models.TextField(blank=True)
    item_status = models.CharField(max_length=25, choices=ITEM_STATUS_CHOICES, default='received')
    assigned_trip = models.ForeignKey(Trip, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_branch_items')

    def __str__(self):
        return f"{self.entry.bol_number} #{self.order_index}: {self.item_description}"

    class Meta:
        db_table = 'branch_entry_items'
        ordering = ['entry', 'order_index']

    @property
    def remaining_quantity(self):
        return max(self.item_quantity - self.dispatched_quantity, 0)

    def refresh_item_status(self):
        if self.dispatched_quantity <= 0:
            self.item_status = 'received'
        elif self.dispatched_quantity >= self.item_quantity:
            self.item_status = 'fully_dispatched'
        else:
            self.item_status = 'partially_dispatched'
        return self.item_status


class DispatchRecord(models.Model):
    """History of quantities taken out of a branch entry item"""
    DESTINATION_TYPE_CHOICES = [
        ('customer', 'Customer'),
        ('branch', 'Branch'),
        ('bulk_dispatch_trip', 'Bulk Dispatch Trip'),
    ]

    item = models.ForeignKey(BranchEntryItem, on_delete=models.CASCADE, related_name='dispatch_history')
    dispatched_amount = models.PositiveIntegerField()
    destination_type = models.CharField(max_length=20, choices=DESTINATION_TYPE_CHOICES)
    customer_name = models.CharField(max_length=200, blank=True)
    customer_phone = models.CharField(max_length=30, blank=True)
    destination_governorate = models.CharField(max_length=100, blank=True)
    target_branch_name = models.CharField(max_length=200, blank=True)
    trip = models.ForeignKey(Trip, on_delete=models.SET_NULL, null=True, blank=True, related_name='dispatch_records')
    destination_cities = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    recorded_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='dispatch_records')
    dispatched_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.item} -> {self.destination_type} ({self.dispatched_amount})"

    class Meta:
        db_table = 'dispatch_records'
        ordering = ['dispatched_at', 'id']


class TripDispatchItem(models.Model):
    """A branch entry item carried by a bulk-dispatch trip"""
    trip = models.ForeignKey(Trip, on_delete=models.CASCADE, related_name='dispatched_items')
    source_item = models.ForeignKey(BranchEntryItem, on_delete=models.SET_NULL, null=True, blank=True, related_name='trip_items')
    bol_number = models.CharField(max_length=30)
    order_index = models.PositiveIntegerField(default=0)
    item_description = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    item_value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    item_currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    recipient_name = models.CharField(max_length=200, blank=True)
    recipient_phone = models.CharField(max_length=30, blank=True)
    destination_governorate = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.trip} - {self.bol_number}: {self.item_description}"

    class Meta:
        db_table = 'trip_dispatch_items'
        ordering = ['trip', 'id']
