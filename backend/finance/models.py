from django.db import models
from django.utils import timezone

from backend.core.currency import CURRENCY_CHOICES
from backend.core.models import User
from backend.core.utils import next_reference
from backend.locations.models import Branch
from backend.parties.models import Customer
from backend.trips.models import TripStation


def _today():
    return timezone.localdate()


def _now_time():
    return timezone.localtime().time().replace(microsecond=0)


class FinancialTransaction(models.Model):
    """A line of the daily journal"""
    TRANSACTION_TYPE_CHOICES = [
        ('debt', 'Debt'),
        ('payment', 'Payment'),
        ('income', 'Income'),
        ('expense', 'Expense'),
    ]

    STATUS_CHOICES = [
        ('completed', 'Completed'),
        ('pending', 'Pending'),
        ('cancelled', 'Cancelled'),
    ]

    reference = models.CharField(max_length=20, unique=True, editable=False)
    transaction_type = models.CharField(max_length=10, choices=TRANSACTION_TYPE_CHOICES, db_index=True)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    description = models.TextField()
    customer = models.ForeignKey(Customer, on_delete=models.SET_NULL, null=True, blank=True, related_name='transactions')
    customer_name = models.CharField(max_length=200, blank=True)
    customer_phone = models.CharField(max_length=30, blank=True)
    customer_role = models.CharField(max_length=20, blank=True)
    branch = models.ForeignKey(Branch, on_delete=models.SET_NULL, null=True, blank=True, related_name='transactions')
    branch_name = models.CharField(max_length=200, blank=True)
    date = models.DateField(default=_today, db_index=True)
    time = models.TimeField(default=_now_time)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='completed')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='transactions_created')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.reference} {self.transaction_type} {self.amount} {self.currency}"

    class Meta:
        db_table = 'financial_transactions'
        ordering = ['-date', '-time', '-id']

    def save(self, *args, **kwargs):
        if not self.reference:
            self.reference = next_reference('transactions', 'SH')
        if self.customer_id:
            self.customer_name = self.customer_name or self.customer.name
            self.customer_phone = self.customer_phone or self.customer.phone
            self.customer_role = self.customer_role or self.customer.customer_type
        if self.branch_id and not self.branch_name:
            self.branch_name = self.branch.name
        super().save(*args, **kwargs)


class BranchTransfer(models.Model):
    """Money moved between two branches"""
    TRANSFER_TYPE_CHOICES = [
        ('send', 'Send'),
        ('receive', 'Receive'),
        ('confirm', 'Confirm'),
    ]

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('confirmed', 'Confirmed'),
        ('completed', 'Completed'),
    ]

    transfer_number = models.CharField(max_length=20, unique=True, editable=False)
    from_branch = models.ForeignKey(Branch, on_delete=models.PROTECT, related_name='transfers_sent')
    from_branch_name = models.CharField(max_length=200, blank=True)
    to_branch = models.ForeignKey(Branch, on_delete=models.PROTECT, related_name='transfers_received')
    to_branch_name = models.CharField(max_length=200, blank=True)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    transfer_type = models.CharField(max_length=10, choices=TRANSFER_TYPE_CHOICES, default='send')
    description = models.TextField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='pending', db_index=True)
    date = models.DateField(default=_today, db_index=True)
    time = models.TimeField(default=_now_time)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='transfers_created')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.transfer_number}: {self.from_branch_name} -> {self.to_branch_name}"

    class Meta:
        db_table = 'branch_transfers'
        ordering = ['-date', '-time', '-id']

    def save(self, *args, **kwargs):
        if not self.transfer_number:
            self.transfer_number = next_reference('transfers', 'TR')
        self.from_branch_name = self.from_branch.name
        self.to_branch_name = self.to_branch.name
        super().save(*args, **kwargs)


class CommissionPayment(models.Model):
    """Saved payment state of a driver's commission on one trip station"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('paid', 'Paid'),
    ]

    station = models.OneToOneField(TripStation, on_delete=models.CASCADE, related_name='commission_payment')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='pending')
    payment_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    updated_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='commission_payments')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.station.commission_key}: {self.status}"

    class Meta:
        db_table = 'commission_payments'
        ordering = ['-updated_at']
