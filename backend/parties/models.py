from django.db import models


class Customer(models.Model):
    """Sender or recipient of shipments; the counterparty of debts and payments"""
    TYPE_CHOICES = [
        ('sender', 'Sender'),
        ('receiver', 'Receiver'),
        ('both', 'Sender and Receiver'),
    ]
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
    ]

    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=30, blank=True, db_index=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    customer_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='both')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    notes = models.TextField(blank=True)
    extracted_from_shipments = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.phone})" if self.phone else self.name

    class Meta:
        db_table = 'customers'
        ordering = ['name']
