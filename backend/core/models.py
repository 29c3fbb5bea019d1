from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Back-office user. The role is assigned lazily on first login."""
    ROLE_CHOICES = [
        ('admin', 'Admin'),
        ('employee', 'Employee'),
        ('customer', 'Customer'),
    ]

    phone = models.CharField(max_length=20, blank=True, null=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, blank=True, default='')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'

    def ensure_role(self):
        """Give a user without a role its default one and persist it"""
        if not self.role:
            self.role = 'admin' if self.is_superuser else 'customer'
            self.save(update_fields=['role'])
        return self.role

    @property
    def is_admin_role(self):
        return self.is_superuser or self.role == 'admin'

    @property
    def is_staff_member(self):
        return self.is_admin_role or self.role == 'employee'


class Setting(models.Model):
    """System settings"""
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.key

    class Meta:
        db_table = 'settings'


class Counter(models.Model):
    """Named monotonically increasing sequence (transaction and transfer references)"""
    name = models.CharField(max_length=50, unique=True)
    value = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name}={self.value}"

    class Meta:
        db_table = 'counters'


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('role_change', 'Role Changed'),
        ('shipment_create', 'Shipment Created'),
        ('shipment_status', 'Shipment Status Changed'),
        ('trip_create', 'Trip Created'),
        ('trip_status', 'Trip Status Changed'),
        ('trip_delete', 'Trip Deleted'),
        ('manifest_create', 'Manifest Created'),
        ('item_dispatch', 'Item Dispatched'),
        ('bulk_dispatch', 'Bulk Dispatch'),
        ('bol_link', 'BOL Linked To Vehicle'),
        ('transaction_add', 'Transaction Added'),
        ('transfer_add', 'Transfer Added'),
        ('transfer_status', 'Transfer Status Changed'),
        ('commission_status', 'Commission Status Changed'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., shipment number, BOL number)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_5a1e0c_idx'),
            models.Index(fields=['action'], name='audit_logs_action_8f3b2d_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_4c7e91_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_object__b2d6f4_idx'),
        ]
