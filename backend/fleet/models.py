from django.db import models


class Vehicle(models.Model):
    """Car or truck carrying trips"""
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
        ('maintenance', 'Maintenance'),
    ]

    vehicle_number = models.CharField(max_length=50, unique=True)
    vehicle_type = models.CharField(max_length=100, blank=True)
    owner_name = models.CharField(max_length=200, blank=True)
    owner_phone = models.CharField(max_length=30, blank=True)
    capacity = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.vehicle_number

    class Meta:
        db_table = 'vehicles'
        ordering = ['vehicle_number']


class Driver(models.Model):
    """Driver paid a commission per trip station"""
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
    ]

    driver_name = models.CharField(max_length=200)
    driver_phone = models.CharField(max_length=30, blank=True)
    location = models.CharField(max_length=200, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.driver_name

    class Meta:
        db_table = 'drivers'
        ordering = ['driver_name']
