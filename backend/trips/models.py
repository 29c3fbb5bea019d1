from decimal import Decimal

from django.db import models

from backend.core.currency import (
    CURRENCY_CHOICES, add_amount, merge_totals, subtract_totals, sum_by_currency
)
from backend.core.models import User
from backend.fleet.models import Vehicle, Driver
from backend.shipments.status import TRIP_STATUS_CHOICES, PENDING


class Trip(models.Model):
    """A vehicle dispatch grouping shipments and/or branch entry items"""
    SOURCE_CHOICES = [
        ('stations', 'Trip With Stations'),
        ('manifest', 'Manifest'),
        ('bulk_dispatch', 'Branch Bulk Dispatch'),
    ]

    trip_name = models.CharField(max_length=200)
    source = models.CharField(max_length=20, choices=SOURCE_CHOICES, default='stations')
    vehicle = models.ForeignKey(Vehicle, on_delete=models.SET_NULL, null=True, blank=True, related_name='trips')
    vehicle_number = models.CharField(max_length=50, blank=True)
    destination = models.CharField(max_length=255, blank=True)
    destination_cities = models.JSONField(default=list, blank=True)
    owner_name = models.CharField(max_length=200, blank=True)
    departure_date = models.DateField(null=True, blank=True)
    departure_time = models.TimeField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=TRIP_STATUS_CHOICES, default=PENDING, db_index=True)
    notes = models.TextField(blank=True)

    office_expenses = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    office_expenses_currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    car_expenses = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    car_expenses_currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    vehicle_rental = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    expense1_name = models.CharField(max_length=200, blank=True)
    expense1_value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    expense1_currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    expense2_name = models.CharField(max_length=200, blank=True)
    expense2_value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    expense2_currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')

    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='trips_created')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.trip_name

    class Meta:
        db_table = 'trips'
        ordering = ['-created_at']

    def expense_totals(self):
        """Office, car, rental (always USD) and the two named expenses, per currency"""
        return sum_by_currency([
            (self.office_expenses_currency, self.office_expenses),
            (self.car_expenses_currency, self.car_expenses),
            ('USD', self.vehicle_rental),
            (self.expense1_currency, self.expense1_value),
            (self.expense2_currency, self.expense2_value),
        ])

    def collection_totals(self):
        """Amounts collected on delivery plus values of dispatched branch items"""
        totals = {}
        for shipment in self.shipments.all():
            totals = merge_totals(totals, shipment.collectible_totals())
        for item in self.dispatched_items.all():
            add_amount(totals, item.item_currency, item.item_value)
        return totals

    def profit_totals(self):
        return subtract_totals(self.collection_totals(), self.expense_totals())


class TripStation(models.Model):
    """A stop of a trip handled by one driver who earns a commission on it"""
    trip = models.ForeignKey(Trip, on_delete=models.CASCADE, related_name='stations')
    order_index = models.PositiveIntegerField(default=0)
    station_name = models.CharField(max_length=200)
    driver = models.ForeignKey(Driver, on_delete=models.SET_NULL, null=True, blank=True, related_name='stations')
    driver_name = models.CharField(max_length=200, blank=True)
    commission_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.trip.trip_name} - {self.station_name}"

    @property
    def commission_key(self):
        """Stable public identifier of the station's commission"""
        return f"{self.trip_id}-{self.station_name}-{self.order_index}"

    class Meta:
        db_table = 'trip_stations'
        ordering = ['trip', 'order_index']
