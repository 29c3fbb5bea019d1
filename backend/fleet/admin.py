from django.contrib import admin
from .models import Vehicle, Driver


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ['vehicle_number', 'vehicle_type', 'owner_name', 'capacity', 'status']
    list_filter = ['status', 'vehicle_type']
    search_fields = ['vehicle_number', 'owner_name', 'owner_phone']


@admin.register(Driver)
class DriverAdmin(admin.ModelAdmin):
    list_display = ['driver_name', 'driver_phone', 'location', 'status']
    list_filter = ['status']
    search_fields = ['driver_name', 'driver_phone', 'location']
