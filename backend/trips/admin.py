from django.contrib import admin
from .models import Trip, TripStation


class TripStationInline(admin.TabularInline):
    model = TripStation
    extra = 0


@admin.register(Trip)
class TripAdmin(admin.ModelAdmin):
    list_display = ['trip_name', 'source', 'vehicle_number', 'destination', 'status', 'departure_date', 'created_at']
    list_filter = ['status', 'source', 'departure_date']
    search_fields = ['trip_name', 'vehicle_number', 'destination', 'owner_name']
    inlines = [TripStationInline]
