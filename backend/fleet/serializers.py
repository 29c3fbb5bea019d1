from rest_framework import serializers
from .models import Vehicle, Driver


class VehicleSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vehicle
        fields = ['id', 'vehicle_number', 'vehicle_type', 'owner_name', 'owner_phone', 'capacity',
                  'status', 'notes', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class DriverSerializer(serializers.ModelSerializer):
    total_trips = serializers.IntegerField(read_only=True, required=False)
    total_shipments = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Driver
        fields = ['id', 'driver_name', 'driver_phone', 'location', 'status', 'notes',
                  'total_trips', 'total_shipments', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
