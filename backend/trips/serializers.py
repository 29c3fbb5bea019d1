from decimal import Decimal
from rest_framework import serializers
from backend.core.currency import subtract_totals, totals_to_strings
from backend.fleet.models import Driver, Vehicle
from backend.shipments.serializers import TripStatusField
from backend.shipments.status import TRIP_STATUS_LABELS
from .models import Trip, TripStation
from .services import create_trip_with_stations


class TripStationSerializer(serializers.ModelSerializer):
    commission_key = serializers.CharField(read_only=True)
    shipments_count = serializers.SerializerMethodField()

    class Meta:
        model = TripStation
        fields = ['id', 'order_index', 'station_name', 'driver', 'driver_name', 'commission_percentage',
                  'notes', 'commission_key', 'shipments_count', 'created_at']
        read_only_fields = ['order_index', 'driver_name', 'created_at']

    def get_shipments_count(self, obj):
        return obj.shipments.count()


class TripStationInputSerializer(serializers.Serializer):
    """One station of the create-trip form"""
    station_name = serializers.CharField(max_length=200)
    driver = serializers.PrimaryKeyRelatedField(queryset=Driver.objects.all())
    commission_percentage = serializers.DecimalField(max_digits=5, decimal_places=2)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    shipment_ids = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)

    def validate_station_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Station name is required.')
        return value.strip()

    def validate_commission_percentage(self, value):
        if value <= Decimal('0'):
            raise serializers.ValidationError('Commission percentage must be greater than zero.')
        return value


class TripListSerializer(serializers.ModelSerializer):
    status = TripStatusField(required=False)
    status_label = serializers.SerializerMethodField()
    shipments_count = serializers.IntegerField(read_only=True, required=False)
    stations_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Trip
        fields = ['id', 'trip_name', 'source', 'vehicle', 'vehicle_number', 'destination', 'owner_name',
                  'departure_date', 'departure_time', 'status', 'status_label',
                  'shipments_count', 'stations_count', 'created_at']

    def get_status_label(self, obj):
        return TRIP_STATUS_LABELS.get(obj.status, obj.status)


class TripSerializer(serializers.ModelSerializer):
    status = TripStatusField(required=False)
    status_label = serializers.SerializerMethodField()
    vehicle = serializers.PrimaryKeyRelatedField(queryset=Vehicle.objects.all(), required=False, allow_null=True)
    stations = TripStationSerializer(many=True, read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)
    totals = serializers.SerializerMethodField()

    class Meta:
        model = Trip
        fields = [
            'id', 'trip_name', 'source', 'vehicle', 'vehicle_number', 'destination', 'destination_cities',
            'owner_name', 'departure_date', 'departure_time', 'status', 'status_label', 'notes',
            'office_expenses', 'office_expenses_currency', 'car_expenses', 'car_expenses_currency',
            'vehicle_rental',
            'expense1_name', 'expense1_value', 'expense1_currency',
            'expense2_name', 'expense2_value', 'expense2_currency',
            'stations', 'totals', 'created_by', 'created_by_username', 'created_at', 'updated_at'
        ]
        read_only_fields = ['source', 'vehicle_number', 'created_by', 'created_at', 'updated_at']

    def get_status_label(self, obj):
        return TRIP_STATUS_LABELS.get(obj.status, obj.status)

    def get_totals(self, obj):
        collections = obj.collection_totals()
        expenses = obj.expense_totals()
        return {
            'collections': totals_to_strings(collections),
            'expenses': totals_to_strings(expenses),
            'profit': totals_to_strings(subtract_totals(collections, expenses)),
        }

    def validate(self, attrs):
        errors = {}
        expense_fields = ['office_expenses', 'car_expenses', 'vehicle_rental', 'expense1_value', 'expense2_value']
        for field in expense_fields:
            value = attrs.get(field)
            if value is not None and value < Decimal('0'):
                errors[field] = 'Must not be negative.'

        if self.instance is None:
            for field, message in [
                ('trip_name', 'Trip name is required.'),
                ('vehicle', 'Select a vehicle.'),
                ('destination', 'Destination is required.'),
                ('owner_name', 'Owner name is required.'),
            ]:
                value = attrs.get(field)
                if not value or (isinstance(value, str) and not value.strip()):
                    errors[field] = message

            stations = TripStationInputSerializer(data=self.context.get('stations_data') or [], many=True)
            if not stations.is_valid():
                errors['stations'] = stations.errors
            elif not stations.validated_data:
                errors['stations'] = 'Add at least one station.'
            else:
                self._stations = stations.validated_data

        if errors:
            raise serializers.ValidationError(errors)
        return attrs

    def create(self, validated_data):
        user = validated_data.pop('created_by', None)
        return create_trip_with_stations(validated_data, self._stations, user=user)

    def update(self, instance, validated_data):
        vehicle = validated_data.get('vehicle', instance.vehicle)
        instance = super().update(instance, validated_data)
        if 'vehicle' in validated_data:
            instance.vehicle_number = vehicle.vehicle_number if vehicle else ''
            instance.save(update_fields=['vehicle_number'])
            instance.shipments.update(vehicle=vehicle)
        return instance


class TripStatusSerializer(serializers.Serializer):
    status = TripStatusField()


class TripShipmentsSerializer(serializers.Serializer):
    """Shipment ids to add to or remove from a trip"""
    shipment_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    station = serializers.IntegerField(required=False, allow_null=True)


class ManifestSerializer(serializers.Serializer):
    vehicle = serializers.PrimaryKeyRelatedField(queryset=Vehicle.objects.all())
    shipment_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    trip_name = serializers.CharField(required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')
