from decimal import Decimal
from rest_framework import serializers
from backend.core.currency import totals_to_strings
from .models import Shipment, ShipmentStatusUpdate
from .status import (
    SHIPMENT_STATUS_CHOICES, TRIP_STATUS_CHOICES, SHIPMENT_STATUS_LABELS,
    normalize_shipment_status, normalize_trip_status
)


class ShipmentStatusField(serializers.ChoiceField):
    """Status field accepting codes, Arabic labels and legacy spellings"""

    def __init__(self, **kwargs):
        super().__init__(choices=SHIPMENT_STATUS_CHOICES, **kwargs)

    def to_internal_value(self, data):
        code = normalize_shipment_status(data)
        if code is None:
            self.fail('invalid_choice', input=data)
        return code


class TripStatusField(serializers.ChoiceField):
    def __init__(self, **kwargs):
        super().__init__(choices=TRIP_STATUS_CHOICES, **kwargs)

    def to_internal_value(self, data):
        code = normalize_trip_status(data)
        if code is None:
            self.fail('invalid_choice', input=data)
        return code


class ShipmentStatusUpdateSerializer(serializers.ModelSerializer):
    status_label = serializers.SerializerMethodField()
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)

    class Meta:
        model = ShipmentStatusUpdate
        fields = ['id', 'status', 'status_label', 'location', 'notes', 'created_by_username', 'created_at']

    def get_status_label(self, obj):
        return SHIPMENT_STATUS_LABELS.get(obj.status, obj.status)


class ShipmentSerializer(serializers.ModelSerializer):
    status = ShipmentStatusField(required=False)
    status_label = serializers.CharField(read_only=True)
    vehicle_number = serializers.CharField(source='vehicle.vehicle_number', read_only=True)
    trip_name = serializers.CharField(source='trip.trip_name', read_only=True)
    station_name = serializers.CharField(source='station.station_name', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)
    collectible_totals = serializers.SerializerMethodField()

    class Meta:
        model = Shipment
        fields = [
            'id', 'shipment_number',
            'recipient_name', 'recipient_phone', 'sender_name', 'sender_phone',
            'governorate', 'parcel_count', 'parcel_type', 'courier_name', 'weight', 'notes',
            'goods_value', 'goods_currency',
            'shipping_fee', 'shipping_fee_currency', 'shipping_fee_payment_method',
            'hwala_fee', 'hwala_fee_currency', 'hwala_fee_payment_method',
            'internal_transfer_fee', 'internal_transfer_fee_currency',
            'custom_fee1_name', 'custom_fee1_amount', 'custom_fee1_currency',
            'custom_fee2_name', 'custom_fee2_amount', 'custom_fee2_currency',
            'status', 'status_label', 'vehicle', 'vehicle_number', 'trip', 'trip_name',
            'station', 'station_name', 'collectible_totals',
            'created_by', 'created_by_username', 'created_at', 'updated_at'
        ]
        read_only_fields = ['shipment_number', 'trip', 'station', 'created_by', 'created_at', 'updated_at']

    def get_collectible_totals(self, obj):
        return totals_to_strings(obj.collectible_totals())

    def validate(self, attrs):
        money_fields = ['goods_value', 'shipping_fee', 'hwala_fee', 'internal_transfer_fee',
                        'custom_fee1_amount', 'custom_fee2_amount', 'weight']
        errors = {}
        for field in money_fields:
            value = attrs.get(field)
            if value is not None and value < Decimal('0'):
                errors[field] = 'Must not be negative.'
        if errors:
            raise serializers.ValidationError(errors)
        return attrs


class ShipmentStatusChangeSerializer(serializers.Serializer):
    status = ShipmentStatusField()
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    location = serializers.CharField(required=False, allow_blank=True, default='')


class ShipmentBulkStatusSerializer(serializers.Serializer):
    shipment_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    status = ShipmentStatusField()
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class ShipmentTrackingSerializer(serializers.ModelSerializer):
    """Public tracking view: no phone numbers or money"""
    status_label = serializers.CharField(read_only=True)
    history = ShipmentStatusUpdateSerializer(source='status_updates', many=True, read_only=True)

    class Meta:
        model = Shipment
        fields = ['shipment_number', 'recipient_name', 'governorate', 'parcel_count', 'status',
                  'status_label', 'created_at', 'updated_at', 'history']
