from decimal import Decimal
from rest_framework import serializers
from django.db import transaction
from backend.core.currency import CURRENCY_CHOICES
from backend.fleet.models import Vehicle
from .models import BranchEntry, BranchEntryItem, DispatchRecord, TripDispatchItem


class DispatchRecordSerializer(serializers.ModelSerializer):
    recorded_by_username = serializers.CharField(source='recorded_by.username', read_only=True)
    trip_name = serializers.CharField(source='trip.trip_name', read_only=True)

    class Meta:
        model = DispatchRecord
        fields = ['id', 'dispatched_amount', 'destination_type', 'customer_name', 'customer_phone',
                  'destination_governorate', 'target_branch_name', 'trip', 'trip_name', 'destination_cities',
                  'notes', 'recorded_by_username', 'dispatched_at']


class BranchEntryItemSerializer(serializers.ModelSerializer):
    remaining_quantity = serializers.IntegerField(read_only=True)
    dispatch_history = DispatchRecordSerializer(many=True, read_only=True)

    class Meta:
        model = BranchEntryItem
        fields = ['id', 'order_index', 'sending_branch_reference', 'item_description', 'item_quantity',
                  'dispatched_quantity', 'remaining_quantity', 'item_weight', 'item_value', 'item_currency',
                  'recipient_name', 'recipient_phone', 'destination_governorate', 'item_notes',
                  'item_status', 'assigned_trip', 'dispatch_history']
        read_only_fields = ['order_index', 'dispatched_quantity', 'item_status', 'assigned_trip']

    def validate_item_quantity(self, value):
        if value < 1:
            raise serializers.ValidationError('Quantity must be at least 1.')
        return value

    def validate_item_value(self, value):
        if value < Decimal('0'):
            raise serializers.ValidationError('Must not be negative.')
        return value


class BranchEntrySerializer(serializers.ModelSerializer):
    items = BranchEntryItemSerializer(many=True, read_only=True)
    total_quantity = serializers.SerializerMethodField()
    remaining_quantity = serializers.IntegerField(read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)

    class Meta:
        model = BranchEntry
        fields = [
            'id', 'bol_number', 'entry_type', 'branch', 'branch_name', 'notes', 'status',
            'vehicle', 'vehicle_name', 'sender_name', 'converted_value', 'converted_value_currency',
            'percentage_share', 'vehicle_rental_fee', 'additional_fee', 'additional_fee_currency',
            'additional_fee_payment_method', 'custom_fees', 'link_notes', 'linked_at',
            'items', 'total_quantity', 'remaining_quantity',
            'created_by', 'created_by_username', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'bol_number', 'branch_name', 'status', 'vehicle', 'vehicle_name', 'sender_name',
            'converted_value', 'converted_value_currency', 'percentage_share', 'vehicle_rental_fee',
            'additional_fee', 'additional_fee_currency', 'additional_fee_payment_method', 'custom_fees',
            'link_notes', 'linked_at', 'created_by', 'created_at', 'updated_at'
        ]

    def get_total_quantity(self, obj):
        return sum(item.item_quantity for item in obj.items.all())

    def _validated_items(self, items_data):
        serializer = BranchEntryItemSerializer(data=items_data, many=True)
        if not serializer.is_valid():
            raise serializers.ValidationError({'items': serializer.errors})
        return serializer.validated_data

    def _create_items(self, entry, items):
        for index, item_data in enumerate(items):
            BranchEntryItem.objects.create(entry=entry, order_index=index, **item_data)

    def create(self, validated_data):
        items = self._validated_items(self.context.get('items_data') or [])
        if not items:
            raise serializers.ValidationError({'items': 'Add at least one item.'})
        with transaction.atomic():
            entry = BranchEntry.objects.create(**validated_data)
            self._create_items(entry, items)
        return entry

    def update(self, instance, validated_data):
        items_data = self.context.get('items_data', None)
        with transaction.atomic():
            if 'branch' in validated_data:
                branch = validated_data['branch']
                instance.branch_name = branch.name if branch else ''
            instance = super().update(instance, validated_data)

            if items_data is not None:
                if instance.has_dispatched_items:
                    raise serializers.ValidationError(
                        {'items': 'Items cannot be replaced after part of the entry was dispatched.'}
                    )
                items = self._validated_items(items_data)
                if not items:
                    raise serializers.ValidationError({'items': 'Add at least one item.'})
                instance.items.all().delete()
                self._create_items(instance, items)
        return instance


class BranchEntryListSerializer(serializers.ModelSerializer):
    items_count = serializers.IntegerField(read_only=True, required=False)
    total_quantity = serializers.IntegerField(read_only=True, required=False)
    dispatched_total = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = BranchEntry
        fields = ['id', 'bol_number', 'entry_type', 'branch', 'branch_name', 'status', 'vehicle_name',
                  'sender_name', 'items_count', 'total_quantity', 'dispatched_total', 'created_at']


class CustomFeeSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
    currency = serializers.ChoiceField(choices=CURRENCY_CHOICES, default='USD')
    payment_method = serializers.ChoiceField(choices=BranchEntry.PAYMENT_METHOD_CHOICES, default='prepaid')


class BranchEntryLinkSerializer(serializers.Serializer):
    """Vehicle and money details written when a BOL is linked to a vehicle"""
    vehicle = serializers.PrimaryKeyRelatedField(queryset=Vehicle.objects.all())
    sender_name = serializers.CharField(required=False, allow_blank=True, default='')
    converted_value = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), default=Decimal('0'))
    converted_value_currency = serializers.ChoiceField(choices=CURRENCY_CHOICES, default='USD')
    percentage_share = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=Decimal('0'), default=Decimal('0'))
    vehicle_rental_fee = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), default=Decimal('0'))
    additional_fee = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), default=Decimal('0'))
    additional_fee_currency = serializers.ChoiceField(choices=CURRENCY_CHOICES, default='USD')
    additional_fee_payment_method = serializers.ChoiceField(choices=BranchEntry.PAYMENT_METHOD_CHOICES, default='prepaid')
    custom_fees = CustomFeeSerializer(many=True, required=False, default=list)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class DispatchItemSerializer(serializers.Serializer):
    amount = serializers.IntegerField()
    destination_type = serializers.ChoiceField(choices=[('customer', 'Customer'), ('branch', 'Branch')])
    customer_name = serializers.CharField(required=False, allow_blank=True, default='')
    customer_phone = serializers.CharField(required=False, allow_blank=True, default='')
    destination_governorate = serializers.CharField(required=False, allow_blank=True, default='')
    target_branch_name = serializers.CharField(required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class BulkDispatchSerializer(serializers.Serializer):
    entry_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    vehicle = serializers.PrimaryKeyRelatedField(queryset=Vehicle.objects.all())
    # A list of names or one comma separated string
    destination_cities = serializers.JSONField()
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    office_expenses = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False)
    office_expenses_currency = serializers.ChoiceField(choices=CURRENCY_CHOICES, required=False)
    car_expenses = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False)
    car_expenses_currency = serializers.ChoiceField(choices=CURRENCY_CHOICES, required=False)
    vehicle_rental = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False)
    expense1_name = serializers.CharField(required=False, allow_blank=True)
    expense1_value = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False)
    expense1_currency = serializers.ChoiceField(choices=CURRENCY_CHOICES, required=False)
    expense2_name = serializers.CharField(required=False, allow_blank=True)
    expense2_value = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False)
    expense2_currency = serializers.ChoiceField(choices=CURRENCY_CHOICES, required=False)


class TripDispatchItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = TripDispatchItem
        fields = ['id', 'trip', 'source_item', 'bol_number', 'order_index', 'item_description', 'quantity',
                  'item_value', 'item_currency', 'recipient_name', 'recipient_phone',
                  'destination_governorate', 'created_at']
