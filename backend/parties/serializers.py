from rest_framework import serializers
from .models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = [
            'id', 'name', 'phone', 'email', 'address', 'customer_type', 'status', 'notes',
            'extracted_from_shipments', 'created_at', 'updated_at'
        ]
        read_only_fields = ['extracted_from_shipments', 'created_at', 'updated_at']
