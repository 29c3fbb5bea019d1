from decimal import Decimal
from rest_framework import serializers
from .models import FinancialTransaction, BranchTransfer, CommissionPayment


class FinancialTransactionSerializer(serializers.ModelSerializer):
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)

    class Meta:
        model = FinancialTransaction
        fields = [
            'id', 'reference', 'transaction_type', 'amount', 'currency', 'description',
            'customer', 'customer_name', 'customer_phone', 'customer_role', 'branch', 'branch_name',
            'date', 'time', 'status', 'created_by', 'created_by_username', 'created_at', 'updated_at'
        ]
        read_only_fields = ['reference', 'branch_name', 'created_by', 'created_at', 'updated_at']

    def validate_amount(self, value):
        if value <= Decimal('0'):
            raise serializers.ValidationError('Amount must be greater than zero.')
        return value

    def validate_description(self, value):
        if not value.strip():
            raise serializers.ValidationError('Description is required.')
        return value.strip()

    def update(self, instance, validated_data):
        # Snapshots follow the linked records when those change
        if 'customer' in validated_data:
            customer = validated_data['customer']
            instance.customer_name = validated_data.get('customer_name', customer.name if customer else '')
            instance.customer_phone = validated_data.get('customer_phone', customer.phone if customer else '')
            instance.customer_role = validated_data.get('customer_role', customer.customer_type if customer else '')
        if 'branch' in validated_data:
            branch = validated_data['branch']
            instance.branch_name = branch.name if branch else ''
        return super().update(instance, validated_data)


class BranchTransferSerializer(serializers.ModelSerializer):
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)

    class Meta:
        model = BranchTransfer
        fields = [
            'id', 'transfer_number', 'from_branch', 'from_branch_name', 'to_branch', 'to_branch_name',
            'amount', 'currency', 'transfer_type', 'description', 'status', 'date', 'time',
            'created_by', 'created_by_username', 'created_at', 'updated_at'
        ]
        read_only_fields = ['transfer_number', 'from_branch_name', 'to_branch_name', 'created_by',
                            'created_at', 'updated_at']

    def validate_amount(self, value):
        if value <= Decimal('0'):
            raise serializers.ValidationError('Amount must be greater than zero.')
        return value

    def validate_description(self, value):
        if not value.strip():
            raise serializers.ValidationError('Description is required.')
        return value.strip()

    def validate(self, attrs):
        from_branch = attrs.get('from_branch', getattr(self.instance, 'from_branch', None))
        to_branch = attrs.get('to_branch', getattr(self.instance, 'to_branch', None))
        if from_branch and to_branch and from_branch.pk == to_branch.pk:
            raise serializers.ValidationError({'to_branch': 'Source and destination branches must differ.'})
        return attrs


class TransferStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=BranchTransfer.STATUS_CHOICES)


class CommissionStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=CommissionPayment.STATUS_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
