from rest_framework import serializers
from .models import Branch


class BranchSerializer(serializers.ModelSerializer):
    class Meta:
        model = Branch
        fields = ['id', 'name', 'code', 'location', 'phone', 'manager_name', 'manager_phone',
                  'status', 'notes', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
