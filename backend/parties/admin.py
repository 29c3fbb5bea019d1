from django.contrib import admin
from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'customer_type', 'status', 'extracted_from_shipments', 'created_at']
    list_filter = ['customer_type', 'status', 'extracted_from_shipments']
    search_fields = ['name', 'phone', 'email']
