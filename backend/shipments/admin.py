from django.contrib import admin
from .models import Shipment, ShipmentStatusUpdate


class ShipmentStatusUpdateInline(admin.TabularInline):
    model = ShipmentStatusUpdate
    extra = 0
    readonly_fields = ['status', 'location', 'notes', 'created_by', 'created_at']


@admin.register(Shipment)
class ShipmentAdmin(admin.ModelAdmin):
    list_display = ['shipment_number', 'sender_name', 'recipient_name', 'governorate', 'status', 'vehicle', 'trip', 'created_at']
    list_filter = ['status', 'governorate', 'shipping_fee_payment_method', 'created_at']
    search_fields = ['shipment_number', 'sender_name', 'sender_phone', 'recipient_name', 'recipient_phone']
    readonly_fields = ['shipment_number', 'created_at', 'updated_at']
    inlines = [ShipmentStatusUpdateInline]
