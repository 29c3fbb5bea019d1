from django.contrib import admin
from .models import BranchEntry, BranchEntryItem, DispatchRecord, TripDispatchItem


class BranchEntryItemInline(admin.TabularInline):
    model = BranchEntryItem
    extra = 0
    readonly_fields = ['dispatched_quantity', 'item_status', 'assigned_trip']


@admin.register(BranchEntry)
class BranchEntryAdmin(admin.ModelAdmin):
    list_display = ['bol_number', 'entry_type', 'branch_name', 'status', 'vehicle_name', 'created_by', 'created_at']
    list_filter = ['entry_type', 'status', 'branch', 'created_at']
    search_fields = ['bol_number', 'branch_name', 'sender_name']
    ordering = ['-created_at']
    inlines = [BranchEntryItemInline]
    readonly_fields = ['bol_number', 'created_at', 'updated_at']


@admin.register(DispatchRecord)
class DispatchRecordAdmin(admin.ModelAdmin):
    list_display = ['item', 'dispatched_amount', 'destination_type', 'trip', 'recorded_by', 'dispatched_at']
    list_filter = ['destination_type', 'dispatched_at']
    search_fields = ['item__entry__bol_number', 'customer_name', 'target_branch_name']
    readonly_fields = ['dispatched_at']


@admin.register(TripDispatchItem)
class TripDispatchItemAdmin(admin.ModelAdmin):
    list_display = ['trip', 'bol_number', 'item_description', 'quantity', 'item_value', 'item_currency']
    search_fields = ['bol_number', 'item_description', 'recipient_name']
