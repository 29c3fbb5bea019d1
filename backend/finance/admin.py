from django.contrib import admin
from .models import FinancialTransaction, BranchTransfer, CommissionPayment


@admin.register(FinancialTransaction)
class FinancialTransactionAdmin(admin.ModelAdmin):
    list_display = ['reference', 'date', 'transaction_type', 'amount', 'currency', 'customer_name', 'branch_name', 'status']
    list_filter = ['transaction_type', 'currency', 'status', 'date']
    search_fields = ['reference', 'description', 'customer_name', 'customer_phone']
    readonly_fields = ['reference', 'created_at', 'updated_at']


@admin.register(BranchTransfer)
class BranchTransferAdmin(admin.ModelAdmin):
    list_display = ['transfer_number', 'date', 'from_branch_name', 'to_branch_name', 'amount', 'currency', 'transfer_type', 'status']
    list_filter = ['status', 'transfer_type', 'currency', 'date']
    search_fields = ['transfer_number', 'description', 'from_branch_name', 'to_branch_name']
    readonly_fields = ['transfer_number', 'created_at', 'updated_at']


@admin.register(CommissionPayment)
class CommissionPaymentAdmin(admin.ModelAdmin):
    list_display = ['station', 'status', 'payment_date', 'updated_by', 'updated_at']
    list_filter = ['status']
