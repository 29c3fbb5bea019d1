from django.contrib import admin
from .models import Branch


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'location', 'manager_name', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['name', 'code', 'location', 'manager_name']
    ordering = ['name']
