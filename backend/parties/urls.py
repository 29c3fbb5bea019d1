from django.urls import path
from .views import (
    customer_list_create, customer_detail, customer_summary, customer_sync_from_shipments
)

urlpatterns = [
    path('customers/', customer_list_create, name='customer-list-create'),
    path('customers/sync-from-shipments/', customer_sync_from_shipments, name='customer-sync-from-shipments'),
    path('customers/<int:pk>/', customer_detail, name='customer-detail'),
    path('customers/<int:pk>/summary/', customer_summary, name='customer-summary'),
]
