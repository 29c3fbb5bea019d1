from django.urls import path
from . import views

urlpatterns = [
    path('shipments/', views.shipment_list_create, name='shipment-list-create'),
    path('shipments/bulk-status/', views.shipment_bulk_status, name='shipment-bulk-status'),
    path('shipments/summary/', views.shipment_summary, name='shipment-summary'),
    path('shipments/export/', views.shipment_export, name='shipment-export'),
    path('shipments/mine/', views.my_shipments, name='shipment-mine'),
    path('shipments/track/<str:shipment_number>/', views.shipment_track, name='shipment-track'),
    path('shipments/<int:pk>/', views.shipment_detail, name='shipment-detail'),
    path('shipments/<int:pk>/status/', views.shipment_change_status, name='shipment-change-status'),
    path('shipments/<int:pk>/label/', views.shipment_label, name='shipment-label'),
]
