from django.urls import path
from . import views

urlpatterns = [
    path('vehicles/', views.vehicle_list_create, name='vehicle-list-create'),
    path('vehicles/<int:pk>/', views.vehicle_detail, name='vehicle-detail'),
    path('drivers/', views.driver_list_create, name='driver-list-create'),
    path('drivers/<int:pk>/', views.driver_detail, name='driver-detail'),
]
