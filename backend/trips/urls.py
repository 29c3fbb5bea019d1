from django.urls import path
from . import views

urlpatterns = [
    path('trips/', views.trip_list_create, name='trip-list-create'),
    path('trips/manifest/', views.trip_manifest, name='trip-manifest'),
    path('trips/<int:pk>/', views.trip_detail, name='trip-detail'),
    path('trips/<int:pk>/status/', views.trip_change_status, name='trip-change-status'),
    path('trips/<int:pk>/assign/', views.trip_assign_shipments, name='trip-assign-shipments'),
    path('trips/<int:pk>/unassign/', views.trip_unassign_shipments, name='trip-unassign-shipments'),
    path('trips/<int:pk>/totals/', views.trip_totals, name='trip-totals'),
    path('trips/<int:pk>/export/', views.trip_export, name='trip-export'),
]
