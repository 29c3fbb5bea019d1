from django.urls import path
from . import views

urlpatterns = [
    path('branch-entries/', views.branch_entry_list_create, name='branch-entry-list-create'),
    path('branch-entries/pending/', views.branch_entry_pending, name='branch-entry-pending'),
    path('branch-entries/fully-dispatched/', views.branch_entry_fully_dispatched, name='branch-entry-fully-dispatched'),
    path('branch-entries/bulk-dispatch/', views.branch_entry_bulk_dispatch, name='branch-entry-bulk-dispatch'),
    path('branch-entries/export/', views.branch_entry_export, name='branch-entry-export'),
    path('branch-entries/<int:pk>/', views.branch_entry_detail, name='branch-entry-detail'),
    path('branch-entries/<int:pk>/link-vehicle/', views.branch_entry_link_vehicle, name='branch-entry-link-vehicle'),
    path('branch-entry-items/<int:pk>/dispatch/', views.branch_entry_item_dispatch, name='branch-entry-item-dispatch'),
]
