from django.urls import path
from . import views

urlpatterns = [
    # Daily journal
    path('transactions/', views.transaction_list_create, name='transaction-list-create'),
    path('transactions/stats/', views.journal_statistics, name='transaction-stats'),
    path('transactions/export/', views.transaction_export, name='transaction-export'),
    path('transactions/<int:pk>/', views.transaction_detail, name='transaction-detail'),
    path('debts/', views.debts_list, name='debts-list'),
    path('debts/customers/<int:customer_id>/statement/', views.customer_statement_view, name='customer-statement'),

    # Branch transfers
    path('transfers/', views.transfer_list_create, name='transfer-list-create'),
    path('transfers/stats/', views.transfer_statistics, name='transfer-stats'),
    path('transfers/export/', views.transfer_export, name='transfer-export'),
    path('transfers/<int:pk>/', views.transfer_detail, name='transfer-detail'),
    path('transfers/<int:pk>/status/', views.transfer_change_status, name='transfer-change-status'),

    # Driver commissions
    path('commissions/', views.commission_list, name='commission-list'),
    path('commissions/export/', views.commission_export, name='commission-export'),
    path('commissions/<int:station_id>/status/', views.commission_update_status, name='commission-update-status'),
]
