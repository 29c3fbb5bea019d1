from django.urls import path
from . import views

urlpatterns = [
    path('branches/', views.branch_list_create, name='branch-list-create'),
    path('branches/<int:pk>/', views.branch_detail, name='branch-detail'),
]
