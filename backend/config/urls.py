"""
URL configuration for the shipping back-office backend.

Every app exposes its endpoints under ``api/v1/``.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "Shipping Back Office Admin Panel"
admin.site.site_title = "Shipping Back Office Admin Portal"
admin.site.index_title = "Welcome to the Shipping Back Office"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('backend.core.urls')),
    path('api/v1/', include('backend.locations.urls')),
    path('api/v1/', include('backend.fleet.urls')),
    path('api/v1/', include('backend.parties.urls')),
    path('api/v1/', include('backend.shipments.urls')),
    path('api/v1/', include('backend.trips.urls')),
    path('api/v1/', include('backend.inventory.urls')),
    path('api/v1/', include('backend.finance.urls')),
    path('api/v1/', include('backend.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
    re_path(r'^static/(?P<path>.*)$', serve, {'document_root': settings.STATIC_ROOT}),
]
