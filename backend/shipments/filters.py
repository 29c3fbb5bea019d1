import django_filters
from django.db.models import Q
from .models import Shipment
from .status import normalize_shipment_status


class ShipmentFilter(django_filters.FilterSet):
    """Filter for Shipment model using django-filter"""

    # Search across number, parties and destination
    search = django_filters.CharFilter(method='filter_search', label='Search')

    status = django_filters.CharFilter(method='filter_status', label='Status')
    governorate = django_filters.CharFilter(field_name='governorate', lookup_expr='icontains')
    vehicle = django_filters.NumberFilter(field_name='vehicle_id', lookup_expr='exact')
    trip = django_filters.NumberFilter(field_name='trip_id', lookup_expr='exact')
    payment_method = django_filters.CharFilter(field_name='shipping_fee_payment_method', lookup_expr='exact')
    unassigned = django_filters.CharFilter(method='filter_unassigned', label='Unassigned')
    date_from = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')

    class Meta:
        model = Shipment
        fields = ['search', 'status', 'governorate', 'vehicle', 'trip', 'payment_method',
                  'unassigned', 'date_from', 'date_to']

    def filter_search(self, queryset, name, value):
        value = (value or '').strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(shipment_number__icontains=value) |
            Q(recipient_name__icontains=value) |
            Q(recipient_phone__icontains=value) |
            Q(sender_name__icontains=value) |
            Q(sender_phone__icontains=value) |
            Q(governorate__icontains=value) |
            Q(courier_name__icontains=value)
        )

    def filter_status(self, queryset, name, value):
        """Accepts a code, an Arabic label or a comma-separated list of either"""
        codes = [normalize_shipment_status(part) for part in value.split(',') if part.strip()]
        codes = [code for code in codes if code]
        if not codes:
            return queryset.none()
        return queryset.filter(status__in=codes)

    def filter_unassigned(self, queryset, name, value):
        if value.lower() in ('true', '1', 'yes'):
            return queryset.filter(trip__isnull=True)
        if value.lower() in ('false', '0', 'no'):
            return queryset.filter(trip__isnull=False)
        return queryset
