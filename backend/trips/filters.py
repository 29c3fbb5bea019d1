import django_filters
from django.db.models import Q
from .models import Trip
from backend.shipments.status import normalize_trip_status


class TripFilter(django_filters.FilterSet):
    """Filter for Trip model using django-filter"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    status = django_filters.CharFilter(method='filter_status', label='Status')
    source = django_filters.CharFilter(field_name='source', lookup_expr='exact')
    vehicle = django_filters.NumberFilter(field_name='vehicle_id', lookup_expr='exact')
    date_from = django_filters.DateFilter(field_name='departure_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='departure_date', lookup_expr='lte')

    class Meta:
        model = Trip
        fields = ['search', 'status', 'source', 'vehicle', 'date_from', 'date_to']

    def filter_search(self, queryset, name, value):
        value = (value or '').strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(trip_name__icontains=value) |
            Q(vehicle_number__icontains=value) |
            Q(destination__icontains=value) |
            Q(owner_name__icontains=value) |
            Q(stations__driver_name__icontains=value)
        ).distinct()

    def filter_status(self, queryset, name, value):
        code = normalize_trip_status(value)
        if code is None:
            return queryset.none()
        return queryset.filter(status=code)
