import django_filters
from django.db.models import Q
from .models import BranchEntry


class BranchEntryFilter(django_filters.FilterSet):
    """Filter for BranchEntry model using django-filter"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    entry_type = django_filters.CharFilter(field_name='entry_type', lookup_expr='exact')
    status = django_filters.CharFilter(field_name='status', lookup_expr='exact')
    branch = django_filters.NumberFilter(field_name='branch_id', lookup_expr='exact')
    date_from = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')

    class Meta:
        model = BranchEntry
        fields = ['search', 'entry_type', 'status', 'branch', 'date_from', 'date_to']

    def filter_search(self, queryset, name, value):
        value = (value or '').strip()
        if not value:
            return queryset
        # Subquery so that item joins do not multiply the list annotations
        matching = BranchEntry.objects.filter(
            Q(bol_number__icontains=value) |
            Q(branch_name__icontains=value) |
            Q(sender_name__icontains=value) |
            Q(items__item_description__icontains=value) |
            Q(items__recipient_name__icontains=value) |
            Q(items__recipient_phone__icontains=value) |
            Q(items__sending_branch_reference__icontains=value)
        ).values('pk')
        return queryset.filter(pk__in=matching)
