import django_filters
from django.db.models import Q
from .models import FinancialTransaction, BranchTransfer


class TransactionFilter(django_filters.FilterSet):
    """Filter for FinancialTransaction model using django-filter"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    transaction_type = django_filters.CharFilter(field_name='transaction_type', lookup_expr='exact')
    customer = django_filters.NumberFilter(field_name='customer_id', lookup_expr='exact')
    branch = django_filters.NumberFilter(field_name='branch_id', lookup_expr='exact')
    currency = django_filters.CharFilter(field_name='currency', lookup_expr='exact')
    status = django_filters.CharFilter(field_name='status', lookup_expr='exact')
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='lte')
    min_amount = django_filters.NumberFilter(field_name='amount', lookup_expr='gte')
    max_amount = django_filters.NumberFilter(field_name='amount', lookup_expr='lte')

    class Meta:
        model = FinancialTransaction
        fields = ['search', 'transaction_type', 'customer', 'branch', 'currency', 'status',
                  'date_from', 'date_to', 'min_amount', 'max_amount']

    def filter_search(self, queryset, name, value):
        value = (value or '').strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(reference__icontains=value) |
            Q(description__icontains=value) |
            Q(customer_name__icontains=value) |
            Q(customer_phone__icontains=value) |
            Q(branch_name__icontains=value)
        )


class TransferFilter(django_filters.FilterSet):
    """Filter for BranchTransfer model using django-filter"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    status = django_filters.CharFilter(field_name='status', lookup_expr='exact')
    transfer_type = django_filters.CharFilter(field_name='transfer_type', lookup_expr='exact')
    currency = django_filters.CharFilter(field_name='currency', lookup_expr='exact')
    branch = django_filters.NumberFilter(method='filter_branch', label='Branch')
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='lte')

    class Meta:
        model = BranchTransfer
        fields = ['search', 'status', 'transfer_type', 'currency', 'branch', 'date_from', 'date_to']

    def filter_search(self, queryset, name, value):
        value = (value or '').strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(transfer_number__icontains=value) |
            Q(description__icontains=value) |
            Q(from_branch_name__icontains=value) |
            Q(to_branch_name__icontains=value)
        )

    def filter_branch(self, queryset, name, value):
        return queryset.filter(Q(from_branch_id=value) | Q(to_branch_id=value))
