"""
Dashboard KPIs for the back office home page.

The figures are cached (Redis in production) for DASHBOARD_KPI_CACHE_TTL and
the cache is dropped whenever shipments, trips, branch entries or journal
transactions change.
"""
import logging
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Count, F, Sum
from django.utils import timezone

from backend.core.cache_utils import cached_query, DASHBOARD_KPI_CACHE_TTL, DASHBOARD_KEY_PREFIX
from backend.core.currency import merge_totals, totals_to_strings
from backend.core.permissions import IsStaffMember
from backend.finance.ledger import cash_totals, net_totals
from backend.finance.models import FinancialTransaction
from backend.inventory.models import BranchEntry
from backend.shipments.models import Shipment
from backend.shipments.status import SHIPMENT_STATUS_LABELS, TRIP_STATUS_LABELS, DELIVERED, RETURNED
from backend.trips.models import Trip

logger = logging.getLogger('backend.reports')

RECENT_SHIPMENTS_LIMIT = 10


def _counts_by_status(queryset, labels):
    counts = {
        row['status']: row['count']
        for row in queryset.order_by().values('status').annotate(count=Count('id'))
    }
    return [
        {'status': code, 'label': label, 'count': counts.get(code, 0)}
        for code, label in labels.items()
    ]


@cached_query(cache_ttl=DASHBOARD_KPI_CACHE_TTL, key_prefix=DASHBOARD_KEY_PREFIX)
def build_dashboard(day):
    shipments = Shipment.objects.all()

    # Amounts still to collect: everything not delivered or returned
    collectible = {}
    for shipment in shipments.exclude(status__in=[DELIVERED, RETURNED]):
        collectible = merge_totals(collectible, shipment.collectible_totals())

    pending_entries = BranchEntry.objects.filter(entry_type='incoming').annotate(
        total_quantity=Sum('items__item_quantity'),
        dispatched_total=Sum('items__dispatched_quantity'),
    ).filter(total_quantity__gt=F('dispatched_total')).count()

    today_transactions = FinancialTransaction.objects.filter(date=day)

    recent = [
        {
            'id': s.pk,
            'shipment_number': s.shipment_number,
            'recipient_name': s.recipient_name,
            'governorate': s.governorate,
            'status': s.status,
            'status_label': s.status_label,
            'created_at': s.created_at.isoformat(),
        }
        for s in shipments.order_by('-created_at')[:RECENT_SHIPMENTS_LIMIT]
    ]

    return {
        'date': day.isoformat(),
        'shipments_total': shipments.count(),
        'shipments_today': shipments.filter(created_at__date=day).count(),
        'shipments_by_status': _counts_by_status(shipments, SHIPMENT_STATUS_LABELS),
        'collectible_totals': totals_to_strings(collectible),
        'trips_by_status': _counts_by_status(Trip.objects.all(), TRIP_STATUS_LABELS),
        'pending_branch_entries': pending_entries,
        'today_journal_net': totals_to_strings(net_totals(today_transactions)),
        'today_cash_net': totals_to_strings(cash_totals(today_transactions)),
        'recent_shipments': recent,
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffMember])
def dashboard(request):
    """Home page KPIs"""
    day = timezone.localdate()
    data = build_dashboard(day)
    response = Response(data)
    response['Cache-Control'] = 'private, max-age=60'
    return response
