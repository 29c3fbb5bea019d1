"""
Caching for frequently read reference lists: branches and customers.

List responses are cached by the views under generation-stamped keys. Django
signals move a list family to a new generation whenever a row changes. Saves
of operational records (shipments, trips, branch entries, transactions)
invalidate dashboard KPIs.
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from .cache_utils import get_cache_generation, invalidate_cache_pattern, invalidate_dashboard_cache

logger = logging.getLogger(__name__)

# Cache key prefixes
BRANCH_LIST_KEY_PREFIX = 'branch_list:'
CUSTOMER_LIST_KEY_PREFIX = 'customer_list:'

# Branches change rarely, customers moderately
BRANCH_LIST_CACHE_TTL = 600
CUSTOMER_LIST_CACHE_TTL = 300

DASHBOARD_SOURCE_MODELS = ['Shipment', 'Trip', 'BranchEntry', 'BranchEntryItem', 'FinancialTransaction']


def get_branch_list_cache_key(search: str = '', status: str = '') -> str:
    """Get cache key for branch list (filtered by search and status)"""
    generation = get_cache_generation(BRANCH_LIST_KEY_PREFIX)
    return f"{BRANCH_LIST_KEY_PREFIX}{generation}:{search or 'all'}:{status or 'any'}"


def get_customer_list_cache_key(search_query: str = '', customer_type: str = '') -> str:
    generation = get_cache_generation(CUSTOMER_LIST_KEY_PREFIX)
    return f"{CUSTOMER_LIST_KEY_PREFIX}{generation}:{search_query or 'all'}:{customer_type or 'any'}"


def invalidate_branch_cache(branch_obj):
    """Drop every cached branch list"""
    if not branch_obj:
        return
    invalidate_cache_pattern(BRANCH_LIST_KEY_PREFIX)
    logger.debug(f"Invalidated branch lists after change to {branch_obj.name} (ID: {branch_obj.id})")


def invalidate_customer_cache(customer_obj):
    if not customer_obj:
        return
    invalidate_cache_pattern(CUSTOMER_LIST_KEY_PREFIX)
    logger.debug(f"Invalidated customer lists after change to {customer_obj.name} (ID: {customer_obj.id})")


# ==================== DJANGO SIGNALS ====================

def _invalidate_for(sender, instance):
    model_name = sender.__name__

    if model_name == 'Branch':
        from backend.locations.models import Branch
        if isinstance(instance, Branch):
            invalidate_branch_cache(instance)

    elif model_name == 'Customer':
        from backend.parties.models import Customer
        if isinstance(instance, Customer):
            invalidate_customer_cache(instance)

    elif model_name in DASHBOARD_SOURCE_MODELS:
        invalidate_dashboard_cache()


@receiver(post_save)
def model_post_save(sender, instance, **kwargs):
    """Invalidate cached lists and KPIs when a model is saved"""
    _invalidate_for(sender, instance)


@receiver(post_delete)
def model_post_delete(sender, instance, **kwargs):
    """Invalidate cached lists and KPIs when a model is deleted"""
    _invalidate_for(sender, instance)
