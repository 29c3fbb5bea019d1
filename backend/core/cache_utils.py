"""
Caching utilities for expensive aggregate queries (dashboard KPIs, reports).
Uses Redis through django-redis in production.

Every key family has a generation token stored in the cache. Keys embed the
current token, so replacing the token invalidates the whole family on any
backend; django-redis additionally deletes the stale keys right away.
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging
import time

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
DASHBOARD_KPI_CACHE_TTL = 300  # 5 minutes

DASHBOARD_KEY_PREFIX = "dashboard_kpis"


def _generation_key(prefix):
    return f"generation:{prefix}"


def get_cache_generation(prefix):
    """Current generation token of a key family, created on first use"""
    key = _generation_key(prefix)
    generation = cache.get(key)
    if generation is None:
        generation = time.time_ns()
        cache.add(key, generation, None)
        generation = cache.get(key, generation)
    return generation


def bump_cache_generation(prefix):
    """Move a key family to a new generation; keys of older ones are never read again"""
    generation = time.time_ns()
    cache.set(_generation_key(prefix), generation, None)
    return generation


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments and the family's generation"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{get_cache_generation(prefix)}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=300, key_prefix="dashboard_kpis")
        def build_dashboard(day):
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result
        return wrapper
    return decorator


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys of the family starting with pattern.
    The generation bump works everywhere; django-redis also frees the old keys.
    """
    bump_cache_generation(pattern)
    delete_pattern = getattr(cache, 'delete_pattern', None)
    if delete_pattern is None:
        logger.debug(f"Moved {pattern} keys to a new generation")
        return
    try:
        deleted = delete_pattern(f"{pattern}*")
        logger.info(f"Invalidated {deleted} cache keys matching pattern: {pattern}")
    except Exception as e:
        logger.warning(f"Could not delete stale cache keys for {pattern}: {str(e)}")


def invalidate_dashboard_cache():
    """Invalidate dashboard KPIs cache"""
    invalidate_cache_pattern(DASHBOARD_KEY_PREFIX)
