"""
Per-user cache for dashboard statistics
"""
import logging

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger('grain.reports')

DASHBOARD_CACHE_PREFIX = 'dashboard_stats'


def dashboard_cache_key(user_id):
    return f"{DASHBOARD_CACHE_PREFIX}:{user_id}"


def get_cached_dashboard_stats(user_id):
    stats = cache.get(dashboard_cache_key(user_id))
    if stats is not None:
        logger.debug(f"Cache HIT for dashboard stats of user {user_id}")
    else:
        logger.debug(f"Cache MISS for dashboard stats of user {user_id}")
    return stats


def set_cached_dashboard_stats(user_id, stats):
    cache.set(dashboard_cache_key(user_id), stats, settings.DASHBOARD_CACHE_TTL)


def invalidate_dashboard_stats(user_id):
    """Drop a user's cached stats; cache errors are logged, never raised"""
    if user_id is None:
        return
    try:
        cache.delete(dashboard_cache_key(user_id))
        logger.debug(f"Invalidated dashboard stats for user {user_id}")
    except Exception as e:
        logger.warning(f"Error invalidating dashboard stats for user {user_id}: {e}")
