"""
Cache invalidation signals
Drop a user's dashboard stats whenever something they own changes
"""
import logging
import threading
from contextlib import contextmanager

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from grain.inventory.models import Lumber, Finish, SheetGood, Consumable, Tool
from grain.projects.models import Project, Board, ProjectFinish, ProjectSheetGood, ProjectConsumable
from .cache import invalidate_dashboard_stats

logger = logging.getLogger('grain.reports')

OWNED_MODELS = (Lumber, Finish, SheetGood, Consumable, Tool, Project)
LINE_ITEM_MODELS = (Board, ProjectFinish, ProjectSheetGood, ProjectConsumable)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()


@contextmanager
def suspend_cache_signals():
    """
    Temporarily suspend dashboard invalidation signals.

    Used around nested project writes that save many rows at once; the
    caller invalidates the owner's stats once the block is done.
    """
    previous = is_suspended()
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = previous


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


def invalidate_now_and_on_commit(user_id):
    # A concurrent request may refill the cache before the transaction commits
    invalidate_dashboard_stats(user_id)
    transaction.on_commit(lambda: invalidate_dashboard_stats(user_id))


@receiver([post_save, post_delete])
def invalidate_owned_row(sender, instance, **kwargs):
    """Inventory rows and projects carry their owner directly"""
    if is_suspended() or not issubclass(sender, OWNED_MODELS):
        return
    invalidate_now_and_on_commit(instance.user_id)


@receiver([post_save, post_delete])
def invalidate_project_line_item(sender, instance, **kwargs):
    """Boards and other line items reach their owner through the project"""
    if is_suspended() or not issubclass(sender, LINE_ITEM_MODELS):
        return
    # The project may already be gone when line items cascade
    user_id = Project.objects.filter(pk=instance.project_id).values_list('user_id', flat=True).first()
    if user_id is not None:
        invalidate_now_and_on_commit(user_id)


@receiver([post_save, post_delete], sender=get_user_model())
def invalidate_user(sender, instance, **kwargs):
    invalidate_dashboard_stats(instance.pk)
