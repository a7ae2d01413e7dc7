import logging
from decimal import Decimal

from django.db.models import Sum, DecimalField
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from grain.inventory.models import Lumber, Finish, SheetGood, Consumable, Tool
from grain.projects import costing
from grain.projects.models import Project, LINE_ITEM_PREFETCH
from .cache import get_cached_dashboard_stats, set_cached_dashboard_stats

logger = logging.getLogger('grain.reports')


def compute_dashboard_stats(user):
    """Inventory counts and project totals for one user's shop"""
    projects = list(
        Project.objects.filter(user=user, is_deleted=False).prefetch_related(*LINE_ITEM_PREFETCH)
    )

    # 1. Active projects - neither quotes nor finished work
    total_projects = sum(1 for p in projects if p.status not in Project.INACTIVE_STATUSES)

    # 2. Project totals over every non-deleted project
    total_board_feet = Decimal('0')
    total_project_cost = Decimal('0')
    total_profit = Decimal('0')
    for project in projects:
        breakdown = project.cost_breakdown()
        total_board_feet += breakdown['total_board_feet']
        total_project_cost += breakdown['total_cost']
        total_profit += breakdown['labor_cost']

    # 3. Shop value
    total_tools_value = Tool.objects.filter(user=user, is_deleted=False).aggregate(
        total=Sum('price', output_field=DecimalField())
    )['total'] or Decimal('0.00')

    def count(model):
        return model.objects.filter(user=user, is_deleted=False).count()

    return {
        'total_projects': total_projects,
        'total_lumber': count(Lumber),
        'total_finishes': count(Finish),
        'total_sheet_goods': count(SheetGood),
        'total_consumables': count(Consumable),
        'total_tools': count(Tool),
        'total_tools_value': float(total_tools_value),
        'total_board_feet': float(total_board_feet),
        'total_project_cost': float(total_project_cost),
        'total_profit': float(total_profit),
        'avg_cost_per_bf': float(costing.average_cost_per_board_foot(total_project_cost, total_board_feet)),
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_stats(request):
    """Dashboard statistics for the current user, cached until their data changes"""
    stats = get_cached_dashboard_stats(request.user.id)
    if stats is None:
        stats = compute_dashboard_stats(request.user)
        set_cached_dashboard_stats(request.user.id, stats)
        logger.debug(f"Computed dashboard stats for {request.user.username}")
    return Response(stats)
