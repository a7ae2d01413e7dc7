"""
Test suite for dashboard statistics
Tests: totals, per-user isolation, caching and signal-driven invalidation
"""
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from rest_framework import status

from grain.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from grain.reports.cache import dashboard_cache_key, invalidate_dashboard_stats
from grain.reports.signals import suspend_cache_signals


class DashboardStatsTests(TestCase):
    """Test the dashboard stats endpoint"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def tearDown(self):
        cache.clear()

    def test_empty_dashboard(self):
        response = self.client.get('/api/v1/dashboard/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_projects'], 0)
        self.assertEqual(response.data['total_lumber'], 0)
        self.assertEqual(response.data['total_board_feet'], 0.0)
        self.assertEqual(response.data['avg_cost_per_bf'], 0.0)

    def test_totals(self):
        lumber = TestDataFactory.create_lumber(self.user, cost_per_board_foot=Decimal('5.00'))
        finish = TestDataFactory.create_finish(self.user, price=Decimal('40.00'))
        sheet_good = TestDataFactory.create_sheet_good(self.user, price=Decimal('60.00'))
        consumable = TestDataFactory.create_consumable(self.user, price=Decimal('10.00'), package_quantity=100)
        TestDataFactory.create_tool(self.user, price=Decimal('250.00'))
        TestDataFactory.create_tool(self.user, price=Decimal('100.00'))
        TestDataFactory.create_tool(self.user, price=Decimal('999.00')).soft_delete()

        active = TestDataFactory.create_project(self.user, status='IN_PROGRESS', labor_cost=Decimal('100.00'),
                                                misc_cost=Decimal('5.00'))
        TestDataFactory.create_board(active, lumber, quantity=3)
        TestDataFactory.create_project_finish(active, finish, percentage_used=Decimal('50'))
        TestDataFactory.create_project_sheet_good(active, sheet_good, quantity=2)
        TestDataFactory.create_project_consumable(active, consumable, quantity=20)

        # Quotes and finished work count toward totals but not active projects
        TestDataFactory.create_project(self.user, status='COMPLETED', labor_cost=Decimal('40.00'))
        TestDataFactory.create_project(self.user, status='PRICE')
        TestDataFactory.create_project(self.user, status='PLANNED', labor_cost=Decimal('500.00')).soft_delete()

        # Another user's rows never show up
        TestDataFactory.create_lumber(self.other)
        TestDataFactory.create_project(self.other, status='IN_PROGRESS')

        response = self.client.get('/api/v1/dashboard/stats/')
        data = response.data
        self.assertEqual(data['total_projects'], 1)
        self.assertEqual(data['total_lumber'], 1)
        self.assertEqual(data['total_finishes'], 1)
        self.assertEqual(data['total_sheet_goods'], 1)
        self.assertEqual(data['total_consumables'], 1)
        self.assertEqual(data['total_tools'], 2)
        self.assertAlmostEqual(data['total_tools_value'], 350.0)
        self.assertAlmostEqual(data['total_board_feet'], 8.25)
        # 288.25 for the active project plus 40.00 labor on the completed one
        self.assertAlmostEqual(data['total_project_cost'], 328.25)
        self.assertAlmostEqual(data['total_profit'], 140.0)
        self.assertAlmostEqual(data['avg_cost_per_bf'], 328.25 / 8.25)

    def test_stats_are_cached(self):
        self.client.get('/api/v1/dashboard/stats/')
        self.assertIsNotNone(cache.get(dashboard_cache_key(self.user.id)))

    def test_inventory_change_invalidates_cache(self):
        self.assertEqual(self.client.get('/api/v1/dashboard/stats/').data['total_lumber'], 0)
        TestDataFactory.create_lumber(self.user)
        self.assertIsNone(cache.get(dashboard_cache_key(self.user.id)))
        self.assertEqual(self.client.get('/api/v1/dashboard/stats/').data['total_lumber'], 1)

    def test_line_item_change_invalidates_cache(self):
        lumber = TestDataFactory.create_lumber(self.user)
        project = TestDataFactory.create_project(self.user, status='PLANNED')
        self.assertEqual(self.client.get('/api/v1/dashboard/stats/').data['total_board_feet'], 0.0)
        TestDataFactory.create_board(project, lumber)
        self.assertAlmostEqual(self.client.get('/api/v1/dashboard/stats/').data['total_board_feet'], 2.75)

    def test_nested_project_write_invalidates_cache(self):
        lumber = TestDataFactory.create_lumber(self.user)
        self.client.get('/api/v1/dashboard/stats/')
        response = self.client.post('/api/v1/projects/', {
            'name': 'Bench',
            'boards': [{'lumber_id': lumber.id, 'width': '6', 'thickness': '1', 'length': '2', 'quantity': 1}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = self.client.get('/api/v1/dashboard/stats/').data
        self.assertEqual(data['total_projects'], 1)
        self.assertAlmostEqual(data['total_board_feet'], 2.75)

    def test_other_users_changes_keep_cache(self):
        self.client.get('/api/v1/dashboard/stats/')
        TestDataFactory.create_lumber(self.other)
        self.assertIsNotNone(cache.get(dashboard_cache_key(self.user.id)))

    def test_suspended_signals_leave_cache_alone(self):
        self.client.get('/api/v1/dashboard/stats/')
        with suspend_cache_signals():
            TestDataFactory.create_lumber(self.user)
        self.assertIsNotNone(cache.get(dashboard_cache_key(self.user.id)))
        invalidate_dashboard_stats(self.user.id)
        self.assertEqual(self.client.get('/api/v1/dashboard/stats/').data['total_lumber'], 1)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/dashboard/stats/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
