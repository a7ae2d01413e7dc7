"""
Test suite for the projects module
Tests: cost formulas, nested line items, ordering, sharing, cut lists, admin changelist and edge cases
"""
import uuid
from decimal import Decimal

from django.db import connection
from django.test import TestCase
from django.test.utils import CaptureQueriesContext
from rest_framework import status
from rest_framework.test import APIClient

from grain.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from grain.inventory.models import Lumber
from grain.projects import costing
from grain.projects.models import Project, Board, ProjectFinish, CutList


class CostingTests(TestCase):
    """Test the cost formulas"""

    def test_board_feet_uses_varas(self):
        # 6in x 1in x 2 varas (66in) = 2.75 bf per board
        self.assertEqual(costing.board_feet(6, 1, 2), Decimal('2.75'))
        self.assertEqual(costing.board_feet(Decimal('6'), Decimal('1'), Decimal('2'), 3), Decimal('8.25'))

    def test_unit_price(self):
        self.assertEqual(costing.unit_price(Decimal('10.00'), 4), Decimal('2.5'))
        self.assertEqual(costing.unit_price(Decimal('10.00'), 0), Decimal('0'))

    def test_finish_cost(self):
        self.assertEqual(costing.finish_cost(Decimal('40.00'), Decimal('25')), Decimal('10'))

    def test_average_cost_per_board_foot(self):
        self.assertEqual(costing.average_cost_per_board_foot(Decimal('100'), Decimal('4')), Decimal('25'))
        self.assertEqual(costing.average_cost_per_board_foot(Decimal('100'), Decimal('0')), Decimal('0'))


class ProjectModelTests(TestCase):
    """Test project cost breakdown"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.lumber = TestDataFactory.create_lumber(self.user, cost_per_board_foot=Decimal('5.00'))
        self.finish = TestDataFactory.create_finish(self.user, price=Decimal('40.00'))
        self.sheet_good = TestDataFactory.create_sheet_good(self.user, price=Decimal('60.00'))
        self.consumable = TestDataFactory.create_consumable(self.user, price=Decimal('10.00'), package_quantity=100)

    def test_cost_breakdown(self):
        project = TestDataFactory.create_project(self.user, labor_cost=Decimal('100.00'), misc_cost=Decimal('5.00'))
        TestDataFactory.create_board(project, self.lumber, quantity=3)
        TestDataFactory.create_project_finish(project, self.finish, percentage_used=Decimal('50'))
        TestDataFactory.create_project_sheet_good(project, self.sheet_good, quantity=2)
        TestDataFactory.create_project_consumable(project, self.consumable, quantity=20)

        breakdown = project.cost_breakdown()
        self.assertEqual(breakdown['total_board_feet'], Decimal('8.25'))
        self.assertEqual(breakdown['material_cost'], Decimal('41.25'))
        self.assertEqual(breakdown['finish_cost'], Decimal('20'))
        self.assertEqual(breakdown['sheet_goods_cost'], Decimal('120'))
        self.assertEqual(breakdown['consumable_cost'], Decimal('2'))
        # 41.25 + 20 + 120 + 2 + 100 + 5
        self.assertEqual(breakdown['total_cost'], Decimal('288.25'))
        self.assertEqual(project.get_total_cost(), Decimal('288.25'))

    def test_empty_project_costs_only_labor_and_misc(self):
        project = TestDataFactory.create_project(self.user, labor_cost=Decimal('30.00'), misc_cost=Decimal('2.50'))
        breakdown = project.cost_breakdown()
        self.assertEqual(breakdown['total_board_feet'], Decimal('0'))
        self.assertEqual(breakdown['total_cost'], Decimal('32.50'))

    def test_share_tokens_are_unique(self):
        first = TestDataFactory.create_project(self.user)
        second = TestDataFactory.create_project(self.user)
        self.assertNotEqual(first.share_token, second.share_token)


class ProjectAPITests(TestCase):
    """Test project endpoints with nested line items"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.lumber = TestDataFactory.create_lumber(self.user, cost_per_board_foot=Decimal('5.00'))
        self.finish = TestDataFactory.create_finish(self.user, price=Decimal('40.00'))
        self.sheet_good = TestDataFactory.create_sheet_good(self.user, price=Decimal('60.00'))
        self.consumable = TestDataFactory.create_consumable(self.user, price=Decimal('10.00'), package_quantity=100)

    def project_payload(self, **overrides):
        data = {
            'name': 'Dining table',
            'description': 'Six seat table',
            'status': 'IN_PROGRESS',
            'price': '900.00',
            'labor_cost': '100.00',
            'misc_cost': '5.00',
            'boards': [
                {'lumber_id': self.lumber.id, 'width': '6', 'thickness': '1', 'length': '2', 'quantity': 3},
            ],
            'project_finishes': [
                {'finish_id': self.finish.id, 'percentage_used': '50'},
            ],
            'project_sheet_goods': [
                {'sheet_good_id': self.sheet_good.id, 'quantity': 2},
            ],
            'project_consumables': [
                {'consumable_id': self.consumable.id, 'quantity': 20},
            ],
        }
        data.update(overrides)
        return data

    def test_create_project_with_line_items(self):
        response = self.client.post('/api/v1/projects/', self.project_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['boards']), 1)
        self.assertEqual(response.data['boards'][0]['lumber']['id'], self.lumber.id)
        self.assertAlmostEqual(response.data['boards'][0]['board_feet'], 8.25)
        self.assertAlmostEqual(response.data['total_board_feet'], 8.25)
        self.assertAlmostEqual(response.data['material_cost'], 41.25)
        self.assertAlmostEqual(response.data['finish_cost'], 20.0)
        self.assertAlmostEqual(response.data['sheet_goods_cost'], 120.0)
        self.assertAlmostEqual(response.data['consumable_cost'], 2.0)
        self.assertAlmostEqual(response.data['total_cost'], 288.25)
        self.assertIn('share_token', response.data)

    def test_create_defaults(self):
        response = self.client.post('/api/v1/projects/', {'name': 'Stool'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'PLANNED')
        self.assertEqual(response.data['measurement_unit'], 'inches')
        self.assertEqual(response.data['boards'], [])

    def test_create_with_foreign_lumber_fails(self):
        foreign_lumber = TestDataFactory.create_lumber(self.other)
        payload = self.project_payload(boards=[
            {'lumber_id': foreign_lumber.id, 'width': '6', 'thickness': '1', 'length': '2', 'quantity': 1},
        ])
        response = self.client.post('/api/v1/projects/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('boards', response.data)
        self.assertFalse(Project.objects.filter(name='Dining table').exists())

    def test_invalid_dimensions_and_percentage(self):
        payload = self.project_payload(
            boards=[{'lumber_id': self.lumber.id, 'width': '0', 'thickness': '1', 'length': '2', 'quantity': 1}],
            project_finishes=[{'finish_id': self.finish.id, 'percentage_used': '150'}],
        )
        response = self.client.post('/api/v1/projects/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('boards', response.data)
        self.assertIn('project_finishes', response.data)

    def test_zero_quantity_rejected(self):
        payload = self.project_payload(project_sheet_goods=[{'sheet_good_id': self.sheet_good.id, 'quantity': 0}])
        response = self.client.post('/api/v1/projects/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_replaces_present_lists_only(self):
        created = self.client.post('/api/v1/projects/', self.project_payload(), format='json')
        project_id = created.data['id']
        new_lumber = TestDataFactory.create_lumber(self.user, cost_per_board_foot=Decimal('10.00'))

        response = self.client.patch(f'/api/v1/projects/{project_id}/', {
            'boards': [
                {'lumber_id': new_lumber.id, 'width': '4', 'thickness': '2', 'length': '1', 'quantity': 1},
                {'lumber_id': new_lumber.id, 'width': '4', 'thickness': '2', 'length': '1', 'quantity': 1},
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Board.objects.filter(project_id=project_id).count(), 2)
        self.assertFalse(Board.objects.filter(project_id=project_id, lumber=self.lumber).exists())
        # Lists that were not sent stay as they were
        self.assertEqual(ProjectFinish.objects.filter(project_id=project_id).count(), 1)
        self.assertEqual(len(response.data['project_sheet_goods']), 1)

    def test_update_with_empty_list_clears_rows(self):
        created = self.client.post('/api/v1/projects/', self.project_payload(), format='json')
        response = self.client.patch(f"/api/v1/projects/{created.data['id']}/", {'project_finishes': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['project_finishes'], [])
        self.assertAlmostEqual(response.data['finish_cost'], 0.0)

    def test_partial_update_requires_complete_rows(self):
        created = self.client.post('/api/v1/projects/', self.project_payload(), format='json')
        response = self.client.patch(f"/api/v1/projects/{created.data['id']}/", {
            'boards': [{'width': '4', 'thickness': '2', 'length': '1'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('boards', response.data)
        self.assertEqual(Board.objects.filter(project_id=created.data['id']).count(), 1)

    def test_list_orders_by_status_then_recent(self):
        completed = TestDataFactory.create_project(self.user, status='COMPLETED')
        in_progress = TestDataFactory.create_project(self.user, status='IN_PROGRESS')
        quote = TestDataFactory.create_project(self.user, status='PRICE')
        planned_old = TestDataFactory.create_project(self.user, status='PLANNED')
        planned_new = TestDataFactory.create_project(self.user, status='PLANNED')
        TestDataFactory.create_project(self.other, status='PRICE')

        response = self.client.get('/api/v1/projects/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [row['id'] for row in response.data],
            [quote.id, planned_new.id, planned_old.id, in_progress.id, completed.id],
        )

    def test_foreign_project_forbidden(self):
        foreign = TestDataFactory.create_project(self.other)
        self.assertEqual(self.client.get(f'/api/v1/projects/{foreign.id}/').status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get('/api/v1/projects/999999/').status_code, status.HTTP_404_NOT_FOUND)

    def test_soft_delete_restore_and_hard_delete(self):
        project = TestDataFactory.create_project(self.user)
        TestDataFactory.create_board(project, self.lumber)

        response = self.client.delete(f'/api/v1/projects/{project.id}/')
        self.assertTrue(response.data['is_deleted'])
        self.assertEqual(self.client.get('/api/v1/projects/').data, [])

        response = self.client.post(f'/api/v1/projects/{project.id}/restore/')
        self.assertFalse(response.data['is_deleted'])

        response = self.client.delete(f'/api/v1/projects/{project.id}/hard-delete/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Board.objects.filter(project_id=project.id).exists())

        # Lumber is free to be removed once no board uses it
        response = self.client.delete(f'/api/v1/lumber/{self.lumber.id}/hard-delete/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Lumber.objects.filter(pk=self.lumber.id).exists())


class SharedProjectTests(TestCase):
    """Test the public share link"""

    def setUp(self):
        self.user = TestDataFactory.create_user(first_name='Ana', last_name='Mora')
        self.client = APIClient()
        self.project = TestDataFactory.create_project(self.user, name='Bookshelf', labor_cost=Decimal('50.00'))
        TestDataFactory.create_board(self.project, TestDataFactory.create_lumber(self.user, cost_per_board_foot=Decimal('5.00')))

    def test_shared_project_is_public(self):
        response = self.client.get(f'/api/v1/shared/projects/{self.project.share_token}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Bookshelf')
        self.assertEqual(response.data['created_by'], 'Ana Mora')
        self.assertEqual(response.data['currency'], 'USD')
        self.assertAlmostEqual(response.data['total_cost'], 63.75)
        self.assertNotIn('user', response.data)
        self.assertNotIn('is_deleted', response.data)

    def test_currency_follows_owner_settings(self):
        TestDataFactory.create_settings(self.user, currency='CRC')
        response = self.client.get(f'/api/v1/shared/projects/{self.project.share_token}/')
        self.assertEqual(response.data['currency'], 'CRC')

    def test_created_by_unknown_without_names(self):
        anonymous = TestDataFactory.create_user(first_name='', last_name='')
        project = TestDataFactory.create_project(anonymous)
        response = self.client.get(f'/api/v1/shared/projects/{project.share_token}/')
        self.assertEqual(response.data['created_by'], 'Unknown')

    def test_deleted_project_not_shared(self):
        self.project.soft_delete()
        response = self.client.get(f'/api/v1/shared/projects/{self.project.share_token}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unknown_token(self):
        response = self.client.get(f'/api/v1/shared/projects/{uuid.uuid4()}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class CutListTests(TestCase):
    """Test cut list endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.project = TestDataFactory.create_project(self.user)

    def test_create_cut_list_item(self):
        response = self.client.post(f'/api/v1/projects/{self.project.id}/cut-lists/', {
            'width': '3.5', 'thickness': '0.75', 'length': '30', 'quantity': 4, 'description': 'Legs',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['project'], self.project.id)
        self.assertFalse(response.data['is_completed'])

    def test_create_rejects_zero_length(self):
        response = self.client.post(f'/api/v1/projects/{self.project.id}/cut-lists/', {
            'width': '3.5', 'thickness': '0.75', 'length': '0', 'quantity': 1,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('length', response.data)

    def test_list_incomplete_first(self):
        done = TestDataFactory.create_cut_list(self.project, is_completed=True)
        older = TestDataFactory.create_cut_list(self.project)
        newer = TestDataFactory.create_cut_list(self.project)
        response = self.client.get(f'/api/v1/projects/{self.project.id}/cut-lists/')
        self.assertEqual([row['id'] for row in response.data], [newer.id, older.id, done.id])

    def test_toggle_complete(self):
        item = TestDataFactory.create_cut_list(self.project)
        response = self.client.post(f'/api/v1/cut-lists/{item.id}/toggle-complete/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_completed'])
        response = self.client.post(f'/api/v1/cut-lists/{item.id}/toggle-complete/')
        self.assertFalse(response.data['is_completed'])

    def test_update_and_delete(self):
        item = TestDataFactory.create_cut_list(self.project)
        response = self.client.patch(f'/api/v1/cut-lists/{item.id}/', {'quantity': 6}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quantity'], 6)

        response = self.client.delete(f'/api/v1/cut-lists/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(CutList.objects.filter(pk=item.id).exists())

    def test_foreign_project_cut_lists(self):
        foreign_project = TestDataFactory.create_project(self.other)
        foreign_item = TestDataFactory.create_cut_list(foreign_project)
        self.assertEqual(self.client.get(f'/api/v1/projects/{foreign_project.id}/cut-lists/').status_code,
                         status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.post(f'/api/v1/cut-lists/{foreign_item.id}/toggle-complete/').status_code,
                         status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get('/api/v1/cut-lists/999999/').status_code, status.HTTP_404_NOT_FOUND)


class ProjectAdminTests(TestCase):
    """Test the project changelist in the Django admin"""

    def setUp(self):
        self.admin_user = TestDataFactory.create_user(is_staff=True)
        self.admin_user.is_superuser = True
        self.admin_user.save()
        self.client.force_login(self.admin_user)
        self.owner = TestDataFactory.create_user()
        self.lumber = TestDataFactory.create_lumber(self.owner, cost_per_board_foot=Decimal('10.00'))
        self.finish = TestDataFactory.create_finish(self.owner, price=Decimal('40.00'))

    def _create_priced_project(self, name):
        project = TestDataFactory.create_project(self.owner, name=name, labor_cost=Decimal('0'), misc_cost=Decimal('0'))
        TestDataFactory.create_board(project, self.lumber)
        TestDataFactory.create_project_finish(project, self.finish, percentage_used=Decimal('50'))
        return project

    def _changelist_query_count(self):
        with CaptureQueriesContext(connection) as queries:
            response = self.client.get('/admin/projects/project/')
        self.assertEqual(response.status_code, 200)
        return response, len(queries)

    def test_changelist_shows_total_cost(self):
        self._create_priced_project('Stool')
        response, _ = self._changelist_query_count()
        # 2.75 bf at 10.00 plus half of a 40.00 finish
        self.assertContains(response, '47.50')

    def test_changelist_queries_do_not_grow_with_projects(self):
        self._create_priced_project('Stool')
        self._changelist_query_count()
        _, single = self._changelist_query_count()
        for index in range(3):
            self._create_priced_project(f'Chair {index}')
        _, several = self._changelist_query_count()
        self.assertEqual(single, several)
