"""
Test suite for the inventory module
Tests: CRUD for every inventory type, ownership, soft delete, restore, hard delete, filters, seeding
"""
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from rest_framework import status

from grain.core.models import AuditLog
from grain.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from grain.inventory.models import Lumber, Finish, SheetGood, Consumable, Tool


class InventoryModelTests(TestCase):
    """Test inventory model helpers"""

    def setUp(self):
        self.user = TestDataFactory.create_user()

    def test_consumable_unit_price(self):
        consumable = TestDataFactory.create_consumable(self.user, price=Decimal('12.00'), package_quantity=48)
        self.assertEqual(consumable.unit_price, Decimal('0.25'))

    def test_str_uses_name(self):
        lumber = TestDataFactory.create_lumber(self.user, name='Walnut')
        self.assertEqual(str(lumber), 'Walnut')

    def test_soft_delete_and_restore(self):
        tool = TestDataFactory.create_tool(self.user)
        tool.soft_delete()
        self.assertTrue(Tool.objects.get(pk=tool.pk).is_deleted)
        tool.restore()
        self.assertFalse(Tool.objects.get(pk=tool.pk).is_deleted)


class LumberAPITests(TestCase):
    """Test the lumber endpoints, which share their behaviour with every inventory type"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_lumber(self):
        data = {
            'name': 'Cedro',
            'description': 'Spanish cedar',
            'janka_rating': '600',
            'cost_per_board_foot': '4.50',
            'tags': [' softwood ', 'aromatic', 'Softwood', ''],
        }
        response = self.client.post('/api/v1/lumber/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Cedro')
        self.assertEqual(response.data['tags'], ['softwood', 'aromatic'])
        self.assertEqual(response.data['user'], self.user.id)
        self.assertFalse(response.data['is_deleted'])
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Lumber').exists())

    def test_create_requires_name_and_cost(self):
        response = self.client.post('/api/v1/lumber/', {'description': 'missing fields'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data)
        self.assertIn('cost_per_board_foot', response.data)

    def test_negative_cost_rejected(self):
        response = self.client.post('/api/v1/lumber/', {'name': 'Pine', 'cost_per_board_foot': '-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_only_own_rows_newest_first(self):
        first = TestDataFactory.create_lumber(self.user, name='Oak')
        second = TestDataFactory.create_lumber(self.user, name='Ash')
        TestDataFactory.create_lumber(self.other, name='Foreign')
        response = self.client.get('/api/v1/lumber/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['id'] for row in response.data], [second.id, first.id])

    def test_list_excludes_deleted_unless_requested(self):
        kept = TestDataFactory.create_lumber(self.user)
        deleted = TestDataFactory.create_lumber(self.user)
        deleted.soft_delete()

        response = self.client.get('/api/v1/lumber/')
        self.assertEqual([row['id'] for row in response.data], [kept.id])

        response = self.client.get('/api/v1/lumber/?include_deleted=true')
        self.assertEqual({row['id'] for row in response.data}, {kept.id, deleted.id})

    def test_get_missing_and_foreign(self):
        foreign = TestDataFactory.create_lumber(self.other)
        self.assertEqual(self.client.get('/api/v1/lumber/999999/').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.get(f'/api/v1/lumber/{foreign.id}/').status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.patch(f'/api/v1/lumber/{foreign.id}/', {'name': 'x'}, format='json').status_code,
                         status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.delete(f'/api/v1/lumber/{foreign.id}/').status_code, status.HTTP_403_FORBIDDEN)

    def test_update_lumber(self):
        lumber = TestDataFactory.create_lumber(self.user, name='Oak')
        response = self.client.patch(f'/api/v1/lumber/{lumber.id}/', {'cost_per_board_foot': '7.25'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        lumber.refresh_from_db()
        self.assertEqual(lumber.cost_per_board_foot, Decimal('7.25'))
        self.assertEqual(lumber.name, 'Oak')

    def test_soft_delete_returns_object(self):
        lumber = TestDataFactory.create_lumber(self.user)
        response = self.client.delete(f'/api/v1/lumber/{lumber.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_deleted'])
        self.assertTrue(Lumber.objects.get(pk=lumber.id).is_deleted)

    def test_restore(self):
        lumber = TestDataFactory.create_lumber(self.user)
        lumber.soft_delete()
        response = self.client.post(f'/api/v1/lumber/{lumber.id}/restore/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_deleted'])

    def test_hard_delete(self):
        lumber = TestDataFactory.create_lumber(self.user)
        response = self.client.delete(f'/api/v1/lumber/{lumber.id}/hard-delete/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Lumber.objects.filter(pk=lumber.id).exists())

    def test_hard_delete_refused_while_used_by_project(self):
        lumber = TestDataFactory.create_lumber(self.user)
        project = TestDataFactory.create_project(self.user)
        TestDataFactory.create_board(project, lumber)
        response = self.client.delete(f'/api/v1/lumber/{lumber.id}/hard-delete/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)
        self.assertTrue(Lumber.objects.filter(pk=lumber.id).exists())

    def test_hard_delete_foreign_row(self):
        foreign = TestDataFactory.create_lumber(self.other)
        response = self.client.delete(f'/api/v1/lumber/{foreign.id}/hard-delete/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Lumber.objects.filter(pk=foreign.id).exists())

    def test_requires_authentication(self):
        self.client.logout()
        self.assertEqual(self.client.get('/api/v1/lumber/').status_code, status.HTTP_401_UNAUTHORIZED)


class InventoryFilterTests(TestCase):
    """Test search, tag and material type filters"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_search_name_and_description(self):
        walnut = TestDataFactory.create_lumber(self.user, name='Black Walnut')
        oak = TestDataFactory.create_lumber(self.user, name='Oak')
        oak.description = 'Pairs well with walnut trim'
        oak.save()
        TestDataFactory.create_lumber(self.user, name='Pine')

        response = self.client.get('/api/v1/lumber/?search=WALNUT')
        self.assertEqual({row['id'] for row in response.data}, {walnut.id, oak.id})

    def test_tag_matches_whole_tag(self):
        hard = TestDataFactory.create_lumber(self.user, tags=['hardwood', 'local'])
        TestDataFactory.create_lumber(self.user, tags=['hardwoods'])
        response = self.client.get('/api/v1/lumber/?tag=hardwood')
        self.assertEqual([row['id'] for row in response.data], [hard.id])

    def test_tag_with_accented_characters(self):
        small = TestDataFactory.create_lumber(self.user, tags=['pequeño', 'cenízaro'])
        oak = TestDataFactory.create_lumber(self.user, tags=['oak'])

        response = self.client.get('/api/v1/lumber/', {'tag': 'pequeño'})
        self.assertEqual([row['id'] for row in response.data], [small.id])

        response = self.client.get('/api/v1/lumber/', {'tag': 'cenízaro'})
        self.assertEqual([row['id'] for row in response.data], [small.id])

        response = self.client.get('/api/v1/lumber/', {'tag': 'oak'})
        self.assertEqual([row['id'] for row in response.data], [oak.id])

    def test_sheet_good_material_type(self):
        plywood = TestDataFactory.create_sheet_good(self.user, material_type='Plywood')
        TestDataFactory.create_sheet_good(self.user, material_type='MDF')
        response = self.client.get('/api/v1/sheet-goods/?material_type=plywood')
        self.assertEqual([row['id'] for row in response.data], [plywood.id])

    def test_tool_search(self):
        saw = TestDataFactory.create_tool(self.user, name='Table saw')
        TestDataFactory.create_tool(self.user, name='Router')
        response = self.client.get('/api/v1/tools/?search=saw')
        self.assertEqual([row['id'] for row in response.data], [saw.id])


class OtherInventoryAPITests(TestCase):
    """Test fields specific to finishes, sheet goods, consumables and tools"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_finish_with_image(self):
        response = self.client.post('/api/v1/finishes/', {
            'name': 'Danish oil',
            'price': '32.00',
            'store_link': 'https://example.com/danish-oil',
            'image_data': TestDataFactory.image_data_url(),
            'tags': ['oil'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Finish.objects.get(pk=response.data['id']).tags, ['oil'])

    def test_finish_rejects_bad_image(self):
        response = self.client.post('/api/v1/finishes/', {
            'name': 'Varnish',
            'price': '20.00',
            'image_data': 'data:image/png;base64,aGVsbG8=',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('image_data', response.data)

    def test_create_sheet_good(self):
        response = self.client.post('/api/v1/sheet-goods/', {
            'name': 'Baltic birch',
            'width': '48',
            'length': '96',
            'thickness': '0.75',
            'price': '85.00',
            'material_type': 'Plywood',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(SheetGood.objects.filter(name='Baltic birch', user=self.user).exists())

    def test_consumable_unit_price_in_response(self):
        response = self.client.post('/api/v1/consumables/', {
            'name': 'Wood screws',
            'price': '15.00',
            'package_quantity': 100,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertAlmostEqual(response.data['unit_price'], 0.15)

    def test_consumable_package_quantity_must_be_positive(self):
        response = self.client.post('/api/v1/consumables/', {
            'name': 'Glue',
            'price': '8.00',
            'package_quantity': 0,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('package_quantity', response.data)

    def test_create_tool(self):
        response = self.client.post('/api/v1/tools/', {
            'name': 'Jointer',
            'function': 'Flattening',
            'price': '450.00',
            'serial_number': 'JN-001',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Consumable.objects.count(), 0)
        self.assertEqual(Tool.objects.get(pk=response.data['id']).serial_number, 'JN-001')

    def test_tool_image_with_oversized_canvas_is_rejected(self):
        response = self.client.post('/api/v1/tools/', {
            'name': 'Bandsaw',
            'function': 'Resawing',
            'price': '900.00',
            'image_data': TestDataFactory.oversized_png_data_url(),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('image_data', response.data)
        self.assertFalse(Tool.objects.filter(name='Bandsaw').exists())


class AddLumberSpeciesCommandTests(TestCase):
    """Test the seeding management command"""

    def setUp(self):
        self.user = TestDataFactory.create_user(username='seeded')

    def test_seeds_species_once(self):
        call_command('add_lumber_species', username='seeded', stdout=StringIO())
        count = Lumber.objects.filter(user=self.user).count()
        self.assertGreater(count, 0)

        call_command('add_lumber_species', username='seeded', stdout=StringIO())
        self.assertEqual(Lumber.objects.filter(user=self.user).count(), count)

    def test_clear_keeps_rows_used_by_projects(self):
        used = TestDataFactory.create_lumber(self.user, name='Used')
        unused = TestDataFactory.create_lumber(self.user, name='Unused')
        TestDataFactory.create_board(TestDataFactory.create_project(self.user), used)

        call_command('add_lumber_species', username='seeded', clear=True, stdout=StringIO())
        self.assertTrue(Lumber.objects.filter(pk=used.pk).exists())
        self.assertFalse(Lumber.objects.filter(pk=unused.pk).exists())

    def test_unknown_user(self):
        with self.assertRaises(CommandError):
            call_command('add_lumber_species', username='nobody', stdout=StringIO())
