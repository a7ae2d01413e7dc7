"""
Test utilities and factories for creating test data
"""
import base64
import io
import random
import string
import struct
import zlib
from decimal import Decimal

from django.contrib.auth import get_user_model
from PIL import Image
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from grain.core.models import UserSettings
from grain.inventory.models import Lumber, Finish, SheetGood, Consumable, Tool
from grain.projects.models import Project, Board, ProjectFinish, ProjectSheetGood, ProjectConsumable, CutList

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='Grain-pass-123', is_staff=False,
                    first_name='Test', last_name='Woodworker'):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            first_name=first_name,
            last_name=last_name,
            has_accepted_terms=True,
        )

    @staticmethod
    def create_settings(user, currency='USD', language='en', theme_mode='light'):
        settings_obj, _ = UserSettings.objects.update_or_create(
            user=user,
            defaults={'currency': currency, 'language': language, 'theme_mode': theme_mode},
        )
        return settings_obj

    @staticmethod
    def create_lumber(user, name=None, cost_per_board_foot=Decimal('5.00'), janka_rating=Decimal('1010'), tags=None):
        """Create a test lumber species"""
        return Lumber.objects.create(
            user=user,
            name=name or f'Lumber_{TestDataFactory.random_string(6)}',
            cost_per_board_foot=cost_per_board_foot,
            janka_rating=janka_rating,
            tags=tags or [],
        )

    @staticmethod
    def create_finish(user, name=None, price=Decimal('40.00'), tags=None):
        """Create a test finish"""
        return Finish.objects.create(
            user=user,
            name=name or f'Finish_{TestDataFactory.random_string(6)}',
            price=price,
            tags=tags or [],
        )

    @staticmethod
    def create_sheet_good(user, name=None, price=Decimal('60.00'), material_type='Plywood', tags=None):
        """Create a test sheet good"""
        return SheetGood.objects.create(
            user=user,
            name=name or f'Sheet_{TestDataFactory.random_string(6)}',
            width=Decimal('48'),
            length=Decimal('96'),
            thickness=Decimal('0.75'),
            price=price,
            material_type=material_type,
            tags=tags or [],
        )

    @staticmethod
    def create_consumable(user, name=None, price=Decimal('10.00'), package_quantity=100, tags=None):
        """Create a test consumable"""
        return Consumable.objects.create(
            user=user,
            name=name or f'Consumable_{TestDataFactory.random_string(6)}',
            price=price,
            package_quantity=package_quantity,
            tags=tags or [],
        )

    @staticmethod
    def create_tool(user, name=None, price=Decimal('250.00'), function='Cutting'):
        """Create a test tool"""
        return Tool.objects.create(
            user=user,
            name=name or f'Tool_{TestDataFactory.random_string(6)}',
            function=function,
            price=price,
        )

    @staticmethod
    def create_project(user, name=None, status='PLANNED', labor_cost=Decimal('0.00'), misc_cost=Decimal('0.00'),
                       price=Decimal('0.00')):
        """Create a test project"""
        return Project.objects.create(
            user=user,
            name=name or f'Project_{TestDataFactory.random_string(6)}',
            status=status,
            labor_cost=labor_cost,
            misc_cost=misc_cost,
            price=price,
        )

    @staticmethod
    def create_board(project, lumber, width=Decimal('6'), thickness=Decimal('1'), length=Decimal('2'), quantity=1):
        """Create a test board; length is in varas"""
        return Board.objects.create(
            project=project,
            lumber=lumber,
            width=width,
            thickness=thickness,
            length=length,
            quantity=quantity,
        )

    @staticmethod
    def create_project_finish(project, finish, percentage_used=Decimal('50')):
        return ProjectFinish.objects.create(project=project, finish=finish, percentage_used=percentage_used)

    @staticmethod
    def create_project_sheet_good(project, sheet_good, quantity=1):
        return ProjectSheetGood.objects.create(project=project, sheet_good=sheet_good, quantity=quantity)

    @staticmethod
    def create_project_consumable(project, consumable, quantity=1):
        return ProjectConsumable.objects.create(project=project, consumable=consumable, quantity=quantity)

    @staticmethod
    def create_cut_list(project, width=Decimal('3'), thickness=Decimal('0.75'), length=Decimal('24'),
                        quantity=2, description='Shelf', is_completed=False):
        """Create a test cut list item"""
        return CutList.objects.create(
            project=project,
            width=width,
            thickness=thickness,
            length=length,
            quantity=quantity,
            description=description,
            is_completed=is_completed,
        )

    @staticmethod
    def image_data_url(size=(4, 4), color='brown', image_format='PNG'):
        """A small base64 data URL image"""
        buffer = io.BytesIO()
        Image.new('RGB', size, color).save(buffer, format=image_format)
        encoded = base64.b64encode(buffer.getvalue()).decode('ascii')
        return f'data:image/{image_format.lower()};base64,{encoded}'

    @staticmethod
    def oversized_png_data_url(width=20000, height=20000):
        """A tiny PNG whose header declares a huge canvas"""
        def chunk(kind, data):
            return struct.pack('>I', len(data)) + kind + data + struct.pack('>I', zlib.crc32(kind + data) & 0xffffffff)

        header = struct.pack('>IIBBBBB', width, height, 8, 2, 0, 0, 0)
        raw = (b'\x89PNG\r\n\x1a\n' + chunk(b'IHDR', header)
               + chunk(b'IDAT', zlib.compress(b'')) + chunk(b'IEND', b''))
        return 'data:image/png;base64,' + base64.b64encode(raw).decode('ascii')


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
