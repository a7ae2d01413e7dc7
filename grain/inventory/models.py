from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from grain.core.models import SoftDeleteModel
from grain.projects.costing import unit_price


class Lumber(SoftDeleteModel):
    """Wood species kept in stock, priced per board foot"""
    name = models.CharField(max_length=200, db_index=True)
    description = models.TextField(blank=True)
    janka_rating = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(0)])
    cost_per_board_foot = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    tags = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = 'lumber'
        verbose_name_plural = 'lumber'
        indexes = [
            models.Index(fields=['user', 'is_deleted'], name='idx_lumber_user_deleted'),
        ]


class Finish(SoftDeleteModel):
    """Oils, varnishes, stains; projects consume a percentage of a container"""
    name = models.CharField(max_length=200, db_index=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    tags = models.JSONField(default=list, blank=True)
    store_link = models.URLField(max_length=500, blank=True, null=True)
    image_data = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'finishes'
        indexes = [
            models.Index(fields=['user', 'is_deleted'], name='idx_finish_user_deleted'),
        ]


class SheetGood(SoftDeleteModel):
    """Plywood, MDF and other sheet stock, priced per sheet"""
    name = models.CharField(max_length=200, db_index=True)
    description = models.TextField(blank=True)
    width = models.DecimalField(max_digits=10, decimal_places=3, validators=[MinValueValidator(0)])
    length = models.DecimalField(max_digits=10, decimal_places=3, validators=[MinValueValidator(0)])
    thickness = models.DecimalField(max_digits=10, decimal_places=3, validators=[MinValueValidator(0)])
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    material_type = models.CharField(max_length=100)
    tags = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = 'sheet_goods'
        indexes = [
            models.Index(fields=['user', 'is_deleted'], name='idx_sheetgood_user_deleted'),
        ]


class Consumable(SoftDeleteModel):
    """Screws, glue, sandpaper: bought by the package, used by the unit"""
    name = models.CharField(max_length=200, db_index=True)
    description = models.TextField(blank=True)
    package_quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    tags = models.JSONField(default=list, blank=True)
    store_link = models.URLField(max_length=500, blank=True, null=True)
    image_data = models.TextField(blank=True, null=True)

    @property
    def unit_price(self):
        return unit_price(self.price, self.package_quantity)

    class Meta:
        db_table = 'consumables'
        indexes = [
            models.Index(fields=['user', 'is_deleted'], name='idx_consumable_user_deleted'),
        ]


class Tool(SoftDeleteModel):
    """Shop tools, tracked for insurance and total shop value"""
    name = models.CharField(max_length=200, db_index=True)
    description = models.TextField(blank=True)
    function = models.CharField(max_length=200)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    serial_number = models.CharField(max_length=100, blank=True, null=True)
    image_data = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'tools'
        indexes = [
            models.Index(fields=['user', 'is_deleted'], name='idx_tool_user_deleted'),
        ]
