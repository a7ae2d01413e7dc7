import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

from grain.core.models import SoftDeleteModel
from . import costing

# Related lookups needed to compute a project's cost breakdown
LINE_ITEM_PREFETCH = [
    'boards__lumber',
    'project_finishes__finish',
    'project_sheet_goods__sheet_good',
    'project_consumables__consumable',
]


class Project(SoftDeleteModel):
    """A piece of work: its status, prices and the materials it consumes"""
    STATUS_CHOICES = [
        ('PRICE', 'Price quote'),
        ('PLANNED', 'Planned'),
        ('IN_PROGRESS', 'In progress'),
        ('FINISHING', 'Finishing'),
        ('COMPLETED', 'Completed'),
    ]

    MEASUREMENT_UNIT_CHOICES = [
        ('inches', 'Inches'),
        ('cm', 'Centimeters'),
        ('mm', 'Millimeters'),
    ]

    # Statuses that do not count as active work on the dashboard
    INACTIVE_STATUSES = ['COMPLETED', 'PRICE']

    name = models.CharField(max_length=200, db_index=True)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='PLANNED', db_index=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(0)], help_text="Sale price")
    labor_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(0)])
    misc_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(0)])
    additional_notes = models.TextField(blank=True)
    measurement_unit = models.CharField(max_length=10, choices=MEASUREMENT_UNIT_CHOICES, default='inches')
    share_token = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)

    def cost_breakdown(self):
        return costing.project_costs(self)

    def get_total_cost(self):
        return self.cost_breakdown()['total_cost']

    class Meta:
        db_table = 'projects'
        indexes = [
            models.Index(fields=['user', 'is_deleted'], name='idx_project_user_deleted'),
            models.Index(fields=['status', '-updated_at'], name='idx_project_status'),
        ]


class Board(models.Model):
    """Boards of a lumber species used by a project; length in varas"""
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='boards')
    lumber = models.ForeignKey('inventory.Lumber', on_delete=models.PROTECT, related_name='boards')
    width = models.DecimalField(max_digits=10, decimal_places=3, validators=[MinValueValidator(0)])
    thickness = models.DecimalField(max_digits=10, decimal_places=3, validators=[MinValueValidator(0)])
    length = models.DecimalField(max_digits=10, decimal_places=3, validators=[MinValueValidator(0)])
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def board_feet(self):
        return costing.board_feet(self.width, self.thickness, self.length, self.quantity)

    def __str__(self):
        return f"{self.quantity} x {self.lumber} for {self.project}"

    class Meta:
        db_table = 'boards'
        ordering = ['id']


class ProjectFinish(models.Model):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='project_finishes')
    finish = models.ForeignKey('inventory.Finish', on_delete=models.PROTECT, related_name='project_finishes')
    percentage_used = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal('100.00'),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )

    @property
    def cost(self):
        return costing.finish_cost(self.finish.price, self.percentage_used)

    def __str__(self):
        return f"{self.finish} ({self.percentage_used}%) for {self.project}"

    class Meta:
        db_table = 'project_finishes'
        ordering = ['id']


class ProjectSheetGood(models.Model):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='project_sheet_goods')
    sheet_good = models.ForeignKey('inventory.SheetGood', on_delete=models.PROTECT, related_name='project_sheet_goods')
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])

    @property
    def cost(self):
        return costing.to_decimal(self.sheet_good.price) * self.quantity

    def __str__(self):
        return f"{self.quantity} x {self.sheet_good} for {self.project}"

    class Meta:
        db_table = 'project_sheet_goods'
        ordering = ['id']


class ProjectConsumable(models.Model):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='project_consumables')
    consumable = models.ForeignKey('inventory.Consumable', on_delete=models.PROTECT, related_name='project_consumables')
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])

    @property
    def cost(self):
        return self.consumable.unit_price * self.quantity

    def __str__(self):
        return f"{self.quantity} x {self.consumable} for {self.project}"

    class Meta:
        db_table = 'project_consumables'
        ordering = ['id']


class CutList(models.Model):
    """A piece to cut for a project, in the project's measurement unit"""
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='cut_lists')
    width = models.DecimalField(max_digits=10, decimal_places=3, validators=[MinValueValidator(0)])
    thickness = models.DecimalField(max_digits=10, decimal_places=3, validators=[MinValueValidator(0)])
    length = models.DecimalField(max_digits=10, decimal_places=3, validators=[MinValueValidator(0)])
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    description = models.CharField(max_length=255, blank=True)
    is_completed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.description or f"CutList-{self.pk}"

    class Meta:
        db_table = 'cut_lists'
        ordering = ['is_completed', '-created_at']
