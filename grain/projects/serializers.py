from django.db import transaction
from rest_framework import serializers

from grain.core.models import UserSettings
from grain.inventory.models import Lumber, Finish, SheetGood, Consumable
from grain.inventory.serializers import LumberSerializer, FinishSerializer, SheetGoodSerializer, ConsumableSerializer
from grain.reports.cache import invalidate_dashboard_stats
from grain.reports.signals import suspend_cache_signals
from .models import Project, Board, ProjectFinish, ProjectSheetGood, ProjectConsumable, CutList


def validate_positive(value):
    if value is not None and value <= 0:
        raise serializers.ValidationError('Must be greater than 0.')
    return value


class OwnedInventoryField(serializers.PrimaryKeyRelatedField):
    """Primary key of an inventory row that belongs to the requesting user"""

    def get_queryset(self):
        queryset = super().get_queryset()
        request = self.context.get('request')
        if request is None or not request.user.is_authenticated:
            return queryset.none()
        return queryset.filter(user=request.user)


class BoardSerializer(serializers.ModelSerializer):
    lumber = LumberSerializer(read_only=True)
    lumber_id = OwnedInventoryField(queryset=Lumber.objects.all(), source='lumber', write_only=True)
    width = serializers.DecimalField(max_digits=10, decimal_places=3, validators=[validate_positive])
    thickness = serializers.DecimalField(max_digits=10, decimal_places=3, validators=[validate_positive])
    length = serializers.DecimalField(max_digits=10, decimal_places=3, validators=[validate_positive])
    board_feet = serializers.SerializerMethodField()

    class Meta:
        model = Board
        fields = ['id', 'lumber', 'lumber_id', 'width', 'thickness', 'length', 'quantity', 'board_feet']

    def get_board_feet(self, obj):
        return float(obj.board_feet)


class ProjectFinishSerializer(serializers.ModelSerializer):
    finish = FinishSerializer(read_only=True)
    finish_id = OwnedInventoryField(queryset=Finish.objects.all(), source='finish', write_only=True)
    cost = serializers.SerializerMethodField()

    class Meta:
        model = ProjectFinish
        fields = ['id', 'finish', 'finish_id', 'percentage_used', 'cost']

    def get_cost(self, obj):
        return float(obj.cost)


class ProjectSheetGoodSerializer(serializers.ModelSerializer):
    sheet_good = SheetGoodSerializer(read_only=True)
    sheet_good_id = OwnedInventoryField(queryset=SheetGood.objects.all(), source='sheet_good', write_only=True)
    cost = serializers.SerializerMethodField()

    class Meta:
        model = ProjectSheetGood
        fields = ['id', 'sheet_good', 'sheet_good_id', 'quantity', 'cost']

    def get_cost(self, obj):
        return float(obj.cost)


class ProjectConsumableSerializer(serializers.ModelSerializer):
    consumable = ConsumableSerializer(read_only=True)
    consumable_id = OwnedInventoryField(queryset=Consumable.objects.all(), source='consumable', write_only=True)
    cost = serializers.SerializerMethodField()

    class Meta:
        model = ProjectConsumable
        fields = ['id', 'consumable', 'consumable_id', 'quantity', 'cost']

    def get_cost(self, obj):
        return float(obj.cost)


# Nested list field name -> line item model
LINE_ITEMS = {
    'boards': Board,
    'project_finishes': ProjectFinish,
    'project_sheet_goods': ProjectSheetGood,
    'project_consumables': ProjectConsumable,
}

LINE_ITEM_REQUIRED_FIELDS = {
    'boards': ['lumber', 'width', 'thickness', 'length'],
    'project_finishes': ['finish'],
    'project_sheet_goods': ['sheet_good'],
    'project_consumables': ['consumable'],
}

INVENTORY_REFERENCES = {'lumber', 'finish', 'sheet_good', 'consumable'}

COST_FIELDS = ['total_board_feet', 'material_cost', 'finish_cost', 'sheet_goods_cost', 'consumable_cost', 'total_cost']


class ProjectCostMixin(serializers.Serializer):
    """Read-only cost breakdown fields, computed once per project"""
    total_board_feet = serializers.SerializerMethodField()
    material_cost = serializers.SerializerMethodField()
    finish_cost = serializers.SerializerMethodField()
    sheet_goods_cost = serializers.SerializerMethodField()
    consumable_cost = serializers.SerializerMethodField()
    total_cost = serializers.SerializerMethodField()

    def _costs(self, obj):
        if not hasattr(obj, '_cost_breakdown'):
            obj._cost_breakdown = obj.cost_breakdown()
        return obj._cost_breakdown

    def get_total_board_feet(self, obj):
        return float(self._costs(obj)['total_board_feet'])

    def get_material_cost(self, obj):
        return float(self._costs(obj)['material_cost'])

    def get_finish_cost(self, obj):
        return float(self._costs(obj)['finish_cost'])

    def get_sheet_goods_cost(self, obj):
        return float(self._costs(obj)['sheet_goods_cost'])

    def get_consumable_cost(self, obj):
        return float(self._costs(obj)['consumable_cost'])

    def get_total_cost(self, obj):
        return float(self._costs(obj)['total_cost'])


class ProjectSerializer(ProjectCostMixin, serializers.ModelSerializer):
    user = serializers.PrimaryKeyRelatedField(read_only=True)
    boards = BoardSerializer(many=True, required=False)
    project_finishes = ProjectFinishSerializer(many=True, required=False)
    project_sheet_goods = ProjectSheetGoodSerializer(many=True, required=False)
    project_consumables = ProjectConsumableSerializer(many=True, required=False)

    class Meta:
        model = Project
        fields = ['id', 'user', 'name', 'description', 'status', 'price', 'labor_cost', 'misc_cost',
                  'additional_notes', 'measurement_unit', 'share_token',
                  'boards', 'project_finishes', 'project_sheet_goods', 'project_consumables',
                  *COST_FIELDS, 'is_deleted', 'created_at', 'updated_at']
        read_only_fields = ['user', 'share_token', 'is_deleted', 'created_at', 'updated_at']

    def validate(self, attrs):
        # Partial updates skip missing nested fields, so check the rows explicitly
        errors = {}
        for name, required in LINE_ITEM_REQUIRED_FIELDS.items():
            for index, row in enumerate(attrs.get(name) or []):
                missing = [field for field in required if field not in row]
                if missing:
                    errors.setdefault(name, {})[index] = {
                        f'{field}_id' if field in INVENTORY_REFERENCES else field: ['This field is required.']
                        for field in missing
                    }
        if errors:
            raise serializers.ValidationError(errors)
        return attrs

    def _pop_line_items(self, validated_data):
        """Split nested lists off ``validated_data``; absent lists map to None"""
        return {name: validated_data.pop(name, None) for name in LINE_ITEMS}

    def _write_line_items(self, project, line_items, replace):
        for name, rows in line_items.items():
            if rows is None:
                continue
            model = LINE_ITEMS[name]
            if replace:
                model.objects.filter(project=project).delete()
            model.objects.bulk_create([model(project=project, **row) for row in rows])

    def create(self, validated_data):
        line_items = self._pop_line_items(validated_data)
        with transaction.atomic(), suspend_cache_signals():
            project = super().create(validated_data)
            self._write_line_items(project, line_items, replace=False)
        invalidate_dashboard_stats(project.user_id)
        return project

    def update(self, instance, validated_data):
        line_items = self._pop_line_items(validated_data)
        with transaction.atomic(), suspend_cache_signals():
            instance = super().update(instance, validated_data)
            self._write_line_items(instance, line_items, replace=True)
        invalidate_dashboard_stats(instance.user_id)
        return instance


class SharedProjectSerializer(ProjectCostMixin, serializers.ModelSerializer):
    """Public view of a project: no owner id, no soft-delete flag"""
    boards = BoardSerializer(many=True, read_only=True)
    project_finishes = ProjectFinishSerializer(many=True, read_only=True)
    project_sheet_goods = ProjectSheetGoodSerializer(many=True, read_only=True)
    project_consumables = ProjectConsumableSerializer(many=True, read_only=True)
    created_by = serializers.SerializerMethodField()
    currency = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = ['id', 'name', 'description', 'status', 'price', 'labor_cost', 'misc_cost',
                  'additional_notes', 'measurement_unit',
                  'boards', 'project_finishes', 'project_sheet_goods', 'project_consumables',
                  *COST_FIELDS, 'created_by', 'currency', 'created_at', 'updated_at']

    def get_created_by(self, obj):
        return obj.user.display_name or 'Unknown'

    def get_currency(self, obj):
        settings_obj = UserSettings.objects.filter(user_id=obj.user_id).first()
        return settings_obj.currency if settings_obj else UserSettings.DEFAULT_CURRENCY


class CutListSerializer(serializers.ModelSerializer):
    width = serializers.DecimalField(max_digits=10, decimal_places=3, validators=[validate_positive])
    thickness = serializers.DecimalField(max_digits=10, decimal_places=3, validators=[validate_positive])
    length = serializers.DecimalField(max_digits=10, decimal_places=3, validators=[validate_positive])

    class Meta:
        model = CutList
        fields = ['id', 'project', 'width', 'thickness', 'length', 'quantity', 'description',
                  'is_completed', 'created_at', 'updated_at']
        read_only_fields = ['project', 'created_at', 'updated_at']
