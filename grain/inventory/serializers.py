from rest_framework import serializers

from grain.core.validators import normalize_tags, validate_image_data
from .models import Lumber, Finish, SheetGood, Consumable, Tool


class TagListField(serializers.ListField):
    """JSON list of tag strings, normalized on the way in"""
    child = serializers.CharField(max_length=100, allow_blank=True)

    def to_internal_value(self, data):
        return normalize_tags(super().to_internal_value(data))


class InventoryItemSerializer(serializers.ModelSerializer):
    """Common read-only bookkeeping fields for inventory rows"""
    user = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        read_only_fields = ['user', 'is_deleted', 'created_at', 'updated_at']


class LumberSerializer(InventoryItemSerializer):
    tags = TagListField(required=False)

    class Meta(InventoryItemSerializer.Meta):
        model = Lumber
        fields = ['id', 'user', 'name', 'description', 'janka_rating', 'cost_per_board_foot',
                  'tags', 'is_deleted', 'created_at', 'updated_at']


class FinishSerializer(InventoryItemSerializer):
    tags = TagListField(required=False)
    image_data = serializers.CharField(required=False, allow_blank=True, allow_null=True, validators=[validate_image_data])

    class Meta(InventoryItemSerializer.Meta):
        model = Finish
        fields = ['id', 'user', 'name', 'description', 'price', 'tags', 'store_link', 'image_data',
                  'is_deleted', 'created_at', 'updated_at']


class SheetGoodSerializer(InventoryItemSerializer):
    tags = TagListField(required=False)

    class Meta(InventoryItemSerializer.Meta):
        model = SheetGood
        fields = ['id', 'user', 'name', 'description', 'width', 'length', 'thickness', 'price',
                  'material_type', 'tags', 'is_deleted', 'created_at', 'updated_at']


class ConsumableSerializer(InventoryItemSerializer):
    tags = TagListField(required=False)
    image_data = serializers.CharField(required=False, allow_blank=True, allow_null=True, validators=[validate_image_data])
    unit_price = serializers.SerializerMethodField()

    class Meta(InventoryItemSerializer.Meta):
        model = Consumable
        fields = ['id', 'user', 'name', 'description', 'package_quantity', 'price', 'unit_price', 'tags',
                  'store_link', 'image_data', 'is_deleted', 'created_at', 'updated_at']

    def get_unit_price(self, obj):
        """Price of a single item from the package"""
        return float(obj.unit_price)


class ToolSerializer(InventoryItemSerializer):
    image_data = serializers.CharField(required=False, allow_blank=True, allow_null=True, validators=[validate_image_data])

    class Meta(InventoryItemSerializer.Meta):
        model = Tool
        fields = ['id', 'user', 'name', 'description', 'function', 'price', 'serial_number', 'image_data',
                  'is_deleted', 'created_at', 'updated_at']
