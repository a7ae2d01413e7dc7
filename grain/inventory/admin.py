from django.contrib import admin
from .models import Lumber, Finish, SheetGood, Consumable, Tool


@admin.register(Lumber)
class LumberAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'janka_rating', 'cost_per_board_foot', 'is_deleted', 'created_at']
    list_filter = ['is_deleted', 'created_at']
    search_fields = ['name', 'description', 'user__username']
    ordering = ['name']


@admin.register(Finish)
class FinishAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'price', 'is_deleted', 'created_at']
    list_filter = ['is_deleted', 'created_at']
    search_fields = ['name', 'description', 'user__username']
    ordering = ['name']


@admin.register(SheetGood)
class SheetGoodAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'material_type', 'width', 'length', 'thickness', 'price', 'is_deleted']
    list_filter = ['material_type', 'is_deleted']
    search_fields = ['name', 'description', 'material_type', 'user__username']
    ordering = ['name']


@admin.register(Consumable)
class ConsumableAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'package_quantity', 'price', 'unit_price', 'is_deleted']
    list_filter = ['is_deleted', 'created_at']
    search_fields = ['name', 'description', 'user__username']
    ordering = ['name']


@admin.register(Tool)
class ToolAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'function', 'price', 'serial_number', 'is_deleted']
    list_filter = ['is_deleted', 'created_at']
    search_fields = ['name', 'function', 'serial_number', 'user__username']
    ordering = ['name']
