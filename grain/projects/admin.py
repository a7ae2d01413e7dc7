from django.contrib import admin
from .models import LINE_ITEM_PREFETCH, Project, Board, ProjectFinish, ProjectSheetGood, ProjectConsumable, CutList


class BoardInline(admin.TabularInline):
    model = Board
    extra = 0
    raw_id_fields = ['lumber']


class ProjectFinishInline(admin.TabularInline):
    model = ProjectFinish
    extra = 0
    raw_id_fields = ['finish']


class ProjectSheetGoodInline(admin.TabularInline):
    model = ProjectSheetGood
    extra = 0
    raw_id_fields = ['sheet_good']


class ProjectConsumableInline(admin.TabularInline):
    model = ProjectConsumable
    extra = 0
    raw_id_fields = ['consumable']


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'status', 'price', 'labor_cost', 'get_total_cost', 'is_deleted', 'updated_at']
    list_filter = ['status', 'measurement_unit', 'is_deleted', 'created_at']
    search_fields = ['name', 'description', 'user__username']
    readonly_fields = ['share_token', 'created_at', 'updated_at']
    ordering = ['-updated_at']
    inlines = [BoardInline, ProjectFinishInline, ProjectSheetGoodInline, ProjectConsumableInline]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('user').prefetch_related(*LINE_ITEM_PREFETCH)

    def get_total_cost(self, obj):
        return f"{obj.get_total_cost():.2f}"
    get_total_cost.short_description = 'Total cost'


@admin.register(CutList)
class CutListAdmin(admin.ModelAdmin):
    list_display = ['project', 'description', 'width', 'thickness', 'length', 'quantity', 'is_completed']
    list_filter = ['is_completed', 'created_at']
    search_fields = ['description', 'project__name']
    ordering = ['project', 'is_completed', '-created_at']
