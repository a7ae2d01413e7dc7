import json

import django_filters
from django.db.models import Q

from .models import Lumber, Finish, SheetGood, Consumable, Tool


class SearchFilter(django_filters.FilterSet):
    """Case-insensitive search on name or description"""
    search = django_filters.CharFilter(method='filter_search', label='Search')

    def filter_search(self, queryset, name, value):
        if not value or not value.strip():
            return queryset
        search = value.strip()
        return queryset.filter(Q(name__icontains=search) | Q(description__icontains=search))


class TaggedFilter(SearchFilter):
    tag = django_filters.CharFilter(method='filter_tag', label='Tag')

    def filter_tag(self, queryset, name, value):
        """
        Match a whole tag inside the stored JSON list.

        Tags are serialized as ``["oak", "hardwood"]`` so looking for the
        quoted value matches the complete tag only. SQLite keeps the
        ``ensure_ascii`` escaped text (``"peque\\u00f1o"``), so that form is
        matched as well.
        """
        if not value or not value.strip():
            return queryset
        tag = value.strip().replace('"', '')
        return queryset.filter(Q(tags__icontains=f'"{tag}"') | Q(tags__icontains=json.dumps(tag)))


class LumberFilter(TaggedFilter):
    class Meta:
        model = Lumber
        fields = ['search', 'tag']


class FinishFilter(TaggedFilter):
    class Meta:
        model = Finish
        fields = ['search', 'tag']


class SheetGoodFilter(TaggedFilter):
    material_type = django_filters.CharFilter(field_name='material_type', lookup_expr='iexact')

    class Meta:
        model = SheetGood
        fields = ['search', 'tag', 'material_type']


class ConsumableFilter(TaggedFilter):
    class Meta:
        model = Consumable
        fields = ['search', 'tag']


class ToolFilter(SearchFilter):
    class Meta:
        model = Tool
        fields = ['search']
