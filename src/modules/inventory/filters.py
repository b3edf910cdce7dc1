import django_filters

from modules.inventory.models import InventoryItem
from modules.inventory.repositories.django_repository import path_contains


class InventoryItemFilter(django_filters.FilterSet):
    category = django_filters.CharFilter(method="filter_category")
    search = django_filters.CharFilter(field_name="description", lookup_expr="icontains")
    min_quantity = django_filters.NumberFilter(field_name="quantity", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    in_stock = django_filters.BooleanFilter(method="filter_in_stock")

    class Meta:
        model = InventoryItem
        fields = ["category", "search", "min_quantity", "max_price", "in_stock"]

    def filter_category(self, queryset, name, value):
        return queryset.filter(path_contains(value))

    def filter_in_stock(self, queryset, name, value):
        if value:
            return queryset.filter(quantity__gt=0)
        return queryset.filter(quantity=0)
