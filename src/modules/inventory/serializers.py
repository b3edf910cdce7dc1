"""Inventory DRF serializers for API input/output.

Input serializers only check the request shape; placement and stock rules
live in ``InventoryService`` and come back as domain errors.
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from modules.inventory.models import InventoryItem

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CategoryPathSerializer(serializers.Serializer):
    path = serializers.ListField(
        child=serializers.CharField(max_length=50), allow_empty=True
    )


class CreateInventoryItemSerializer(serializers.Serializer):
    category_path = serializers.ListField(
        child=serializers.CharField(max_length=50), allow_empty=True
    )
    description = serializers.CharField(max_length=255)
    quantity = serializers.IntegerField(required=False, default=1)
    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, default=Decimal("0.00")
    )


class UpdatePriceSerializer(serializers.Serializer):
    price = serializers.DecimalField(max_digits=10, decimal_places=2)


class SetQuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class CategorySerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    level = serializers.IntegerField(read_only=True)
    is_leaf = serializers.BooleanField(read_only=True)


class InventoryItemSerializer(serializers.ModelSerializer):
    category_path = serializers.ListField(
        source="path", child=serializers.CharField(), read_only=True
    )

    class Meta:
        model = InventoryItem
        fields = [
            "id",
            "description",
            "quantity",
            "price",
            "category_path",
            "category_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
