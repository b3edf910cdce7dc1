"""Sale DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in ``SaleService``, which receives Pydantic DTOs
from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.sales.models import Sale, SaleLineItem, SaleStatusHistory

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateSaleSerializer(serializers.Serializer):
    client_name = serializers.CharField(max_length=255, allow_blank=True)
    phone = serializers.CharField(
        max_length=30, required=False, default="", allow_blank=True
    )
    address = serializers.CharField(
        max_length=500, required=False, default="", allow_blank=True
    )


class AddLineItemSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    quantity = serializers.IntegerField()


class ShippingValueSerializer(serializers.Serializer):
    shipping_value = serializers.DecimalField(max_digits=10, decimal_places=2)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class SaleLineItemSerializer(serializers.ModelSerializer):
    """Line item with the item's description and current price."""

    description = serializers.CharField(source="item.description", read_only=True)
    unit_price = serializers.DecimalField(
        source="item.price", max_digits=10, decimal_places=2, read_only=True
    )
    subtotal = serializers.SerializerMethodField()

    class Meta:
        model = SaleLineItem
        fields = [
            "id",
            "item_id",
            "description",
            "quantity",
            "unit_price",
            "subtotal",
        ]
        read_only_fields = fields

    def get_subtotal(self, obj: SaleLineItem) -> str:
        return f"{obj.quantity * obj.item.price:.2f}"


class StatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = SaleStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "user_id",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class SaleListSerializer(serializers.ModelSerializer):
    """Sale without nested relations, totals included."""

    total_pieces = serializers.IntegerField(read_only=True)
    total_value = serializers.DecimalField(
        max_digits=12, decimal_places=2, read_only=True
    )

    class Meta:
        model = Sale
        fields = [
            "id",
            "client_name",
            "phone",
            "address",
            "status",
            "shipping_value",
            "total_pieces",
            "total_value",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class SaleSerializer(SaleListSerializer):
    """Sale with line items and status history."""

    line_items = SaleLineItemSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta(SaleListSerializer.Meta):
        fields = SaleListSerializer.Meta.fields + ["line_items", "status_history"]
        read_only_fields = fields
