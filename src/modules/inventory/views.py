"""Inventory API views.

Exposes ``InventoryService`` via HTTP using DRF ViewSets.  Domain errors
propagate to ``api_exception_handler``; views only translate the request
into DTOs and the result into serializers.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.inventory.dtos import CreateInventoryItemDTO
from modules.inventory.filters import InventoryItemFilter
from modules.inventory.models import InventoryItem
from modules.inventory.repositories.django_repository import (
    CategoryDjangoRepository,
    InventoryItemDjangoRepository,
)
from modules.inventory.serializers import (
    CategoryPathSerializer,
    CategorySerializer,
    CreateInventoryItemSerializer,
    InventoryItemSerializer,
    SetQuantitySerializer,
    UpdatePriceSerializer,
)
from modules.inventory.services import InventoryService
from shared.domain.identity import Identity


def build_inventory_service() -> InventoryService:
    return InventoryService(
        item_repository=InventoryItemDjangoRepository(),
        category_repository=CategoryDjangoRepository(),
    )


class CategoryViewSet(GenericViewSet):
    """Read-only access to the category taxonomy."""

    serializer_class = CategoryPathSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_inventory_service()

    @action(detail=False, methods=["get"])
    def tree(self, request: Request) -> Response:
        """GET /api/v1/categories/tree/

        Every category, with the caller's items under the category they
        are filed in.
        """
        tree = self._service.category_tree(Identity.from_user(request.user))
        return Response([node.model_dump(mode="json") for node in tree])

    @action(detail=False, methods=["post"], url_path="validate-path")
    def validate_path(self, request: Request) -> Response:
        """POST /api/v1/categories/validate-path/"""
        serializer = CategoryPathSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        chain = self._service.validate_path(serializer.validated_data["path"])
        return Response(
            {"valid": True, "path": CategorySerializer(chain, many=True).data}
        )


class InventoryItemViewSet(GenericViewSet):
    """ViewSet for the caller's inventory items.

    Does **not** extend ``ModelViewSet``: every write goes through
    ``InventoryService``.
    """

    queryset = InventoryItem.objects.none()
    serializer_class = InventoryItemSerializer
    filterset_class = InventoryItemFilter
    ordering_fields = ["created_at", "quantity", "price", "description"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_inventory_service()

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return InventoryItem.objects.none()
        return self._service.list_items(Identity.from_user(self.request.user))

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/items/"""
        serializer = CreateInventoryItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = CreateInventoryItemDTO(**serializer.validated_data)

        item = self._service.create_item(dto, Identity.from_user(request.user))
        return Response(
            InventoryItemSerializer(item).data, status=status.HTTP_201_CREATED
        )

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/items/

        Filters: ``category`` (anywhere in the path), ``search``,
        ``min_quantity``, ``max_price``, ``in_stock``.
        """
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = InventoryItemSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/items/{pk}/"""
        item = self._service.get_item(pk, Identity.from_user(request.user))
        return Response(InventoryItemSerializer(item).data)

    # ------------------------------------------------------------------
    # Price / stock count
    # ------------------------------------------------------------------

    @action(detail=True, methods=["patch"])
    def price(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/items/{pk}/price/"""
        serializer = UpdatePriceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = self._service.update_price(
            pk, serializer.validated_data["price"], Identity.from_user(request.user)
        )
        return Response(InventoryItemSerializer(item).data)

    @action(detail=True, methods=["put"])
    def quantity(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/items/{pk}/quantity/

        Overwrites the stock count (physical recount).
        """
        serializer = SetQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = self._service.set_quantity(
            pk, serializer.validated_data["quantity"], Identity.from_user(request.user)
        )
        return Response(InventoryItemSerializer(item).data)
