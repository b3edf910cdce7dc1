"""Sale API views.

Exposes ``SaleService`` via HTTP using a DRF ViewSet.  Each lifecycle
step is a dedicated ``POST`` action; domain errors propagate to
``api_exception_handler``.
"""

from __future__ import annotations

from typing import List

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import ValidationError
from modules.inventory.repositories.django_repository import (
    InventoryItemDjangoRepository,
)
from modules.sales.dtos import AddLineItemDTO, CreateSaleDTO
from modules.sales.models import Sale
from modules.sales.repositories.django_repository import SaleDjangoRepository
from modules.sales.serializers import (
    AddLineItemSerializer,
    CreateSaleSerializer,
    SaleListSerializer,
    SaleSerializer,
    ShippingValueSerializer,
)
from modules.sales.services import SaleService
from shared.domain.identity import Identity


class SaleViewSet(GenericViewSet):
    """ViewSet for Sale operations.

    Uses ``SaleService`` with injected repositories (DIP).  Does **not**
    extend ``ModelViewSet``: all ORM access goes through the
    service/repository layer.
    """

    queryset = Sale.objects.none()
    serializer_class = SaleSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = SaleService(
            sale_repository=SaleDjangoRepository(),
            item_repository=InventoryItemDjangoRepository(),
        )

    def _identity(self, request: Request) -> Identity:
        return Identity.from_user(request.user)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/sales/"""
        serializer = CreateSaleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = CreateSaleDTO(**serializer.validated_data)

        sale = self._service.create_sale(dto, self._identity(request))
        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/sales/?status=...&page=N&page_size=M

        ``status`` may be repeated or comma-separated.
        """
        page = self._service.list_sales(
            self._identity(request),
            statuses=_status_filter(request),
            page=_int_param(request, "page", 1),
            page_size=_int_param(request, "page_size", None),
        )
        return Response(
            {
                "count": page.count,
                "page": page.page,
                "page_size": page.page_size,
                "num_pages": page.num_pages,
                "results": SaleListSerializer(page.results, many=True).data,
            }
        )

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/sales/{pk}/"""
        sale = self._service.get_sale(pk, self._identity(request))
        return Response(SaleSerializer(sale).data)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"], url_path="items")
    def add_item(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/sales/{pk}/items/"""
        serializer = AddLineItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = AddLineItemDTO(**serializer.validated_data)

        sale = self._service.add_line_item(pk, dto, self._identity(request))
        return Response(SaleSerializer(sale).data)

    @action(detail=True, methods=["post"], url_path="confirm-payment")
    def confirm_payment(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/sales/{pk}/confirm-payment/"""
        sale = self._service.confirm_payment(pk, self._identity(request))
        return Response(SaleSerializer(sale).data)

    @action(detail=True, methods=["post"], url_path="shipping-value")
    def shipping_value(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/sales/{pk}/shipping-value/"""
        serializer = ShippingValueSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        sale = self._service.set_shipping_value(
            pk, self._identity(request), serializer.validated_data["shipping_value"]
        )
        return Response(SaleSerializer(sale).data)

    @action(detail=True, methods=["post"], url_path="confirm-shipping-payment")
    def confirm_shipping_payment(
        self, request: Request, pk: str | None = None
    ) -> Response:
        """POST /api/v1/sales/{pk}/confirm-shipping-payment/"""
        sale = self._service.confirm_shipping_payment(pk, self._identity(request))
        return Response(SaleSerializer(sale).data)

    @action(detail=True, methods=["post"], url_path="confirm-shipping-date")
    def confirm_shipping_date(
        self, request: Request, pk: str | None = None
    ) -> Response:
        """POST /api/v1/sales/{pk}/confirm-shipping-date/"""
        sale = self._service.confirm_shipping_date(pk, self._identity(request))
        return Response(SaleSerializer(sale).data)


def _status_filter(request: Request) -> List[str]:
    statuses: List[str] = []
    for raw in request.query_params.getlist("status"):
        statuses.extend(value.strip() for value in raw.split(",") if value.strip())
    return statuses


def _int_param(request: Request, name: str, default):
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer.", field=name) from None
