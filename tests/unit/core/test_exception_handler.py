"""Unit tests for the domain error taxonomy and api_exception_handler."""

import pytest
from django.db import OperationalError
from pydantic import BaseModel, ValidationError as PydanticValidationError
from rest_framework.exceptions import NotAuthenticated, ValidationError as DRFValidationError

from modules.core.exceptions import (
    ConflictError,
    DomainError,
    InternalError,
    NotFoundError,
    ValidationError,
    api_exception_handler,
)
from modules.inventory.exceptions import InsufficientStock
from modules.sales.exceptions import AlreadyClosed, SaleNotFound

pytestmark = pytest.mark.unit


class _Strict(BaseModel):
    quantity: int


class TestErrorKinds:
    @pytest.mark.parametrize(
        "error_class, kind, status_code",
        [
            (ValidationError, "validation", 400),
            (NotFoundError, "not_found", 404),
            (ConflictError, "conflict", 409),
            (InternalError, "internal", 500),
        ],
    )
    def test_kind_and_status(self, error_class, kind, status_code):
        error = error_class()
        assert error.kind == kind
        assert error.status_code == status_code
        assert isinstance(error, DomainError)

    def test_default_detail(self):
        assert AlreadyClosed().detail == "Sale is already closed."

    def test_extra_goes_into_payload(self):
        error = ValidationError("Bad page.", field="page")
        assert error.to_dict() == {"code": "invalid", "detail": "Bad page.", "field": "page"}


class TestApiExceptionHandler:
    def test_domain_error_envelope(self):
        response = api_exception_handler(SaleNotFound("Sale x not found."), {})
        assert response.status_code == 404
        assert response.data == {
            "type": "not_found",
            "errors": [{"code": "sale_not_found", "detail": "Sale x not found."}],
        }

    def test_insufficient_stock_carries_quantities(self):
        response = api_exception_handler(InsufficientStock(available=1, requested=3), {})
        assert response.status_code == 409
        error = response.data["errors"][0]
        assert error["code"] == "insufficient_stock"
        assert error["available"] == 1
        assert error["requested"] == 3

    def test_pydantic_error(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            _Strict(quantity="many")
        response = api_exception_handler(exc_info.value, {})
        assert response.status_code == 400
        assert response.data["type"] == "validation"
        assert response.data["errors"][0]["field"] == "quantity"

    def test_database_error_is_internal(self):
        response = api_exception_handler(OperationalError("connection lost"), {})
        assert response.status_code == 500
        assert response.data["type"] == "internal"
        assert response.data["errors"][0]["code"] == "internal_error"

    def test_drf_field_errors_flattened(self):
        exc = DRFValidationError({"quantity": ["A valid integer is required."]})
        response = api_exception_handler(exc, {})
        assert response.status_code == 400
        assert response.data["type"] == "validation"
        assert response.data["errors"] == [
            {"code": "invalid", "detail": "A valid integer is required.", "field": "quantity"}
        ]

    def test_drf_detail_error(self):
        response = api_exception_handler(NotAuthenticated(), {})
        assert response.status_code == 401
        assert response.data["type"] == "authentication"
        assert response.data["errors"][0]["code"] == "not_authenticated"

    def test_unknown_exception_left_to_django(self):
        assert api_exception_handler(RuntimeError("boom"), {}) is None
