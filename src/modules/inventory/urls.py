"""Inventory URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.inventory.views import CategoryViewSet, InventoryItemViewSet

router = DefaultRouter(trailing_slash=True)
router.register("categories", CategoryViewSet, basename="category")
router.register("items", InventoryItemViewSet, basename="item")

urlpatterns = router.urls
