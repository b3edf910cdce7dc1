from django.apps import AppConfig


class SalesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.sales"
    label = "sales"

    def ready(self) -> None:
        from modules.sales.events import LineItemAdded, SaleCreated, SaleStatusChanged
        from modules.sales.handlers import (
            line_item_added_handler,
            sale_created_handler,
            sale_status_changed_handler,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(SaleCreated, sale_created_handler)
        event_bus.subscribe(LineItemAdded, line_item_added_handler)
        event_bus.subscribe(SaleStatusChanged, sale_status_changed_handler)
