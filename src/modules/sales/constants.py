"""Sale domain constants.

Status choices and the strictly forward transition table of the sale
lifecycle.  Every state has exactly one successor; ``closed`` has none.

The tables are keyed by the plain string values: ``Sale.status`` loaded
from the database is a ``str``, and enum members hash by name.
"""

from django.db import models


class SaleStatus(models.TextChoices):
    OPEN_NO_PIECES = "open-no-pieces", "Aberta - sem peças"
    OPEN_AWAITING_PAYMENT = "open-awaiting-payment", "Aberta - aguardando pagamento"
    CALCULATE_SHIPPING = "calculate-shipping", "Calcular frete"
    SHIPPING_AWAITING_PAYMENT = (
        "shipping-awaiting-payment",
        "Frete - aguardando pagamento",
    )
    SHIPPING_DATE_PENDING = "shipping-date-pending", "Data de envio pendente"
    CLOSED = "closed", "Fechada"


# Lifecycle order, first to last.
STATUS_SEQUENCE: list[str] = list(SaleStatus.values)

VALID_TRANSITIONS: dict[str, set[str]] = {
    current: {following}
    for current, following in zip(STATUS_SEQUENCE, STATUS_SEQUENCE[1:])
}
VALID_TRANSITIONS[SaleStatus.CLOSED.value] = set()

TERMINAL_STATES: set[str] = {SaleStatus.CLOSED.value}

# States in which pieces may still be added to a sale.
OPEN_STATES: set[str] = {
    SaleStatus.OPEN_NO_PIECES.value,
    SaleStatus.OPEN_AWAITING_PAYMENT.value,
}
