import django.core.validators
import django.db.models.deletion
import uuid6
from django.conf import settings
from django.db import migrations, models

STATUS_CHOICES = [
    ("open-no-pieces", "Aberta - sem peças"),
    ("open-awaiting-payment", "Aberta - aguardando pagamento"),
    ("calculate-shipping", "Calcular frete"),
    ("shipping-awaiting-payment", "Frete - aguardando pagamento"),
    ("shipping-date-pending", "Data de envio pendente"),
    ("closed", "Fechada"),
]


def _base_fields():
    return [
        (
            "id",
            models.UUIDField(
                default=uuid6.uuid7,
                editable=False,
                primary_key=True,
                serialize=False,
            ),
        ),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("inventory", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Sale",
            fields=_base_fields()
            + [
                ("client_name", models.CharField(max_length=255)),
                ("phone", models.CharField(blank=True, default="", max_length=30)),
                ("address", models.CharField(blank=True, default="", max_length=500)),
                (
                    "status",
                    models.CharField(
                        choices=STATUS_CHOICES,
                        default="open-no-pieces",
                        max_length=30,
                    ),
                ),
                (
                    "shipping_value",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=10, null=True
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "sales",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["user", "status"], name="sales_user_status_idx"
                    ),
                    models.Index(fields=["-created_at"], name="sales_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("shipping_value__isnull", True),
                            ("shipping_value__gte", 0),
                            _connector="OR",
                        ),
                        name="sales_shipping_value_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleLineItem",
            fields=_base_fields()
            + [
                (
                    "quantity",
                    models.PositiveIntegerField(
                        validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sale_lines",
                        to="inventory.inventoryitem",
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="line_items",
                        to="sales.sale",
                    ),
                ),
            ],
            options={
                "db_table": "sale_line_items",
                "ordering": ["created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("sale", "item"),
                        name="sale_line_items_sale_item_unique",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gte", 1)),
                        name="sale_line_items_quantity_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleStatusHistory",
            fields=_base_fields()
            + [
                (
                    "old_status",
                    models.CharField(
                        blank=True, choices=STATUS_CHOICES, max_length=30, null=True
                    ),
                ),
                (
                    "new_status",
                    models.CharField(choices=STATUS_CHOICES, max_length=30),
                ),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="status_history",
                        to="sales.sale",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "sale_status_history",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["sale", "created_at"], name="ssh_sale_created_idx"
                    ),
                ],
            },
        ),
    ]
