from __future__ import annotations

from typing import Optional

from django.core.management.base import BaseCommand
from django.db import transaction

from modules.inventory.models import Category

# (id, name, parent_id), parents before children.
CATEGORIES: list[tuple[str, str, Optional[str]]] = [
    ("cat-001", "Camisas", None),
    ("cat-002", "Calça", None),
    ("cat-003", "Sapatos", None),
    ("cat-004", "Acessórios", None),
    ("cat-005", "Saia", None),
    ("cat-006", "Vestido", None),
    ("cat-007", "Shorts", None),
    ("cat-008", "Biquíni", None),
    ("cat-009", "Casacos", None),
    # Camisas
    ("subcat-001", "Camiseta", "cat-001"),
    ("subcat-002", "Social", "cat-001"),
    ("subcat-003", "Blusa", "cat-001"),
    # Calça
    ("subcat-004", "Jeans", "cat-002"),
    ("subcat-005", "Calça social", "cat-002"),
    # Sapatos
    ("subcat-006", "Tênis", "cat-003"),
    ("subcat-007", "Botas", "cat-003"),
    ("subcat-008", "Salto alto", "cat-003"),
    ("subcat-009", "Sapatilha", "cat-003"),
    # Acessórios
    ("subcat-010", "Óculos", "cat-004"),
    ("subcat-011", "Bolsas", "cat-004"),
    ("subcat-012", "Bijuteria", "cat-004"),
    ("subcat-013", "Chapéus", "cat-004"),
    # Shorts
    ("subcat-014", "Feminina", "cat-007"),
    ("subcat-015", "Masculina", "cat-007"),
    # Casacos
    ("subcat-016", "Feminina", "cat-009"),
    ("subcat-017", "Masculina", "cat-009"),
    # Saia, Vestido and Biquíni only have a second level
    ("subsubcat-025", "Feminina", "cat-005"),
    ("subsubcat-026", "Feminina", "cat-006"),
    ("subsubcat-031", "Feminina", "cat-008"),
    # Gender
    ("subsubcat-001", "Feminina", "subcat-001"),
    ("subsubcat-002", "Masculina", "subcat-001"),
    ("subsubcat-003", "Feminina", "subcat-002"),
    ("subsubcat-004", "Masculina", "subcat-002"),
    ("subsubcat-005", "Feminina", "subcat-003"),
    ("subsubcat-006", "Masculina", "subcat-003"),
    ("subsubcat-007", "Feminina", "subcat-004"),
    ("subsubcat-008", "Masculina", "subcat-004"),
    ("subsubcat-009", "Feminina", "subcat-005"),
    ("subsubcat-010", "Masculina", "subcat-005"),
    ("subsubcat-011", "Feminina", "subcat-006"),
    ("subsubcat-012", "Masculina", "subcat-006"),
    ("subsubcat-013", "Feminina", "subcat-007"),
    ("subsubcat-014", "Masculina", "subcat-007"),
    ("subsubcat-015", "Feminina", "subcat-008"),
    ("subsubcat-016", "Feminina", "subcat-009"),
    ("subsubcat-017", "Feminina", "subcat-010"),
    ("subsubcat-018", "Masculina", "subcat-010"),
    ("subsubcat-019", "Feminina", "subcat-011"),
    ("subsubcat-020", "Masculina", "subcat-011"),
    ("subsubcat-021", "Feminina", "subcat-012"),
    ("subsubcat-022", "Masculina", "subcat-012"),
    ("subsubcat-023", "Feminina", "subcat-013"),
    ("subsubcat-024", "Masculina", "subcat-013"),
    ("subsubcat-027", "Feminina", "subcat-014"),
    ("subsubcat-028", "Masculina", "subcat-014"),
    ("subsubcat-029", "Feminina", "subcat-015"),
    ("subsubcat-030", "Masculina", "subcat-015"),
    ("subsubcat-032", "Feminina", "subcat-016"),
    ("subsubcat-033", "Masculina", "subcat-016"),
    ("subsubcat-034", "Feminina", "subcat-017"),
    ("subsubcat-035", "Masculina", "subcat-017"),
]


class Command(BaseCommand):
    help = "Create or refresh the store category tree (idempotent)."

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding categories...")

        parents = {parent_id for _, _, parent_id in CATEGORIES if parent_id}
        levels: dict[str, int] = {}
        created = 0

        for category_id, name, parent_id in CATEGORIES:
            level = levels[parent_id] + 1 if parent_id else 1
            levels[category_id] = level
            _, was_created = Category.objects.update_or_create(
                id=category_id,
                defaults={
                    "name": name,
                    "parent_id": parent_id,
                    "level": level,
                    "is_leaf": category_id not in parents,
                },
            )
            created += int(was_created)

        self.stdout.write(
            self.style.SUCCESS(
                f"Seed completed: categories={len(CATEGORIES)}, created={created}"
            )
        )
