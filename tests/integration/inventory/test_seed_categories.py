from io import StringIO

import pytest
from django.core.management import call_command

from modules.inventory.hierarchy import CategoryHierarchyValidator
from modules.inventory.management.commands.seed_categories import CATEGORIES
from modules.inventory.models import Category
from modules.inventory.repositories.django_repository import CategoryDjangoRepository

pytestmark = pytest.mark.integration


def _seed():
    out = StringIO()
    call_command("seed_categories", stdout=out)
    return out.getvalue()


class TestSeedCategories:
    def test_creates_full_tree(self):
        output = _seed()

        assert Category.objects.count() == len(CATEGORIES)
        assert Category.objects.filter(parent__isnull=True).count() == 9
        assert f"categories={len(CATEGORIES)}, created={len(CATEGORIES)}" in output

    def test_levels_and_leaves(self):
        _seed()

        shirts = Category.objects.get(id="cat-001")
        assert shirts.level == 1
        assert shirts.is_leaf is False
        assert Category.objects.get(id="subcat-001").level == 2
        womens = Category.objects.get(id="subsubcat-001")
        assert womens.level == 3
        assert womens.is_leaf is True

    def test_second_level_leaves(self):
        _seed()

        skirt = Category.objects.get(id="subsubcat-025")
        assert skirt.parent_id == "cat-005"
        assert skirt.level == 2
        assert skirt.is_leaf is True

    def test_idempotent(self):
        _seed()
        output = _seed()

        assert Category.objects.count() == len(CATEGORIES)
        assert "created=0" in output

    def test_every_leaf_accepts_items_under_strict_rule(self):
        _seed()
        validator = CategoryHierarchyValidator(CategoryDjangoRepository(), strict_leaf=True)

        for leaf in Category.objects.filter(is_leaf=True):
            path = [leaf.id]
            node = leaf
            while node.parent_id:
                node = node.parent
                path.insert(0, node.id)
            assert validator.validate(path)[-1].id == leaf.id
