"""Category placement rules.

An inventory item is filed under an ordered path of category ids that must
start at a top-level category, follow parent links one level at a time and
end on a category that accepts items:

- permissive rule (default): ``is_leaf`` is set *or* the category has no
  children;
- strict rule (``INVENTORY_STRICT_LEAF_PLACEMENT = True``): ``is_leaf``
  must be set.

Validation only reads the tree, so calling it repeatedly with the same path
always gives the same answer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

import structlog
from django.conf import settings

from modules.inventory.exceptions import (
    BrokenHierarchy,
    CategoryNotFound,
    EmptyPath,
    NotPlaceable,
)

if TYPE_CHECKING:
    from modules.inventory.models import Category
    from modules.inventory.repositories.interfaces import ICategoryRepository

logger = structlog.get_logger(__name__)


class CategoryHierarchyValidator:
    """Checks category paths against the stored tree."""

    def __init__(
        self,
        repository: ICategoryRepository,
        strict_leaf: Optional[bool] = None,
    ) -> None:
        self._repo = repository
        if strict_leaf is None:
            strict_leaf = settings.INVENTORY_STRICT_LEAF_PLACEMENT
        self._strict_leaf = strict_leaf

    def validate(self, path: Sequence[str]) -> List[Category]:
        """Return the categories along *path*, root first.

        Raises:
            EmptyPath: *path* has no elements.
            BrokenHierarchy: *path* is deeper than the tree, does not start
                at a top-level category, or skips a parent link.
            CategoryNotFound: the first id in *path* that does not exist.
            NotPlaceable: the last category does not accept items.
        """
        if not path:
            raise EmptyPath()

        log = logger.bind(path=list(path))
        max_depth = settings.CATEGORY_MAX_DEPTH
        if len(path) > max_depth:
            log.info("category_path.too_deep")
            raise BrokenHierarchy(
                f"Category path has {len(path)} levels; at most {max_depth} allowed.",
                path=list(path),
            )

        found = self._repo.get_many(path)
        chain: List[Category] = []
        for index, category_id in enumerate(path):
            category = found.get(category_id)
            if category is None:
                log.info("category_path.unknown_category", category_id=category_id)
                raise CategoryNotFound(
                    f"Category {category_id} not found.", category_id=category_id
                )

            expected_parent = path[index - 1] if index else None
            if category.parent_id != expected_parent:
                log.info("category_path.broken", category_id=category_id)
                if expected_parent is None:
                    detail = f"Category {category_id} is not a top-level category."
                else:
                    detail = (
                        f"Category {category_id} is not a child of {expected_parent}."
                    )
                raise BrokenHierarchy(detail, path=list(path))
            chain.append(category)

        terminal = chain[-1]
        if not self.is_placeable(terminal):
            log.info("category_path.not_placeable", category_id=terminal.id)
            raise NotPlaceable(
                f"Category {terminal.id} has subcategories.", category_id=terminal.id
            )
        return chain

    def is_placeable(self, category: Category) -> bool:
        if category.is_leaf:
            return True
        if self._strict_leaf:
            return False
        return not self._repo.has_children(category.id)
