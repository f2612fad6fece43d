from typing import Any, Dict, List, Optional

from pymongo.errors import PyMongoError

from dompet.categories.defaults import DEFAULT_CATEGORIES
from dompet.categories.resolver import CategoryResolver
from dompet.errors import ValidationError
from dompet.repositories.categories import CategoryRepository
from dompet.stores.base import EntityStore


def _category_number(category_id: Any) -> int:
    try:
        return int(category_id)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid category id: {category_id}")


class CategoryStore(EntityStore):
    """Default + custom categories of one user, kept in sync with the resolver.

    Category rows are addressed by their numeric category_id. Writes are not
    optimistic: the repository enforces ownership and the in-use check, so
    local state follows the remote result.
    """

    label = "Category"
    tag = "CATEGORY"

    def __init__(self, user_id: str, resolver: CategoryResolver,
                 repository: Optional[CategoryRepository] = None, **kwargs):
        super().__init__(user_id, repository or CategoryRepository(), **kwargs)
        self.resolver = resolver

    def load(self) -> List[Dict[str, Any]]:
        try:
            rows = self.repository.list_for_user(self.user_id)
        except PyMongoError as e:
            print(f"❌ [CATEGORY] Error loading categories, using defaults: {e}")
            self.notifier.failure(e, title="Error loading categories")
            rows = [dict(c) for c in DEFAULT_CATEGORIES]
        self.items = sorted(rows, key=lambda c: int(c.get("category_id") or 0))
        self._sync_resolver()
        self.loaded = True
        return self.items

    def _sync_resolver(self) -> None:
        self.resolver.set_custom_categories(c for c in self.items if c.get("user_id"))

    def custom(self) -> List[Dict[str, Any]]:
        return [c for c in self.items if c.get("user_id")]

    def by_type(self, category_type: str) -> List[Dict[str, Any]]:
        return [c for c in self.items if c.get("type") == category_type]

    def create(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        def action():
            category = self.repository.create_custom(
                self.user_id, data.get("name"), data.get("type"),
                icon=data.get("icon"), color=data.get("color"),
            )
            self.items = sorted(self.items + [category], key=lambda c: int(c["category_id"]))
            self._sync_resolver()
            return category

        return self._boundary(action, success=("Success", "Category added."),
                              failure_title="Failed to add category")

    def update(self, category_id: Any, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        def action():
            updated = self.repository.update_custom(
                _category_number(category_id), self.user_id, name=changes.get("name"),
                icon=changes.get("icon"), color=changes.get("color"),
            )
            self.items = [updated if c.get("category_id") == updated["category_id"] else c for c in self.items]
            self._sync_resolver()
            return updated

        return self._boundary(action, success=("Success", "Category updated."),
                              failure_title="Failed to update category")

    def delete(self, category_id: Any) -> Optional[bool]:
        def action():
            number = _category_number(category_id)
            self.repository.delete_custom(number, self.user_id)
            self.items = [c for c in self.items if c.get("category_id") != number]
            self._sync_resolver()
            return True

        return self._boundary(action, success=("Success", "Category deleted."),
                              failure_title="Failed to delete category")
