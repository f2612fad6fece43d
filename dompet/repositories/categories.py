from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument

from config import get_collection
from dompet.categories.defaults import DEFAULT_CATEGORIES, DEFAULT_IDS, FIRST_CUSTOM_CATEGORY_ID
from dompet.errors import CategoryInUseError, NotFoundError, ProtectedCategoryError, ValidationError
from dompet.repositories.base import MongoRepository, serialize
from dompet.repositories.items import BudgetRepository
from dompet.repositories.transactions import TransactionRepository


CUSTOM_TYPES = ("income", "expense")


class CategoryRepository(MongoRepository):
    def __init__(self):
        super().__init__("categories")
        self.counters = get_collection("counters")
        self.transactions = TransactionRepository()
        self.budgets = BudgetRepository()

    def seed_defaults(self) -> int:
        """Upsert the default categories; safe to run on every start"""
        seeded = 0
        for category in DEFAULT_CATEGORIES:
            result = self.collection.update_one(
                {"category_id": category["category_id"]},
                {"$setOnInsert": dict(category)},
                upsert=True,
            )
            if result.upserted_id is not None:
                seeded += 1
        if seeded:
            print(f"✅ [CATEGORY] Seeded {seeded} default categories")
        return seeded

    def list_for_user(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get kategori default + kategori custom milik user"""
        if user_id:
            query = {"$or": [{"user_id": None}, {"user_id": user_id}]}
        else:
            query = {"user_id": None}
        return self.find_many(query, sort=[("type", 1), ("en_name", 1)])

    def get_by_category_id(self, category_id: int) -> Optional[Dict[str, Any]]:
        """Get kategori berdasarkan numeric ID, None kalau tidak ada"""
        try:
            return self.find_one({"category_id": int(category_id)})
        except (TypeError, ValueError):
            return None

    def _next_category_id(self) -> int:
        self.counters.update_one(
            {"_id": "category_id"},
            {"$setOnInsert": {"seq": FIRST_CUSTOM_CATEGORY_ID - 1}},
            upsert=True,
        )
        counter = self.counters.find_one_and_update(
            {"_id": "category_id"},
            {"$inc": {"seq": 1}},
            return_document=ReturnDocument.AFTER,
        )
        return int(counter["seq"])

    def create_custom(self, user_id: str, name: str, category_type: str,
                      icon: Optional[str] = None, color: Optional[str] = None) -> Dict[str, Any]:
        """Create kategori custom; nama yang sama dipakai untuk kedua bahasa"""
        category_name = (name or "").strip()
        if not category_name:
            raise ValidationError("Category name is required")
        if category_type not in CUSTOM_TYPES:
            raise ValidationError('Invalid category type. Must be "income" or "expense"')

        doc = {
            "category_id": self._next_category_id(),
            "category_key": None,
            "en_name": category_name,
            "id_name": category_name,
            "type": category_type,
            "icon": icon or "circle",
            "color": color or "#6B7280",
            "user_id": user_id,
        }
        self.insert_one(doc)
        print(f"✅ [CATEGORY] Created custom category {doc['category_id']} ({category_name})")
        return doc

    def update_custom(self, category_id: int, user_id: str, name: Optional[str] = None,
                      icon: Optional[str] = None, color: Optional[str] = None) -> Dict[str, Any]:
        """Update kategori custom milik user"""
        category_id = int(category_id)
        if category_id in DEFAULT_IDS:
            raise ProtectedCategoryError("Default categories cannot be modified")

        updates: Dict[str, Any] = {}
        if name is not None:
            trimmed = name.strip()
            if not trimmed:
                raise ValidationError("Category name cannot be empty")
            updates["en_name"] = trimmed
            updates["id_name"] = trimmed
        if icon:
            updates["icon"] = icon
        if color:
            updates["color"] = color
        if not updates:
            raise ValidationError("No fields to update")

        updated = self.collection.find_one_and_update(
            {"category_id": category_id, "user_id": user_id},
            {"$set": updates},
            return_document=ReturnDocument.AFTER,
        )
        if not updated:
            raise NotFoundError("Category not found or you do not have permission to update it")
        return serialize(updated)

    def is_in_use(self, category_id: int, user_id: str) -> bool:
        """Kategori dipakai oleh transaksi atau budget milik user"""
        category_id = int(category_id)
        if self.transactions.count_by_category(user_id, category_id):
            return True
        return self.budgets.count({"user_id": user_id, "category_id": category_id}) > 0

    def delete_custom(self, category_id: int, user_id: str) -> None:
        """Delete kategori custom; ditolak kalau masih dipakai"""
        category_id = int(category_id)
        if category_id in DEFAULT_IDS:
            raise ProtectedCategoryError("Default categories cannot be deleted")

        existing = self.collection.find_one({"category_id": category_id, "user_id": user_id})
        if not existing:
            raise NotFoundError("Category not found or you do not have permission to delete it")

        if self.is_in_use(category_id, user_id):
            print(f"⚠️ [CATEGORY] Refusing to delete category {category_id}: still referenced")
            raise CategoryInUseError("Cannot delete category that is being used in transactions or budgets")

        self.collection.delete_one({"category_id": category_id, "user_id": user_id})
        print(f"✅ [CATEGORY] Deleted custom category {category_id}")
