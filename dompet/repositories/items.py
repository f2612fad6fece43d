from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING

from dompet.repositories.base import MongoRepository, now_ts


class OwnedItemRepository(MongoRepository):
    """Plain CRUD for a user-owned collection with no ledger side effects"""

    sort_order: Optional[List] = None

    def list_by_user(self, user_id: str, sort: Optional[List] = None) -> List[Dict[str, Any]]:
        return super().list_by_user(user_id, sort=sort or self.sort_order)

    def create_item(self, user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        doc = {k: v for k, v in data.items() if k != "_id"}
        current_time = now_ts()
        doc["user_id"] = user_id
        doc.setdefault("created_at", current_time)
        doc["updated_at"] = current_time
        self.insert_one(doc)
        return doc


class BudgetRepository(OwnedItemRepository):
    sort_order = [("created_at", ASCENDING), ("_id", ASCENDING)]

    def __init__(self):
        super().__init__("budgets")


class WantToBuyRepository(OwnedItemRepository):
    sort_order = [("created_at", DESCENDING), ("_id", DESCENDING)]

    def __init__(self):
        super().__init__("want_to_buy_items")


class PinjamanRepository(OwnedItemRepository):
    sort_order = [("due_date", ASCENDING), ("_id", ASCENDING)]

    def __init__(self):
        super().__init__("pinjaman_items")
