from datetime import date
from typing import Any, Dict, List, Optional

from dompet.dates import to_iso
from dompet.errors import ValidationError
from dompet.repositories.items import WantToBuyRepository
from dompet.stores.base import EntityStore


# Stored values are Indonesian; English aliases are accepted on input
CATEGORIES = {"Keinginan": "Keinginan", "Kebutuhan": "Kebutuhan", "want": "Keinginan", "need": "Kebutuhan"}
PRIORITIES = {
    "Tinggi": "Tinggi", "Sedang": "Sedang", "Rendah": "Rendah",
    "high": "Tinggi", "medium": "Sedang", "low": "Rendah",
}


class WantToBuyStore(EntityStore):
    label = "Item"
    tag = "WISHLIST"

    def __init__(self, user_id: str, repository: Optional[WantToBuyRepository] = None, **kwargs):
        super().__init__(user_id, repository or WantToBuyRepository(), **kwargs)

    def _prepare(self, data: Dict[str, Any], existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("Item name is required")
        try:
            price = float(data.get("price"))
        except (TypeError, ValueError):
            raise ValidationError("Valid price is required")
        if price < 0:
            raise ValidationError("Price cannot be negative")

        category = CATEGORIES.get(data.get("category"))
        if not category:
            raise ValidationError("Category must be Keinginan or Kebutuhan")
        priority = PRIORITIES.get(data.get("priority") or "Sedang")
        if not priority:
            raise ValidationError("Priority must be Tinggi, Sedang or Rendah")

        doc = {
            "name": name,
            "price": price,
            "category": category,
            "priority": priority,
            "estimated_date": to_iso(data.get("estimated_date")),
            "icon": data.get("icon"),
        }
        if existing is None:
            doc["is_purchased"] = False
            doc["purchase_date"] = None
        else:
            doc["is_purchased"] = bool(data.get("is_purchased"))
            doc["purchase_date"] = to_iso(data.get("purchase_date")) if doc["is_purchased"] else None
        return doc

    def toggle_purchased(self, item_id: str, today: Optional[date] = None) -> Optional[Dict[str, Any]]:
        item = self.get(item_id)
        if item is None:
            return self.update(item_id, {})
        purchased = not item.get("is_purchased")
        purchase_date = (today or date.today()).isoformat() if purchased else None
        return self.update(item_id, {"is_purchased": purchased, "purchase_date": purchase_date})

    def purchased(self) -> List[Dict[str, Any]]:
        return [i for i in self.items if i.get("is_purchased")]

    def unpurchased(self) -> List[Dict[str, Any]]:
        return [i for i in self.items if not i.get("is_purchased")]

    def by_priority(self, priority: str) -> List[Dict[str, Any]]:
        wanted = PRIORITIES.get(priority, priority)
        return [i for i in self.unpurchased() if i.get("priority") == wanted]

    def by_category(self, category: str) -> List[Dict[str, Any]]:
        wanted = CATEGORIES.get(category, category)
        return [i for i in self.unpurchased() if i.get("category") == wanted]
