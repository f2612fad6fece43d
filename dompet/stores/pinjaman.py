from datetime import date
from typing import Any, Dict, List, Optional

from dompet.dates import parse_date, to_iso
from dompet.errors import ValidationError
from dompet.repositories.items import PinjamanRepository
from dompet.stores.base import EntityStore


# Utang = money we owe, Piutang = money owed to us
CATEGORY_ALIASES = {"debt": "debt", "credit": "credit", "utang": "debt", "piutang": "credit"}


def normalize_category(category: Optional[str]) -> Optional[str]:
    if not category:
        return None
    return CATEGORY_ALIASES.get(category.strip().lower())


class PinjamanStore(EntityStore):
    label = "Pinjaman"
    tag = "PINJAMAN"

    def __init__(self, user_id: str, repository: Optional[PinjamanRepository] = None, **kwargs):
        super().__init__(user_id, repository or PinjamanRepository(), **kwargs)

    def load(self) -> List[Dict[str, Any]]:
        items = super().load()
        for item in items:
            item["category"] = normalize_category(item.get("category")) or item.get("category")
            item.setdefault("is_settled", False)
        return items

    def _sort(self) -> None:
        self.items = sorted(self.items, key=lambda i: (str(i.get("due_date") or "9999-12-31"), str(i.get("_id"))))

    def _prepare(self, data: Dict[str, Any], existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("Name is required")
        try:
            amount = float(data.get("amount"))
        except (TypeError, ValueError):
            raise ValidationError("Valid amount is required")
        if amount <= 0:
            raise ValidationError("Amount must be greater than 0")
        category = normalize_category(data.get("category"))
        if not category:
            raise ValidationError("Category must be debt (Utang) or credit (Piutang)")
        due_date = to_iso(data.get("due_date"))
        if not due_date:
            raise ValidationError("Valid due date is required")

        return {
            "name": name,
            "amount": amount,
            "category": category,
            "due_date": due_date,
            "icon": data.get("icon"),
            "description": data.get("description") or "",
            "lender_name": data.get("lender_name"),
            "is_settled": bool(data.get("is_settled")) if existing is not None else False,
        }

    def toggle_settled(self, item_id: str) -> Optional[Dict[str, Any]]:
        item = self.get(item_id)
        return self.update(item_id, {"is_settled": not (item or {}).get("is_settled")})

    def settled(self) -> List[Dict[str, Any]]:
        return [i for i in self.items if i.get("is_settled")]

    def unsettled(self) -> List[Dict[str, Any]]:
        return [i for i in self.items if not i.get("is_settled")]

    def by_category(self, category: str) -> List[Dict[str, Any]]:
        wanted = normalize_category(category)
        return [i for i in self.unsettled() if i.get("category") == wanted]

    def overdue(self, today: Any = None) -> List[Dict[str, Any]]:
        """Unsettled items whose due date is strictly before today"""
        today = parse_date(today) or date.today()
        result = []
        for item in self.unsettled():
            due = parse_date(item.get("due_date"))
            if due and due < today:
                result.append(item)
        return result

    def total_debt(self) -> float:
        return sum(float(i.get("amount") or 0) for i in self.by_category("debt"))

    def total_credit(self) -> float:
        return sum(float(i.get("amount") or 0) for i in self.by_category("credit"))

    def net_position(self) -> float:
        return self.total_credit() - self.total_debt()
