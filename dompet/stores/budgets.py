from datetime import datetime
from typing import Any, Dict, List, Optional

from dompet.budget_spend import (
    DEFAULT_PERIOD,
    PERIODS,
    BudgetSpendTracker,
    budget_alerts,
    budget_status,
    sort_by_utilization,
    summarize,
)
from dompet.categories.resolver import CategoryResolver, default_resolver
from dompet.errors import ValidationError
from dompet.repositories.items import BudgetRepository
from dompet.stores.base import EntityStore


class BudgetStore(EntityStore):
    label = "Budget"
    tag = "BUDGET"

    def __init__(self, user_id: str, repository: Optional[BudgetRepository] = None,
                 resolver: CategoryResolver = default_resolver, **kwargs):
        super().__init__(user_id, repository or BudgetRepository(), **kwargs)
        self.resolver = resolver
        self.tracker = BudgetSpendTracker(resolver)

    def _prepare(self, data: Dict[str, Any], existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if data.get("category_id") in (None, ""):
            raise ValidationError("Category is required")
        try:
            amount = float(data.get("amount"))
        except (TypeError, ValueError):
            raise ValidationError("Valid amount is required")
        if amount <= 0:
            raise ValidationError("Budget amount must be greater than 0")
        period = data.get("period") or DEFAULT_PERIOD
        if period not in PERIODS:
            raise ValidationError(f"Invalid period. Must be one of: {', '.join(PERIODS)}")
        return {
            "category_id": self.resolver.resolve(data.get("category_id"), "expense"),
            "amount": amount,
            "period": period,
        }

    def with_spent(self, transactions: List[Dict[str, Any]], now: Any = None) -> List[Dict[str, Any]]:
        """Budgets with their derived spent figure for the given moment"""
        return self.tracker.budgets(self.items, transactions, now or datetime.now())

    def summary(self, transactions: List[Dict[str, Any]], now: Any = None) -> Dict[str, float]:
        return summarize(self.with_spent(transactions, now))

    def alerts(self, transactions: List[Dict[str, Any]], now: Any = None) -> List[Dict[str, Any]]:
        return budget_alerts(self.with_spent(transactions, now))

    def by_status(self, status: str, transactions: List[Dict[str, Any]], now: Any = None) -> List[Dict[str, Any]]:
        return [b for b in self.with_spent(transactions, now) if budget_status(b) == status]

    def sorted_by_utilization(self, transactions: List[Dict[str, Any]], now: Any = None) -> List[Dict[str, Any]]:
        return sort_by_utilization(self.with_spent(transactions, now))
