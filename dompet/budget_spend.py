"""Derived "spent" figure for budgets.

Spent is never stored: it is the sum of expense amounts in the budget's
category inside the budget's period window (Sunday-start week, calendar
month or calendar year containing ``now``).
"""
import copy
from collections import defaultdict
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from dompet.categories.resolver import CategoryResolver, default_resolver
from dompet.dates import in_same_month, in_same_week, in_same_year, parse_date


PERIODS = ("weekly", "monthly", "yearly")
DEFAULT_PERIOD = "monthly"


def _today(now: Any) -> date:
    if now is None:
        return date.today()
    return parse_date(now) or date.today()


def spending_by_category(transactions: Sequence[Mapping[str, Any]], now: Any = None,
                         resolver: CategoryResolver = default_resolver) -> Dict[int, Dict[str, float]]:
    """Expense totals bucketed by category id and by period"""
    today = _today(now)
    buckets: Dict[int, Dict[str, float]] = defaultdict(lambda: {p: 0.0 for p in PERIODS})

    for tx in transactions:
        if tx.get("type") != "expense":
            continue
        tx_date = parse_date(tx.get("date"))
        if tx_date is None:
            continue
        category_id = resolver.normalize(tx.get("category_id"), "expense")
        amount = float(tx.get("amount") or 0)
        if in_same_week(tx_date, today):
            buckets[category_id]["weekly"] += amount
        if in_same_month(tx_date, today):
            buckets[category_id]["monthly"] += amount
        if in_same_year(tx_date, today):
            buckets[category_id]["yearly"] += amount
    return dict(buckets)


def recompute(budgets: Sequence[Mapping[str, Any]], transactions: Sequence[Mapping[str, Any]],
              now: Any = None, resolver: CategoryResolver = default_resolver) -> List[Dict[str, Any]]:
    """Return copies of budgets with ``spent`` filled in; inputs are not touched"""
    buckets = spending_by_category(transactions, now, resolver)
    result = []
    for budget in budgets:
        updated = dict(budget)
        if budget.get("category_id") in (None, ""):
            updated["spent"] = 0.0
            result.append(updated)
            continue
        category_id = resolver.normalize(budget.get("category_id"), "expense")
        period = budget.get("period") or DEFAULT_PERIOD
        updated["spent"] = buckets.get(category_id, {}).get(period, 0.0)
        result.append(updated)
    return result


def summarize(budgets: Sequence[Mapping[str, Any]]) -> Dict[str, float]:
    total_budgeted = sum(float(b.get("amount") or 0) for b in budgets)
    total_spent = sum(float(b.get("spent") or 0) for b in budgets)
    return {
        "total_budgeted": total_budgeted,
        "total_spent": total_spent,
        "remaining": total_budgeted - total_spent,
        "overall_progress": (total_spent / total_budgeted * 100) if total_budgeted > 0 else 0.0,
    }


STATUS_ON_TRACK = "on-track"
STATUS_WARNING = "warning"
STATUS_EXCEEDED = "exceeded"
WARNING_AT = 75.0


def utilization(budget: Mapping[str, Any]) -> float:
    """Spent as a percentage of the budget amount; 0 for a zero budget"""
    amount = float(budget.get("amount") or 0)
    if amount == 0:
        return 0.0
    return float(budget.get("spent") or 0) / amount * 100


def budget_status(budget: Mapping[str, Any]) -> str:
    used = utilization(budget)
    if used >= 100:
        return STATUS_EXCEEDED
    if used >= WARNING_AT:
        return STATUS_WARNING
    return STATUS_ON_TRACK


def sort_by_utilization(budgets: Sequence[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    return sorted(budgets, key=utilization, reverse=True)


def budget_alerts(budgets: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Budgets over or near their limit, in input order"""
    alerts = []
    for budget in budgets:
        status = budget_status(budget)
        used = utilization(budget)
        if status == STATUS_EXCEEDED:
            message = f"Budget exceeded by {used - 100:.0f}%"
        elif status == STATUS_WARNING:
            message = f"Budget at {used:.0f}% - approaching limit"
        else:
            continue
        alerts.append({"budget": dict(budget), "status": status, "utilization": used, "message": message})
    return alerts


class BudgetSpendTracker:
    """Memoised recompute keyed on the structure of its inputs.

    A new list holding equal budgets/transactions reuses the last result;
    any value change, or a new day, triggers a recompute.
    """

    def __init__(self, resolver: CategoryResolver = default_resolver):
        self.resolver = resolver
        self._budgets: Optional[List[Dict[str, Any]]] = None
        self._transactions: Optional[List[Dict[str, Any]]] = None
        self._day: Optional[date] = None
        self._result: List[Dict[str, Any]] = []
        self.recompute_count = 0

    def budgets(self, budgets: Sequence[Mapping[str, Any]], transactions: Sequence[Mapping[str, Any]],
                now: Any = None) -> List[Dict[str, Any]]:
        today = _today(now if now is not None else datetime.now())
        budgets = [dict(b) for b in budgets]
        transactions = [dict(t) for t in transactions]
        if budgets == self._budgets and transactions == self._transactions and today == self._day:
            return self._result

        self._result = recompute(budgets, transactions, today, self.resolver)
        self._budgets = copy.deepcopy(budgets)
        self._transactions = copy.deepcopy(transactions)
        self._day = today
        self.recompute_count += 1
        return self._result
