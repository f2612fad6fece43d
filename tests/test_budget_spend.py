from datetime import date

from dompet.budget_spend import (
    BudgetSpendTracker,
    budget_alerts,
    budget_status,
    recompute,
    sort_by_utilization,
    spending_by_category,
    summarize,
)
from dompet.dates import week_bounds


# Wednesday; its Sunday-start week is 2024-03-10 .. 2024-03-16
NOW = date(2024, 3, 13)


def tx(amount, day, category_id=1, tx_type="expense"):
    return {"type": tx_type, "amount": amount, "date": day, "category_id": category_id}


def test_week_starts_on_sunday():
    assert week_bounds(NOW) == (date(2024, 3, 10), date(2024, 3, 16))
    assert week_bounds(date(2024, 3, 10)) == (date(2024, 3, 10), date(2024, 3, 16))


def test_monthly_and_weekly_windows():
    budgets = [
        {"_id": "m", "category_id": 1, "amount": 100000, "period": "monthly"},
        {"_id": "w", "category_id": 1, "amount": 20000, "period": "weekly"},
    ]
    result = recompute(budgets, [tx(50000, "2024-03-02")], NOW)
    assert result[0]["spent"] == 50000
    assert result[1]["spent"] == 0

    result = recompute(budgets, [tx(50000, "2024-03-11")], NOW)
    assert result[1]["spent"] == 50000


def test_only_expenses_in_matching_category_count():
    transactions = [
        tx(100, "2024-03-12"),
        tx(200, "2024-03-12", category_id=2),
        tx(400, "2024-03-12", tx_type="income"),
        tx(800, "2024-03-12", tx_type="transfer"),
        tx(1600, "2023-03-12"),
    ]
    result = recompute([{"category_id": 1, "amount": 1000, "period": "yearly"}], transactions, NOW)
    assert result[0]["spent"] == 100


def test_legacy_keys_and_custom_ids_bucket_correctly():
    transactions = [tx(10, "2024-03-12", "expense_food"), tx(20, "2024-03-12", 100), tx(5, "2024-03-12", None)]
    buckets = spending_by_category(transactions, NOW)
    assert buckets[2]["monthly"] == 10
    assert buckets[100]["monthly"] == 20
    assert buckets[12]["monthly"] == 5


def test_recompute_does_not_touch_inputs():
    budgets = [{"category_id": 1, "amount": 100, "period": "monthly", "spent": 999}]
    recompute(budgets, [tx(10, "2024-03-12")], NOW)
    assert budgets[0]["spent"] == 999


def test_summary():
    totals = summarize([{"amount": 100, "spent": 25}, {"amount": 300, "spent": 75}])
    assert totals == {"total_budgeted": 400, "total_spent": 100, "remaining": 300, "overall_progress": 25}
    assert summarize([])["overall_progress"] == 0


def test_tracker_skips_structurally_equal_inputs():
    tracker = BudgetSpendTracker()
    budgets = [{"category_id": 1, "amount": 100, "period": "monthly"}]
    transactions = [tx(10, "2024-03-12")]

    first = tracker.budgets(budgets, transactions, NOW)
    tracker.budgets([dict(b) for b in budgets], [dict(t) for t in transactions], NOW)
    assert tracker.recompute_count == 1

    transactions.append(tx(5, "2024-03-12"))
    second = tracker.budgets(budgets, transactions, NOW)
    assert tracker.recompute_count == 2
    assert (first[0]["spent"], second[0]["spent"]) == (10, 15)

    tracker.budgets(budgets, transactions, date(2024, 3, 14))
    assert tracker.recompute_count == 3


def test_budget_status_thresholds():
    assert budget_status({"amount": 100, "spent": 74.9}) == "on-track"
    assert budget_status({"amount": 100, "spent": 75}) == "warning"
    assert budget_status({"amount": 100, "spent": 100}) == "exceeded"
    # a zero budget never alerts
    assert budget_status({"amount": 0, "spent": 50}) == "on-track"


def test_alerts_cover_warning_and_exceeded_only():
    budgets = [
        {"category_id": 1, "amount": 100, "spent": 10},
        {"category_id": 2, "amount": 100, "spent": 80},
        {"category_id": 3, "amount": 200, "spent": 250},
    ]
    alerts = budget_alerts(budgets)

    assert [(a["budget"]["category_id"], a["status"]) for a in alerts] == [(2, "warning"), (3, "exceeded")]
    assert alerts[0]["message"] == "Budget at 80% - approaching limit"
    assert alerts[1]["message"] == "Budget exceeded by 25%"
    assert alerts[1]["utilization"] == 125


def test_sort_by_utilization():
    budgets = [{"amount": 100, "spent": 10}, {"amount": 50, "spent": 40}, {"amount": 10, "spent": 0}]
    assert [b["spent"] for b in sort_by_utilization(budgets)] == [40, 10, 0]
