from datetime import date

import pytest

from dompet.errors import ValidationError
from dompet.export import export_filename, filter_by_date, transactions_csv


TRANSACTIONS = [
    {"_id": "t1", "type": "expense", "amount": 1500000, "date": "2024-03-10", "category_id": 2,
     "description": 'Dinner, "fancy"', "wallet_id": "w1"},
    {"_id": "t2", "type": "transfer", "amount": 200, "date": "2024-03-12", "category_id": 18,
     "description": "", "wallet_id": "w1", "destination_wallet_id": "w2"},
    {"_id": "t3", "type": "income", "amount": 50, "date": "2024-03-01", "category_id": 999,
     "description": "", "wallet_id": "gone"},
]
WALLETS = [{"_id": "w1", "name": "Cash"}, {"_id": "w2", "name": "BCA"}]


def test_csv_rows_are_named_escaped_and_newest_first():
    content = transactions_csv(TRANSACTIONS, WALLETS)
    assert content.splitlines() == [
        "Date,Type,Category,Description,Amount,Wallet",
        "2024-03-12,Transfer,Transfer,,Rp 200,Cash",
        '2024-03-10,Expense,Dining,"Dinner, ""fancy""",Rp 1.500.000,Cash',
        "2024-03-01,Income,Other,,Rp 50,Unknown Wallet",
    ]


def test_foreign_currency_amounts_are_quoted():
    content = transactions_csv(TRANSACTIONS[:1], WALLETS, currency="USD")
    assert content.splitlines()[1].endswith(',"$1,500,000.00",Cash')


def test_date_filter_bounds_are_inclusive_and_optional():
    assert [t["_id"] for t in filter_by_date(TRANSACTIONS, "2024-03-10", "2024-03-12")] == ["t1", "t2"]
    assert [t["_id"] for t in filter_by_date(TRANSACTIONS, start="2024-03-11")] == ["t2"]
    assert [t["_id"] for t in filter_by_date(TRANSACTIONS, end="2024-03-01")] == ["t3"]
    assert len(filter_by_date(TRANSACTIONS)) == 3

    with pytest.raises(ValidationError):
        filter_by_date(TRANSACTIONS, start="someday")


def test_export_filename():
    assert export_filename(date(2024, 3, 5)) == "finance_export_2024-03-05.csv"


def test_workspace_export_uses_custom_category_names(workspace, wallets):
    cash, _ = wallets
    category = workspace.categories.create({"name": "Pets", "type": "expense"})
    workspace.transactions.create({"type": "expense", "amount": 25, "wallet_id": cash,
                                   "category_id": category["category_id"], "date": "2024-03-01"})
    workspace.transactions.create({"type": "expense", "amount": 10, "wallet_id": cash, "date": "2024-02-01"})

    filename, content = workspace.export_transactions(start="2024-03-01")

    assert filename.startswith("finance_export_")
    assert content.splitlines()[1:] == ["2024-03-01,Expense,Pets,,Rp 25,Cash"]
