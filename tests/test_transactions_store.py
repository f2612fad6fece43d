import config
from dompet.repositories.base import to_object_id

from conftest import balance, fail_on_call, failing, remote_balance


def expense(wallet_id, amount, **extra):
    return dict({"type": "expense", "amount": amount, "wallet_id": wallet_id,
                 "category_id": "expense_food", "date": "2024-03-10"}, **extra)


def test_create_expense_moves_balance_and_prepends(workspace, wallets):
    cash, _ = wallets
    tx = workspace.transactions.create(expense(cash, 250))

    assert tx["category_id"] == 2
    assert workspace.transactions.items[0]["_id"] == tx["_id"]
    assert balance(workspace, cash) == 750
    assert remote_balance(cash) == 750
    assert workspace.notifier.last.description == "Transaction added."


def test_transfer_always_uses_transfer_category(workspace, wallets):
    cash, bank = wallets
    tx = workspace.transactions.create({
        "type": "transfer", "amount": 200, "fee": 5, "wallet_id": cash,
        "destination_wallet_id": bank, "category_id": "expense_food", "date": "2024-03-10",
    })
    assert tx["category_id"] == 18
    assert balance(workspace, cash) == 795
    assert balance(workspace, bank) == 700


def test_non_transfer_drops_transfer_fields(workspace, wallets):
    cash, bank = wallets
    tx = workspace.transactions.create(expense(cash, 10, destination_wallet_id=bank, fee=3))
    assert tx["destination_wallet_id"] is None
    assert tx["fee"] is None
    assert balance(workspace, bank) == 500


def test_update_applies_net_delta_in_one_write(workspace, wallets):
    cash, _ = wallets
    tx = workspace.transactions.create(expense(cash, 100))
    version_before = workspace.wallets.get(cash)["version"]

    workspace.transactions.update(tx["_id"], {"amount": 150})

    assert balance(workspace, cash) == 850
    assert remote_balance(cash) == 850
    assert workspace.wallets.get(cash)["version"] == version_before + 1
    assert workspace.transactions.get(tx["_id"])["amount"] == 150


def test_update_without_money_change_skips_wallet_writes(workspace, wallets):
    cash, _ = wallets
    tx = workspace.transactions.create(expense(cash, 100))
    version_before = workspace.wallets.get(cash)["version"]

    workspace.transactions.update(tx["_id"], {"description": "lunch"})

    assert workspace.wallets.get(cash)["version"] == version_before
    assert workspace.transactions.get(tx["_id"])["description"] == "lunch"


def test_delete_transfer_restores_both_wallets(workspace, wallets):
    cash, bank = wallets
    tx = workspace.transactions.create({
        "type": "transfer", "amount": 200, "fee": 5, "wallet_id": cash,
        "destination_wallet_id": bank, "date": "2024-03-10",
    })
    assert workspace.transactions.delete(tx["_id"]) is True

    assert balance(workspace, cash) == 1000
    assert balance(workspace, bank) == 500
    assert workspace.transactions.get(tx["_id"]) is None
    assert config.get_collection("transactions").count_documents({}) == 0


def test_balances_match_transaction_history(workspace, wallets):
    cash, bank = wallets
    store = workspace.transactions
    a = store.create({"type": "income", "amount": 3000, "wallet_id": cash, "date": "2024-03-01"})
    b = store.create(expense(bank, 120))
    c = store.create({"type": "transfer", "amount": 400, "fee": 2.5, "wallet_id": cash,
                      "destination_wallet_id": bank, "date": "2024-03-05"})
    store.update(a["_id"], {"amount": 2500})
    store.update(b["_id"], {"wallet_id": cash})
    store.delete(c["_id"])
    store.create(expense(bank, 80, date="2024-03-11"))

    assert balance(workspace, cash) == 1000 + 2500 - 120
    assert balance(workspace, bank) == 500 - 80
    assert store.audit_balances() == {}


def test_audit_reports_out_of_band_edits(workspace, wallets):
    cash, _ = wallets
    workspace.transactions.create(expense(cash, 100))
    workspace.wallets.get(cash)["balance"] = 1234

    report = workspace.transactions.audit_balances()
    assert report[cash]["expected"] == 900
    assert report[cash]["actual"] == 1234


def test_failed_wallet_write_leaves_no_orphan(workspace, wallets, monkeypatch):
    cash, _ = wallets
    monkeypatch.setattr(workspace.wallets.repository.collection, "update_one", failing())

    assert workspace.transactions.create(expense(cash, 100)) is None

    assert workspace.transactions.items == []
    assert config.get_collection("transactions").count_documents({}) == 0
    assert balance(workspace, cash) == 1000
    note = workspace.notifier.last
    assert note.destructive
    assert note.title == "Failed to add transaction"


def test_second_wallet_failure_undoes_first(workspace, wallets, monkeypatch):
    cash, bank = wallets
    fail_on_call(monkeypatch, workspace.wallets.repository.collection, "update_one", {2})

    result = workspace.transactions.create({
        "type": "transfer", "amount": 200, "fee": 5, "wallet_id": cash,
        "destination_wallet_id": bank, "date": "2024-03-10",
    })

    assert result is None
    assert remote_balance(cash) == 1000
    assert remote_balance(bank) == 500
    assert balance(workspace, cash) == 1000
    assert config.get_collection("transactions").count_documents({}) == 0


def test_failed_update_keeps_local_and_remote_state(workspace, wallets, monkeypatch):
    cash, _ = wallets
    tx = workspace.transactions.create(expense(cash, 100))
    monkeypatch.setattr(workspace.wallets.repository.collection, "update_one", failing())

    assert workspace.transactions.update(tx["_id"], {"amount": 300}) is None

    assert workspace.transactions.get(tx["_id"])["amount"] == 100
    stored = config.get_collection("transactions").find_one({"_id": to_object_id(tx["_id"])})
    assert stored["amount"] == 100
    assert remote_balance(cash) == 900


def test_failed_wallet_write_on_delete_restores_transaction(workspace, wallets, monkeypatch):
    cash, _ = wallets
    tx = workspace.transactions.create(expense(cash, 100))
    monkeypatch.setattr(workspace.wallets.repository.collection, "update_one", failing())

    assert workspace.transactions.delete(tx["_id"]) is None

    assert workspace.transactions.get(tx["_id"]) is not None
    assert config.get_collection("transactions").count_documents({"_id": to_object_id(tx["_id"])}) == 1
    assert remote_balance(cash) == 900


def test_delete_of_row_already_gone_remotely_keeps_balances(workspace, wallets):
    cash, _ = wallets
    tx = workspace.transactions.create(expense(cash, 100))
    # another session deleted the row (and reversed its 100) behind our back
    config.get_collection("transactions").delete_one({"_id": to_object_id(tx["_id"])})

    assert workspace.transactions.delete(tx["_id"]) is None

    assert balance(workspace, cash) == 900
    assert remote_balance(cash) == 900
    note = workspace.notifier.last
    assert note.destructive
    assert note.title == "Failed to delete transaction"
    assert note.description == f"Transaction {tx['_id']} not found remotely"


def test_transfer_turned_expense_gets_expense_category(workspace, wallets):
    cash, bank = wallets
    tx = workspace.transactions.create({
        "type": "transfer", "amount": 200, "wallet_id": cash,
        "destination_wallet_id": bank, "date": "2024-03-10",
    })
    assert tx["category_id"] == 18

    updated = workspace.transactions.update(tx["_id"], {"type": "expense"})

    assert updated["category_id"] == 12
    assert updated["destination_wallet_id"] is None
    stored = config.get_collection("transactions").find_one({"_id": to_object_id(tx["_id"])})
    assert stored["category_id"] == 12
    assert balance(workspace, cash) == 800
    assert balance(workspace, bank) == 500


def test_category_of_the_other_type_falls_back(workspace, wallets):
    cash, _ = wallets
    income = workspace.transactions.create({"type": "income", "amount": 50, "wallet_id": cash,
                                            "category_id": "expense_food"})
    assert income["category_id"] == 17
    assert workspace.transactions.create(expense(cash, 5, category_id=18))["category_id"] == 12


def test_validation_errors_reach_the_notifier(workspace, wallets):
    cash, _ = wallets
    result = workspace.transactions.create({"type": "transfer", "amount": 10, "wallet_id": cash})

    assert result is None
    note = workspace.notifier.last
    assert note.title == "Transfer Error"
    assert note.description == "Destination wallet is required for transfers"


def test_rejects_mutation_while_wallet_is_busy(workspace, wallets):
    cash, _ = wallets
    with workspace.guard.hold(cash):
        assert workspace.transactions.create(expense(cash, 100)) is None
    assert workspace.notifier.last.description.startswith("Another change to")
    assert balance(workspace, cash) == 1000
    assert not workspace.guard.is_busy(cash)


def test_same_date_sorted_by_creation_then_id(workspace, wallets):
    cash, _ = wallets
    store = workspace.transactions
    store.items = [
        {"_id": "a", "date": "2024-03-10", "created_at": 5},
        {"_id": "b", "date": "2024-03-11", "created_at": 1},
        {"_id": "c", "date": "2024-03-10", "created_at": 9},
        {"_id": "d", "date": "2024-03-10", "created_at": 9},
    ]
    store._sort()
    assert [tx["_id"] for tx in store.items] == ["b", "d", "c", "a"]


def test_queries(workspace, wallets):
    cash, bank = wallets
    store = workspace.transactions
    store.create({"type": "income", "amount": 500, "wallet_id": cash, "date": "2024-03-02",
                  "category_id": "income_salary"})
    store.create(expense(cash, 40, date="2024-03-15"))
    store.create(expense(bank, 60, date="2024-02-20"))
    store.create({"type": "transfer", "amount": 100, "wallet_id": bank,
                  "destination_wallet_id": cash, "date": "2024-03-03"})

    assert len(store.transactions_by_wallet(bank)) == 2
    assert len(store.transactions_by_category(2)) == 2
    assert len(store.transactions_in_range("2024-03-01", "2024-03-31")) == 3
    assert store.monthly_income("2024-03-20") == 500
    assert store.monthly_expense("2024-03-20") == 40
