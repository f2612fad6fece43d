import pytest

from dompet.errors import ValidationError
from dompet.ledger import (
    REVERSE,
    merge_deltas,
    missing_wallets,
    total_effects,
    update_deltas,
    validate_transaction,
    wallet_deltas,
)


WALLETS = {"A": {"_id": "A"}, "B": {"_id": "B"}}


def test_income_and_expense_touch_source_only():
    assert wallet_deltas({"type": "income", "amount": 100, "wallet_id": "A"}) == {"A": 100}
    assert wallet_deltas({"type": "expense", "amount": 100, "wallet_id": "A"}) == {"A": -100}


def test_transfer_debits_fee_from_source():
    tx = {"type": "transfer", "amount": 200, "fee": 5, "wallet_id": "A", "destination_wallet_id": "B"}
    assert wallet_deltas(tx) == {"A": -205, "B": 200}
    assert wallet_deltas(tx, REVERSE) == {"A": 205, "B": -200}


def test_update_is_a_single_net_delta():
    old = {"type": "expense", "amount": 100, "wallet_id": "A"}
    new = {"type": "expense", "amount": 150, "wallet_id": "A"}
    assert update_deltas(old, new) == {"A": -50}


def test_update_moving_wallet_touches_both():
    old = {"type": "expense", "amount": 100, "wallet_id": "A"}
    new = {"type": "expense", "amount": 100, "wallet_id": "B"}
    assert update_deltas(old, new) == {"A": 100, "B": -100}


def test_unchanged_update_has_no_deltas():
    tx = {"type": "income", "amount": 42, "wallet_id": "A"}
    assert update_deltas(tx, dict(tx, description="renamed")) == {}


def test_merge_drops_zero_sums():
    assert merge_deltas({"A": 10, "B": 5}, {"A": -10}) == {"B": 5}


def test_total_effects_sums_every_transaction():
    transactions = [
        {"type": "income", "amount": 1000, "wallet_id": "A"},
        {"type": "expense", "amount": 300, "wallet_id": "A"},
        {"type": "transfer", "amount": 200, "fee": 5, "wallet_id": "A", "destination_wallet_id": "B"},
    ]
    assert total_effects(transactions) == {"A": 495, "B": 200}


@pytest.mark.parametrize("tx, message", [
    ({"type": "expense", "amount": 0, "wallet_id": "A"}, "Amount must be greater than 0"),
    ({"type": "expense", "amount": 10, "wallet_id": "Z"}, "Wallet not found"),
    ({"type": "expense", "amount": 10}, "Wallet is required"),
    ({"type": "gift", "amount": 10, "wallet_id": "A"}, "Unknown transaction type: gift"),
])
def test_validation_rejects(tx, message):
    with pytest.raises(ValidationError) as exc:
        validate_transaction(tx, WALLETS)
    assert exc.value.message == message


@pytest.mark.parametrize("extra, message", [
    ({}, "Destination wallet is required for transfers"),
    ({"destination_wallet_id": "A"}, "Cannot transfer to the same wallet"),
    ({"destination_wallet_id": "Z"}, "Destination wallet not found"),
    ({"destination_wallet_id": "B", "fee": -1}, "Fee cannot be negative"),
])
def test_transfer_validation_uses_transfer_title(extra, message):
    tx = dict({"type": "transfer", "amount": 10, "wallet_id": "A"}, **extra)
    with pytest.raises(ValidationError) as exc:
        validate_transaction(tx, WALLETS)
    assert exc.value.message == message
    assert exc.value.title == "Transfer Error"


def test_missing_wallets_reports_first_unknown():
    assert missing_wallets({"A": 1, "Z": 2}, WALLETS) == "Z"
    assert missing_wallets({"A": 1}, WALLETS) is None
