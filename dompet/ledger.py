"""Wallet balance effects of transactions.

income    +amount to the source wallet
expense   -amount to the source wallet
transfer  -(amount + fee) to the source, +amount to the destination

Reversing a transaction negates every delta. Deltas for the same wallet are
summed, and a wallet whose net delta is zero is left out entirely.
"""
from collections import defaultdict
from typing import Any, Dict, Iterable, Mapping, Optional

from dompet.errors import ValidationError


APPLY = "apply"
REVERSE = "reverse"

TRANSACTION_TYPES = ("income", "expense", "transfer")

_EPSILON = 1e-9


def _money(value: Any, field: str) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a valid number")


def wallet_deltas(transaction: Mapping[str, Any], direction: str = APPLY) -> Dict[str, float]:
    """Per-wallet balance change caused by applying (or reversing) a transaction"""
    amount = _money(transaction.get("amount"), "amount")
    tx_type = transaction.get("type")
    source = transaction.get("wallet_id")
    deltas: Dict[str, float] = defaultdict(float)

    if tx_type == "income":
        deltas[source] += amount
    elif tx_type == "expense":
        deltas[source] -= amount
    elif tx_type == "transfer":
        fee = _money(transaction.get("fee"), "fee")
        deltas[source] -= amount + fee
        destination = transaction.get("destination_wallet_id")
        if destination:
            deltas[destination] += amount
    else:
        raise ValidationError(f"Unknown transaction type: {tx_type}")

    sign = -1.0 if direction == REVERSE else 1.0
    return {wallet_id: sign * delta for wallet_id, delta in deltas.items()}


def merge_deltas(*parts: Mapping[str, float]) -> Dict[str, float]:
    merged: Dict[str, float] = defaultdict(float)
    for part in parts:
        for wallet_id, delta in part.items():
            merged[wallet_id] += delta
    return {wallet_id: delta for wallet_id, delta in merged.items() if abs(delta) > _EPSILON}


def update_deltas(old: Mapping[str, Any], new: Mapping[str, Any]) -> Dict[str, float]:
    """Net change of moving from old to new: reverse(old) + apply(new)"""
    return merge_deltas(wallet_deltas(old, REVERSE), wallet_deltas(new, APPLY))


def total_effects(transactions: Iterable[Mapping[str, Any]]) -> Dict[str, float]:
    """Signed effect of every transaction, summed per wallet"""
    return merge_deltas(*(wallet_deltas(tx) for tx in transactions))


def validate_transaction(transaction: Mapping[str, Any], wallets: Mapping[str, Any]) -> None:
    """Reject a transaction before any write.

    wallets maps wallet id to wallet for the wallets the caller knows about.
    """
    tx_type = transaction.get("type")
    if tx_type not in TRANSACTION_TYPES:
        raise ValidationError(f"Unknown transaction type: {tx_type}")

    amount = _money(transaction.get("amount"), "amount")
    if amount <= 0:
        raise ValidationError("Amount must be greater than 0")

    source = transaction.get("wallet_id")
    if not source:
        raise ValidationError("Wallet is required")
    if source not in wallets:
        raise ValidationError("Wallet not found")

    if tx_type == "transfer":
        destination = transaction.get("destination_wallet_id")
        if not destination:
            raise ValidationError("Destination wallet is required for transfers", title="Transfer Error")
        if destination == source:
            raise ValidationError("Cannot transfer to the same wallet", title="Transfer Error")
        if destination not in wallets:
            raise ValidationError("Destination wallet not found", title="Transfer Error")
        if _money(transaction.get("fee"), "fee") < 0:
            raise ValidationError("Fee cannot be negative", title="Transfer Error")


def missing_wallets(deltas: Mapping[str, float], wallets: Mapping[str, Any]) -> Optional[str]:
    for wallet_id in deltas:
        if wallet_id not in wallets:
            return wallet_id
    return None
