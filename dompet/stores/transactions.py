"""Ledger updater: transactions and the wallet balances they move.

Unlike the other stores the ledger never touches local state before the
remote store has committed. Each mutation runs its remote writes in a
CompensatingBatch (the transaction row first, then one compare-and-swap per
wallet), so a failed wallet write undoes the row and any balance already
moved, and the in-memory lists only change once everything went through.
"""
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from dompet.categories.defaults import SYSTEM_TRANSFER_ID
from dompet.categories.resolver import CategoryResolver, default_resolver
from dompet.dates import in_same_month, parse_date, to_iso
from dompet.errors import ValidationError
from dompet.ledger import (
    REVERSE,
    TRANSACTION_TYPES,
    missing_wallets,
    update_deltas,
    validate_transaction,
    wallet_deltas,
)
from dompet.repositories.transactions import TransactionRepository
from dompet.repositories.wallets import WalletRepository
from dompet.stores.base import EntityStore
from dompet.stores.optimistic import CompensatingBatch, OptimisticCommand
from dompet.stores.wallets import WalletStore


_BALANCE_TOLERANCE = 0.005


def _sort_key(tx: Mapping[str, Any]) -> Tuple[str, int, str]:
    return (str(tx.get("date") or ""), int(tx.get("created_at") or 0), str(tx.get("_id") or ""))


class TransactionStore(EntityStore):
    label = "Transaction"
    tag = "LEDGER"

    def __init__(self, user_id: str, wallet_store: WalletStore,
                 repository: Optional[TransactionRepository] = None,
                 wallet_repository: Optional[WalletRepository] = None,
                 resolver: CategoryResolver = default_resolver, **kwargs):
        super().__init__(user_id, repository or TransactionRepository(), **kwargs)
        self.wallet_store = wallet_store
        self.wallet_repository = wallet_repository or wallet_store.repository
        self.resolver = resolver

    def _sort(self) -> None:
        self.items = sorted(self.items, key=_sort_key, reverse=True)

    def _prepare(self, data: Dict[str, Any], existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        tx_type = data.get("type")
        if tx_type not in TRANSACTION_TYPES:
            raise ValidationError(f"Unknown transaction type: {tx_type}")
        try:
            amount = float(data.get("amount"))
        except (TypeError, ValueError):
            raise ValidationError("Valid amount is required")

        doc = {
            "user_id": self.user_id,
            "type": tx_type,
            "amount": amount,
            "wallet_id": data.get("wallet_id"),
            "description": (data.get("description") or "").strip(),
            "date": to_iso(data.get("date")) or date.today().isoformat(),
        }
        if tx_type == "transfer":
            doc["category_id"] = SYSTEM_TRANSFER_ID
            doc["destination_wallet_id"] = data.get("destination_wallet_id")
            try:
                doc["fee"] = float(data.get("fee") or 0)
            except (TypeError, ValueError):
                raise ValidationError("Fee must be a valid number", title="Transfer Error")
        else:
            doc["category_id"] = self._category_for(data.get("category_id"), tx_type)
            doc["destination_wallet_id"] = None
            doc["fee"] = None

        validate_transaction(doc, self.wallet_store.by_id())
        return doc

    def _category_for(self, raw: Any, tx_type: str) -> int:
        """Resolved category id; one of another type (e.g. the transfer
        category left over when a transfer becomes an expense) falls back to
        the type's "other" category."""
        category_id = self.resolver.resolve(raw, tx_type)
        category = self.resolver.get(category_id)
        if category is not None and category.get("type") != tx_type:
            return self.resolver.fallback_id(tx_type)
        return category_id

    # Remote writes

    def _move_balances(self, batch: CompensatingBatch, deltas: Mapping[str, float]) -> List[Dict[str, Any]]:
        wallets = []
        for wallet_id, delta in deltas.items():
            wallets.append(batch.run(
                lambda w=wallet_id, d=delta: self.wallet_repository.apply_balance_delta(w, self.user_id, d),
                undo=lambda _, w=wallet_id, d=delta: self.wallet_repository.apply_balance_delta(w, self.user_id, -d),
            ))
        return wallets

    def _require_wallets(self, deltas: Mapping[str, float]) -> None:
        missing = missing_wallets(deltas, self.wallet_store.by_id())
        if missing:
            raise ValidationError(f"Wallet {missing} not found")

    def _commit(self, label: str, remote, apply_local) -> Any:
        return OptimisticCommand(
            remote=remote,
            apply_local=apply_local,
            revert_local=lambda: None,
            optimistic=False,
            label=label,
        ).execute()

    # Mutations

    def create(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        def action():
            doc = self._prepare(data)
            deltas = wallet_deltas(doc)

            def remote():
                with CompensatingBatch("create transaction") as batch:
                    saved = batch.run(
                        lambda: self.repository.insert_transaction(doc),
                        undo=lambda s: self.repository.delete_transaction(s["_id"], self.user_id),
                    )
                    wallets = self._move_balances(batch, deltas)
                return saved, wallets

            def apply_local(result):
                saved, wallets = result
                self.items = [saved] + self.items
                self._sort()
                self.wallet_store.apply_committed_balances(wallets)

            with self.guard.hold(*deltas):
                saved, _ = self._commit("create transaction", remote, apply_local)
            print(f"✅ [LEDGER] Created {saved['type']} {saved['_id']} of {saved['amount']}")
            return saved

        return self._boundary(action, success=("Success", "Transaction added."),
                              failure_title="Failed to add transaction")

    def update(self, item_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        def action():
            existing = self.require(item_id)
            merged = dict(existing)
            merged.update({k: v for k, v in changes.items() if k not in ("_id", "user_id", "created_at")})
            doc = self._prepare(merged, existing)
            self._require_wallets(wallet_deltas(existing))
            deltas = update_deltas(existing, doc)
            previous = {k: existing.get(k) for k in doc}

            def remote():
                with CompensatingBatch(f"update transaction {item_id}") as batch:
                    batch.run(
                        lambda: self.repository.update_transaction(item_id, self.user_id, doc),
                        undo=lambda _: self.repository.update_transaction(item_id, self.user_id, previous),
                    )
                    wallets = self._move_balances(batch, deltas)
                return wallets

            updated = dict(existing)
            updated.update(doc)

            def apply_local(wallets):
                self._replace_local(item_id, updated)
                self.wallet_store.apply_committed_balances(wallets)

            wallet_ids = set(wallet_deltas(existing)) | set(wallet_deltas(doc))
            with self.guard.hold(item_id, *wallet_ids):
                self.pending.add(item_id)
                try:
                    self._commit(f"update transaction {item_id}", remote, apply_local)
                finally:
                    self.pending.discard(item_id)
            return updated

        return self._boundary(action, success=("Success", "Transaction updated."),
                              failure_title="Failed to update transaction")

    def delete(self, item_id: str) -> Optional[bool]:
        def action():
            existing = self.require(item_id)
            deltas = wallet_deltas(existing, REVERSE)
            self._require_wallets(deltas)

            def remote():
                with CompensatingBatch(f"delete transaction {item_id}") as batch:
                    batch.run(
                        lambda: self.repository.delete_transaction(item_id, self.user_id),
                        undo=lambda _: self.repository.restore_transaction(existing),
                    )
                    wallets = self._move_balances(batch, deltas)
                return wallets

            def apply_local(wallets):
                self.items = [tx for tx in self.items if tx.get("_id") != item_id]
                self.wallet_store.apply_committed_balances(wallets)

            with self.guard.hold(item_id, *deltas):
                self.pending.add(item_id)
                try:
                    self._commit(f"delete transaction {item_id}", remote, apply_local)
                finally:
                    self.pending.discard(item_id)
            return True

        return self._boundary(action, success=("Success", "Transaction deleted."),
                              failure_title="Failed to delete transaction")

    def forget_wallet(self, wallet_id: str) -> None:
        """Drop local transactions of a wallet that was deleted remotely"""
        self.items = [tx for tx in self.items
                      if wallet_id not in (tx.get("wallet_id"), tx.get("destination_wallet_id"))]

    # Consistency check

    def audit_balances(self, opening_balances: Optional[Mapping[str, float]] = None) -> Dict[str, Dict[str, float]]:
        """Wallets whose balance differs from opening balance + transaction effects"""
        wallets = self.wallet_store.by_id()
        if opening_balances is None:
            opening_balances = {wid: float(w.get("opening_balance") or 0) for wid, w in wallets.items()}

        expected = {wid: float(opening_balances.get(wid, 0)) for wid in wallets}
        for tx in self.items:
            try:
                effects = wallet_deltas(tx)
            except ValidationError as e:
                print(f"⚠️ [LEDGER] Skipping transaction {tx.get('_id')} in audit: {e}")
                continue
            for wallet_id, delta in effects.items():
                if wallet_id in expected:
                    expected[wallet_id] += delta

        mismatches = {}
        for wallet_id, value in expected.items():
            actual = float(wallets[wallet_id].get("balance") or 0)
            if abs(actual - value) > _BALANCE_TOLERANCE:
                mismatches[wallet_id] = {"expected": value, "actual": actual, "difference": actual - value}
        if mismatches:
            print(f"⚠️ [LEDGER] {len(mismatches)} wallet(s) out of balance")
        return mismatches

    # Queries

    def transactions_by_wallet(self, wallet_id: str) -> List[Dict[str, Any]]:
        return [tx for tx in self.items
                if wallet_id in (tx.get("wallet_id"), tx.get("destination_wallet_id"))]

    def transactions_by_category(self, category_id: Any) -> List[Dict[str, Any]]:
        wanted = self.resolver.normalize(category_id)
        return [tx for tx in self.items
                if self.resolver.normalize(tx.get("category_id"), tx.get("type")) == wanted]

    def transactions_in_range(self, start: Any, end: Any) -> List[Dict[str, Any]]:
        start_date, end_date = parse_date(start), parse_date(end)
        if start_date is None or end_date is None:
            raise ValidationError("Valid start and end dates are required")
        result = []
        for tx in self.items:
            tx_date = parse_date(tx.get("date"))
            if tx_date and start_date <= tx_date <= end_date:
                result.append(tx)
        return result

    def _monthly_total(self, tx_type: str, now: Any) -> float:
        today = parse_date(now) or date.today()
        total = 0.0
        for tx in self._of_type(tx_type, self.items):
            tx_date = parse_date(tx.get("date"))
            if tx_date and in_same_month(tx_date, today):
                total += float(tx.get("amount") or 0)
        return total

    @staticmethod
    def _of_type(tx_type: str, transactions: Iterable[Mapping[str, Any]]) -> Iterable[Mapping[str, Any]]:
        return (tx for tx in transactions if tx.get("type") == tx_type)

    def monthly_income(self, now: Any = None) -> float:
        return self._monthly_total("income", now)

    def monthly_expense(self, now: Any = None) -> float:
        return self._monthly_total("expense", now)
