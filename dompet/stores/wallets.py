from typing import Any, Callable, Dict, Iterable, List, Optional

from dompet.errors import NotFoundError, ValidationError
from dompet.ledger import total_effects
from dompet.repositories.transactions import TransactionRepository
from dompet.repositories.wallets import WALLET_TYPES, WalletRepository, normalize_wallet_type
from dompet.stores.base import EntityStore
from dompet.stores.optimistic import CompensatingBatch


class WalletStore(EntityStore):
    label = "Wallet"
    tag = "WALLET"

    def __init__(self, user_id: str, repository: Optional[WalletRepository] = None,
                 transaction_repository: Optional[TransactionRepository] = None, **kwargs):
        super().__init__(user_id, repository or WalletRepository(), **kwargs)
        self.transaction_repository = transaction_repository or TransactionRepository()
        # Called with the wallet id once a wallet and its transactions are gone
        self.on_deleted: Optional[Callable[[str], None]] = None

    def _prepare(self, data: Dict[str, Any], existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("Wallet name is required")
        wallet_type = normalize_wallet_type(data.get("type"))
        if not wallet_type:
            raise ValidationError("Wallet type is required")
        if wallet_type not in WALLET_TYPES:
            raise ValidationError("Invalid wallet type")
        color = (data.get("color") or "").strip()
        if not color:
            raise ValidationError("Wallet color is required")

        doc = {"name": name, "type": wallet_type, "color": color, "icon": data.get("icon")}
        if existing is None:
            try:
                doc["balance"] = float(data.get("balance", 0) or 0)
            except (TypeError, ValueError):
                raise ValidationError("Valid balance is required")
            doc["opening_balance"] = doc["balance"]
            doc["version"] = 0
        return doc

    def _remote_create(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        return self.repository.create_wallet(self.user_id, doc)

    def _remote_update(self, item_id: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        # balance and version stay owned by the ledger
        if not self.repository.update_wallet(item_id, self.user_id, doc):
            raise NotFoundError("Wallet not found or update failed.")
        return doc

    def _remote_delete(self, item_id: str) -> None:
        with CompensatingBatch(f"delete wallet {item_id}") as batch:
            removed = batch.run(
                lambda: self._remove_wallet_transactions(item_id),
                undo=self._restore_transactions,
            )
            # transfers with a surviving counterpart wallet are unwound there too
            counter = {w: -d for w, d in total_effects(removed).items() if w != item_id}
            moved = [
                batch.run(
                    lambda w=wallet_id, d=delta: self.repository.apply_balance_delta(w, self.user_id, d),
                    undo=lambda _, w=wallet_id, d=delta: self.repository.apply_balance_delta(w, self.user_id, -d),
                )
                for wallet_id, delta in counter.items()
            ]
            batch.run(lambda: self._delete_wallet_row(item_id))
        self.apply_committed_balances(moved)
        print(f"✅ [WALLET] Deleted wallet {item_id} and {len(removed)} transaction(s)")
        if self.on_deleted:
            self.on_deleted(item_id)

    def _delete_wallet_row(self, wallet_id: str) -> None:
        if not self.repository.delete_wallet(wallet_id, self.user_id):
            raise NotFoundError("Wallet not found or delete failed.")

    def _remove_wallet_transactions(self, wallet_id: str) -> List[Dict[str, Any]]:
        docs = list(self.transaction_repository.collection.find({
            "user_id": self.user_id,
            "$or": [{"wallet_id": wallet_id}, {"destination_wallet_id": wallet_id}],
        }))
        self.transaction_repository.delete_by_wallet(wallet_id, self.user_id)
        return docs

    def _restore_transactions(self, docs: List[Dict[str, Any]]) -> None:
        if docs:
            self.transaction_repository.collection.insert_many(docs)

    # Ledger hook: balances only change through committed ledger writes

    def apply_committed_balances(self, wallets: Iterable[Dict[str, Any]]) -> None:
        committed = {w["_id"]: w for w in wallets}
        self.items = [dict(w, **{k: committed[w["_id"]][k] for k in ("balance", "version")})
                      if w.get("_id") in committed else w
                      for w in self.items]

    # Queries

    def by_id(self) -> Dict[str, Dict[str, Any]]:
        return {w["_id"]: w for w in self.items}

    def by_type(self, wallet_type: str) -> List[Dict[str, Any]]:
        return [w for w in self.items if w.get("type") == wallet_type]

    def sorted_by_balance(self) -> List[Dict[str, Any]]:
        return sorted(self.items, key=lambda w: float(w.get("balance") or 0), reverse=True)

    def total_balance(self) -> float:
        return sum(float(w.get("balance") or 0) for w in self.items)
