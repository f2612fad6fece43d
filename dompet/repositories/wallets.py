from typing import Any, Dict, List, Optional

import config
from dompet.errors import ConcurrentUpdateError, NotFoundError
from dompet.repositories.base import MongoRepository, now_ts, serialize, to_object_id


WALLET_TYPES = ("cash", "bank", "e-wallet", "investment")
DISPLAY_FIELDS = ("name", "type", "color", "icon")


def normalize_wallet_type(wallet_type: Optional[str]) -> Optional[str]:
    # Old rows stored e-wallets as "credit"
    if wallet_type == "credit":
        return "e-wallet"
    return wallet_type


class WalletRepository(MongoRepository):
    def __init__(self):
        super().__init__("wallets")

    def list_by_user(self, user_id: str, sort: Optional[List] = None) -> List[Dict[str, Any]]:
        """Get semua wallet untuk user tertentu"""
        wallets = super().list_by_user(user_id, sort=sort)
        for wallet in wallets:
            self._with_defaults(wallet)
        return wallets

    def create_wallet(self, user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        opening_balance = float(data.get("balance", data.get("opening_balance", 0)) or 0)
        current_time = now_ts()
        doc = {
            "user_id": user_id,
            "name": data["name"].strip(),
            "balance": opening_balance,
            "opening_balance": opening_balance,
            "type": normalize_wallet_type(data.get("type")) or "cash",
            "color": data.get("color", ""),
            "icon": data.get("icon"),
            "version": 0,
            "created_at": current_time,
            "updated_at": current_time,
        }
        self.insert_one(doc)
        print(f"✅ [WALLET] Created wallet {doc['_id']} ({doc['name']}) with balance {opening_balance}")
        return doc

    def update_wallet(self, wallet_id: str, user_id: str, updates: Dict[str, Any]) -> bool:
        """Update field tampilan wallet; balance hanya diubah lewat ledger"""
        allowed = {k: v for k, v in updates.items() if k in DISPLAY_FIELDS}
        if "type" in allowed:
            allowed["type"] = normalize_wallet_type(allowed["type"])
        if not allowed:
            return self.get_owned(wallet_id, user_id) is not None
        return self.update_owned(wallet_id, user_id, allowed)

    def delete_wallet(self, wallet_id: str, user_id: str) -> bool:
        return self.delete_owned(wallet_id, user_id)

    def apply_balance_delta(self, wallet_id: str, user_id: str, delta: float,
                            retries: Optional[int] = None) -> Dict[str, Any]:
        """Add delta to the wallet balance with compare-and-swap on version.

        On a version mismatch the wallet is re-read and the delta applied to
        the fresh balance. Raises ConcurrentUpdateError when every attempt
        loses the race, NotFoundError when the wallet is gone.
        """
        attempts = retries if retries is not None else config.WALLET_CAS_RETRIES
        obj_id = to_object_id(wallet_id)
        if obj_id is None:
            raise NotFoundError(f"Wallet {wallet_id} not found.")

        for attempt in range(1, max(attempts, 1) + 1):
            wallet = self.collection.find_one({"_id": obj_id, "user_id": user_id})
            if not wallet:
                raise NotFoundError(f"Wallet {wallet_id} not found.")

            current_balance = float(wallet.get("balance", 0))
            new_balance = current_balance + delta
            query = {"_id": obj_id, "user_id": user_id}
            if "version" in wallet:
                query["version"] = wallet["version"]
            else:
                query["version"] = {"$exists": False}

            result = self.collection.update_one(
                query,
                {"$set": {"balance": new_balance, "updated_at": now_ts()}, "$inc": {"version": 1}},
            )
            if result.matched_count > 0:
                print(f"💰 [WALLET] {wallet_id}: {current_balance} + ({delta}) = {new_balance}")
                wallet["balance"] = new_balance
                wallet["version"] = int(wallet.get("version", 0)) + 1
                return self._with_defaults(serialize(wallet))

            print(f"⚠️ [WALLET] Version conflict on {wallet_id} (attempt {attempt}/{attempts}), re-reading balance")

        raise ConcurrentUpdateError(f"Wallet {wallet_id} was modified concurrently; balance not updated.")

    @staticmethod
    def _with_defaults(wallet: Dict[str, Any]) -> Dict[str, Any]:
        wallet.setdefault("balance", 0.0)
        wallet.setdefault("opening_balance", 0.0)
        wallet.setdefault("version", 0)
        wallet.setdefault("color", "")
        wallet.setdefault("icon", None)
        wallet["type"] = normalize_wallet_type(wallet.get("type")) or "cash"
        return wallet
