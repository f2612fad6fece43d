from typing import Any, Dict, List, Optional

from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from dompet.errors import NotFoundError, RemoteWriteError, SchemaDriftError, is_schema_drift_error
from dompet.repositories.base import MongoRepository, now_ts, serialize, to_object_id


CORE_FIELDS = ("amount", "category_id", "description", "date", "type", "wallet_id", "user_id")
TRANSFER_FIELDS = ("destination_wallet_id", "fee")

# Newest first; same-date rows by creation time, then id
SORT_ORDER = [("date", DESCENDING), ("created_at", DESCENDING), ("_id", DESCENDING)]


class TransactionRepository(MongoRepository):
    def __init__(self):
        super().__init__("transactions")

    def list_by_user(self, user_id: str, sort: Optional[List] = None) -> List[Dict[str, Any]]:
        """Query sederhana untuk mendapatkan transaksi user"""
        transactions = super().list_by_user(user_id, sort=sort or SORT_ORDER)
        for tx in transactions:
            tx.setdefault("description", "")
            tx.setdefault("destination_wallet_id", None)
            tx.setdefault("fee", None)
            tx.setdefault("created_at", 0)
        return transactions

    def insert_transaction(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert transaksi; on schema drift retry once with the core fields.

        A transfer inserted through the fallback gets its destination and fee
        attached with a follow-up update whose failure is tolerated.
        """
        doc = dict(data)
        current_time = now_ts()
        doc.setdefault("created_at", current_time)
        doc["updated_at"] = current_time
        try:
            self.collection.insert_one(doc)
            return serialize(doc)
        except PyMongoError as e:
            if not is_schema_drift_error(e):
                print(f"❌ [TRANSACTIONS] Error inserting transaction: {e}")
                raise RemoteWriteError(str(e)) from e
            print(f"⚠️ [TRANSACTIONS] Schema error on insert, retrying with core fields: {e}")
            original_error = e

        fallback = {k: doc[k] for k in CORE_FIELDS if k in doc}
        fallback["created_at"] = doc["created_at"]
        fallback["updated_at"] = doc["updated_at"]
        try:
            self.collection.insert_one(fallback)
        except PyMongoError as e:
            print(f"❌ [TRANSACTIONS] Fallback insert failed: {e}")
            raise SchemaDriftError(str(original_error)) from e

        if doc.get("type") == "transfer" and doc.get("destination_wallet_id"):
            extra = {"destination_wallet_id": doc["destination_wallet_id"], "fee": doc.get("fee") or 0}
            try:
                self.collection.update_one({"_id": fallback["_id"]}, {"$set": extra})
                fallback.update(extra)
            except PyMongoError as e:
                print(f"⚠️ [TRANSACTIONS] Could not attach transfer details: {e}")
        return serialize(fallback)

    def update_transaction(self, transaction_id: str, user_id: str, updates: Dict[str, Any]) -> None:
        """Update transaksi; on schema drift retry once with the core fields"""
        obj_id = to_object_id(transaction_id)
        if obj_id is None:
            raise RemoteWriteError(f"Invalid transaction id {transaction_id}")
        fields = {k: v for k, v in updates.items() if k not in ("_id", "user_id", "created_at")}
        fields["updated_at"] = now_ts()
        query = {"_id": obj_id, "user_id": user_id}
        try:
            result = self.collection.update_one(query, {"$set": fields})
        except PyMongoError as e:
            if not is_schema_drift_error(e):
                print(f"❌ [TRANSACTIONS] Error updating transaction: {e}")
                raise RemoteWriteError(str(e)) from e
            print(f"⚠️ [TRANSACTIONS] Schema error on update, retrying with core fields: {e}")
            basic = {k: v for k, v in fields.items() if k in CORE_FIELDS or k == "updated_at"}
            try:
                result = self.collection.update_one(query, {"$set": basic})
            except PyMongoError as fallback_error:
                print(f"❌ [TRANSACTIONS] Fallback update failed: {fallback_error}")
                raise SchemaDriftError(str(e)) from fallback_error
        if result.matched_count == 0:
            raise RemoteWriteError(f"Transaction {transaction_id} not found remotely")

    def delete_transaction(self, transaction_id: str, user_id: str) -> None:
        """Delete transaksi.

        When the delete trips over a stale reference, null the optional
        transfer fields and retry the delete exactly once.
        """
        obj_id = to_object_id(transaction_id)
        if obj_id is None:
            raise RemoteWriteError(f"Invalid transaction id {transaction_id}")
        query = {"_id": obj_id, "user_id": user_id}
        try:
            result = self.collection.delete_one(query)
            self._require_deleted(result, transaction_id)
            return
        except PyMongoError as e:
            if not is_schema_drift_error(e):
                print(f"❌ [TRANSACTIONS] Error deleting transaction: {e}")
                raise RemoteWriteError(str(e)) from e
            print(f"⚠️ [TRANSACTIONS] Schema error on delete, resetting transfer fields: {e}")
            original_error = e

        try:
            self.collection.update_one(query, {"$set": {"destination_wallet_id": None, "fee": None}})
            print("🔄 [TRANSACTIONS] Reset transfer fields: Success")
        except PyMongoError as reset_error:
            print(f"⚠️ [TRANSACTIONS] Reset transfer fields: Failed ({reset_error})")
        try:
            result = self.collection.delete_one(query)
        except PyMongoError as e:
            print(f"❌ [TRANSACTIONS] Retry delete failed: {e}")
            raise RemoteWriteError(str(original_error)) from e
        self._require_deleted(result, transaction_id)

    @staticmethod
    def _require_deleted(result, transaction_id: str) -> None:
        # nothing deleted means the row is already gone; its balance effect with it
        if result.deleted_count == 0:
            print(f"⚠️ [TRANSACTIONS] Transaction {transaction_id} was already deleted remotely")
            raise NotFoundError(f"Transaction {transaction_id} not found remotely")

    def restore_transaction(self, doc: Dict[str, Any]) -> None:
        """Re-insert a deleted transaction under its original id"""
        restored = dict(doc)
        restored["_id"] = to_object_id(doc["_id"])
        self.collection.insert_one(restored)

    def delete_by_wallet(self, wallet_id: str, user_id: str) -> int:
        """Delete every transaction moving money out of or into a wallet"""
        result = self.collection.delete_many({
            "user_id": user_id,
            "$or": [{"wallet_id": wallet_id}, {"destination_wallet_id": wallet_id}],
        })
        return result.deleted_count

    def count_by_category(self, user_id: str, category_id: int) -> int:
        return self.count({"user_id": user_id, "category_id": category_id})
