import time
import traceback
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId

from config import get_collection


def to_object_id(id_str: Any) -> Optional[ObjectId]:
    """Convert a string id to ObjectId, None when it is not a valid id"""
    if isinstance(id_str, ObjectId):
        return id_str
    try:
        return ObjectId(str(id_str))
    except (InvalidId, TypeError):
        return None


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Convert ObjectId ke string untuk JSON"""
    if doc and "_id" in doc and isinstance(doc["_id"], ObjectId):
        doc["_id"] = str(doc["_id"])
    return doc


def now_ts() -> int:
    return int(time.time())


class MongoRepository:
    def __init__(self, collection_name: str):
        self.collection_name = collection_name
        self.collection = get_collection(collection_name)

    def insert_one(self, data: Dict[str, Any]) -> str:
        """Insert satu dokumen dan return ID"""
        try:
            result = self.collection.insert_one(data)
            data["_id"] = str(result.inserted_id)
            return data["_id"]
        except Exception:
            print(f"❌ [BASE] Insert into {self.collection_name} failed: {traceback.format_exc()}")
            raise

    def find_many(self, query: Dict[str, Any], limit: int = 0, sort: Optional[List] = None) -> List[Dict[str, Any]]:
        """Find banyak dokumen dengan query sederhana"""
        cursor = self.collection.find(query)
        if sort:
            cursor = cursor.sort(sort)
        if limit:
            cursor = cursor.limit(limit)
        return [serialize(doc) for doc in cursor]

    def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Find satu dokumen"""
        return serialize(self.collection.find_one(query))

    def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        """Count dokumen"""
        if query is None:
            query = {}
        return self.collection.count_documents(query)

    # Owner-scoped helpers; every entity except default categories has a user_id

    def list_by_user(self, user_id: str, sort: Optional[List] = None) -> List[Dict[str, Any]]:
        """Get semua dokumen milik user tertentu"""
        return self.find_many({"user_id": user_id}, sort=sort)

    def get_owned(self, id_str: str, user_id: str) -> Optional[Dict[str, Any]]:
        """Get dokumen berdasarkan ID dengan validasi user ownership"""
        obj_id = to_object_id(id_str)
        if obj_id is None:
            return None
        return serialize(self.collection.find_one({"_id": obj_id, "user_id": user_id}))

    def update_owned(self, id_str: str, user_id: str, updates: Dict[str, Any]) -> bool:
        """Update dokumen dengan validasi user ownership"""
        obj_id = to_object_id(id_str)
        if obj_id is None:
            return False
        updates = {k: v for k, v in updates.items() if k not in ("_id", "user_id")}
        updates["updated_at"] = now_ts()
        result = self.collection.update_one({"_id": obj_id, "user_id": user_id}, {"$set": updates})
        return result.matched_count > 0

    def delete_owned(self, id_str: str, user_id: str) -> bool:
        """Delete dokumen dengan validasi user ownership"""
        obj_id = to_object_id(id_str)
        if obj_id is None:
            return False
        result = self.collection.delete_one({"_id": obj_id, "user_id": user_id})
        return result.deleted_count > 0
