"""
Side-effect services: notifications, recycle bin and activity log.

Notifications and activity entries are best effort. A failed write is logged
and swallowed so it never changes the outcome of the request that fired it.
The recycle bin is not best effort: archive() must succeed before the caller
removes the original document.
"""

import logging
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING
from pymongo.collection import Collection

from database import NEWEST_FIRST, snapshot, to_object_id, utcnow

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = ("info", "success", "warning", "error")


class NotificationService:
    def __init__(self, collection: Collection):
        self.collection = collection

    def create(self, title: str, message: str, type: str = "info") -> Optional[Dict[str, Any]]:
        if type not in NOTIFICATION_TYPES:
            type = "info"
        doc = {
            "title": title,
            "message": message,
            "type": type,
            "isRead": False,
            "createdAt": utcnow(),
        }
        try:
            doc["_id"] = self.collection.insert_one(doc).inserted_id
        except Exception:
            logger.exception("Failed to create notification %r", title)
            return None
        return doc

    def list(self) -> List[Dict[str, Any]]:
        return list(self.collection.find().sort(NEWEST_FIRST))

    def mark_read(self, identifier: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(identifier)
        if oid is None:
            return None
        if self.collection.update_one({"_id": oid}, {"$set": {"isRead": True}}).matched_count == 0:
            return None
        return self.collection.find_one({"_id": oid})

    def delete(self, identifier: str) -> bool:
        oid = to_object_id(identifier)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count > 0


class ActivityLogService:
    def __init__(self, collection: Collection):
        self.collection = collection

    def log(self, user: str, action: str, entity: str, details: str = "") -> None:
        try:
            self.collection.insert_one({
                "user": user or "System",
                "action": action,
                "entity": entity,
                "details": details,
                "createdAt": utcnow(),
            })
        except Exception:
            logger.exception("Failed to log activity %s %s", action, entity)

    def list(self) -> List[Dict[str, Any]]:
        return list(self.collection.find().sort(NEWEST_FIRST))


class RecycleBinService:
    """Soft-delete bookkeeping. Entries hold a full copy of the deleted document."""

    def __init__(self, collection: Collection):
        self.collection = collection

    def archive(self, entity_type: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        entry = {
            "entityType": entity_type,
            "data": snapshot(doc),
            "deletedAt": utcnow(),
        }
        entry["_id"] = self.collection.insert_one(entry).inserted_id
        logger.info("Archived %s %s", entity_type, doc.get("_id"))
        return entry

    def list(self) -> List[Dict[str, Any]]:
        return list(self.collection.find().sort([("deletedAt", DESCENDING), ("_id", DESCENDING)]))

    def get(self, identifier: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(identifier)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})

    def restore(self, entry: Dict[str, Any], target: Collection) -> Dict[str, Any]:
        """Re-insert the snapshot into its origin collection under a new _id.

        The entry is removed only after the insert succeeds, so a failure in
        between leaves a duplicate rather than losing the data.
        """
        doc = snapshot(entry.get("data") or {})
        doc.pop("_id", None)
        doc["_id"] = target.insert_one(doc).inserted_id
        self.collection.delete_one({"_id": entry["_id"]})
        logger.info("Restored %s %s from recycle bin", entry.get("entityType"), doc["_id"])
        return doc

    def purge(self, identifier: str) -> bool:
        oid = to_object_id(identifier)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count > 0

    def empty(self) -> int:
        return self.collection.delete_many({}).deleted_count
