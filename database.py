"""
Document store helpers

Thin wrappers over pymongo shared by the route layer and the services.
Documents leave this layer through serialize_doc(), which renames ``_id`` to
``id`` and turns every ObjectId into its string form.
"""

import copy
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse a client supplied identifier, None when it cannot be an ObjectId"""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def serialize_doc(doc: Any, hidden: Iterable[str] = ()) -> Any:
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, list):
        return [serialize_doc(item, hidden) for item in doc]
    if not isinstance(doc, dict):
        return doc
    hidden = tuple(hidden)
    out: Dict[str, Any] = {}
    for key, value in doc.items():
        if key in hidden:
            continue
        out["id" if key == "_id" else key] = serialize_doc(value, hidden)
    return out


def snapshot(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Point-in-time copy of a document, detached from the original"""
    return copy.deepcopy(doc)


def create_document(db: Database, collection: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Insert a document and return it with its generated _id"""
    now = utcnow()
    doc = dict(data)
    doc.setdefault("createdAt", now)
    doc.setdefault("updatedAt", now)
    result = db[collection].insert_one(doc)
    doc["_id"] = result.inserted_id
    return doc


def get_documents(
    db: Database,
    collection: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    sort: Optional[Sequence[Tuple[str, int]]] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    cursor = db[collection].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(list(sort))
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def get_document(db: Database, collection: str, identifier: Any) -> Optional[Dict[str, Any]]:
    oid = to_object_id(identifier)
    if oid is None:
        return None
    return db[collection].find_one({"_id": oid})


def update_document(db: Database, collection: str, identifier: Any, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Overwrite the given fields, leaving the rest untouched"""
    oid = to_object_id(identifier)
    if oid is None:
        return None
    return db[collection].find_one_and_update(
        {"_id": oid},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )


def delete_document(db: Database, collection: str, identifier: Any) -> bool:
    oid = to_object_id(identifier)
    if oid is None:
        return False
    return db[collection].delete_one({"_id": oid}).deleted_count > 0
