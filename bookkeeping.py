"""
Notification, recycle bin and activity log routes.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from pymongo.errors import DuplicateKeyError

from context import AppContext, get_ctx
from database import serialize_doc
from errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Bookkeeping"])


# ---------------------- Notifications ----------------------
@router.get("/api/notifications")
def list_notifications(ctx: AppContext = Depends(get_ctx)):
    return [serialize_doc(n) for n in ctx.notifications.list()]


@router.put("/api/notifications/{notification_id}/read")
def mark_notification_read(notification_id: str, ctx: AppContext = Depends(get_ctx)):
    updated = ctx.notifications.mark_read(notification_id)
    if updated is None:
        raise NotFoundError("Notification", notification_id)
    return serialize_doc(updated)


@router.delete("/api/notifications/{notification_id}")
def delete_notification(notification_id: str, ctx: AppContext = Depends(get_ctx)):
    if not ctx.notifications.delete(notification_id):
        raise NotFoundError("Notification", notification_id)
    return {"success": True}


@router.post("/api/test-notification")
def test_notification(ctx: AppContext = Depends(get_ctx)):
    note = ctx.notifications.create("Test Notification", "This is a sample notification", "info")
    if note is None:
        return {"success": False, "message": "Failed to create test notification"}
    return {"success": True, "message": "Notification created"}


# ---------------------- Recycle bin ----------------------

def serialize_entry(ctx: AppContext, entry: Dict[str, Any]) -> Dict[str, Any]:
    resource = ctx.resource(entry.get("entityType"))
    return serialize_doc(entry, resource.hidden if resource else ())


@router.get("/api/recycle-bin")
def list_recycle_bin(ctx: AppContext = Depends(get_ctx)):
    return [serialize_entry(ctx, e) for e in ctx.recycle_bin.list()]


@router.get("/api/recycle-bin/{entry_id}")
def get_recycle_bin_entry(entry_id: str, ctx: AppContext = Depends(get_ctx)):
    entry = ctx.recycle_bin.get(entry_id)
    if entry is None:
        raise NotFoundError("Recycle bin entry", entry_id)
    return serialize_entry(ctx, entry)


@router.post("/api/recycle-bin/{entry_id}/restore")
def restore_recycle_bin_entry(entry_id: str, ctx: AppContext = Depends(get_ctx)):
    entry = ctx.recycle_bin.get(entry_id)
    if entry is None:
        raise NotFoundError("Recycle bin entry", entry_id)
    resource = ctx.resource(entry.get("entityType"))
    if resource is None:
        raise ValidationError(f"Cannot restore unknown entity type {entry.get('entityType')!r}")

    resource.check_unique(ctx, entry.get("data") or {})
    try:
        doc = ctx.recycle_bin.restore(entry, ctx.collection(resource.collection))
    except DuplicateKeyError:
        raise ConflictError(f"Cannot restore, a {resource.label.lower()} with the same unique field exists")
    ctx.notifications.create(f"{resource.label} Restored", f"{resource.label} restored from recycle bin", "success")
    ctx.activity.log(ctx.settings.activity_actor, "RESTORE", resource.name, f"Restored {doc['_id']}")
    return {"success": True, "id": str(doc["_id"]), "entityType": resource.name}


@router.delete("/api/recycle-bin/{entry_id}")
def purge_recycle_bin_entry(entry_id: str, ctx: AppContext = Depends(get_ctx)):
    if not ctx.recycle_bin.purge(entry_id):
        raise NotFoundError("Recycle bin entry", entry_id)
    ctx.activity.log(ctx.settings.activity_actor, "PURGE", "RecycleBin", f"Permanently deleted {entry_id}")
    return {"success": True}


@router.delete("/api/recycle-bin")
def empty_recycle_bin(ctx: AppContext = Depends(get_ctx)):
    removed = ctx.recycle_bin.empty()
    ctx.activity.log(ctx.settings.activity_actor, "PURGE", "RecycleBin", f"Emptied {removed} entries")
    return {"success": True, "message": "Recycle bin emptied", "deleted": removed}


# ---------------------- Activity ----------------------
@router.get("/api/activity")
def list_activity(ctx: AppContext = Depends(get_ctx)):
    return [serialize_doc(a) for a in ctx.activity.list()]
