"""
Generic CRUD routes.

crud_router() turns a Resource (entity name, label, schemas) into the five
list/get/create/update/delete endpoints under /api/<name>. The primary write
always happens first; notifications and activity entries are fired only after
it succeeds. Deletes are archive-then-delete through the recycle bin.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Type

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from pymongo.errors import DuplicateKeyError

from auth import hash_password
from context import AppContext, get_ctx
from database import (
    create_document,
    delete_document,
    get_document,
    get_documents,
    serialize_doc,
    to_object_id,
    update_document,
    utcnow,
)
from errors import ConflictError, NotFoundError
from schemas import Asset, AssetUpdate, Product, ProductUpdate, User, UserUpdate, Vendor, VendorUpdate

logger = logging.getLogger(__name__)


@dataclass
class Resource:
    name: str
    label: str
    create_model: Type[BaseModel]
    update_model: Type[BaseModel]
    hidden: Tuple[str, ...] = ()
    unique: Tuple[str, ...] = ()
    prepare: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None

    @property
    def collection(self) -> str:
        return self.name

    def serialize(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        return serialize_doc(doc, self.hidden)

    def clean(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.prepare(data) if self.prepare else data

    def check_unique(self, ctx: AppContext, data: Dict[str, Any], exclude: Any = None) -> None:
        for field in self.unique:
            value = data.get(field)
            if value is None:
                continue
            query: Dict[str, Any] = {field: value}
            if exclude is not None:
                query["_id"] = {"$ne": exclude}
            if ctx.collection(self.collection).find_one(query):
                raise ConflictError(f"{self.label} {field} already exists")


def fetch_or_404(ctx: AppContext, collection: str, label: str, item_id: str) -> Dict[str, Any]:
    doc = get_document(ctx.db, collection, item_id)
    if doc is None:
        raise NotFoundError(label, item_id)
    return doc


def archive_and_delete(ctx: AppContext, entity_type: str, label: str, item_id: str) -> Dict[str, Any]:
    """Copy the document into the recycle bin, then remove the original.

    Raises NotFoundError when the id is unknown. If the delete fails after the
    archive was written the snapshot is left behind as a duplicate.
    """
    doc = fetch_or_404(ctx, entity_type, label, item_id)
    ctx.recycle_bin.archive(entity_type, doc)
    delete_document(ctx.db, entity_type, doc["_id"])
    return doc


def crud_router(resource: Resource) -> APIRouter:
    router = APIRouter(prefix=f"/api/{resource.name}", tags=[resource.label])
    CreateModel = resource.create_model
    UpdateModel = resource.update_model
    label = resource.label

    @router.get("")
    def list_items(ctx: AppContext = Depends(get_ctx)):
        return [resource.serialize(d) for d in get_documents(ctx.db, resource.collection)]

    @router.get("/{item_id}")
    def get_item(item_id: str, ctx: AppContext = Depends(get_ctx)):
        return resource.serialize(fetch_or_404(ctx, resource.collection, label, item_id))

    @router.post("", status_code=201)
    def create_item(payload: CreateModel, ctx: AppContext = Depends(get_ctx)):
        data = resource.clean(payload.model_dump(exclude_none=True))
        resource.check_unique(ctx, data)
        try:
            doc = create_document(ctx.db, resource.collection, data)
        except DuplicateKeyError:
            raise ConflictError(f"{label} already exists")
        ctx.notifications.create(f"{label} Added", f"{label} created successfully", "success")
        ctx.activity.log(ctx.settings.activity_actor, "CREATE", resource.name, f"{label} created")
        return resource.serialize(doc)

    @router.put("/{item_id}")
    def update_item(item_id: str, payload: UpdateModel, ctx: AppContext = Depends(get_ctx)):
        oid = to_object_id(item_id)
        if oid is None:
            raise NotFoundError(label, item_id)
        changes = resource.clean(payload.model_dump(exclude_unset=True, exclude_none=True))
        resource.check_unique(ctx, changes, exclude=oid)
        changes["updatedAt"] = utcnow()
        try:
            doc = update_document(ctx.db, resource.collection, oid, changes)
        except DuplicateKeyError:
            raise ConflictError(f"{label} already exists")
        if doc is None:
            raise NotFoundError(label, item_id)
        ctx.notifications.create(f"{label} Updated", f"{label} updated successfully", "info")
        ctx.activity.log(ctx.settings.activity_actor, "UPDATE", resource.name, f"{label} {item_id} updated")
        return resource.serialize(doc)

    @router.delete("/{item_id}")
    def delete_item(item_id: str, ctx: AppContext = Depends(get_ctx)):
        archive_and_delete(ctx, resource.collection, label, item_id)
        ctx.notifications.create(f"{label} Deleted", f"{label} moved to recycle bin", "warning")
        ctx.activity.log(
            ctx.settings.activity_actor, "DELETE", resource.name, "Item deleted and moved to recycle bin"
        )
        return {"success": True}

    return router


def hash_user_password(data: Dict[str, Any]) -> Dict[str, Any]:
    if data.get("password"):
        data["password"] = hash_password(data["password"])
    if data.get("email"):
        data["email"] = data["email"].lower()
    return data


def default_resources():
    return [
        Resource("vendors", "Vendor", Vendor, VendorUpdate),
        Resource("products", "Product", Product, ProductUpdate),
        Resource("assets", "Asset", Asset, AssetUpdate),
        Resource(
            "users",
            "User",
            User,
            UserUpdate,
            hidden=("password",),
            unique=("username", "email"),
            prepare=hash_user_password,
        ),
    ]
