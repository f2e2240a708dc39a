"""
Database Schemas for Asseta

Each Pydantic model represents a collection in MongoDB. Create models list the
fields accepted from clients (required fields use ``...``); the matching
``*Update`` models make every field optional so a PUT only overwrites the
fields it sends.
"""

from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, EmailStr, Field


# ---------------------- Inventory ----------------------

class Vendor(BaseModel):
    """
    Vendors collection schema
    Collection name: "vendors"
    """
    name: str = Field(..., min_length=1, description="Vendor display name")
    email: Optional[str] = Field(None, description="Contact email")
    phone: Optional[str] = None
    company: Optional[str] = None
    logo: Optional[str] = Field(None, description="Logo image URL")


class VendorUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    logo: Optional[str] = None


class Product(BaseModel):
    """
    Products collection schema
    Collection name: "products"
    """
    name: str = Field(..., min_length=1)
    category: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    vendor: Optional[str] = Field(None, description="Vendor name, free text")
    quantity: Optional[int] = Field(None, ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    vendor: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)


class Asset(BaseModel):
    """
    Assets collection schema
    Collection name: "assets"
    """
    name: str = Field(..., min_length=1)
    type: Optional[str] = None
    assignedTo: Optional[str] = Field(None, description="Person holding the asset, free text")
    status: Optional[str] = None
    purchaseDate: Optional[datetime] = None


class AssetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    type: Optional[str] = None
    assignedTo: Optional[str] = None
    status: Optional[str] = None
    purchaseDate: Optional[datetime] = None


# ---------------------- Users ----------------------

class User(BaseModel):
    """
    Users collection schema
    Collection name: "users"
    The password is hashed before it is stored and never returned.
    """
    username: str = Field(..., min_length=1)
    email: Optional[EmailStr] = Field(None, description="Email address, unique when present")
    role: str = Field("user", description="Role name")
    password: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    role: Optional[str] = None
    password: Optional[str] = Field(None, min_length=1)


# ---------------------- Support ----------------------

class SupportTicket(BaseModel):
    """
    Support tickets collection schema
    Collection name: "support"
    Status moves open -> in-progress -> resolved, but any value is accepted.
    """
    name: str
    email: str
    subject: str
    message: str
    category: str = "General"
    priority: str = "Medium"


class SupportTicketUpdate(BaseModel):
    status: Optional[str] = None
    adminReply: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None


# ---------------------- Bookkeeping ----------------------

class Notification(BaseModel):
    """
    Notifications collection schema
    Collection name: "notifications"
    """
    title: str
    message: str = ""
    type: Literal["info", "success", "warning", "error"] = "info"
    isRead: bool = False
    createdAt: Optional[datetime] = None


class RecycleBinEntry(BaseModel):
    """
    Recycle bin collection schema
    Collection name: "recycle_bin"
    """
    entityType: str = Field(..., description="Collection the document was deleted from")
    data: Dict[str, Any] = Field(..., description="Snapshot of the deleted document")
    deletedAt: Optional[datetime] = None


class ActivityLog(BaseModel):
    """
    Activity log collection schema
    Collection name: "activity_logs"
    """
    user: str = "System"
    action: str
    entity: str
    details: str = ""
    createdAt: Optional[datetime] = None
