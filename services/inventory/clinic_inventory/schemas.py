"""
Pydantic schemas for request/response validation in the Inventory service.

These schemas define the structure of data for API requests and responses,
and the value objects produced by the classification engine.
"""
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator


class Status(str, Enum):
    """Derived operational state of an inventory record."""
    IN_STOCK = "in-stock"
    LOW_STOCK = "low-stock"
    OUT_OF_STOCK = "out-of-stock"
    EXPIRING = "expiring"
    EXPIRED = "expired"


class AlertKind(str, Enum):
    """Independent alert detectors, in generation order."""
    OUT_OF_STOCK = "out-of-stock"
    CRITICAL_LOW = "critical-low"
    EXPIRED = "expired"
    EXPIRING_SOON = "expiring-soon"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class InventoryItemBase(BaseModel):
    """Base schema with common inventory item attributes."""
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    expiry_date: date
    batch_number: Optional[str] = None
    description: Optional[str] = None


class InventoryItemCreate(InventoryItemBase):
    """Schema for creating a new inventory item."""
    pass


class InventoryItemUpdate(BaseModel):
    """Schema for updating an existing inventory item. All fields are optional."""
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    quantity: Optional[int] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    expiry_date: Optional[date] = None
    batch_number: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name", "category", "expiry_date")
    @classmethod
    def reject_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} may not be null")
        return value


class QuantityChange(BaseModel):
    """Schema for a quantity adjustment: either a relative delta or an absolute quantity."""
    delta: Optional[int] = None
    quantity: Optional[int] = None


class InventoryItem(InventoryItemBase):
    """
    Schema for inventory item responses, includes all database fields.

    Attributes:
        id (int): Inventory item's unique identifier
        date_added (date): When the item was created
        last_updated (date): When the item was last changed
        status (Status): Computed status, filled in by the API layer
    """
    id: int
    date_added: date
    last_updated: date
    status: Optional[Status] = None

    class Config:
        from_attributes = True


class Stats(BaseModel):
    """Summary counters over a record collection."""
    total: int = 0
    in_stock: int = 0
    low_stock: int = 0
    expiring: int = 0
    expired: int = 0
    out_of_stock: int = 0


class Alert(BaseModel):
    """
    An actionable condition detected on a single record.

    Attributes:
        kind (AlertKind): Which detector fired
        record (Any): The record the alert refers to (not serialized)
        record_id (Any): Identifier of that record
        item_name (str): Record name, for display
        message (str): Human-readable description
        priority (Priority): Ranking priority
        action_label (str): Suggested follow-up action
    """
    kind: AlertKind
    record: Any = Field(default=None, exclude=True)
    record_id: Any = None
    item_name: str
    message: str
    priority: Priority
    action_label: str


class ActivityEntry(BaseModel):
    """A recently touched record in the activity feed."""
    record_id: Any = None
    item_name: str
    message: str
    last_updated: date


class Analytics(BaseModel):
    stats: Stats
    recent_activity: List[ActivityEntry]
    low_stock_items: List[InventoryItem]
    expiring_soon_items: List[InventoryItem]
    expired_items: List[InventoryItem]


class AlertsReport(BaseModel):
    critical: List[Alert]
    counts: Dict[str, int]
    low_stock: List[InventoryItem]
    expiring: List[InventoryItem]
    expired: List[InventoryItem]


class InventoryExport(BaseModel):
    """JSON export envelope."""
    items: List[InventoryItem]
    export_date: datetime
    version: str = "1.0"


class InventoryImport(BaseModel):
    """JSON import envelope; only the item payloads are read."""
    items: List[Dict[str, Any]] = Field(default_factory=list)
