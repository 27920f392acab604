"""
CRUD (Create, Read, Update, Delete) operations for the Inventory service.

This module contains all database operations for inventory management.
Every mutation refreshes ``last_updated``; quantities never go below zero.
Lookups on an absent ID return None instead of raising.
"""
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Union
import logging
from sqlalchemy.orm import Session
from . import models, schemas

# Set up logging
logger = logging.getLogger(__name__)

ItemData = Union[schemas.InventoryItemCreate, schemas.InventoryItemUpdate, Dict[str, Any]]

EDITABLE_FIELDS = (
    "name",
    "category",
    "quantity",
    "low_stock_threshold",
    "expiry_date",
    "batch_number",
    "description",
)

REQUIRED_FIELDS = ("name", "category", "quantity", "expiry_date")

def _as_dict(item: ItemData, exclude_unset: bool) -> Dict[str, Any]:
    if isinstance(item, dict):
        data = dict(item)
    else:
        data = item.model_dump(exclude_unset=exclude_unset)
    return {key: value for key, value in data.items() if key in EDITABLE_FIELDS}

def get_inventory_item(db: Session, item_id: int) -> Optional[models.InventoryItem]:
    """
    Retrieve a single inventory item by ID.

    Args:
        db: Database session
        item_id: ID of the inventory item to retrieve

    Returns:
        InventoryItem object or None if not found
    """
    return db.query(models.InventoryItem).filter(models.InventoryItem.id == item_id).first()

def get_inventory_item_by_batch(db: Session, name: str, batch_number: Optional[str]) -> Optional[models.InventoryItem]:
    """
    Retrieve an inventory item by name and batch number.

    Args:
        db: Database session
        name: Item name
        batch_number: Batch number (None matches items without a batch)

    Returns:
        InventoryItem object or None if not found
    """
    return db.query(models.InventoryItem).filter(
        models.InventoryItem.name == name,
        models.InventoryItem.batch_number == batch_number
    ).first()

def get_inventory_items(db: Session, skip: int = 0, limit: Optional[int] = None) -> List[models.InventoryItem]:
    """
    Retrieve inventory items in insertion order, with optional pagination.

    Args:
        db: Database session
        skip: Number of records to skip (offset)
        limit: Maximum number of records to return (None for all)

    Returns:
        List of InventoryItem objects
    """
    query = db.query(models.InventoryItem).order_by(models.InventoryItem.id).offset(skip)
    if limit is not None:
        query = query.limit(limit)
    return query.all()

def create_inventory_item(db: Session, item: ItemData, today: Optional[date] = None) -> models.InventoryItem:
    """
    Create a new inventory item in the database.

    Args:
        db: Database session
        item: Inventory item data to create
        today: Creation date (defaults to the current date)

    Returns:
        Created InventoryItem object with id, date_added and last_updated assigned
    """
    today = today or date.today()
    data = _as_dict(item, exclude_unset=False)
    data["quantity"] = max(0, data.get("quantity") or 0)

    db_item = models.InventoryItem(**data, date_added=today, last_updated=today)
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    logger.info(f"Created inventory item {db_item.id} '{db_item.name}'")
    return db_item

def update_inventory_item(db: Session, item_id: int, item: ItemData, today: Optional[date] = None) -> Optional[models.InventoryItem]:
    """
    Update an existing inventory item.

    Args:
        db: Database session
        item_id: ID of the inventory item to update
        item: Updated item data (only provided fields will be updated)
        today: Update date (defaults to the current date)

    Returns:
        Updated InventoryItem object or None if not found
    """
    db_item = get_inventory_item(db, item_id)
    if db_item is None:
        logger.warning(f"Update skipped: inventory item {item_id} not found")
        return None

    update_data = _as_dict(item, exclude_unset=True)
    for key in REQUIRED_FIELDS:
        if key in update_data and update_data[key] is None:
            del update_data[key]
    if "quantity" in update_data:
        update_data["quantity"] = max(0, update_data["quantity"])

    for key, value in update_data.items():
        setattr(db_item, key, value)
    db_item.last_updated = today or date.today()

    db.commit()
    db.refresh(db_item)
    logger.info(f"Updated inventory item {item_id}: {sorted(update_data)}")
    return db_item

def set_quantity(db: Session, item_id: int, quantity: int, today: Optional[date] = None) -> Optional[models.InventoryItem]:
    """
    Set the quantity of an item, clamped at zero.

    Returns:
        Updated InventoryItem object or None if not found
    """
    return update_inventory_item(db, item_id, {"quantity": max(0, quantity)}, today=today)

def adjust_quantity(db: Session, item_id: int, delta: int, today: Optional[date] = None) -> Optional[models.InventoryItem]:
    """
    Increase or decrease the quantity of an item.

    Args:
        db: Database session
        item_id: ID of the inventory item
        delta: Amount to add (negative to remove); the result is clamped at zero
        today: Update date (defaults to the current date)

    Returns:
        Updated InventoryItem object or None if not found
    """
    db_item = get_inventory_item(db, item_id)
    if db_item is None:
        return None
    return set_quantity(db, item_id, db_item.quantity + delta, today=today)

def delete_inventory_item(db: Session, item_id: int) -> Optional[schemas.InventoryItem]:
    """
    Delete an inventory item from the database.

    Args:
        db: Database session
        item_id: ID of the inventory item to delete

    Returns:
        Snapshot of the deleted item, or None if not found
    """
    db_item = get_inventory_item(db, item_id)
    if db_item is None:
        return None

    snapshot = schemas.InventoryItem.model_validate(db_item)
    db.delete(db_item)
    db.commit()
    logger.info(f"Deleted inventory item {item_id}")
    return snapshot

def replace_all(db: Session, items: Iterable[ItemData], today: Optional[date] = None) -> List[models.InventoryItem]:
    """
    Replace the whole collection with the given items in one transaction.

    Args:
        db: Database session
        items: Item payloads to insert
        today: Creation date for the new items (defaults to the current date)

    Returns:
        List of created InventoryItem objects
    """
    today = today or date.today()
    try:
        removed = db.query(models.InventoryItem).delete()
        created = []
        for item in items:
            data = _as_dict(item, exclude_unset=False)
            data["quantity"] = max(0, data.get("quantity") or 0)
            db_item = models.InventoryItem(**data, date_added=today, last_updated=today)
            db.add(db_item)
            created.append(db_item)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to replace inventory: {e}")
        raise

    for db_item in created:
        db.refresh(db_item)
    logger.info(f"Replaced inventory: removed {removed}, created {len(created)}")
    return created
