"""
SQLAlchemy ORM models for the Inventory service.

Defines the database schema for inventory-related tables.
"""
from datetime import date
from sqlalchemy import Column, Integer, String, Date, Text
from .database import Base

class InventoryItem(Base):
    """
    Inventory item model representing a perishable or consumable stock record.

    Attributes:
        id (int): Primary key, auto-incremented inventory item ID
        name (str): Display name
        category (str): Category label (Medicine, Consumable, Equipment, Supplement, or free text)
        quantity (int): Quantity on hand, never negative
        low_stock_threshold (int): Per-item low stock cutoff, falls back to the global default when NULL
        expiry_date (date): Calendar date the stock expires
        batch_number (str): Optional batch or lot number
        description (str): Optional free text
        date_added (date): Date the item was created
        last_updated (date): Date of the last change to the item
    """
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=True)
    expiry_date = Column(Date, nullable=False)
    batch_number = Column(String, nullable=True, index=True)
    description = Column(Text, nullable=True)
    date_added = Column(Date, nullable=False, default=date.today)
    last_updated = Column(Date, nullable=False, default=date.today)
