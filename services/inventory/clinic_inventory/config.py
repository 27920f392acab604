"""
Engine configuration for the Inventory service.

Process-wide defaults used when classifying records. Values are read from
environment variables so a deployment can tune them without code changes.
"""
import os
from typing import List

from pydantic import BaseModel, Field

DEFAULT_CATEGORIES = ["Medicine", "Consumable", "Equipment", "Supplement"]


class EngineConfig(BaseModel):
    """
    Defaults applied by the classifier, aggregator, alert engine and activity feed.

    Attributes:
        default_low_stock_threshold (int): Threshold used when a record has none of its own
        expiry_warning_days (int): Look-ahead window for "expiring" classification
        critical_expiry_days (int): Window for the urgent expiring-soon alert
        categories (List[str]): Known category labels (free text is still accepted)
        activity_limit (int): Default number of entries in the activity feed
    """
    default_low_stock_threshold: int = Field(10, ge=0)
    expiry_warning_days: int = Field(30, ge=0)
    critical_expiry_days: int = Field(7, ge=0)
    categories: List[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    activity_limit: int = Field(10, ge=0)

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """
        Build a configuration from environment variables.

        Unset variables keep the model defaults.

        Returns:
            EngineConfig populated from LOW_STOCK_THRESHOLD, EXPIRY_WARNING_DAYS,
            CRITICAL_EXPIRY_DAYS, INVENTORY_CATEGORIES and ACTIVITY_LIMIT
        """
        values = {}
        env_map = {
            "default_low_stock_threshold": "LOW_STOCK_THRESHOLD",
            "expiry_warning_days": "EXPIRY_WARNING_DAYS",
            "critical_expiry_days": "CRITICAL_EXPIRY_DAYS",
            "activity_limit": "ACTIVITY_LIMIT",
        }
        for field, env_name in env_map.items():
            raw = os.getenv(env_name)
            if raw is not None and raw.strip():
                values[field] = int(raw)

        categories = os.getenv("INVENTORY_CATEGORIES", "")
        categories = [c.strip() for c in categories.split(",") if c.strip()]
        if categories:
            values["categories"] = categories

        return cls(**values)
