"""Pytest configuration and shared fixtures."""

import os
import tempfile
from datetime import date, timedelta
from types import SimpleNamespace

# Must be set before the service modules create their engine
os.environ["DATABASE_URL"] = f"sqlite:///{tempfile.mkdtemp()}/inventory.db"

import pytest

from clinic_inventory.config import EngineConfig


TODAY = date(2025, 8, 10)


def make_record(
    id=1,
    name="Paracetamol 500mg",
    category="Medicine",
    quantity=150,
    low_stock_threshold=20,
    expiry_days=400,
    batch_number="PAR2024001",
    description="Pain relief and fever reducer tablets",
    last_updated=None,
):
    """Build a plain record object; expiry is given in days from TODAY."""
    return SimpleNamespace(
        id=id,
        name=name,
        category=category,
        quantity=quantity,
        low_stock_threshold=low_stock_threshold,
        expiry_date=TODAY + timedelta(days=expiry_days),
        batch_number=batch_number,
        description=description,
        date_added=TODAY - timedelta(days=30),
        last_updated=last_updated or TODAY,
    )


@pytest.fixture
def config():
    """Fixture for the default engine configuration."""
    return EngineConfig()


@pytest.fixture
def clinic_records():
    """A small mixed inventory covering every status."""
    return [
        make_record(id=1, name="Paracetamol 500mg", quantity=150, low_stock_threshold=20, expiry_days=400),
        make_record(id=2, name="Surgical Masks", category="Consumable", quantity=8,
                    low_stock_threshold=50, expiry_days=300, batch_number="MASK2024001",
                    description="3-ply disposable surgical masks"),
        make_record(id=3, name="Insulin Pens", quantity=0, low_stock_threshold=5, expiry_days=20,
                    batch_number="INS2024001", description=None),
        make_record(id=4, name="Cough Syrup", quantity=18, low_stock_threshold=8, expiry_days=-5,
                    batch_number="COUGH2024001", description="Pediatric cough syrup 100ml"),
        make_record(id=5, name="Vitamin C Tablets", category="Supplement", quantity=45,
                    low_stock_threshold=15, expiry_days=3, batch_number="VIT2024001",
                    description="1000mg Vitamin C tablets"),
        make_record(id=6, name="Antibiotics - Amoxicillin", quantity=3, low_stock_threshold=10,
                    expiry_days=15, batch_number="AMOX2024001", description="500mg Amoxicillin capsules"),
    ]


@pytest.fixture
def db_session():
    """Fresh database session on empty tables."""
    from clinic_inventory import models
    from clinic_inventory.database import SessionLocal, engine

    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session):
    """TestClient with a fixed reference configuration."""
    from fastapi.testclient import TestClient
    from clinic_inventory.main import app, get_config

    app.dependency_overrides[get_config] = lambda: EngineConfig()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
