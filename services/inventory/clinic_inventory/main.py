"""
    Inventory Service API

    This module implements a FastAPI-based microservice for tracking perishable and
    consumable stock. It provides CRUD endpoints for inventory records with database
    persistence, and exposes the classification engine's derived signals.

    The service exposes:
    - CRUD endpoints for inventory management, plus quantity adjustments
    - Filtering by search text, category and computed status
    - Analytics: status counts, recent activity and low stock / expiry lists
    - Alerts: prioritized actionable conditions
    - CSV and JSON import/export
    - Health endpoint: Provides service health status for monitoring and orchestration

    Every endpoint that classifies records accepts an optional ``as_of`` date; when
    omitted, the current date is used.
"""
from datetime import date, datetime
from functools import lru_cache
from typing import List, Optional
import csv
import io
import logging
import os
from fastapi import FastAPI, Depends, HTTPException, Query, Request, status, UploadFile, File
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.orm import Session

from . import activity, aggregator, alerts, classifier, crud, models, schemas, validators
from .config import EngineConfig
from .database import engine, get_db
from .exceptions import InvalidDateError, ValidationError

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

# Create database tables
models.Base.metadata.create_all(bind=engine)

app = FastAPI(title="inventory-service")

CSV_COLUMNS = [
    "id",
    "name",
    "category",
    "quantity",
    "low_stock_threshold",
    "expiry_date",
    "batch_number",
    "description",
    "date_added",
    "last_updated",
]


@lru_cache()
def get_config() -> EngineConfig:
    """
    Dependency function that provides the engine configuration.

    Returns:
        EngineConfig: Loaded once from environment variables
    """
    return EngineConfig.from_env()


def reference_date(as_of: Optional[str] = None) -> date:
    """Dependency resolving the "today" used for classification."""
    if as_of:
        return classifier.parse_date(as_of, "as_of")
    return date.today()


def to_response(item, config: EngineConfig, today: date) -> schemas.InventoryItem:
    """Convert an ORM item into a response schema with its computed status."""
    result = schemas.InventoryItem.model_validate(item)
    result.status = classifier.classify_status(item, config, today)
    return result


@app.exception_handler(ValidationError)
def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": exc.errors})


@app.exception_handler(InvalidDateError)
def invalid_date_handler(request: Request, exc: InvalidDateError):
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": str(exc)})


@app.get("/healthz", response_model=dict)
def health():
    """
    Health check endpoint for the inventory service.

    This endpoint is typically used by orchestrators (like Kubernetes) or load balancers
    to determine if the service is running and ready to accept requests.

    Returns:
        dict: A dictionary containing the health status of the service.
            - status (str): "healthy" if the service is operational.

    Example:
        GET /healthz
        Response: {"status": "healthy"}
    """
    return {"status": "healthy"}

@app.get("/", response_model=List[schemas.InventoryItem])
def list_inventory_items(
    search: Optional[str] = None,
    category: Optional[str] = None,
    item_status: Optional[schemas.Status] = Query(None, alias="status"),
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    config: EngineConfig = Depends(get_config),
    today: date = Depends(reference_date)
):
    """
    List inventory items, optionally filtered.

    Args:
        search: Case-insensitive text matched against name, category, batch and description
        category: Exact category label
        item_status: Computed status to keep (query parameter ``status``)
        skip: Number of matching records to skip (default: 0)
        limit: Maximum number of records to return (default: 100)
        db: Database session (injected)
        config: Engine configuration (injected)
        today: Reference date (injected, from ``as_of``)

    Returns:
        List of inventory item objects with their computed status
    """
    items = crud.get_inventory_items(db)
    items = aggregator.apply_filters(
        items, config, today, search=search, category=category, status=item_status
    )
    return [to_response(item, config, today) for item in items[skip:skip + limit]]

@app.get("/categories", response_model=List[str])
def list_categories(config: EngineConfig = Depends(get_config)):
    """Return the configured category labels."""
    return config.categories

@app.get("/analytics", response_model=schemas.Analytics)
def get_analytics(
    db: Session = Depends(get_db),
    config: EngineConfig = Depends(get_config),
    today: date = Depends(reference_date)
):
    """
    Get inventory analytics.

    Returns:
        Analytics: status counts, recent activity, and the low stock,
        expiring soon and expired item lists
    """
    items = crud.get_inventory_items(db)
    return schemas.Analytics(
        stats=aggregator.compute_stats(items, config, today),
        recent_activity=activity.recent_activity(items, limit=config.activity_limit),
        low_stock_items=[to_response(i, config, today) for i in aggregator.low_stock_items(items, config)],
        expiring_soon_items=[to_response(i, config, today) for i in aggregator.expiring_soon_items(items, config, today)],
        expired_items=[to_response(i, config, today) for i in aggregator.expired_items(items, today)],
    )

@app.get("/alerts", response_model=schemas.AlertsReport)
def get_alerts(
    kind: Optional[str] = None,
    priority: Optional[str] = None,
    db: Session = Depends(get_db),
    config: EngineConfig = Depends(get_config),
    today: date = Depends(reference_date)
):
    """
    Get prioritized alerts.

    Args:
        kind: Alert kind to keep ("all" or omitted for every kind)
        priority: Priority to keep ("all" or omitted for every priority)

    Returns:
        AlertsReport: ranked critical alerts with counts, plus the
        low stock, expiring and expired item lists

    Raises:
        HTTPException: 400 if kind or priority is unknown
    """
    items = crud.get_inventory_items(db)
    ranked = alerts.generate_alerts(items, config, today)
    try:
        ranked = alerts.filter_alerts(ranked, kind=kind, priority=priority)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return schemas.AlertsReport(
        critical=ranked,
        counts=alerts.count_alerts(ranked),
        low_stock=[to_response(i, config, today) for i in aggregator.low_stock_items(items, config)],
        expiring=[to_response(i, config, today) for i in aggregator.expiring_soon_items(items, config, today)],
        expired=[to_response(i, config, today) for i in aggregator.expired_items(items, today)],
    )

@app.get("/{item_id}", response_model=schemas.InventoryItem)
def get_inventory_item(
    item_id: int,
    db: Session = Depends(get_db),
    config: EngineConfig = Depends(get_config),
    today: date = Depends(reference_date)
):
    """
    Get a single inventory item by ID.

    Args:
        item_id: ID of the inventory item to retrieve
        db: Database session (injected)

    Returns:
        Inventory item object with its computed status

    Raises:
        HTTPException: 404 if item not found
    """
    db_item = crud.get_inventory_item(db, item_id=item_id)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return to_response(db_item, config, today)

@app.post("/", response_model=schemas.InventoryItem, status_code=status.HTTP_201_CREATED)
def create_inventory_item(
    item: schemas.InventoryItemCreate,
    db: Session = Depends(get_db),
    config: EngineConfig = Depends(get_config),
    today: date = Depends(reference_date)
):
    """
    Create a new inventory item.

    Args:
        item: Inventory item data to create
        db: Database session (injected)

    Returns:
        Created inventory item object
    """
    db_item = crud.create_inventory_item(db=db, item=item, today=today)
    return to_response(db_item, config, today)

@app.put("/{item_id}", response_model=schemas.InventoryItem)
@app.patch("/{item_id}", response_model=schemas.InventoryItem)
def update_inventory_item(
    item_id: int,
    item: schemas.InventoryItemUpdate,
    db: Session = Depends(get_db),
    config: EngineConfig = Depends(get_config),
    today: date = Depends(reference_date)
):
    """
    Update an existing inventory item. Only provided fields are changed.

    Args:
        item_id: ID of the inventory item to update
        item: Updated item data
        db: Database session (injected)

    Returns:
        Updated inventory item object

    Raises:
        HTTPException: 404 if item not found
    """
    db_item = crud.update_inventory_item(db, item_id=item_id, item=item, today=today)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return to_response(db_item, config, today)

@app.post("/{item_id}/quantity", response_model=schemas.InventoryItem)
def change_quantity(
    item_id: int,
    change: schemas.QuantityChange,
    db: Session = Depends(get_db),
    config: EngineConfig = Depends(get_config),
    today: date = Depends(reference_date)
):
    """
    Adjust an item's quantity. The result never goes below zero.

    Args:
        item_id: ID of the inventory item
        change: Either ``quantity`` (absolute) or ``delta`` (relative)

    Returns:
        Updated inventory item object

    Raises:
        HTTPException: 400 if neither field is given, 404 if item not found
    """
    if change.quantity is not None:
        db_item = crud.set_quantity(db, item_id, change.quantity, today=today)
    elif change.delta is not None:
        db_item = crud.adjust_quantity(db, item_id, change.delta, today=today)
    else:
        raise HTTPException(status_code=400, detail="Provide either quantity or delta")

    if db_item is None:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return to_response(db_item, config, today)

@app.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_inventory_item(
    item_id: int,
    db: Session = Depends(get_db)
):
    """
    Delete an inventory item.

    Args:
        item_id: ID of the inventory item to delete
        db: Database session (injected)

    Returns:
        None (204 No Content)

    Raises:
        HTTPException: 404 if item not found
    """
    deleted = crud.delete_inventory_item(db, item_id=item_id)
    if deleted is None:
        raise HTTPException(status_code=404, detail="Inventory item not found")


@app.get("/export/csv")
def export_inventory_csv(db: Session = Depends(get_db)):
    """
    Export all inventory items to CSV.

    Returns:
        CSV file with one column per stored field
    """
    items = crud.get_inventory_items(db)

    output = io.StringIO()
    writer = csv.writer(output)

    # Write header
    writer.writerow(CSV_COLUMNS)

    # Write data
    for item in items:
        row = []
        for column in CSV_COLUMNS:
            value = getattr(item, column)
            row.append(value.isoformat() if isinstance(value, date) else value)
        writer.writerow(row)

    output.seek(0)
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=inventory.csv"}
    )


@app.get("/export/json", response_model=schemas.InventoryExport)
def export_inventory_json(
    db: Session = Depends(get_db),
    config: EngineConfig = Depends(get_config),
    today: date = Depends(reference_date)
):
    """
    Export all inventory items as a JSON document.

    Returns:
        InventoryExport: items, export timestamp and format version
    """
    items = crud.get_inventory_items(db)
    return schemas.InventoryExport(
        items=[to_response(item, config, today) for item in items],
        export_date=datetime.now(),
    )


@app.post("/import/csv")
def import_inventory_csv(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    today: date = Depends(reference_date)
):
    """
    Import inventory items from CSV with upsert logic.

    Expected CSV columns: name, category, quantity, expiry_date, and optionally
    low_stock_threshold, batch_number, description
    - Updates existing items (matched by name and batch number)
    - Creates new items
    - Returns summary of created/updated/skipped rows

    Args:
        file: CSV file upload
        db: Database session (injected)

    Returns:
        dict: Summary with created_count, updated_count, skipped_count, and errors list
    """
    if not file.filename or not file.filename.endswith('.csv'):
        raise HTTPException(status_code=400, detail="File must be a CSV")

    try:
        content = file.file.read().decode('utf-8')
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File must be UTF-8 encoded")
    reader = csv.DictReader(io.StringIO(content))

    created_count = 0
    updated_count = 0
    skipped_count = 0
    errors = []

    for row_num, row in enumerate(reader, start=2):  # start=2 because row 1 is header
        row = {key: (value or "").strip() for key, value in row.items() if key}
        row = {key: value for key, value in row.items() if value}

        row_errors = validators.validate_item_data(row)
        if row_errors:
            errors.append(f"Row {row_num}: {', '.join(row_errors)}")
            skipped_count += 1
            continue

        try:
            item = schemas.InventoryItemCreate(**row)
        except ValueError as e:
            errors.append(f"Row {row_num}: {str(e)}")
            skipped_count += 1
            continue

        # Check if item exists (upsert logic)
        existing_item = crud.get_inventory_item_by_batch(db, name=item.name, batch_number=item.batch_number)

        if existing_item:
            # Update existing item
            for key, value in item.model_dump(exclude_unset=True).items():
                setattr(existing_item, key, value)
            existing_item.last_updated = today
            updated_count += 1
        else:
            # Create new item
            db_item = models.InventoryItem(**item.model_dump(), date_added=today, last_updated=today)
            db.add(db_item)
            db.flush()
            created_count += 1

    for error in errors:
        logger.warning(f"CSV import: {error}")

    try:
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"CSV import failed: {e}")
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")

    return {
        "created_count": created_count,
        "updated_count": updated_count,
        "skipped_count": skipped_count,
        "errors": errors[:10]  # Return first 10 errors to avoid huge responses
    }


@app.post("/import/json")
def import_inventory_json(
    payload: schemas.InventoryImport,
    merge: bool = False,
    db: Session = Depends(get_db),
    today: date = Depends(reference_date)
):
    """
    Import inventory items from a JSON export.

    Without ``merge`` the current collection is replaced; with ``merge`` the
    imported items are added alongside the existing ones. Invalid items are
    skipped and reported.

    Args:
        payload: Document with an ``items`` list
        merge: Keep existing items (default: False)
        db: Database session (injected)

    Returns:
        dict: Summary with created_count, skipped_count, and errors list
    """
    valid = []
    errors = []
    for index, raw in enumerate(payload.items):
        try:
            validators.ensure_valid(raw)
            valid.append(schemas.InventoryItemCreate(**raw))
        except ValidationError as e:
            errors.append(f"Item {index}: {', '.join(e.errors)}")
        except ValueError as e:
            errors.append(f"Item {index}: {str(e)}")

    for error in errors:
        logger.warning(f"JSON import: {error}")

    if merge:
        for item in valid:
            crud.create_inventory_item(db, item, today=today)
    else:
        crud.replace_all(db, valid, today=today)

    return {
        "created_count": len(valid),
        "skipped_count": len(errors),
        "errors": errors[:10]
    }
