import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..config import settings
from ..deps import get_store
from ..errors import ValidationError
from ..repositories.base import Store
from ..schemas import (
    Medicine, MedicineCreate, MedicineResponse, MedicineListResponse, StockAdjust
)
from ..services import expiry_service

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=MedicineListResponse)
def list_medicines(
    search: Optional[str] = None,
    tab: str = "all",
    expiring: bool = False,
    days: int = Query(settings.EXPIRY_WARNING_DAYS, ge=0),
    sort: str = "name",
    direction: str = "asc",
    store: Store = Depends(get_store),
):
    rows = expiry_service.describe_all(store.list_medicines(), warning_window_days=days)
    stats = expiry_service.inventory_stats(rows)
    if expiring:
        rows = expiry_service.filter_expiring(rows, days, search=search)
    rows = expiry_service.filter_inventory(rows, search, tab)
    rows = expiry_service.sort_medicines(rows, sort, direction)
    return MedicineListResponse(medicines=rows, stats=stats, total=len(rows))

@router.get("/{medicine_id}", response_model=MedicineResponse)
def get_medicine(medicine_id: str, store: Store = Depends(get_store)):
    return expiry_service.describe(store.get_medicine(medicine_id))

@router.post("/", response_model=MedicineResponse, status_code=201)
def add_medicine(med: MedicineCreate, store: Store = Depends(get_store)):
    name_clean = med.name.strip().lower()
    for existing in store.list_medicines():
        if med.id and existing.id == med.id:
            raise ValidationError(f"Medicine with id '{med.id}' already exists.")
        if existing.name.strip().lower() == name_clean and existing.batch == med.batch:
            raise ValidationError(f"Batch '{med.batch}' of '{med.name}' already exists.")

    new_m = Medicine(**med.model_dump(exclude={"id"}), id=med.id or uuid.uuid4().hex)
    store.save_medicine(new_m)
    logger.info("Added medicine %s (%s) stock=%d", new_m.name, new_m.id, new_m.stock)
    return expiry_service.describe(new_m)

@router.patch("/{medicine_id}/stock", response_model=MedicineResponse)
def adjust_stock(medicine_id: str, req: StockAdjust, store: Store = Depends(get_store)):
    medicine = store.get_medicine(medicine_id)
    if medicine.stock + req.delta < 0:
        raise ValidationError(f"Insufficient stock for {medicine.name}: {medicine.stock} available")
    logger.info("Stock %s adjusted by %d", medicine_id, req.delta)
    medicine.stock += req.delta
    store.save_medicine(medicine)
    return expiry_service.describe(medicine)

@router.delete("/{medicine_id}")
def delete_medicine(medicine_id: str, store: Store = Depends(get_store)):
    store.delete_medicine(medicine_id)
    return {"status": "ok"}
