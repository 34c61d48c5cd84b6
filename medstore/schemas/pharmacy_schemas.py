from pydantic import Field, field_validator
from typing import List, Optional
from datetime import date
from decimal import Decimal

from .common import CamelModel, Money, Price

SCHEDULES = ("H", "X")


class MedicineBase(CamelModel):
    name: str
    stock: int = Field(0, ge=0)
    price: Price = Field(Decimal("0.00"), ge=0)
    batch: str = ""
    supplier: str = ""
    expiry_date: date
    schedule: Optional[str] = None

    @field_validator("schedule", mode="before")
    @classmethod
    def normalize_schedule(cls, v):
        if v is None:
            return None
        v = str(v).strip().upper()
        if v in ("", "NONE", "REGULAR"):
            return None
        if v not in SCHEDULES:
            raise ValueError("Schedule must be empty, 'H' or 'X'")
        return v


class MedicineCreate(MedicineBase):
    """Add-stock form: every descriptive field required, at least one unit."""
    id: Optional[str] = None
    stock: int = Field(..., ge=1)
    price: Price = Field(..., gt=0)

    @field_validator("name", "batch", "supplier")
    @classmethod
    def not_blank(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("Field is required")
        return v


class Medicine(MedicineBase):
    id: str


class MedicineResponse(Medicine):
    days_until_expiry: int
    is_expired: bool
    is_low_stock: bool
    is_expiring_soon: bool
    severity: str
    stock_status: str
    total_value: Money


class StockAdjust(CamelModel):
    delta: int


class InventoryStats(CamelModel):
    total_medicines: int = 0
    low_stock_count: int = 0
    expiring_soon_count: int = 0
    schedule_h_count: int = 0


class ExpiryStats(CamelModel):
    expiring_15_days: int = Field(0, alias="expiring15Days")
    expiring_30_days: int = Field(0, alias="expiring30Days")
    expired: int = 0
    total_value: Money = Decimal("0.00")


class MedicineListResponse(CamelModel):
    medicines: List[MedicineResponse]
    stats: InventoryStats
    total: int


class ExpiryListResponse(CamelModel):
    medicines: List[MedicineResponse]
    stats: ExpiryStats
    days: int
    total: int


class DashboardStats(CamelModel):
    today_transactions: int
    low_stock_alerts: int
    expiring_medicines: int
    total_inventory: int
