# Schemas package - exports all Pydantic models
from .pharmacy_schemas import (
    MedicineBase, MedicineCreate, Medicine, MedicineResponse, StockAdjust,
    InventoryStats, ExpiryStats, MedicineListResponse, ExpiryListResponse,
    DashboardStats
)
from .accounting_schemas import (
    LineItemIn, LineItem, TransactionCreate, Transaction, TaxSummary,
    TransactionListResponse, QuoteRequest, QuoteResponse, CheckoutResponse
)

__all__ = [
    "MedicineBase",
    "MedicineCreate",
    "Medicine",
    "MedicineResponse",
    "StockAdjust",
    "InventoryStats",
    "ExpiryStats",
    "MedicineListResponse",
    "ExpiryListResponse",
    "DashboardStats",
    "LineItemIn",
    "LineItem",
    "TransactionCreate",
    "Transaction",
    "TaxSummary",
    "TransactionListResponse",
    "QuoteRequest",
    "QuoteResponse",
    "CheckoutResponse",
]
