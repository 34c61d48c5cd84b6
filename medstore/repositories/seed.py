"""Demo catalogue and the three accounting fixtures the UI ships with."""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from ..config import settings
from ..models.accounting_models import TransactionType
from ..schemas.pharmacy_schemas import Medicine
from ..schemas.accounting_schemas import Transaction, TransactionCreate, LineItemIn
from ..services.accounting_service import AccountingService
from .base import Store

logger = logging.getLogger(__name__)

# id, name, stock, price, schedule, batch, supplier, days to expiry
_CATALOGUE = [
    ("1", "Paracetamol 500mg", 150, "12", None, "PCM2401", "MedSupply Co", 240),
    ("2", "Amoxicillin 250mg", 80, "45", "H", "AMX2312", "PharmaCorp Ltd", 12),
    ("3", "Crocin Tablets", 8, "15", None, "CRC2402", "HealthPlus Distributors", 25),
    ("4", "Azithromycin 500mg", 25, "120", "H", "AZT2311", "PharmaCorp Ltd", -5),
    ("5", "Ibuprofen 400mg", 200, "18", None, "IBU2403", "MedSupply Co", 55),
    ("6", "Cetirizine 10mg", 90, "8", None, "CTZ2401", "HealthPlus Distributors", 400),
    ("7", "Omeprazole 20mg", 60, "35", None, "OMP2402", "Global Pharma", 28),
    ("8", "Metformin 500mg", 120, "22", None, "MTF2312", "Global Pharma", 180),
    ("9", "Ciprofloxacin 500mg", 40, "85", "H", "CPF2404", "PharmaCorp Ltd", 9),
    ("10", "Aspirin 75mg", 180, "6", None, "ASP2401", "MedSupply Co", 90),
]


def demo_medicines(today: Optional[date] = None) -> List[Medicine]:
    today = today or settings.today()
    return [
        Medicine(
            id=mid, name=name, stock=stock, price=Decimal(price), schedule=schedule,
            batch=batch, supplier=supplier, expiry_date=today + timedelta(days=offset),
        )
        for mid, name, stock, price, schedule, batch, supplier, offset in _CATALOGUE
    ]


def demo_transactions() -> List[Transaction]:
    payloads = [
        TransactionCreate(
            date=date(2024, 4, 15), type=TransactionType.SELL,
            invoice_number="INV-2024-001", customer_name="ABC Medical Store",
            gst_number="27AABCU9603R1ZX", payment_method="Cash",
            financial_year="2024-2025", notes="Regular sale",
            items=[LineItemIn(medicine_id="1", medicine_name="Paracetamol 500mg",
                              quantity=10, price=Decimal("12"), discount=Decimal("0"), tax_rate=Decimal("12"))],
        ),
        TransactionCreate(
            date=date(2024, 4, 16), type=TransactionType.PURCHASE,
            invoice_number="PUR-2024-001", supplier_name="PharmaCorp Ltd",
            gst_number="27AABCU9603R1ZY", payment_method="Bank Transfer",
            financial_year="2024-2025", notes="Bulk purchase",
            items=[LineItemIn(medicine_id="2", medicine_name="Amoxicillin 250mg",
                              quantity=50, price=Decimal("45"), discount=Decimal("5"), tax_rate=Decimal("12"))],
        ),
        TransactionCreate(
            date=date(2024, 4, 17), type=TransactionType.SELL,
            invoice_number="INV-2024-002", customer_name="XYZ Pharmacy",
            gst_number="27AABCU9603R1ZZ", payment_method="Credit Card",
            financial_year="2024-2025", notes="Discount applied",
            items=[LineItemIn(medicine_id="5", medicine_name="Ibuprofen 400mg",
                              quantity=20, price=Decimal("18"), discount=Decimal("10"), tax_rate=Decimal("12"))],
        ),
    ]
    return [
        AccountingService.build_transaction(p, transaction_id=str(number))
        for number, p in enumerate(payloads, start=1)
    ]


def seed_store(store: Store, today: Optional[date] = None) -> Store:
    """Fill an empty store; a store that already holds medicines is left alone."""
    if store.list_medicines():
        return store
    for medicine in demo_medicines(today):
        store.save_medicine(medicine)
    for txn in demo_transactions():
        store.save_transaction(txn)
    logger.info("Seeded demo catalogue and accounting fixtures")
    return store
