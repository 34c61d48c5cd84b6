from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal

from ..models.accounting_models import TransactionType
from .common import CamelModel, Money, Price, Rate

# Line items
# Ranges are checked by AccountingService so that a bad line is a
# ValidationError from the aggregator, not a schema rejection.
class LineItemIn(CamelModel):
    medicine_id: Optional[str] = None
    medicine_name: str = ""
    quantity: int
    price: Rate
    discount: Rate = Decimal("0")
    tax_rate: Rate = Decimal("0")

class LineItem(LineItemIn):
    price: Price
    discount: Price = Decimal("0")
    tax_rate: Price = Decimal("0")
    taxable_amount: Money
    tax_amount: Money
    total_amount: Money

# Transactions
class TransactionBase(CamelModel):
    date: date
    type: TransactionType
    invoice_number: str
    customer_name: Optional[str] = None
    supplier_name: Optional[str] = None
    gst_number: Optional[str] = None
    payment_method: str = "Cash"
    financial_year: Optional[str] = None
    notes: Optional[str] = None

class TransactionCreate(TransactionBase):
    """Client-side ids and totals, if sent, are ignored; both are assigned server-side."""
    items: List[LineItemIn]
    discount_percent: Rate = Decimal("0")

class Transaction(TransactionBase):
    id: str
    items: List[LineItem]
    financial_year: str
    discount_percent: Money = Decimal("0")
    total_amount: Money
    tax_amount: Money
    discount_amount: Money
    net_amount: Money
    prescription_skipped: bool = False
    schedule_h_count: int = 0
    created_at: Optional[datetime] = None

# Reports
class TaxSummary(CamelModel):
    total_sales: Money = Decimal("0.00")
    total_purchases: Money = Decimal("0.00")
    total_tax_collected: Money = Decimal("0.00")
    total_tax_paid: Money = Decimal("0.00")
    net_tax_liability: Money = Decimal("0.00")
    total_discounts: Money = Decimal("0.00")

class TransactionListResponse(CamelModel):
    transactions: List[Transaction]
    tax_summary: TaxSummary
    total: int

class QuoteRequest(CamelModel):
    items: List[LineItemIn] = []
    discount_percent: Rate = Decimal("0")

class QuoteResponse(CamelModel):
    items: List[LineItem]
    subtotal: Money
    total_discount_amount: Money
    tax_amount: Money
    net_amount: Money

# Schedule-H checkout
class CheckoutResponse(CamelModel):
    checkout_id: Optional[str] = None
    state: str
    schedule_h_items: List[str] = []
    prescription_skipped: Optional[bool] = None
    transaction: Optional[Transaction] = None
