from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Text, ForeignKey, Enum as SQLEnum, Numeric
from sqlalchemy.orm import relationship
from datetime import datetime
from ..database import Base
import enum

# Enums
class TransactionType(str, enum.Enum):
    SELL = "sell"
    PURCHASE = "purchase"

# Models
class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(String(64), primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    type = Column(SQLEnum(TransactionType), nullable=False)
    invoice_number = Column(String(50), nullable=False, index=True)
    customer_name = Column(String(200), nullable=True)
    supplier_name = Column(String(200), nullable=True)
    gst_number = Column(String(20), nullable=True)
    discount_percent = Column(Numeric(5, 2), default=0)
    payment_method = Column(String(50), nullable=False, default="Cash")
    financial_year = Column(String(9), nullable=False, index=True)
    notes = Column(Text, nullable=True)
    prescription_skipped = Column(Boolean, default=False)
    schedule_h_count = Column(Integer, default=0)

    # Derived figures, written from the line items on every save
    total_amount = Column(Numeric(15, 2), default=0)
    tax_amount = Column(Numeric(15, 2), default=0)
    discount_amount = Column(Numeric(15, 2), default=0)
    net_amount = Column(Numeric(15, 2), default=0)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    items = relationship(
        "TransactionItem",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionItem.line_number",
    )

class TransactionItem(Base):
    __tablename__ = "transaction_items"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(String(64), ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False)
    line_number = Column(Integer, nullable=False)
    medicine_id = Column(String(64), nullable=True)
    medicine_name = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(5, 2), default=0)
    tax_rate = Column(Numeric(5, 2), default=0)
    taxable_amount = Column(Numeric(15, 2), default=0)
    tax_amount = Column(Numeric(15, 2), default=0)
    total_amount = Column(Numeric(15, 2), default=0)

    # Relationships
    transaction = relationship("Transaction", back_populates="items")
