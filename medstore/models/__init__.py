# Models package - exports all models
from ..database import Base
from .medicine_models import Medicine
from .accounting_models import Transaction, TransactionItem, TransactionType

__all__ = [
    "Base",  # Re-exported from database
    "Medicine",
    "Transaction",
    "TransactionItem",
    "TransactionType",
]
