# Store collaborators - the rule engines only ever see these interfaces
from .base import MedicineRepository, TransactionRepository, Store
from .memory import InMemoryStore
from .sql import SqlStore
from .seed import demo_medicines, demo_transactions, seed_store

__all__ = [
    "MedicineRepository",
    "TransactionRepository",
    "Store",
    "InMemoryStore",
    "SqlStore",
    "demo_medicines",
    "demo_transactions",
    "seed_store",
]
