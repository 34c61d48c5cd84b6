"""Create the tables behind DATABASE_URL and load the demo catalogue and fixtures."""

from medstore.config import settings
from medstore.database import SessionLocal
from medstore.repositories import SqlStore, seed_store


def seed_db():
    print(f"Seeding {settings.DATABASE_URL}")
    store = seed_store(SqlStore(SessionLocal))
    print(f"  {len(store.list_medicines())} medicines, {len(store.list_transactions())} transactions")


if __name__ == "__main__":
    seed_db()
