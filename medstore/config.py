# medstore/config.py
import os
from datetime import date, datetime
from typing import List
from zoneinfo import ZoneInfo

from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [v.strip() for v in (value or "").split(",") if v.strip()]


def _flag(value: str) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "MedStore Pro API")

    # "memory" keeps everything in-process, "sql" goes through SQLAlchemy
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "memory")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./medstore.db")
    SEED_DEMO_DATA: bool = _flag(os.getenv("SEED_DEMO_DATA", "true"))

    BACKEND_CORS_ORIGINS: List[str] = _split_csv(
        os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # All expiry arithmetic happens on calendar dates in this zone
    TIMEZONE: str = os.getenv("TIMEZONE", "Asia/Kolkata")

    # ---------- Inventory thresholds ----------
    LOW_STOCK_THRESHOLD: int = int(os.getenv("LOW_STOCK_THRESHOLD", "10"))
    EXPIRY_WARNING_DAYS: int = int(os.getenv("EXPIRY_WARNING_DAYS", "30"))
    EXPIRY_CRITICAL_DAYS: int = int(os.getenv("EXPIRY_CRITICAL_DAYS", "15"))

    # ---------- Prescriptions ----------
    PRESCRIPTION_MAX_BYTES: int = int(os.getenv("PRESCRIPTION_MAX_BYTES", str(5 * 1024 * 1024)))
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")

    def today(self) -> date:
        return datetime.now(ZoneInfo(self.TIMEZONE)).date()


settings = Settings()
