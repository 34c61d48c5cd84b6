from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric
from datetime import datetime
from ..database import Base

# --- INVENTORY ---

class Medicine(Base):
    __tablename__ = "medicines"
    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    stock = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(12, 2), nullable=False, default=0)
    batch = Column(String(100), nullable=False, default="")
    supplier = Column(String(200), nullable=False, default="")
    expiry_date = Column(Date, nullable=False, index=True)
    schedule = Column(String(1), nullable=True)  # None, "H" or "X"
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
