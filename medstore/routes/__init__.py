# Routes package
from fastapi import APIRouter
from .dashboard_routes import router as dashboard_router
from .medicine_routes import router as medicine_router
from .expiry_routes import router as expiry_router
from .transaction_routes import router as transaction_router
from .accounting_routes import router as accounting_router

# Create main router
api_router = APIRouter()

# Include all route modules
api_router.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(medicine_router, prefix="/medicines", tags=["Medicines"])
api_router.include_router(expiry_router, prefix="/expiry", tags=["Expiry"])
api_router.include_router(transaction_router, prefix="/transactions", tags=["Transactions"])
api_router.include_router(accounting_router)


__all__ = ["api_router"]
