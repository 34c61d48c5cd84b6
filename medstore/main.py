import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .database import SessionLocal
from .errors import MedStoreError
from .repositories import InMemoryStore, SqlStore, Store, seed_store
from .routes import api_router
from .services.transaction_service import TransactionService

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_store() -> Store:
    if settings.STORE_BACKEND == "sql":
        store = SqlStore(SessionLocal)
    elif settings.STORE_BACKEND == "memory":
        store = InMemoryStore()
    else:
        raise RuntimeError(f"Unknown STORE_BACKEND '{settings.STORE_BACKEND}'")
    if settings.SEED_DEMO_DATA:
        seed_store(store)
    return store


def create_app(store: Optional[Store] = None, upload_dir: Optional[str] = None) -> FastAPI:
    app = FastAPI(title=settings.PROJECT_NAME)

    app.state.store = store if store is not None else build_store()
    app.state.transaction_service = TransactionService(app.state.store, upload_dir)

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    # GLOBAL EXCEPTION HANDLER
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        if isinstance(exc, MedStoreError):
            logger.info("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.detail)
            return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
        if isinstance(exc, StarletteHTTPException):
            return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
        if isinstance(exc, RequestValidationError):
            return JSONResponse(status_code=422, content={"detail": exc.errors()})

        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": f"INTERNAL SERVER ERROR: {str(exc)}"},
        )

    # domain errors are answered here instead of falling through to the 500 handler
    app.add_exception_handler(MedStoreError, global_exception_handler)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.debug("Request %s %s from Origin: %s", request.method, request.url.path, request.headers.get("origin"))
        return await call_next(request)

    @app.get("/")
    def read_root():
        return {"status": "ok", "message": "Backend is running"}

    # Include all routes
    app.include_router(api_router)
    return app


app = create_app()
