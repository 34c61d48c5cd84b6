from fastapi import Request

from .repositories.base import Store
from .services.transaction_service import TransactionService


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_transaction_service(request: Request) -> TransactionService:
    return request.app.state.transaction_service
