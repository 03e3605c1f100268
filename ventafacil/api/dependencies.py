"""
Dependency injection for FastAPI.

Resources live on `app.state` (set up by the lifespan handler) so that
each app instance, including test instances, has its own pool.
"""

from fastapi import Header, Request

from ventafacil.application.use_cases import RecordRemoteSaleUseCase
from ventafacil.config import Settings, get_logger
from ventafacil.core.exceptions import AuthenticationError, ConfigurationError
from ventafacil.infrastructure.storage.sqlite import (
    ConnectionPool,
    SQLiteServerSalesStore,
)

logger = get_logger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_pool(request: Request) -> ConnectionPool:
    pool = getattr(request.app.state, "pool", None)
    if pool is None:
        raise ConfigurationError("Server database is not initialized")
    return pool


def get_server_sales_store(request: Request) -> SQLiteServerSalesStore:
    return SQLiteServerSalesStore(get_pool(request))


def get_record_sale_use_case(request: Request) -> RecordRemoteSaleUseCase:
    return RecordRemoteSaleUseCase(get_server_sales_store(request))


def get_current_user(
    request: Request,
    authorization: str | None = Header(default=None),
) -> int:
    """Resolve `Authorization: Bearer <token>` to a user id."""
    if not authorization:
        raise AuthenticationError("Missing Authorization header")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Expected a Bearer token")

    user_id = get_app_settings(request).api.tokens.get(token.strip())
    if user_id is None:
        logger.warning("unknown_token", path=request.url.path)
        raise AuthenticationError("Invalid token")
    return user_id
