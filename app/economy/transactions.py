from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import session as db_session
from app.economy.errors import TransientStorageError

logger = structlog.get_logger(__name__)

TRANSIENT_DBAPI_ERRORS = (OperationalError, InterfaceError)


def _is_transient(exc: DBAPIError) -> bool:
    if isinstance(exc, TRANSIENT_DBAPI_ERRORS):
        return True
    return exc.connection_invalidated


@asynccontextmanager
async def atomic(operation: str) -> AsyncIterator[AsyncSession]:
    """Run one atomic unit: commit on success, roll back everything on any error.

    Connectivity failures surface as ``TransientStorageError`` once the
    rollback has happened, so the whole operation can be retried. Data and
    integrity errors will not go away on retry and propagate unchanged.
    """
    try:
        async with db_session.SessionLocal.begin() as session:
            yield session
    except DBAPIError as exc:
        if not _is_transient(exc):
            raise
        logger.warning(
            "storage_transaction_failed",
            operation=operation,
            error_type=type(exc).__name__,
        )
        raise TransientStorageError from exc
    except (OSError, TimeoutError) as exc:
        logger.warning(
            "storage_transaction_failed",
            operation=operation,
            error_type=type(exc).__name__,
        )
        raise TransientStorageError from exc
