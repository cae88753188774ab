"""Shared plumbing for the data-access services."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import structlog

from bullion_ledger.cache import DataCache
from bullion_ledger.clients.ledger_api import LedgerAPIClient, LedgerAPIError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

NOT_AUTHENTICATED = "User not authenticated"
PROFILE_NOT_FOUND = "User profile not found"


class ScopeError(Exception):
    """The signed-in user could not be resolved."""


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    """Outcome of a service call: data on success, an error message otherwise."""

    data: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        return cls(data=data)

    @classmethod
    def failure(cls, error: str) -> ServiceResult[T]:
        return cls(error=error)


class BaseService:
    """Holds the backend client, the injected cache and the data scope.

    Rows are shared between accounts by ``user_email``; every query and
    insert is scoped to the signed-in user's email.
    """

    table: str = ""

    def __init__(self, client: LedgerAPIClient, cache: DataCache | None = None):
        self.client = client
        self.cache = cache if cache is not None else DataCache()
        self._logger = logger.bind(service=type(self).__name__, table=self.table)

    async def _scope(self) -> dict[str, str]:
        """Return the owner columns for the signed-in user."""
        user = self.client.current_user
        if not user or not user.get("email"):
            user = await self.client.get_user()
        if not user or not user.get("id"):
            raise ScopeError(NOT_AUTHENTICATED)
        if not user.get("email"):
            # Signed in, but rows are keyed by email.
            raise ScopeError(PROFILE_NOT_FOUND)
        return {"user_id": str(user.get("id", "")), "user_email": str(user["email"])}

    async def _run(
        self, operation: str, call: Callable[[], Awaitable[T]]
    ) -> ServiceResult[T]:
        """Run ``call`` and convert expected failures into a result error."""
        try:
            return ServiceResult.success(await call())
        except ScopeError as e:
            self._logger.warning("service_unauthenticated", operation=operation)
            return ServiceResult.failure(str(e))
        except LedgerAPIError as e:
            self._logger.warning(
                "service_api_error",
                operation=operation,
                status=e.status_code,
                details=e.details,
            )
            return ServiceResult.failure(str(e))
        except ValueError as e:
            self._logger.warning("service_bad_record", operation=operation, error=str(e))
            return ServiceResult.failure(f"Invalid record: {e}")

    @staticmethod
    def _first_row(rows: list[dict[str, Any]], what: str) -> dict[str, Any]:
        if not rows:
            raise LedgerAPIError(f"{what} not found", status_code=404)
        return rows[0]
