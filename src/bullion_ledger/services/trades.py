"""Trade persistence with a read-through cache."""

from dataclasses import dataclass, field
from typing import Any

from bullion_ledger.models import Trade
from bullion_ledger.services.base import BaseService, ServiceResult
from bullion_ledger.validation import clean_trade, normalize_ui_trade

TRADES_CACHE_PREFIX = "trades:"


@dataclass
class MigrationReport:
    """Result of copying locally stored trades to the backend."""

    migrated: int = 0
    errors: list[str] = field(default_factory=list)


class TradeService(BaseService):
    """List, add, update and delete trades for the signed-in user."""

    table = "trades"

    def __init__(self, *args: Any, cache_ttl: float = 120.0, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._cache_ttl = cache_ttl

    def _cache_key(self, scope: dict[str, str]) -> str:
        return f"{TRADES_CACHE_PREFIX}{scope['user_email']}"

    def invalidate_cache(self) -> None:
        """Forget cached trade lists so the next read hits the backend."""
        self.cache.invalidate_prefix(TRADES_CACHE_PREFIX)

    async def list_trades(self) -> ServiceResult[list[Trade]]:
        """Return trades, newest first, from cache when fresh."""

        async def call() -> list[Trade]:
            scope = await self._scope()
            key = self._cache_key(scope)
            cached = self.cache.get(key)
            if cached is not None:
                self._logger.debug("trades_from_cache", count=len(cached))
                return list(cached)

            rows = await self.client.select(
                self.table,
                filters={"user_email": scope["user_email"]},
                order="created_at.desc",
            )
            trades = [Trade.from_record(row) for row in rows]
            self.cache.set(key, tuple(trades), ttl=self._cache_ttl)
            self._logger.info("trades_loaded", count=len(trades))
            return trades

        return await self._run("list_trades", call)

    async def add_trade(self, trade: Trade) -> ServiceResult[Trade]:
        async def call() -> Trade:
            scope = await self._scope()
            row = await self.client.insert(self.table, {**scope, **trade.to_record()})
            self.invalidate_cache()
            saved = Trade.from_record(row)
            self._logger.info("trade_added", trade_id=saved.id, type=saved.type.value)
            return saved

        return await self._run("add_trade", call)

    async def update_trade(
        self, trade_id: str, changes: dict[str, Any]
    ) -> ServiceResult[Trade]:
        """Apply column ``changes`` to one trade."""

        async def call() -> Trade:
            scope = await self._scope()
            rows = await self.client.update(
                self.table,
                changes,
                filters={"id": trade_id, "user_email": scope["user_email"]},
            )
            self.invalidate_cache()
            return Trade.from_record(self._first_row(rows, f"Trade {trade_id}"))

        return await self._run("update_trade", call)

    async def delete_trade(self, trade_id: str) -> ServiceResult[None]:
        async def call() -> None:
            scope = await self._scope()
            await self.client.delete(
                self.table, filters={"id": trade_id, "user_email": scope["user_email"]}
            )
            self.invalidate_cache()
            self._logger.info("trade_deleted", trade_id=trade_id)

        return await self._run("delete_trade", call)

    async def migrate_trades(self, local_trades: list[dict[str, Any]]) -> MigrationReport:
        """Copy locally stored trades to the backend, skipping invalid ones."""
        report = MigrationReport()

        for raw in local_trades:
            trade_id = raw.get("id")
            cleaned = clean_trade(normalize_ui_trade(raw))
            if cleaned is None:
                report.errors.append(
                    f"Skipped trade {trade_id}: Invalid or missing required data"
                )
                continue

            async def call(row: dict[str, Any] = cleaned) -> dict[str, Any]:
                scope = await self._scope()
                return await self.client.insert(self.table, {**scope, **row})

            result = await self._run("migrate_trade", call)
            if result.ok:
                report.migrated += 1
            else:
                report.errors.append(f"Failed to migrate trade {trade_id}: {result.error}")

        if report.migrated:
            self.invalidate_cache()
        self._logger.info(
            "trades_migrated", migrated=report.migrated, errors=len(report.errors)
        )
        return report
