"""Stock persistence; quantities are recomputed from trades."""

from collections.abc import Iterable
from datetime import UTC, datetime
from decimal import Decimal

from bullion_ledger.models import MetalType, StockLevel, Trade
from bullion_ledger.services.base import BaseService, ServiceResult
from bullion_ledger.stock import compute_stock


class StockService(BaseService):
    table = "stock"

    async def list_stock(self) -> ServiceResult[list[StockLevel]]:
        async def call() -> list[StockLevel]:
            scope = await self._scope()
            rows = await self.client.select(
                self.table,
                filters={"user_email": scope["user_email"]},
                order="metal_type.asc",
            )
            levels = [StockLevel.from_record(row) for row in rows]
            self._logger.info("stock_loaded", count=len(levels))
            return levels

        return await self._run("list_stock", call)

    async def _set_quantity(self, metal: MetalType, quantity: Decimal) -> StockLevel:
        scope = await self._scope()
        existing = await self.client.select(
            self.table,
            filters={"user_email": scope["user_email"], "metal_type": metal.value},
            limit=1,
        )

        if existing:
            rows = await self.client.update(
                self.table,
                {
                    "quantity": str(quantity),
                    "updated_at": datetime.now(UTC).isoformat(),
                },
                filters={"id": existing[0]["id"], "user_email": scope["user_email"]},
            )
            row = self._first_row(rows, f"Stock {metal.value}")
        else:
            row = await self.client.insert(
                self.table,
                {**scope, "metal_type": metal.value, "quantity": str(quantity)},
            )

        level = StockLevel.from_record(row)
        self._logger.info("stock_saved", metal=metal.value, quantity=str(level.quantity))
        return level

    async def set_quantity(
        self, metal: MetalType, quantity: Decimal
    ) -> ServiceResult[StockLevel]:
        """Update the metal's stock row, creating it when missing."""
        return await self._run("set_quantity", lambda: self._set_quantity(metal, quantity))

    async def recalculate(self, trades: Iterable[Trade]) -> ServiceResult[list[StockLevel]]:
        """Recompute stock from ``trades`` and persist every metal."""
        levels = compute_stock(trades)

        async def call() -> list[StockLevel]:
            return [await self._set_quantity(metal, qty) for metal, qty in levels.items()]

        return await self._run("recalculate", call)

    async def clear_stock(self) -> ServiceResult[None]:
        async def call() -> None:
            scope = await self._scope()
            await self.client.delete(self.table, filters={"user_email": scope["user_email"]})
            self._logger.info("stock_cleared")

        return await self._run("clear_stock", call)
