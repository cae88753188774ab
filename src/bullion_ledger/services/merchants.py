"""Merchant persistence and stored-balance refresh."""

from collections.abc import Iterable
from typing import Any

from bullion_ledger.balance import compute_balance
from bullion_ledger.models import Merchant, Trade
from bullion_ledger.services.base import BaseService, ServiceResult


class MerchantService(BaseService):
    """CRUD for merchants plus syncing of their ``total_due``/``total_owe``."""

    table = "merchants"

    async def list_merchants(self) -> ServiceResult[list[Merchant]]:
        async def call() -> list[Merchant]:
            scope = await self._scope()
            rows = await self.client.select(
                self.table, filters={"user_email": scope["user_email"]}, order="name.asc"
            )
            return [Merchant.from_record(row) for row in rows]

        return await self._run("list_merchants", call)

    async def add_merchant(
        self,
        name: str,
        email: str | None = None,
        phone: str | None = None,
        address: str | None = None,
    ) -> ServiceResult[Merchant]:
        async def call() -> Merchant:
            if not name.strip():
                raise ValueError("merchant name is required")
            scope = await self._scope()
            row = await self.client.insert(
                self.table,
                {
                    **scope,
                    "name": name.strip(),
                    "email": email or None,
                    "phone": phone or None,
                    "address": address or None,
                },
            )
            merchant = Merchant.from_record(row)
            self._logger.info("merchant_added", merchant_id=merchant.id)
            return merchant

        return await self._run("add_merchant", call)

    async def update_merchant(
        self, merchant_id: str, changes: dict[str, Any]
    ) -> ServiceResult[Merchant]:
        async def call() -> Merchant:
            scope = await self._scope()
            rows = await self.client.update(
                self.table,
                changes,
                filters={"id": merchant_id, "user_email": scope["user_email"]},
            )
            return Merchant.from_record(self._first_row(rows, f"Merchant {merchant_id}"))

        return await self._run("update_merchant", call)

    async def delete_merchant(self, merchant_id: str) -> ServiceResult[None]:
        async def call() -> None:
            scope = await self._scope()
            await self.client.delete(
                self.table, filters={"id": merchant_id, "user_email": scope["user_email"]}
            )
            self._logger.info("merchant_deleted", merchant_id=merchant_id)

        return await self._run("delete_merchant", call)

    async def refresh_balances(
        self, merchants: Iterable[Merchant], trades: Iterable[Trade]
    ) -> ServiceResult[list[Merchant]]:
        """Recompute each merchant's balance and write back the ones that changed.

        Returns the merchants with their current balances, whether or not a
        write was needed.
        """
        trade_list = list(trades)

        async def call() -> list[Merchant]:
            scope = await self._scope()
            refreshed: list[Merchant] = []
            for merchant in merchants:
                balance = compute_balance(merchant.id, trade_list)
                if balance == merchant.balance:
                    refreshed.append(merchant)
                    continue
                rows = await self.client.update(
                    self.table,
                    {"total_due": str(balance.due), "total_owe": str(balance.owe)},
                    filters={"id": merchant.id, "user_email": scope["user_email"]},
                )
                refreshed.append(
                    Merchant.from_record(self._first_row(rows, f"Merchant {merchant.id}"))
                )
                self._logger.info(
                    "merchant_balance_updated",
                    merchant_id=merchant.id,
                    due=str(balance.due),
                    owe=str(balance.owe),
                )
            return refreshed

        return await self._run("refresh_balances", call)
