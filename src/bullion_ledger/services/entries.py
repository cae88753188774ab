"""Income and expense persistence."""

from typing import Any

from bullion_ledger.models import LedgerEntry
from bullion_ledger.services.base import BaseService, ServiceResult


class EntryService(BaseService):
    """CRUD over a table of :class:`LedgerEntry` rows."""

    async def list_entries(self) -> ServiceResult[list[LedgerEntry]]:
        async def call() -> list[LedgerEntry]:
            scope = await self._scope()
            rows = await self.client.select(
                self.table, filters={"user_email": scope["user_email"]}, order="date.desc"
            )
            return [LedgerEntry.from_record(row) for row in rows]

        return await self._run("list_entries", call)

    async def add_entry(self, entry: LedgerEntry) -> ServiceResult[LedgerEntry]:
        async def call() -> LedgerEntry:
            if entry.amount < 0:
                raise ValueError("amount must not be negative")
            scope = await self._scope()
            row = await self.client.insert(self.table, {**scope, **entry.to_record()})
            saved = LedgerEntry.from_record(row)
            self._logger.info("entry_added", entry_id=saved.id, amount=str(saved.amount))
            return saved

        return await self._run("add_entry", call)

    async def update_entry(
        self, entry_id: str, changes: dict[str, Any]
    ) -> ServiceResult[LedgerEntry]:
        async def call() -> LedgerEntry:
            scope = await self._scope()
            rows = await self.client.update(
                self.table,
                changes,
                filters={"id": entry_id, "user_email": scope["user_email"]},
            )
            return LedgerEntry.from_record(self._first_row(rows, f"Entry {entry_id}"))

        return await self._run("update_entry", call)

    async def delete_entry(self, entry_id: str) -> ServiceResult[None]:
        async def call() -> None:
            scope = await self._scope()
            await self.client.delete(
                self.table, filters={"id": entry_id, "user_email": scope["user_email"]}
            )

        return await self._run("delete_entry", call)


class IncomeService(EntryService):
    table = "income"


class ExpenseService(EntryService):
    table = "expenses"
