from typing import Any

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession

from src.shared.database.database import Database
from src.shared.database.entity_mapper import EntityMapper


class UnitOfWork:
    """
    Per-request transaction boundary.

    Writes are staged with add/update/delete and flushed by save_changes, which
    returns how many entities were written. The transaction is committed when
    the context exits cleanly and rolled back otherwise.
    """

    def __init__(
        self,
        db: Database,
        entity_mapper: EntityMapper,
    ) -> None:
        self.db = db
        self.session: AsyncSession
        self.entity_mapper = entity_mapper
        self._pending = 0

    async def __aenter__(self):
        self.session = self.db.session_maker()
        self._pending = 0
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                await self.commit()
            else:
                await self.rollback()
        finally:
            if self.session:
                await self.session.close()

    def _map_to_entity(self, model_instance: Any):
        return self.entity_mapper.map_to_entity(model_instance)

    async def _load_persistent(self, entity: Any):
        # Rows that no longer exist are not counted as written
        mapper = inspect(type(entity))
        identity = tuple(
            getattr(entity, mapper.get_property_by_column(column).key)
            for column in mapper.primary_key
        )
        return await self.session.get(type(entity), identity)

    def add(self, model_instance: Any):
        entity = self._map_to_entity(model_instance)
        self.session.add(entity)
        self._pending += 1

    async def update(self, model_instance: Any):
        entity = self._map_to_entity(model_instance)
        if await self._load_persistent(entity) is None:
            return
        await self.session.merge(entity)
        self._pending += 1

    async def delete(self, model_instance: Any):
        entity = self._map_to_entity(model_instance)
        persistent = await self._load_persistent(entity)
        if persistent is None:
            return
        await self.session.delete(persistent)
        self._pending += 1

    async def save_changes(self) -> int:
        """Flush staged writes and return the number of entities written."""
        await self.session.flush()
        written, self._pending = self._pending, 0
        return written

    async def commit(self):
        try:
            await self.session.commit()
        except Exception as e:
            await self.rollback()
            raise e

    async def rollback(self):
        await self.session.rollback()
        self._pending = 0
