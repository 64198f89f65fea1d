"""
Shared repository plumbing.

Each ThoraxLab repository wraps one ``AsyncSession`` and one SQLModel entity.
Writes commit immediately; services that need several writes to land
together open their own transaction instead of going through these helpers.
"""

from __future__ import annotations

from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

EntityType = TypeVar("EntityType", bound=SQLModel)


class AsyncBaseRepository(Generic[EntityType]):
    """Primary-key CRUD plus counting and page slicing for one entity type."""

    def __init__(self, session: AsyncSession, model: Type[EntityType]) -> None:
        self.session = session
        self.model = model

    async def _save(self, entity: EntityType) -> EntityType:
        self.session.add(entity)
        await self.session.commit()
        await self.session.refresh(entity)
        return entity

    async def create(self, entity: EntityType) -> EntityType:
        return await self._save(entity)

    async def update(self, entity: EntityType) -> EntityType:
        return await self._save(entity)

    async def get_by_id(self, entity_id: Any) -> Optional[EntityType]:
        return await self.session.get(self.model, entity_id)

    async def delete(self, entity_id: Any) -> bool:
        """Delete by primary key; False when nothing matched.

        Child rows go with it through the ``ON DELETE CASCADE`` foreign keys.
        """
        entity = await self.get_by_id(entity_id)
        if entity is None:
            return False
        await self.session.delete(entity)
        await self.session.commit()
        return True

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        stmt = QueryBuilder.apply_filters(select(func.count()).select_from(self.model), self.model, filters or {})
        return int((await self.session.execute(stmt)).scalar_one())

    async def paginate(self, stmt, page: int, limit: int) -> Tuple[List[EntityType], int]:
        """Return rows on 1-based ``page`` of ``stmt`` along with the full match count."""
        total_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = int((await self.session.execute(total_stmt)).scalar_one())

        rows = await self.session.execute(QueryBuilder.apply_pagination(stmt, limit, (page - 1) * limit))
        return list(rows.scalars().all()), total


class QueryBuilder:
    @staticmethod
    def apply_filters(stmt, model: Type[EntityType], filters: Dict[str, Any]):
        """AND an equality clause per filter; ``None`` values and unknown columns are skipped."""
        for column, value in filters.items():
            if value is None or not hasattr(model, column):
                continue
            stmt = stmt.where(getattr(model, column) == value)
        return stmt

    @staticmethod
    def apply_pagination(stmt, limit: Optional[int], offset: Optional[int]):
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)
        return stmt

    @staticmethod
    def ilike_any(columns: Sequence[Any], term: str):
        # Search is substring and case-insensitive on every listed column.
        needle = f"%{term}%"
        return or_(*(column.ilike(needle) for column in columns))
