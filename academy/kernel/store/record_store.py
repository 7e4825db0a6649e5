"""
Record Store - create/update/list access to a named record collection.

The training engine reads and writes its records only through this
interface, so it stays storage-agnostic.
"""

import uuid
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.kernel.models.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class RecordStore(Generic[ModelT]):
    """
    Record collection backed by one SQLAlchemy model.

    Usage:
        progress = RecordStore(session, ProgressRecord)
        row = await progress.first(staff_id=staff_id, course_id=course_id)
        await progress.update(row.id, status="completed")
    """

    def __init__(self, session: AsyncSession, model: Type[ModelT]):
        self.session = session
        self.model = model

    def _order_by(self, sort_key: str):
        # "-field" sorts descending, as the console's list API does
        descending = sort_key.startswith("-")
        column = getattr(self.model, sort_key.lstrip("-"))
        return column.desc() if descending else column.asc()

    async def get(self, record_id: uuid.UUID) -> Optional[ModelT]:
        """Fetch one record by primary key."""
        return await self.session.get(self.model, record_id)

    async def create(self, **fields: Any) -> uuid.UUID:
        """Insert a record and return its id."""
        row = self.model(**fields)
        self.session.add(row)
        await self.session.flush()
        return row.id

    async def update(self, record_id: uuid.UUID, **fields: Any) -> ModelT:
        """Apply a partial update to an existing record."""
        row = await self.get(record_id)
        if row is None:
            raise LookupError(f"{self.model.__name__} {record_id} does not exist")
        for key, value in fields.items():
            setattr(row, key, value)
        await self.session.flush()
        return row

    async def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        sort_key: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[ModelT]:
        """List records matching equality filters; list values match any member."""
        q = select(self.model)
        for key, value in (filters or {}).items():
            column = getattr(self.model, key)
            if isinstance(value, (list, tuple, set, frozenset)):
                q = q.where(column.in_(list(value)))
            else:
                q = q.where(column == value)
        if sort_key:
            q = q.order_by(self._order_by(sort_key))
        if limit is not None:
            q = q.limit(limit)
        result = await self.session.execute(q)
        return list(result.scalars().all())

    async def first(self, **filters: Any) -> Optional[ModelT]:
        """First record matching the filters, or None."""
        rows = await self.list(filters, limit=1)
        return rows[0] if rows else None

    async def create_if_absent(
        self,
        unique_filters: Dict[str, Any],
        **fields: Any,
    ) -> Tuple[ModelT, bool]:
        """
        Conditional insert keyed on a unique constraint.

        The insert runs in a savepoint; if a concurrent writer got there
        first the constraint rejects it and the existing row is returned.

        Returns:
            (row, created)
        """
        existing = await self.first(**unique_filters)
        if existing is not None:
            return existing, False

        row = self.model(**unique_filters, **fields)
        try:
            async with self.session.begin_nested():
                self.session.add(row)
                await self.session.flush()
        except IntegrityError:
            existing = await self.first(**unique_filters)
            if existing is None:
                raise
            return existing, False
        return row, True
