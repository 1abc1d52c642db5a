from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, FrozenSet, List, Optional

from sqlalchemy import Executable, String, cast, func, select
from sqlalchemy.ext.asyncio import AsyncSession


@dataclass(frozen=True)
class SearchTerm:
    """Case-insensitive substring filter on one field."""
    field: str
    key: str


@dataclass(frozen=True)
class SortTerm:
    """Ordering on one field."""
    field: str
    descending: bool = False


class BaseRepository:
    """
    Base class for repositories providing common helpers.

    Subclasses set `model` and `text_fields`; text fields are searched and sorted
    case-insensitively, other fields are searched through their text form.
    """

    model: ClassVar[Any]
    text_fields: ClassVar[FrozenSet[str]] = frozenset()

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def execute(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute a SQLAlchemy statement."""
        return await self.session.execute(statement, params or {})

    async def scalars(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return scalars."""
        result = await self.execute(statement, params)
        return result.scalars()

    async def scalar_one_or_none(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return a single scalar or None."""
        result = await self.execute(statement, params)
        return result.scalar_one_or_none()

    async def commit(self) -> None:
        """Commit current transaction."""
        await self.session.commit()

    async def add(self, entity: Any) -> None:
        """Add a single entity to session."""
        self.session.add(entity)

    async def get(self, entity_id: Any) -> Optional[Any]:
        stmt = select(self.model).where(self.model.id == entity_id)
        return await self.scalar_one_or_none(stmt)

    def _search_clause(self, search: SearchTerm):
        column = getattr(self.model, search.field)
        if search.field not in self.text_fields:
            column = cast(column, String)
        return column.icontains(search.key, autoescape=True)

    def _sort_clause(self, sort: SortTerm):
        column = getattr(self.model, sort.field)
        if sort.field in self.text_fields:
            column = func.lower(column)
        return column.desc() if sort.descending else column.asc()

    async def list_rows(
        self,
        *,
        search: Optional[SearchTerm] = None,
        sort: Optional[SortTerm] = None,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Any]:
        """Return rows filtered by search, then ordered by sort, then paginated."""
        stmt = select(self.model)
        if search is not None:
            stmt = stmt.where(self._search_clause(search))
        if sort is not None:
            stmt = stmt.order_by(self._sort_clause(sort), self.model.created_at, self.model.id)
        else:
            stmt = stmt.order_by(self.model.created_at, self.model.id)
        if offset is not None:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.scalars(stmt)
        return list(result)

    async def count(self, *, search: Optional[SearchTerm] = None) -> int:
        """Count rows matching the optional search."""
        stmt = select(func.count(self.model.id))
        if search is not None:
            stmt = stmt.where(self._search_clause(search))
        result = await self.execute(stmt)
        return int(result.scalar_one())
