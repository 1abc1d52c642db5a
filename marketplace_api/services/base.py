from __future__ import annotations

import math
from typing import Callable, FrozenSet, List, Optional, TypeVar, Union

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_api.core.errors import ApiError, ErrorType
from marketplace_api.repositories.base import BaseRepository, SearchTerm, SortTerm
from marketplace_api.schemas.common import Page

T = TypeVar("T")


# PUBLIC_INTERFACE
def parse_search(search: Optional[str], fields: FrozenSet[str]) -> Optional[SearchTerm]:
    """Parse a `field:substring` search string, rejecting unknown fields."""
    if search is None:
        return None
    field, _, key = search.partition(":")
    if field not in fields:
        raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "invalid search field")
    return SearchTerm(field=field, key=key)


# PUBLIC_INTERFACE
def parse_sort(sort: Optional[str], fields: FrozenSet[str]) -> Optional[SortTerm]:
    """Parse a `field:asc|desc` sort string, rejecting unknown fields and orders."""
    if sort is None:
        return None
    field, _, order = sort.partition(":")
    if field not in fields:
        raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "invalid sort field")
    if order not in ("asc", "desc"):
        raise ApiError(ErrorType.UNPROCESSABLE_ENTITY, "invalid sort key")
    return SortTerm(field=field, descending=order == "desc")


class BaseService:
    """
    Base class for services. Holds a session for use across multiple repositories.

    Services keep business rules and orchestration, delegating data access
    to repositories.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _listing(
        self,
        repo: BaseRepository,
        to_read: Callable[[object], T],
        *,
        fields: FrozenSet[str],
        page_number: Optional[int],
        page_size: Optional[int],
        search: Optional[str],
        sort: Optional[str],
    ) -> Union[Page[T], List[T]]:
        """
        Search, then sort, then paginate. Pagination applies only when both
        page_number and page_size are given; otherwise a plain list is returned.
        """
        search_term = parse_search(search, fields)
        sort_term = parse_sort(sort, fields)

        if page_number is None or page_size is None:
            rows = await repo.list_rows(search=search_term, sort=sort_term)
            return [to_read(r) for r in rows]

        total = await repo.count(search=search_term)
        total_pages = math.ceil(total / page_size)
        rows = await repo.list_rows(
            search=search_term,
            sort=sort_term,
            offset=(page_number - 1) * page_size,
            limit=page_size,
        )
        data = [to_read(r) for r in rows]
        return Page(
            page_number=page_number,
            page_size=page_size,
            count=len(data),
            total_pages=total_pages,
            has_previous_page=page_number != 1,
            has_next_page=page_number < total_pages,
            data=data,
        )
