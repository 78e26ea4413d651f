"""
AccountHub Backend — SQLAlchemy Group Manager
===============================================

What:  GroupManager backed by the request-scoped AsyncSession.
How:   Writes are flushed (ids assigned, constraints checked) but not
       committed; get_db_session() commits when the request succeeds.

Query plan (GET /groups?enabled=1&orderBy[name]=ASC&page=2&count=5):
    SELECT count(groups.id) FROM groups WHERE groups.enabled = true
    SELECT ... FROM groups WHERE groups.enabled = true
    ORDER BY groups.name ASC, groups.id ASC LIMIT 5 OFFSET 5
"""

import logging
from typing import Any, Dict, Optional, Type

from sqlalchemy import asc, desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from accounthub.exceptions import DatabaseError, ValidationError
from accounthub.managers.base import SORT_DESC, GroupManager, Pager
from accounthub.models.group import Group

logger = logging.getLogger(__name__)

# Filter key → column, and the value coercion applied to it
_FILTER_COLUMNS = {
    "enabled": (Group.enabled, bool),
}

SORT_COLUMNS = {
    "id": Group.id,
    "name": Group.name,
    "enabled": Group.enabled,
    "created_at": Group.created_at,
    "updated_at": Group.updated_at,
}


class SqlAlchemyGroupManager(GroupManager):
    """Group persistence over one AsyncSession."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def get_class(self) -> Type[Group]:
        return Group

    def _apply_criteria(self, query, criteria: Dict[str, Any]):
        for key, value in criteria.items():
            if key not in _FILTER_COLUMNS:
                raise ValidationError(message=f"Unsupported filter '{key}'", field=key)
            column, coerce = _FILTER_COLUMNS[key]
            query = query.where(column == coerce(value))
        return query

    async def get_pager(
        self,
        criteria: Dict[str, Any],
        page: int,
        limit: int = 10,
        sort: Optional[Dict[str, str]] = None,
    ) -> Pager[Group]:
        query = self._apply_criteria(select(Group), criteria)
        count_query = self._apply_criteria(select(func.count(Group.id)), criteria)

        for field_name, direction in (sort or {}).items():
            column = SORT_COLUMNS.get(field_name)
            if column is None:
                raise ValidationError(message=f"Cannot sort by '{field_name}'", field="orderBy")
            query = query.order_by(desc(column) if direction == SORT_DESC else asc(column))
        # Stable paging when the requested sort has ties
        query = query.order_by(asc(Group.id))

        query = query.offset((page - 1) * limit).limit(limit)

        try:
            total = (await self.session.execute(count_query)).scalar() or 0
            result = await self.session.execute(query)
            entries = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error paging groups: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve groups. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return Pager(entries=entries, page=page, per_page=limit, total=total)

    async def find_group_by(self, **criteria: Any) -> Optional[Group]:
        query = select(Group).filter_by(**criteria).limit(1)
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error fetching group %s: %s", criteria, str(e))
            raise DatabaseError(
                message="Could not retrieve the group. Please try again.",
                context={"criteria": {k: str(v) for k, v in criteria.items()}},
            )
        return result.scalar_one_or_none()

    async def update_group(self, group: Group) -> None:
        try:
            self.session.add(group)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error("Database error saving group %r: %s", group, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the group. Please try again.",
                context={"group_id": group.id, "error_type": type(e).__name__},
            )
        logger.info("Saved group %s (%s)", group.id, group.name)

    async def delete_group(self, group: Group) -> None:
        group_id = group.id
        try:
            await self.session.delete(group)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting group %s: %s", group_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the group. Please try again.",
                context={"group_id": group_id, "error_type": type(e).__name__},
            )
        logger.info("Deleted group %s", group_id)
