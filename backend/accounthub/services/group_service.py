"""
AccountHub Backend — Group Service
====================================

What:  The group API's behavior: paged listing, lookup, the shared
       create/update write pipeline, and deletion.
Why:   Routes stay thin (HTTP only); everything here can be tested with an
       in-memory manager and no HTTP.
Who:   Built per request by accounthub.dependencies.get_group_service().

Write Pipeline (POST /group, PUT /group/{id}):
    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────┐
    │ Lookup (PUT) │───▶│  Bind form   │───▶│  Unique name │───▶│  Persist │
    │ or new Group │    │  (no CSRF)   │    │  check       │    │ + project│
    └──────────────┘    └──────────────┘    └──────────────┘    └──────────┘

    The only difference between create and update is the first box.
    An invalid submission stops before the entity is touched, so nothing
    is written.

Outcomes:
    write_group() returns a WriteResult tagged WRITTEN, NOT_FOUND or INVALID.
    find_group_or_fail() and delete_group() raise NotFoundError.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from accounthub.exceptions import NotFoundError
from accounthub.forms import FormFactory
from accounthub.managers.base import GroupManager, Pager
from accounthub.models.group import Group
from accounthub.schemas.group import GroupForm, GroupRead

logger = logging.getLogger(__name__)

# Query keys that may become paging criteria; anything else is dropped
SUPPORTED_FILTERS = frozenset({"enabled"})

# Fields accepted in orderBy
SORTABLE_FIELDS = frozenset({"id", "name", "enabled", "created_at", "updated_at"})

OrderBy = Union[None, Tuple[str, str], Mapping[str, str]]


class WriteStatus(Enum):
    WRITTEN = "written"
    NOT_FOUND = "not_found"
    INVALID = "invalid"


@dataclass
class WriteResult:
    """
    Outcome of the write pipeline.

    Attributes:
        status: WriteStatus -- which variant this is
        data: Optional[GroupRead] -- the persisted group (WRITTEN only)
        errors: list -- per-field failures (INVALID only)
        message: str -- human-friendly summary
    """

    status: WriteStatus
    data: Optional[GroupRead] = None
    errors: List[Dict[str, str]] = field(default_factory=list)
    message: str = ""

    @property
    def is_success(self) -> bool:
        return self.status == WriteStatus.WRITTEN

    @classmethod
    def written(cls, data: GroupRead) -> "WriteResult":
        return cls(status=WriteStatus.WRITTEN, data=data, message="ok")

    @classmethod
    def not_found(cls, message: str) -> "WriteResult":
        return cls(status=WriteStatus.NOT_FOUND, message=message)

    @classmethod
    def invalid(cls, errors: List[Dict[str, str]]) -> "WriteResult":
        return cls(status=WriteStatus.INVALID, errors=list(errors), message="Submitted data is invalid")


def build_criteria(filters: Mapping[str, Any]) -> Dict[str, Any]:
    """Keep supported filter keys with a non-None value."""
    return {
        key: value
        for key, value in filters.items()
        if key in SUPPORTED_FILTERS and value is not None
    }


def normalize_sort(order_by: OrderBy) -> Dict[str, str]:
    """
    None/empty → {}; ("name", "DESC") → {"name": "DESC"}; mappings are copied.

    Directions are expected to be validated already (ASC or DESC).
    """
    if not order_by:
        return {}
    if isinstance(order_by, tuple):
        field_name, direction = order_by
        return {field_name: direction}
    return dict(order_by)


def project_group(group: Group) -> GroupRead:
    """Read projection: explicit attribute allow-list, relations excluded."""
    return GroupRead(
        id=group.id,
        name=group.name,
        enabled=bool(group.enabled),
        roles=list(group.roles or []),
        created_at=group.created_at,
        updated_at=group.updated_at,
    )


class GroupService:
    """
    Group API orchestration over injected collaborators.

    Args:
        group_manager: persistence (paging, lookup, upsert, delete)
        form_factory: binding/validation of submitted payloads
    """

    def __init__(self, group_manager: GroupManager, form_factory: FormFactory):
        self.group_manager = group_manager
        self.form_factory = form_factory

    async def list_groups(
        self,
        page: int = 1,
        count: int = 10,
        order_by: OrderBy = None,
        enabled: Optional[int] = None,
    ) -> Pager[Group]:
        """
        Return one page of groups.

        The manager receives exactly (criteria, page, count, sort), where
        criteria only ever contains `enabled`, and only when it was given.
        """
        criteria = build_criteria({"enabled": enabled})
        sort = normalize_sort(order_by)
        logger.debug("Listing groups: criteria=%s page=%d count=%d sort=%s", criteria, page, count, sort)
        return await self.group_manager.get_pager(criteria, page, count, sort)

    async def find_group_or_fail(self, group_id: Any) -> Group:
        """
        Resolve an identifier to a group.

        Raises:
            NotFoundError: no group has this id (→ 404)
        """
        group = await self.group_manager.find_group_by(id=group_id)
        if group is None:
            raise NotFoundError(
                resource="group",
                resource_id=group_id,
                message=f"Group ({group_id}) not found",
            )
        return group

    async def get_group(self, group_id: Any) -> GroupRead:
        return project_group(await self.find_group_or_fail(group_id))

    async def write_group(
        self,
        payload: Any,
        group_id: Optional[Any] = None,
    ) -> WriteResult:
        """
        Create (no group_id) or update (group_id) a group from a payload.

        Returns:
            WriteResult.written(GroupRead) after exactly one persistence write
            WriteResult.not_found(...) when group_id does not resolve
            WriteResult.invalid(errors) with zero persistence writes
        """
        if group_id is not None:
            try:
                group = await self.find_group_or_fail(group_id)
            except NotFoundError as e:
                return WriteResult.not_found(e.message)
        else:
            group_class = self.group_manager.get_class()
            group = group_class(name="")

        # API clients carry no session-bound CSRF token
        form = self.form_factory.create_named(None, GroupForm, group, csrf_protection=False)
        form.handle_request(payload)

        if form.is_valid():
            await self._check_unique_name(form, group)

        if not form.is_valid():
            logger.info("Rejected group write (id=%s): %s", group_id, form.errors)
            return WriteResult.invalid(form.errors)

        group = form.get_data()
        await self.group_manager.update_group(group)
        return WriteResult.written(project_group(group))

    async def _check_unique_name(self, form, group: Group) -> None:
        name = form.submitted.name
        existing = await self.group_manager.find_group_by(name=name)
        if existing is not None and existing.id != group.id:
            form.add_error("name", f"A group named '{name}' already exists.")

    async def delete_group(self, group_id: Any) -> Dict[str, bool]:
        """
        Delete a group.

        Raises:
            NotFoundError: no group has this id; nothing is deleted
        """
        group = await self.find_group_or_fail(group_id)
        await self.group_manager.delete_group(group)
        return {"deleted": True}
