"""
AccountHub Backend — Group Route Handlers
===========================================

What:  The group resource surface.
How:   Parses query/path/body, delegates to GroupService, shapes the response.

Routes:
    GET    /groups         paginated list (page, count, orderBy, enabled)
    GET    /group/{id}     one group (404 if absent)
    POST   /group          create (400 on invalid payload)
    PUT    /group/{id}     update (400 invalid / 404 absent)
    DELETE /group/{id}     delete → {"deleted": true} (404 if absent)

orderBy forms accepted:
    ?orderBy[name]=ASC&orderBy[created_at]=DESC   field → direction map
    ?orderBy=name                                 single field, ASC
    ?orderBy=name:DESC                            single field/direction pair
"""

import logging
import re
from typing import Any, Dict, Optional, Tuple, Union

from fastapi import APIRouter, Body, Depends, Query, Request, Response

from accounthub.config import settings
from accounthub.dependencies import get_group_service
from accounthub.exceptions import FormValidationError, NotFoundError, ValidationError
from accounthub.managers.base import SORT_ASC, SORT_DIRECTIONS
from accounthub.schemas.common import ErrorResponse
from accounthub.schemas.group import DeleteResponse, GroupPage, GroupRead
from accounthub.services.group_service import (
    SORTABLE_FIELDS,
    GroupService,
    WriteResult,
    WriteStatus,
    project_group,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Groups"])

ORDER_BY_PARAM = "orderBy"
_ORDER_BY_MAP_KEY = re.compile(r"^orderBy\[(?P<field>[^\]]+)\]$")


def _check_sort(field_name: str, direction: str) -> None:
    if field_name not in SORTABLE_FIELDS:
        raise ValidationError(
            message=f"Cannot sort by '{field_name}'. Sortable fields: {sorted(SORTABLE_FIELDS)}",
            field=ORDER_BY_PARAM,
        )
    if direction not in SORT_DIRECTIONS:
        raise ValidationError(
            message=f"Invalid sort direction '{direction}' for '{field_name}'. Use ASC or DESC.",
            field=ORDER_BY_PARAM,
        )


def parse_order_by(query_params) -> Union[None, Tuple[str, str], Dict[str, str]]:
    """
    Read orderBy from the raw query string.

    Returns None when absent, a (field, direction) pair for the bare form,
    or a field → direction dict for the map form.

    Raises:
        ValidationError: unknown field or a direction other than ASC/DESC
    """
    sort: Dict[str, str] = {}
    for key, value in query_params.multi_items():
        match = _ORDER_BY_MAP_KEY.match(key)
        if match:
            _check_sort(match.group("field"), value)
            sort[match.group("field")] = value

    bare = query_params.get(ORDER_BY_PARAM)
    if bare:
        field_name, _, direction = bare.partition(":")
        direction = direction or SORT_ASC
        _check_sort(field_name, direction)
        if not sort:
            return (field_name, direction)
        sort.setdefault(field_name, direction)

    return sort or None


def _unwrap(result: WriteResult) -> GroupRead:
    if result.status == WriteStatus.NOT_FOUND:
        raise NotFoundError(resource="group", message=result.message)
    if result.status == WriteStatus.INVALID:
        raise FormValidationError(result.errors)
    return result.data


@router.get(
    "/groups",
    response_model=GroupPage,
    responses={
        200: {"description": "Paginated list of groups", "model": GroupPage},
        400: {"description": "Invalid orderBy", "model": ErrorResponse},
    },
    summary="List groups with pagination",
    # orderBy is read from the raw query string (it also has a map form), so
    # it is documented here rather than declared as a parameter
    openapi_extra={
        "parameters": [
            {
                "name": ORDER_BY_PARAM,
                "in": "query",
                "required": False,
                "schema": {"type": "string"},
                "description": "Sort: 'name', 'name:DESC', or the map form orderBy[name]=ASC",
            }
        ]
    },
)
async def list_groups(
    request: Request,
    response: Response,
    page: int = Query(default=1, ge=1, description="Page number (1-based)"),
    # The upper bound only guards against unbounded page loads
    count: int = Query(
        default=settings.pagination_default_count,
        ge=1,
        le=settings.pagination_max_count,
        description="Groups per page",
    ),
    enabled: Optional[int] = Query(
        default=None, ge=0, le=1,
        description="Filter: 1 for enabled groups, 0 for disabled; omit for all",
    ),
    service: GroupService = Depends(get_group_service),
) -> GroupPage:
    pager = await service.list_groups(
        page=page,
        count=count,
        order_by=parse_order_by(request.query_params),
        enabled=enabled,
    )

    response.headers["X-Total-Count"] = str(pager.total)

    return GroupPage(
        page=pager.page,
        per_page=pager.per_page,
        last_page=pager.last_page,
        total=pager.total,
        entries=[project_group(group) for group in pager.entries],
    )


@router.get(
    "/group/{group_id}",
    response_model=GroupRead,
    responses={404: {"description": "Group not found", "model": ErrorResponse}},
    summary="Get a single group by ID",
)
async def get_group(
    group_id: int,
    service: GroupService = Depends(get_group_service),
) -> GroupRead:
    return await service.get_group(group_id)


@router.post(
    "/group",
    response_model=GroupRead,
    responses={400: {"description": "Invalid payload", "model": ErrorResponse}},
    summary="Create a group",
)
async def post_group(
    payload: Any = Body(default=None),
    service: GroupService = Depends(get_group_service),
) -> GroupRead:
    return _unwrap(await service.write_group(payload))


@router.put(
    "/group/{group_id}",
    response_model=GroupRead,
    responses={
        400: {"description": "Invalid payload", "model": ErrorResponse},
        404: {"description": "Group not found", "model": ErrorResponse},
    },
    summary="Update a group",
)
async def put_group(
    group_id: int,
    payload: Any = Body(default=None),
    service: GroupService = Depends(get_group_service),
) -> GroupRead:
    return _unwrap(await service.write_group(payload, group_id=group_id))


@router.delete(
    "/group/{group_id}",
    response_model=DeleteResponse,
    responses={404: {"description": "Group not found", "model": ErrorResponse}},
    summary="Delete a group",
)
async def delete_group(
    group_id: int,
    service: GroupService = Depends(get_group_service),
) -> DeleteResponse:
    return DeleteResponse(**await service.delete_group(group_id))
