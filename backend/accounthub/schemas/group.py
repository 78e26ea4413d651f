"""
AccountHub Backend — Group Request/Response Schemas
=====================================================

What:  The group form (what clients may submit) and the read projection
       (what clients get back).
Why:   Responses expose an explicit allow-list of attributes; relations such
       as `users` are never expanded, so responses cannot recurse through
       group ↔ user links.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from accounthub.forms import FormType


# ══════════════════════════════════════════════════════════════════════════
# Form: bound onto a Group by the write pipeline (POST /group, PUT /group/{id})
# ══════════════════════════════════════════════════════════════════════════


class GroupForm(FormType):
    """
    Fields a client may submit for a group.

    Omitted optional fields take their defaults on every write, for PUT as
    well as POST: the submitted document replaces the group's state.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255, description="Unique group name")
    enabled: bool = Field(default=False, description="Whether the group is active")
    roles: List[str] = Field(default_factory=list, description="Role names granted to members")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class GroupRead(BaseModel):
    """Read-safe projection of a group."""

    id: int = Field(description="Group identifier")
    name: str = Field(description="Group name")
    enabled: bool = Field(description="Whether the group is active")
    roles: List[str] = Field(description="Role names granted to members")
    created_at: datetime = Field(description="Creation timestamp (UTC)")
    updated_at: datetime = Field(description="Last modification timestamp (UTC)")


class GroupPage(BaseModel):
    """
    One page of groups.

    Example:
        {"page": 2, "per_page": 5, "last_page": 3, "total": 12, "entries": [...]}
    """

    page: int = Field(description="Current page (1-based)")
    per_page: int = Field(description="Requested page size")
    last_page: int = Field(description="Number of the last page (at least 1)")
    total: int = Field(description="Total number of groups matching the filters")
    entries: List[GroupRead] = Field(description="Groups on this page")


class DeleteResponse(BaseModel):
    deleted: bool = True
