"""Shared data types."""

from dataclasses import dataclass
from typing import Any, TypedDict


class IssueRow(TypedDict):
    """One row of an issue listing."""

    key: str
    status: str
    assignee: str
    created: str
    summary: str


class Transition(TypedDict):
    """A workflow transition available for an issue."""

    id: str
    name: str
    to: str
    resolution: bool  # transition screen asks for a resolution


class CommentInfo(TypedDict):
    id: str
    author: str
    created: str
    body: str


class IssueDetail(TypedDict):
    """Everything the detail view shows for an issue."""

    key: str
    summary: str
    status: str
    issuetype: str
    priority: str
    assignee: str
    reporter: str
    labels: list[str]
    description: str
    comments: list[CommentInfo]
    watchers: int


class BulkTransition(TypedDict):
    """A transition offered for several issues at once.

    inputs maps transition id -> issue keys; the same transition name can
    have different ids in different workflows.
    """

    name: str
    to: str
    inputs: dict[str, list[str]]


class UserChoice(TypedDict):
    account_id: str
    display_name: str


@dataclass
class CachedIssue:
    """Issue metadata kept for UI convenience."""

    key: str
    summary: str
    status: str | None = None
    assignee: str | None = None


def user_display(user: Any) -> str | None:
    """Get a printable name for a Jira user resource.

    Prefers displayName, then name, then emailAddress, then accountId.
    """
    if not user:
        return None
    for attr in ("displayName", "name", "emailAddress", "accountId"):
        value = getattr(user, attr, None)
        if isinstance(value, str) and value:
            return value
    return None
