"""Local cache of issue metadata keyed by issue key."""

from typing import Any, Iterator

from jiramenu.types import CachedIssue, user_display


class IssueCache:
    """Issue key -> CachedIssue.

    Populated by listings and detail views. Entries are only used for
    display and defaults, so a missing key is never an error.
    """

    def __init__(self):
        self._issues: dict[str, CachedIssue] = {}

    def remember(
        self,
        key: str,
        summary: str,
        status: str | None = None,
        assignee: str | None = None,
    ) -> CachedIssue:
        entry = CachedIssue(key=key.upper(), summary=summary or "", status=status, assignee=assignee)
        self._issues[entry.key] = entry
        return entry

    def remember_issue(self, issue: Any) -> CachedIssue:
        """Cache a jira Issue resource."""
        fields = issue.fields
        status = getattr(fields, "status", None)
        return self.remember(
            issue.key,
            getattr(fields, "summary", "") or "",
            status=status.name if status else None,
            assignee=user_display(getattr(fields, "assignee", None)),
        )

    def get(self, key: str) -> CachedIssue | None:
        return self._issues.get(key.upper())

    def summary(self, key: str, default: str = "") -> str:
        entry = self.get(key)
        return entry.summary if entry else default

    def forget(self, key: str) -> None:
        self._issues.pop(key.upper(), None)

    def keys(self) -> list[str]:
        return list(self._issues)

    def clear(self) -> None:
        self._issues.clear()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.upper() in self._issues

    def __len__(self) -> int:
        return len(self._issues)

    def __iter__(self) -> Iterator[CachedIssue]:
        return iter(list(self._issues.values()))


ISSUE_CACHE = IssueCache()


def default_comment_text(key: str) -> str:
    """Default text for comments and worklogs on an issue."""
    key = key.upper()
    summary = ISSUE_CACHE.summary(key)
    if summary:
        return f"{key}: {summary}"
    return key
