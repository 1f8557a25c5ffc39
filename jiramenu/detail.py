"""Issue detail view."""

import argparse
import sys

from jiramenu.adf import adf_to_text
from jiramenu.cache import ISSUE_CACHE
from jiramenu.jira_client import get_jira_site, request
from jiramenu.types import CommentInfo, IssueDetail

DETAIL_FIELDS = "summary,status,issuetype,priority,assignee,reporter,labels,description,comment,watches"


def _name(value: dict | None, attr: str = "name", default: str = "") -> str:
    if not value:
        return default
    return value.get(attr) or default


def parse_comment(raw: dict) -> CommentInfo:
    """Convert a REST v3 comment to CommentInfo."""
    return {
        "id": str(raw.get("id", "")),
        "author": _name(raw.get("author"), "displayName", "Unknown"),
        "created": raw.get("created", ""),
        "body": adf_to_text(raw.get("body")),
    }


def parse_issue(data: dict) -> IssueDetail:
    """Convert a REST v3 issue response to IssueDetail."""
    fields = data.get("fields", {})
    comments = (fields.get("comment") or {}).get("comments", [])
    return {
        "key": data.get("key", ""),
        "summary": fields.get("summary") or "",
        "status": _name(fields.get("status"), default="?"),
        "issuetype": _name(fields.get("issuetype"), default="?"),
        "priority": _name(fields.get("priority"), default="None"),
        "assignee": _name(fields.get("assignee"), "displayName", "Unassigned"),
        "reporter": _name(fields.get("reporter"), "displayName", "Unknown"),
        "labels": list(fields.get("labels") or []),
        "description": adf_to_text(fields.get("description")),
        "comments": [parse_comment(c) for c in comments],
        "watchers": (fields.get("watches") or {}).get("watchCount", 0),
    }


def get_issue_detail(key: str) -> IssueDetail | None:
    """Fetch an issue and refresh its cache entry.

    Returns:
        IssueDetail, or None if the issue could not be fetched
    """
    key = key.upper()
    found: list[IssueDetail] = []

    def on_success(data):
        if not data:
            return
        detail = parse_issue(data)
        ISSUE_CACHE.remember(
            detail["key"] or key,
            detail["summary"],
            status=detail["status"],
            assignee=detail["assignee"],
        )
        found.append(detail)

    request(
        "GET",
        f"issue/{key}",
        params={"fields": DETAIL_FIELDS},
        action=f"fetching {key}",
        on_success=on_success,
    )
    return found[0] if found else None


def refresh_issue(key: str) -> None:
    """Refresh the cached metadata of one issue after a change."""
    get_issue_detail(key)


def format_issue_detail(detail: IssueDetail) -> str:
    """Format an issue for display."""
    lines = [
        f"{detail['key']}: {detail['summary']}",
        "",
        f"Type:     {detail['issuetype']}",
        f"Status:   {detail['status']}",
        f"Priority: {detail['priority']}",
        f"Assignee: {detail['assignee']}",
        f"Reporter: {detail['reporter']}",
        f"Labels:   {', '.join(detail['labels']) if detail['labels'] else '-'}",
        f"Watchers: {detail['watchers']}",
        "",
        "Description",
        "-----------",
        detail["description"] or "No description",
    ]

    if detail["comments"]:
        lines.extend(["", f"Comments ({len(detail['comments'])})", "--------"])
        for c in detail["comments"]:
            lines.append(f"[{c['id']}] {c['author']} ({c['created'][:10]}):")
            lines.extend(f"  {line}" for line in c["body"].split("\n"))
            lines.append("")

    return "\n".join(lines).rstrip()


def show_command(args: argparse.Namespace) -> None:
    """Handle show subcommand."""
    key = args.key.upper()
    detail = get_issue_detail(key)
    if not detail:
        sys.exit(1)

    print(format_issue_detail(detail))
    print(f"\nView at: https://{get_jira_site()}/browse/{key}")
