"""Issue listing by JQL."""

import argparse
import sys
from datetime import datetime, timezone

from jiramenu.cache import ISSUE_CACHE
from jiramenu.config import get_default_jql, get_query
from jiramenu.jira_client import get_jira
from jiramenu.types import IssueRow

LIST_FIELDS = "summary,status,assignee,created"
MAX_SUMMARY = 80


def humanize_age(iso_timestamp: str) -> str:
    """Convert ISO timestamp to human-readable age like '2d' or '3w'."""
    if not iso_timestamp:
        return "-"
    try:
        # Jira format: 2026-01-11T14:30:00.000+0000
        dt = datetime.fromisoformat(iso_timestamp.replace("+0000", "+00:00"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        seconds = (datetime.now(timezone.utc) - dt).total_seconds()
        if seconds < 60:
            return "now"
        minutes = seconds / 60
        if minutes < 60:
            return f"{int(minutes)}m"
        hours = minutes / 60
        if hours < 24:
            return f"{int(hours)}h"
        days = hours / 24
        if days < 7:
            return f"{int(days)}d"
        weeks = days / 7
        if weeks < 4:
            return f"{int(weeks)}w"
        months = days / 30
        if months < 12:
            return f"{int(months)}mo"
        return f"{int(days / 365)}y"
    except (ValueError, TypeError):
        return "-"


def search_issues(jql: str) -> list[IssueRow]:
    """Search issues and cache their metadata.

    Returns:
        Rows in server order, empty on error
    """
    jira = get_jira()
    try:
        issues = jira.search_issues(jql, maxResults=False, fields=LIST_FIELDS)
    except Exception as e:
        print(f"Error searching: {e}", file=sys.stderr)
        return []

    rows: list[IssueRow] = []
    for issue in issues:
        entry = ISSUE_CACHE.remember_issue(issue)
        rows.append({
            "key": entry.key,
            "status": entry.status or "?",
            "assignee": entry.assignee or "Unassigned",
            "created": issue.fields.created or "",
            "summary": entry.summary,
        })
    return rows


def print_table(rows: list[IssueRow]) -> None:
    """Print issues grouped by status, keeping server order within groups."""
    if not rows:
        print("No issues.")
        return

    key_width = max(len(r["key"]) for r in rows)

    groups: dict[str, list[IssueRow]] = {}
    for r in rows:
        groups.setdefault(r["status"], []).append(r)

    for status, group_rows in groups.items():
        header = f"{status} ({len(group_rows)})"
        print(f"\n{header}")
        print("-" * len(header))
        for r in group_rows:
            age = humanize_age(r["created"])
            summary = r["summary"]
            if len(summary) > MAX_SUMMARY:
                summary = summary[: MAX_SUMMARY - 3] + "..."
            print(f"{r['key']:<{key_width}}  {age:>5}  {summary}")


def refresh_listing(jql: str) -> list[IssueRow]:
    """Re-run the search and print the table again."""
    rows = search_issues(jql)
    print_table(rows)
    return rows


def resolve_jql(args: argparse.Namespace) -> str:
    """Pick the JQL for list/browse from --jql, --query or the default."""
    jql = getattr(args, "jql", None)
    if jql:
        return jql
    name = getattr(args, "query", None)
    if name:
        jql = get_query(name)
        if not jql:
            print(f"Error: No query named '{name}' in jiramenu.toml", file=sys.stderr)
            sys.exit(1)
        return jql
    return get_default_jql()


def list_command(args: argparse.Namespace) -> None:
    """Handle list subcommand."""
    refresh_listing(resolve_jql(args))
