"""Log work on Jira issues."""

import argparse
import re
import sys
from datetime import datetime, timezone
from typing import Callable

from jiramenu.adf import markdown_to_adf
from jiramenu.cache import default_comment_text
from jiramenu.jira_client import get_jira_site, request

TIME_SPENT_RE = re.compile(r"^\s*(?:\d+(?:\.\d+)?\s*[wdhm]\s*)+$", re.IGNORECASE)
TIME_PART_RE = re.compile(r"(\d+(?:\.\d+)?)\s*([wdhm])", re.IGNORECASE)


def parse_time_spent(text: str) -> str:
    """Validate a Jira duration and normalize its spacing.

    Accepts units w, d, h and m, e.g. "1h30m" -> "1h 30m".

    Raises:
        ValueError: If text is not a Jira duration
    """
    if not text or not TIME_SPENT_RE.match(text):
        raise ValueError(f"'{text}' is not a duration like '1h 30m'")
    parts = [f"{n}{unit.lower()}" for n, unit in TIME_PART_RE.findall(text)]
    if all(float(p[:-1]) == 0 for p in parts):
        raise ValueError("duration must be greater than zero")
    return " ".join(parts)


def format_started(dt: datetime | None = None) -> str:
    """Format a timestamp the way the worklog API expects (UTC)."""
    if dt is None:
        dt = datetime.now(timezone.utc)
    elif dt.tzinfo is None:
        dt = dt.astimezone()
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}+0000"


def parse_started(text: str) -> datetime:
    """Parse an ISO date/time typed by the user (local time if no zone).

    Raises:
        ValueError: If text is not an ISO timestamp
    """
    dt = datetime.fromisoformat(text.strip())
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


def build_worklog_payload(
    time_spent: str,
    comment: str | None = None,
    started: datetime | None = None,
) -> dict:
    """Build the body for POST issue/{key}/worklog."""
    payload: dict = {
        "timeSpent": parse_time_spent(time_spent),
        "started": format_started(started),
    }
    if comment:
        payload["comment"] = markdown_to_adf(comment)
    return payload


def add_worklog(
    key: str,
    time_spent: str,
    comment: str | None = None,
    started: datetime | None = None,
    on_success: Callable[[dict], None] | None = None,
) -> bool:
    """Add a worklog entry to a Jira issue.

    Args:
        key: Issue key (e.g., PROJ-123)
        time_spent: Jira duration (e.g., "1h 30m")
        comment: Worklog description (Markdown)
        started: When the work started (default: now)
        on_success: Called with the created worklog

    Returns:
        True if successful, False otherwise
    """
    try:
        payload = build_worklog_payload(time_spent, comment, started)
    except ValueError as e:
        print(f"Error: Invalid time spent: {e}", file=sys.stderr)
        return False

    return request(
        "POST",
        f"issue/{key}/worklog",
        payload,
        action=f"logging work on {key}",
        on_success=(lambda created: on_success(created or {})) if on_success else None,
    )


def worklog_command(args: argparse.Namespace) -> None:
    """Handle worklog subcommand."""
    key = args.key.upper()

    try:
        time_spent = parse_time_spent(args.time)
    except ValueError as e:
        print(f"Error: Invalid time spent: {e}", file=sys.stderr)
        sys.exit(1)

    started = None
    if getattr(args, "started", None):
        try:
            started = parse_started(args.started)
        except ValueError:
            print(f"Error: Invalid start time '{args.started}', expected ISO format", file=sys.stderr)
            sys.exit(1)

    comment = getattr(args, "comment", None) or default_comment_text(key)

    if add_worklog(key, time_spent, comment=comment, started=started):
        print(f"Logged {time_spent} on {key}")
        print(f"View at: https://{get_jira_site()}/browse/{key}")
    else:
        sys.exit(1)
