"""Transition Jira issues between statuses, singly or in bulk."""

import argparse
import sys
from typing import Callable

from jiramenu.adf import markdown_to_adf
from jiramenu.config import get_refresh_delay
from jiramenu.jira_client import get_jira, get_jira_site, request
from jiramenu.scheduler import get_loop
from jiramenu.types import BulkTransition, Transition


def get_transitions(key: str) -> list[Transition]:
    """Get available transitions for an issue."""
    jira = get_jira()
    try:
        raw = jira.transitions(key, expand="transitions.fields")
    except Exception as e:
        print(f"Error getting transitions for {key}: {e}", file=sys.stderr)
        return []

    return [
        {
            "id": str(t["id"]),
            "name": t["name"],
            "to": t.get("to", {}).get("name", ""),
            "resolution": "resolution" in (t.get("fields") or {}),
        }
        for t in raw
    ]


def get_resolutions() -> list[str]:
    """Get resolution names defined on the server."""
    jira = get_jira()
    try:
        return [r.name for r in jira.resolutions()]
    except Exception as e:
        print(f"Error getting resolutions: {e}", file=sys.stderr)
        return []


def find_transition(transitions: list, name: str):
    """Find a transition by its name or its target status (case-insensitive)."""
    name_lower = name.lower()
    for t in transitions:
        if t["name"].lower() == name_lower:
            return t
    for t in transitions:
        if t["to"].lower() == name_lower:
            return t
    return None


def print_available(transitions: list, file=sys.stdout) -> None:
    for t in transitions:
        print(f"  - {t['name']} → {t['to']}", file=file)


def build_transition_payload(
    transition_id: str,
    resolution: str | None = None,
    comment: str | None = None,
) -> dict:
    """Build the body for POST issue/{key}/transitions."""
    payload: dict = {"transition": {"id": str(transition_id)}}
    if resolution:
        payload["fields"] = {"resolution": {"name": resolution}}
    if comment:
        payload["update"] = {"comment": [{"add": {"body": markdown_to_adf(comment)}}]}
    return payload


def transition_issue(
    key: str,
    transition_id: str,
    resolution: str | None = None,
    comment: str | None = None,
    on_success: Callable[[], None] | None = None,
) -> bool:
    """Apply a transition to one issue.

    Args:
        key: Issue key (e.g., PROJ-123)
        transition_id: Transition ID from get_transitions()
        resolution: Resolution name for transitions that ask for one
        comment: Optional Markdown comment added with the transition
        on_success: Called after the server accepted the transition

    Returns:
        True if successful, False otherwise
    """
    return request(
        "POST",
        f"issue/{key}/transitions",
        build_transition_payload(transition_id, resolution, comment),
        action=f"transitioning {key}",
        on_success=(lambda _body: on_success()) if on_success else None,
    )


def common_transitions(keys: list[str]) -> list[BulkTransition]:
    """Transitions available to every issue in keys, matched by name.

    Keeps the order of the first issue's transitions.
    """
    if not keys:
        return []

    per_issue = {key: get_transitions(key) for key in keys}
    first = per_issue[keys[0]]
    result: list[BulkTransition] = []
    for t in first:
        inputs: dict[str, list[str]] = {}
        for key in keys:
            match = next((o for o in per_issue[key] if o["name"] == t["name"]), None)
            if match is None:
                break
            inputs.setdefault(match["id"], []).append(key)
        else:
            result.append({"name": t["name"], "to": t["to"], "inputs": inputs})
    return result


def build_bulk_payload(inputs: dict[str, list[str]], notify: bool = True) -> dict:
    """Build the body for POST bulk/issues/transition."""
    return {
        "bulkTransitionInputs": [
            {"selectedIssueIdsOrKeys": list(keys), "transitionId": str(transition_id)}
            for transition_id, keys in inputs.items()
        ],
        "sendBulkNotification": notify,
    }


def bulk_transition(
    inputs: dict[str, list[str]],
    notify: bool = True,
    on_refresh: Callable[[], None] | None = None,
    delay: float | None = None,
) -> str | None:
    """Submit a bulk transition and schedule a refresh.

    The server applies bulk transitions in a background task, so the
    refresh runs on the event loop after a fixed delay instead of at once.

    Args:
        inputs: Transition ID -> issue keys
        notify: Send notifications for the transitioned issues
        on_refresh: Called after the delay once the task was accepted
        delay: Seconds before on_refresh runs (default from config, 1.5)

    Returns:
        Server task ID, or None if the submission failed
    """
    task: list[str] = []

    def on_success(body):
        task.append(str((body or {}).get("taskId", "")))
        if on_refresh:
            wait = get_refresh_delay() if delay is None else delay
            get_loop().call_later(wait, on_refresh)

    ok = request(
        "POST",
        "bulk/issues/transition",
        build_bulk_payload(inputs, notify),
        action="submitting bulk transition",
        on_success=on_success,
    )
    if not ok:
        return None
    return task[0] if task else ""


def transition_command(args: argparse.Namespace) -> None:
    """Handle transition subcommand."""
    key = args.key.upper()
    transitions = get_transitions(key)

    if args.list:
        if transitions:
            print(f"Available transitions for {key}:")
            print_available(transitions)
        return

    if not args.status:
        print("Error: Specify a status or use --list", file=sys.stderr)
        sys.exit(1)

    match = find_transition(transitions, args.status)
    if not match:
        print(f"Error: No transition to '{args.status}' available", file=sys.stderr)
        print("\nAvailable transitions:", file=sys.stderr)
        print_available(transitions, file=sys.stderr)
        sys.exit(1)

    resolution = getattr(args, "resolution", None)
    comment = getattr(args, "comment", None)
    if transition_issue(key, match["id"], resolution=resolution, comment=comment):
        print(f"Transitioned {key} to {match['to'] or match['name']}")
        print(f"View at: https://{get_jira_site()}/browse/{key}")
    else:
        sys.exit(1)


def bulk_transition_command(args: argparse.Namespace) -> None:
    """Handle bulk-transition subcommand."""
    from jiramenu.listing import refresh_listing, search_issues

    keys = list(dict.fromkeys(k.upper() for k in args.keys))
    if args.jql:
        keys.extend(r["key"] for r in search_issues(args.jql) if r["key"] not in keys)
    if not keys:
        print("Error: No issues given. Pass keys or --jql", file=sys.stderr)
        sys.exit(1)

    options = common_transitions(keys)
    match = find_transition(options, args.to)
    if not match:
        print(f"Error: No transition to '{args.to}' shared by all issues", file=sys.stderr)
        if options:
            print("\nShared transitions:", file=sys.stderr)
            print_available(options, file=sys.stderr)
        sys.exit(1)

    refresh_jql = args.jql or f"key in ({', '.join(keys)}) ORDER BY key"
    print(f"Transitioning {len(keys)} issue(s) via '{match['name']}'...")
    task_id = bulk_transition(
        match["inputs"],
        notify=not args.no_notify,
        on_refresh=lambda: refresh_listing(refresh_jql),
    )
    if task_id is None:
        sys.exit(1)

    print(f"Bulk transition submitted (task {task_id or '?'})")
    get_loop().run()
