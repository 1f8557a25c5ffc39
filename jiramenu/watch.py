"""Watch and unwatch Jira issues."""

import argparse
import sys
from typing import Callable

from jiramenu.jira_client import get_jira, get_jira_site, request
from jiramenu.types import UserChoice


def current_account_id() -> str | None:
    """Get the account ID of the authenticated user."""
    jira = get_jira()
    try:
        return jira.myself().get("accountId")
    except Exception as e:
        print(f"Error getting current user: {e}", file=sys.stderr)
        return None


def get_watchers(key: str) -> list[UserChoice]:
    """Get the users watching an issue."""
    jira = get_jira()
    try:
        result = jira.watchers(key)
    except Exception as e:
        print(f"Error getting watchers for {key}: {e}", file=sys.stderr)
        return []
    return [
        {"account_id": w.accountId, "display_name": getattr(w, "displayName", w.accountId)}
        for w in result.watchers
    ]


def add_watcher(
    key: str,
    account_id: str | None = None,
    on_success: Callable[[], None] | None = None,
) -> bool:
    """Add a watcher to an issue (default: the current user).

    The watchers endpoint takes the bare account ID as a JSON string.
    """
    account_id = account_id or current_account_id()
    if not account_id:
        return False
    return request(
        "POST",
        f"issue/{key}/watchers",
        account_id,
        api_version="2",
        action=f"watching {key}",
        on_success=(lambda _body: on_success()) if on_success else None,
    )


def remove_watcher(
    key: str,
    account_id: str | None = None,
    on_success: Callable[[], None] | None = None,
) -> bool:
    """Remove a watcher from an issue (default: the current user)."""
    account_id = account_id or current_account_id()
    if not account_id:
        return False
    return request(
        "DELETE",
        f"issue/{key}/watchers",
        api_version="2",
        params={"accountId": account_id},
        action=f"unwatching {key}",
        on_success=(lambda _body: on_success()) if on_success else None,
    )


def watch_command(args: argparse.Namespace) -> None:
    """Handle watch subcommand."""
    key = args.key.upper()
    user = getattr(args, "user", None)

    if getattr(args, "list", False):
        watchers = get_watchers(key)
        print(f"Watchers of {key} ({len(watchers)}):")
        for w in watchers:
            print(f"  - {w['display_name']}")
        return

    if args.remove:
        ok = remove_watcher(key, user)
        done = f"Stopped watching {key}" if not user else f"Removed watcher from {key}"
    else:
        ok = add_watcher(key, user)
        done = f"Watching {key}" if not user else f"Added watcher to {key}"

    if not ok:
        sys.exit(1)
    print(done)
    print(f"View at: https://{get_jira_site()}/browse/{key}")
