"""Context-sensitive action menus for issues.

Menu options come from the server at the moment a menu is built or an
argument is set: transitions, resolutions, priorities, assignable users,
comments. Successful changes refresh the issue's cache entry.
"""

import sys
import webbrowser

from jiramenu.cache import ISSUE_CACHE, default_comment_text
from jiramenu.comment import add_comment, delete_comment, list_comments
from jiramenu.detail import format_issue_detail, get_issue_detail, refresh_issue
from jiramenu.edit import get_assignable_users, get_priorities, update_issue
from jiramenu.jira_client import get_jira_site
from jiramenu.listing import refresh_listing
from jiramenu.menu import Action, Argument, Choice, Menu, Reader, pick
from jiramenu.transition import (
    bulk_transition,
    common_transitions,
    get_resolutions,
    get_transitions,
    transition_issue,
)
from jiramenu.watch import add_watcher, remove_watcher
from jiramenu.worklog import add_worklog, parse_started, parse_time_spent


def issue_title(key: str) -> str:
    entry = ISSUE_CACHE.get(key)
    if not entry:
        return key
    status = f" [{entry.status}]" if entry.status else ""
    return f"{key}{status} {entry.summary}"


def _changed(key: str, message: str) -> bool:
    refresh_issue(key)
    print(message)
    return True


def resolution_choices() -> list[Choice]:
    return [Choice(name, name) for name in get_resolutions()]


def transition_menu(key: str) -> Menu:
    """Menu with one action per transition currently valid for the issue."""
    actions = []
    for i, t in enumerate(get_transitions(key), 1):
        label = t["name"] if t["name"] == t["to"] else f"{t['name']} → {t['to']}"

        def handler(values, t=t):
            ok = transition_issue(
                key,
                t["id"],
                resolution=values.get("resolution") if t["resolution"] else None,
                comment=values.get("comment"),
            )
            return ok and _changed(key, f"Transitioned {key} to {t['to'] or t['name']}")

        actions.append(Action(
            key=str(i),
            label=label,
            handler=handler,
            requires=["resolution"] if t["resolution"] else [],
        ))

    return Menu(
        f"Transition {issue_title(key)}",
        arguments=[
            Argument("-r", "resolution", "Resolution", choices=resolution_choices),
            Argument("-c", "comment", "Comment", multiline=True),
        ],
        actions=actions,
    )


def comment_menu(key: str) -> Menu:
    def handler(values):
        ok = add_comment(key, values["body"], markdown=not values.get("plain"))
        return ok and _changed(key, f"Comment added to {key}")

    return Menu(
        f"Comment on {issue_title(key)}",
        arguments=[
            Argument("-b", "body", "Body", multiline=True),
            Argument("-p", "plain", "Plain text (no Markdown)", switch=True, default=False),
        ],
        actions=[Action("c", "Add comment", handler, requires=["body"])],
    )


def delete_comment_action(key: str, read: Reader = input) -> bool:
    comments = list_comments(key)
    choices = [
        Choice(f"{c['author']} {c['created'][:10]}: {c['body'][:60].replace(chr(10), ' ')}", c["id"])
        for c in comments
    ]
    comment_id = pick("Delete comment", choices, read)
    if not comment_id:
        return False
    return delete_comment(key, comment_id) and _changed(key, f"Deleted comment {comment_id} from {key}")


def worklog_menu(key: str) -> Menu:
    def handler(values):
        ok = add_worklog(
            key,
            values["time_spent"],
            comment=values.get("comment"),
            started=values.get("started"),
        )
        return ok and _changed(key, f"Logged {values['time_spent']} on {key}")

    return Menu(
        f"Log work on {issue_title(key)}",
        arguments=[
            Argument("-t", "time_spent", "Time spent", parse=parse_time_spent),
            Argument("-s", "started", "Started (ISO, default now)", parse=parse_started),
            Argument("-c", "comment", "Description", default=default_comment_text(key), multiline=True),
        ],
        actions=[Action("w", "Log work", handler, requires=["time_spent"])],
    )


def assign_action(key: str, read: Reader = input) -> bool:
    users = get_assignable_users(key)
    choices = [Choice("Unassigned", "")] + [Choice(u["display_name"], u["account_id"]) for u in users]
    account_id = pick("Assignee", choices, read)
    if account_id is None:
        return False
    assignee = {"accountId": account_id} if account_id else None
    label = next(c.label for c in choices if c.value == account_id)
    return update_issue(key, {"assignee": assignee}) and _changed(key, f"Assigned {key} to {label}")


def priority_action(key: str, read: Reader = input) -> bool:
    name = pick("Priority", [Choice(p, p) for p in get_priorities()], read)
    if not name:
        return False
    return update_issue(key, {"priority": {"name": name}}) and _changed(key, f"Set priority of {key} to {name}")


def summary_action(key: str, read: Reader = input) -> bool:
    current = ISSUE_CACHE.summary(key)
    if current:
        print(f"Current: {current}")
    summary = read("New summary: ").strip()
    if not summary:
        return False
    return update_issue(key, {"summary": summary}) and _changed(key, f"Updated summary of {key}")


def labels_action(key: str, read: Reader = input) -> bool:
    answer = read("Labels (comma separated, empty clears): ")
    labels = [label.strip() for label in answer.split(",") if label.strip()]
    return update_issue(key, {"labels": labels}) and _changed(key, f"Updated labels of {key}")


def watch_action(key: str, remove: bool = False) -> bool:
    if remove:
        return remove_watcher(key) and _changed(key, f"Stopped watching {key}")
    return add_watcher(key) and _changed(key, f"Watching {key}")


def show_action(key: str) -> bool:
    detail = get_issue_detail(key)
    if not detail:
        return False
    print(format_issue_detail(detail))
    return True


def open_action(key: str) -> bool:
    url = f"https://{get_jira_site()}/browse/{key}"
    print(f"Opening {url}")
    return webbrowser.open(url)


def issue_menu(key: str, read: Reader = input) -> Menu:
    """Top-level menu of actions for one issue."""
    key = key.upper()
    return Menu(
        issue_title(key),
        actions=[
            Action("t", "Transition", lambda v: transition_menu(key).run(read)),
            Action("c", "Comment", lambda v: comment_menu(key).run(read)),
            Action("d", "Delete comment", lambda v: delete_comment_action(key, read)),
            Action("w", "Log work", lambda v: worklog_menu(key).run(read)),
            Action("a", "Assign", lambda v: assign_action(key, read)),
            Action("p", "Priority", lambda v: priority_action(key, read)),
            Action("s", "Summary", lambda v: summary_action(key, read)),
            Action("l", "Labels", lambda v: labels_action(key, read)),
            Action("+", "Watch", lambda v: watch_action(key)),
            Action("-", "Unwatch", lambda v: watch_action(key, remove=True)),
            Action("v", "View details", lambda v: show_action(key)),
            Action("o", "Open in browser", lambda v: open_action(key)),
        ],
    )


def bulk_menu(keys: list[str], jql: str) -> Menu:
    """Menu of transitions shared by all marked issues.

    The listing for jql is refreshed after the bulk refresh delay.
    """
    actions = []
    for i, option in enumerate(common_transitions(keys), 1):
        def handler(values, option=option):
            task_id = bulk_transition(
                option["inputs"],
                notify=values.get("notify", True),
                on_refresh=lambda: refresh_listing(jql),
            )
            if task_id is None:
                return False
            print(f"Bulk transition of {len(keys)} issue(s) submitted (task {task_id or '?'})")
            return True

        actions.append(Action(str(i), f"{option['name']} → {option['to']}", handler))

    if not actions:
        print("No transition is available for all marked issues", file=sys.stderr)

    return Menu(
        f"Bulk transition {len(keys)} issue(s): {', '.join(keys)}",
        arguments=[Argument("-n", "notify", "Send notifications", switch=True, default=True)],
        actions=actions,
    )
