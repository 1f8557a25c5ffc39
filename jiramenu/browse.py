"""Interactive browsing session."""

import argparse
import re
import sys

from jiramenu.actions import bulk_menu, issue_menu
from jiramenu.listing import refresh_listing, resolve_jql
from jiramenu.menu import Reader
from jiramenu.scheduler import get_loop

ISSUE_KEY_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*-\d+$")

HELP = """\
Commands:
  KEY           Actions for an issue (e.g., PROJ-123)
  m KEY...      Mark/unmark issues for bulk transition
  u             Unmark all
  b             Bulk transition marked issues
  r             Refresh listing
  ?             This help
  q             Quit"""


def toggle_marks(marked: list[str], keys: list[str]) -> None:
    """Mark unmarked keys and unmark marked ones, keeping order."""
    for key in keys:
        key = key.upper()
        if not ISSUE_KEY_RE.match(key):
            print(f"Not an issue key: {key}", file=sys.stderr)
        elif key in marked:
            marked.remove(key)
        else:
            marked.append(key)


def run_session(jql: str, read: Reader = input) -> None:
    """List issues for jql and dispatch commands until the user quits.

    Callbacks scheduled on the event loop (e.g., the refresh after a bulk
    transition) are waited for and run before the next prompt is shown.
    """
    loop = get_loop()
    marked: list[str] = []

    refresh_listing(jql)
    print(f"\n{HELP}")

    while True:
        if loop.pending():
            loop.run()
        prompt = f"jira [{len(marked)} marked]> " if marked else "jira> "
        try:
            line = read(prompt).strip()
        except EOFError:
            break
        if not line:
            continue

        cmd, *rest = line.split()
        if cmd == "q":
            break
        if cmd == "?":
            print(HELP)
        elif cmd == "r":
            refresh_listing(jql)
        elif cmd == "m":
            toggle_marks(marked, rest)
            print(f"Marked: {', '.join(marked) if marked else 'none'}")
        elif cmd == "u":
            marked.clear()
            print("Marked: none")
        elif cmd == "b":
            if not marked:
                print("Nothing marked. Use 'm KEY...' first", file=sys.stderr)
                continue
            if bulk_menu(list(marked), jql).run(read):
                marked.clear()
        elif ISSUE_KEY_RE.match(cmd):
            issue_menu(cmd, read).run(read)
        else:
            print(f"Unknown command: {cmd} (? for help)", file=sys.stderr)


def browse_command(args: argparse.Namespace) -> None:
    """Handle browse subcommand."""
    run_session(resolve_jql(args))
