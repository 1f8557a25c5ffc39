"""jiramenu CLI - Main entry point."""

import argparse
import sys

from jiramenu import __version__
from jiramenu.browse import browse_command
from jiramenu.comment import comment_command
from jiramenu.detail import show_command
from jiramenu.edit import edit_command
from jiramenu.init import init_command
from jiramenu.listing import list_command
from jiramenu.transition import bulk_transition_command, transition_command
from jiramenu.watch import watch_command
from jiramenu.worklog import worklog_command


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jiramenu",
        description="Interactive Jira client with context-sensitive action menus",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Init command
    init_parser = subparsers.add_parser(
        "init",
        help="Set up Jira credentials",
    )
    init_parser.add_argument(
        "-s",
        "--site",
        help="Jira site (e.g., company.atlassian.net)",
    )
    init_parser.add_argument(
        "-e",
        "--email",
        help="Account email address",
    )
    init_parser.add_argument(
        "-t",
        "--token",
        help="API token",
    )
    init_parser.set_defaults(func=init_command)

    # List and browse share their query arguments
    for name, func, help_text in (
        ("list", list_command, "List issues matching a JQL query"),
        ("browse", browse_command, "Browse issues interactively"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--jql",
            help="JQL query (default: [queries] default in jiramenu.toml, else my open issues)",
        )
        sub.add_argument(
            "-q",
            "--query",
            help="Named query from jiramenu.toml",
        )
        sub.set_defaults(func=func)

    # Show command
    show_parser = subparsers.add_parser(
        "show",
        help="Show an issue with its comments",
    )
    show_parser.add_argument(
        "key",
        help="Issue key (e.g., PROJ-123)",
    )
    show_parser.set_defaults(func=show_command)

    # Transition command
    transition_parser = subparsers.add_parser(
        "transition",
        help="Transition an issue to a new status",
    )
    transition_parser.add_argument(
        "key",
        help="Issue key (e.g., PROJ-123)",
    )
    transition_parser.add_argument(
        "status",
        nargs="?",
        help="Transition or target status (e.g., 'In Progress', 'Done')",
    )
    transition_parser.add_argument(
        "-l",
        "--list",
        action="store_true",
        help="List available transitions",
    )
    transition_parser.add_argument(
        "-r",
        "--resolution",
        help="Resolution for transitions that ask for one (e.g., 'Fixed')",
    )
    transition_parser.add_argument(
        "-c",
        "--comment",
        help="Comment to add with the transition (Markdown)",
    )
    transition_parser.set_defaults(func=transition_command)

    # Bulk transition command
    bulk_parser = subparsers.add_parser(
        "bulk-transition",
        help="Transition several issues at once",
    )
    bulk_parser.add_argument(
        "keys",
        nargs="*",
        help="Issue keys",
    )
    bulk_parser.add_argument(
        "--jql",
        help="Also transition issues matching this JQL query",
    )
    bulk_parser.add_argument(
        "-t",
        "--to",
        required=True,
        help="Transition or target status shared by all issues",
    )
    bulk_parser.add_argument(
        "--no-notify",
        action="store_true",
        help="Do not send notifications",
    )
    bulk_parser.set_defaults(func=bulk_transition_command)

    # Comment command
    comment_parser = subparsers.add_parser(
        "comment",
        help="Add or delete a comment",
    )
    comment_parser.add_argument(
        "key",
        help="Issue key (e.g., PROJ-123)",
    )
    comment_parser.add_argument(
        "body",
        nargs="?",
        help="Comment text in Markdown (use '-' to read from stdin)",
    )
    comment_parser.add_argument(
        "--plain",
        action="store_true",
        help="Send body as plain text instead of Markdown",
    )
    comment_parser.add_argument(
        "--delete",
        metavar="COMMENT_ID",
        help="Delete the comment with this ID",
    )
    comment_parser.set_defaults(func=comment_command)

    # Worklog command
    worklog_parser = subparsers.add_parser(
        "worklog",
        help="Log time spent on an issue",
    )
    worklog_parser.add_argument(
        "key",
        help="Issue key (e.g., PROJ-123)",
    )
    worklog_parser.add_argument(
        "time",
        help="Time spent (e.g., '1h 30m', '2d')",
    )
    worklog_parser.add_argument(
        "-c",
        "--comment",
        help="Work description (Markdown)",
    )
    worklog_parser.add_argument(
        "--started",
        help="Start time in ISO format (default: now)",
    )
    worklog_parser.set_defaults(func=worklog_command)

    # Watch command
    watch_parser = subparsers.add_parser(
        "watch",
        help="Watch or unwatch an issue",
    )
    watch_parser.add_argument(
        "key",
        help="Issue key (e.g., PROJ-123)",
    )
    watch_parser.add_argument(
        "-r",
        "--remove",
        action="store_true",
        help="Stop watching instead",
    )
    watch_parser.add_argument(
        "-u",
        "--user",
        metavar="ACCOUNT_ID",
        help="Account ID to add/remove (default: yourself)",
    )
    watch_parser.add_argument(
        "-l",
        "--list",
        action="store_true",
        help="List watchers",
    )
    watch_parser.set_defaults(func=watch_command)

    # Edit command
    edit_parser = subparsers.add_parser(
        "edit",
        help="Edit an issue's fields",
    )
    edit_parser.add_argument(
        "key",
        help="Issue key (e.g., PROJ-123)",
    )
    edit_parser.add_argument(
        "-t",
        "--title",
        help="New title/summary",
    )
    edit_parser.add_argument(
        "-d",
        "--description",
        help="New description in Markdown (use '-' to read from stdin)",
    )
    edit_parser.add_argument(
        "-F",
        "--field",
        action="append",
        metavar="NAME=VALUE",
        help="Set field value (repeatable). Custom fields looked up by name.",
    )
    edit_parser.add_argument(
        "--from",
        dest="from_file",
        metavar="FILE",
        help="Read fields from YAML file (use '-' for stdin)",
    )
    edit_parser.set_defaults(func=edit_command)

    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
