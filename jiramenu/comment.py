"""Add, list and delete comments on Jira issues."""

import argparse
import sys
from typing import Callable

from jiramenu.adf import markdown_to_adf, text_to_adf
from jiramenu.detail import parse_comment
from jiramenu.jira_client import get_jira_site, request
from jiramenu.types import CommentInfo


def read_body(body: str) -> str:
    """Read comment body, supporting stdin with '-'."""
    if body == "-":
        return sys.stdin.read()
    return body


def build_comment_payload(body: str, markdown: bool = True) -> dict:
    """Build the body for POST issue/{key}/comment.

    Args:
        body: Comment text
        markdown: Treat body as Markdown; otherwise as plain text
    """
    doc = markdown_to_adf(body) if markdown else text_to_adf(body)
    return {"body": doc}


def add_comment(
    key: str,
    body: str,
    markdown: bool = True,
    on_success: Callable[[dict], None] | None = None,
) -> bool:
    """Add a comment to a Jira issue.

    Args:
        key: Issue key (e.g., PROJ-123)
        body: Comment text
        markdown: Convert Markdown formatting to rich text
        on_success: Called with the created comment

    Returns:
        True if successful, False otherwise
    """
    return request(
        "POST",
        f"issue/{key}/comment",
        build_comment_payload(body, markdown),
        action=f"adding comment to {key}",
        on_success=(lambda created: on_success(created or {})) if on_success else None,
    )


def delete_comment(key: str, comment_id: str, on_success: Callable[[], None] | None = None) -> bool:
    """Delete a comment from a Jira issue."""
    return request(
        "DELETE",
        f"issue/{key}/comment/{comment_id}",
        action=f"deleting comment {comment_id} on {key}",
        on_success=(lambda _body: on_success()) if on_success else None,
    )


def list_comments(key: str) -> list[CommentInfo]:
    """Fetch an issue's comments, oldest first."""
    comments: list[CommentInfo] = []

    def on_success(data):
        comments.extend(parse_comment(c) for c in (data or {}).get("comments", []))

    request(
        "GET",
        f"issue/{key}/comment",
        params={"orderBy": "created"},
        action=f"fetching comments for {key}",
        on_success=on_success,
    )
    return comments


def comment_command(args: argparse.Namespace) -> None:
    """Handle comment subcommand."""
    key = args.key.upper()
    jira_site = get_jira_site()

    delete_id = getattr(args, "delete", None)
    if delete_id:
        if delete_comment(key, delete_id):
            print(f"Deleted comment {delete_id} from {key}")
            print(f"View at: https://{jira_site}/browse/{key}")
            return
        sys.exit(1)

    if not args.body:
        print("Error: Comment body is required", file=sys.stderr)
        sys.exit(1)

    body = read_body(args.body)
    if not body.strip():
        print("Error: Comment body cannot be empty", file=sys.stderr)
        sys.exit(1)

    print(f"Adding comment to {key}...")
    if add_comment(key, body, markdown=not getattr(args, "plain", False)):
        print(f"Comment added to {key}")
        print(f"View at: https://{jira_site}/browse/{key}")
    else:
        sys.exit(1)
