"""jiramenu - interactive Jira client with context-sensitive action menus."""

from importlib.metadata import version
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from jira import JIRA

__version__ = version("jiramenu")


def client() -> "JIRA":
    """Get an authenticated Jira client.

    Returns an authenticated jira.JIRA instance using credentials
    from ~/.config/jiramenu/credentials.toml.

    Usage:
        import jiramenu
        jira = jiramenu.client()
        issue = jira.issue("FOO-123")

    Returns:
        jira.JIRA: Authenticated Jira client
    """
    from jiramenu.jira_client import get_jira

    return get_jira()


def issue_cache():
    """Get the shared issue cache.

    Usage:
        import jiramenu
        cache = jiramenu.issue_cache()
        print(cache.summary("FOO-123"))

    Returns:
        IssueCache populated by listings and detail views.
    """
    from jiramenu.cache import ISSUE_CACHE

    return ISSUE_CACHE
