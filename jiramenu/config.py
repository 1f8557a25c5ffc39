"""jiramenu configuration."""

import tomllib
from pathlib import Path

PROJECT_FILE = "jiramenu.toml"

# Seconds to wait before refreshing after a bulk transition; the server
# applies bulk transitions asynchronously.
BULK_REFRESH_DELAY = 1.5

DEFAULT_JQL = (
    "assignee = currentUser() "
    "AND statusCategory != Done "
    "ORDER BY updated DESC"
)


def find_project_root() -> Path | None:
    """Search up the directory tree for jiramenu.toml."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        if (parent / PROJECT_FILE).exists():
            return parent
    return None


def load_project_config() -> dict:
    """Load jiramenu.toml if it exists."""
    root = find_project_root()
    if not root:
        return {}
    with open(root / PROJECT_FILE, "rb") as f:
        return tomllib.load(f)


def get_query(name: str) -> str | None:
    """Get a named query from jiramenu.toml."""
    config = load_project_config()
    return config.get("queries", {}).get(name)


def get_default_jql() -> str:
    """Get the JQL used when list/browse get no query."""
    return get_query("default") or DEFAULT_JQL


def get_refresh_delay() -> float:
    """Get the bulk transition refresh delay in seconds."""
    config = load_project_config()
    value = config.get("ui", {}).get("refresh_delay")
    if isinstance(value, (int, float)) and value >= 0:
        return float(value)
    return BULK_REFRESH_DELAY
