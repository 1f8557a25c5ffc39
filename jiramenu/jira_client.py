"""Jira client wrapper using the jira library."""

import json
import sys
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable

import requests
from jira import JIRA

from jiramenu.config import load_project_config

CONFIG_DIR = Path.home() / ".config" / "jiramenu"
CREDENTIALS_FILE = CONFIG_DIR / "credentials.toml"

# Injected client for tests; see set_jira()
_jira_client: JIRA | None = None


def get_server_from_config() -> str | None:
    """Get Jira server URL from credentials or jiramenu.toml."""
    creds = load_credentials()
    site = creds.get("site")

    if not site:
        config = load_project_config()
        site = config.get("project", {}).get("site")

    if site:
        if not site.startswith(("https://", "http://")):
            site = f"https://{site}"
        return site.rstrip("/")
    return None


def load_credentials() -> dict:
    """Load credentials from ~/.config/jiramenu/credentials.toml."""
    if not CREDENTIALS_FILE.exists():
        return {}

    with open(CREDENTIALS_FILE, "rb") as f:
        return tomllib.load(f)


def save_credentials(site: str, email: str, api_token: str) -> None:
    """Save credentials to ~/.config/jiramenu/credentials.toml."""
    CREDENTIALS_FILE.parent.mkdir(parents=True, exist_ok=True)

    content = f'site = "{site}"\nemail = "{email}"\napi_token = "{api_token}"\n'
    CREDENTIALS_FILE.write_text(content)
    CREDENTIALS_FILE.chmod(0o600)


def get_credentials() -> tuple[str, str, str]:
    """Get Jira credentials from config files.

    Returns:
        Tuple of (server_url, email, api_token)
    """
    server = get_server_from_config()
    creds = load_credentials()
    email = creds.get("email")
    token = creds.get("api_token")

    if not server or not email or not token:
        print(f"Error: Credentials not configured in {CREDENTIALS_FILE}", file=sys.stderr)
        print("\nRun 'jiramenu init' to set up credentials.", file=sys.stderr)
        sys.exit(1)

    return server, email, token


@lru_cache(maxsize=1)
def _connect() -> JIRA:
    server, email, token = get_credentials()
    return JIRA(server=server, basic_auth=(email, token))


def get_jira() -> JIRA:
    """Get the JIRA client, preferring an injected one.

    Returns:
        Authenticated JIRA client
    """
    if _jira_client is not None:
        return _jira_client
    return _connect()


def set_jira(client: JIRA | None) -> None:
    """Inject a JIRA client (used by tests). None clears the injection."""
    global _jira_client
    _jira_client = client


def reset_jira() -> None:
    """Clear any injected JIRA client."""
    set_jira(None)


def get_jira_site() -> str:
    """Get Jira site name (without scheme)."""
    creds = load_credentials()
    site = creds.get("site", "")

    if not site:
        config = load_project_config()
        site = config.get("project", {}).get("site", "")

    return site.replace("https://", "").replace("http://", "").rstrip("/")


def api_url(path: str, api_version: str = "3") -> str:
    """Build an absolute REST API URL for the connected server."""
    jira = get_jira()
    return f'{jira._options["server"]}/rest/api/{api_version}/{path.lstrip("/")}'


def describe_error(error: Exception) -> list[str]:
    """Flatten a Jira error response into printable messages.

    Jira returns {"errorMessages": [...], "errors": {field: message}};
    anything else falls back to str(error).
    """
    response = getattr(error, "response", None)
    text = getattr(response, "text", None)
    if not isinstance(text, str) or not text:
        return [str(error)]

    try:
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return [str(error)]
    if not isinstance(data, dict):
        return [str(error)]

    messages = list(data.get("errorMessages", []))
    for field, msg in data.get("errors", {}).items():
        messages.append(f"{field}: {msg}")
    return messages or [str(error)]


def request(
    method: str,
    path: str,
    payload: Any = None,
    *,
    api_version: str = "3",
    params: dict | None = None,
    action: str | None = None,
    on_success: Callable[[Any], None] | None = None,
    on_error: Callable[[Exception], None] | None = None,
) -> bool:
    """Send a REST call and run a callback on completion.

    Args:
        method: HTTP method (GET, POST, PUT, DELETE)
        path: Path below /rest/api/<version>/ (e.g., "issue/PROJ-1/comment")
        payload: JSON-serializable body, or None for no body
        api_version: REST API version, "2" or "3"
        params: Query string parameters
        action: What the call does, used in error messages
        on_success: Called with the decoded JSON body (None when empty)
        on_error: Called with the exception after the error is printed

    Returns:
        True if the server accepted the call, False otherwise
    """
    jira = get_jira()
    url = api_url(path, api_version)
    data = json.dumps(payload) if payload is not None else None

    try:
        resp = jira._session.request(
            method,
            url,
            data=data,
            params=params,
            headers={"Content-Type": "application/json"},
        )
        resp.raise_for_status()
    except Exception as e:
        prefix = f"Error {action}" if action else "Error"
        for msg in describe_error(e):
            print(f"{prefix}: {msg}", file=sys.stderr)
        if on_error:
            on_error(e)
        return False

    if on_success:
        body = None
        if resp.status_code != requests.codes.no_content and resp.content:
            try:
                body = resp.json()
            except ValueError:
                body = None
        on_success(body)
    return True
