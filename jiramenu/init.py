"""Set up credentials."""

import argparse
import sys

from jiramenu.jira_client import (
    CREDENTIALS_FILE,
    get_jira_site,
    load_credentials,
    save_credentials,
)

TOKEN_URL = "https://id.atlassian.com/manage-profile/security/api-tokens"

CREDENTIALS_TEMPLATE = f"""# Jira credentials
# Get your API token from: {TOKEN_URL}

site = "your-company.atlassian.net"
email = "your-email@example.com"
api_token = "your-api-token"
"""

PLACEHOLDERS = {"your-company.atlassian.net", "your-email@example.com", "your-api-token"}


def check_credentials() -> bool:
    """Check if credentials are configured."""
    creds = load_credentials()
    values = [creds.get("site"), creds.get("email"), creds.get("api_token")]
    return all(values) and not any(v in PLACEHOLDERS for v in values)


def _print_instructions() -> None:
    print("Please edit this file with your Jira credentials:")
    print("  1. Set your Jira site (e.g., company.atlassian.net)")
    print("  2. Set your email address")
    print(f"  3. Add your API token from {TOKEN_URL}")


def setup_credentials() -> None:
    """Create or prompt to edit credentials file."""
    if CREDENTIALS_FILE.exists():
        print(f"Credentials file exists but is not configured: {CREDENTIALS_FILE}\n")
    else:
        CREDENTIALS_FILE.parent.mkdir(parents=True, exist_ok=True)
        CREDENTIALS_FILE.write_text(CREDENTIALS_TEMPLATE)
        CREDENTIALS_FILE.chmod(0o600)
        print(f"Created {CREDENTIALS_FILE}\n")

    _print_instructions()
    print("\nThen run 'jiramenu init' again.")


def init_command(args: argparse.Namespace) -> None:
    """Handle init subcommand."""
    site = getattr(args, "site", None)
    email = getattr(args, "email", None)
    token = getattr(args, "token", None)

    if site or email or token:
        if not (site and email and token):
            print("Error: --site, --email and --token must be given together", file=sys.stderr)
            sys.exit(1)
        save_credentials(site, email, token)
        print(f"Saved credentials to {CREDENTIALS_FILE}")
        return

    if check_credentials():
        print("Credentials configured.")
        print(f"  Site: {get_jira_site()}")
        print(f"  Credentials: {CREDENTIALS_FILE}")
    else:
        setup_credentials()
        sys.exit(1)
