"""Edit Jira issue fields."""

import argparse
import json
import sys
from typing import Any, Callable

import yaml

from jiramenu.adf import markdown_to_adf
from jiramenu.jira_client import get_jira, get_jira_site, request
from jiramenu.types import UserChoice

# Standard field name mappings
STANDARD_FIELDS = {
    "summary": "summary",
    "title": "summary",
    "description": "description",
    "priority": "priority",
    "assignee": "assignee",
    "labels": "labels",
    "components": "components",
}

UNASSIGNED = {"", "none", "unassigned", "-"}


def read_input(value: str) -> str:
    """Read value, supporting stdin with '-'."""
    if value == "-":
        return sys.stdin.read()
    return value


def _split(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    return [v.strip() for v in str(value).split(",") if v.strip()]


def _format_assignee(value: Any) -> dict | None:
    """Assignee as {"accountId": ...}; empty or 'none' unassigns."""
    if isinstance(value, dict):
        return value
    if value is None or str(value).strip().lower() in UNASSIGNED:
        return None
    return {"accountId": str(value).strip()}


def find_field(name: str) -> dict | None:
    """Look up a field definition by name or ID (case-insensitive)."""
    jira = get_jira()
    try:
        fields = jira.fields()
    except Exception:
        return None
    name_lower = name.lower()
    for f in fields:
        if f.get("id", "").lower() == name_lower or f.get("name", "").lower() == name_lower:
            return f
    return None


def format_field_value(field: dict | None, value: Any) -> Any:
    """Format value based on field type.

    Wraps option/select field values in {"value": ...} format.
    """
    if isinstance(value, (dict, list)) or field is None:
        return value

    schema = field.get("schema", {})
    field_type = schema.get("type")
    if field_type == "option":
        return {"value": value}
    if field_type == "array" and schema.get("items") == "option":
        return [{"value": v} for v in _split(value)]
    if field_type == "array" and schema.get("items") == "string":
        return _split(value)
    if field_type == "number" and isinstance(value, str):
        return _parse_number(value)
    return value


def _parse_number(value: str) -> int | float | str:
    try:
        return int(value)
    except ValueError:
        try:
            return float(value)
        except ValueError:
            return value


def map_field(name: str, value: Any) -> tuple[str, Any]:
    """Map a field name to Jira field ID and format value.

    Returns:
        Tuple of (field_id, formatted_value)
    """
    name_lower = name.lower()

    if name_lower in STANDARD_FIELDS:
        field_id = STANDARD_FIELDS[name_lower]
        if field_id == "description":
            return field_id, markdown_to_adf(str(value or ""))
        if field_id == "priority":
            return field_id, value if isinstance(value, dict) else {"name": value}
        if field_id == "assignee":
            return field_id, _format_assignee(value)
        if field_id == "labels":
            return field_id, _split(value)
        if field_id == "components":
            return field_id, [{"name": c} for c in _split(value)]
        return field_id, value

    field = find_field(name)
    if field:
        return field["id"], format_field_value(field, value)

    # Fall back to using name as-is (might be a field ID)
    return name, value


def parse_field_args(field_args: list[str]) -> dict:
    """Parse --field arguments into a fields dict.

    Args:
        field_args: List of "Name=value" strings

    Returns:
        Dict of field_id -> value
    """
    fields = {}
    for arg in field_args:
        if "=" not in arg:
            print(f"Warning: Invalid field format '{arg}', expected 'Name=value'", file=sys.stderr)
            continue
        name, value = arg.split("=", 1)
        field_id, formatted_value = map_field(name.strip(), value.strip())
        fields[field_id] = formatted_value
    return fields


def parse_yaml_fields(content: str) -> dict:
    """Parse YAML content into a fields dict.

    Args:
        content: YAML string with field: value pairs

    Returns:
        Dict of field_id -> value
    """
    data = yaml.safe_load(content)
    if not isinstance(data, dict):
        return {}

    fields = {}
    for name, value in data.items():
        field_id, formatted_value = map_field(str(name), value)
        fields[field_id] = formatted_value
    return fields


def build_update_payload(fields: dict) -> dict:
    """Build the body for PUT issue/{key}."""
    return {"fields": dict(fields)}


def get_allowed_values(key: str, field_ids: list[str]) -> dict[str, list[str]]:
    """Get allowed values for fields from the issue's edit metadata.

    Returns:
        Dict of field_id -> list of allowed value strings
    """
    jira = get_jira()
    result = {}
    try:
        meta = jira._get_json(f"issue/{key}/editmeta")
    except Exception:
        return result

    for fid in field_ids:
        allowed = meta.get("fields", {}).get(fid, {}).get("allowedValues", [])
        if allowed:
            result[fid] = [v.get("value", v.get("name", "?")) for v in allowed]
    return result


def _print_allowed_values(allowed: dict[str, list[str]]) -> None:
    for fid, values in allowed.items():
        print(f"\nAllowed values for {fid}:", file=sys.stderr)
        for v in values[:20]:
            print(f"  - {v}", file=sys.stderr)
        if len(values) > 20:
            print(f"  ... and {len(values) - 20} more", file=sys.stderr)


def _show_allowed_values(key: str, error: Exception) -> None:
    """After a failed update, list allowed values for rejected fields."""
    response = getattr(error, "response", None)
    text = getattr(response, "text", None)
    if not isinstance(text, str):
        return
    try:
        failed = list(json.loads(text).get("errors", {}).keys())
    except (json.JSONDecodeError, ValueError, AttributeError):
        return
    if failed:
        _print_allowed_values(get_allowed_values(key, failed))


def update_issue(key: str, fields: dict, on_success: Callable[[], None] | None = None) -> bool:
    """Update an issue's fields.

    Args:
        key: Issue key (e.g., PROJ-123)
        fields: Dict of field_id -> formatted value

    Returns:
        True if successful, False otherwise
    """
    if not fields:
        return True

    return request(
        "PUT",
        f"issue/{key}",
        build_update_payload(fields),
        action=f"updating {key}",
        on_success=(lambda _body: on_success()) if on_success else None,
        on_error=lambda e: _show_allowed_values(key, e),
    )


def get_assignable_users(key: str, query: str = "") -> list[UserChoice]:
    """Get users that can be assigned to an issue.

    Calls user/assignable/search directly: the endpoint lists every
    assignable user when no query is given, while the client wrapper
    refuses to search without one.
    """
    jira = get_jira()
    params: dict[str, Any] = {"issueKey": key, "maxResults": 50}
    if query:
        params["query"] = query
    try:
        users = jira._get_json("user/assignable/search", params=params)
    except Exception as e:
        print(f"Error getting assignable users for {key}: {e}", file=sys.stderr)
        return []
    return [
        {"account_id": u["accountId"], "display_name": u.get("displayName") or u["accountId"]}
        for u in users or []
    ]


def get_priorities() -> list[str]:
    """Get priority names defined on the server."""
    jira = get_jira()
    try:
        return [p.name for p in jira.priorities()]
    except Exception as e:
        print(f"Error getting priorities: {e}", file=sys.stderr)
        return []


def edit_command(args: argparse.Namespace) -> None:
    """Handle edit subcommand."""
    key = args.key.upper()
    fields = {}

    if args.title:
        fields["summary"] = args.title
    if args.description:
        fields["description"] = markdown_to_adf(read_input(args.description))

    field_args = getattr(args, "field", None) or []
    if field_args:
        fields.update(parse_field_args(field_args))

    from_input = getattr(args, "from_file", None)
    if from_input:
        if from_input == "-":
            content = sys.stdin.read()
        else:
            try:
                with open(from_input) as f:
                    content = f.read()
            except OSError as e:
                print(f"Error: Cannot read {from_input}: {e}", file=sys.stderr)
                sys.exit(1)
        fields.update(parse_yaml_fields(content))

    if not fields:
        print("Error: No fields to update. Use --title, --description, --field, or --from", file=sys.stderr)
        sys.exit(1)

    if update_issue(key, fields):
        print(f"Updated {key}")
        print(f"View at: https://{get_jira_site()}/browse/{key}")
    else:
        sys.exit(1)
