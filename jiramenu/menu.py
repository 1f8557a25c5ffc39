"""Transient action menus.

A menu shows a set of arguments (values the user sets before acting) and
actions (what to do with them). Argument choices can be computed when the
argument is set, so options always reflect current server state.
"""

import sys
from dataclasses import dataclass, field
from typing import Any, Callable

Reader = Callable[[str], str]


@dataclass
class Choice:
    label: str
    value: Any


ChoiceSource = list[Choice] | Callable[[], list[Choice]]


@dataclass
class Argument:
    """A value collected by a menu before an action runs.

    Args:
        key: Key the user types to set the argument (e.g., "-r")
        name: Name the value is passed to actions under
        label: Description shown in the menu
        choices: Fixed choices, or a callable returning them on demand
        default: Initial value
        parse: Converter for free-text input; raises ValueError if invalid
        switch: Boolean toggled by its key instead of prompting
        multiline: Read lines until a line with a single "."
    """

    key: str
    name: str
    label: str
    choices: ChoiceSource | None = None
    default: Any = None
    parse: Callable[[str], Any] | None = None
    switch: bool = False
    multiline: bool = False


@dataclass
class Action:
    key: str
    label: str
    handler: Callable[[dict], Any]
    requires: list[str] = field(default_factory=list)


def _print_choices(prompt: str, choices: list[Choice]) -> None:
    print(f"{prompt}:")
    width = len(str(len(choices)))
    for i, c in enumerate(choices, 1):
        print(f"  {i:>{width}}. {c.label}")


def _match_choice(token: str, choices: list[Choice]) -> Choice | None:
    if token.isdigit():
        index = int(token) - 1
        if 0 <= index < len(choices):
            return choices[index]
        return None
    token_lower = token.lower()
    for c in choices:
        if c.label.lower() == token_lower:
            return c
    return None


def pick(prompt: str, choices: list[Choice], read: Reader = input) -> Any:
    """Let the user pick one choice by number or label.

    Returns:
        The chosen value, or None if input was empty or invalid
    """
    if not choices:
        print(f"No options for {prompt.lower()}", file=sys.stderr)
        return None
    _print_choices(prompt, choices)
    answer = read("> ").strip()
    if not answer:
        return None
    match = _match_choice(answer, choices)
    if match is None:
        print(f"Invalid choice: {answer}", file=sys.stderr)
        return None
    return match.value


def pick_many(prompt: str, choices: list[Choice], read: Reader = input) -> list:
    """Let the user pick several choices (comma or space separated numbers)."""
    if not choices:
        print(f"No options for {prompt.lower()}", file=sys.stderr)
        return []
    _print_choices(prompt, choices)
    answer = read("> ").replace(",", " ").split()
    picked = []
    for token in answer:
        match = _match_choice(token, choices)
        if match is None:
            print(f"Invalid choice: {token}", file=sys.stderr)
            continue
        if match.value not in picked:
            picked.append(match.value)
    return picked


def read_multiline(prompt: str, read: Reader = input) -> str:
    """Read lines until a line containing only "." (or end of input)."""
    print(f"{prompt} (end with a line containing only '.'):")
    lines = []
    while True:
        try:
            line = read("")
        except EOFError:
            break
        if line.strip() == ".":
            break
        lines.append(line)
    return "\n".join(lines).strip()


class Menu:
    """A transient menu: set arguments, then run exactly one action."""

    QUIT_KEY = "q"
    # Typed as a free-text value, unsets the argument instead of restoring its default
    CLEAR = "-"

    def __init__(self, title: str, arguments: list[Argument] | None = None, actions: list[Action] | None = None):
        self.title = title
        self.arguments = arguments or []
        self.actions = actions or []
        self.values: dict[str, Any] = {}
        self._labels: dict[str, str] = {}
        self.reset()

    def reset(self) -> None:
        self.values = {a.name: a.default for a in self.arguments}
        self._labels = {}

    def _display(self, arg: Argument) -> str:
        value = self.values.get(arg.name)
        if arg.switch:
            return "on" if value else "off"
        if value is None or value == "":
            return "unset"
        return self._labels.get(arg.name, str(value))

    def render(self) -> str:
        lines = [self.title, ""]
        if self.arguments:
            lines.append("Arguments")
            for a in self.arguments:
                lines.append(f"  {a.key:<3} {a.label} ({self._display(a)})")
            lines.append("")
        lines.append("Actions")
        for a in self.actions:
            lines.append(f"  {a.key:<3} {a.label}")
        lines.append(f"  {self.QUIT_KEY:<3} Quit")
        return "\n".join(lines)

    def set_argument(self, arg: Argument, read: Reader = input) -> None:
        """Prompt for an argument value and store it."""
        if arg.switch:
            self.values[arg.name] = not self.values.get(arg.name)
            return

        if arg.choices is not None:
            choices = arg.choices() if callable(arg.choices) else arg.choices
            value = pick(arg.label, choices, read)
            if value is not None:
                self.values[arg.name] = value
                label = next((c.label for c in choices if c.value == value), None)
                if label:
                    self._labels[arg.name] = label
            return

        if arg.multiline:
            raw = read_multiline(arg.label, read)
        else:
            raw = read(f"{arg.label}: ").strip()
        if not raw:
            self.values[arg.name] = arg.default
            self._labels.pop(arg.name, None)
            return
        if raw == self.CLEAR:
            self.values[arg.name] = None
            self._labels.pop(arg.name, None)
            return
        if arg.parse:
            try:
                self.values[arg.name] = arg.parse(raw)
            except ValueError as e:
                print(f"Invalid {arg.label.lower()}: {e}", file=sys.stderr)
                return
        else:
            self.values[arg.name] = raw
        self._labels.pop(arg.name, None)

    def run(self, read: Reader = input) -> Any:
        """Show the menu until an action runs or the user quits.

        Returns:
            The action handler's return value, or None if the user quit
        """
        by_key = {a.key: a for a in self.arguments}
        actions = {a.key: a for a in self.actions}

        while True:
            print(self.render())
            try:
                answer = read("> ").strip()
            except EOFError:
                return None
            if not answer:
                continue
            if answer == self.QUIT_KEY:
                return None
            if answer in by_key:
                self.set_argument(by_key[answer], read)
                continue
            if answer in actions:
                action = actions[answer]
                missing = [
                    a.label for a in self.arguments
                    if a.name in action.requires and self.values.get(a.name) in (None, "", [])
                ]
                if missing:
                    print(f"Set {', '.join(missing)} first", file=sys.stderr)
                    continue
                return action.handler(dict(self.values))
            print(f"Unknown key: {answer}", file=sys.stderr)
