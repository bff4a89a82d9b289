"""Interactive prompts for secret values missing from the command line.

Secrets are asked for with hidden input instead of being required as
flags, so they do not end up in shell history or process listings.
"""

import sys

import questionary
from questionary import Style

PROMPT_STYLE = Style(
    [
        ("qmark", "fg:#af87ff bold"),
        ("question", "bold"),
        ("answer", "fg:#ff87d7 bold"),
        ("instruction", "fg:#6c6c6c italic"),
    ]
)
QMARK = "? "


def can_prompt() -> bool:
    """Return True when stdin is attached to a terminal."""
    return sys.stdin.isatty()


def prompt_secret(label: str) -> str:
    """Ask for a secret value with hidden input.

    Args:
        label: Human readable name of the value (e.g. ``registry password``).

    Returns:
        The value typed by the user.

    """
    return questionary.password(f"Provide {label}", style=PROMPT_STYLE, qmark=QMARK).unsafe_ask()


def confirm_delete(name: str) -> bool:
    """Ask the user to confirm deleting a credential."""
    return questionary.confirm(
        f"Delete credential '{name}'?",
        default=False,
        style=PROMPT_STYLE,
        qmark=QMARK,
    ).unsafe_ask()
