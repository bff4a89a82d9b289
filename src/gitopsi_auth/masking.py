"""Helpers for displaying secret values safely."""

_VISIBLE_CHARS = 4


def mask_credential(value: str) -> str:
    """Return a masked version of a secret value for display.

    Values of eight characters or fewer are fully masked. Longer values
    keep their first and last four characters. The result always has the
    same length as the input.

    Args:
        value: The secret value to mask.

    Returns:
        The masked value.

    """
    if len(value) <= 2 * _VISIBLE_CHARS:
        return "*" * len(value)
    hidden = len(value) - 2 * _VISIBLE_CHARS
    return f"{value[:_VISIBLE_CHARS]}{'*' * hidden}{value[-_VISIBLE_CHARS:]}"
