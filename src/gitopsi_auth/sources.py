"""Loading credential material from files and the environment."""

import os
from pathlib import Path

from icecream import ic

from gitopsi_auth.exceptions import StorageIOError


def read_text_file(path: str | Path, what: str = "file") -> str:
    """Read credential material (a key or certificate) from a file.

    Args:
        path: Path to the file; ``~`` is expanded.
        what: Description of the file used in error messages.

    Returns:
        The file contents.

    Raises:
        StorageIOError: If the file does not exist or cannot be read.

    """
    file_path = Path(path).expanduser().resolve()
    ic(file_path)
    try:
        return file_path.read_text()
    except OSError as err:
        raise StorageIOError(f"Failed to read {what} '{file_path}': {err.strerror}") from err


def load_ssh_key(path: str | Path) -> str:
    """Read an SSH private key from a file.

    Raises:
        StorageIOError: If the file does not exist or cannot be read.

    """
    return read_text_file(path, "SSH key")


def load_known_hosts(path: str | Path | None = None) -> str:
    """Read SSH known_hosts content.

    A missing or unreadable file is not an error; known_hosts is optional.

    Args:
        path: Path to the known_hosts file. Defaults to ``~/.ssh/known_hosts``.

    Returns:
        The file contents, or an empty string if it cannot be read.

    """
    if path is None:
        try:
            path = Path.home() / ".ssh" / "known_hosts"
        except RuntimeError:
            return ""

    try:
        return Path(path).expanduser().read_text()
    except OSError:
        ic(f"known_hosts not available at {path}")
        return ""


def token_from_env(var: str) -> str:
    """Return the value of an environment variable, or an empty string."""
    return os.environ.get(var, "")


def _env_prefix(provider: str) -> str:
    return provider.upper().replace("-", "_")


def resolve_token(value: str | None, provider: str) -> str:
    """Resolve a token given on the command line.

    A value starting with ``$`` names an environment variable to read.
    An empty value falls back to the conventional token variables for the
    provider, then to the generic Git token variables.

    Args:
        value: The raw token flag value.
        provider: The provider or platform name (e.g. ``github``).

    Returns:
        The resolved token, or an empty string if none was found.

    """
    if value:
        if value.startswith("$"):
            return token_from_env(value[1:])
        return value

    prefix = _env_prefix(provider)
    for var in (f"{prefix}_TOKEN", f"GITOPSI_{prefix}_TOKEN", "GIT_TOKEN", "GITOPSI_GIT_TOKEN"):
        token = token_from_env(var)
        if token:
            ic(var)
            return token
    return ""
