"""Runtime configuration for gitopsi-auth.

The store location and secret format are explicit configuration values
passed to whatever builds the store and manager, rather than being looked
up inside the store itself.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from gitopsi_auth.exceptions import ValidationError
from gitopsi_auth.models import SecretFormat

STORE_PATH_ENV = "GITOPSI_CREDENTIALS_FILE"
SECRET_FORMAT_ENV = "GITOPSI_SECRET_FORMAT"

DEFAULT_MANAGED_BY = "gitopsi"


def default_store_path() -> Path:
    """Return the default credentials file location.

    Returns:
        ``~/.gitopsi/credentials.yaml``, or a path relative to the current
        directory when the home directory cannot be determined.

    """
    try:
        home = Path.home()
    except RuntimeError:
        return Path(".gitopsi") / "credentials.yaml"
    return home / ".gitopsi" / "credentials.yaml"


@dataclass(frozen=True, slots=True)
class AuthConfig:
    """Settings used to build a credential store and manager.

    Attributes:
        store_path: Location of the YAML credentials file.
        secret_format: Format label recorded by the manager.
        managed_by: Value of the ``app.kubernetes.io/managed-by`` label.

    """

    store_path: Path = field(default_factory=default_store_path)
    secret_format: SecretFormat = SecretFormat.PLAIN
    managed_by: str = DEFAULT_MANAGED_BY

    @classmethod
    def from_env(cls, store_path: str | Path | None = None) -> "AuthConfig":
        """Build configuration from the environment.

        Args:
            store_path: Explicit store location; takes precedence over
                the ``GITOPSI_CREDENTIALS_FILE`` environment variable.

        Returns:
            The resolved configuration.

        Raises:
            ValidationError: If ``GITOPSI_SECRET_FORMAT`` holds an unknown format.

        """
        path_value = store_path or os.environ.get(STORE_PATH_ENV)
        path = Path(path_value).expanduser() if path_value else default_store_path()

        format_value = os.environ.get(SECRET_FORMAT_ENV, SecretFormat.PLAIN.value)
        try:
            secret_format = SecretFormat(format_value)
        except ValueError as err:
            choices = ", ".join(f.value for f in SecretFormat)
            raise ValidationError(
                f"unknown secret format {format_value!r} (expected one of: {choices})",
                field=SECRET_FORMAT_ENV,
            ) from err

        return cls(store_path=path, secret_format=secret_format)
