"""Custom exceptions for gitopsi-auth.

This module defines the exception hierarchy used throughout the package
so callers can tell a bad request apart from a missing credential or a
storage failure.
"""


class AuthError(Exception):
    """Base exception for all gitopsi-auth errors.

    All custom exceptions in this package inherit from this class,
    allowing callers to catch all credential errors with a single
    except clause if desired.
    """

    pass


class ValidationError(AuthError):
    """Raised when credential options are missing or contradictory.

    This can occur when:
    - A field required by the selected authentication method is empty
    - The method is unknown or not permitted for the credential type
    - A credential is built with data that does not match its method

    Attributes:
        field: Name of the offending field, if known.
        method: The authentication method being validated, if any.

    """

    def __init__(self, message: str, *, field: str | None = None, method: str | None = None) -> None:
        super().__init__(message)
        self.field = field
        self.method = method


class CredentialNotFoundError(AuthError):
    """Raised when a credential name is not present in the store.

    Attributes:
        name: The credential name that was looked up.

    """

    def __init__(self, name: str) -> None:
        super().__init__(f"credential {name!r} not found")
        self.name = name


class SerializationError(AuthError):
    """Raised when credentials or manifests cannot be (de)serialized.

    This can occur when:
    - The credentials file is not valid YAML
    - The file does not have the expected ``credentials`` list
    - A generated manifest cannot be rendered as YAML or JSON
    """

    pass


class StorageIOError(AuthError):
    """Raised when reading or writing the credentials file fails.

    This typically means:
    - The file or its directory is not readable/writable
    - The disk is full
    - The parent directory cannot be created
    """

    pass
