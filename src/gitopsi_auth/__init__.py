"""gitopsi-auth: credential store and secret manifest generator for GitOps.

This package stores Git, platform and container registry credentials,
validates them per authentication method and renders them as Kubernetes,
ArgoCD and Flux secret manifests.

Example usage:
    from gitopsi_auth import GitCredentialOptions, Manager, MemoryStore

    manager = Manager(MemoryStore())
    manager.add_git_credential(
        GitCredentialOptions(name="gh", provider="github", method="token", token="ghp_example")
    )
    print(manager.generate_kubernetes_secret("gh"))
"""

__version__ = "0.1.0"

from gitopsi_auth.config import AuthConfig
from gitopsi_auth.exceptions import (
    AuthError,
    CredentialNotFoundError,
    SerializationError,
    StorageIOError,
    ValidationError,
)
from gitopsi_auth.manager import Manager
from gitopsi_auth.masking import mask_credential
from gitopsi_auth.models import (
    Credential,
    CredentialMetadata,
    CredentialType,
    GitProvider,
    Method,
    PlatformType,
    SecretFormat,
    TestResult,
)
from gitopsi_auth.options import GitCredentialOptions, PlatformCredentialOptions, RegistryCredentialOptions
from gitopsi_auth.store import FileStore, MemoryStore, Store

__all__ = [
    # Version
    "__version__",
    # Classes
    "AuthConfig",
    "Manager",
    "FileStore",
    "MemoryStore",
    "Store",
    # Models
    "Credential",
    "CredentialMetadata",
    "CredentialType",
    "GitProvider",
    "Method",
    "PlatformType",
    "SecretFormat",
    "TestResult",
    # Options
    "GitCredentialOptions",
    "PlatformCredentialOptions",
    "RegistryCredentialOptions",
    # Helpers
    "mask_credential",
    # Exceptions
    "AuthError",
    "CredentialNotFoundError",
    "SerializationError",
    "StorageIOError",
    "ValidationError",
]
