"""Credential manager facade.

This module provides the Manager class which serves as the main entry
point for credential operations: validating and storing new credentials,
reading and deleting them, running local well-formedness checks and
rendering them as secret manifests.
"""

from datetime import datetime, timezone

from icecream import ic

from gitopsi_auth.config import DEFAULT_MANAGED_BY, AuthConfig
from gitopsi_auth.exceptions import SerializationError, StorageIOError, ValidationError
from gitopsi_auth.models import (
    AWSIRSAAuth,
    AzureAADAuth,
    BasicAuth,
    Credential,
    CredentialType,
    Method,
    OIDCAuth,
    SecretFormat,
    ServiceAccountAuth,
    SSHKeyAuth,
    TestResult,
    TokenAuth,
)
from gitopsi_auth.options import GitCredentialOptions, PlatformCredentialOptions, RegistryCredentialOptions
from gitopsi_auth.secrets import (
    ARGOCD_NAMESPACE,
    FLUX_NAMESPACE,
    argocd_repo_secret,
    flux_git_repository_secret,
    kubernetes_secret,
)
from gitopsi_auth.store import FileStore, Store

# Shortest token accepted by the Git token check
MIN_TOKEN_LENGTH = 10

_CredentialOptions = GitCredentialOptions | PlatformCredentialOptions | RegistryCredentialOptions


def _unsupported(credential: Credential) -> tuple[bool, str]:
    return False, f"unsupported auth method: {credential.method.value}"


def _check_git(credential: Credential) -> tuple[bool, str]:
    match credential.data:
        case SSHKeyAuth(private_key=private_key):
            if not private_key:
                return False, "SSH private key is empty"
            return True, "SSH key is present (connection test requires Git operation)"
        case TokenAuth(token=token):
            if not token:
                return False, "Token is empty"
            if len(token) < MIN_TOKEN_LENGTH:
                return False, "Token appears to be too short"
            return True, "Token is present and valid format"
        case BasicAuth(username=username, password=password):
            if not username or not password:
                return False, "Username or password is empty"
            return True, "Basic auth credentials are present"
        case _:
            return _unsupported(credential)


def _check_platform(credential: Credential) -> tuple[bool, str]:
    match credential.data:
        case TokenAuth(token=token) | ServiceAccountAuth(token=token):
            if not token:
                return False, "Token is empty"
            return True, "Token is present"
        case OIDCAuth(client_id=client_id):
            if not client_id:
                return False, "Client ID is empty"
            return True, "OIDC credentials are present"
        case AWSIRSAAuth(role_arn=role_arn):
            if not role_arn:
                return False, "AWS Role ARN is empty"
            return True, "AWS IRSA configuration is present"
        case AzureAADAuth(tenant_id=tenant_id, client_id=client_id):
            if not tenant_id or not client_id:
                return False, "Azure tenant ID or client ID is empty"
            return True, "Azure AAD configuration is present"
        case _:
            return _unsupported(credential)


def _check_registry(credential: Credential) -> tuple[bool, str]:
    match credential.data:
        case BasicAuth(username=username, password=password):
            if not username or not password:
                return False, "Username or password is empty"
            return True, "Registry credentials are present"
        case _:
            return _unsupported(credential)


class Manager:
    """Orchestrates validation, storage and rendering of credentials.

    Attributes:
        store: The backing credential store.
        managed_by: Value of the managed-by label on generated secrets.

    """

    def __init__(
        self,
        store: Store,
        secret_format: SecretFormat = SecretFormat.PLAIN,
        *,
        managed_by: str = DEFAULT_MANAGED_BY,
    ) -> None:
        """Initialize the manager.

        Args:
            store: Store holding the credentials.
            secret_format: Format label for generated secrets.
            managed_by: Value of the ``app.kubernetes.io/managed-by`` label.

        """
        self.store: Store = store
        self.managed_by: str = managed_by
        self._secret_format = SecretFormat(secret_format)

    @classmethod
    def from_config(cls, config: AuthConfig) -> "Manager":
        """Build a manager backed by the file store named in ``config``.

        Raises:
            StorageIOError: If the credentials file cannot be read.
            SerializationError: If the credentials file is malformed.

        """
        return cls(FileStore(config.store_path), config.secret_format, managed_by=config.managed_by)

    @property
    def secret_format(self) -> SecretFormat:
        """The configured secret format label."""
        return self._secret_format

    def _add(self, opts: _CredentialOptions, cred_type: CredentialType, method: Method | str) -> Credential:
        try:
            opts.validate()
        except ValidationError as err:
            raise ValidationError(
                f"invalid {cred_type.value} credential options: {err}", field=err.field, method=err.method
            ) from err

        now = datetime.now(timezone.utc)
        credential = Credential(
            name=opts.name,
            type=cred_type,
            provider=opts.provider_name,
            method=Method(method),
            data=opts.build_data(),
            metadata=opts.build_metadata(),
            created_at=now,
            updated_at=now,
        )
        ic(credential.name, credential.type, credential.method)

        try:
            self.store.save(credential)
        except (StorageIOError, SerializationError) as err:
            raise type(err)(f"failed to save credential {credential.name!r}: {err}") from err

        return credential

    def add_git_credential(self, opts: GitCredentialOptions) -> Credential:
        """Validate and store a Git provider credential.

        Args:
            opts: The Git credential options.

        Returns:
            The stored credential.

        Raises:
            ValidationError: If the options fail validation; nothing is stored.
            StorageIOError: If the store cannot persist the credential.
            SerializationError: If the store cannot serialize the credential.

        """
        return self._add(opts, CredentialType.GIT, opts.method)

    def add_platform_credential(self, opts: PlatformCredentialOptions) -> Credential:
        """Validate and store a platform credential (Kubernetes, OpenShift, cloud).

        Args:
            opts: The platform credential options.

        Returns:
            The stored credential.

        Raises:
            ValidationError: If the options fail validation; nothing is stored.
            StorageIOError: If the store cannot persist the credential.
            SerializationError: If the store cannot serialize the credential.

        """
        return self._add(opts, CredentialType.PLATFORM, opts.method)

    def add_registry_credential(self, opts: RegistryCredentialOptions) -> Credential:
        """Validate and store a container registry credential.

        Registry credentials always use basic auth.

        Args:
            opts: The registry credential options.

        Returns:
            The stored credential.

        Raises:
            ValidationError: If the options fail validation; nothing is stored.
            StorageIOError: If the store cannot persist the credential.
            SerializationError: If the store cannot serialize the credential.

        """
        return self._add(opts, CredentialType.REGISTRY, Method.BASIC)

    def get_credential(self, name: str) -> Credential:
        """Return a stored credential.

        Raises:
            CredentialNotFoundError: If no credential has this name.

        """
        return self.store.get(name)

    def list_credentials(self, cred_type: CredentialType | str | None = None) -> list[Credential]:
        """Return stored credentials, optionally filtered by type.

        Args:
            cred_type: Type to filter on; empty or None returns everything.

        Raises:
            ValidationError: If ``cred_type`` is not a known credential type.

        """
        if not cred_type:
            return self.store.list(None)
        try:
            return self.store.list(CredentialType(cred_type))
        except ValueError as err:
            raise ValidationError(f"unknown credential type {cred_type!r}", field="type") from err

    def delete_credential(self, name: str) -> None:
        """Delete a stored credential.

        Raises:
            CredentialNotFoundError: If no credential has this name.

        """
        self.store.delete(name)

    def test_credential(self, name: str) -> TestResult:
        """Check that a stored credential is well formed.

        This is a local presence check only; no remote service is contacted.
        Unsupported type/method combinations produce a failed result
        rather than an exception.

        Args:
            name: Name of the credential to check.

        Returns:
            The outcome of the check.

        Raises:
            CredentialNotFoundError: If no credential has this name.

        """
        credential = self.store.get(name)

        match credential.type:
            case CredentialType.GIT:
                success, message = _check_git(credential)
            case CredentialType.PLATFORM:
                success, message = _check_platform(credential)
            case CredentialType.REGISTRY:
                success, message = _check_registry(credential)

        ic(name, success)
        return TestResult(
            name=name,
            type=credential.type,
            provider=credential.provider,
            success=success,
            message=message,
            tested_at=datetime.now(timezone.utc),
        )

    def generate_kubernetes_secret(self, name: str) -> str:
        """Render a stored credential as a Kubernetes Secret.

        Raises:
            CredentialNotFoundError: If no credential has this name.
            SerializationError: If the manifest cannot be rendered.

        """
        return kubernetes_secret(self.store.get(name), managed_by=self.managed_by)

    def generate_argocd_repo_secret(self, name: str, namespace: str = ARGOCD_NAMESPACE) -> str:
        """Render a stored Git credential as an ArgoCD repository secret.

        Raises:
            CredentialNotFoundError: If no credential has this name.
            ValidationError: If the credential is not a Git credential.
            SerializationError: If the manifest cannot be rendered.

        """
        return argocd_repo_secret(self.store.get(name), namespace, managed_by=self.managed_by)

    def generate_flux_git_repository_secret(self, name: str, namespace: str = FLUX_NAMESPACE) -> str:
        """Render a stored Git credential as a Flux GitRepository secret.

        Raises:
            CredentialNotFoundError: If no credential has this name.
            ValidationError: If the credential is not a Git credential.
            SerializationError: If the manifest cannot be rendered.

        """
        return flux_git_repository_secret(self.store.get(name), namespace, managed_by=self.managed_by)

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"Manager(store={type(self.store).__name__}, secret_format={self._secret_format.value!r})"
