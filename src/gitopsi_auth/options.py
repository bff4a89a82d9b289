"""Credential option types and their validation rules.

Each option type collects the values for one credential category and
checks that the fields required by the selected authentication method
are present before anything is built or stored.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from gitopsi_auth.exceptions import ValidationError
from gitopsi_auth.models import (
    ALLOWED_METHODS,
    AWSIRSAAuth,
    AzureAADAuth,
    BasicAuth,
    CredentialData,
    CredentialMetadata,
    CredentialType,
    GitProvider,
    Method,
    OAuthAuth,
    OIDCAuth,
    PlatformType,
    ServiceAccountAuth,
    SSHKeyAuth,
    TokenAuth,
)


def _text(value: Enum | str) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def parse_method(value: Method | str, cred_type: CredentialType) -> Method:
    """Convert a method value and check it is allowed for a credential type.

    Args:
        value: The method as given by the caller.
        cred_type: The credential category being validated.

    Returns:
        The parsed Method.

    Raises:
        ValidationError: If the method is missing, unknown or not
            permitted for ``cred_type``.

    """
    if not value:
        raise ValidationError("method is required", field="method")
    try:
        method = Method(value)
    except ValueError as err:
        choices = ", ".join(m.value for m in Method)
        raise ValidationError(
            f"unknown auth method {value!r} (expected one of: {choices})",
            field="method",
            method=str(value),
        ) from err

    if method not in ALLOWED_METHODS[cred_type]:
        raise ValidationError(
            f"method {method.value!r} is not supported for {cred_type.value} credentials",
            field="method",
            method=method.value,
        )
    return method


def _require_basic(username: str, password: str, method: Method) -> None:
    if not username or not password:
        raise ValidationError(
            "username and password are required for basic auth",
            field="username" if not username else "password",
            method=method.value,
        )


@dataclass
class _CommonOptions:
    """Fields shared by every credential category."""

    name: str = ""
    url: str = ""
    description: str = ""
    namespace: str = ""
    secret_name: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    expires_at: datetime | None = None

    def _require_name(self) -> None:
        if not self.name:
            raise ValidationError("name is required", field="name")

    def build_metadata(self) -> CredentialMetadata:
        """Return the metadata described by these options."""
        return CredentialMetadata(
            description=self.description,
            url=self.url,
            namespace=self.namespace,
            secret_name=self.secret_name,
            labels=dict(self.labels),
            annotations=dict(self.annotations),
            expires_at=self.expires_at,
        )


@dataclass
class GitCredentialOptions(_CommonOptions):
    """Options for creating a Git provider credential."""

    provider: GitProvider | str = ""
    method: Method | str = ""
    token: str = ""
    username: str = ""
    password: str = ""
    ssh_private_key: str = ""
    ssh_public_key: str = ""
    ssh_known_hosts: str = ""
    client_id: str = ""
    client_secret: str = ""

    @property
    def provider_name(self) -> str:
        return _text(self.provider)

    def validate(self) -> None:
        """Check the options against the Git required-field matrix.

        Raises:
            ValidationError: If a required field is missing.

        """
        self._require_name()
        if not self.provider:
            raise ValidationError("provider is required", field="provider")
        method = parse_method(self.method, CredentialType.GIT)

        match method:
            case Method.SSH:
                if not self.ssh_private_key:
                    raise ValidationError(
                        "ssh_private_key is required for SSH auth", field="ssh_private_key", method=method.value
                    )
            case Method.TOKEN:
                if not self.token:
                    raise ValidationError("token is required for token auth", field="token", method=method.value)
            case Method.BASIC:
                _require_basic(self.username, self.password, method)
            case Method.OAUTH:
                if not self.token and not (self.client_id and self.client_secret):
                    raise ValidationError(
                        "token or client_id/client_secret required for OAuth", field="token", method=method.value
                    )

    def build_data(self) -> CredentialData:
        """Return the credential data for the selected method."""
        match Method(self.method):
            case Method.SSH:
                return SSHKeyAuth(
                    private_key=self.ssh_private_key,
                    public_key=self.ssh_public_key,
                    known_hosts=self.ssh_known_hosts,
                )
            case Method.TOKEN:
                return TokenAuth(token=self.token, username=self.username)
            case Method.BASIC:
                return BasicAuth(username=self.username, password=self.password)
            case Method.OAUTH:
                return OAuthAuth(token=self.token, client_id=self.client_id, client_secret=self.client_secret)
            case other:
                raise ValidationError(f"method {other.value!r} is not supported for git credentials", field="method")


@dataclass
class PlatformCredentialOptions(_CommonOptions):
    """Options for creating a platform (cluster or cloud) credential."""

    platform: PlatformType | str = ""
    method: Method | str = ""
    token: str = ""
    username: str = ""
    password: str = ""
    ca_cert: str = ""
    client_id: str = ""
    client_secret: str = ""
    aws_role_arn: str = ""
    azure_tenant_id: str = ""
    azure_client_id: str = ""

    @property
    def provider_name(self) -> str:
        return _text(self.platform)

    def validate(self) -> None:
        """Check the options against the platform required-field matrix.

        Raises:
            ValidationError: If a required field is missing.

        """
        self._require_name()
        if not self.platform:
            raise ValidationError("platform is required", field="platform")
        method = parse_method(self.method, CredentialType.PLATFORM)

        match method:
            case Method.TOKEN | Method.SERVICE_ACCOUNT:
                if not self.token:
                    raise ValidationError(
                        "token is required for token/service-account auth", field="token", method=method.value
                    )
            case Method.OIDC:
                if not self.client_id:
                    raise ValidationError("client_id is required for OIDC auth", field="client_id", method=method.value)
            case Method.AWS_IRSA:
                if not self.aws_role_arn:
                    raise ValidationError(
                        "aws_role_arn is required for AWS IRSA", field="aws_role_arn", method=method.value
                    )
            case Method.AZURE_AAD:
                if not self.azure_tenant_id or not self.azure_client_id:
                    raise ValidationError(
                        "azure_tenant_id and azure_client_id required for Azure AAD",
                        field="azure_tenant_id" if not self.azure_tenant_id else "azure_client_id",
                        method=method.value,
                    )
            case Method.BASIC:
                _require_basic(self.username, self.password, method)

    def build_data(self) -> CredentialData:
        """Return the credential data for the selected method."""
        match Method(self.method):
            case Method.TOKEN:
                return TokenAuth(token=self.token)
            case Method.SERVICE_ACCOUNT:
                return ServiceAccountAuth(token=self.token, ca_cert=self.ca_cert)
            case Method.OIDC:
                return OIDCAuth(client_id=self.client_id, client_secret=self.client_secret)
            case Method.AWS_IRSA:
                return AWSIRSAAuth(role_arn=self.aws_role_arn)
            case Method.AZURE_AAD:
                return AzureAADAuth(tenant_id=self.azure_tenant_id, client_id=self.azure_client_id)
            case Method.BASIC:
                return BasicAuth(username=self.username, password=self.password)
            case other:
                raise ValidationError(
                    f"method {other.value!r} is not supported for platform credentials", field="method"
                )


@dataclass
class RegistryCredentialOptions(_CommonOptions):
    """Options for creating a container registry credential.

    Registry credentials always use basic auth.
    """

    registry: str = ""
    username: str = ""
    password: str = ""

    @property
    def provider_name(self) -> str:
        return self.registry or self.url

    def validate(self) -> None:
        """Check that name, url, username and password are present.

        Raises:
            ValidationError: If a required field is missing.

        """
        self._require_name()
        if not self.url:
            raise ValidationError("url is required", field="url")
        _require_basic(self.username, self.password, Method.BASIC)

    def build_data(self) -> CredentialData:
        """Return the basic auth data for the registry."""
        return BasicAuth(username=self.username, password=self.password)
