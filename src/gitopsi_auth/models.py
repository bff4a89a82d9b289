"""Data models for gitopsi-auth.

This module provides the credential entity, its enumerations and the
per-method credential data variants. Each variant carries only the
fields its authentication method uses, so a credential whose data does
not match its method cannot be constructed.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar

from gitopsi_auth.exceptions import SerializationError, ValidationError


class CredentialType(str, Enum):
    """Categories of stored credentials.

    Inherits from str to allow direct use in string contexts
    (e.g., command-line arguments, YAML output).
    """

    GIT = "git"
    PLATFORM = "platform"
    REGISTRY = "registry"


class Method(str, Enum):
    """Supported authentication methods."""

    SSH = "ssh"
    TOKEN = "token"
    BASIC = "basic"
    OAUTH = "oauth"
    SERVICE_ACCOUNT = "service-account"
    OIDC = "oidc"
    AWS_IRSA = "aws-irsa"
    AZURE_AAD = "azure-aad"


class GitProvider(str, Enum):
    """Known Git hosting providers."""

    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"
    AZURE_DEVOPS = "azure-devops"
    GITEA = "gitea"


class PlatformType(str, Enum):
    """Known target platforms."""

    KUBERNETES = "kubernetes"
    OPENSHIFT = "openshift"
    AWS = "aws"
    AZURE = "azure"
    GCP = "gcp"


class SecretFormat(str, Enum):
    """How generated secrets are meant to be stored.

    These are labels only; no encryption is performed for any of them.
    """

    PLAIN = "plain"
    SEALED = "sealed"
    SOPS = "sops"
    EXTERNAL_SECRET = "external-secret"
    VAULT = "vault"


ALLOWED_METHODS: dict[CredentialType, frozenset[Method]] = {
    CredentialType.GIT: frozenset({Method.SSH, Method.TOKEN, Method.BASIC, Method.OAUTH}),
    CredentialType.PLATFORM: frozenset(
        {
            Method.TOKEN,
            Method.SERVICE_ACCOUNT,
            Method.OIDC,
            Method.AWS_IRSA,
            Method.AZURE_AAD,
            Method.BASIC,
        }
    ),
    CredentialType.REGISTRY: frozenset({Method.BASIC}),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _AuthData:
    """Shared behaviour of the credential data variants.

    Subclasses declare ``method`` and ``_keys``, the mapping from
    attribute name to the key used in the credentials file.
    """

    __slots__ = ()

    method: ClassVar[Method]
    _keys: ClassVar[dict[str, str]]

    def to_dict(self) -> dict[str, str]:
        """Return the populated fields keyed by their persisted names."""
        return {key: getattr(self, attr) for attr, key in self._keys.items() if getattr(self, attr)}


@dataclass(frozen=True, slots=True)
class SSHKeyAuth(_AuthData):
    """SSH key pair with optional known_hosts content."""

    method: ClassVar[Method] = Method.SSH
    _keys: ClassVar[dict[str, str]] = {
        "private_key": "ssh_private_key",
        "public_key": "ssh_public_key",
        "known_hosts": "ssh_known_hosts",
    }

    private_key: str
    public_key: str = ""
    known_hosts: str = ""


@dataclass(frozen=True, slots=True)
class TokenAuth(_AuthData):
    """Access token, optionally paired with the username it belongs to."""

    method: ClassVar[Method] = Method.TOKEN
    _keys: ClassVar[dict[str, str]] = {"token": "token", "username": "username"}

    token: str
    username: str = ""


@dataclass(frozen=True, slots=True)
class BasicAuth(_AuthData):
    """Username and password."""

    method: ClassVar[Method] = Method.BASIC
    _keys: ClassVar[dict[str, str]] = {"username": "username", "password": "password"}

    username: str
    password: str


@dataclass(frozen=True, slots=True)
class OAuthAuth(_AuthData):
    """OAuth token and/or client credentials."""

    method: ClassVar[Method] = Method.OAUTH
    _keys: ClassVar[dict[str, str]] = {
        "token": "token",
        "client_id": "client_id",
        "client_secret": "client_secret",
    }

    token: str = ""
    client_id: str = ""
    client_secret: str = ""


@dataclass(frozen=True, slots=True)
class ServiceAccountAuth(_AuthData):
    """Kubernetes service account token with optional cluster CA."""

    method: ClassVar[Method] = Method.SERVICE_ACCOUNT
    _keys: ClassVar[dict[str, str]] = {"token": "token", "ca_cert": "ca_cert"}

    token: str
    ca_cert: str = ""


@dataclass(frozen=True, slots=True)
class OIDCAuth(_AuthData):
    """OpenID Connect client."""

    method: ClassVar[Method] = Method.OIDC
    _keys: ClassVar[dict[str, str]] = {"client_id": "client_id", "client_secret": "client_secret"}

    client_id: str
    client_secret: str = ""


@dataclass(frozen=True, slots=True)
class AWSIRSAAuth(_AuthData):
    """AWS IAM role assumed through IRSA."""

    method: ClassVar[Method] = Method.AWS_IRSA
    _keys: ClassVar[dict[str, str]] = {"role_arn": "aws_role_arn"}

    role_arn: str


@dataclass(frozen=True, slots=True)
class AzureAADAuth(_AuthData):
    """Azure AD pod identity."""

    method: ClassVar[Method] = Method.AZURE_AAD
    _keys: ClassVar[dict[str, str]] = {"tenant_id": "azure_tenant_id", "client_id": "azure_client_id"}

    tenant_id: str
    client_id: str


CredentialData = (
    SSHKeyAuth | TokenAuth | BasicAuth | OAuthAuth | ServiceAccountAuth | OIDCAuth | AWSIRSAAuth | AzureAADAuth
)

_VARIANTS: dict[Method, type[_AuthData]] = {
    variant.method: variant
    for variant in (
        SSHKeyAuth,
        TokenAuth,
        BasicAuth,
        OAuthAuth,
        ServiceAccountAuth,
        OIDCAuth,
        AWSIRSAAuth,
        AzureAADAuth,
    )
}


def data_from_dict(method: Method, values: dict[str, Any] | None) -> CredentialData:
    """Build the data variant for ``method`` from persisted keys.

    Args:
        method: The authentication method of the credential.
        values: Mapping of persisted field names to values.

    Returns:
        The matching CredentialData variant.

    Raises:
        ValidationError: If a non-empty key does not belong to the method or a
            field the variant requires is missing.

    """
    variant = _VARIANTS[method]
    attrs = {key: attr for attr, key in variant._keys.items()}
    # Empty keys from other methods carry nothing and are skipped
    values = {key: value for key, value in (values or {}).items() if value not in (None, "")}

    unknown = sorted(set(values) - set(attrs))
    if unknown:
        raise ValidationError(
            f"field(s) {', '.join(unknown)} not valid for {method.value} credentials",
            field=unknown[0],
            method=method.value,
        )

    try:
        return variant(**{attrs[key]: str(value) for key, value in values.items()})
    except TypeError as err:
        raise ValidationError(f"incomplete {method.value} credential data: {err}", method=method.value) from err


def _parse_timestamp(value: Any) -> datetime:
    """Parse a persisted timestamp into an aware UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        # fromisoformat() only learned the "Z" suffix in 3.11
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"invalid timestamp: {value!r}")
    return _as_utc(parsed)


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True, slots=True)
class CredentialMetadata:
    """Descriptive and target information for a credential.

    Attributes:
        description: Free-text description.
        url: Target URL (repository, API server or registry).
        namespace: Namespace for generated secrets.
        secret_name: Name for generated secrets.
        labels: Extra labels for generated secrets.
        annotations: Extra annotations for generated secrets.
        expires_at: When the credential expires, if known.

    """

    description: str = ""
    url: str = ""
    namespace: str = ""
    secret_name: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    expires_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.expires_at is not None:
            object.__setattr__(self, "expires_at", _as_utc(self.expires_at))

    def to_dict(self) -> dict[str, Any]:
        """Return the populated fields as a plain mapping."""
        result: dict[str, Any] = {
            "description": self.description,
            "url": self.url,
            "namespace": self.namespace,
            "secret_name": self.secret_name,
            "labels": dict(self.labels),
            "annotations": dict(self.annotations),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }
        return {key: value for key, value in result.items() if value}

    @classmethod
    def from_dict(cls, values: dict[str, Any] | None) -> "CredentialMetadata":
        """Build metadata from a persisted mapping."""
        values = values or {}
        expires_at = values.get("expires_at")
        return cls(
            description=str(values.get("description") or ""),
            url=str(values.get("url") or ""),
            namespace=str(values.get("namespace") or ""),
            secret_name=str(values.get("secret_name") or ""),
            labels={str(k): str(v) for k, v in (values.get("labels") or {}).items()},
            annotations={str(k): str(v) for k, v in (values.get("annotations") or {}).items()},
            expires_at=_parse_timestamp(expires_at) if expires_at else None,
        )


@dataclass(frozen=True, slots=True)
class Credential:
    """A named, typed record of authentication material.

    Attributes:
        name: Unique identifier of the credential.
        type: The credential category.
        provider: The concrete service (github, openshift, a registry host...).
        method: The authentication method.
        data: Method-specific credential values.
        metadata: Target information used when generating secrets.
        created_at: When the credential was created.
        updated_at: When the credential was last updated.

    """

    name: str
    type: CredentialType
    provider: str
    method: Method
    data: CredentialData
    metadata: CredentialMetadata = field(default_factory=CredentialMetadata)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValidationError("name is required", field="name")
        try:
            object.__setattr__(self, "type", CredentialType(self.type))
            object.__setattr__(self, "method", Method(self.method))
        except ValueError as err:
            raise ValidationError(str(err)) from err
        object.__setattr__(self, "created_at", _as_utc(self.created_at))
        object.__setattr__(self, "updated_at", _as_utc(self.updated_at))

        if self.method not in ALLOWED_METHODS[self.type]:
            raise ValidationError(
                f"method {self.method.value!r} is not supported for {self.type.value} credentials",
                field="method",
                method=self.method.value,
            )
        if self.data.method is not self.method:
            raise ValidationError(
                f"{type(self.data).__name__} data cannot be used with method {self.method.value!r}",
                field="data",
                method=self.method.value,
            )

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True if the credential has an expiry in the past."""
        if self.metadata.expires_at is None:
            return False
        return self.metadata.expires_at <= _as_utc(now or _utcnow())

    def to_dict(self) -> dict[str, Any]:
        """Return the credential in its persisted layout."""
        return {
            "name": self.name,
            "type": self.type.value,
            "provider": self.provider,
            "method": self.method.value,
            "data": self.data.to_dict(),
            "metadata": self.metadata.to_dict(),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, values: dict[str, Any]) -> "Credential":
        """Build a credential from its persisted layout.

        Raises:
            SerializationError: If the mapping is incomplete or inconsistent.

        """
        try:
            method = Method(values["method"])
            return cls(
                name=str(values["name"]),
                type=CredentialType(values["type"]),
                provider=str(values.get("provider") or ""),
                method=method,
                data=data_from_dict(method, values.get("data")),
                metadata=CredentialMetadata.from_dict(values.get("metadata")),
                created_at=_parse_timestamp(values["created_at"]),
                updated_at=_parse_timestamp(values["updated_at"]),
            )
        except (KeyError, TypeError, ValueError, AttributeError, ValidationError) as err:
            raise SerializationError(f"invalid credential entry {values.get('name')!r}: {err}") from err


@dataclass(frozen=True, slots=True)
class TestResult:
    """Outcome of a local credential well-formedness check."""

    __test__ = False

    name: str
    type: CredentialType
    provider: str
    success: bool
    message: str
    tested_at: datetime = field(default_factory=_utcnow)
