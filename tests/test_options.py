"""Tests for options.py module (the required-field matrix)."""

import pytest

from gitopsi_auth.exceptions import ValidationError
from gitopsi_auth.models import (
    AWSIRSAAuth,
    AzureAADAuth,
    BasicAuth,
    CredentialType,
    Method,
    OAuthAuth,
    OIDCAuth,
    ServiceAccountAuth,
    SSHKeyAuth,
    TokenAuth,
)
from gitopsi_auth.options import (
    GitCredentialOptions,
    PlatformCredentialOptions,
    RegistryCredentialOptions,
    parse_method,
)

GIT_BASE = {"name": "repo", "provider": "github"}
PLATFORM_BASE = {"name": "cluster", "platform": "openshift"}

# (method, fields, field expected in the error or None when valid)
GIT_MATRIX = [
    ("ssh", {"ssh_private_key": "KEY"}, None),
    ("ssh", {}, "ssh_private_key"),
    ("ssh", {"token": "ghp_xxx"}, "ssh_private_key"),
    ("token", {"token": "ghp_xxx"}, None),
    ("token", {}, "token"),
    ("token", {"username": "bot"}, "token"),
    ("basic", {"username": "u", "password": "p"}, None),
    ("basic", {"username": "u"}, "password"),
    ("basic", {"password": "p"}, "username"),
    ("basic", {}, "username"),
    ("oauth", {"token": "gho_xxx"}, None),
    ("oauth", {"client_id": "id", "client_secret": "secret"}, None),
    ("oauth", {"token": "gho_xxx", "client_id": "id"}, None),
    ("oauth", {"client_id": "id"}, "token"),
    ("oauth", {"client_secret": "secret"}, "token"),
    ("oauth", {}, "token"),
]

PLATFORM_MATRIX = [
    ("token", {"token": "t"}, None),
    ("token", {}, "token"),
    ("service-account", {"token": "t"}, None),
    ("service-account", {"ca_cert": "CA"}, "token"),
    ("oidc", {"client_id": "id"}, None),
    ("oidc", {"client_secret": "secret"}, "client_id"),
    ("aws-irsa", {"aws_role_arn": "arn:aws:iam::123456789012:role/gitops"}, None),
    ("aws-irsa", {}, "aws_role_arn"),
    ("azure-aad", {"azure_tenant_id": "tenant", "azure_client_id": "client"}, None),
    ("azure-aad", {"azure_client_id": "client"}, "azure_tenant_id"),
    ("azure-aad", {"azure_tenant_id": "tenant"}, "azure_client_id"),
    ("azure-aad", {}, "azure_tenant_id"),
    ("basic", {"username": "u", "password": "p"}, None),
    ("basic", {"username": "u"}, "password"),
    ("basic", {"password": "p"}, "username"),
]

REGISTRY_MATRIX = [
    ({"name": "hub", "url": "docker.io", "username": "u", "password": "p"}, None),
    ({"url": "docker.io", "username": "u", "password": "p"}, "name"),
    ({"name": "hub", "username": "u", "password": "p"}, "url"),
    ({"name": "hub", "url": "docker.io", "password": "p"}, "username"),
    ({"name": "hub", "url": "docker.io", "username": "u"}, "password"),
]


class TestGitCredentialOptionsValidate:
    """Tests for the Git validation matrix."""

    @pytest.mark.parametrize(("method", "fields", "missing"), GIT_MATRIX)
    def test_matrix(self, method, fields, missing):
        """Test validate fails exactly when a required field is missing."""
        opts = GitCredentialOptions(**GIT_BASE, method=method, **fields)
        if missing is None:
            opts.validate()
        else:
            with pytest.raises(ValidationError) as exc_info:
                opts.validate()
            assert exc_info.value.field == missing
            assert exc_info.value.method == method

    def test_name_required(self):
        """Test empty name is rejected."""
        opts = GitCredentialOptions(provider="github", method="token", token="t")
        with pytest.raises(ValidationError, match="name is required"):
            opts.validate()

    def test_provider_required(self):
        """Test empty provider is rejected."""
        opts = GitCredentialOptions(name="repo", method="token", token="t")
        with pytest.raises(ValidationError, match="provider is required"):
            opts.validate()

    def test_method_required(self):
        """Test empty method is rejected."""
        opts = GitCredentialOptions(name="repo", provider="github", token="t")
        with pytest.raises(ValidationError, match="method is required"):
            opts.validate()

    def test_unknown_method(self):
        """Test a method outside the enumeration is rejected."""
        opts = GitCredentialOptions(**GIT_BASE, method="kerberos", token="t")
        with pytest.raises(ValidationError, match="unknown auth method"):
            opts.validate()

    def test_platform_only_method_rejected(self):
        """Test aws-irsa is not accepted for Git credentials."""
        opts = GitCredentialOptions(**GIT_BASE, method=Method.AWS_IRSA)
        with pytest.raises(ValidationError, match="not supported for git"):
            opts.validate()

    def test_free_form_provider_accepted(self):
        """Test providers outside the GitProvider enumeration are allowed."""
        opts = GitCredentialOptions(name="repo", provider="forgejo", method="token", token="t")
        opts.validate()
        assert opts.provider_name == "forgejo"


class TestGitCredentialOptionsBuildData:
    """Tests for the data copied into Git credentials."""

    def test_ssh_copies_key_material_only(self):
        """Test SSH data keeps the key pair and known_hosts."""
        opts = GitCredentialOptions(
            **GIT_BASE,
            method="ssh",
            ssh_private_key="KEY",
            ssh_public_key="PUB",
            ssh_known_hosts="HOSTS",
            token="ignored",
        )
        assert opts.build_data() == SSHKeyAuth(private_key="KEY", public_key="PUB", known_hosts="HOSTS")

    def test_token_keeps_username(self):
        """Test token data keeps the username alongside the token."""
        opts = GitCredentialOptions(**GIT_BASE, method="token", token="t", username="bot", password="ignored")
        assert opts.build_data() == TokenAuth(token="t", username="bot")

    def test_basic(self):
        """Test basic data keeps username and password."""
        opts = GitCredentialOptions(**GIT_BASE, method="basic", username="u", password="p", token="ignored")
        assert opts.build_data() == BasicAuth(username="u", password="p")

    def test_oauth(self):
        """Test OAuth data keeps token and client credentials."""
        opts = GitCredentialOptions(**GIT_BASE, method="oauth", client_id="id", client_secret="s")
        assert opts.build_data() == OAuthAuth(client_id="id", client_secret="s")


class TestPlatformCredentialOptionsValidate:
    """Tests for the platform validation matrix."""

    @pytest.mark.parametrize(("method", "fields", "missing"), PLATFORM_MATRIX)
    def test_matrix(self, method, fields, missing):
        """Test validate fails exactly when a required field is missing."""
        opts = PlatformCredentialOptions(**PLATFORM_BASE, method=method, **fields)
        if missing is None:
            opts.validate()
        else:
            with pytest.raises(ValidationError) as exc_info:
                opts.validate()
            assert exc_info.value.field == missing
            assert exc_info.value.method == method

    def test_platform_required(self):
        """Test empty platform is rejected."""
        opts = PlatformCredentialOptions(name="cluster", method="token", token="t")
        with pytest.raises(ValidationError, match="platform is required"):
            opts.validate()

    def test_name_required(self):
        """Test empty name is rejected."""
        opts = PlatformCredentialOptions(platform="aws", method="aws-irsa", aws_role_arn="arn")
        with pytest.raises(ValidationError, match="name is required"):
            opts.validate()

    def test_method_required(self):
        """Test empty method is rejected."""
        opts = PlatformCredentialOptions(**PLATFORM_BASE, token="t")
        with pytest.raises(ValidationError, match="method is required"):
            opts.validate()

    def test_git_only_method_rejected(self):
        """Test ssh is not accepted for platform credentials."""
        opts = PlatformCredentialOptions(**PLATFORM_BASE, method="ssh")
        with pytest.raises(ValidationError, match="not supported for platform"):
            opts.validate()


class TestPlatformCredentialOptionsBuildData:
    """Tests for the data copied into platform credentials."""

    def test_token_keeps_token_only(self):
        """Test token data drops the CA certificate and username."""
        opts = PlatformCredentialOptions(**PLATFORM_BASE, method="token", token="t", ca_cert="CA", username="u")
        assert opts.build_data() == TokenAuth(token="t")

    def test_service_account_keeps_ca(self):
        """Test service-account data keeps the CA certificate."""
        opts = PlatformCredentialOptions(**PLATFORM_BASE, method="service-account", token="t", ca_cert="CA")
        assert opts.build_data() == ServiceAccountAuth(token="t", ca_cert="CA")

    def test_oidc(self):
        """Test OIDC data keeps client id and secret."""
        opts = PlatformCredentialOptions(**PLATFORM_BASE, method="oidc", client_id="id", client_secret="s")
        assert opts.build_data() == OIDCAuth(client_id="id", client_secret="s")

    def test_aws_irsa(self):
        """Test IRSA data keeps the role ARN."""
        opts = PlatformCredentialOptions(**PLATFORM_BASE, method="aws-irsa", aws_role_arn="arn")
        assert opts.build_data() == AWSIRSAAuth(role_arn="arn")

    def test_azure_aad(self):
        """Test Azure data keeps tenant and client id."""
        opts = PlatformCredentialOptions(
            **PLATFORM_BASE, method="azure-aad", azure_tenant_id="tenant", azure_client_id="client"
        )
        assert opts.build_data() == AzureAADAuth(tenant_id="tenant", client_id="client")


class TestRegistryCredentialOptionsValidate:
    """Tests for registry validation."""

    @pytest.mark.parametrize(("fields", "missing"), REGISTRY_MATRIX)
    def test_matrix(self, fields, missing):
        """Test validate fails exactly when a required field is missing."""
        opts = RegistryCredentialOptions(**fields)
        if missing is None:
            opts.validate()
        else:
            with pytest.raises(ValidationError) as exc_info:
                opts.validate()
            assert exc_info.value.field == missing

    def test_provider_defaults_to_url(self):
        """Test the provider name falls back to the URL."""
        opts = RegistryCredentialOptions(name="hub", url="docker.io", username="u", password="p")
        assert opts.provider_name == "docker.io"

    def test_provider_uses_registry(self):
        """Test an explicit registry host wins over the URL."""
        opts = RegistryCredentialOptions(name="hub", registry="quay", url="https://quay.io", username="u", password="p")
        assert opts.provider_name == "quay"


class TestParseMethod:
    """Tests for method parsing."""

    def test_accepts_enum(self):
        """Test Method values pass through."""
        assert parse_method(Method.OIDC, CredentialType.PLATFORM) is Method.OIDC

    def test_accepts_string(self):
        """Test string values are converted."""
        assert parse_method("service-account", CredentialType.PLATFORM) is Method.SERVICE_ACCOUNT

    def test_registry_only_allows_basic(self):
        """Test registry credentials only accept basic auth."""
        assert parse_method("basic", CredentialType.REGISTRY) is Method.BASIC
        with pytest.raises(ValidationError):
            parse_method("token", CredentialType.REGISTRY)
