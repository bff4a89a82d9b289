#!/usr/bin/env python
"""Command-line interface for gitopsi-auth.

This module provides the CLI entry point for managing stored credentials,
turning command-line flags, environment variables and prompts into option
objects for the Manager and rendering its results.
"""

import contextlib
import sys
from collections.abc import Callable, Generator
from pathlib import Path

import click
from icecream import ic

from gitopsi_auth import __version__, console, prompts
from gitopsi_auth.config import AuthConfig
from gitopsi_auth.exceptions import AuthError
from gitopsi_auth.manager import Manager
from gitopsi_auth.masking import mask_credential
from gitopsi_auth.models import ALLOWED_METHODS, Credential, CredentialType, Method
from gitopsi_auth.options import GitCredentialOptions, PlatformCredentialOptions, RegistryCredentialOptions
from gitopsi_auth.secrets import ARGOCD_NAMESPACE, FLUX_NAMESPACE
from gitopsi_auth.sources import load_known_hosts, load_ssh_key, read_text_file, resolve_token


def _method_choices(cred_type: CredentialType) -> click.Choice:
    return click.Choice(sorted(m.value for m in ALLOWED_METHODS[cred_type]))


@contextlib.contextmanager
def _auth_errors() -> Generator[None, None, None]:
    """Convert package errors into click errors."""
    try:
        yield
    except AuthError as err:
        raise click.ClickException(str(err)) from None


def _manager(ctx: click.Context) -> Manager:
    config = ctx.find_object(AuthConfig)
    ic(config)
    with _auth_errors():
        return Manager.from_config(config)


def _secret_value(value: str | None, label: str, flag: str) -> str:
    """Return a secret given as a flag, prompting for it when possible."""
    if value:
        return value
    if prompts.can_prompt():
        return prompts.prompt_secret(label)
    raise click.UsageError(f"{flag} is required for this authentication method")


def _token_required(token: str, provider: str) -> str:
    if not token:
        env_name = provider.upper().replace("-", "_")
        raise click.UsageError(f"--token is required or set {env_name}_TOKEN environment variable")
    return token


def _common_options(func: Callable) -> Callable:
    for decorator in reversed(
        (
            click.option("--url", default="", help="target URL (repository, API server or registry)"),
            click.option("--namespace", default="", help="namespace for generated secrets"),
            click.option("--secret-name", default="", help="name for generated secrets"),
            click.option("--description", default="", help="free-text description"),
        )
    ):
        func = decorator(func)
    return func


@click.group(help="Manage credentials for Git providers, platforms and container registries")
@click.version_option(__version__, "--version", "-v", message="%(version)s")
@click.option("--debug", required=False, is_flag=True, help="print debug information")
@click.option(
    "--store",
    "store_path",
    required=False,
    type=click.Path(dir_okay=False, path_type=Path),
    help="credentials file (default: $GITOPSI_CREDENTIALS_FILE or ~/.gitopsi/credentials.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, store_path: Path | None) -> None:
    """Process global options and prepare the configuration.

    Args:
        ctx: The click context.
        debug: Enable debug output.
        store_path: Explicit credentials file location.

    """
    if debug:
        ic.enable()
    else:
        ic.disable()

    with _auth_errors():
        ctx.obj = AuthConfig.from_env(store_path)


@cli.group()
def add() -> None:
    """Add Git, platform or registry credentials."""


@add.command("git")
@click.argument("name")
@click.option("--provider", required=True, help="github, gitlab, bitbucket, azure-devops or gitea")
@click.option("--method", required=True, type=_method_choices(CredentialType.GIT), help="auth method")
@click.option("--token", help="access token, or $VAR to read it from the environment")
@click.option("--username", default="", help="username for basic or token auth")
@click.option("--password", help="password for basic auth (prompted if omitted)")
@click.option("--ssh-key", type=click.Path(dir_okay=False), help="path to SSH private key file")
@click.option("--ssh-public-key", type=click.Path(dir_okay=False), help="path to SSH public key file")
@click.option("--known-hosts", type=click.Path(dir_okay=False), help="known_hosts file (default: ~/.ssh/known_hosts)")
@click.option("--client-id", default="", help="OAuth client ID")
@click.option("--client-secret", default="", help="OAuth client secret")
@_common_options
@click.pass_context
def add_git(
    ctx: click.Context,
    name: str,
    provider: str,
    method: str,
    token: str | None,
    username: str,
    password: str | None,
    ssh_key: str | None,
    ssh_public_key: str | None,
    known_hosts: str | None,
    client_id: str,
    client_secret: str,
    url: str,
    namespace: str,
    secret_name: str,
    description: str,
) -> None:
    """Add credentials for a Git provider."""
    manager = _manager(ctx)
    opts = GitCredentialOptions(
        name=name,
        provider=provider,
        method=method,
        url=url,
        namespace=namespace,
        secret_name=secret_name,
        description=description,
        username=username,
        client_id=client_id,
        client_secret=client_secret,
    )

    match Method(method):
        case Method.SSH:
            if not ssh_key:
                raise click.UsageError("--ssh-key is required for SSH authentication")
            with _auth_errors():
                opts.ssh_private_key = load_ssh_key(ssh_key)
                if ssh_public_key:
                    opts.ssh_public_key = read_text_file(ssh_public_key, "SSH public key")
            opts.ssh_known_hosts = load_known_hosts(known_hosts)
        case Method.TOKEN:
            opts.token = _token_required(resolve_token(token, provider), provider)
        case Method.OAUTH:
            opts.token = resolve_token(token, provider)
        case Method.BASIC:
            if not username:
                raise click.UsageError("--username is required for basic authentication")
            opts.password = _secret_value(password, "password", "--password")

    with _auth_errors():
        credential = manager.add_git_credential(opts)

    console.success(f"Git credential {console.highlight(credential.name)} added successfully")
    console.step(f"Provider: {credential.provider}, Method: {credential.method.value}")


@add.command("platform")
@click.argument("name")
@click.option("--platform", required=True, help="kubernetes, openshift, aws, azure or gcp")
@click.option("--method", required=True, type=_method_choices(CredentialType.PLATFORM), help="auth method")
@click.option("--token", help="access token, or $VAR to read it from the environment")
@click.option("--ca-cert", type=click.Path(dir_okay=False), help="CA certificate file for service-account auth")
@click.option("--username", default="", help="username for basic auth")
@click.option("--password", help="password for basic auth (prompted if omitted)")
@click.option("--client-id", default="", help="client ID for OIDC or Azure AAD")
@click.option("--client-secret", default="", help="OIDC client secret")
@click.option("--role-arn", default="", help="AWS IAM role ARN for IRSA")
@click.option("--tenant-id", default="", help="Azure tenant ID")
@_common_options
@click.pass_context
def add_platform(
    ctx: click.Context,
    name: str,
    platform: str,
    method: str,
    token: str | None,
    ca_cert: str | None,
    username: str,
    password: str | None,
    client_id: str,
    client_secret: str,
    role_arn: str,
    tenant_id: str,
    url: str,
    namespace: str,
    secret_name: str,
    description: str,
) -> None:
    """Add credentials for a platform (Kubernetes, OpenShift, AWS, Azure, GCP)."""
    manager = _manager(ctx)
    opts = PlatformCredentialOptions(
        name=name,
        platform=platform,
        method=method,
        url=url,
        namespace=namespace,
        secret_name=secret_name,
        description=description,
        username=username,
        client_id=client_id,
        client_secret=client_secret,
        aws_role_arn=role_arn,
        azure_tenant_id=tenant_id,
        azure_client_id=client_id,
    )

    if ca_cert and Method(method) is not Method.SERVICE_ACCOUNT:
        raise click.UsageError("--ca-cert is only used with service-account authentication")

    match Method(method):
        case Method.TOKEN | Method.SERVICE_ACCOUNT:
            opts.token = _token_required(resolve_token(token, platform), platform)
            if ca_cert:
                with _auth_errors():
                    opts.ca_cert = read_text_file(ca_cert, "CA certificate")
        case Method.BASIC:
            if not username:
                raise click.UsageError("--username is required for basic authentication")
            opts.password = _secret_value(password, "password", "--password")

    with _auth_errors():
        credential = manager.add_platform_credential(opts)

    console.success(f"Platform credential {console.highlight(credential.name)} added successfully")
    console.step(f"Platform: {credential.provider}, Method: {credential.method.value}")


@add.command("registry")
@click.argument("name")
@click.option("--url", required=True, help="registry URL")
@click.option("--username", required=True, help="registry username")
@click.option("--password", help="registry password (prompted if omitted)")
@click.option("--registry", default="", help="registry host name (defaults to the URL)")
@click.option("--namespace", default="", help="namespace for generated secrets")
@click.option("--secret-name", default="", help="name for generated secrets")
@click.option("--description", default="", help="free-text description")
@click.pass_context
def add_registry(
    ctx: click.Context,
    name: str,
    url: str,
    username: str,
    password: str | None,
    registry: str,
    namespace: str,
    secret_name: str,
    description: str,
) -> None:
    """Add container registry credentials."""
    manager = _manager(ctx)
    opts = RegistryCredentialOptions(
        name=name,
        registry=registry,
        url=url,
        username=username,
        password=_secret_value(password, "registry password", "--password"),
        namespace=namespace,
        secret_name=secret_name,
        description=description,
    )

    with _auth_errors():
        credential = manager.add_registry_credential(opts)

    console.success(f"Registry credential {console.highlight(credential.name)} added successfully")
    console.step(f"URL: {credential.metadata.url}")


@cli.command("list")
@click.argument("cred_type", required=False, type=click.Choice([t.value for t in CredentialType]))
@click.pass_context
def list_credentials(ctx: click.Context, cred_type: str | None) -> None:
    """List credentials, optionally filtered by type."""
    manager = _manager(ctx)
    with _auth_errors():
        credentials = manager.list_credentials(cred_type)

    if not credentials:
        console.info("No credentials found")
        return
    console.credentials_table(credentials)


def _display_value(value: str) -> str:
    if "\n" in value.strip():
        return f"(multi-line, {len(value)} characters)"
    return mask_credential(value)


def _describe(credential: Credential) -> dict[str, str]:
    metadata = credential.metadata
    items = {
        "Name": credential.name,
        "Type": credential.type.value,
        "Provider": credential.provider,
        "Method": credential.method.value,
        "URL": metadata.url or "-",
        "Namespace": metadata.namespace or "-",
        "Secret name": metadata.secret_name or "-",
        "Created": credential.created_at.isoformat(timespec="seconds"),
    }
    if metadata.expires_at:
        items["Expires"] = metadata.expires_at.isoformat(timespec="seconds")
    for key, value in credential.data.to_dict().items():
        items[key] = _display_value(value)
    return items


@cli.command()
@click.argument("name")
@click.pass_context
def show(ctx: click.Context, name: str) -> None:
    """Show a credential with its secret values masked."""
    manager = _manager(ctx)
    with _auth_errors():
        credential = manager.get_credential(name)

    console.summary_panel(f"Credential {credential.name}", _describe(credential))
    if credential.is_expired():
        console.warning("This credential has expired")


@cli.command("test")
@click.argument("name")
@click.pass_context
def test_command(ctx: click.Context, name: str) -> None:
    """Check that a stored credential is well formed (no network access)."""
    manager = _manager(ctx)
    console.action(f"Testing credential {console.highlight(name)}...")
    with _auth_errors():
        result = manager.test_credential(name)

    console.show_test_result(result)
    if not result.success:
        sys.exit(1)


@cli.command()
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="do not ask for confirmation")
@click.pass_context
def delete(ctx: click.Context, name: str, yes: bool) -> None:
    """Delete a stored credential."""
    manager = _manager(ctx)
    if not yes:
        if not prompts.can_prompt():
            raise click.UsageError("use --yes to delete without confirmation")
        if not prompts.confirm_delete(name):
            console.warning("Deletion cancelled.")
            raise click.Abort()

    with _auth_errors():
        manager.delete_credential(name)

    console.success(f"Credential {console.highlight(name)} deleted successfully")


@cli.command()
@click.argument("name")
@click.option(
    "--format",
    "output_format",
    default="k8s",
    show_default=True,
    type=click.Choice(["k8s", "kubernetes", "argocd", "flux"]),
    help="manifest flavour",
)
@click.option("--namespace", default="", help="namespace for ArgoCD/Flux secrets")
@click.pass_context
def generate(ctx: click.Context, name: str, output_format: str, namespace: str) -> None:
    """Generate a Kubernetes Secret manifest from a stored credential."""
    manager = _manager(ctx)
    ic(name, output_format)

    with _auth_errors():
        match output_format:
            case "argocd":
                manifest = manager.generate_argocd_repo_secret(name, namespace or ARGOCD_NAMESPACE)
            case "flux":
                manifest = manager.generate_flux_git_repository_secret(name, namespace or FLUX_NAMESPACE)
            case _:
                manifest = manager.generate_kubernetes_secret(name)

    click.echo(manifest, nl=False)


if __name__ == "__main__":
    cli()
