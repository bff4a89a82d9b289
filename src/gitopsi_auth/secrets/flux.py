"""Flux GitRepository secret generation."""

from gitopsi_auth.config import DEFAULT_MANAGED_BY
from gitopsi_auth.models import BasicAuth, Credential, SSHKeyAuth, TokenAuth
from gitopsi_auth.secrets.argocd import DEFAULT_TOKEN_USERNAME, require_git
from gitopsi_auth.secrets.rendering import MANAGED_BY_LABEL, secret_manifest, to_yaml

FLUX_NAMESPACE = "flux-system"


def flux_git_repository_secret(
    credential: Credential,
    namespace: str = FLUX_NAMESPACE,
    managed_by: str = DEFAULT_MANAGED_BY,
) -> str:
    """Render a Git credential as a secret for a Flux GitRepository.

    SSH credentials use the ``identity``/``identity.pub``/``known_hosts``
    keys Flux expects; token and basic credentials use
    ``username``/``password``.

    Args:
        credential: A Git credential.
        namespace: Namespace the GitRepository lives in.
        managed_by: Value of the ``app.kubernetes.io/managed-by`` label.

    Returns:
        The Secret manifest as YAML text.

    Raises:
        ValidationError: If the credential is not a Git credential.
        SerializationError: If the manifest cannot be rendered.

    """
    require_git(credential)

    string_data: dict[str, str] = {}
    match credential.data:
        case SSHKeyAuth(private_key=private_key, public_key=public_key, known_hosts=known_hosts):
            string_data["identity"] = private_key
            string_data["identity.pub"] = public_key
            if known_hosts:
                string_data["known_hosts"] = known_hosts
        case TokenAuth(token=token, username=username):
            string_data["username"] = username or DEFAULT_TOKEN_USERNAME
            string_data["password"] = token
        case BasicAuth(username=username, password=password):
            string_data["username"] = username
            string_data["password"] = password

    manifest = secret_manifest(
        name=credential.metadata.secret_name or f"flux-git-{credential.name}",
        namespace=namespace,
        labels={MANAGED_BY_LABEL: managed_by},
        secret_type="Opaque",
        string_data=string_data,
    )
    return to_yaml(manifest)
