"""ArgoCD repository secret generation."""

from gitopsi_auth.config import DEFAULT_MANAGED_BY
from gitopsi_auth.exceptions import ValidationError
from gitopsi_auth.models import BasicAuth, Credential, CredentialType, SSHKeyAuth, TokenAuth
from gitopsi_auth.secrets.rendering import MANAGED_BY_LABEL, secret_manifest, to_yaml

ARGOCD_NAMESPACE = "argocd"
ARGOCD_SECRET_TYPE_LABEL = "argocd.argoproj.io/secret-type"

# Username sent alongside a token when none was stored
DEFAULT_TOKEN_USERNAME = "git"


def require_git(credential: Credential) -> None:
    """Raise ValidationError unless the credential is a Git credential."""
    if credential.type is not CredentialType.GIT:
        raise ValidationError(
            f"credential {credential.name!r} must be of type 'git', got {credential.type.value!r}",
            field="type",
        )


def argocd_repo_secret(
    credential: Credential,
    namespace: str = ARGOCD_NAMESPACE,
    managed_by: str = DEFAULT_MANAGED_BY,
) -> str:
    """Render a Git credential as an ArgoCD repository secret.

    Args:
        credential: A Git credential.
        namespace: Namespace ArgoCD runs in.
        managed_by: Value of the ``app.kubernetes.io/managed-by`` label.

    Returns:
        The Secret manifest as YAML text.

    Raises:
        ValidationError: If the credential is not a Git credential.
        SerializationError: If the manifest cannot be rendered.

    """
    require_git(credential)

    string_data = {"type": "git", "url": credential.metadata.url}
    match credential.data:
        case SSHKeyAuth(private_key=private_key):
            string_data["sshPrivateKey"] = private_key
        case TokenAuth(token=token, username=username):
            string_data["username"] = username or DEFAULT_TOKEN_USERNAME
            string_data["password"] = token
        case BasicAuth(username=username, password=password):
            string_data["username"] = username
            string_data["password"] = password

    manifest = secret_manifest(
        name=credential.metadata.secret_name or f"repo-{credential.name}",
        namespace=namespace,
        labels={ARGOCD_SECRET_TYPE_LABEL: "repository", MANAGED_BY_LABEL: managed_by},
        secret_type="Opaque",
        string_data=string_data,
    )
    return to_yaml(manifest)
