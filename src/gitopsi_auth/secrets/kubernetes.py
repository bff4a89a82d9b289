"""Generic Kubernetes Secret generation.

This module turns a stored credential into a plain v1 Secret manifest.
The secret type and keys depend on the credential category and method;
registry credentials become ``kubernetes.io/dockerconfigjson`` secrets.
"""

import base64
import json

from gitopsi_auth.config import DEFAULT_MANAGED_BY
from gitopsi_auth.exceptions import SerializationError
from gitopsi_auth.models import (
    BasicAuth,
    Credential,
    CredentialType,
    OIDCAuth,
    ServiceAccountAuth,
    SSHKeyAuth,
    TokenAuth,
)
from gitopsi_auth.secrets.rendering import MANAGED_BY_LABEL, secret_manifest, to_yaml

DEFAULT_NAMESPACE = "default"
DEFAULT_REGISTRY_URL = "https://index.docker.io/v1/"

SECRET_TYPE_OPAQUE = "Opaque"
SECRET_TYPE_SSH_AUTH = "kubernetes.io/ssh-auth"
SECRET_TYPE_BASIC_AUTH = "kubernetes.io/basic-auth"
SECRET_TYPE_DOCKER_CONFIG_JSON = "kubernetes.io/dockerconfigjson"


def dockerconfigjson(url: str, username: str, password: str) -> str:
    """Build a compact dockerconfigjson document.

    Args:
        url: Registry URL; Docker Hub is used when empty.
        username: Registry username.
        password: Registry password.

    Returns:
        The JSON text with a single entry under ``auths``.

    Raises:
        SerializationError: If the document cannot be encoded.

    """
    auth = base64.b64encode(f"{username}:{password}".encode()).decode()
    config = {
        "auths": {
            url or DEFAULT_REGISTRY_URL: {
                "username": username,
                "password": password,
                "auth": auth,
            }
        }
    }
    try:
        return json.dumps(config, separators=(",", ":"), sort_keys=True)
    except (TypeError, ValueError) as err:
        raise SerializationError(f"Failed to encode docker config: {err}") from err


def _git_secret_data(credential: Credential) -> tuple[str, dict[str, str]]:
    match credential.data:
        case SSHKeyAuth(private_key=private_key, known_hosts=known_hosts):
            data = {"ssh-privatekey": private_key}
            if known_hosts:
                data["known_hosts"] = known_hosts
            return SECRET_TYPE_SSH_AUTH, data
        case TokenAuth(token=token, username=username):
            return SECRET_TYPE_OPAQUE, {"username": username, "password": token}
        case BasicAuth(username=username, password=password):
            return SECRET_TYPE_BASIC_AUTH, {"username": username, "password": password}
        case _:
            return SECRET_TYPE_OPAQUE, {}


def _platform_secret_data(credential: Credential) -> tuple[str, dict[str, str]]:
    match credential.data:
        case TokenAuth(token=token):
            return SECRET_TYPE_OPAQUE, {"token": token}
        case ServiceAccountAuth(token=token, ca_cert=ca_cert):
            data = {"token": token}
            if ca_cert:
                data["ca.crt"] = ca_cert
            return SECRET_TYPE_OPAQUE, data
        case OIDCAuth(client_id=client_id, client_secret=client_secret):
            data = {"client-id": client_id}
            if client_secret:
                data["client-secret"] = client_secret
            return SECRET_TYPE_OPAQUE, data
        case BasicAuth(username=username, password=password):
            return SECRET_TYPE_OPAQUE, {"username": username, "password": password}
        case _:
            return SECRET_TYPE_OPAQUE, {}


def _registry_secret_data(credential: Credential) -> tuple[str, dict[str, str]]:
    match credential.data:
        case BasicAuth(username=username, password=password):
            config = dockerconfigjson(credential.metadata.url, username, password)
            return SECRET_TYPE_DOCKER_CONFIG_JSON, {".dockerconfigjson": config}
        case _:
            return SECRET_TYPE_DOCKER_CONFIG_JSON, {}


def kubernetes_secret(credential: Credential, managed_by: str = DEFAULT_MANAGED_BY) -> str:
    """Render a credential as a Kubernetes Secret.

    The namespace defaults to ``default`` and the secret name to the
    credential name. Stored labels are merged with the managed-by label;
    the credential itself is not modified.

    Args:
        credential: The credential to render.
        managed_by: Value of the ``app.kubernetes.io/managed-by`` label.

    Returns:
        The Secret manifest as YAML text.

    Raises:
        SerializationError: If the manifest cannot be rendered.

    """
    metadata = credential.metadata
    labels = {**metadata.labels, MANAGED_BY_LABEL: managed_by}

    match credential.type:
        case CredentialType.GIT:
            secret_type, string_data = _git_secret_data(credential)
        case CredentialType.PLATFORM:
            secret_type, string_data = _platform_secret_data(credential)
        case CredentialType.REGISTRY:
            secret_type, string_data = _registry_secret_data(credential)

    manifest = secret_manifest(
        name=metadata.secret_name or credential.name,
        namespace=metadata.namespace or DEFAULT_NAMESPACE,
        labels=labels,
        secret_type=secret_type,
        string_data=string_data,
        annotations=metadata.annotations,
    )
    return to_yaml(manifest)
