"""Shared helpers for building and rendering secret manifests."""

from typing import Any

import yaml

from gitopsi_auth.exceptions import SerializationError

MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"


class _ManifestDumper(yaml.SafeDumper):
    """SafeDumper that renders multi-line values (keys, certs) as literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_str(data)


_ManifestDumper.add_representer(str, _represent_str)


def secret_manifest(
    *,
    name: str,
    namespace: str,
    labels: dict[str, str],
    secret_type: str,
    string_data: dict[str, str],
    annotations: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Build a v1 Secret document.

    Args:
        name: Secret name.
        namespace: Secret namespace.
        labels: Labels for the secret metadata.
        secret_type: Kubernetes secret type (e.g. ``Opaque``).
        string_data: Unencoded secret values.
        annotations: Optional annotations for the secret metadata.

    Returns:
        The manifest as a plain dictionary.

    """
    metadata: dict[str, Any] = {"name": name, "namespace": namespace, "labels": dict(labels)}
    if annotations:
        metadata["annotations"] = dict(annotations)

    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": metadata,
        "type": secret_type,
        "stringData": dict(string_data),
    }


def to_yaml(document: dict[str, Any]) -> str:
    """Render a manifest as YAML text.

    Raises:
        SerializationError: If the document cannot be represented.

    """
    try:
        return yaml.dump(document, Dumper=_ManifestDumper, sort_keys=True, default_flow_style=False)
    except yaml.YAMLError as err:
        raise SerializationError(f"Failed to render manifest: {err}") from err
