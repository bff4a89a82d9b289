"""Secret manifest generators.

This package contains pure functions that render stored credentials as
Kubernetes Secret, ArgoCD repository and Flux GitRepository manifests.
"""

from gitopsi_auth.secrets.argocd import ARGOCD_NAMESPACE, argocd_repo_secret
from gitopsi_auth.secrets.flux import FLUX_NAMESPACE, flux_git_repository_secret
from gitopsi_auth.secrets.kubernetes import DEFAULT_NAMESPACE, dockerconfigjson, kubernetes_secret
from gitopsi_auth.secrets.rendering import MANAGED_BY_LABEL, to_yaml

__all__ = [
    # kubernetes
    "DEFAULT_NAMESPACE",
    "dockerconfigjson",
    "kubernetes_secret",
    # argocd
    "ARGOCD_NAMESPACE",
    "argocd_repo_secret",
    # flux
    "FLUX_NAMESPACE",
    "flux_git_repository_secret",
    # rendering
    "MANAGED_BY_LABEL",
    "to_yaml",
]
