"""Kubernetes API client and its factory."""

from kubewire.client.client import KubernetesClient
from kubewire.client.factory import ClientFactory, build_ssl_context

__all__ = ["ClientFactory", "KubernetesClient", "build_ssl_context"]
