"""
FastAPI dependencies providing the identity collaborators.

Tests override these through ``app.dependency_overrides``.
"""
from azdo_access.core.client import AzureDevOpsConnection
from azdo_access.core.interfaces import GraphDirectory, IdentityDirectory


def get_identity_directory() -> IdentityDirectory:
    return AzureDevOpsConnection.get_client()


def get_graph_directory() -> GraphDirectory:
    return AzureDevOpsConnection.get_client()
