"""
FastAPI dependencies for the permission routes.

Implements:
- Security service provider
- Namespace loading by id or name from the path
"""
from typing import Annotated
from fastapi import Depends

from azdo_access.core.client import AzureDevOpsConnection
from azdo_access.core.interfaces import SecurityService
from azdo_access.features.permissions.namespaces import find_namespace
from azdo_access.features.permissions.schemas import SecurityNamespace


def get_security_service() -> SecurityService:
    return AzureDevOpsConnection.get_client()


def get_namespace(
    namespace_id: str,
    security: Annotated[SecurityService, Depends(get_security_service)],
) -> SecurityNamespace:
    """
    Load the namespace named in the path.

    Usage:
        @router.get("/namespaces/{namespace_id}")
        def show(namespace: SecurityNamespace = Depends(get_namespace)):
            ...
    """
    return find_namespace(security, namespace_id)
