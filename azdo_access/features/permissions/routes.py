"""
Permission translation API routes.

Provides endpoints for namespace catalogues, bitmask encoding and decoding,
and per-subject views of the ACE stored on a security token.
"""
from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Query

from azdo_access.core import config
from azdo_access.core.errors import NotFoundError
from azdo_access.core.interfaces import IdentityDirectory, SecurityService
from azdo_access.features.identities.dependencies import get_identity_directory
from azdo_access.features.identities.resolver import resolve_identity
from azdo_access.features.permissions.ace import (
    acl_has_descriptor,
    describe_entry_for_descriptor,
    find_entry_for_descriptor,
    list_entries,
)
from azdo_access.features.permissions.codec import (
    describe_bitmask,
    describe_bitmask_labels,
    encode_permission_bits,
    format_bitmask,
    split_permission_tokens,
)
from azdo_access.features.permissions.dependencies import get_namespace, get_security_service
from azdo_access.features.permissions.namespaces import list_namespaces, namespace_actions, summarize_namespace
from azdo_access.features.permissions.schemas import (
    AccessControlEntryView,
    AccessControlList,
    BitmaskResponse,
    DecodeRequest,
    EncodeRequest,
    ExplicitEntryResponse,
    NamespaceSummary,
    PermissionState,
    PermissionStateRequest,
    SecurityNamespace,
    SubjectTokenRequest,
)
from azdo_access.features.permissions.state import classify_permission_states, summarize_entry
from azdo_access.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


def _identity_descriptor(directory: IdentityDirectory, subject: str) -> str:
    identity = resolve_identity(directory, subject, fail_fast=not config.IDENTITY_SEARCH_EXHAUSTIVE)
    if identity is None:
        raise NotFoundError(f"no identity found for {subject!r}")
    descriptor = (identity.descriptor or "").strip()
    if not descriptor:
        raise NotFoundError(f"identity for {subject!r} has no descriptor")
    return descriptor


def _load_acls(
    security: SecurityService,
    namespace: SecurityNamespace,
    token: Optional[str],
    descriptor: Optional[str],
    recurse: bool = False,
) -> List[AccessControlList]:
    log.debug(
        f"querying ACLs namespace={namespace.namespace_id} token={token!r} "
        f"descriptor={descriptor!r} recurse={recurse}"
    )
    return security.query_access_control_lists(
        namespace.namespace_id,
        token=token,
        descriptors=descriptor,
        include_extended_info=True,
        recurse=recurse,
    )


# ============================================================================
# Namespace Routes
# ============================================================================

@router.get("/namespaces", response_model=List[NamespaceSummary], response_model_exclude_none=True)
def list_all_namespaces(
    security: Annotated[SecurityService, Depends(get_security_service)],
    local_only: Annotated[bool, Query(alias="localOnly")] = False,
):
    """List every namespace, sorted by name."""
    return list_namespaces(security, local_only=local_only)


@router.get("/namespaces/{namespace_id}", response_model=NamespaceSummary, response_model_exclude_none=True)
def show_namespace(namespace: Annotated[SecurityNamespace, Depends(get_namespace)]):
    """Describe a namespace and its actions with hex-formatted masks."""
    return summarize_namespace(namespace)


# ============================================================================
# Bitmask Routes
# ============================================================================

@router.post("/namespaces/{namespace_id}/encode", response_model=BitmaskResponse)
def encode(
    request: EncodeRequest,
    namespace: Annotated[SecurityNamespace, Depends(get_namespace)],
):
    """Combine hex, decimal and action-name tokens into one bitmask."""
    actions = namespace_actions(namespace)
    bitmask = encode_permission_bits(actions, split_permission_tokens(request.permissions))
    return BitmaskResponse(
        bitmask=bitmask,
        hex=format_bitmask(bitmask),
        description=describe_bitmask(actions, bitmask),
    )


@router.post("/namespaces/{namespace_id}/decode", response_model=BitmaskResponse)
def decode(
    request: DecodeRequest,
    namespace: Annotated[SecurityNamespace, Depends(get_namespace)],
):
    """Describe a bitmask with the namespace's action labels."""
    actions = namespace_actions(namespace)
    labels = describe_bitmask_labels(actions, request.bitmask)
    return BitmaskResponse(
        bitmask=request.bitmask,
        hex=format_bitmask(request.bitmask),
        description=", ".join(labels),
        labels=labels,
    )


# ============================================================================
# Access Control Entry Routes
# ============================================================================

@router.post("/namespaces/{namespace_id}/state", response_model=List[PermissionState])
def permission_state(
    request: PermissionStateRequest,
    namespace: Annotated[SecurityNamespace, Depends(get_namespace)],
    directory: Annotated[IdentityDirectory, Depends(get_identity_directory)],
    security: Annotated[SecurityService, Depends(get_security_service)],
):
    """
    Classify each requested permission for a subject on a token.

    A subject without an entry on the token reports every requested bit
    as "Not set".
    """
    actions = namespace_actions(namespace)
    requested = encode_permission_bits(actions, split_permission_tokens(request.permissions))
    descriptor = _identity_descriptor(directory, request.subject)

    ace = find_entry_for_descriptor(_load_acls(security, namespace, request.token, descriptor), descriptor)
    if ace is None:
        log.info(f"no ACE for {descriptor!r} on token {request.token!r}")
        return classify_permission_states(actions, requested, allow=0, deny=0)
    return summarize_entry(actions, requested, ace)


@router.post(
    "/namespaces/{namespace_id}/entry",
    response_model=AccessControlEntryView,
    response_model_exclude_none=True,
)
def show_entry(
    request: SubjectTokenRequest,
    namespace: Annotated[SecurityNamespace, Depends(get_namespace)],
    directory: Annotated[IdentityDirectory, Depends(get_identity_directory)],
    security: Annotated[SecurityService, Depends(get_security_service)],
):
    """Show the subject's ACE on a token as action labels."""
    descriptor = _identity_descriptor(directory, request.subject)
    acls = _load_acls(security, namespace, request.token, descriptor)
    view = describe_entry_for_descriptor(acls, descriptor, namespace_actions(namespace))
    if view is None:
        raise NotFoundError(f"no access control entry for {request.subject!r} on token {request.token!r}")
    return view


@router.post("/namespaces/{namespace_id}/explicit", response_model=ExplicitEntryResponse)
def explicit_entry(
    request: SubjectTokenRequest,
    namespace: Annotated[SecurityNamespace, Depends(get_namespace)],
    directory: Annotated[IdentityDirectory, Depends(get_identity_directory)],
    security: Annotated[SecurityService, Depends(get_security_service)],
):
    """Check whether the subject still holds explicit permissions on a token."""
    descriptor = _identity_descriptor(directory, request.subject)
    acls = _load_acls(security, namespace, request.token, descriptor)
    return ExplicitEntryResponse(
        token=request.token,
        descriptor=descriptor,
        explicit=acl_has_descriptor(acls, descriptor),
    )


@router.get(
    "/namespaces/{namespace_id}/entries",
    response_model=List[AccessControlEntryView],
    response_model_exclude_none=True,
)
def list_namespace_entries(
    namespace: Annotated[SecurityNamespace, Depends(get_namespace)],
    directory: Annotated[IdentityDirectory, Depends(get_identity_directory)],
    security: Annotated[SecurityService, Depends(get_security_service)],
    token: Optional[str] = None,
    recurse: bool = False,
    subject: Optional[str] = None,
):
    """
    List the ACEs of a namespace as action labels.

    ``token`` narrows the listing to one securable resource and ``recurse``
    adds its children. ``subject`` keeps only that subject's entries.
    """
    token = (token or "").strip() or None
    descriptor = None
    if subject and subject.strip():
        descriptor = _identity_descriptor(directory, subject.strip())

    acls = _load_acls(security, namespace, token, descriptor, recurse=recurse)
    return list_entries(acls, namespace_actions(namespace), descriptor=descriptor)
