"""
Turns a subject token into a canonical graph Subject.

Descriptors go straight to the graph. Everything else goes through the
identity resolver first; the graph lookup is then keyed by the identity's
subject descriptor (fetched from its storage key when missing). When the
graph has no record, a minimal Subject is synthesized from the identity.
"""
from typing import Optional

from azdo_access.core.errors import (
    AzdoAccessError,
    DependencyFailureError,
    InvalidInputError,
    NotFoundError,
)
from azdo_access.core.interfaces import GraphDirectory, IdentityDirectory
from azdo_access.features.identities.classifier import classify_subject
from azdo_access.features.identities.resolver import resolve_identity, subject_kind_for
from azdo_access.features.identities.schemas import Subject, SubjectShape
from azdo_access.utils import get_logger


log = get_logger(__name__)

HTTP_NOT_FOUND = 404


def lookup_graph_subject(graph: GraphDirectory, descriptor: str) -> Optional[Subject]:
    """
    Look up a single graph subject by descriptor.

    A 404 from the graph service means "no match" and returns None. The
    result is matched by exact key, then by the subject's own descriptor,
    then case-insensitively, since the service may normalize case.
    """
    descriptor = (descriptor or "").strip()
    if not descriptor:
        return None

    try:
        result = graph.lookup_subjects([descriptor])
    except DependencyFailureError as e:
        if e.status_code == HTTP_NOT_FOUND:
            log.debug(f"graph lookup for {descriptor!r} returned 404")
            return None
        raise DependencyFailureError(
            f"failed to lookup descriptor {descriptor!r}: {e.message}", status_code=e.status_code
        ) from e
    except Exception as e:
        raise DependencyFailureError(f"failed to lookup descriptor {descriptor!r}: {e}") from e

    if not result:
        return None

    if descriptor in result:
        return result[descriptor]

    for subject in result.values():
        if subject.descriptor == descriptor:
            return subject
    for subject in result.values():
        if subject.descriptor and subject.descriptor.lower() == descriptor.lower():
            return subject

    return None


def _descriptor_from_storage_key(graph: GraphDirectory, token: str, storage_key: Optional[str]) -> str:
    if not storage_key:
        raise NotFoundError(f"identity for {token!r} is missing descriptor and storage key")

    try:
        descriptor = graph.get_descriptor(storage_key)
    except AzdoAccessError as e:
        raise DependencyFailureError(
            f"failed to resolve descriptor from storage key: {e.message}",
            status_code=getattr(e, "status_code", None),
        ) from e
    except Exception as e:
        raise DependencyFailureError(f"failed to resolve descriptor from storage key: {e}") from e

    descriptor = (descriptor or "").strip()
    if not descriptor:
        raise NotFoundError(f"descriptor lookup returned empty result for {token!r}")
    return descriptor


def resolve_subject(
    directory: IdentityDirectory,
    graph: GraphDirectory,
    token: str,
    *,
    fail_fast: bool = True,
) -> Subject:
    """
    Resolve a member identifier (descriptor, email, principal name, SID...)
    into a graph subject.

    Raises:
        InvalidInputError: token is empty
        NotFoundError: nothing matched, or no descriptor could be obtained
        AmbiguousIdentityError: the identity search was ambiguous
        DependencyFailureError: a collaborator failed
    """
    token = (token or "").strip()
    if not token:
        raise InvalidInputError("member must not be empty")

    if classify_subject(token) == SubjectShape.DESCRIPTOR:
        log.debug(f"attempting graph subject lookup for descriptor {token!r}")
        subject = lookup_graph_subject(graph, token)
        if subject is None:
            raise NotFoundError(f"descriptor {token!r} was not found")
        log.debug(
            f"resolved member via graph descriptor lookup descriptor={token!r} "
            f"displayName={subject.display_name!r} subjectKind={subject.subject_kind!r}"
        )
        return subject

    identity = resolve_identity(directory, token, fail_fast=fail_fast)
    if identity is None:
        raise NotFoundError(f"no identity found for {token!r}")

    descriptor = (identity.subject_descriptor or "").strip()
    if not descriptor:
        descriptor = _descriptor_from_storage_key(graph, token, identity.id)

    subject = lookup_graph_subject(graph, descriptor)
    if subject is not None:
        return subject

    kind = subject_kind_for(identity)
    log.info(f"graph has no subject for {descriptor!r}; synthesizing {kind} from identity")
    return Subject(
        descriptor=descriptor,
        display_name=identity.provider_display_name or "",
        subject_kind=kind,
    )
