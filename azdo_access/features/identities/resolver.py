"""
Resolution of a raw subject token into exactly one directory identity.

Implements:
- SID and descriptor lookups (exactly one match or an error)
- Free-text search across ordered filters
- Fail-fast ambiguity handling, with an opt-in exhaustive mode
"""
from typing import Dict, List, Optional

from azdo_access.core.errors import (
    AmbiguousIdentityError,
    AzdoAccessError,
    DependencyFailureError,
    InvalidInputError,
    NotFoundError,
)
from azdo_access.core.interfaces import IdentityDirectory
from azdo_access.features.identities.classifier import classify_subject
from azdo_access.features.identities.schemas import DirectoryIdentity, SubjectShape
from azdo_access.features.identities.search import determine_search_filters
from azdo_access.utils import get_logger


log = get_logger(__name__)

IDENTITY_DESCRIPTOR_PREFIX = "Microsoft.TeamFoundation.Identity;"
QUERY_MEMBERSHIP_NONE = "None"


def subject_kind_for(identity: DirectoryIdentity) -> str:
    """Graph subject kind for an identity: containers are groups."""
    if identity.is_container:
        return "Group"
    return "User"


def _ambiguous(token: str) -> AmbiguousIdentityError:
    return AmbiguousIdentityError(
        f"multiple identities found for {token!r}; {AmbiguousIdentityError.hint}"
    )


def _read(directory: IdentityDirectory, token: str, **kwargs) -> List[DirectoryIdentity]:
    try:
        return list(directory.read_identities(query_membership=QUERY_MEMBERSHIP_NONE, **kwargs) or [])
    except AzdoAccessError as e:
        raise DependencyFailureError(
            f"failed to resolve member {token!r}: {e.message}",
            status_code=getattr(e, "status_code", None),
        ) from e
    except Exception as e:
        raise DependencyFailureError(f"failed to resolve member {token!r}: {e}") from e


def _single(token: str, identities: List[DirectoryIdentity]) -> DirectoryIdentity:
    if not identities:
        raise NotFoundError(f"identity {token!r} not found")
    if len(identities) > 1:
        raise _ambiguous(token)
    return identities[0]


def _identity_key(identity: DirectoryIdentity) -> str:
    # Records with no identifier at all are never considered the same identity
    return identity.id or identity.subject_descriptor or identity.descriptor or f"object:{id(identity)}"


def resolve_identity(
    directory: IdentityDirectory,
    token: str,
    *,
    fail_fast: bool = True,
) -> Optional[DirectoryIdentity]:
    """
    Resolve a subject token to one directory identity.

    Args:
        directory: Identity Directory collaborator
        token: Email, principal name, SID, alias, group name or descriptor
        fail_fast: Stop at the first filter that returns anything and fail
            there if it returned more than one identity. When False, every
            filter is tried and identities are de-duplicated before deciding.

    Returns:
        The identity, or None when a free-text search matched nothing

    Raises:
        InvalidInputError: token is empty
        NotFoundError: SID or descriptor matched nothing
        AmbiguousIdentityError: a lookup returned more than one identity
        DependencyFailureError: the directory call failed
    """
    token = (token or "").strip()
    shape = classify_subject(token)

    if shape == SubjectShape.EMPTY:
        raise InvalidInputError("member must not be empty")

    if shape == SubjectShape.SID:
        log.debug(f"member {token!r} is a SID")
        descriptor = token if ";" in token else IDENTITY_DESCRIPTOR_PREFIX + token
        return _single(token, _read(directory, token, descriptors=descriptor))

    if shape == SubjectShape.DESCRIPTOR:
        log.debug(f"member {token!r} is a subject descriptor")
        return _single(token, _read(directory, token, subject_descriptors=token))

    found: Dict[str, DirectoryIdentity] = {}
    for search_filter in determine_search_filters(token):
        log.debug(f"resolving member via identity search filter={search_filter} value={token!r}")
        identities = _read(
            directory,
            token,
            search_filter=search_filter,
            filter_value=token,
            include_restricted_visibility=True,
        )
        if not identities:
            continue

        if fail_fast:
            if len(identities) > 1:
                log.warning(f"{len(identities)} identities matched {token!r} via {search_filter}")
                raise _ambiguous(token)
            return identities[0]

        for identity in identities:
            found.setdefault(_identity_key(identity), identity)

    if len(found) > 1:
        log.warning(f"{len(found)} distinct identities matched {token!r} across filters")
        raise _ambiguous(token)
    if found:
        return next(iter(found.values()))

    log.debug(f"no identity matched {token!r}")
    return None
