"""
Clone-on-read helpers for access control entries.

ACL responses are shared between call sites (delete verification, list,
show); every helper here hands out fresh copies so a caller can mutate its
result without touching the collaborator's data.
"""
from typing import Iterable, List, Optional, Sequence

from azdo_access.features.permissions.codec import describe_bitmask_labels
from azdo_access.features.permissions.schemas import (
    AccessControlEntry,
    AccessControlEntryView,
    AccessControlList,
    AceExtendedInfo,
    ActionDefinition,
)
from azdo_access.utils import get_logger


log = get_logger(__name__)


def clone_extended_info(src: Optional[AceExtendedInfo]) -> Optional[AceExtendedInfo]:
    if src is None:
        return None
    return AceExtendedInfo(
        effective_allow=src.effective_allow,
        effective_deny=src.effective_deny,
        inherited_allow=src.inherited_allow,
        inherited_deny=src.inherited_deny,
    )


def clone_access_control_entry(src: Optional[AccessControlEntry]) -> Optional[AccessControlEntry]:
    """Return a deep copy of an ACE, including its extended info. The descriptor is trimmed."""
    if src is None:
        return None
    return AccessControlEntry(
        descriptor=src.descriptor.strip() if src.descriptor is not None else None,
        allow=src.allow,
        deny=src.deny,
        extended_info=clone_extended_info(src.extended_info),
    )


def _match(acl: AccessControlList, descriptor: str) -> Optional[AccessControlEntry]:
    aces = acl.aces_dictionary
    if not aces:
        return None
    if descriptor in aces:
        return aces[descriptor]
    for key, ace in aces.items():
        if key.strip().lower() == descriptor.lower():
            return ace
    return None


def find_entry_for_descriptor(
    acls: Optional[Iterable[AccessControlList]],
    descriptor: str,
) -> Optional[AccessControlEntry]:
    """
    Return a clone of the ACE keyed by ``descriptor``.

    Each ACL is checked for the exact key first, then for a trimmed
    case-insensitive key match.
    """
    descriptor = (descriptor or "").strip()
    if not descriptor:
        return None
    for acl in acls or []:
        ace = _match(acl, descriptor)
        if ace is not None:
            return clone_access_control_entry(ace)
    return None


def acl_has_descriptor(acls: Optional[Iterable[AccessControlList]], descriptor: str) -> bool:
    """
    Check whether ``descriptor`` still holds explicit permissions.

    Entries whose allow and deny are both zero or absent do not count, the
    service leaves those behind after a removal.
    """
    descriptor = (descriptor or "").strip()
    for acl in acls or []:
        for key, ace in (acl.aces_dictionary or {}).items():
            candidate = (ace.descriptor or key).strip()
            if candidate != descriptor:
                continue
            if ace.allow or ace.deny:
                return True
            log.debug(f"skipping empty ACL entry for descriptor {descriptor!r} allow={ace.allow} deny={ace.deny}")
    return False


def build_entry_view(
    acl: AccessControlList,
    ace: AccessControlEntry,
    actions: Sequence[ActionDefinition],
    descriptor: Optional[str] = None,
) -> AccessControlEntryView:
    """Describe all six masks of an ACE as sorted action labels."""
    ace = clone_access_control_entry(ace)
    info = ace.extended_info or AceExtendedInfo()
    return AccessControlEntryView(
        token=acl.token,
        descriptor=descriptor or ace.descriptor,
        inherit_permissions=acl.inherit_permissions,
        allow=describe_bitmask_labels(actions, ace.allow),
        deny=describe_bitmask_labels(actions, ace.deny),
        effective_allow=describe_bitmask_labels(actions, info.effective_allow),
        effective_deny=describe_bitmask_labels(actions, info.effective_deny),
        inherited_allow=describe_bitmask_labels(actions, info.inherited_allow),
        inherited_deny=describe_bitmask_labels(actions, info.inherited_deny),
    )


def describe_entry_for_descriptor(
    acls: Optional[Iterable[AccessControlList]],
    descriptor: str,
    actions: Sequence[ActionDefinition],
) -> Optional[AccessControlEntryView]:
    """Return the labelled view of the first ACL holding an entry for ``descriptor``."""
    descriptor = (descriptor or "").strip()
    if not descriptor:
        return None
    for acl in acls or []:
        ace = _match(acl, descriptor)
        if ace is not None:
            return build_entry_view(acl, ace, actions, descriptor=descriptor)
    return None


def list_entries(
    acls: Optional[Iterable[AccessControlList]],
    actions: Sequence[ActionDefinition],
    descriptor: Optional[str] = None,
) -> List[AccessControlEntryView]:
    """
    Return labelled views of the ACEs across ``acls``.

    With a descriptor, each ACL contributes at most the entry for that
    descriptor and ACLs without one are skipped. Without, every entry is
    listed under its own descriptor, falling back to its dictionary key.
    """
    descriptor = (descriptor or "").strip()
    views = []
    for acl in acls or []:
        if not acl.aces_dictionary:
            continue

        if descriptor:
            ace = _match(acl, descriptor)
            if ace is None:
                log.debug(f"skipping ACL for token={acl.token!r} without matching descriptor")
                continue
            views.append(build_entry_view(acl, ace, actions, descriptor=descriptor))
            continue

        for key, ace in acl.aces_dictionary.items():
            views.append(build_entry_view(acl, ace, actions, descriptor=(ace.descriptor or "").strip() or key))

    return views
