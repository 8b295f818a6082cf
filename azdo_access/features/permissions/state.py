"""
Per-bit classification of requested permissions as allowed, denied or unset.
"""
from typing import List, Optional, Sequence

from azdo_access.features.permissions.schemas import AccessControlEntry, ActionDefinition, PermissionState
from azdo_access.utils import value_or_default


ALLOW = "Allow"
ALLOW_INHERITED = "Allow (inherited)"
DENY = "Deny"
DENY_INHERITED = "Deny (inherited)"
NOT_SET = "Not set"


def classify_permission_states(
    actions: Sequence[ActionDefinition],
    requested: int,
    allow: int,
    deny: int,
    effective_allow: Optional[int] = None,
    effective_deny: Optional[int] = None,
) -> List[PermissionState]:
    """
    Classify every catalogue action whose bit lies in ``requested``.

    The inherited part of an effective mask is ``effective XOR explicit``,
    valid because the service guarantees explicit bits are a subset of the
    effective ones. Missing effective values fall back to the explicit
    values, so nothing is reported as inherited. Deny wins over Allow.
    Results follow catalogue order.
    """
    if requested == 0:
        return []

    effective_allow = value_or_default(effective_allow, allow)
    effective_deny = value_or_default(effective_deny, deny)
    inherited_allow = effective_allow ^ allow
    inherited_deny = effective_deny ^ deny

    results = []
    for action in actions:
        bit = value_or_default(action.bit, 0)
        if bit == 0 or requested & bit != bit:
            continue

        if effective_deny & bit == bit:
            state = DENY_INHERITED if inherited_deny & bit == bit else DENY
        elif effective_allow & bit == bit:
            state = ALLOW_INHERITED if inherited_allow & bit == bit else ALLOW
        else:
            state = NOT_SET

        results.append(PermissionState(
            bit=bit,
            name=(action.name or "").strip() or None,
            display_name=(action.display_name or "").strip() or None,
            effective=state,
        ))

    return results


def summarize_entry(
    actions: Sequence[ActionDefinition],
    requested: int,
    ace: Optional[AccessControlEntry],
) -> List[PermissionState]:
    """Classify ``requested`` against an ACE (expected to be a clone)."""
    if ace is None:
        return []
    info = ace.extended_info
    return classify_permission_states(
        actions,
        requested,
        allow=value_or_default(ace.allow, 0),
        deny=value_or_default(ace.deny, 0),
        effective_allow=info.effective_allow if info else None,
        effective_deny=info.effective_deny if info else None,
    )
