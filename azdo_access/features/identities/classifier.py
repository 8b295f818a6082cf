"""
Shape detection for raw subject tokens.

A descriptor is ``<SubjectType>.<Identifier>`` where the identifier is
base64 without padding ('+' -> '-', '/' -> '_'). A SID is ``S-`` followed
by at least three dash-separated integer groups, optionally qualified
with an identity type (``Microsoft.TeamFoundation.Identity;S-1-...``).

classify_subject is the one place that decides the order of checks; call
sites must not re-derive it from the two predicates.
"""
import re

from azdo_access.features.identities.schemas import SubjectShape

DESCRIPTOR_PATTERN = re.compile(r"^[A-Za-z0-9]+\.[A-Za-z0-9_-]+$")
SID_PATTERN = re.compile(r"^(?:[A-Za-z0-9.]+;)?[Ss]-[0-9]+(?:-[0-9]+){2,}$")


def is_security_identifier(token: str) -> bool:
    token = (token or "").strip()
    if not token:
        return False
    return SID_PATTERN.match(token) is not None


def is_descriptor(token: str) -> bool:
    token = (token or "").strip()
    if not token:
        return False
    return DESCRIPTOR_PATTERN.match(token) is not None


def classify_subject(token: str) -> SubjectShape:
    """
    Classify a raw token.

    SID is checked before descriptor. The patterns cannot both match today
    (a SID has no '.'), but the order is fixed so a future widening of either
    pattern cannot silently flip a SID into a descriptor lookup.
    """
    token = (token or "").strip()
    if not token:
        return SubjectShape.EMPTY
    if is_security_identifier(token):
        return SubjectShape.SID
    if is_descriptor(token):
        return SubjectShape.DESCRIPTOR
    return SubjectShape.TEXT
