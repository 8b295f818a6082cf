"""
Pydantic schemas for directory identities and graph subjects.

Request and response models for the identity resolution endpoints.
"""
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from azdo_access.core.base import AzdoModel


# ============================================================================
# Service Records
# ============================================================================

class DirectoryIdentity(AzdoModel):
    """
    Identity as returned by the Identity Directory.

    ``descriptor`` is the identity descriptor form ACLs are keyed by
    (``Microsoft.TeamFoundation.Identity;S-1-...``); ``subject_descriptor``
    is the graph form (``aad.xxx``, ``vssgp.xxx``).
    """
    id: Optional[str] = None
    descriptor: Optional[str] = None
    subject_descriptor: Optional[str] = None
    provider_display_name: Optional[str] = None
    is_container: Optional[bool] = None
    properties: Dict[str, Any] = Field(default_factory=dict)


class Subject(AzdoModel):
    """Graph subject, either a User or a Group."""
    descriptor: str = Field(..., min_length=1)
    display_name: Optional[str] = None
    subject_kind: Optional[str] = None
    origin: Optional[str] = None
    origin_id: Optional[str] = None
    legacy_descriptor: Optional[str] = None


class SubjectShape(str, Enum):
    """Shape of a raw subject token."""
    SID = "sid"
    DESCRIPTOR = "descriptor"
    TEXT = "text"
    EMPTY = "empty"


# ============================================================================
# Request / Response Schemas
# ============================================================================

class SubjectRequest(BaseModel):
    """Schema for resolving a subject token."""
    subject: str = Field(..., description="Email, principal name, SID, alias, group name or descriptor")


class SubjectShapeResponse(BaseModel):
    """Schema for a classification result."""
    token: str
    shape: SubjectShape
