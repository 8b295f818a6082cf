"""
Pydantic schemas for security namespaces, access control entries and permission states.

Request and response models for the permission endpoints.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from azdo_access.core.base import AzdoModel


# ============================================================================
# Security Namespace Schemas
# ============================================================================

class ActionDefinition(AzdoModel):
    """A named permission action bound to one bit of a namespace."""
    bit: Optional[int] = None
    name: Optional[str] = None
    display_name: Optional[str] = None
    namespace_id: Optional[str] = None


class SecurityNamespace(AzdoModel):
    """Security namespace description with its action catalogue."""
    namespace_id: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = None
    dataspace_category: Optional[str] = None
    extension_type: Optional[str] = None
    is_remotable: Optional[bool] = None
    element_length: Optional[int] = None
    separator_value: Optional[str] = None
    system_bit_mask: Optional[int] = None
    read_permission: Optional[int] = None
    write_permission: Optional[int] = None
    structure_value: Optional[int] = None
    use_token_translator: Optional[bool] = None
    actions: Optional[List[ActionDefinition]] = None


class ActionSummary(AzdoModel):
    """Single action of a namespace summary."""
    bit: Optional[int] = None
    bit_hex: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = None
    namespace_id: Optional[str] = None


class NamespaceSummary(AzdoModel):
    """Namespace view with hex-formatted masks."""
    namespace_id: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = None
    dataspace_category: Optional[str] = None
    extension_type: Optional[str] = None
    is_remotable: Optional[bool] = None
    element_length: Optional[int] = None
    separator_value: Optional[str] = None
    system_bit_mask: Optional[str] = None
    read_permission: Optional[str] = None
    write_permission: Optional[str] = None
    structure_value: Optional[int] = None
    use_token_translator: Optional[bool] = None
    actions_count: Optional[int] = None
    actions: Optional[List[ActionSummary]] = None


# ============================================================================
# Access Control Schemas
# ============================================================================

class AceExtendedInfo(AzdoModel):
    """Computed effective and inherited values of an ACE."""
    effective_allow: Optional[int] = None
    effective_deny: Optional[int] = None
    inherited_allow: Optional[int] = None
    inherited_deny: Optional[int] = None


class AccessControlEntry(AzdoModel):
    """Allow/deny pair bound to one subject descriptor."""
    descriptor: Optional[str] = None
    allow: Optional[int] = None
    deny: Optional[int] = None
    extended_info: Optional[AceExtendedInfo] = None


class AccessControlList(AzdoModel):
    """ACL for one security token."""
    token: Optional[str] = None
    inherit_permissions: Optional[bool] = None
    aces_dictionary: Optional[Dict[str, AccessControlEntry]] = None


class AccessControlEntryView(AzdoModel):
    """Human-readable view of a single ACE."""
    token: Optional[str] = None
    descriptor: Optional[str] = None
    inherit_permissions: Optional[bool] = None
    allow: Optional[List[str]] = None
    deny: Optional[List[str]] = None
    effective_allow: Optional[List[str]] = None
    effective_deny: Optional[List[str]] = None
    inherited_allow: Optional[List[str]] = None
    inherited_deny: Optional[List[str]] = None


class PermissionState(AzdoModel):
    """Effective state of one requested permission bit."""
    bit: int
    name: Optional[str] = None
    display_name: Optional[str] = None
    effective: str


# ============================================================================
# Request / Response Schemas
# ============================================================================

class EncodeRequest(BaseModel):
    """Schema for encoding permission tokens."""
    permissions: List[str] = Field(..., description="Hex, decimal or action names; comma-separated values allowed")


class DecodeRequest(BaseModel):
    """Schema for decoding a bitmask."""
    bitmask: int = Field(..., ge=0)


class BitmaskResponse(BaseModel):
    """Schema for an encoded or decoded bitmask."""
    bitmask: int
    hex: str
    description: str
    labels: List[str] = []


class SubjectTokenRequest(BaseModel):
    """Schema for requests targeting one subject on one security token."""
    subject: str = Field(..., min_length=1)
    token: str = Field(..., min_length=1, description="Security token of the securable resource")

    @field_validator("subject", "token")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Reject whitespace-only values."""
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class PermissionStateRequest(SubjectTokenRequest):
    """Schema for classifying requested permission bits."""
    permissions: List[str] = Field(..., min_length=1)


class ExplicitEntryResponse(BaseModel):
    """Schema for an explicit-permission check."""
    token: str
    descriptor: str
    explicit: bool
