"""
Helpers over security namespace descriptions.
"""
import uuid
from typing import List, Optional

from azdo_access.core.errors import InvalidInputError, NotFoundError
from azdo_access.core.interfaces import SecurityService
from azdo_access.features.permissions.codec import format_bitmask
from azdo_access.features.permissions.schemas import (
    ActionDefinition,
    ActionSummary,
    NamespaceSummary,
    SecurityNamespace,
)


NIL_UUID = "00000000-0000-0000-0000-000000000000"


def namespace_actions(namespace: Optional[SecurityNamespace]) -> List[ActionDefinition]:
    """Return a copy of the namespace's action catalogue, empty when there is none."""
    if namespace is None:
        return []
    return [action.model_copy() for action in namespace.actions or []]


def namespace_matches(namespace: SecurityNamespace, identifier: str) -> bool:
    identifier = (identifier or "").strip().lower()
    if namespace.name and namespace.name.lower() == identifier:
        return True
    if namespace.display_name and namespace.display_name.lower() == identifier:
        return True
    return False


def _hex(value: Optional[int]) -> Optional[str]:
    return format_bitmask(value) if value is not None else None


def summarize_namespace(namespace: SecurityNamespace) -> NamespaceSummary:
    """Convert a namespace description into its display form with hex masks."""
    summary = NamespaceSummary(
        namespace_id=namespace.namespace_id,
        name=namespace.name,
        display_name=namespace.display_name,
        dataspace_category=namespace.dataspace_category,
        extension_type=namespace.extension_type,
        is_remotable=namespace.is_remotable,
        element_length=namespace.element_length,
        separator_value=namespace.separator_value,
        system_bit_mask=_hex(namespace.system_bit_mask),
        read_permission=_hex(namespace.read_permission),
        write_permission=_hex(namespace.write_permission),
        structure_value=namespace.structure_value,
        use_token_translator=namespace.use_token_translator,
    )

    if namespace.actions is not None:
        summary.actions = [
            ActionSummary(
                bit=action.bit,
                bit_hex=_hex(action.bit),
                name=action.name,
                display_name=action.display_name,
                namespace_id=action.namespace_id if action.namespace_id != NIL_UUID else None,
            )
            for action in namespace.actions
        ]
        summary.actions_count = len(summary.actions)

    return summary


def find_namespace(security: SecurityService, identifier: str) -> SecurityNamespace:
    """
    Load a namespace by id, or by case-insensitive name or display name.

    Raises:
        InvalidInputError: identifier is empty
        NotFoundError: no namespace matched
    """
    identifier = (identifier or "").strip()
    if not identifier:
        raise InvalidInputError("namespace identifier is required")

    try:
        namespace_id = str(uuid.UUID(identifier))
    except ValueError:
        namespace_id = None

    if namespace_id is not None:
        namespaces = security.query_security_namespaces(namespace_id)
        if namespaces:
            return namespaces[0]
        raise NotFoundError(f"security namespace {identifier!r} not found")

    for namespace in security.query_security_namespaces(None):
        if namespace_matches(namespace, identifier):
            return namespace
    raise NotFoundError(f"security namespace {identifier!r} not found")


def list_namespaces(security: SecurityService, *, local_only: bool = False) -> List[NamespaceSummary]:
    """Summaries of every namespace, sorted case-insensitively by name."""
    namespaces = security.query_security_namespaces(None, local_only=local_only)
    return [
        summarize_namespace(namespace)
        for namespace in sorted(namespaces, key=lambda ns: (ns.name or "").lower())
    ]
