"""
Conversion between human permission tokens and namespace bitmasks.

Implements:
- Encoding hex, decimal and action-name tokens into a validated bitmask
- Decoding a bitmask into sorted action labels
"""
import re
from typing import Dict, Iterable, List, Optional, Sequence

from azdo_access.core.errors import (
    InvalidInputError,
    UndefinedPermissionBitError,
    UnrecognizedPermissionTokenError,
)
from azdo_access.features.permissions.schemas import ActionDefinition
from azdo_access.utils import value_or_default


NO_PERMISSIONS = "None"

_DECIMAL = re.compile(r"^[+-]?[0-9]+$")
_HEX_BODY = re.compile(r"^[0-9A-Fa-f]+$")

# Permission masks are signed 32-bit integers on the service side
MAX_BIT_VALUE = 0x7FFFFFFF


def format_bitmask(mask: int) -> str:
    """Render a mask as an upper-case hex literal, e.g. ``0x1F``."""
    return f"0x{mask:X}"


def bit_label(bit: int) -> str:
    return f"Bit {bit}"


def split_permission_tokens(values: Iterable[str]) -> List[str]:
    """Split raw values on commas, the way repeated flags or query values arrive."""
    tokens = []
    for value in values:
        tokens.extend((value or "").split(","))
    return tokens


def _catalogue(actions: Sequence[ActionDefinition]):
    names: Dict[str, int] = {}
    allowed = 0
    for action in actions:
        bit = value_or_default(action.bit, 0)
        if bit == 0:
            continue
        allowed |= bit

        name = (action.name or "").strip()
        if name:
            names[name.lower()] = bit
        display_name = (action.display_name or "").strip()
        if display_name:
            names[display_name.lower()] = bit
        names[bit_label(bit).lower()] = bit
    return names, allowed


def encode_permission_bits(actions: Sequence[ActionDefinition], tokens: Iterable[str]) -> int:
    """
    Convert permission tokens into a bitmask.

    Each token is a ``0x`` hex value, a decimal value, or an action Name,
    DisplayName or ``Bit <n>`` (case-insensitive). Numeric values must be
    non-zero and, when the catalogue is not empty, covered by its bits.

    Args:
        actions: Namespace action catalogue (may be empty to skip validation)
        tokens: Tokens already split on commas; blanks are ignored

    Returns:
        OR of every token's bits, 0 if no tokens were given

    Raises:
        UndefinedPermissionBitError: numeric value is zero, negative or outside the catalogue
        UnrecognizedPermissionTokenError: text matched no action
        InvalidInputError: malformed hex value, or a value wider than 32 bits
    """
    names, allowed = _catalogue(actions)

    def parse(token: str, body: str, base: int) -> int:
        value = int(body, base)
        if value > MAX_BIT_VALUE:
            raise InvalidInputError(f"invalid bit value {token!r}: exceeds 32 bits")
        return check_allowed(value)

    def check_allowed(value: int) -> int:
        if value == 0:
            raise UndefinedPermissionBitError("permission bit value cannot be zero")
        if value < 0:
            raise UndefinedPermissionBitError(f"permission bit value {value} must be positive")
        if allowed != 0 and value & ~allowed:
            raise UndefinedPermissionBitError(f"permission bit value {value} is not defined for this namespace")
        return value

    result = 0
    for token in tokens:
        token = (token or "").strip()
        if not token:
            continue

        if token[:2] in ("0x", "0X"):
            body = token[2:]
            if not _HEX_BODY.match(body):
                raise InvalidInputError(f"invalid bit value {token!r}")
            result |= parse(token, body, 16)
            continue

        if _DECIMAL.match(token):
            result |= parse(token, token, 10)
            continue

        bit = names.get(token.lower())
        if bit is None:
            raise UnrecognizedPermissionTokenError(f"unrecognized permission token {token!r}")
        result |= bit

    return result


def _action_label(action: ActionDefinition, bit: int) -> str:
    name = (action.name or "").strip()
    if not name:
        name = (action.display_name or "").strip()
    return name or bit_label(bit)


def describe_bitmask_labels(actions: Sequence[ActionDefinition], mask: Optional[int]) -> Optional[List[str]]:
    """
    Convert a bitmask into its sorted labels.

    None stays None so absent ACE fields remain absent. A zero mask is
    ``["None"]`` and without a catalogue the single label is the hex
    literal. Bits no action covers are grouped into one
    ``"Unknown (0x..)"`` label.
    """
    if mask is None:
        return None
    if mask == 0:
        return [NO_PERMISSIONS]
    if not actions:
        return [format_bitmask(mask)]

    matched = 0
    labels = []
    for action in actions:
        bit = value_or_default(action.bit, 0)
        if bit == 0 or mask & bit != bit:
            continue
        matched |= bit
        labels.append(_action_label(action, bit))

    unknown = mask & ~matched
    if unknown:
        labels.append(f"Unknown ({format_bitmask(unknown)})")

    return sorted(labels)


def describe_bitmask(actions: Sequence[ActionDefinition], mask: int) -> str:
    """Convert a bitmask into a human-readable description, e.g. ``"Edit, Read"``."""
    return ", ".join(describe_bitmask_labels(actions, mask))
