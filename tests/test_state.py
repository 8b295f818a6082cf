"""
Tests for per-bit permission state classification.
"""
from azdo_access.features.permissions.schemas import AccessControlEntry, AceExtendedInfo
from azdo_access.features.permissions.state import (
    ALLOW,
    ALLOW_INHERITED,
    DENY,
    DENY_INHERITED,
    NOT_SET,
    classify_permission_states,
    summarize_entry,
)


def _states(results):
    return [(r.bit, r.effective) for r in results]


def test_explicit_and_inherited_allow(actions):
    results = classify_permission_states(actions, 6, allow=2, deny=0, effective_allow=6, effective_deny=0)
    assert _states(results) == [(2, ALLOW), (4, ALLOW_INHERITED)]
    assert results[0].name == "Edit"


def test_deny_wins(actions):
    results = classify_permission_states(actions, 7, allow=1, deny=0, effective_allow=3, effective_deny=1)
    assert _states(results) == [(1, DENY_INHERITED), (2, ALLOW_INHERITED), (4, NOT_SET)]


def test_explicit_deny(actions):
    results = classify_permission_states(actions, 4, allow=0, deny=4)
    assert _states(results) == [(4, DENY)]


def test_missing_effective_means_nothing_inherited(actions):
    results = classify_permission_states(actions, 3, allow=3, deny=0)
    assert _states(results) == [(1, ALLOW), (2, ALLOW)]


def test_requested_zero(actions):
    assert classify_permission_states(actions, 0, allow=7, deny=0) == []


def test_catalogue_order_and_partial_bits():
    from azdo_access.features.permissions.schemas import ActionDefinition
    actions = [
        ActionDefinition(bit=4, name="C"),
        ActionDefinition(bit=0, name="Zero"),
        ActionDefinition(bit=3, name="Combined"),
        ActionDefinition(bit=1, name="A"),
    ]
    results = classify_permission_states(actions, 5, allow=5, deny=0)
    assert [r.name for r in results] == ["C", "A"]


def test_summarize_entry(actions):
    ace = AccessControlEntry(allow=2, deny=0, extended_info=AceExtendedInfo(effective_allow=6, effective_deny=0))
    assert _states(summarize_entry(actions, 6, ace)) == [(2, ALLOW), (4, ALLOW_INHERITED)]
    assert summarize_entry(actions, 6, None) == []


def test_summarize_entry_without_extended_info(actions):
    ace = AccessControlEntry(allow=None, deny=1)
    assert _states(summarize_entry(actions, 3, ace)) == [(1, DENY), (2, NOT_SET)]
