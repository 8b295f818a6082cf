"""
In-memory collaborators shared by the test modules.
"""
from typing import Dict, List, Optional

import pytest

from azdo_access.core.interfaces import GraphDirectory, IdentityDirectory, SecurityService
from azdo_access.features.identities.schemas import DirectoryIdentity, Subject
from azdo_access.features.permissions.schemas import (
    AccessControlEntry,
    AccessControlList,
    AceExtendedInfo,
    ActionDefinition,
    SecurityNamespace,
)


GIT_NAMESPACE_ID = "2e9eb7ed-3c0a-47d4-87c1-0ffdd275fd87"
ALICE_DESCRIPTOR = "Microsoft.TeamFoundation.Identity;S-1-9-1551374245-1204400969-2402986413-2179408616-0-0-0-0-1"


class FakeIdentityDirectory(IdentityDirectory):
    """Answers read_identities from canned results keyed by the filter used."""

    def __init__(self):
        self.by_filter: Dict[str, List[DirectoryIdentity]] = {}
        self.by_descriptor: Dict[str, List[DirectoryIdentity]] = {}
        self.by_subject_descriptor: Dict[str, List[DirectoryIdentity]] = {}
        self.calls: List[dict] = []
        self.error: Optional[Exception] = None

    def read_identities(
        self,
        *,
        search_filter=None,
        filter_value=None,
        descriptors=None,
        subject_descriptors=None,
        query_membership="None",
        include_restricted_visibility=None,
    ):
        self.calls.append(dict(
            search_filter=search_filter,
            filter_value=filter_value,
            descriptors=descriptors,
            subject_descriptors=subject_descriptors,
            query_membership=query_membership,
            include_restricted_visibility=include_restricted_visibility,
        ))
        if self.error is not None:
            raise self.error
        if descriptors is not None:
            return self.by_descriptor.get(descriptors, [])
        if subject_descriptors is not None:
            return self.by_subject_descriptor.get(subject_descriptors, [])
        return self.by_filter.get(search_filter, [])


class FakeGraphDirectory(GraphDirectory):
    def __init__(self):
        self.subjects: Dict[str, Subject] = {}
        self.storage_keys: Dict[str, str] = {}
        self.lookup_error: Optional[Exception] = None
        self.lookups: List[List[str]] = []

    def lookup_subjects(self, descriptors):
        self.lookups.append(list(descriptors))
        if self.lookup_error is not None:
            raise self.lookup_error
        return {d: self.subjects[d] for d in descriptors if d in self.subjects}

    def get_descriptor(self, storage_key):
        return self.storage_keys.get(storage_key)


class FakeSecurityService(SecurityService):
    def __init__(self, namespaces: List[SecurityNamespace], acls: Optional[List[AccessControlList]] = None):
        self.namespaces = namespaces
        self.acls = acls or []
        self.acl_queries: List[dict] = []
        self.namespace_queries: List[dict] = []

    def query_security_namespaces(self, namespace_id=None, *, local_only=False):
        self.namespace_queries.append(dict(namespace_id=namespace_id, local_only=local_only))
        if namespace_id is None:
            return list(self.namespaces)
        return [ns for ns in self.namespaces if ns.namespace_id == namespace_id]

    def query_access_control_lists(
        self,
        namespace_id,
        *,
        token=None,
        descriptors=None,
        include_extended_info=True,
        recurse=False,
    ):
        self.acl_queries.append(dict(namespace_id=namespace_id, token=token, descriptors=descriptors, recurse=recurse))
        return [acl for acl in self.acls if token is None or acl.token == token]


@pytest.fixture
def actions() -> List[ActionDefinition]:
    return [
        ActionDefinition(bit=1, name="Read", display_name="Read"),
        ActionDefinition(bit=2, name="Edit", display_name="Edit"),
        ActionDefinition(bit=4, name="Delete", display_name="Delete"),
    ]


@pytest.fixture
def namespace(actions) -> SecurityNamespace:
    return SecurityNamespace(
        namespace_id=GIT_NAMESPACE_ID,
        name="Git Repositories",
        display_name="Git Repositories",
        separator_value="/",
        element_length=-1,
        system_bit_mask=0,
        read_permission=1,
        write_permission=6,
        actions=actions,
    )


@pytest.fixture
def alice() -> DirectoryIdentity:
    return DirectoryIdentity(
        id="a1",
        descriptor=ALICE_DESCRIPTOR,
        subject_descriptor="aad.YWxpY2U",
        provider_display_name="Alice",
        is_container=False,
    )


@pytest.fixture
def directory() -> FakeIdentityDirectory:
    return FakeIdentityDirectory()


@pytest.fixture
def graph() -> FakeGraphDirectory:
    return FakeGraphDirectory()


@pytest.fixture
def alice_acl() -> AccessControlList:
    return AccessControlList(
        token="repoV2/project/repo",
        inherit_permissions=True,
        aces_dictionary={
            ALICE_DESCRIPTOR: AccessControlEntry(
                descriptor=ALICE_DESCRIPTOR,
                allow=2,
                deny=0,
                extended_info=AceExtendedInfo(effective_allow=6, effective_deny=0, inherited_allow=4),
            ),
        },
    )


@pytest.fixture
def security(namespace, alice_acl) -> FakeSecurityService:
    return FakeSecurityService([namespace], [alice_acl])
