"""
Collaborator interfaces consumed by the identity and permission core.

The core only reads through these. AzureDevOpsClient implements all three
over REST; tests provide in-memory fakes.
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from azdo_access.features.identities.schemas import DirectoryIdentity, Subject
from azdo_access.features.permissions.schemas import AccessControlList, SecurityNamespace


class IdentityDirectory(ABC):
    @abstractmethod
    def read_identities(
        self,
        *,
        search_filter: Optional[str] = None,
        filter_value: Optional[str] = None,
        descriptors: Optional[str] = None,
        subject_descriptors: Optional[str] = None,
        query_membership: str = "None",
        include_restricted_visibility: Optional[bool] = None,
    ) -> List[DirectoryIdentity]:
        """Return every identity matching exactly one of the filter kinds."""


class GraphDirectory(ABC):
    @abstractmethod
    def lookup_subjects(self, descriptors: List[str]) -> Dict[str, Subject]:
        """Return a descriptor -> Subject map. Unknown descriptors are absent."""

    @abstractmethod
    def get_descriptor(self, storage_key: str) -> Optional[str]:
        """Return the subject descriptor for a storage key."""


class SecurityService(ABC):
    @abstractmethod
    def query_security_namespaces(
        self,
        namespace_id: Optional[str] = None,
        *,
        local_only: bool = False,
    ) -> List[SecurityNamespace]:
        """Return the namespace with this id, or every namespace when None."""

    @abstractmethod
    def query_access_control_lists(
        self,
        namespace_id: str,
        *,
        token: Optional[str] = None,
        descriptors: Optional[str] = None,
        include_extended_info: bool = True,
        recurse: bool = False,
    ) -> List[AccessControlList]:
        pass
