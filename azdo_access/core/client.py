"""
Azure DevOps REST client implementing the identity, graph and security collaborators.

Authentication is a personal access token sent as HTTP basic auth with an
empty user name. Every transport or HTTP failure surfaces as
DependencyFailureError carrying the response status when there is one.
"""
import base64
from typing import Any, Dict, List, Optional

import requests

from azdo_access.core import config
from azdo_access.core.errors import DependencyFailureError
from azdo_access.core.interfaces import GraphDirectory, IdentityDirectory, SecurityService
from azdo_access.features.identities.schemas import DirectoryIdentity, Subject
from azdo_access.features.permissions.schemas import AccessControlList, SecurityNamespace
from azdo_access.utils import get_logger


log = get_logger(__name__)


def _bool_param(value: bool) -> str:
    return "true" if value else "false"


class AzureDevOpsClient(IdentityDirectory, GraphDirectory, SecurityService):
    """Thin REST wrapper over the identities, graph and security endpoints."""

    def __init__(
        self,
        organization: str,
        pat: str,
        *,
        base_url: str = config.AZDO_BASE_URL,
        vssps_url: str = config.AZDO_VSSPS_URL,
        api_version: str = config.AZDO_API_VERSION,
        graph_api_version: str = config.AZDO_GRAPH_API_VERSION,
        timeout: float = config.AZDO_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.organization = organization
        self.base_url = base_url.rstrip("/")
        self.vssps_url = vssps_url.rstrip("/")
        self.api_version = api_version
        self.graph_api_version = graph_api_version
        self.timeout = timeout
        self.session = session or requests.Session()

        token = base64.b64encode(f":{pat}".encode()).decode()
        self.session.headers.update({
            "Authorization": f"Basic {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    # ========================================================================
    # Transport
    # ========================================================================

    def _url(self, root: str, path: str) -> str:
        return f"{root}/{self.organization}/_apis/{path}"

    def _request(self, method: str, url: str, *, params: Dict[str, Any], json: Any = None) -> Any:
        log.debug(f"{method} {url} params={params}")
        try:
            response = self.session.request(method, url, params=params, json=json, timeout=self.timeout)
        except requests.RequestException as e:
            raise DependencyFailureError(f"{method} {url} failed: {e}") from e

        if response.status_code >= 400:
            raise DependencyFailureError(
                f"{method} {url} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise DependencyFailureError(f"{method} {url} returned invalid JSON: {e}") from e

    # ========================================================================
    # Identity Directory
    # ========================================================================

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
        params: Dict[str, Any] = {"api-version": self.api_version, "queryMembership": query_membership}
        if search_filter:
            params["searchFilter"] = search_filter
            params["filterValue"] = filter_value
        if descriptors:
            params["descriptors"] = descriptors
        if subject_descriptors:
            params["subjectDescriptors"] = subject_descriptors
        if include_restricted_visibility is not None:
            params["options"] = "IncludeRestrictedVisibility" if include_restricted_visibility else "None"

        payload = self._request("GET", self._url(self.vssps_url, "identities"), params=params)
        # Unmatched descriptor lookups come back as null slots
        return [DirectoryIdentity.model_validate(item) for item in payload.get("value") or [] if item]

    # ========================================================================
    # Graph
    # ========================================================================

    def lookup_subjects(self, descriptors: List[str]) -> Dict[str, Subject]:
        body = {"lookupKeys": [{"descriptor": d} for d in descriptors]}
        payload = self._request(
            "POST",
            self._url(self.vssps_url, "graph/subjectlookup"),
            params={"api-version": self.graph_api_version},
            json=body,
        )

        subjects = {}
        for key, item in (payload.get("value") or {}).items():
            if not item:
                continue
            item = dict(item)
            item.setdefault("descriptor", key)
            subjects[key] = Subject.model_validate(item)
        return subjects

    def get_descriptor(self, storage_key: str) -> Optional[str]:
        payload = self._request(
            "GET",
            self._url(self.vssps_url, f"graph/descriptors/{storage_key}"),
            params={"api-version": self.graph_api_version},
        )
        return payload.get("value")

    # ========================================================================
    # Security
    # ========================================================================

    def query_security_namespaces(
        self,
        namespace_id: Optional[str] = None,
        *,
        local_only: bool = False,
    ) -> List[SecurityNamespace]:
        path = "securitynamespaces"
        if namespace_id:
            path = f"{path}/{namespace_id}"
        params: Dict[str, Any] = {"api-version": self.api_version}
        if local_only:
            params["localOnly"] = _bool_param(local_only)
        payload = self._request("GET", self._url(self.base_url, path), params=params)
        return [SecurityNamespace.model_validate(item) for item in payload.get("value") or []]

    def query_access_control_lists(
        self,
        namespace_id: str,
        *,
        token: Optional[str] = None,
        descriptors: Optional[str] = None,
        include_extended_info: bool = True,
        recurse: bool = False,
    ) -> List[AccessControlList]:
        params: Dict[str, Any] = {
            "api-version": self.api_version,
            "includeExtendedInfo": _bool_param(include_extended_info),
            "recurse": _bool_param(recurse),
        }
        if token:
            params["token"] = token
        if descriptors:
            params["descriptors"] = descriptors

        payload = self._request(
            "GET",
            self._url(self.base_url, f"accesscontrollists/{namespace_id}"),
            params=params,
        )
        return [AccessControlList.model_validate(item) for item in payload.get("value") or []]


class AzureDevOpsConnection:
    """Process-wide client built from configuration."""

    _instance: Optional[AzureDevOpsClient] = None

    @classmethod
    def get_client(cls) -> AzureDevOpsClient:
        """
        Get or create the shared client.

        Raises:
            DependencyFailureError: organization or PAT is not configured
        """
        if cls._instance is None:
            if not config.AZDO_ORGANIZATION or not config.AZDO_PAT:
                raise DependencyFailureError("AZDO_ORGANIZATION and AZDO_PAT must be configured")
            log.info(f"Connecting to Azure DevOps organization {config.AZDO_ORGANIZATION}")
            cls._instance = AzureDevOpsClient(config.AZDO_ORGANIZATION, config.AZDO_PAT)
        return cls._instance
