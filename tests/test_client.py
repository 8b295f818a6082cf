"""
Tests for the REST client, with the requests transport mocked out.
"""
import base64
from unittest import mock

import pytest
import requests

from azdo_access.core.client import AzureDevOpsClient, AzureDevOpsConnection
from azdo_access.core.errors import DependencyFailureError


def _response(status_code=200, payload=None):
    response = mock.Mock()
    response.status_code = status_code
    response.text = "error body"
    response.json.return_value = payload if payload is not None else {}
    return response


@pytest.fixture
def session():
    session = requests.Session()
    session.request = mock.Mock()
    return session


@pytest.fixture
def client(session):
    return AzureDevOpsClient(
        "contoso",
        "secret-pat",
        base_url="https://dev.azure.com/",
        vssps_url="https://vssps.dev.azure.com",
        api_version="7.1",
        graph_api_version="7.1-preview.1",
        timeout=5,
        session=session,
    )


def test_pat_basic_auth(client, session):
    expected = base64.b64encode(b":secret-pat").decode()
    assert session.headers["Authorization"] == f"Basic {expected}"


def test_read_identities_by_filter(client, session):
    session.request.return_value = _response(payload={"count": 2, "value": [
        {"id": "a1", "descriptor": "Microsoft.TeamFoundation.Identity;S-1-5-21-1", "subjectDescriptor": "aad.YQ",
         "providerDisplayName": "Alice", "isContainer": False},
        None,
    ]})

    identities = client.read_identities(
        search_filter="General",
        filter_value="alice@example.com",
        include_restricted_visibility=True,
    )

    assert len(identities) == 1
    assert identities[0].subject_descriptor == "aad.YQ"
    assert identities[0].provider_display_name == "Alice"

    method, url = session.request.call_args.args
    params = session.request.call_args.kwargs["params"]
    assert method == "GET"
    assert url == "https://vssps.dev.azure.com/contoso/_apis/identities"
    assert params["searchFilter"] == "General"
    assert params["filterValue"] == "alice@example.com"
    assert params["queryMembership"] == "None"
    assert params["options"] == "IncludeRestrictedVisibility"
    assert session.request.call_args.kwargs["timeout"] == 5


def test_read_identities_by_descriptor(client, session):
    session.request.return_value = _response(payload={"value": []})
    assert client.read_identities(descriptors="Microsoft.TeamFoundation.Identity;S-1-5-21-1") == []
    params = session.request.call_args.kwargs["params"]
    assert params["descriptors"] == "Microsoft.TeamFoundation.Identity;S-1-5-21-1"
    assert "searchFilter" not in params


def test_lookup_subjects(client, session):
    session.request.return_value = _response(payload={"value": {
        "aad.YQ": {"displayName": "Alice", "subjectKind": "user", "origin": "aad", "originId": "oid"},
    }})

    subjects = client.lookup_subjects(["aad.YQ"])

    assert subjects["aad.YQ"].descriptor == "aad.YQ"
    assert subjects["aad.YQ"].display_name == "Alice"
    method, url = session.request.call_args.args
    assert method == "POST"
    assert url == "https://vssps.dev.azure.com/contoso/_apis/graph/subjectlookup"
    assert session.request.call_args.kwargs["json"] == {"lookupKeys": [{"descriptor": "aad.YQ"}]}
    assert session.request.call_args.kwargs["params"]["api-version"] == "7.1-preview.1"


def test_get_descriptor(client, session):
    session.request.return_value = _response(payload={"value": "vssgp.R3JvdXA"})
    assert client.get_descriptor("key-1") == "vssgp.R3JvdXA"
    assert session.request.call_args.args[1].endswith("/_apis/graph/descriptors/key-1")


def test_query_security_namespaces(client, session):
    session.request.return_value = _response(payload={"value": [{
        "namespaceId": "ns", "name": "Git Repositories", "readPermission": 2,
        "actions": [{"bit": 1, "name": "Administer", "displayName": "Administer", "namespaceId": "ns"}],
    }]})

    namespaces = client.query_security_namespaces("ns")

    assert namespaces[0].read_permission == 2
    assert namespaces[0].actions[0].display_name == "Administer"
    assert session.request.call_args.args[1] == "https://dev.azure.com/contoso/_apis/securitynamespaces/ns"

    client.query_security_namespaces()
    assert session.request.call_args.args[1] == "https://dev.azure.com/contoso/_apis/securitynamespaces"


def test_query_access_control_lists(client, session):
    session.request.return_value = _response(payload={"value": [{
        "token": "repoV2/p",
        "inheritPermissions": True,
        "acesDictionary": {
            "Microsoft.TeamFoundation.Identity;S-1-5-21-1": {
                "descriptor": "Microsoft.TeamFoundation.Identity;S-1-5-21-1",
                "allow": 2,
                "deny": 0,
                "extendedInfo": {"effectiveAllow": 6, "inheritedAllow": 4},
            },
        },
    }]})

    acls = client.query_access_control_lists("ns", token="repoV2/p", descriptors="d")

    ace = acls[0].aces_dictionary["Microsoft.TeamFoundation.Identity;S-1-5-21-1"]
    assert acls[0].inherit_permissions is True
    assert ace.extended_info.effective_allow == 6
    params = session.request.call_args.kwargs["params"]
    assert params["token"] == "repoV2/p"
    assert params["descriptors"] == "d"
    assert params["includeExtendedInfo"] == "true"
    assert params["recurse"] == "false"


def test_http_error_keeps_status(client, session):
    session.request.return_value = _response(status_code=404)
    with pytest.raises(DependencyFailureError) as exc:
        client.lookup_subjects(["aad.YQ"])
    assert exc.value.status_code == 404


def test_transport_error(client, session):
    session.request.side_effect = requests.ConnectionError("refused")
    with pytest.raises(DependencyFailureError) as exc:
        client.get_descriptor("key")
    assert exc.value.status_code is None


def test_invalid_json(client, session):
    response = _response()
    response.json.side_effect = ValueError("no json")
    session.request.return_value = response
    with pytest.raises(DependencyFailureError):
        client.query_security_namespaces()


def test_connection_requires_configuration(monkeypatch):
    monkeypatch.setattr(AzureDevOpsConnection, "_instance", None)
    monkeypatch.setattr("azdo_access.core.config.AZDO_ORGANIZATION", None)
    with pytest.raises(DependencyFailureError):
        AzureDevOpsConnection.get_client()


def test_query_security_namespaces_local_only(client, session):
    session.request.return_value = _response(payload={"value": []})
    client.query_security_namespaces(local_only=True)
    assert session.request.call_args.kwargs["params"]["localOnly"] == "true"

    client.query_security_namespaces()
    assert "localOnly" not in session.request.call_args.kwargs["params"]
