"""
Identity resolution API routes.

Provides endpoints for classifying subject tokens and resolving them to
directory identities and graph subjects.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, Query

from azdo_access.core import config
from azdo_access.core.errors import NotFoundError
from azdo_access.core.interfaces import GraphDirectory, IdentityDirectory
from azdo_access.features.identities.bridge import resolve_subject
from azdo_access.features.identities.classifier import classify_subject
from azdo_access.features.identities.dependencies import get_graph_directory, get_identity_directory
from azdo_access.features.identities.resolver import resolve_identity
from azdo_access.features.identities.schemas import (
    DirectoryIdentity,
    Subject,
    SubjectRequest,
    SubjectShapeResponse,
)
from azdo_access.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


@router.get("/classify", response_model=SubjectShapeResponse)
def classify(token: Annotated[str, Query(description="Raw subject token")]):
    """Report whether a token is a SID, a descriptor or free text."""
    token = token.strip()
    return SubjectShapeResponse(token=token, shape=classify_subject(token))


@router.post("/resolve", response_model=DirectoryIdentity, response_model_exclude_none=True)
def resolve(
    request: SubjectRequest,
    directory: Annotated[IdentityDirectory, Depends(get_identity_directory)],
):
    """Resolve a subject token to exactly one directory identity."""
    identity = resolve_identity(directory, request.subject, fail_fast=not config.IDENTITY_SEARCH_EXHAUSTIVE)
    if identity is None:
        raise NotFoundError(f"no identity found for {request.subject.strip()!r}")
    log.info(f"Resolved {request.subject.strip()!r} to identity {identity.id}")
    return identity


@router.post("/subject", response_model=Subject, response_model_exclude_none=True)
def subject(
    request: SubjectRequest,
    directory: Annotated[IdentityDirectory, Depends(get_identity_directory)],
    graph: Annotated[GraphDirectory, Depends(get_graph_directory)],
):
    """Resolve a subject token to its canonical graph subject."""
    return resolve_subject(directory, graph, request.subject, fail_fast=not config.IDENTITY_SEARCH_EXHAUSTIVE)
