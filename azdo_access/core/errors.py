"""
Error taxonomy for identity resolution and permission translation.

NotFound and AmbiguousIdentity are user-correctable outcomes and are kept
apart from DependencyFailure so callers can tell "pick a better
identifier" from "the service broke".
"""
from typing import Optional


class AzdoAccessError(Exception):
    """Base class for every error raised by this package."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(AzdoAccessError):
    """Empty or malformed input token."""


class UndefinedPermissionBitError(InvalidInputError):
    """A numeric permission value is zero, negative or outside the namespace catalogue."""


class UnrecognizedPermissionTokenError(InvalidInputError):
    """A textual permission token matched no action name or display name."""


class NotFoundError(AzdoAccessError):
    """No identity, subject or descriptor matched."""


class AmbiguousIdentityError(AzdoAccessError):
    """More than one identity matched within a single directory lookup."""

    hint = "specify a more specific identifier"


class DependencyFailureError(AzdoAccessError):
    """A collaborator (identity, graph or security service) failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
