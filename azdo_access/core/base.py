"""
Pydantic base model for records exchanged with Azure DevOps.

All service records should inherit from AzdoModel.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AzdoModel(BaseModel):
    """
    Base class for Azure DevOps records.

    The service speaks camelCase JSON; attributes stay snake_case. Both
    spellings are accepted on input, and FastAPI serializes by alias.

    Usage:
        from azdo_access.core.base import AzdoModel

        class Thing(AzdoModel):
            display_name: str | None = None

        Thing.model_validate({"displayName": "x"})
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
