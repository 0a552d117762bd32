"""
Base schema classes with common fields and configurations.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

__all__ = [
    "BaseSchema",
    "BaseFilterSchema",
    "aliases",
]


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.

    Fields serialize under camelCase aliases (the upstream stores' wire
    names) and accept either the alias or the Python attribute name on input.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
        # Keep enums as Enum instances to retain full type information;
        # callers can still access `.value` if needed.
        use_enum_values=False,
        str_strip_whitespace=True,
        validate_assignment=True,
        # Upstream ids and semesters arrive as numbers or strings.
        coerce_numbers_to_str=True,
    )


class BaseFilterSchema(BaseSchema):
    """Base schema for filter parameters."""
    pass


def aliases(*names: str) -> AliasChoices:
    """Accepted input names for a field, current wire name first."""
    return AliasChoices(*names)
