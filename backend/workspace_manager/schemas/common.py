"""
Shared pydantic building blocks.

Wire format is camelCase (the JSON shape the front end always used);
Python attributes stay snake_case. Field rules raise PydanticCustomError
so the message a user sees is exactly the text defined here, without
pydantic's "Value error, " prefix.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class CamelModel(BaseModel):
    """Base for every schema that crosses the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        validate_default=True,
    )


def require_text(
    value: str,
    label: str,
    *,
    min_length: int | None = None,
) -> str:
    """Reject blank values and values shorter than min_length (after strip)."""
    stripped = value.strip()
    if not stripped:
        raise PydanticCustomError("required", f"{label} is required")
    if min_length is not None and len(stripped) < min_length:
        raise PydanticCustomError(
            "too_short",
            f"{label} must be at least {min_length} characters",
        )
    return value


def require_pattern(value: str, pattern: re.Pattern[str], message: str) -> str:
    if not pattern.match(value):
        raise PydanticCustomError("pattern", message)
    return value


def field_errors(
    exc: ValidationError,
    model: type[BaseModel],
) -> dict[str, str]:
    """
    Flatten a ValidationError into {python_field_name: message}.

    Only the first message per field is kept. Locations reported under the
    camelCase alias are mapped back to the attribute name.
    """
    by_alias = {
        (info.alias or name): name for name, info in model.model_fields.items()
    }
    errors: dict[str, str] = {}
    for err in exc.errors():
        if not err["loc"]:
            continue
        loc = str(err["loc"][0])
        name = by_alias.get(loc, loc)
        errors.setdefault(name, err["msg"])
    return errors
