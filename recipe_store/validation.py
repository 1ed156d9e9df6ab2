"""
Validation layer for caller input.

``validate`` is the single entry point used before any write: it either
returns a typed DTO or raises ``ValidationError`` carrying one
``FieldViolation`` per problem.
"""

import logging
from typing import Any, List, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=BaseModel)


class FieldViolation(BaseModel):
    """One rejected field."""
    field: str
    message: str
    type: str


def violations_from(error: PydanticValidationError) -> List[FieldViolation]:
    """Flatten a pydantic error into field violations.

    Nested locations are joined with dots (``ingredients.2``); model-level
    errors are reported against ``__root__``.
    """
    violations = []
    for err in error.errors():
        location = ".".join(str(part) for part in err.get('loc', ())) or "__root__"
        message = err.get('msg', 'invalid value')
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        violations.append(FieldViolation(field=location, message=message, type=err.get('type', 'value_error')))
    return violations


def validate(schema: Type[S], candidate: Any) -> S:
    """
    Validate ``candidate`` against ``schema``.

    Args:
        schema: DTO class (UserCreate, RecipeCreate, ...)
        candidate: Mapping of attributes, or an already-built DTO

    Returns:
        Validated DTO instance

    Raises:
        ValidationError: With ``errors`` listing every violation
    """
    if isinstance(candidate, schema):
        return candidate
    if isinstance(candidate, BaseModel):
        candidate = candidate.model_dump(by_alias=True, exclude_unset=True)
    if candidate is None:
        candidate = {}

    try:
        return schema.model_validate(candidate)
    except PydanticValidationError as e:
        violations = violations_from(e)
        logger.debug(f"{schema.__name__} rejected with {len(violations)} violation(s)")
        raise ValidationError(
            f"Invalid {schema.__name__}: " + "; ".join(f"{v.field}: {v.message}" for v in violations),
            errors=[v.model_dump() for v in violations],
            original_error=e
        ) from e
