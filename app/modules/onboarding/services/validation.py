"""Shape checks applied to everything the generation service returns."""

import json
import logging
from typing import Any, Type, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from app.modules.onboarding.services.exceptions import MalformedResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


def validate(candidate: Any, shape: Type[T]) -> T:
    """Return ``candidate`` as a conforming ``shape`` value or raise MalformedResponse.

    ``candidate`` is either raw JSON text or an already decoded value. Checking
    is strict: no coercion of booleans, numbers or enum members. Only shape is
    checked; an empty ``items`` list is structurally fine.
    """
    if candidate is None:
        raise MalformedResponse("Empty response", context={"shape": _shape_name(shape)})

    if isinstance(candidate, BaseModel):
        candidate = candidate.model_dump_json()
    elif isinstance(candidate, (bytes, bytearray)):
        candidate = candidate.decode("utf-8")
    text = candidate if isinstance(candidate, str) else json.dumps(candidate)
    if not text.strip():
        raise MalformedResponse("Empty response", context={"shape": _shape_name(shape)})

    try:
        return TypeAdapter(shape).validate_json(text, strict=True)
    except ValidationError as e:
        logger.debug(f"[VALIDATE] {_shape_name(shape)} rejected: {e}")
        raise MalformedResponse(
            f"Response does not match {_shape_name(shape)}",
            context={"errors": e.error_count()},
        ) from e


def _shape_name(shape: Any) -> str:
    return getattr(shape, "__name__", None) or str(shape)
