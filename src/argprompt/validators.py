from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, TypeVar

from pydantic import BaseModel, ValidationError

from .models import FieldErrors, StructuralError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_with_model(
    model: type[ModelT],
    *,
    fields: Iterable[str] | None = None,
) -> Callable[[dict[str, Any]], ModelT | FieldErrors | StructuralError]:
    """Build a final validator that checks collected input against a Pydantic model.

    Errors located on one of ``fields`` (all model fields by default) become
    per-field errors so only those values are asked again. Missing fields and
    errors without a field location mean the collected object is structurally
    wrong, which restarts collection.

    Args:
        model: Pydantic model describing the final, validated input.
        fields: Field names that may be re-asked individually.

    Returns:
        A synchronous validator usable with ``InputCollector``.
    """
    correctable = set(fields) if fields is not None else set(model.model_fields)

    def _validate(values: dict[str, Any]) -> ModelT | FieldErrors | StructuralError:
        try:
            return model.model_validate(values)
        except ValidationError as exc:
            return _verdict_from_error(exc, correctable)

    return _validate


def _verdict_from_error(exc: ValidationError, correctable: set[str]) -> FieldErrors | StructuralError:
    messages: dict[str, list[str]] = {}
    for error in exc.errors(include_url=False):
        location = error.get("loc", ())
        name = str(location[0]) if location else ""
        if error.get("type") == "missing" or name not in correctable:
            logger.debug("Structural validation error at %r: %s", location, error.get("msg"))
            return StructuralError(message=str(exc))
        messages.setdefault(name, []).append(str(error.get("msg", "invalid value")))
    return FieldErrors(errors=tuple((name, "\n".join(lines)) for name, lines in messages.items()))
