from __future__ import annotations

import logging
from typing import Any, Protocol

from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticInvalidForJsonSchema

logger = logging.getLogger(__name__)


class Schema(Protocol):
    """Decode-and-validate capability attached to every value stage.

    ``decode`` turns raw input (prompt text, CLI value) into a typed value and
    raises ``ValueError`` when it cannot. ``accepts`` tells whether an
    already-typed value is acceptable as-is.
    """

    def decode(self, raw: Any) -> Any:  # noqa: ANN401 - schema-defined value type.
        ...

    def accepts(self, value: Any) -> bool:  # noqa: ANN401
        ...

    def describe(self) -> str:
        ...


class FieldSchema:
    """Pydantic-backed ``Schema``.

    Decoding runs in lax mode so that prompt text such as ``"8080"`` becomes an
    ``int`` for an ``int`` field. Acceptance runs in strict mode: values coming
    from the command line are already typed by the argument parser and must
    match without coercion.
    """

    def __init__(self, type_: Any, *, title: str | None = None) -> None:  # noqa: ANN401
        self.type_ = type_
        self.title = title
        self.adapter: TypeAdapter[Any] = TypeAdapter(type_)

    def __repr__(self) -> str:
        return f"FieldSchema({self.describe()})"

    def decode(self, raw: Any) -> Any:  # noqa: ANN401
        return self.adapter.validate_python(raw)

    def accepts(self, value: Any) -> bool:  # noqa: ANN401
        try:
            self.adapter.validate_python(value, strict=True)
        except ValidationError:
            return False
        return True

    def describe(self) -> str:
        if self.title:
            return self.title
        try:
            json_schema = self.adapter.json_schema()
        except PydanticInvalidForJsonSchema:
            logger.debug("No JSON schema available for %r", self.type_)
            return getattr(self.type_, "__name__", "value")
        return describe_json_schema(json_schema)


def describe_json_schema(node: dict[str, Any], root: dict[str, Any] | None = None) -> str:
    """Render a JSON schema node as a compact help-text type, e.g. ``"yarn"|"npm"`` or ``number``."""
    root = root if root is not None else node
    ref = node.get("$ref")
    if isinstance(ref, str) and ref.startswith("#/$defs/"):
        target = root.get("$defs", {}).get(ref.split("/")[-1])
        if isinstance(target, dict):
            return describe_json_schema(target, root)
    if "const" in node:
        return _literal_text(node["const"])
    if "enum" in node:
        return "|".join(_literal_text(value) for value in node["enum"])
    for key in ("anyOf", "oneOf"):
        if key in node:
            return "|".join(describe_json_schema(sub, root) for sub in node[key])
    node_type = node.get("type")
    if isinstance(node_type, list):
        return "|".join(str(item) for item in node_type)
    if isinstance(node_type, str):
        return node_type
    return str(node.get("title", "value"))


def _literal_text(value: Any) -> str:  # noqa: ANN401
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def format_decode_error(exc: ValueError) -> str:
    """Format a decode failure for display next to the prompt."""
    if not isinstance(exc, ValidationError):
        return str(exc) or type(exc).__name__
    lines: list[str] = []
    for error in exc.errors(include_url=False):
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = str(error.get("msg", "invalid value"))
        lines.append(f"{location}: {message}" if location else message)
    return "\n".join(lines) or str(exc)
