from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Literal, Mapping, Sequence, Union

if TYPE_CHECKING:
    from .schema import Schema


class Severity(str, Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class StageKind(str, Enum):
    VALUE = "value"
    MESSAGE = "message"


class ClaimState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class QuestionKind(str, Enum):
    INPUT = "input"
    CONFIRM = "confirm"
    LIST = "list"
    NUMBER = "number"
    PASSWORD = "password"


FlagType = Literal["string", "boolean", "number"]
FLAG_TYPES: frozenset[str] = frozenset({"string", "boolean", "number"})


class ArgPromptError(RuntimeError):
    """Base class for errors raised by the collection engine."""


class MissingContextError(ArgPromptError):
    """A condition or dynamic message was evaluated before any dynamic context existed."""

    def __init__(self, stage_name: str, what: str) -> None:
        super().__init__(
            f"Stage '{stage_name}' needs dynamic context to evaluate its {what}, "
            "but the context provider has not produced one yet"
        )
        self.stage_name = stage_name
        self.what = what


class PromptUnavailableError(ArgPromptError):
    """The interactive prompt could not obtain an answer (no terminal, closed input)."""


class SpecificationError(ValueError):
    """The stage specification or a validator verdict is malformed."""


@dataclass(frozen=True)
class FlagSpec:
    """Marks a value stage as sourced from the command-line flag ``--<field name>``."""

    type: FlagType = "string"
    short_flag: str | None = None

    def __post_init__(self) -> None:
        if self.type not in FLAG_TYPES:
            raise SpecificationError(f"flag type must be one of {sorted(FLAG_TYPES)}, got: {self.type!r}")
        if self.short_flag is not None and (len(self.short_flag) != 1 or not self.short_flag.isalpha()):
            raise SpecificationError(f"short_flag must be a single letter, got: {self.short_flag!r}")


@dataclass(frozen=True)
class PromptSpec:
    """How to ask the user for a value. Opaque to the engine, interpreted by the prompter."""

    message: str
    kind: QuestionKind = QuestionKind.INPUT
    default: Any = None
    choices: tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        if not self.message.strip():
            raise SpecificationError("prompt message must be non-empty")
        object.__setattr__(self, "kind", QuestionKind(self.kind))
        object.__setattr__(self, "choices", tuple(self.choices))
        if self.kind == QuestionKind.LIST and not self.choices:
            raise SpecificationError(f"list prompt '{self.message}' requires choices")

    def choice_pairs(self) -> list[tuple[str, Any]]:
        """Return choices as ``(label, value)`` pairs; bare values label themselves."""
        pairs: list[tuple[str, Any]] = []
        for choice in self.choices:
            if isinstance(choice, tuple) and len(choice) == 2:
                pairs.append((str(choice[0]), choice[1]))
            else:
                pairs.append((str(choice), choice))
        return pairs


@dataclass(frozen=True)
class Condition:
    """Applicability test for a value stage.

    ``is_applicable`` receives the dynamic context. Returning ``True`` keeps the
    stage; ``False`` skips it silently; a string skips it and is shown to the
    user as the reason. ``description`` is used in help text.
    """

    description: str
    is_applicable: Callable[[Any], bool | str]


@dataclass(frozen=True)
class MessageStage:
    order: int
    message: str | Callable[[Any], str | None]
    kind: Literal[StageKind.MESSAGE] = field(default=StageKind.MESSAGE, init=False)

    def __post_init__(self) -> None:
        _check_order(self.order)


@dataclass(frozen=True)
class ValueStage:
    order: int
    schema: Schema
    prompt: PromptSpec
    flag: FlagSpec | None = None
    condition: Condition | None = None
    kind: Literal[StageKind.VALUE] = field(default=StageKind.VALUE, init=False)

    def __post_init__(self) -> None:
        _check_order(self.order)

    @property
    def source_label(self) -> str:
        return "flag" if self.flag is not None else "positional"


Stage = Union[MessageStage, ValueStage]
StageSpec = Mapping[str, Stage]


def _check_order(order: Any) -> None:
    if isinstance(order, bool) or not isinstance(order, int):
        raise SpecificationError(f"stage order must be an integer, got: {order!r}")


@dataclass(frozen=True)
class CliSource:
    """Immutable snapshot of parsed command-line input."""

    flags: Mapping[str, Any] = field(default_factory=dict)
    positional: Sequence[Any] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "flags", MappingProxyType(dict(self.flags)))
        object.__setattr__(self, "positional", tuple(self.positional))

    def flag_value(self, name: str) -> Any:
        return self.flags.get(name)

    def first_positional(self) -> Any:
        return self.positional[0] if self.positional else None


@dataclass(frozen=True)
class OpenClaims:
    """CLI-claim record before any field was rejected: raw CLI values may still be read."""

    source: CliSource
    state: Literal[ClaimState.OPEN] = field(default=ClaimState.OPEN, init=False)

    def close(self, claimed: frozenset[str]) -> ClosedClaims:
        return ClosedClaims(names=frozenset(claimed))


@dataclass(frozen=True)
class ClosedClaims:
    """CLI-claim record after a rejection: only remembers which fields came from the CLI."""

    names: frozenset[str]
    state: Literal[ClaimState.CLOSED] = field(default=ClaimState.CLOSED, init=False)


ClaimRecord = Union[OpenClaims, ClosedClaims]


@dataclass(frozen=True)
class FieldErrors:
    """Final-validator verdict: these fields are wrong, ask for them again."""

    errors: tuple[tuple[str, str], ...]

    def __post_init__(self) -> None:
        pairs: list[tuple[str, str]] = []
        for item in self.errors:
            if not isinstance(item, (tuple, list)) or len(item) != 2:
                raise SpecificationError(f"field error must be a (name, message) pair, got: {item!r}")
            pairs.append((str(item[0]), str(item[1])))
        object.__setattr__(self, "errors", tuple(pairs))


@dataclass(frozen=True)
class StructuralError:
    """Final-validator verdict: the collected object is structurally broken, start over."""

    message: str


@dataclass
class PassResult:
    """Outcome of one stage-processor pass."""

    claimed_from_cli: set[str] = field(default_factory=set)
    prompted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
