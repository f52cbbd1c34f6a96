from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Sequence, Union

from .cli_args import parse_cli_args
from .console import ClickConsole, Console
from .models import (
    ClaimRecord,
    ClaimState,
    CliSource,
    FieldErrors,
    OpenClaims,
    Severity,
    SpecificationError,
    StageSpec,
    StructuralError,
)
from .prompting import ClickPrompter, Prompter
from .settings import RuntimeSettings
from .stages import ContextProvider, StageProcessor

logger = logging.getLogger(__name__)

FinalValidator = Callable[[dict[str, Any]], Union[Any, Awaitable[Any]]]


class CollectionState(str, Enum):
    COLLECTING = "collecting"
    VALIDATING = "validating"
    RETRY_FIELDS = "retry_fields"
    RESET = "reset"
    DONE = "done"


@dataclass(frozen=True)
class Accepted:
    value: Any


Verdict = Union[Accepted, FieldErrors, StructuralError]


def classify_verdict(outcome: Any) -> Verdict:  # noqa: ANN401
    """Interpret what the final validator returned.

    ``FieldErrors`` and ``StructuralError`` are taken as-is. A bare list of
    ``(name, message)`` pairs means field errors and a bare string means a
    structural error. Anything else is the accepted, final value.
    """
    if isinstance(outcome, (FieldErrors, StructuralError)):
        return outcome
    if isinstance(outcome, list):
        return FieldErrors(errors=tuple(outcome))
    if isinstance(outcome, str):
        return StructuralError(message=outcome)
    return Accepted(value=outcome)


def _no_context(_values: Mapping[str, Any]) -> None:
    return None


class InputCollector:
    """Collects a validated input object from CLI values and prompts.

    Each round runs one stage pass and then the final validator. Fields the
    validator rejects are cleared and asked again; a structural error wipes
    everything and starts over from the original command line.
    """

    def __init__(
        self,
        spec: StageSpec,
        *,
        validator: FinalValidator,
        context_provider: ContextProvider | None = None,
        prompter: Prompter | None = None,
        console: Console | None = None,
        settings: RuntimeSettings | None = None,
    ) -> None:
        self.settings = settings if settings is not None else RuntimeSettings.from_env()
        self.spec = spec
        self.validator = validator
        self.console = console if console is not None else ClickConsole(color=self.settings.color)
        self.prompter = prompter if prompter is not None else ClickPrompter(require_tty=self.settings.require_tty)
        self.processor = StageProcessor(
            spec,
            prompter=self.prompter,
            console=self.console,
            context_provider=context_provider if context_provider is not None else _no_context,
        )
        self.state = CollectionState.COLLECTING
        self.rounds = 0

    async def collect(self, cli: CliSource) -> Any:  # noqa: ANN401
        values: dict[str, Any] = {}
        claims: ClaimRecord = OpenClaims(source=cli)
        self.state = CollectionState.COLLECTING
        self.rounds = 0
        while True:
            self.rounds += 1
            pass_result = await self.processor.run_pass(values, claims)

            self.state = CollectionState.VALIDATING
            verdict = classify_verdict(await self._validate(values))
            logger.debug("Round %d verdict: %s", self.rounds, type(verdict).__name__)

            if isinstance(verdict, Accepted):
                self.state = CollectionState.DONE
                return verdict.value

            if isinstance(verdict, FieldErrors):
                self.state = CollectionState.RETRY_FIELDS
                if not any(name in values for name, _message in verdict.errors):
                    raise SpecificationError(
                        "Field errors must name at least one collected field, got: "
                        f"{[name for name, _message in verdict.errors]!r} (collected: {sorted(values)!r})"
                    )
                for name, message in verdict.errors:
                    self.console.emit(f'Error for "{name}":\n{message}\n', Severity.ERROR, fg="bright_red")
                    values.pop(name, None)
                if claims.state == ClaimState.OPEN:
                    claims = claims.close(frozenset(pass_result.claimed_from_cli))
                    logger.debug("CLI claims closed with %s", sorted(claims.names))
            elif isinstance(verdict, StructuralError):
                self.state = CollectionState.RESET
                self.console.emit(
                    "There has been an internal error when collecting input.\n"
                    "Discarding all collected values and starting to collect input from the beginning.\n"
                    f"Error message: {verdict.message}",
                    Severity.ERROR,
                    fg="red",
                )
                logger.warning("Structural validation error, resetting collection: %s", verdict.message)
                values.clear()
                claims = OpenClaims(source=cli)
            else:
                raise SpecificationError(f"Unhandled validation verdict: {verdict!r}")

            self.state = CollectionState.COLLECTING

    async def _validate(self, values: dict[str, Any]) -> Any:  # noqa: ANN401
        outcome = self.validator(dict(values))
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return outcome


async def collect_input(
    spec: StageSpec,
    cli: CliSource,
    *,
    validator: FinalValidator,
    context_provider: ContextProvider | None = None,
    prompter: Prompter | None = None,
    console: Console | None = None,
    settings: RuntimeSettings | None = None,
) -> Any:  # noqa: ANN401
    """Collect and validate input for ``spec``; see ``InputCollector``."""
    collector = InputCollector(
        spec,
        validator=validator,
        context_provider=context_provider,
        prompter=prompter,
        console=console,
        settings=settings,
    )
    return await collector.collect(cli)


async def parse_and_collect(
    spec: StageSpec,
    argv: Sequence[str] | None = None,
    *,
    validator: FinalValidator,
    context_provider: ContextProvider | None = None,
    prompter: Prompter | None = None,
    console: Console | None = None,
    settings: RuntimeSettings | None = None,
) -> Any:  # noqa: ANN401
    """Parse ``argv`` against ``spec`` and then collect input from it."""
    settings = settings if settings is not None else RuntimeSettings.from_env()
    cli = parse_cli_args(spec, argv, prog=settings.prog)
    return await collect_input(
        spec,
        cli,
        validator=validator,
        context_provider=context_provider,
        prompter=prompter,
        console=console,
        settings=settings,
    )
