from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, MutableMapping

from .console import Console
from .models import (
    ClaimRecord,
    ClaimState,
    MessageStage,
    MissingContextError,
    PassResult,
    Severity,
    SpecificationError,
    Stage,
    StageKind,
    StageSpec,
    ValueStage,
)
from .prompting import Prompter

logger = logging.getLogger(__name__)

ContextProvider = Callable[[MutableMapping[str, Any]], Any]


def order_stages(spec: StageSpec) -> list[tuple[str, Stage]]:
    """Return ``(name, stage)`` pairs sorted by ascending ``order``.

    ``sorted`` is stable, so stages sharing an order key keep the order of the
    mapping.
    """
    return sorted(spec.items(), key=lambda item: item[1].order)


@dataclass(frozen=True)
class CliResolution:
    found: bool
    value: Any = None


NOT_FROM_CLI = CliResolution(found=False)


def resolve_from_cli(name: str, stage: ValueStage, claims: ClaimRecord, console: Console) -> CliResolution:
    """Try to take the value of ``name`` from the command line without prompting."""
    if claims.state == ClaimState.CLOSED:
        if name in claims.names:
            console.emit(
                f'Not re-using CLI-supplied value for "{name}" after error.',
                Severity.INFO,
                bold=True,
                fg="bright_cyan",
            )
        return NOT_FROM_CLI
    if claims.state != ClaimState.OPEN:
        raise SpecificationError(f"Unknown CLI claim state: {claims.state!r}")

    source = claims.source
    raw = source.flag_value(name) if stage.flag is not None else source.first_positional()
    if raw is None:
        return NOT_FROM_CLI
    if stage.schema.accepts(raw):
        console.emit(f'Using value supplied via CLI for "{name}" ({raw}).', Severity.INFO, italic=True)
        return CliResolution(found=True, value=raw)

    where = f'parameter "{name}"' if stage.flag is not None else "argument"
    console.emit(
        f"! The value specified as CLI {where} was not valid, proceeding to prompt for it.",
        Severity.WARN,
        bold=True,
        fg="bright_cyan",
    )
    return NOT_FROM_CLI


async def prompt_for_value(stage: ValueStage, prompter: Prompter) -> Any:  # noqa: ANN401
    """Ask the user, with the stage schema's decoder as the answer validator."""
    return await prompter.ask(stage.prompt, stage.schema.decode)


class StageProcessor:
    """Runs one pass over the ordered stages, filling in missing values."""

    def __init__(
        self,
        spec: StageSpec,
        *,
        prompter: Prompter,
        console: Console,
        context_provider: ContextProvider,
    ) -> None:
        self.stages = order_stages(spec)
        self.prompter = prompter
        self.console = console
        self.context_provider = context_provider

    async def run_pass(self, values: MutableMapping[str, Any], claims: ClaimRecord) -> PassResult:
        """Resolve every stage not yet present in ``values``, in order.

        ``values`` is updated in place. The returned ``PassResult`` lists the
        fields taken from the command line during this pass.
        """
        result = PassResult()
        context = self.context_provider(values)
        logger.debug("Stage pass started with %d collected value(s)", len(values))
        for name, stage in self.stages:
            if name in values:
                continue
            if stage.kind == StageKind.MESSAGE:
                self._show_message(name, stage, context)
            elif stage.kind == StageKind.VALUE:
                collected = await self._collect_value(name, stage, values, context, claims, result)
                if collected and context is None:
                    context = self.context_provider(values)
            else:
                raise SpecificationError(f"Stage '{name}' has unknown kind {stage.kind!r}")

        return result

    def _show_message(self, name: str, stage: MessageStage, context: Any) -> None:  # noqa: ANN401
        message = stage.message
        if callable(message):
            if context is None:
                raise MissingContextError(name, "message")
            message = message(context)
        if isinstance(message, str) and message:
            self.console.emit(message, Severity.INFO)

    async def _collect_value(
        self,
        name: str,
        stage: ValueStage,
        values: MutableMapping[str, Any],
        context: Any,  # noqa: ANN401
        claims: ClaimRecord,
        result: PassResult,
    ) -> bool:
        applicable = self._is_applicable(name, stage, context)
        if applicable is not True:
            if isinstance(applicable, str) and applicable:
                self.console.emit(applicable, Severity.INFO)
            logger.debug("Stage '%s' skipped: condition not met", name)
            result.skipped.append(name)
            return False

        resolution = resolve_from_cli(name, stage, claims, self.console)
        if resolution.found:
            value = resolution.value
            result.claimed_from_cli.add(name)
            logger.debug("Stage '%s' resolved from %s", name, stage.source_label)
        else:
            value = await prompt_for_value(stage, self.prompter)
            result.prompted.append(name)
            logger.debug("Stage '%s' resolved from prompt", name)
        values[name] = value
        return True

    def _is_applicable(self, name: str, stage: ValueStage, context: Any) -> bool | str:  # noqa: ANN401
        if stage.condition is None:
            return True
        if context is None:
            raise MissingContextError(name, "condition")
        outcome = stage.condition.is_applicable(context)
        if isinstance(outcome, str):
            return outcome
        return bool(outcome)
