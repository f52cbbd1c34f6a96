from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any, Callable, Protocol

import click

from .models import PromptSpec, PromptUnavailableError, QuestionKind
from .schema import format_decode_error

logger = logging.getLogger(__name__)

Decoder = Callable[[Any], Any]


class Prompter(Protocol):
    """Interactive prompt capability.

    ``ask`` must keep asking until ``decode`` accepts the answer and return the
    decoded value. It raises ``PromptUnavailableError`` when no answer can be
    obtained at all.
    """

    async def ask(self, question: PromptSpec, decode: Decoder) -> Any:  # noqa: ANN401
        ...


class ClickPrompter:
    """``Prompter`` built on ``click.prompt`` / ``click.confirm``.

    Invalid answers are reported with the decoder's error text and the same
    question is asked again in place. End of input raises
    ``PromptUnavailableError`` instead of exiting the process.
    """

    def __init__(self, *, require_tty: bool = False, err: bool = False) -> None:
        self.require_tty = require_tty
        self.err = err

    async def ask(self, question: PromptSpec, decode: Decoder) -> Any:  # noqa: ANN401
        if self.require_tty and not sys.stdin.isatty():
            raise PromptUnavailableError(
                f"Cannot prompt for {question.message!r}: standard input is not an interactive terminal"
            )
        try:
            return await asyncio.to_thread(self._ask, question, decode)
        except click.Abort as exc:
            raise PromptUnavailableError(f"No answer received for {question.message!r}: input was closed") from exc

    def _ask(self, question: PromptSpec, decode: Decoder) -> Any:  # noqa: ANN401
        if question.kind == QuestionKind.CONFIRM:
            return self._retry(decode, lambda: click.confirm(question.message, default=_confirm_default(question), err=self.err))
        if question.kind == QuestionKind.LIST:
            return self._ask_list(question, decode)
        # click re-asks on an empty answer unless a default exists, so an
        # empty default lets the decoder judge "" like any other answer.
        default = question.default
        if default is None and question.kind in (QuestionKind.INPUT, QuestionKind.PASSWORD):
            default = ""
        return click.prompt(
            question.message,
            default=default,
            show_default=default != "",
            hide_input=question.kind == QuestionKind.PASSWORD,
            value_proc=_decoding_proc(decode),
            err=self.err,
        )

    def _ask_list(self, question: PromptSpec, decode: Decoder) -> Any:  # noqa: ANN401
        pairs = question.choice_pairs()
        default_index: int | None = None
        for index, (_label, value) in enumerate(pairs, 1):
            if question.default is not None and value == question.default:
                default_index = index
        click.echo(question.message, err=self.err)
        for index, (label, _value) in enumerate(pairs, 1):
            click.echo(f"  {index}) {label}", err=self.err)

        def _pick() -> Any:  # noqa: ANN401
            selected = click.prompt(
                "Answer",
                type=click.IntRange(1, len(pairs)),
                default=default_index,
                err=self.err,
            )
            return pairs[selected - 1][1]

        return self._retry(decode, _pick)

    def _retry(self, decode: Decoder, read: Callable[[], Any]) -> Any:  # noqa: ANN401
        while True:
            answer = read()
            try:
                return decode(answer)
            except ValueError as exc:
                click.echo(f"Error: {format_decode_error(exc)}", err=self.err)


def _decoding_proc(decode: Decoder) -> Callable[[Any], Any]:
    def _proc(raw: Any) -> Any:  # noqa: ANN401
        try:
            return decode(raw)
        except ValueError as exc:
            raise click.BadParameter(format_decode_error(exc)) from exc

    return _proc


def _confirm_default(question: PromptSpec) -> bool | None:
    return question.default if isinstance(question.default, bool) else None
