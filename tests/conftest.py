from __future__ import annotations

from typing import Annotated, Any, Callable

import pytest
from pydantic import StringConstraints

from argprompt import FieldSchema, FlagSpec, PromptSpec, RecordingConsole, ValueStage


class ScriptedPrompter:
    """Prompter that answers from a per-message script, re-asking on decode errors like a real prompt."""

    def __init__(self, answers: dict[str, list[Any]] | None = None) -> None:
        self.answers = {message: list(values) for message, values in (answers or {}).items()}
        self.asked: list[str] = []

    async def ask(self, question: PromptSpec, decode):  # noqa: ANN001,ANN201
        self.asked.append(question.message)
        queue = self.answers.get(question.message, [])
        while queue:
            raw = queue.pop(0)
            try:
                return decode(raw)
            except ValueError:
                continue
        raise AssertionError(f"unexpected prompt: {question.message!r}")


NON_EMPTY = Annotated[str, StringConstraints(min_length=1)]


def _text_stage(order: int, *, message: str, flag: bool = True, condition=None) -> ValueStage:  # noqa: ANN001
    return ValueStage(
        order=order,
        schema=FieldSchema(NON_EMPTY),
        prompt=PromptSpec(message),
        flag=FlagSpec() if flag else None,
        condition=condition,
    )


@pytest.fixture
def scripted_prompter() -> type[ScriptedPrompter]:
    return ScriptedPrompter


@pytest.fixture(name="text_stage")
def text_stage_factory() -> Callable[..., ValueStage]:
    return _text_stage


@pytest.fixture
def console() -> RecordingConsole:
    return RecordingConsole()


@pytest.fixture(autouse=True)
def _clean_argprompt_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ARGPROMPT_REQUIRE_TTY", "ARGPROMPT_COLOR", "ARGPROMPT_LOG_LEVEL", "ARGPROMPT_PROG"):
        monkeypatch.delenv(name, raising=False)
