from __future__ import annotations

import asyncio
import threading
from typing import Any

import pytest
from click.testing import CliRunner

from argprompt import ClickPrompter, FieldSchema, PromptSpec, PromptUnavailableError, QuestionKind


def _ask(question: PromptSpec, decode, input_text: str, prompter: ClickPrompter | None = None) -> tuple[Any, str]:  # noqa: ANN001
    prompter = prompter or ClickPrompter()
    with CliRunner().isolation(input=input_text) as streams:
        value = asyncio.run(prompter.ask(question, decode))
        output = streams[0].getvalue().decode()
    return value, output


def test_input_prompt_reasks_until_decoder_accepts() -> None:
    value, output = _ask(PromptSpec("Port?"), FieldSchema(int).decode, "abc\n8080\n")
    assert value == 8080
    assert output.count("Port?") == 2
    assert "Error:" in output


def test_input_prompt_uses_default_on_empty_answer() -> None:
    value, output = _ask(PromptSpec("Name?", default="anon"), FieldSchema(str).decode, "\n")
    assert value == "anon"
    assert "Name? [anon]:" in output


def test_number_prompt_decodes_default() -> None:
    question = PromptSpec("Port?", kind=QuestionKind.NUMBER, default=8000)
    value, _output = _ask(question, FieldSchema(int).decode, "\n")
    assert value == 8000


def test_password_prompt_hides_input() -> None:
    value, output = _ask(PromptSpec("Token?", kind=QuestionKind.PASSWORD), FieldSchema(str).decode, "s3cret\n")
    assert value == "s3cret"
    assert "s3cret" not in output


def test_list_prompt_returns_choice_value() -> None:
    question = PromptSpec("Manager?", kind=QuestionKind.LIST, choices=(("Poetry", "poetry"), ("uv", "uv")))
    value, output = _ask(question, FieldSchema(str).decode, "3\n2\n")
    assert value == "uv"
    assert "  1) Poetry" in output
    assert "  2) uv" in output


def test_list_prompt_default_selects_matching_choice() -> None:
    question = PromptSpec("Runner?", kind=QuestionKind.LIST, default="unittest", choices=("pytest", "unittest"))
    value, output = _ask(question, FieldSchema(str).decode, "\n")
    assert value == "unittest"
    assert "Answer [2]:" in output


def test_confirm_prompt() -> None:
    value, _output = _ask(PromptSpec("Tests?", kind=QuestionKind.CONFIRM, default=True), FieldSchema(bool).decode, "n\n")
    assert value is False


def test_confirm_prompt_reasks_when_decoder_rejects() -> None:
    def only_no(answer: bool) -> bool:
        if answer:
            raise ValueError("must say no")
        return answer

    value, output = _ask(PromptSpec("Sure?", kind=QuestionKind.CONFIRM), only_no, "y\nn\n")
    assert value is False
    assert "Error: must say no" in output


def test_closed_input_raises_prompt_unavailable() -> None:
    with pytest.raises(PromptUnavailableError, match="Name"):
        _ask(PromptSpec("Name?"), FieldSchema(str).decode, "")


def test_require_tty_refuses_piped_input() -> None:
    with pytest.raises(PromptUnavailableError, match="not an interactive terminal"):
        _ask(PromptSpec("Name?"), FieldSchema(str).decode, "Ada\n", prompter=ClickPrompter(require_tty=True))


def test_empty_answer_reaches_decoder_without_default() -> None:
    value, output = _ask(PromptSpec("Suffix?"), FieldSchema(str).decode, "\n")
    assert value == ""
    assert "Suffix?:" in output
    assert "[]" not in output


def test_empty_answer_rejected_by_decoder_is_asked_again() -> None:
    def non_empty(raw: str) -> str:
        if not raw:
            raise ValueError("a value is required")
        return raw

    value, output = _ask(PromptSpec("Name?"), non_empty, "\nAda\n")
    assert value == "Ada"
    assert "Error: a value is required" in output


def test_prompt_runs_off_the_event_loop_thread(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[bool] = []

    def fake_prompt(*args: Any, **kwargs: Any) -> str:  # noqa: ANN401
        seen.append(threading.current_thread() is threading.main_thread())
        return "Ada"

    async def ask_while_ticking() -> tuple[str, int]:
        ticks = 0

        async def ticker() -> None:
            nonlocal ticks
            while True:
                ticks += 1
                await asyncio.sleep(0)

        task = asyncio.create_task(ticker())
        value = await ClickPrompter().ask(PromptSpec("Name?"), FieldSchema(str).decode)
        task.cancel()
        return value, ticks

    monkeypatch.setattr("argprompt.prompting.click.prompt", fake_prompt)
    value, ticks = asyncio.run(ask_while_ticking())
    assert value == "Ada"
    assert seen == [False]
    assert ticks >= 1
