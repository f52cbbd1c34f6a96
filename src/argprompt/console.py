from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

import click

from .models import Severity


class Console(Protocol):
    """Fire-and-forget output capability for user-visible notices."""

    def emit(self, text: str, severity: Severity = Severity.INFO, **style: Any) -> None:  # noqa: ANN401
        ...


class ClickConsole:
    """Writes notices with ``click.secho``; warnings and errors go to stderr."""

    def __init__(self, *, color: bool | None = None) -> None:
        self.color = color

    def emit(self, text: str, severity: Severity = Severity.INFO, **style: Any) -> None:  # noqa: ANN401
        severity = Severity(severity)
        click.secho(text, err=severity != Severity.INFO, color=self.color, **style)


@dataclass
class RecordingConsole:
    """Console that keeps every notice in memory, optionally echoing to another console."""

    messages: list[tuple[Severity, str]] = field(default_factory=list)
    forward_to: Console | None = None

    def emit(self, text: str, severity: Severity = Severity.INFO, **style: Any) -> None:  # noqa: ANN401
        severity = Severity(severity)
        self.messages.append((severity, text))
        if self.forward_to is not None:
            self.forward_to.emit(text, severity, **style)

    def texts(self, severity: Severity | None = None) -> list[str]:
        return [text for level, text in self.messages if severity is None or level == severity]
