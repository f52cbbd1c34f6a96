"""Entry point for `python -m argprompt` and the `argprompt` CLI script.

Collects a small project-scaffold configuration, taking values from the
command line where given and prompting for the rest.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, Literal, Sequence

import click
from pydantic import BaseModel, Field, StringConstraints, field_validator

from argprompt import (
    Condition,
    FieldSchema,
    FlagSpec,
    MessageStage,
    PromptSpec,
    PromptUnavailableError,
    QuestionKind,
    RuntimeSettings,
    StageSpec,
    ValueStage,
    load_env_file,
    parse_and_collect,
    validate_with_model,
)

PackageManager = Literal["pip", "poetry", "uv", "unspecified"]
RunnerName = Literal["pytest", "unittest"]


class ProjectConfig(BaseModel):
    folder: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    package_manager: PackageManager
    with_tests: bool
    test_runner: RunnerName | None = None
    port: int = Field(ge=1, le=65535)

    @field_validator("folder")
    @classmethod
    def _folder_is_free(cls, value: str) -> str:
        path = Path(value)
        if path.is_file() or (path.is_dir() and any(path.iterdir())):
            raise ValueError(f"{value} already exists and is not an empty directory")
        return value


@dataclass(frozen=True)
class ScaffoldContext:
    with_tests: bool


def scaffold_context(values: dict[str, Any]) -> ScaffoldContext | None:
    if "with_tests" not in values:
        return None
    return ScaffoldContext(with_tests=bool(values["with_tests"]))


def build_scaffold_spec() -> StageSpec:
    return {
        "general_message": MessageStage(order=0, message="# General project configuration"),
        "folder": ValueStage(
            order=1,
            schema=FieldSchema(Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)], title="non-empty folder path"),
            prompt=PromptSpec("Where should the project be created?", default="./my-project"),
        ),
        "package_manager": ValueStage(
            order=2,
            schema=FieldSchema(PackageManager),
            prompt=PromptSpec(
                "Which package manager will be used in the project?",
                kind=QuestionKind.LIST,
                default="pip",
                choices=(
                    ("pip", "pip"),
                    ("Poetry", "poetry"),
                    ("uv", "uv"),
                    ("Decide on your own after project creation", "unspecified"),
                ),
            ),
            flag=FlagSpec(short_flag="m"),
        ),
        "with_tests": ValueStage(
            order=3,
            schema=FieldSchema(bool),
            prompt=PromptSpec("Should the project include a test suite?", kind=QuestionKind.CONFIRM, default=True),
            flag=FlagSpec(type="boolean", short_flag="t"),
        ),
        "tests_message": MessageStage(
            order=4,
            message=lambda context: "# Test configuration" if context.with_tests else None,
        ),
        "test_runner": ValueStage(
            order=5,
            schema=FieldSchema(RunnerName),
            prompt=PromptSpec(
                "Which test runner should be used?",
                kind=QuestionKind.LIST,
                default="pytest",
                choices=("pytest", "unittest"),
            ),
            flag=FlagSpec(short_flag="r"),
            condition=Condition(
                description="Only used when the project includes a test suite.",
                is_applicable=lambda context: context.with_tests or "Skipping test runner, no test suite requested.",
            ),
        ),
        "port": ValueStage(
            order=6,
            schema=FieldSchema(Annotated[int, Field(ge=1, le=65535)]),
            prompt=PromptSpec("Which port should the development server listen on?", kind=QuestionKind.NUMBER, default=8000),
            flag=FlagSpec(type="number", short_flag="p"),
        ),
    }


def main(argv: Sequence[str] | None = None) -> int:
    load_env_file()
    try:
        settings = RuntimeSettings.from_env()
    except ValueError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 2
    logging.basicConfig(
        level=settings.logging_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = asyncio.run(
            parse_and_collect(
                build_scaffold_spec(),
                argv,
                validator=validate_with_model(ProjectConfig),
                context_provider=scaffold_context,
                settings=settings,
            )
        )
    except PromptUnavailableError as exc:
        logging.error("Unable to collect input: %s", exc)
        return 1

    click.echo(json.dumps(config.model_dump(mode="json"), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
