"""Command-line parsing for a stage specification.

Every value stage with a ``FlagSpec`` becomes an optional ``--<name>`` flag;
value stages without one read the trailing positional arguments. All of them
are optional on the command line because missing values are prompted for.
"""

from __future__ import annotations

import argparse
import logging
from typing import Any, Sequence

from .models import CliSource, SpecificationError, StageKind, StageSpec, ValueStage
from .stages import order_stages

logger = logging.getLogger(__name__)

_POSITIONAL_DEST = "_positional_args"


def _to_number(raw: str) -> int | float | str:
    # Non-numeric text is passed through so the schema check rejects it and
    # the value gets prompted for instead of aborting the parse.
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        return raw


def flag_option(name: str) -> str:
    return "--" + name.replace("_", "-")


def _flag_stages(spec: StageSpec) -> list[tuple[str, ValueStage]]:
    return [
        (name, stage)
        for name, stage in order_stages(spec)
        if stage.kind == StageKind.VALUE and stage.flag is not None
    ]


def _positional_stages(spec: StageSpec) -> list[tuple[str, ValueStage]]:
    return [
        (name, stage)
        for name, stage in order_stages(spec)
        if stage.kind == StageKind.VALUE and stage.flag is None
    ]


def stage_help(stage: ValueStage) -> str:
    """Help entry for one value stage: prompt message, condition, schema."""
    lines = [stage.prompt.message]
    if stage.condition is not None and stage.condition.description:
        lines.append(stage.condition.description)
    lines.append(f"Schema: {stage.schema.describe()}")
    return "\n".join(lines)


def build_parser(
    spec: StageSpec,
    *,
    prog: str | None = None,
    version: str | None = None,
) -> argparse.ArgumentParser:
    """Build an ``argparse`` parser whose options mirror the flagged value stages.

    Raises:
        SpecificationError: If two stages claim the same short flag or ``-h``.
    """
    positional_stages = _positional_stages(spec)
    positional_label = " ".join(f"[{name}]" for name, _stage in positional_stages)
    subject = f"All options and {positional_label} are" if positional_label else "All options are"
    parser = argparse.ArgumentParser(
        prog=prog,
        usage=f"%(prog)s [options...] {positional_label}".rstrip(),
        description=(
            f"{subject} optional as command-line arguments.\n"
            "If any of them is omitted, the program will prompt for their values."
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    if version is not None:
        parser.add_argument("--version", action="version", version=version)

    used_short: set[str] = {"h"}
    for name, stage in _flag_stages(spec):
        flag = stage.flag
        option_strings = [flag_option(name)]
        if flag.short_flag is not None:
            if flag.short_flag in used_short:
                raise SpecificationError(f"Short flag -{flag.short_flag} of '{name}' is already in use")
            used_short.add(flag.short_flag)
            option_strings.append(f"-{flag.short_flag}")

        if flag.type == "boolean":
            parser.add_argument(
                *option_strings,
                dest=name,
                action=argparse.BooleanOptionalAction,
                default=argparse.SUPPRESS,
                help=stage_help(stage),
            )
        else:
            parser.add_argument(
                *option_strings,
                dest=name,
                type=_to_number if flag.type == "number" else str,
                default=argparse.SUPPRESS,
                metavar=flag.type.upper(),
                help=stage_help(stage),
            )

    parser.add_argument(
        _POSITIONAL_DEST,
        nargs="*",
        default=[],
        metavar=positional_stages[0][0] if positional_stages else "args",
        help="\n\n".join(f"{name}: {stage_help(stage)}" for name, stage in positional_stages) or argparse.SUPPRESS,
    )
    return parser


def parse_cli_args(
    spec: StageSpec,
    argv: Sequence[str] | None = None,
    *,
    prog: str | None = None,
    version: str | None = None,
) -> CliSource:
    """Parse ``argv`` (``sys.argv[1:]`` when None) into a ``CliSource``.

    Flags that were not given are absent from ``CliSource.flags``.
    """
    namespace = build_parser(spec, prog=prog, version=version).parse_intermixed_args(argv)
    parsed: dict[str, Any] = vars(namespace)
    positional = parsed.pop(_POSITIONAL_DEST, [])
    logger.debug("Parsed CLI flags=%s positional=%s", sorted(parsed), positional)
    return CliSource(flags=parsed, positional=positional)


def help_text(spec: StageSpec, *, prog: str | None = None) -> str:
    return build_parser(spec, prog=prog).format_help()
