from importlib.metadata import version

from .cli_args import build_parser, help_text, parse_cli_args
from .collect import Accepted, CollectionState, InputCollector, classify_verdict, collect_input, parse_and_collect
from .console import ClickConsole, Console, RecordingConsole
from .models import (
    ArgPromptError,
    ClaimRecord,
    ClaimState,
    ClosedClaims,
    CliSource,
    Condition,
    FieldErrors,
    FlagSpec,
    MessageStage,
    MissingContextError,
    OpenClaims,
    PassResult,
    PromptSpec,
    PromptUnavailableError,
    QuestionKind,
    Severity,
    SpecificationError,
    Stage,
    StageKind,
    StageSpec,
    StructuralError,
    ValueStage,
)
from .prompting import ClickPrompter, Prompter
from .schema import FieldSchema, Schema, format_decode_error
from .settings import RuntimeSettings, load_env_file
from .stages import StageProcessor, order_stages, prompt_for_value, resolve_from_cli
from .validators import validate_with_model


def get_version() -> str:
    try:
        return version(__name__)
    except Exception:
        return "0.0.0"


__all__ = [
    "Accepted",
    "ArgPromptError",
    "ClaimRecord",
    "ClaimState",
    "ClickConsole",
    "ClickPrompter",
    "CliSource",
    "ClosedClaims",
    "CollectionState",
    "Condition",
    "Console",
    "FieldErrors",
    "FieldSchema",
    "FlagSpec",
    "InputCollector",
    "MessageStage",
    "MissingContextError",
    "OpenClaims",
    "PassResult",
    "PromptSpec",
    "PromptUnavailableError",
    "Prompter",
    "QuestionKind",
    "RecordingConsole",
    "RuntimeSettings",
    "Schema",
    "Severity",
    "SpecificationError",
    "Stage",
    "StageKind",
    "StageProcessor",
    "StageSpec",
    "StructuralError",
    "ValueStage",
    "build_parser",
    "classify_verdict",
    "collect_input",
    "format_decode_error",
    "get_version",
    "help_text",
    "load_env_file",
    "order_stages",
    "parse_and_collect",
    "parse_cli_args",
    "prompt_for_value",
    "resolve_from_cli",
    "validate_with_model",
]
