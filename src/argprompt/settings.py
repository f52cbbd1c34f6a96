from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class RuntimeSettings:
    """Runtime settings loaded from environment with fail-fast validation."""

    require_tty: bool = False
    color: bool | None = None
    log_level: str = "WARNING"
    prog: str = "argprompt"

    @classmethod
    def from_env(cls) -> "RuntimeSettings":
        return cls(
            require_tty=_get_env_bool("ARGPROMPT_REQUIRE_TTY", default=False),
            color=_get_env_optional_bool("ARGPROMPT_COLOR"),
            log_level=os.getenv("ARGPROMPT_LOG_LEVEL", "WARNING"),
            prog=os.getenv("ARGPROMPT_PROG", "argprompt"),
        ).normalized()

    def normalized(self) -> "RuntimeSettings":
        """Validate and normalize all fields. Raises ValueError on invalid configuration."""
        log_level = self.log_level.strip().upper()
        if log_level not in LOG_LEVELS:
            raise ValueError(f"ARGPROMPT_LOG_LEVEL must be one of: {', '.join(sorted(LOG_LEVELS))}")
        prog = self.prog.strip()
        if not prog:
            raise ValueError("ARGPROMPT_PROG must be non-empty")
        return RuntimeSettings(
            require_tty=self.require_tty,
            color=self.color,
            log_level=log_level,
            prog=prog,
        )

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)


def load_env_file(path: Path | None = None) -> bool:
    """Load ``ARGPROMPT_*`` overrides from a ``.env`` file (cwd by default).

    Returns:
        True if the file existed and was loaded.
    """
    env_path = path if path is not None else Path.cwd() / ".env"
    if not env_path.is_file():
        return False
    return load_dotenv(env_path)


def _get_env_optional_bool(name: str) -> bool | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return _parse_bool(name, raw)


def _get_env_bool(name: str, default: bool) -> bool:
    """Parse a boolean from an environment variable.

    Args:
        name: Environment variable name.
        default: Value to return if the variable is unset or blank.

    Returns:
        The parsed boolean.

    Raises:
        ValueError: If the value is not a recognised boolean spelling.
    """
    value = _get_env_optional_bool(name)
    return default if value is None else value


def _parse_bool(name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (true/false), got: {raw!r}")
