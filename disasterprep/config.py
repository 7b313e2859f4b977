from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .drill import DrillConfig

STORE_PATH_ENV = "DISASTERPREP_STORE_PATH"
HISTORY_PATH_ENV = "DISASTERPREP_HISTORY_PATH"
LOG_LEVEL_ENV = "DISASTERPREP_LOG_LEVEL"

_DEFAULT_LOG_LEVEL = "WARNING"


def default_store_path() -> Path:
    explicit = os.environ.get(STORE_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return Path.home() / ".disasterprep_edu.json"


def default_history_path() -> Path | None:
    explicit = os.environ.get(HISTORY_PATH_ENV)
    if explicit is not None:
        # Set-but-empty turns history recording off.
        return Path(explicit).expanduser() if explicit.strip() else None
    return Path.home() / ".disasterprep_edu_history.sqlite3"


def default_log_level() -> str:
    raw = os.environ.get(LOG_LEVEL_ENV, _DEFAULT_LOG_LEVEL).strip().upper()
    return raw if raw in logging.getLevelNamesMapping() else _DEFAULT_LOG_LEVEL


@dataclass(frozen=True, slots=True)
class AppConfig:
    store_path: Path
    history_path: Path | None
    log_level: str = _DEFAULT_LOG_LEVEL
    drill: DrillConfig = field(default_factory=DrillConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls(
            store_path=default_store_path(),
            history_path=default_history_path(),
            log_level=default_log_level(),
        )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )
