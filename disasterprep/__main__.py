from __future__ import annotations

from .app import run
from .config import AppConfig


def main() -> int:
    """Launch the DisasterPrep EDU window using paths from the environment."""
    return run(config=AppConfig.from_env())


if __name__ == "__main__":
    raise SystemExit(main())
