import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from clipkeep.services.clipboard_service import POLL_INTERVAL
from clipkeep.services.history_store import MAX_ITEMS


def _parse(name: str, raw: Optional[str], cast, default):
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    max_items: int = MAX_ITEMS
    poll_interval: float = POLL_INTERVAL
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.max_items < 1:
            raise ValueError(f"max_items must be at least 1, got {self.max_items}")
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Unknown log level: {self.log_level!r}")

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "Settings":
        load_dotenv(dotenv_path=env_path)

        return cls(
            max_items=_parse("CLIPKEEP_MAX_ITEMS", os.getenv("CLIPKEEP_MAX_ITEMS"), int, cls.max_items),
            poll_interval=_parse("CLIPKEEP_POLL_INTERVAL", os.getenv("CLIPKEEP_POLL_INTERVAL"), float, cls.poll_interval),
            log_level=(os.getenv("CLIPKEEP_LOG_LEVEL") or cls.log_level).upper(),
        )
