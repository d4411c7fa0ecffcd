"""Runtime settings, read from the environment.

A ``.env`` file found from the current directory upwards is loaded
first (without overriding variables already set), so local overrides
need no shell exports.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from stockledger.domain.exceptions import ValidationError

ENV_PREFIX = "STOCKLEDGER_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("data")
    log_level: str = "WARNING"
    enforce_non_negative: bool = True
    low_stock_ratio: float = 0.2
    expire_on_read: bool = True

    def __post_init__(self) -> None:
        if not 0 <= self.low_stock_ratio < 1:
            raise ValidationError(
                f"low_stock_ratio must be in [0, 1), got {self.low_stock_ratio}",
                field="low_stock_ratio",
            )
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValidationError(f"Unknown log level: {self.log_level!r}", field="log_level")

    @property
    def store_path(self) -> Path:
        return self.data_dir / "stock.json"

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``STOCKLEDGER_*`` variables.

        When *environ* is omitted the process environment is used, after
        loading the nearest ``.env`` file.
        """
        if environ is None:
            dotenv_path = find_dotenv(usecwd=True)
            if dotenv_path:
                load_dotenv(dotenv_path, override=False)
            environ = os.environ

        defaults = Settings()

        def get(name: str) -> str | None:
            value = environ.get(ENV_PREFIX + name)
            return value.strip() if value is not None and value.strip() else None

        data_dir = get("DATA_DIR")
        ratio = get("LOW_STOCK_RATIO")
        try:
            low_stock_ratio = float(ratio) if ratio is not None else defaults.low_stock_ratio
        except ValueError:
            raise ValidationError(
                f"{ENV_PREFIX}LOW_STOCK_RATIO must be a number, got {ratio!r}",
                field="low_stock_ratio",
            ) from None

        return Settings(
            data_dir=Path(data_dir) if data_dir else defaults.data_dir,
            log_level=(get("LOG_LEVEL") or defaults.log_level).upper(),
            enforce_non_negative=_flag(
                get("ENFORCE_NON_NEGATIVE"), defaults.enforce_non_negative, "ENFORCE_NON_NEGATIVE"
            ),
            low_stock_ratio=low_stock_ratio,
            expire_on_read=_flag(
                get("EXPIRE_ON_READ"), defaults.expire_on_read, "EXPIRE_ON_READ"
            ),
        )


def _flag(raw: str | None, default: bool, name: str) -> bool:
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValidationError(f"{ENV_PREFIX}{name} must be a boolean, got {raw!r}", field=name.lower())
