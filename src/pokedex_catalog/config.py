"""Runtime settings resolved from environment variables."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import ValidationError

__all__ = ["CatalogSettings", "load_settings"]

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class CatalogSettings:
    """Settings controlling logging and where catalog data is read from."""

    log_level: str = "INFO"
    data_path: Path | None = None
    seal_on_load: bool = True

    def __post_init__(self) -> None:
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValidationError(
                f"Unknown log level {self.log_level!r}.",
                remediation="Use DEBUG, INFO, WARNING, ERROR or CRITICAL.",
            )


def _flag(name: str, value: str | None, default: bool) -> bool:
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValidationError(
        f"{name} must be a boolean flag.",
        remediation="Use one of 1/0, true/false, yes/no, on/off.",
        context={name: value},
    )


def load_settings(env: Mapping[str, str] | None = None) -> CatalogSettings:
    """Construct settings from ``POKEDEX_CATALOG_*`` environment variables."""

    env = os.environ if env is None else env
    data_dir = env.get("POKEDEX_CATALOG_DATA_DIR")
    return CatalogSettings(
        log_level=env.get("POKEDEX_CATALOG_LOG_LEVEL", "INFO").strip().upper(),
        data_path=Path(data_dir).expanduser() if data_dir else None,
        seal_on_load=_flag("POKEDEX_CATALOG_SEAL", env.get("POKEDEX_CATALOG_SEAL"), True),
    )
