"""Bundled move and species dataset."""

from __future__ import annotations

import json
import time
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

from ..catalog import SpeciesCatalog
from ..codec import move_from_dict, species_from_dict
from ..config import load_settings
from ..errors import NotFoundError, ValidationError
from ..moves import MoveRegistry
from ..observability import get_logger, metrics

__all__ = ["load_moves", "load_catalog", "load_default_catalog"]

LOGGER = get_logger(__name__)


def _read_payload(path: str | Path | None, filename: str, key: str) -> list[Any]:
    if path is None:
        raw = resources.files(__package__).joinpath(filename).read_text(encoding="utf-8")
        source = filename
    else:
        payload_path = Path(path)
        if payload_path.is_dir():
            payload_path = payload_path / filename
        try:
            raw = payload_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise NotFoundError(
                f"Data file {payload_path} does not exist.",
                remediation="Point POKEDEX_CATALOG_DATA_DIR at a directory with moves.json and species.json.",
            ) from exc
        source = str(payload_path)

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"{source} is not valid JSON.", context={"error": str(exc)}) from exc
    entries = data.get(key) if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise ValidationError(f"{source} must contain a {key!r} array.")
    return entries


def load_moves(path: str | Path | None = None) -> MoveRegistry:
    """Load moves from *path* (a file or directory) or the bundled payload."""

    return MoveRegistry(move_from_dict(item) for item in _read_payload(path, "moves.json", "moves"))


def load_catalog(
    path: str | Path | None = None,
    moves: MoveRegistry | None = None,
) -> SpeciesCatalog:
    """Load species from *path* (a file or directory) or the bundled payload.

    When *moves* is omitted the moves are loaded from the same location.
    """

    if moves is None:
        moves = load_moves(path)
    catalog = SpeciesCatalog(moves)
    for item in _read_payload(path, "species.json", "species"):
        if not isinstance(item, dict):
            raise ValidationError("Species entries must be objects.", context={"entry": repr(item)})
        try:
            species = species_from_dict(item, moves)
        except NotFoundError as exc:
            raise ValidationError(
                exc.message,
                remediation=exc.remediation,
                context={"species_id": item.get("id"), **(exc.context or {})},
            ) from exc
        catalog.define(species)
    return catalog


@lru_cache(maxsize=1)
def load_default_catalog() -> SpeciesCatalog:
    """Return the cached catalog built once from the configured dataset."""

    settings = load_settings()
    start = time.perf_counter()
    catalog = load_catalog(settings.data_path)
    if settings.seal_on_load:
        catalog.seal()
    duration = time.perf_counter() - start
    metrics.observe("pokedex_catalog_load_duration_seconds", duration)
    LOGGER.info(
        "catalog_loaded",
        extra={
            "event": "catalog_loaded",
            "species": len(catalog),
            "moves": len(catalog.moves),
            "source": str(settings.data_path) if settings.data_path else "bundled",
            "duration": round(duration, 4),
        },
    )
    return catalog
