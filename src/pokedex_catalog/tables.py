"""Tabular views of a species catalog."""

from __future__ import annotations

from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any, Dict, List

from .catalog import SpeciesCatalog
from .errors import DependencyError

pd: ModuleType | None
try:  # pandas is an optional extra.
    import pandas as pd
except ModuleNotFoundError:  # pragma: no cover - executed when pandas is absent.
    pd = None

if TYPE_CHECKING:  # pragma: no cover - type checking only.
    from pandas import DataFrame

__all__ = ["catalog_rows", "build_dataframe", "export_catalog"]

_STAT_COLUMNS = {
    "hp": "HP",
    "attack": "Attack",
    "defense": "Defense",
    "special_attack": "Sp. Atk",
    "special_defense": "Sp. Def",
    "speed": "Speed",
}


def catalog_rows(catalog: SpeciesCatalog) -> List[Dict[str, Any]]:
    """Return one flat row per species, ordered by id."""

    rows: List[Dict[str, Any]] = []
    for species in catalog:
        row: Dict[str, Any] = {
            "ID": species.id,
            "Name": species.name,
            "Types": "/".join(t.value for t in species.types),
        }
        for key, label in _STAT_COLUMNS.items():
            row[label] = getattr(species.base_stats, key)
        row["Total"] = species.base_stats.total
        row["Base Exp"] = species.base_experience
        row["Growth Rate"] = species.growth_rate.value
        row["Starting Moves"] = ", ".join(m.name for m in species.starting_moves)
        row["Learnable Moves"] = len(species.available_moves)
        rows.append(row)
    return rows


def _require_pandas() -> ModuleType:
    if pd is None:
        raise DependencyError(
            "pandas is required for tabular exports.",
            remediation="Install the 'pandas' extra: pip install pokedex-catalog[pandas].",
        )
    return pd


def build_dataframe(catalog: SpeciesCatalog) -> "DataFrame":
    """Construct a :class:`pandas.DataFrame` indexed by species id."""

    pandas = _require_pandas()
    return pandas.DataFrame(catalog_rows(catalog)).set_index("ID")


def export_catalog(catalog: SpeciesCatalog, csv_path: Path) -> Path:
    """Write the catalog table to *csv_path* and return the path."""

    table = build_dataframe(catalog)
    csv_path.parent.mkdir(parents=True, exist_ok=True)
    table.to_csv(csv_path)
    return csv_path
