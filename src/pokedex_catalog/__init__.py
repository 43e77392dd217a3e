"""Table-driven species catalog for creature-collecting game simulations."""

from __future__ import annotations

from importlib import metadata as _metadata

from .catalog import SpeciesCatalog
from .codec import move_from_dict, move_to_dict, species_from_dict, species_to_dict
from .data import load_catalog, load_default_catalog, load_moves
from .errors import CatalogError, DependencyError, NotFoundError, ValidationError
from .models import MAX_STARTING_MOVES, BaseStats, Move, Species
from .moves import MoveRegistry
from .types import (
    ElementType,
    GrowthRate,
    experience_for_level,
    level_for_experience,
)

try:
    __version__ = _metadata.version("pokedex-catalog")
except _metadata.PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "BaseStats",
    "CatalogError",
    "DependencyError",
    "ElementType",
    "GrowthRate",
    "MAX_STARTING_MOVES",
    "Move",
    "MoveRegistry",
    "NotFoundError",
    "Species",
    "SpeciesCatalog",
    "ValidationError",
    "experience_for_level",
    "level_for_experience",
    "load_catalog",
    "load_default_catalog",
    "load_moves",
    "move_from_dict",
    "move_to_dict",
    "species_from_dict",
    "species_to_dict",
    "__version__",
]
