"""Plain-dict (JSON-ready) encoding of moves and species."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Sequence

from .errors import ValidationError
from .models import BaseStats, Move, Species
from .moves import MoveRegistry
from .types import parse_element_type, parse_growth_rate

__all__ = ["move_to_dict", "move_from_dict", "species_to_dict", "species_from_dict"]


def move_to_dict(move: Move) -> Dict[str, Any]:
    return {
        "name": move.name,
        "type": move.type.value,
        "category": move.category,
        "power": move.power,
        "accuracy": move.accuracy,
        "pp": move.pp,
        "effect": move.effect,
    }


def move_from_dict(data: Mapping[str, Any]) -> Move:
    """Build a :class:`Move` from a decoded payload."""

    try:
        return Move(
            name=str(data["name"]),
            type=parse_element_type(data["type"]),
            category=str(data.get("category", "physical")),
            power=int(data.get("power", 0)),
            accuracy=None if data.get("accuracy", 100) is None else int(data.get("accuracy", 100)),
            pp=int(data.get("pp", 35)),
            effect=str(data.get("effect", "")),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ValidationError(
            "Invalid move payload.",
            context={"payload": dict(data) if isinstance(data, Mapping) else repr(data)},
        ) from exc


def species_to_dict(species: Species) -> Dict[str, Any]:
    """Encode *species*; moves are referenced by name."""

    return {
        "id": species.id,
        "name": species.name,
        "types": [t.value for t in species.types],
        "available_moves": sorted(m.name for m in species.available_moves),
        "starting_moves": [m.name for m in species.starting_moves],
        "base_stats": species.base_stats.as_dict(),
        "base_experience": species.base_experience,
        "growth_rate": species.growth_rate.value,
    }


def _listing(data: Mapping[str, Any], key: str) -> Sequence[Any]:
    value = data[key]
    if not isinstance(value, (list, tuple)):
        raise TypeError(f"{key} must be a list")
    return value


def _move_names(data: Mapping[str, Any], key: str) -> Sequence[str]:
    names = _listing(data, key)
    if not all(isinstance(name, str) for name in names):
        raise TypeError(f"{key} must list move names")
    return names


def species_from_dict(data: Mapping[str, Any], moves: MoveRegistry) -> Species:
    """Rebuild a :class:`Species`, resolving move names through *moves*.

    Unknown move names surface as :class:`~pokedex_catalog.errors.NotFoundError`;
    structurally broken payloads as :class:`ValidationError`.
    """

    try:
        raw_stats = data["base_stats"]
        if not isinstance(raw_stats, Mapping):
            raise TypeError("base_stats must be a mapping")
        raw_types = _listing(data, "types")
        raw_available = _move_names(data, "available_moves")
        raw_starting = _move_names(data, "starting_moves")
        stats = BaseStats(**{key: int(value) for key, value in raw_stats.items()})
        species_id = int(data["id"])
        base_experience = int(data["base_experience"])
        growth_rate = data["growth_rate"]
    except (KeyError, TypeError, ValueError) as exc:
        raise ValidationError(
            "Invalid species payload.",
            remediation="Check the payload carries every species field.",
            context={"species_id": data.get("id") if isinstance(data, Mapping) else None},
        ) from exc

    return Species(
        id=species_id,
        name=str(data.get("name", "")),
        types=tuple(parse_element_type(t) for t in raw_types),
        available_moves=frozenset(moves.resolve(raw_available)),
        starting_moves=moves.resolve(raw_starting),
        base_stats=stats,
        base_experience=base_experience,
        growth_rate=parse_growth_rate(growth_rate),
    )
