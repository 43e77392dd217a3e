"""Immutable records describing moves and species."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Tuple

from .errors import ValidationError
from .types import ElementType, GrowthRate, experience_for_level

__all__ = ["MAX_STARTING_MOVES", "MOVE_CATEGORIES", "Move", "BaseStats", "Species"]

MAX_STARTING_MOVES = 4
MOVE_CATEGORIES = ("physical", "special", "status")


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Move:
    """A shared action definition referenced by one or more species.

    Attributes:
        name: Unique display name, e.g. ``"Scratch"``.
        type: Elemental type of the move.
        category: One of ``physical``, ``special`` or ``status``.
        power: Base power (0 for status moves).
        accuracy: Hit chance in percent, or ``None`` for moves that never miss.
        pp: Power points available before the move must be restored.
        effect: Short free-text description of any secondary effect.
    """

    name: str
    type: ElementType
    category: str = "physical"
    power: int = 0
    accuracy: Optional[int] = 100
    pp: int = 35
    effect: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError("Move name must be a non-empty string.", context={"name": self.name})
        if not isinstance(self.type, ElementType):
            raise ValidationError(
                f"Move {self.name!r} has an invalid type.",
                context={"type": self.type},
            )
        if self.category not in MOVE_CATEGORIES:
            raise ValidationError(
                f"Move {self.name!r} has unknown category {self.category!r}.",
                remediation="Use one of: " + ", ".join(MOVE_CATEGORIES),
            )
        if not _is_int(self.power) or self.power < 0:
            raise ValidationError(
                f"Move {self.name!r} power must be an integer >= 0.", context={"power": self.power}
            )
        if self.accuracy is not None and (not _is_int(self.accuracy) or not 1 <= self.accuracy <= 100):
            raise ValidationError(
                f"Move {self.name!r} accuracy must be between 1 and 100.",
                context={"accuracy": self.accuracy},
            )
        if not _is_int(self.pp) or self.pp <= 0:
            raise ValidationError(
                f"Move {self.name!r} pp must be positive.", context={"pp": self.pp}
            )


@dataclass(frozen=True)
class BaseStats:
    """Species-specific base statistics."""

    hp: int
    attack: int
    defense: int
    special_attack: int
    special_defense: int
    speed: int

    def __post_init__(self) -> None:
        for name, value in self.as_dict().items():
            if not _is_int(value) or value <= 0:
                raise ValidationError(
                    f"Base stat {name!r} must be a positive integer.",
                    context={name: value},
                )

    @property
    def total(self) -> int:
        return sum(self.as_dict().values())

    def as_dict(self) -> Dict[str, int]:
        return {
            "hp": self.hp,
            "attack": self.attack,
            "defense": self.defense,
            "special_attack": self.special_attack,
            "special_defense": self.special_defense,
            "speed": self.speed,
        }


@dataclass(frozen=True)
class Species:
    """Immutable template describing one kind of creature.

    ``available_moves`` is a set because only membership matters there;
    ``starting_moves`` is ordered because it mirrors the move slots a freshly
    created creature fills. All invariants are checked on construction.
    """

    id: int
    types: Tuple[ElementType, ...]
    available_moves: FrozenSet[Move]
    starting_moves: Tuple[Move, ...]
    base_stats: BaseStats
    base_experience: int
    growth_rate: GrowthRate
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "types", tuple(self.types))
        object.__setattr__(self, "available_moves", frozenset(self.available_moves))
        object.__setattr__(self, "starting_moves", tuple(self.starting_moves))
        context = {"species_id": self.id, "name": self.name}
        if not _is_int(self.id) or self.id <= 0:
            raise ValidationError(
                "Species id must be a positive integer.",
                context=context,
            )
        if not self.types:
            raise ValidationError(
                "Species must declare at least one type.",
                remediation="Provide one or two elemental types.",
                context=context,
            )
        if len(self.types) > 2:
            raise ValidationError(
                "Species may declare at most two types.",
                context={**context, "types": self.types},
            )
        if not all(isinstance(t, ElementType) for t in self.types):
            raise ValidationError(
                "Species types must be ElementType members.",
                context={**context, "types": [str(t) for t in self.types]},
            )
        if len(set(self.types)) != len(self.types):
            raise ValidationError(
                "Species types must not repeat.",
                context={**context, "types": self.types},
            )
        if not isinstance(self.growth_rate, GrowthRate):
            raise ValidationError(
                "Species growth rate must be a GrowthRate member.",
                context={**context, "growth_rate": str(self.growth_rate)},
            )
        if len(self.starting_moves) > MAX_STARTING_MOVES:
            raise ValidationError(
                f"Species may start with at most {MAX_STARTING_MOVES} moves.",
                context={**context, "starting_moves": [m.name for m in self.starting_moves]},
            )
        if len(set(self.starting_moves)) != len(self.starting_moves):
            raise ValidationError(
                "Starting moves must not repeat.",
                context={**context, "starting_moves": [m.name for m in self.starting_moves]},
            )
        missing = [m.name for m in self.starting_moves if m not in self.available_moves]
        if missing:
            raise ValidationError(
                "Starting moves must be a subset of available moves.",
                remediation="Add the moves to available_moves or drop them from starting_moves.",
                context={**context, "missing": missing},
            )
        if not isinstance(self.base_stats, BaseStats):
            raise ValidationError("Species base_stats must be a BaseStats record.", context=context)
        if not _is_int(self.base_experience) or self.base_experience < 0:
            raise ValidationError(
                "Base experience must be an integer >= 0.",
                context={**context, "base_experience": self.base_experience},
            )

    def can_learn(self, move: Move | str) -> bool:
        """Return ``True`` when *move* (or a move of that name) is available."""

        if isinstance(move, Move):
            return move in self.available_moves
        return any(m.name == move for m in self.available_moves)

    def experience_for_level(self, level: int) -> int:
        return experience_for_level(self.growth_rate, level)
