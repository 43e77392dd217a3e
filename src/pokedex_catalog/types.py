"""Elemental types and experience growth-rate curves."""
from __future__ import annotations

import re
from bisect import bisect_right
from enum import Enum
from functools import lru_cache
from typing import Callable, Dict, Tuple

from .errors import ValidationError

__all__ = [
    "ElementType",
    "GrowthRate",
    "MIN_LEVEL",
    "MAX_LEVEL",
    "experience_for_level",
    "level_for_experience",
    "parse_element_type",
    "parse_growth_rate",
]

MIN_LEVEL = 1
MAX_LEVEL = 100


class ElementType(str, Enum):
    """Elemental type tag carried by species and moves."""

    NORMAL = "Normal"
    FIRE = "Fire"
    WATER = "Water"
    GRASS = "Grass"
    ELECTRIC = "Electric"
    ICE = "Ice"
    FIGHTING = "Fighting"
    POISON = "Poison"
    GROUND = "Ground"
    FLYING = "Flying"
    PSYCHIC = "Psychic"
    BUG = "Bug"
    ROCK = "Rock"
    GHOST = "Ghost"
    DRAGON = "Dragon"
    DARK = "Dark"
    STEEL = "Steel"
    FAIRY = "Fairy"

    def __str__(self) -> str:
        return self.value


class GrowthRate(str, Enum):
    """Curve mapping accumulated experience to level."""

    ERRATIC = "Erratic"
    FAST = "Fast"
    MEDIUM_FAST = "MediumFast"
    MEDIUM_SLOW = "MediumSlow"
    SLOW = "Slow"
    FLUCTUATING = "Fluctuating"

    def __str__(self) -> str:
        return self.value


def _erratic(n: int) -> int:
    if n < 50:
        return n**3 * (100 - n) // 50
    if n < 68:
        return n**3 * (150 - n) // 100
    if n < 98:
        return n**3 * ((1911 - 10 * n) // 3) // 500
    return n**3 * (160 - n) // 100


def _fluctuating(n: int) -> int:
    if n < 15:
        return n**3 * ((n + 1) // 3 + 24) // 50
    if n < 36:
        return n**3 * (n + 14) // 50
    return n**3 * (n // 2 + 32) // 50


_FORMULAS: Dict[GrowthRate, Callable[[int], int]] = {
    GrowthRate.ERRATIC: _erratic,
    GrowthRate.FAST: lambda n: 4 * n**3 // 5,
    GrowthRate.MEDIUM_FAST: lambda n: n**3,
    GrowthRate.MEDIUM_SLOW: lambda n: 6 * n**3 // 5 - 15 * n**2 + 100 * n - 140,
    GrowthRate.SLOW: lambda n: 5 * n**3 // 4,
    GrowthRate.FLUCTUATING: _fluctuating,
}


@lru_cache(maxsize=None)
def _thresholds(growth_rate: GrowthRate) -> Tuple[int, ...]:
    formula = _FORMULAS[growth_rate]
    # Level 1 is the starting point for every curve.
    return (0,) + tuple(formula(level) for level in range(MIN_LEVEL + 1, MAX_LEVEL + 1))


def experience_for_level(growth_rate: GrowthRate | str, level: int) -> int:
    """Return the total experience needed to reach *level* on *growth_rate*."""

    rate = parse_growth_rate(growth_rate)
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise ValidationError(
            f"Level must be between {MIN_LEVEL} and {MAX_LEVEL}.",
            context={"level": level},
        )
    return _thresholds(rate)[level - MIN_LEVEL]


def level_for_experience(growth_rate: GrowthRate | str, experience: int) -> int:
    """Return the highest level whose threshold does not exceed *experience*."""

    rate = parse_growth_rate(growth_rate)
    if experience < 0:
        raise ValidationError(
            "Experience cannot be negative.",
            context={"experience": experience},
        )
    return bisect_right(_thresholds(rate), experience) - 1 + MIN_LEVEL


def _normalise(value: str) -> str:
    return re.sub(r"[\s_\-]+", "", value).lower()


_TYPE_ALIASES = {_normalise(member.value): member for member in ElementType}
_GROWTH_ALIASES = {_normalise(member.value): member for member in GrowthRate}


def parse_element_type(value: ElementType | str) -> ElementType:
    """Return the :class:`ElementType` named by *value*."""

    if isinstance(value, ElementType):
        return value
    member = _TYPE_ALIASES.get(_normalise(str(value)))
    if member is None:
        raise ValidationError(
            f"Unknown elemental type {value!r}.",
            remediation="Use one of: " + ", ".join(m.value for m in ElementType),
        )
    return member


def parse_growth_rate(value: GrowthRate | str) -> GrowthRate:
    """Return the :class:`GrowthRate` named by *value*."""

    if isinstance(value, GrowthRate):
        return value
    member = _GROWTH_ALIASES.get(_normalise(str(value)))
    if member is None:
        raise ValidationError(
            f"Unknown growth rate {value!r}.",
            remediation="Use one of: " + ", ".join(m.value for m in GrowthRate),
        )
    return member
