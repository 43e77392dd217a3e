"""Shared fixtures for the catalog tests."""

from __future__ import annotations

import logging

import pytest

from pokedex_catalog import observability
from pokedex_catalog.data import load_default_catalog
from pokedex_catalog.models import BaseStats, Move
from pokedex_catalog.moves import MoveRegistry
from pokedex_catalog.catalog import SpeciesCatalog
from pokedex_catalog.types import ElementType


@pytest.fixture(autouse=True)
def _reset_package_state(monkeypatch):
    """Drop env overrides, the cached default catalog and installed log handlers."""

    for name in ("POKEDEX_CATALOG_DATA_DIR", "POKEDEX_CATALOG_SEAL", "POKEDEX_CATALOG_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    load_default_catalog.cache_clear()
    yield
    load_default_catalog.cache_clear()
    logger = logging.getLogger("pokedex_catalog")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    observability._CONFIGURED = False


@pytest.fixture
def scratch() -> Move:
    return Move("Scratch", ElementType.NORMAL, "physical", power=40, accuracy=100, pp=35)


@pytest.fixture
def ember() -> Move:
    return Move(
        "Ember", ElementType.FIRE, "special", power=40, accuracy=100, pp=25,
        effect="10% chance to burn the target.",
    )


@pytest.fixture
def growl() -> Move:
    return Move("Growl", ElementType.NORMAL, "status", power=0, accuracy=100, pp=40)


@pytest.fixture
def moves(scratch, ember, growl) -> MoveRegistry:
    return MoveRegistry([scratch, ember, growl])


@pytest.fixture
def catalog(moves) -> SpeciesCatalog:
    return SpeciesCatalog(moves)


@pytest.fixture
def charmander_stats() -> BaseStats:
    return BaseStats(hp=39, attack=52, defense=43, special_attack=60, special_defense=50, speed=65)
