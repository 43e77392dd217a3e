"""Unit tests for the species catalog."""

from __future__ import annotations

import threading

import pytest

from pokedex_catalog.catalog import SpeciesCatalog
from pokedex_catalog.errors import NotFoundError, ValidationError
from pokedex_catalog.models import BaseStats, Move
from pokedex_catalog.observability import metrics_snapshot
from pokedex_catalog.types import ElementType, GrowthRate


def _define_charmander(catalog: SpeciesCatalog, stats: BaseStats, **overrides):
    fields = dict(
        id=4,
        types=["Fire"],
        available_moves={"Scratch"},
        starting_moves=["Scratch"],
        base_stats=stats,
        base_experience=62,
        growth_rate="MediumSlow",
        name="Charmander",
    )
    fields.update(overrides)
    return catalog.define_species(**fields)


def test_charmander_round_trips_through_lookup(catalog, charmander_stats, scratch) -> None:
    defined = _define_charmander(catalog, charmander_stats)

    found = catalog.get(4)
    assert found is defined
    assert found.id == 4
    assert found.types == (ElementType.FIRE,)
    assert found.available_moves == frozenset({scratch})
    assert found.starting_moves == (scratch,)
    assert found.base_stats == charmander_stats
    assert found.base_experience == 62
    assert found.growth_rate is GrowthRate.MEDIUM_SLOW
    assert found.starting_moves[0] is scratch


def test_starting_move_outside_pool_rejected(catalog, charmander_stats) -> None:
    with pytest.raises(ValidationError):
        _define_charmander(catalog, charmander_stats, starting_moves=["Ember"])
    assert 4 not in catalog
    assert len(catalog) == 0


def test_duplicate_id_rejected_on_second_call(catalog, charmander_stats) -> None:
    _define_charmander(catalog, charmander_stats)
    with pytest.raises(ValidationError) as excinfo:
        _define_charmander(catalog, charmander_stats, name="Imposter")
    assert excinfo.value.context["existing"] == "Charmander"
    assert catalog.get(4).name == "Charmander"


def test_empty_types_rejected(catalog, charmander_stats) -> None:
    with pytest.raises(ValidationError):
        _define_charmander(catalog, charmander_stats, types=[])


def test_corrected_redefinition_succeeds(catalog, charmander_stats) -> None:
    with pytest.raises(ValidationError):
        _define_charmander(catalog, charmander_stats, starting_moves=["Ember"])
    species = _define_charmander(catalog, charmander_stats)
    assert catalog.get(4) is species


def test_unknown_move_name_is_a_validation_error(catalog, charmander_stats) -> None:
    with pytest.raises(ValidationError) as excinfo:
        _define_charmander(catalog, charmander_stats, available_moves={"Scratch", "Inferno"})
    assert excinfo.value.context["move"] == "Inferno"


def test_base_stats_mapping_accepted(catalog, charmander_stats) -> None:
    species = _define_charmander(catalog, charmander_stats, base_stats=charmander_stats.as_dict())
    assert species.base_stats == charmander_stats
    with pytest.raises(ValidationError):
        _define_charmander(catalog, charmander_stats, id=5, base_stats={"hp": 1})


def test_failures_are_counted(catalog, charmander_stats) -> None:
    before = metrics_snapshot()["counters"].get("pokedex_catalog_validation_failures_total", 0.0)
    with pytest.raises(ValidationError):
        _define_charmander(catalog, charmander_stats, types=[])
    after = metrics_snapshot()["counters"]["pokedex_catalog_validation_failures_total"]
    assert after == before + 1


def test_unknown_id_raises_not_found(catalog) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        catalog.get(999)
    assert excinfo.value.category == "not_found"


def test_lookup_by_name_and_identifier(catalog, charmander_stats) -> None:
    species = _define_charmander(catalog, charmander_stats)
    assert catalog.get_by_name("charmander") is species
    assert catalog.lookup(4) is species
    assert catalog.lookup("#4") is species
    assert catalog.lookup("004") is species
    assert catalog.lookup("Charmander") is species
    with pytest.raises(NotFoundError):
        catalog.lookup("Missingno")


def test_iteration_and_queries(catalog, charmander_stats, scratch, ember) -> None:
    _define_charmander(catalog, charmander_stats, id=6, name="Charizard",
                       types=["Fire", "Flying"], available_moves={"Scratch", "Ember"})
    _define_charmander(catalog, charmander_stats)
    catalog.define_species(
        1, [ElementType.GRASS, ElementType.POISON], ["Growl"], ["Growl"],
        charmander_stats, 64, GrowthRate.MEDIUM_SLOW, name="Bulbasaur",
    )

    assert catalog.ids() == [1, 4, 6]
    assert [s.name for s in catalog] == ["Bulbasaur", "Charmander", "Charizard"]
    assert [s.id for s in catalog.by_type("fire")] == [4, 6]
    assert [s.id for s in catalog.by_type(ElementType.FLYING)] == [6]
    assert [s.id for s in catalog.learners_of(ember)] == [6]
    assert [s.id for s in catalog.learners_of("Scratch")] == [4, 6]
    assert catalog.has(1)
    assert not catalog.has(2)


def test_move_objects_are_shared_with_registry(catalog, charmander_stats, scratch) -> None:
    twin = Move("Scratch", ElementType.NORMAL, "physical", power=40, accuracy=100, pp=35)
    species = _define_charmander(catalog, charmander_stats, available_moves={twin}, starting_moves=[twin])
    assert species.starting_moves[0] is scratch


def test_define_rejects_moves_missing_from_registry(catalog, charmander_stats) -> None:
    from pokedex_catalog.models import Species

    stray = Move("Flame Wheel", ElementType.FIRE, "physical", power=60)
    species = Species(
        id=4, types=(ElementType.FIRE,), available_moves=frozenset({stray}),
        starting_moves=(stray,), base_stats=charmander_stats, base_experience=62,
        growth_rate=GrowthRate.MEDIUM_SLOW, name="Charmander",
    )
    with pytest.raises(ValidationError):
        catalog.define(species)


def test_sealed_catalog_is_read_only(catalog, charmander_stats) -> None:
    _define_charmander(catalog, charmander_stats)
    catalog.seal()
    assert catalog.sealed
    with pytest.raises(ValidationError):
        _define_charmander(catalog, charmander_stats, id=5, name="Charmeleon")
    assert catalog.get(4).name == "Charmander"


def test_concurrent_definitions_register_once(catalog, charmander_stats) -> None:
    results: list[str] = []
    barrier = threading.Barrier(8)

    def worker(index: int) -> None:
        barrier.wait()
        try:
            _define_charmander(catalog, charmander_stats, name=f"Charmander-{index}")
        except ValidationError:
            results.append("rejected")
        else:
            results.append("defined")

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count("defined") == 1
    assert results.count("rejected") == 7
    assert len(catalog) == 1


def test_snapshot_restore(catalog, charmander_stats) -> None:
    _define_charmander(catalog, charmander_stats)
    catalog.seal()

    restored = SpeciesCatalog.restore(catalog.snapshot())

    assert restored.get(4) == catalog.get(4)
    assert restored.sealed
    assert restored.moves.names() == catalog.moves.names()


def test_restore_rejects_unknown_move(charmander_stats) -> None:
    data = {
        "moves": [],
        "species": [
            {
                "id": 4,
                "name": "Charmander",
                "types": ["Fire"],
                "available_moves": ["Scratch"],
                "starting_moves": ["Scratch"],
                "base_stats": charmander_stats.as_dict(),
                "base_experience": 62,
                "growth_rate": "MediumSlow",
            }
        ],
    }
    with pytest.raises(ValidationError):
        SpeciesCatalog.restore(data)


def test_rejected_definition_leaves_move_registry_untouched(catalog, charmander_stats) -> None:
    flamethrower = Move("Flamethrower", ElementType.FIRE, "special", power=90, pp=15)
    before = len(catalog.moves)
    with pytest.raises(ValidationError):
        _define_charmander(
            catalog, charmander_stats, types=[],
            available_moves={flamethrower}, starting_moves=[flamethrower],
        )
    assert len(catalog.moves) == before
    assert "Flamethrower" not in catalog.moves


def test_sealed_catalog_does_not_grow_move_registry(catalog, charmander_stats) -> None:
    catalog.seal()
    flamethrower = Move("Flamethrower", ElementType.FIRE, "special", power=90, pp=15)
    with pytest.raises(ValidationError):
        _define_charmander(catalog, charmander_stats, available_moves={flamethrower}, starting_moves=[])
    assert not catalog.moves.has("Flamethrower")


def test_new_move_objects_register_with_the_species(catalog, charmander_stats) -> None:
    flamethrower = Move("Flamethrower", ElementType.FIRE, "special", power=90, pp=15)
    species = _define_charmander(
        catalog, charmander_stats, available_moves={"Scratch", flamethrower}, starting_moves=[flamethrower],
    )
    assert catalog.moves.get("Flamethrower") is flamethrower
    assert species.starting_moves[0] is flamethrower


def test_conflicting_move_object_rejected(catalog, charmander_stats) -> None:
    stronger = Move("Scratch", ElementType.NORMAL, "physical", power=80, accuracy=100, pp=35)
    with pytest.raises(ValidationError) as excinfo:
        _define_charmander(catalog, charmander_stats, available_moves={stronger}, starting_moves=[])
    assert excinfo.value.context["move"] == "Scratch"
    assert catalog.moves.get("Scratch").power == 40


def test_define_swaps_equal_copies_for_shared_moves(catalog, charmander_stats, scratch) -> None:
    from pokedex_catalog.models import Species

    copy = Move("Scratch", ElementType.NORMAL, "physical", power=40, accuracy=100, pp=35, effect="other")
    species = catalog.define(
        Species(
            id=4, types=(ElementType.FIRE,), available_moves=frozenset({copy}),
            starting_moves=(copy,), base_stats=charmander_stats, base_experience=62,
            growth_rate=GrowthRate.MEDIUM_SLOW, name="Charmander",
        )
    )
    assert catalog.get(4) is species
    assert species.starting_moves[0] is scratch
    assert next(iter(species.available_moves)) is scratch
    assert species.starting_moves[0].effect == ""


@pytest.mark.parametrize("name", ["", "   ", "#"])
def test_blank_name_lookup_raises(name, catalog, charmander_stats, scratch) -> None:
    catalog.define_species(4, ["Fire"], [scratch], [scratch], charmander_stats, 62, "MediumSlow")
    assert catalog.get(4).name == ""
    with pytest.raises(NotFoundError):
        catalog.lookup(name)
    with pytest.raises(NotFoundError):
        catalog.get_by_name(name)
