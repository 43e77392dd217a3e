"""SpeciesCatalog class."""
from __future__ import annotations

import threading
from dataclasses import replace
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Tuple

from .codec import move_from_dict, move_to_dict, species_from_dict, species_to_dict
from .errors import NotFoundError, ValidationError
from .models import BaseStats, Move, Species
from .moves import MoveRegistry
from .observability import get_logger, metrics
from .types import ElementType, GrowthRate, parse_element_type, parse_growth_rate

__all__ = ["SpeciesCatalog"]

LOGGER = get_logger(__name__)


class SpeciesCatalog:
    """Registry of species templates keyed by id.

    The catalog is meant to be populated once at start-up and then only read.
    Registration is serialised by a single lock so the duplicate-id check and
    the insert happen atomically; reads never take the lock.
    """

    def __init__(self, moves: MoveRegistry | None = None) -> None:
        self._moves = moves if moves is not None else MoveRegistry()
        self._species: Dict[int, Species] = {}
        self._lock = threading.Lock()
        self._sealed = False

    @property
    def moves(self) -> MoveRegistry:
        return self._moves

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        """Make the catalog read-only; later definitions are rejected."""

        with self._lock:
            self._sealed = True
        LOGGER.debug("catalog_sealed", extra={"event": "catalog_sealed", "species": len(self)})

    def define_species(
        self,
        id: int,
        types: Iterable[ElementType | str],
        available_moves: Iterable[Move | str],
        starting_moves: Iterable[Move | str],
        base_stats: BaseStats | Mapping[str, int],
        base_experience: int,
        growth_rate: GrowthRate | str,
        *,
        name: str = "",
    ) -> Species:
        """Validate and register a species, returning the immutable record.

        Moves may be given as :class:`Move` objects or as names of moves already
        held by :attr:`moves`. New :class:`Move` objects join the registry only
        together with the species. Raises :class:`ValidationError` when any
        invariant fails; nothing is registered in that case.
        """

        pending: Dict[str, Move] = {}
        try:
            if not isinstance(base_stats, BaseStats):
                try:
                    base_stats = BaseStats(**base_stats)
                except TypeError as exc:
                    raise ValidationError(
                        "Invalid base stats.", context={"species_id": id, "name": name}
                    ) from exc
            context = {"species_id": id, "name": name}
            species = Species(
                id=id,
                name=name,
                types=tuple(parse_element_type(t) for t in types),
                available_moves=frozenset(self._share(available_moves, pending, context)),
                starting_moves=self._share(starting_moves, pending, context),
                base_stats=base_stats,
                base_experience=base_experience,
                growth_rate=parse_growth_rate(growth_rate),
            )
        except ValidationError as exc:
            self._reject(exc)
            raise
        return self._insert(species, tuple(pending.values()))

    def _share(
        self, moves: Iterable[Move | str], pending: Dict[str, Move], context: Dict[str, Any]
    ) -> Tuple[Move, ...]:
        """Swap each entry for the registry's instance; unseen moves go to *pending*."""

        shared: List[Move] = []
        for move in moves:
            if not isinstance(move, Move):
                existing = self._moves.find(move) if isinstance(move, str) else None
                if existing is None:
                    raise ValidationError(
                        f"Unknown move {move!r}.",
                        remediation="Define the move before referencing it from a species.",
                        context={**context, "move": move},
                    )
                shared.append(existing)
                continue
            key = move.name.strip().lower()
            existing = self._moves.find(move.name) or pending.get(key)
            if existing is None:
                pending[key] = existing = move
            elif existing != move:
                raise ValidationError(
                    f"Move {move.name!r} is already defined differently.",
                    remediation="Moves are shared; reuse the existing definition.",
                    context={**context, "move": move.name},
                )
            shared.append(existing)
        return tuple(shared)

    def define(self, species: Species) -> Species:
        """Register a pre-built species. Raises on duplicate id or sealed catalog.

        Every move must already be registered; equal copies are replaced by the
        registry's shared instances before the species is stored.
        """

        shared: Dict[Move, Move] = {}
        for move in species.available_moves:
            existing = self._moves.find(move.name)
            if existing is None or existing != move:
                self._reject_with(
                    f"Species references unregistered move {move.name!r}.",
                    context={"species_id": species.id, "move": move.name},
                )
            shared[move] = existing
        if any(shared[move] is not move for move in shared):
            species = replace(
                species,
                available_moves=frozenset(shared.values()),
                starting_moves=tuple(shared[move] for move in species.starting_moves),
            )
        return self._insert(species, ())

    def _insert(self, species: Species, new_moves: Tuple[Move, ...]) -> Species:
        error: ValidationError | None = None
        with self._lock:
            if self._sealed:
                error = ValidationError(
                    "Catalog is sealed; species can no longer be defined.",
                    remediation="Define every species before the catalog is sealed.",
                    context={"species_id": species.id},
                )
            elif species.id in self._species:
                error = ValidationError(
                    f"Species id {species.id} is already defined.",
                    remediation="Species ids must be unique within a catalog.",
                    context={
                        "species_id": species.id,
                        "existing": self._species[species.id].name,
                    },
                )
            else:
                try:
                    for move in new_moves:
                        if self._moves.define(move) is not move:
                            raise ValidationError(
                                f"Move {move.name!r} was registered concurrently.",
                                remediation="Retry the definition.",
                                context={"species_id": species.id, "move": move.name},
                            )
                except ValidationError as exc:
                    error = exc
                else:
                    self._species[species.id] = species
                    count = len(self._species)
        if error is not None:
            self._reject(error)
            raise error
        metrics.increment("pokedex_catalog_species_defined_total")
        metrics.set_gauge("pokedex_catalog_species_count", float(count))
        LOGGER.debug(
            "species_defined",
            extra={"event": "species_defined", "species_id": species.id, "name": species.name},
        )
        return species

    def _reject_with(self, message: str, **kwargs: Any) -> None:
        error = ValidationError(message, **kwargs)
        self._reject(error)
        raise error

    @staticmethod
    def _reject(error: ValidationError) -> None:
        metrics.increment("pokedex_catalog_validation_failures_total")
        LOGGER.warning(
            "species_rejected",
            extra={"event": "species_rejected", "error": error.to_payload()},
        )

    def get(self, species_id: int) -> Species:
        """Look up a species by id. Raises :class:`NotFoundError` if unknown."""

        species = self._species.get(species_id)
        if species is None:
            metrics.increment("pokedex_catalog_lookup_misses_total")
            raise NotFoundError(
                f"Unknown species id {species_id}.",
                context={"species_id": species_id},
            )
        return species

    def get_by_name(self, name: str) -> Species:
        """Look up a species by case-insensitive name."""

        wanted = name.strip().lower()
        if not wanted:
            metrics.increment("pokedex_catalog_lookup_misses_total")
            raise NotFoundError("Species name must be non-empty.", context={"name": name})
        for species in self._species.values():
            if species.name.lower() == wanted:
                return species
        metrics.increment("pokedex_catalog_lookup_misses_total")
        raise NotFoundError(f"Unknown species {name!r}.", context={"name": name})

    def lookup(self, identifier: int | str) -> Species:
        """Resolve an id, a numeric string such as ``"4"`` or ``"#4"``, or a name."""

        if isinstance(identifier, int):
            return self.get(identifier)
        text = identifier.strip().lstrip("#")
        if text.isdigit():
            return self.get(int(text))
        return self.get_by_name(identifier)

    def has(self, species_id: int) -> bool:
        return species_id in self._species

    def ids(self) -> List[int]:
        return sorted(self._species)

    def by_type(self, element_type: ElementType | str) -> List[Species]:
        wanted = parse_element_type(element_type)
        return [species for species in self if wanted in species.types]

    def learners_of(self, move: Move | str) -> List[Species]:
        return [species for species in self if species.can_learn(move)]

    def __contains__(self, species_id: object) -> bool:
        return species_id in self._species

    def __iter__(self) -> Iterator[Species]:
        return iter([self._species[key] for key in sorted(self._species)])

    def __len__(self) -> int:
        return len(self._species)

    def snapshot(self) -> Dict[str, Any]:
        """Serialize catalog state, moves included."""

        return {
            "moves": [move_to_dict(move) for move in self._moves],
            "species": [species_to_dict(species) for species in self],
            "sealed": self._sealed,
        }

    @classmethod
    def restore(cls, data: Mapping[str, Any]) -> "SpeciesCatalog":
        """Build a new catalog from :meth:`snapshot` output."""

        moves = MoveRegistry(move_from_dict(entry) for entry in data.get("moves", []))
        catalog = cls(moves)
        for entry in data.get("species", []):
            try:
                species = species_from_dict(entry, moves)
            except NotFoundError as exc:
                raise ValidationError(exc.message, context=exc.context) from exc
            catalog.define(species)
        if data.get("sealed"):
            catalog.seal()
        return catalog
