"""MoveRegistry class."""
from __future__ import annotations

import threading
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import NotFoundError, ValidationError
from .models import Move
from .observability import get_logger, metrics

__all__ = ["MoveRegistry"]

LOGGER = get_logger(__name__)


def _key(name: str) -> str:
    return name.strip().lower()


class MoveRegistry:
    """Stores every :class:`Move` once so species can share them by reference."""

    def __init__(self, moves: Iterable[Move] = ()) -> None:
        self._moves: Dict[str, Move] = {}
        self._lock = threading.Lock()
        for move in moves:
            self.define(move)

    def define(self, move: Move) -> Move:
        """Register *move* and return the shared instance.

        Re-defining an identical move is a no-op that returns the instance
        already held; a conflicting definition under the same name raises
        :class:`ValidationError`.
        """

        key = _key(move.name)
        with self._lock:
            existing = self._moves.get(key)
            if existing is None:
                self._moves[key] = move
                return move
        if existing == move:
            return existing
        metrics.increment("pokedex_catalog_validation_failures_total")
        LOGGER.warning(
            "move_rejected",
            extra={"event": "move_rejected", "move": move.name},
        )
        raise ValidationError(
            f"Move {move.name!r} is already defined differently.",
            remediation="Moves are shared; reuse the existing definition.",
            context={"move": move.name},
        )

    def find(self, name: str) -> Optional[Move]:
        """Return the shared move called *name*, or ``None`` without registering anything."""

        return self._moves.get(_key(name))

    def get(self, name: str) -> Move:
        """Look up a move by name. Raises :class:`NotFoundError` if unknown."""

        move = self.find(name)
        if move is None:
            metrics.increment("pokedex_catalog_lookup_misses_total")
            raise NotFoundError(
                f"Unknown move {name!r}.",
                remediation="Define the move before referencing it from a species.",
                context={"move": name},
            )
        return move

    def resolve(self, moves: Iterable[Move | str]) -> Tuple[Move, ...]:
        """Map names to the registry's shared instances, keeping order.

        :class:`Move` objects are registered on the way through.
        """

        return tuple(self.define(m) if isinstance(m, Move) else self.get(m) for m in moves)

    def has(self, name: str) -> bool:
        return _key(name) in self._moves

    def names(self) -> List[str]:
        return sorted(move.name for move in self._moves.values())

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Move):
            return self._moves.get(_key(item.name)) == item
        return isinstance(item, str) and self.has(item)

    def __iter__(self) -> Iterator[Move]:
        return iter(sorted(self._moves.values(), key=lambda m: m.name))

    def __len__(self) -> int:
        return len(self._moves)
