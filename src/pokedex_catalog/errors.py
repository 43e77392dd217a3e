"""Centralised error taxonomy for pokedex_catalog."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping

__all__ = [
    "CatalogError",
    "DependencyError",
    "ValidationError",
    "NotFoundError",
    "sanitize_context",
]


def _sanitize_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return sanitize_context(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(_sanitize_value(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [_sanitize_value(item) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def sanitize_context(context: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a JSON-friendly copy of contextual logging or error data."""

    return {str(key): _sanitize_value(value) for key, value in context.items()}


@dataclass
class CatalogError(Exception):
    """Base class for structured, actionable errors raised by the package."""

    message: str
    remediation: str | None = None
    context: Dict[str, Any] | None = None
    category: str = "internal_error"
    http_status: int = 500

    def __post_init__(self) -> None:  # pragma: no cover - trivial
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def to_payload(self, *, trace_id: str | None = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "category": self.category,
            "message": self.message,
        }
        if self.remediation:
            payload["remediation"] = self.remediation
        if self.context:
            payload["context"] = sanitize_context(self.context)
        if trace_id:
            payload["trace_id"] = trace_id
        return payload


@dataclass
class ValidationError(CatalogError):
    category: str = "input_error"
    http_status: int = 400


@dataclass
class NotFoundError(CatalogError):
    category: str = "not_found"
    http_status: int = 404


@dataclass
class DependencyError(CatalogError):
    category: str = "dependency_error"
    http_status: int = 503
