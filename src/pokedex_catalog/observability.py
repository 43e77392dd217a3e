"""Logging, metrics, and health tooling for pokedex_catalog."""
from __future__ import annotations

import importlib.util
import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from .errors import sanitize_context

__all__ = [
    "configure_logging",
    "get_logger",
    "metrics",
    "metrics_snapshot",
    "render_metrics",
    "health_snapshot",
    "generate_trace_id",
]


_STANDARD_ATTRS = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys())
_PROMOTED = {"event", "trace_id"}
_LOGGER_NAME = "pokedex_catalog"
_CONFIGURED = False
_LOCK = threading.Lock()


class StructuredLogFormatter(logging.Formatter):
    """One JSON object per record.

    ``event`` and ``trace_id`` extras become top-level keys so catalog events
    can be filtered without parsing; every other extra (species ids, error
    payloads) is sanitised into ``context``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": getattr(record, "event", None) or "log",
            "message": record.getMessage(),
        }
        trace_id = getattr(record, "trace_id", None)
        if trace_id:
            payload["trace_id"] = trace_id
        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and key not in _PROMOTED and key not in {"message", "asctime"}
        }
        if context:
            payload["context"] = sanitize_context(context)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True)


def configure_logging(level: int | str | None = None) -> logging.Logger:
    """Configure structured logging once and return the package logger."""

    global _CONFIGURED
    with _LOCK:
        logger = logging.getLogger(_LOGGER_NAME)
        if not _CONFIGURED:
            handler = logging.StreamHandler()
            handler.setFormatter(StructuredLogFormatter())
            logger.addHandler(handler)
            logger.propagate = False
            _CONFIGURED = True
        if level is not None:
            logger.setLevel(level if isinstance(level, int) else level.upper())
        elif logger.level == logging.NOTSET:
            logger.setLevel(logging.INFO)
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a child logger of the package logger.

    Dotted module names under the package are shortened so that
    ``pokedex_catalog.catalog`` does not become
    ``pokedex_catalog.pokedex_catalog.catalog``.
    """

    if not name:
        return logging.getLogger(_LOGGER_NAME)
    if name == _LOGGER_NAME or name.startswith(f"{_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")


_METRIC_KINDS = ("counter", "gauge", "summary")


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(float(value))


class MetricsRegistry:
    """Thread-safe in-process metrics with Prometheus text rendering.

    Series must be registered with a kind before they are rendered; values
    recorded against unregistered names are kept in :meth:`snapshot` only.
    """

    def __init__(self) -> None:
        self._metadata: Dict[str, Tuple[str, str]] = {}
        self._counters: Dict[str, float] = {}
        self._gauges: Dict[str, float] = {}
        self._summaries: Dict[str, List[float]] = {}
        self._lock = threading.Lock()

    def register(self, name: str, kind: str, description: str) -> None:
        if kind not in _METRIC_KINDS:
            raise ValueError(f"Unknown metric kind {kind!r}")
        with self._lock:
            self._metadata[name] = (kind, description)
            if kind == "counter":
                self._counters.setdefault(name, 0.0)
            elif kind == "gauge":
                self._gauges.setdefault(name, 0.0)
            else:
                self._summaries.setdefault(name, [])

    def increment(self, name: str, amount: float = 1.0) -> None:
        with self._lock:
            self._counters[name] = self._counters.get(name, 0.0) + amount

    def set_gauge(self, name: str, value: float) -> None:
        with self._lock:
            self._gauges[name] = value

    def observe(self, name: str, value: float) -> None:
        with self._lock:
            self._summaries.setdefault(name, []).append(value)

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "counters": dict(self._counters),
                "gauges": dict(self._gauges),
                "summaries": {key: list(values) for key, values in self._summaries.items()},
            }

    def render_prometheus(self) -> str:
        snapshot = self.snapshot()
        with self._lock:
            metadata = sorted(self._metadata.items())
        lines: List[str] = []
        for name, (kind, description) in metadata:
            lines.append(f"# HELP {name} {description}")
            lines.append(f"# TYPE {name} {kind}")
            if kind == "summary":
                lines.extend(_summary_lines(name, snapshot["summaries"].get(name, [])))
            else:
                lines.append(f"{name} {_number(snapshot[kind + 's'].get(name, 0.0))}")
        return "\n".join(lines) + "\n"


def _summary_lines(name: str, values: List[float]) -> List[str]:
    # Exact quantiles over every observation.
    lines = []
    if values:
        ordered = sorted(values)
        lines.append(f'{name}{{quantile="0.5"}} {_number(ordered[(len(ordered) - 1) // 2])}')
        lines.append(f'{name}{{quantile="1"}} {_number(ordered[-1])}')
    lines.append(f"{name}_count {len(values)}")
    lines.append(f"{name}_sum {_number(sum(values))}")
    return lines


_CATALOG_METRICS = (
    ("pokedex_catalog_species_defined_total", "counter", "Species successfully registered."),
    ("pokedex_catalog_validation_failures_total", "counter", "Species or move definitions rejected."),
    ("pokedex_catalog_lookup_misses_total", "counter", "Lookups for unknown species or moves."),
    ("pokedex_catalog_species_count", "gauge", "Species held by the most recently updated catalog."),
    ("pokedex_catalog_load_duration_seconds", "summary", "Time spent loading catalog data."),
)

metrics = MetricsRegistry()
for _name, _kind, _description in _CATALOG_METRICS:
    metrics.register(_name, _kind, _description)


def metrics_snapshot() -> Dict[str, Any]:
    """Return a simple dictionary snapshot of the in-process metrics."""

    return metrics.snapshot()


def render_metrics() -> str:
    """Render metrics in Prometheus exposition format."""

    return metrics.render_prometheus()


def _dependency_status() -> Dict[str, bool]:
    return {
        "fastapi": importlib.util.find_spec("fastapi") is not None,
        "pandas": importlib.util.find_spec("pandas") is not None,
    }


def _catalog_status() -> Dict[str, Any]:
    from .data import load_default_catalog

    loaded = load_default_catalog.cache_info().currsize > 0
    status: Dict[str, Any] = {"default_catalog_loaded": loaded}
    if loaded:
        catalog = load_default_catalog()
        status["species"] = len(catalog)
        status["sealed"] = catalog.sealed
    return status


def health_snapshot() -> Dict[str, Any]:
    """Return a structured health snapshot for the API health endpoint."""

    catalog = _catalog_status()
    return {
        "status": "ok" if catalog["default_catalog_loaded"] else "starting",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": {
            "dependencies": _dependency_status(),
            "catalog": catalog,
        },
        "metrics": metrics_snapshot(),
    }


def generate_trace_id() -> str:
    """Generate a short-lived trace identifier suitable for user feedback."""

    return uuid.uuid4().hex[:12]
