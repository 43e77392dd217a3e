"""Read-only REST API over a :class:`~pokedex_catalog.catalog.SpeciesCatalog`."""
from __future__ import annotations

from typing import Any, Dict, List

from .catalog import SpeciesCatalog
from .codec import move_to_dict, species_to_dict
from .errors import CatalogError, DependencyError
from .observability import (
    configure_logging,
    generate_trace_id,
    get_logger,
    health_snapshot,
    render_metrics,
)

try:  # pragma: no cover - optional dependency
    from fastapi import FastAPI, Request  # type: ignore[import-not-found]
    from fastapi.responses import JSONResponse, PlainTextResponse  # type: ignore[import-not-found]
except ImportError:  # pragma: no cover - gracefully handled at runtime
    FastAPI = None  # type: ignore
    Request = None  # type: ignore
    JSONResponse = None  # type: ignore
    PlainTextResponse = None  # type: ignore


LOGGER = get_logger(__name__)

_SECURE_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


def _validate_dependency() -> None:
    if FastAPI is None:
        raise DependencyError(
            "FastAPI is required to use pokedex_catalog.api.",
            remediation="Install the 'api' extra: pip install pokedex-catalog[api].",
        )


def create_app(catalog: SpeciesCatalog | None = None) -> "FastAPI":
    """Return a FastAPI application serving species and move lookups.

    When *catalog* is omitted the cached default catalog is used.
    """

    _validate_dependency()
    assert FastAPI is not None  # for mypy

    configure_logging()

    if catalog is None:
        from .data import load_default_catalog

        catalog = load_default_catalog()
    served = catalog

    app = FastAPI(title="Pokedex Catalog", version="1.0.0")

    @app.middleware("http")
    async def add_trace_headers(request: "Request", call_next):  # type: ignore[override]
        trace_id = generate_trace_id()
        request.state.trace_id = trace_id
        response = await call_next(request)
        for header, value in _SECURE_HEADERS.items():
            response.headers.setdefault(header, value)
        response.headers["X-Trace-Id"] = trace_id
        return response

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: "Request", exc: CatalogError) -> "JSONResponse":
        trace_id = getattr(request.state, "trace_id", None)
        LOGGER.warning(
            "api_request_failed",
            extra={
                "event": "api_request_failed",
                "trace_id": trace_id,
                "path": request.url.path,
                "error": exc.to_payload(),
            },
        )
        return JSONResponse(
            status_code=exc.http_status,
            content={"error": exc.to_payload(trace_id=trace_id)},
        )

    @app.get("/health", tags=["system"])
    async def healthcheck() -> Dict[str, Any]:
        return health_snapshot()

    @app.get("/metrics", tags=["system"], response_class=PlainTextResponse)
    async def metrics_endpoint() -> "PlainTextResponse":
        return PlainTextResponse(render_metrics(), media_type="text/plain; version=0.0.4")

    @app.get("/species", tags=["catalog"])
    async def list_species(type: str | None = None) -> List[Dict[str, Any]]:
        entries = served.by_type(type) if type else list(served)
        return [species_to_dict(species) for species in entries]

    @app.get("/species/{species_id}", tags=["catalog"])
    async def get_species(species_id: int) -> Dict[str, Any]:
        return species_to_dict(served.get(species_id))

    @app.get("/moves/{name}", tags=["catalog"])
    async def get_move(name: str) -> Dict[str, Any]:
        move = served.moves.get(name)
        payload = move_to_dict(move)
        payload["learned_by"] = [species.id for species in served.learners_of(move)]
        return payload

    return app


__all__ = ["create_app"]
