"""FastAPI application factory for the exporter's HTTP endpoint."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import HTMLResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from userexporter import __version__
from userexporter.collector import SnapshotCollector
from userexporter.config import ExporterConfig
from userexporter.metrics import build_registry

_LANDING_PAGE = """<html>
<head><title>Unix User Exporter</title></head>
<body>
<h1>Unix User Exporter</h1>
<p><a href="{metrics_path}">Metrics</a></p>
</body>
</html>
"""


def create_app(
    collector: SnapshotCollector,
    config: ExporterConfig | None = None,
) -> FastAPI:
    """Build the app: landing page, Prometheus metrics, JSON API."""
    config = config or ExporterConfig.load()

    app = FastAPI(
        title="Unix User Exporter",
        version=__version__,
        docs_url="/api/docs",
    )

    # Store config and collector in app state
    app.state.config = config
    app.state.collector = collector

    from userexporter.web.api.sessions import router as sessions_router

    app.include_router(sessions_router, prefix="/api")

    registry = build_registry(lambda: collector.snapshot)

    @app.get(config.metrics_path, include_in_schema=False)
    def metrics() -> Response:
        return Response(generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    @app.get("/", response_class=HTMLResponse, include_in_schema=False)
    async def index() -> str:
        return _LANDING_PAGE.format(metrics_path=config.metrics_path)

    return app
