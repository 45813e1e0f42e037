# Use postponed evaluation of annotations so type hints stay as strings at runtime.
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

# `FastAPI` exposes the directory lookups as JSON endpoints.
from fastapi import FastAPI

# API routes are defined in a separate module to keep the app factory small and testable.
from bikeradar.api.routes import router
# `AppConfig` is the typed config model so we can avoid globals and magic strings.
from bikeradar.config.models import AppConfig
from bikeradar.ingestion.citybikes import CityBikesClient
# `LocationsDataService` owns the fetched networks/stations for the lifetime of the app.
from bikeradar.service.locations import LocationsDataService
# Central logging configuration keeps operational debugging consistent across scripts and the API.
from bikeradar.utils.logging import configure_logging


# This app factory builds the FastAPI application from a typed config.
# Tests pass a ready-made service (with a fake HTTP layer) instead of letting the factory build one.
def create_app(config: AppConfig, *, service: Optional[LocationsDataService] = None) -> FastAPI:
    configure_logging(config.logging)

    # One service instance per app: it is the single writer of the published networks/stations.
    if service is None:
        service = LocationsDataService(
            CityBikesClient.from_settings(config.citybikes),
            search=config.search,
        )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        # Release the HTTP session when the server stops.
        service.close()

    app = FastAPI(title=config.app.name, lifespan=lifespan)
    app.state.config = config
    app.state.locations_service = service

    app.include_router(router)
    return app
