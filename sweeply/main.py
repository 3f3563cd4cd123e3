# sweeply/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

import googlemaps
import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .account import router as account_router
from .auth import AuthManager
from .backend import create_backend
from .clients import router as clients_router
from .config import Settings
from .db import init_models, make_engine, make_sessionmaker
from .deps import require_user
from .expenses import router as expenses_router
from .items import router as items_router
from .jobs import router as jobs_router
from .maps import Geocoder
from .places import PlacesService
from .routers.health import router as health_router
from .routers.maps import router as maps_router
from .store import RecordNotFound, Store, StoreError
from .tasks import router as tasks_router

log = logging.getLogger("uvicorn.error")


def create_app(
    settings: Optional[Settings] = None,
    *,
    auth_backend=None,
    geocoder: Optional[Geocoder] = None,
    places: Optional[PlacesService] = None,
    gmaps=None,
) -> FastAPI:
    """Build the API. Anything passed in replaces the client built from settings."""
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = make_engine(settings.database_url)
        http = None
        try:
            await init_models(engine)
            app.state.sessionmaker = make_sessionmaker(engine)
            app.state.store = Store(app.state.sessionmaker)

            backend = auth_backend or await create_backend(settings)
            app.state.auth = AuthManager(backend)
            await app.state.auth.check_auth_status()

            maps_client = gmaps
            if maps_client is None and settings.google_maps_api_key:
                maps_client = googlemaps.Client(key=settings.google_maps_api_key)
            if geocoder is None and maps_client is None:
                log.warning("GOOGLE_MAPS_API_KEY not set; geocoding and gas stations are disabled")
            app.state.geocoder = geocoder or (Geocoder(maps_client) if maps_client else None)

            http = httpx.AsyncClient(timeout=15.0)
            app.state.places = places or PlacesService(
                http, gmaps=maps_client, openchargemap_key=settings.openchargemap_api_key
            )
            app.state.regions = {}
            log.info("sweeply started (db=%s)", settings.database_url)
            yield
        finally:
            if http is not None:
                await http.aclose()
            await engine.dispose()

    app = FastAPI(title="Sweeply API", version="0.1.0", lifespan=lifespan)

    # ──────────────────────────────────────────────────────────────────────────
    # CORS (relaxed for now; tighten to your domains later)
    # ──────────────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RecordNotFound)
    async def record_not_found(request: Request, exc: RecordNotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(StoreError)
    async def store_error(request: Request, exc: StoreError):
        log.error("store failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.get("/")
    def root():
        return {"name": "sweeply-api"}

    app.include_router(health_router)
    app.include_router(account_router)

    # everything below lives behind sign-in
    signed_in = [Depends(require_user)]
    app.include_router(clients_router, dependencies=signed_in)
    app.include_router(jobs_router, dependencies=signed_in)
    app.include_router(tasks_router, dependencies=signed_in)
    app.include_router(expenses_router, dependencies=signed_in)
    app.include_router(items_router, dependencies=signed_in)
    app.include_router(maps_router, dependencies=signed_in)
    return app


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run("sweeply.main:create_app", factory=True, host="0.0.0.0", port=Settings.from_env().port)
