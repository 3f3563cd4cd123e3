# sweeply/deps.py
from typing import Optional

from fastapi import HTTPException, Request

from .auth import AuthManager
from .forms import Draft, FormSession, SaveOutcome
from .maps import Geocoder
from .places import PlacesService
from .store import Repository, Store


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_auth(request: Request) -> AuthManager:
    return request.app.state.auth


def get_geocoder(request: Request) -> Geocoder:
    geocoder = request.app.state.geocoder
    if geocoder is None:
        raise HTTPException(status_code=503, detail="Geocoding is not configured (set GOOGLE_MAPS_API_KEY)")
    return geocoder


def get_places(request: Request) -> PlacesService:
    return request.app.state.places


def require_user(request: Request) -> AuthManager:
    """Gate for screens that only exist behind sign-in."""
    auth = get_auth(request)
    if not auth.is_signed_in:
        raise HTTPException(status_code=401, detail="Not signed in")
    return auth


async def save_form(draft: Draft, repository: Repository, record_id: Optional[int] = None) -> SaveOutcome:
    """Run one form save for a request; validation and store failures become HTTP errors."""
    if not draft.is_valid:
        raise HTTPException(status_code=422, detail="Required fields are missing")
    if record_id is not None:
        await repository.require(record_id)
    outcome = await FormSession(draft, repository, record_id=record_id).save()
    if not outcome.saved:
        raise HTTPException(status_code=500, detail=outcome.error or "Save failed")
    return outcome
