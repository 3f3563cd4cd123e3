# sweeply/routers/maps.py
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel

from ..deps import get_geocoder, get_places, get_store
from ..maps import (
    DASHBOARD_SPAN,
    Coordinate,
    Geocoder,
    MapPin,
    Region,
    RegionSync,
    RegionSyncState,
    directions_url,
    needs_update,
    region_around,
)
from ..places import NearbyPlaces, PlacesService
from ..store import Store

router = APIRouter(prefix="/maps", tags=["maps"])

SPAN_ONLY_SCREENS = {"dashboard"}


class PinOut(BaseModel):
    pin: Optional[MapPin] = None
    region: Optional[Region] = None
    directions_url: Optional[str] = None


class NearbyOut(NearbyPlaces):
    pins: List[MapPin] = []


class WillChangeIn(BaseModel):
    animated: bool


class RegionOut(BaseModel):
    region: Region
    state: RegionSyncState
    written: bool = False
    push: bool = False


def _pin_out(pin: Optional[MapPin]) -> PinOut:
    if pin is None:
        # geocoding failures were logged; the screen shows its placeholder
        return PinOut()
    return PinOut(
        pin=pin,
        region=region_around(pin.coordinate),
        directions_url=directions_url(pin.coordinate, pin.title),
    )


def _region_sync(request: Request, screen: str) -> RegionSync:
    regions: Dict[str, RegionSync] = request.app.state.regions
    if screen not in regions:
        regions[screen] = RegionSync(span_only=screen in SPAN_ONLY_SCREENS)
    return regions[screen]


@router.get("/geocode", response_model=PinOut)
async def geocode(
    address: str = Query(..., min_length=1),
    title: Optional[str] = Query(default=None),
    geocoder: Geocoder = Depends(get_geocoder),
):
    return _pin_out(await geocoder.pin(address, title or address))


@router.get("/clients/{client_id}/pin", response_model=PinOut)
async def client_pin(
    client_id: int,
    store: Store = Depends(get_store),
    geocoder: Geocoder = Depends(get_geocoder),
):
    client = await store.clients.require(client_id)
    address = client.formatted_property_address.replace("\n", ", ")
    return _pin_out(await geocoder.pin(address, client.full_name, client.property_address))


@router.get("/nearby", response_model=NearbyOut)
async def nearby(
    latitude: float = Query(...),
    longitude: float = Query(...),
    places: PlacesService = Depends(get_places),
):
    result = await places.load_nearby(Coordinate(latitude=latitude, longitude=longitude))
    return NearbyOut(**result.model_dump(), pins=result.all_pins())


@router.get("/regions/{screen}", response_model=RegionOut)
def get_region(screen: str, request: Request):
    sync = _region_sync(request, screen)
    return RegionOut(region=sync.region, state=sync.state)


@router.post("/regions/{screen}/center", response_model=RegionOut)
def center_on(screen: str, coordinate: Coordinate, request: Request):
    sync = _region_sync(request, screen)
    span = DASHBOARD_SPAN if sync.span_only else sync.region.span.latitude_delta
    target = region_around(coordinate, span)
    push = needs_update(sync.region, target)
    sync.assign(target, pushed=push)
    return RegionOut(region=target, state=sync.state, push=push)


@router.post("/regions/{screen}/will-change", response_model=RegionOut)
def region_will_change(screen: str, payload: WillChangeIn, request: Request):
    sync = _region_sync(request, screen)
    sync.region_will_change(payload.animated)
    return RegionOut(region=sync.region, state=sync.state)


@router.post("/regions/{screen}/did-change", response_model=RegionOut)
def region_did_change(screen: str, region: Region, request: Request):
    sync = _region_sync(request, screen)
    written = sync.region_did_change(region)
    return RegionOut(region=sync.region, state=sync.state, written=written)
