# sweeply/maps.py
"""Geocoding, map pins and the map region sync guard.

The region guard mirrors what a map widget reports through its delegate:
``region_will_change(animated)`` then ``region_did_change(region)``. Only a
change that began as a user gesture is written back into the bound region, so
recentring the map from code never loops back into app state. Whether a change
is a gesture is inferred from ``animated`` (widgets animate programmatic moves),
which is a heuristic rather than a signal the SDK guarantees.
"""
import asyncio
import logging
import math
from enum import Enum
from typing import Optional
from urllib.parse import urlencode

from pydantic import BaseModel

log = logging.getLogger(__name__)

EARTH_RADIUS_M = 6_371_000
MIN_CENTER_SHIFT_M = 50
MIN_SPAN_CHANGE = 0.01
DEFAULT_SPAN = 0.01
DASHBOARD_SPAN = 0.05


class Coordinate(BaseModel):
    latitude: float
    longitude: float


class Span(BaseModel):
    latitude_delta: float = DEFAULT_SPAN
    longitude_delta: float = DEFAULT_SPAN


class Region(BaseModel):
    center: Coordinate
    span: Span = Span()


class MapPin(BaseModel):
    coordinate: Coordinate
    title: str
    subtitle: Optional[str] = None


# San Francisco until the first location fix arrives
DEFAULT_REGION = Region(
    center=Coordinate(latitude=37.7749, longitude=-122.4194),
    span=Span(latitude_delta=0.1, longitude_delta=0.1),
)


def region_around(coordinate: Coordinate, span: float = DEFAULT_SPAN) -> Region:
    return Region(center=coordinate, span=Span(latitude_delta=span, longitude_delta=span))


def distance_m(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in metres (haversine)."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(h))


def needs_update(current: Region, new: Region) -> bool:
    """Whether a bound region differs enough from what the widget shows to push it."""
    span_change = abs(current.span.latitude_delta - new.span.latitude_delta) + abs(
        current.span.longitude_delta - new.span.longitude_delta
    )
    return distance_m(current.center, new.center) > MIN_CENTER_SHIFT_M or span_change > MIN_SPAN_CHANGE


def directions_url(coordinate: Coordinate, name: Optional[str] = None) -> str:
    """Hand-off URL that opens turn-by-turn driving directions to ``coordinate``."""
    params = {
        "api": "1",
        "destination": f"{coordinate.latitude},{coordinate.longitude}",
        "travelmode": "driving",
    }
    if name:
        params["destination_place_name"] = name
    return "https://www.google.com/maps/dir/?" + urlencode(params)


# ──────────────────────────────────────────────────────────────────────────────
# Region sync
# ──────────────────────────────────────────────────────────────────────────────
class RegionSyncState(str, Enum):
    IDLE = "idle"
    PROGRAMMATIC = "programmatic"
    USER_DRIVEN = "user_driven"


class RegionSync:
    """Per-map guard between the widget's region and the app's bound region.

    ``span_only`` keeps the bound centre fixed and only takes the zoom level
    from gestures (the dashboard map has panning disabled).
    """

    def __init__(self, region: Region = DEFAULT_REGION, span_only: bool = False):
        self.region = region
        self.span_only = span_only
        self.state = RegionSyncState.IDLE

    def assign(self, region: Region, pushed: bool = True) -> Region:
        """App-initiated move (e.g. centre on me); returns the region to push to the widget.

        With ``pushed=False`` the widget already shows ``region`` and will report
        no change, so the guard stays idle.
        """
        self.region = region
        if pushed:
            self.state = RegionSyncState.PROGRAMMATIC
        return region

    def region_will_change(self, animated: bool) -> RegionSyncState:
        if self.state is RegionSyncState.IDLE:
            self.state = RegionSyncState.PROGRAMMATIC if animated else RegionSyncState.USER_DRIVEN
        return self.state

    def region_did_change(self, region: Region) -> bool:
        """Settle a widget change; True when it was written back into ``self.region``."""
        wrote = self.state is RegionSyncState.USER_DRIVEN
        if wrote:
            if self.span_only:
                self.region = Region(center=self.region.center, span=region.span)
            else:
                self.region = region
        self.state = RegionSyncState.IDLE
        return wrote


# ──────────────────────────────────────────────────────────────────────────────
# Geocoding
# ──────────────────────────────────────────────────────────────────────────────
class Geocoder:
    """Address lookups through a ``googlemaps.Client``; one attempt, failures logged."""

    def __init__(self, client):
        self._client = client

    async def locate(self, address: str) -> Optional[Coordinate]:
        if not address or not address.strip():
            return None
        try:
            results = await asyncio.to_thread(self._client.geocode, address)
        except Exception as e:
            log.warning("Geocoding error for %r: %s", address, e)
            return None
        if not results:
            log.warning("Geocoding found nothing for %r", address)
            return None
        location = results[0]["geometry"]["location"]
        return Coordinate(latitude=location["lat"], longitude=location["lng"])

    async def pin(self, address: str, title: str, subtitle: Optional[str] = None) -> Optional[MapPin]:
        coordinate = await self.locate(address)
        if coordinate is None:
            return None
        return MapPin(coordinate=coordinate, title=title, subtitle=subtitle or address)
