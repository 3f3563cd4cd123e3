# sweeply/places.py
"""Nearby charging and fuel stations for the fleet map.

Charging stations come from the OpenChargeMap REST API, fuel stations from
Google Places. ``load_nearby`` runs both lookups concurrently and waits for
both; each source's failure is recorded on its own and never cancels the other.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .maps import Coordinate, MapPin

log = logging.getLogger(__name__)

OPENCHARGEMAP_URL = "https://api.openchargemap.io/v3/poi"


class _OCMModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AddressInfo(_OCMModel):
    title: str = Field(default="", alias="Title")
    address_line1: Optional[str] = Field(default=None, alias="AddressLine1")
    town: Optional[str] = Field(default=None, alias="Town")
    state_or_province: Optional[str] = Field(default=None, alias="StateOrProvince")
    postcode: Optional[str] = Field(default=None, alias="Postcode")
    country_id: Optional[int] = Field(default=None, alias="CountryID")
    latitude: float = Field(alias="Latitude")
    longitude: float = Field(alias="Longitude")


class OperatorInfo(_OCMModel):
    title: str = Field(alias="Title")
    website_url: Optional[str] = Field(default=None, alias="WebsiteURL")


class Connection(_OCMModel):
    connection_type_id: Optional[int] = Field(default=None, alias="ConnectionTypeID")
    power_kw: Optional[float] = Field(default=None, alias="PowerKW")


class ChargingStation(_OCMModel):
    id: int = Field(alias="ID")
    uuid: Optional[str] = Field(default=None, alias="UUID")
    address_info: AddressInfo = Field(alias="AddressInfo")
    operator_info: Optional[OperatorInfo] = Field(default=None, alias="OperatorInfo")
    connections: List[Connection] = Field(default_factory=list, alias="Connections")

    def to_pin(self) -> MapPin:
        subtitle = self.operator_info.title if self.operator_info else "Charging Station"
        return MapPin(
            coordinate=Coordinate(latitude=self.address_info.latitude, longitude=self.address_info.longitude),
            title=self.address_info.title,
            subtitle=subtitle,
        )


class GasStation(BaseModel):
    name: str
    address: Optional[str] = None
    coordinate: Coordinate

    @classmethod
    def from_place(cls, place: Dict[str, Any]) -> "GasStation":
        location = place["geometry"]["location"]
        return cls(
            name=place.get("name") or "Gas Station",
            address=place.get("vicinity"),
            coordinate=Coordinate(latitude=location["lat"], longitude=location["lng"]),
        )

    def to_pin(self) -> MapPin:
        return MapPin(coordinate=self.coordinate, title=self.name, subtitle=self.address or "Gas Station")


class NearbyPlaces(BaseModel):
    charging_stations: List[ChargingStation] = []
    gas_stations: List[GasStation] = []
    charging_error: Optional[str] = None
    gas_error: Optional[str] = None
    is_loading: bool = True

    def all_pins(self) -> List[MapPin]:
        return [s.to_pin() for s in self.charging_stations] + [g.to_pin() for g in self.gas_stations]


class PlacesService:
    def __init__(self, http: httpx.AsyncClient, gmaps=None, openchargemap_key: Optional[str] = None):
        self._http = http
        self._gmaps = gmaps
        self._ocm_key = openchargemap_key

    async def charging_stations(self, near: Coordinate, radius_km: int = 10) -> List[ChargingStation]:
        params = {
            "latitude": near.latitude,
            "longitude": near.longitude,
            "distance": radius_km,
            "distanceunit": "km",
            "maxresults": 100,
            "compact": "true",
            "verbose": "false",
        }
        headers = {"Content-Type": "application/json"}
        if self._ocm_key:
            params["key"] = self._ocm_key
            headers["X-API-Key"] = self._ocm_key
        resp = await self._http.get(OPENCHARGEMAP_URL, params=params, headers=headers)
        resp.raise_for_status()
        stations = []
        for row in resp.json():
            try:
                stations.append(ChargingStation.model_validate(row))
            except ValidationError as e:
                log.warning("skipping malformed charging station: %s", e)
        return stations

    async def gas_stations(self, near: Coordinate, radius_m: int = 10000) -> List[GasStation]:
        if self._gmaps is None:
            raise RuntimeError("GOOGLE_MAPS_API_KEY is not set")
        resp = await asyncio.to_thread(
            self._gmaps.places_nearby,
            location=(near.latitude, near.longitude),
            radius=radius_m,
            type="gas_station",
        )
        return [GasStation.from_place(p) for p in resp.get("results", [])]

    async def load_nearby(self, near: Coordinate) -> NearbyPlaces:
        result = NearbyPlaces()
        charging, gas = await asyncio.gather(
            self.charging_stations(near),
            self.gas_stations(near),
            return_exceptions=True,
        )
        if isinstance(charging, BaseException):
            log.warning("charging station lookup failed: %s", charging)
            result.charging_error = str(charging) or type(charging).__name__
        else:
            result.charging_stations = charging
        if isinstance(gas, BaseException):
            log.warning("gas station lookup failed: %s", gas)
            result.gas_error = str(gas) or type(gas).__name__
        else:
            result.gas_stations = gas
        result.is_loading = False
        return result
