from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

PRICE_TIERS = ["$", "$$", "$$$", "$$$$"]
DEFAULT_PRICE_TIER = "$$"

PriceTier = Literal["$", "$$", "$$$", "$$$$"]


class Venue(BaseModel):
    id: int
    name: str = Field(..., min_length=1)
    cuisine: str = ""
    types: list[str] = Field(default_factory=list)
    lat: float
    lng: float
    price: PriceTier = DEFAULT_PRICE_TIER
    address: str = ""


class ChainBrand(BaseModel):
    name: str = Field(..., min_length=1)
    cuisine: str = ""
    types: list[str] = Field(default_factory=list)

    @field_validator("cuisine", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or ""

    @field_validator("types", mode="before")
    @classmethod
    def _coerce_types(cls, value):
        if not value:
            return []
        if isinstance(value, str):
            return [t.strip() for t in value.split(",") if t.strip()]
        return [str(t) for t in value if t]


class RankedResult(Venue):
    distance: float = Field(..., ge=0.0, description="Miles from the active reference point")
    distance_label: str = ""


class ReferenceLocation(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)
    source: Literal["user", "fallback"] = "fallback"


class GeolocationReport(BaseModel):
    """What the browser's geolocation provider told the client."""

    lat: float | None = Field(default=None, ge=-90.0, le=90.0)
    lng: float | None = Field(default=None, ge=-180.0, le=180.0)
    supported: bool = True
    error: str | None = None


class LocationResponse(BaseModel):
    reference: ReferenceLocation
    status: Literal["located", "fallback", "unsupported"]
    message: str
    results: list[RankedResult] = Field(default_factory=list)


class SearchResponse(BaseModel):
    query: str
    reference: ReferenceLocation
    results: list[RankedResult]
    count: int
    message: str
    chain: str | None = None


class NearbyResponse(BaseModel):
    reference: ReferenceLocation
    max_miles: float
    limit: int
    results: list[RankedResult]
