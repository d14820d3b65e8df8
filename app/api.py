"""HTTP API for the sunset walk planner."""

import hmac
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from pydantic import BaseModel, Field

from app.domain import (
    CheckResult,
    CityCandidate,
    ForecastOutfit,
    LocaleUnits,
    OutfitRecommendation,
    UnitSystem,
    WalkPlan,
    WeatherCheck,
    WeatherSnapshot,
)
from .config import settings
from .data_sources import build_data_source
from .locale_units import classify_locale, resolve_unit_system
from .outfit_rules import RULE_SETS, synthesize_outfit
from .update_decision import compare_and_decide
from .walk_service import check_current_weather, forecast_outfit, plan_walk_for_location, search_cities
from utils.logging_utils import coarse_location, get_tagged_logger

logger = get_tagged_logger(__name__, tag="app/api")


def require_api_key(x_api_key: str | None = Header(default=None)):
    """
    Validate the X-API-Key header against the configured api_key.
    """
    # No key configured: dev/default mode.
    if not settings.api_key:
        logger.debug("No API key configured; allowing all requests")
        return

    if not x_api_key:
        logger.debug("No API key provided")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

    if hmac.compare_digest(str(x_api_key), str(settings.api_key)):
        return

    logger.debug("Invalid API key provided")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


router = APIRouter(dependencies=[Depends(require_api_key)])
DATA_SOURCE = build_data_source(settings)


class Location(BaseModel):
    """Coordinates picked from the city search."""
    lat: float = Field(ge=-90, le=90, allow_inf_nan=False)
    lon: float = Field(ge=-180, le=180, allow_inf_nan=False)


class UnitsRequest(BaseModel):
    """Either a country (preferred) or an explicit temperature unit selects the units."""
    country: Optional[str] = None
    temperature_unit: Optional[str] = None

    def unit_system(self) -> UnitSystem:
        return resolve_unit_system(self.country, self.temperature_unit)


class WalkPlanRequest(Location):
    """Walk timing request; date is 'today' or YYYY-MM-DD."""
    date: str = "today"
    hours: Optional[int] = Field(default=None, ge=0)
    minutes: Optional[int] = Field(default=None, ge=0)
    city: Optional[str] = None


class WalkOutfitRequest(Location, UnitsRequest):
    """Outfit for the forecast hour at the walk's start."""
    start_time: datetime


class WeatherCheckRequest(Location, UnitsRequest):
    """Compare the snapshot the outfit was built from with conditions now."""
    forecast: WeatherSnapshot


class SynthesizeRequest(UnitsRequest):
    snapshot: WeatherSnapshot
    rule_set: str = "forecast"


class CompareRequest(UnitsRequest):
    forecast: WeatherSnapshot
    live: WeatherSnapshot


class CitiesResponse(BaseModel):
    """Geocoding matches; needs_selection is set when the user must pick one."""
    cities: List[CityCandidate]
    needs_selection: bool


@router.get("/cities", response_model=CitiesResponse)
def get_cities(city: Optional[str] = Query(default=None)):
    """Search for a city by name."""
    candidates = search_cities(city, data_source=DATA_SOURCE)
    if not candidates:
        raise HTTPException(status_code=404, detail="City not found")
    return CitiesResponse(cities=candidates, needs_selection=len(candidates) > 1)


@router.get("/locale", response_model=LocaleUnits)
def get_locale(country: str = Query(...)):
    """Units expected by users in the given country."""
    return classify_locale(country)


@router.post("/walk/plan", response_model=WalkPlan)
def post_walk_plan(req: WalkPlanRequest):
    """Work out when to leave so the walk ends at sunset."""
    logger.info("Walk plan requested", extra={"location": coarse_location(req.lat, req.lon), "date": req.date})
    return plan_walk_for_location(
        req.lat,
        req.lon,
        req.date,
        req.hours,
        req.minutes,
        city=req.city,
        data_source=DATA_SOURCE,
    )


@router.post("/walk/outfit", response_model=ForecastOutfit)
def post_walk_outfit(req: WalkOutfitRequest):
    """Forecast outfit for the walk's start time."""
    return forecast_outfit(req.lat, req.lon, req.start_time, req.unit_system(), data_source=DATA_SOURCE)


@router.post("/weather/check", response_model=WeatherCheck)
def post_weather_check(req: WeatherCheckRequest):
    """Check live conditions against the forecast and revise the outfit."""
    return check_current_weather(req.lat, req.lon, req.forecast, req.unit_system(), data_source=DATA_SOURCE)


@router.post("/outfit/synthesize", response_model=OutfitRecommendation)
def post_synthesize(req: SynthesizeRequest):
    """Run the outfit rules on a caller-supplied snapshot."""
    rules = RULE_SETS.get(req.rule_set)
    if rules is None:
        raise HTTPException(status_code=400, detail=f"Unknown rule set '{req.rule_set}'")
    return synthesize_outfit(req.snapshot, req.unit_system(), rules)


@router.post("/weather/compare", response_model=CheckResult)
def post_compare(req: CompareRequest):
    """Compare two caller-supplied snapshots without any live fetch."""
    return compare_and_decide(req.forecast, req.live, req.unit_system())
