"""
Carbon Intensity API Router

How carbon-heavy the caller's local electricity grid is right now.
"""
import logging
from typing import Optional, Tuple

from fastapi import APIRouter, Depends

from core.cache import grid_cell_key, read_json, write_json
from core.config import settings
from schemas import CarbonIntensityRequest, CarbonIntensityResponse
from services.grid_intensity import (
    ElectricityMapsProvider,
    GridIntensity,
    GridIntensityProvider,
    SyntheticIntensityProvider,
    lookup_grid_intensity,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/carbon-intensity", tags=["carbon-intensity"])


def get_grid_providers() -> Tuple[Optional[GridIntensityProvider], GridIntensityProvider]:
    live = None
    if settings.ELECTRICITY_MAP_API_KEY:
        live = ElectricityMapsProvider(
            api_key=settings.ELECTRICITY_MAP_API_KEY,
            url=settings.ELECTRICITY_MAP_URL,
            timeout=settings.EXTERNAL_API_TIMEOUT,
        )
    return live, SyntheticIntensityProvider()


def _to_response(reading: GridIntensity) -> CarbonIntensityResponse:
    return CarbonIntensityResponse(
        intensity=reading.intensity,
        units=reading.units,
        country=reading.country,
        fossilFuelPercentage=reading.fossil_fuel_percentage,
        source=reading.source,
    )


@router.post("", response_model=CarbonIntensityResponse)
def carbon_intensity(
    payload: CarbonIntensityRequest,
    providers=Depends(get_grid_providers),
):
    key = grid_cell_key(payload.latitude, payload.longitude)
    cached = read_json(key)
    if cached:
        return _to_response(GridIntensity(**cached))

    live, fallback = providers
    reading = lookup_grid_intensity(payload.latitude, payload.longitude, live=live, fallback=fallback)
    if reading.source != "synthetic":
        write_json(key, reading.to_dict(), ttl=settings.CACHE_TTL_GRID_INTENSITY)
    return _to_response(reading)
