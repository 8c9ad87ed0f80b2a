"""
Grid carbon intensity lookup.

Given a location, report how carbon-heavy local electricity is right now.
With an Electricity Maps API key the live figure is used; without one (or when
the live call fails) a synthetic reading is generated so the dashboard card
always has something to show.
"""
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

UNITS = "gCO2/kWh"
DEFAULT_FOSSIL_FUEL_PERCENTAGE = 50

# (name, (lat_min, lat_max), (lon_min, lon_max)), exclusive bounds, checked in order
REGION_BOXES: List[Tuple[str, Tuple[float, float], Tuple[float, float]]] = [
    ("United States", (24, 50), (-125, -66)),
    ("Europe", (35, 71), (-10, 40)),
    ("India", (8, 37), (68, 97)),
    ("Australia", (-44, -10), (112, 154)),
]


@dataclass(frozen=True)
class GridIntensity:
    intensity: float
    units: str
    country: str
    fossil_fuel_percentage: float
    source: str = "synthetic"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class GridIntensityError(Exception):
    pass


class GridIntensityProvider(ABC):
    @abstractmethod
    def lookup(self, latitude: float, longitude: float) -> GridIntensity:
        """Raises GridIntensityError when no reading can be produced."""


def region_for(latitude: float, longitude: float) -> str:
    for name, (lat_min, lat_max), (lon_min, lon_max) in REGION_BOXES:
        if lat_min < latitude < lat_max and lon_min < longitude < lon_max:
            return name
    return "Unknown"


class SyntheticIntensityProvider(GridIntensityProvider):
    """Plausible random readings: 300-599 gCO2/kWh, 40-79% fossil."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def lookup(self, latitude: float, longitude: float) -> GridIntensity:
        return GridIntensity(
            intensity=self.rng.randrange(300, 600),
            units=UNITS,
            country=region_for(latitude, longitude),
            fossil_fuel_percentage=self.rng.randrange(40, 80),
            source="synthetic",
        )


class ElectricityMapsProvider(GridIntensityProvider):
    def __init__(self, api_key: str, url: str, timeout: int = 30):
        self.api_key = api_key
        self.url = url
        self.timeout = timeout

    def lookup(self, latitude: float, longitude: float) -> GridIntensity:
        try:
            resp = requests.get(
                self.url,
                params={"lat": latitude, "lon": longitude},
                headers={"auth-token": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise GridIntensityError(f"Electricity Maps unreachable: {e}")

        if not resp.ok:
            raise GridIntensityError(f"Electricity Maps error: {resp.status_code}")

        try:
            data = resp.json()
        except ValueError:
            raise GridIntensityError("Electricity Maps returned invalid JSON")

        if not isinstance(data, dict) or data.get("carbonIntensity") is None:
            raise GridIntensityError("Electricity Maps response has no carbonIntensity")

        return GridIntensity(
            intensity=data["carbonIntensity"],
            units=UNITS,
            country=data.get("zone") or "Unknown",
            fossil_fuel_percentage=data.get("fossilFuelPercentage") or DEFAULT_FOSSIL_FUEL_PERCENTAGE,
            source="electricitymaps",
        )


def lookup_grid_intensity(
    latitude: float,
    longitude: float,
    live: Optional[GridIntensityProvider],
    fallback: GridIntensityProvider,
) -> GridIntensity:
    """Live reading when possible, synthetic otherwise."""
    if live is not None:
        try:
            return live.lookup(latitude, longitude)
        except GridIntensityError as e:
            logger.warning(f"Live grid intensity failed, using synthetic data: {e}")
    return fallback.lookup(latitude, longitude)
