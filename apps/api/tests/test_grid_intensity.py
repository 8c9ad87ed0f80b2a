"""
Tests for grid carbon intensity lookup
"""
import random
from unittest.mock import MagicMock, patch

import pytest
import requests

from services.grid_intensity import (
    ElectricityMapsProvider,
    GridIntensity,
    GridIntensityError,
    GridIntensityProvider,
    SyntheticIntensityProvider,
    lookup_grid_intensity,
    region_for,
)


class BrokenProvider(GridIntensityProvider):
    def lookup(self, latitude, longitude):
        raise GridIntensityError("offline")


class TestRegionFor:
    @pytest.mark.parametrize("lat,lon,region", [
        (40.7, -74.0, "United States"),
        (48.85, 2.35, "Europe"),
        (19.07, 72.88, "India"),
        (-33.87, 151.21, "Australia"),
        (35.68, 139.69, "Unknown"),
        (0, 0, "Unknown"),
    ])
    def test_regions(self, lat, lon, region):
        assert region_for(lat, lon) == region


class TestSyntheticProvider:
    def test_values_in_range(self):
        provider = SyntheticIntensityProvider(random.Random(42))
        for _ in range(50):
            reading = provider.lookup(48.85, 2.35)
            assert 300 <= reading.intensity < 600
            assert 40 <= reading.fossil_fuel_percentage < 80
            assert reading.units == "gCO2/kWh"
            assert reading.country == "Europe"
            assert reading.source == "synthetic"

    def test_seeded_rng_is_reproducible(self):
        a = SyntheticIntensityProvider(random.Random(7)).lookup(0, 0)
        b = SyntheticIntensityProvider(random.Random(7)).lookup(0, 0)
        assert a == b


class TestElectricityMapsProvider:
    def _provider(self):
        return ElectricityMapsProvider(api_key="em-key", url="https://em.test/latest", timeout=5)

    @patch("services.grid_intensity.requests.get")
    def test_live_reading(self, mock_get):
        resp = MagicMock(ok=True, status_code=200)
        resp.json.return_value = {"carbonIntensity": 231, "zone": "FR", "fossilFuelPercentage": 12.5}
        mock_get.return_value = resp

        reading = self._provider().lookup(48.85, 2.35)

        assert reading == GridIntensity(231, "gCO2/kWh", "FR", 12.5, "electricitymaps")
        _, kwargs = mock_get.call_args
        assert kwargs["params"] == {"lat": 48.85, "lon": 2.35}
        assert kwargs["headers"] == {"auth-token": "em-key"}

    @patch("services.grid_intensity.requests.get")
    def test_missing_fossil_share_defaults(self, mock_get):
        resp = MagicMock(ok=True, status_code=200)
        resp.json.return_value = {"carbonIntensity": 400, "zone": "DE"}
        mock_get.return_value = resp
        assert self._provider().lookup(52.5, 13.4).fossil_fuel_percentage == 50

    @patch("services.grid_intensity.requests.get")
    def test_error_status(self, mock_get):
        mock_get.return_value = MagicMock(ok=False, status_code=401)
        with pytest.raises(GridIntensityError):
            self._provider().lookup(1, 1)

    @patch("services.grid_intensity.requests.get")
    def test_missing_intensity(self, mock_get):
        resp = MagicMock(ok=True, status_code=200)
        resp.json.return_value = {"zone": "DE"}
        mock_get.return_value = resp
        with pytest.raises(GridIntensityError):
            self._provider().lookup(1, 1)

    @patch("services.grid_intensity.requests.get")
    def test_transport_error(self, mock_get):
        mock_get.side_effect = requests.Timeout("slow")
        with pytest.raises(GridIntensityError):
            self._provider().lookup(1, 1)


class TestLookupGridIntensity:
    def test_no_live_provider_uses_synthetic(self):
        reading = lookup_grid_intensity(40.7, -74.0, None, SyntheticIntensityProvider(random.Random(1)))
        assert reading.source == "synthetic"
        assert reading.country == "United States"

    def test_live_failure_falls_back(self):
        reading = lookup_grid_intensity(40.7, -74.0, BrokenProvider(), SyntheticIntensityProvider(random.Random(1)))
        assert reading.source == "synthetic"

    def test_to_dict(self):
        reading = GridIntensity(300, "gCO2/kWh", "Europe", 45)
        assert reading.to_dict() == {
            "intensity": 300,
            "units": "gCO2/kWh",
            "country": "Europe",
            "fossil_fuel_percentage": 45,
            "source": "synthetic",
        }
