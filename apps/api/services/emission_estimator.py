"""
Emission Estimator

Maps a data volume to an estimated CO2 mass with a single linear coefficient:

    grams = size_mb * CO2_GRAMS_PER_MB

The coefficient is a policy value (0.02 g/MB), not a measurement. Callers that
want a different calibration pass their own value; nothing here reads settings.

Input validation is kept apart from the arithmetic: `validate_size_mb` rejects
bad input before `estimate` is ever called.
"""
import math
from dataclasses import dataclass
from typing import Union

CO2_GRAMS_PER_MB = 0.02
BYTES_PER_MB = 1024 * 1024

# Stored and displayed precision for per-activity grams
GRAMS_DECIMALS = 3


class InvalidSizeError(ValueError):
    """Raised when a size is not a finite, positive number."""


def validate_size_mb(raw: Union[str, int, float, None]) -> float:
    """
    Parse and validate a user-entered size in megabytes.

    Accepts numbers and numeric strings ("5", "0.01"). Rejects anything
    non-numeric, non-finite, zero or negative.
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidSizeError("Please enter a valid size")
    try:
        size = float(raw.strip()) if isinstance(raw, str) else float(raw)
    except (TypeError, ValueError):
        raise InvalidSizeError("Please enter a valid size")
    if not math.isfinite(size) or size <= 0:
        raise InvalidSizeError("Please enter a valid size")
    return size


def estimate(size_mb: float, grams_per_mb: float = CO2_GRAMS_PER_MB) -> float:
    """Estimated grams of CO2 for transferring `size_mb` megabytes."""
    return size_mb * grams_per_mb


def estimate_rounded(size_mb: float, grams_per_mb: float = CO2_GRAMS_PER_MB) -> float:
    """`estimate` rounded to the precision activities are stored with."""
    return round(estimate(size_mb, grams_per_mb), GRAMS_DECIMALS)


def bytes_to_mb(num_bytes: int) -> float:
    return num_bytes / BYTES_PER_MB


def format_grams(grams: float) -> str:
    """Display form used across the app, e.g. 0.1 -> '0.100g'."""
    return f"{grams:.{GRAMS_DECIMALS}f}g"


@dataclass(frozen=True)
class CompressionSavings:
    original_mb: float
    compressed_mb: float
    saved_mb: float
    saved_percentage: float
    co2_saved_grams: float


def estimate_savings(
    original_bytes: int,
    compressed_bytes: int,
    grams_per_mb: float = CO2_GRAMS_PER_MB,
) -> CompressionSavings:
    """
    CO2 avoided by sending a compressed file instead of the original.

    A "compressed" file larger than the original saves nothing; savings are
    clamped at zero rather than reported as negative.
    """
    if original_bytes <= 0:
        raise InvalidSizeError("Original file size must be positive")
    if compressed_bytes < 0:
        raise InvalidSizeError("Compressed file size cannot be negative")

    original_mb = bytes_to_mb(original_bytes)
    compressed_mb = bytes_to_mb(compressed_bytes)
    saved_mb = max(0.0, original_mb - compressed_mb)
    return CompressionSavings(
        original_mb=original_mb,
        compressed_mb=compressed_mb,
        saved_mb=saved_mb,
        saved_percentage=saved_mb / original_mb * 100,
        co2_saved_grams=estimate(saved_mb, grams_per_mb),
    )
