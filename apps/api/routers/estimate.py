"""
Estimate API Router

Stateless CO2 estimate for a size typed in or read from a picked file.
"""
from fastapi import APIRouter

from core.config import settings
from core.exceptions import ValidationError
from schemas import EstimateRequest, EstimateResponse, ImpactComparisonResponse
from services.emission_estimator import (
    InvalidSizeError,
    bytes_to_mb,
    estimate_rounded,
    format_grams,
    validate_size_mb,
)
from services.impact_comparisons import compare

router = APIRouter(prefix="/v1/estimate", tags=["estimate"])


@router.post("", response_model=EstimateResponse)
def estimate_emissions(payload: EstimateRequest):
    raw = payload.size_mb
    if raw is None and payload.size_bytes is not None:
        raw = bytes_to_mb(payload.size_bytes)
    try:
        size_mb = validate_size_mb(raw)
    except InvalidSizeError as e:
        raise ValidationError(str(e), field="size_mb")

    grams = estimate_rounded(size_mb, settings.CO2_GRAMS_PER_MB)
    return EstimateResponse(
        size_mb=size_mb,
        co2_grams=grams,
        co2_display=format_grams(grams),
        comparison=ImpactComparisonResponse.model_validate(compare(grams)),
    )
