"""
Training Load Router

Exposes the acute:chronic workload ratio as a free calculator:
- Rolling-average or EWMA ratio
- Zone classification with guidance
"""

from fastapi import APIRouter
from typing import List, Optional
from pydantic import BaseModel

from core.exceptions import ValidationError
from services.calculator_inputs import InvalidInput
from services.workload_ratio import compute_acwr, DEFAULT_ACUTE_DAYS, DEFAULT_CHRONIC_DAYS

router = APIRouter(prefix="/v1/public/training-load", tags=["Training Load"])


# ============ Request / Response Models ============

class ACWRRequest(BaseModel):
    """Daily loads, oldest first. Include rest days as 0."""
    daily_loads: List[float]
    method: str = "rolling"
    acute_days: int = DEFAULT_ACUTE_DAYS
    chronic_days: int = DEFAULT_CHRONIC_DAYS


class ACWRZoneResponse(BaseModel):
    zone: str
    label: str
    description: str
    color: str


class ACWRResponse(BaseModel):
    method: str
    acute_days: int
    chronic_days: int
    acute_load: float
    chronic_load: float
    ratio: Optional[float]
    zone: Optional[ACWRZoneResponse]


# ============ Endpoints ============

@router.post("/acwr", response_model=ACWRResponse)
def calculate_acwr(request: ACWRRequest):
    """
    Acute:chronic workload ratio from a daily load series.

    Needs at least `chronic_days` entries. Ratio is null when the
    chronic load is zero.
    """
    try:
        result = compute_acwr(
            request.daily_loads,
            method=request.method,
            acute_days=request.acute_days,
            chronic_days=request.chronic_days,
        )
    except InvalidInput as e:
        raise ValidationError.from_invalid_input(e)

    zone = None
    if result.zone is not None:
        zone = ACWRZoneResponse(
            zone=result.zone.zone.value,
            label=result.zone.label,
            description=result.zone.description,
            color=result.zone.color,
        )

    return ACWRResponse(
        method=result.method.value,
        acute_days=result.acute_days,
        chronic_days=result.chronic_days,
        acute_load=round(result.acute_load, 2),
        chronic_load=round(result.chronic_load, 2),
        ratio=round(result.ratio, 2) if result.ratio is not None else None,
        zone=zone,
    )
