"""
Pacing Strategy API Endpoints

Free tool - turns a goal time into per-kilometre race splits.
"""
from dataclasses import asdict
from typing import Union

from fastapi import APIRouter
from pydantic import BaseModel

from core.exceptions import ValidationError
from services.calculator_inputs import InvalidInput
from services.pacing_strategy import generate_pacing_strategy

router = APIRouter(prefix="/v1/public/pacing", tags=["Pacing"])


class PacingStrategyRequest(BaseModel):
    distance: Union[float, str]   # "5k", "10k", "half_marathon", "marathon" or metres
    target_time_seconds: float
    strategy: str = "even"
    slowdown_percent: float = 0.0  # From /v1/public/environmental/calculate


def _format_time(seconds: float) -> str:
    total = int(round(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


@router.post("/strategy")
def pacing_strategy(request: PacingStrategyRequest):
    """
    Generate split targets for a race.

    Splits always add up to the goal time (extended by any environmental
    slowdown).
    """
    try:
        plan = generate_pacing_strategy(
            distance=request.distance,
            target_time_seconds=request.target_time_seconds,
            strategy=request.strategy,
            slowdown_percent=request.slowdown_percent,
        )
    except InvalidInput as e:
        raise ValidationError.from_invalid_input(e)

    result = asdict(plan)
    result["adjusted_target_time"] = _format_time(plan.adjusted_target_time_seconds)
    for split, data in zip(plan.splits, result["splits"]):
        data["target_pace"] = _format_time(split.target_pace_seconds_per_km)
    return result
