"""
Environmental Calculator API Endpoints

Free tools - no authentication required.

Heat (WBGT), altitude and wind adjustments for training and race paces,
plus a combined calculator that compounds all three.
"""
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from core.exceptions import ValidationError
from services.calculator_inputs import InvalidInput
from services.environmental_conditions import (
    EnvironmentalConditions,
    clamp_heat_stress_index,
    classify_heat_risk,
    compute_altitude_profile,
    compute_environmental_adjustment,
    compute_heat_stress_index,
    compute_pace_adjustment,
    compute_wind_resistance,
)

router = APIRouter(prefix="/v1/public/environmental", tags=["Environmental Calculator"])


class HeatStressRequest(BaseModel):
    temp_c: float
    humidity_percent: float
    dew_point_c: Optional[float] = None


class HeatPaceRequest(BaseModel):
    heat_stress_index: float
    heat_acclimated: bool = False


class AltitudeRequest(BaseModel):
    altitude_m: float
    acclimatization_days: float = 0
    intensity: str = "moderate"


class WindRequest(BaseModel):
    """Wind direction is where the wind blows TOWARD, in compass degrees."""
    wind_speed_mps: float
    wind_direction_deg: float
    runner_direction_deg: float
    runner_speed_mps: float


class EnvironmentalRequest(BaseModel):
    """Combined calculator. Omit a group of fields to skip that factor."""
    temp_c: Optional[float] = None
    humidity_percent: Optional[float] = None
    dew_point_c: Optional[float] = None
    heat_acclimated: bool = False
    altitude_m: Optional[float] = None
    acclimatization_days: float = 0
    intensity: str = "moderate"
    wind_speed_kmh: Optional[float] = None
    wind_direction: str = "HEADWIND"  # HEADWIND, TAILWIND or CROSSWIND
    baseline_pace_min_per_km: Optional[float] = None


@router.post("/heat-stress")
def heat_stress(request: HeatStressRequest):
    """
    WBGT heat stress index with risk band and recommendations.

    Free tool - no authentication required.
    """
    try:
        index = compute_heat_stress_index(
            request.temp_c, request.humidity_percent, request.dew_point_c
        )
        assessment = classify_heat_risk(clamp_heat_stress_index(index))
    except InvalidInput as e:
        raise ValidationError.from_invalid_input(e)

    return {
        "heat_stress_index": round(index, 2),
        "category": assessment.category,
        "risk": assessment.risk,
        "hr_adjustment_bpm": round(assessment.hr_adjustment_bpm),
        "recommendations": assessment.recommendations,
    }


@router.post("/heat-pace")
def heat_pace(request: HeatPaceRequest):
    """
    Expected slowdown for a heat stress index.

    Acclimated athletes see half the slowdown.
    """
    try:
        result = compute_pace_adjustment(request.heat_stress_index, request.heat_acclimated)
    except InvalidInput as e:
        raise ValidationError.from_invalid_input(e)

    return asdict(result)


@router.post("/altitude")
def altitude(request: AltitudeRequest):
    """VO2max reduction, pace impact, heart rate shift and phase at altitude."""
    try:
        profile = compute_altitude_profile(
            request.altitude_m, request.acclimatization_days, request.intensity
        )
    except InvalidInput as e:
        raise ValidationError.from_invalid_input(e)

    return asdict(profile)


@router.post("/wind")
def wind(request: WindRequest):
    """Headwind penalty or tailwind benefit for a runner's heading and speed."""
    try:
        result = compute_wind_resistance(
            request.wind_speed_mps,
            request.wind_direction_deg,
            request.runner_direction_deg,
            request.runner_speed_mps,
        )
    except InvalidInput as e:
        raise ValidationError.from_invalid_input(e)

    return asdict(result)


@router.post("/calculate")
def calculate(request: EnvironmentalRequest):
    """
    Combined heat, altitude and wind adjustment.

    With a baseline pace (min/km) the adjusted pace is included.
    """
    conditions = EnvironmentalConditions(**request.model_dump())
    try:
        result = compute_environmental_adjustment(conditions)
    except InvalidInput as e:
        raise ValidationError.from_invalid_input(e)

    return asdict(result)
