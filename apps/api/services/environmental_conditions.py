"""
Environmental Conditions Calculator

Estimates how heat, altitude and wind change the cost of running at a given
pace. Every function here is pure: inputs in, value out, InvalidInput when a
reading is outside a physiologically plausible range.

Models:
    Heat     - Shade WBGT approximation (Australian Bureau of Meteorology):
               WBGT = 0.567*T + 0.393*e + 3.94, e = water vapour pressure (hPa)
    Altitude - VO2max declines ~1% per 100m above 1500m (Fulco et al. 1998),
               partially recovered by acclimatization (Wilber 2004)
    Wind     - Aerodynamic cost scales with relative air speed squared
               (Pugh 1971); the still-air share grows with running speed

All percentages are "percent slower than ideal conditions". Negative values
mean conditions help (tailwind).
"""
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from services.calculator_inputs import InvalidInput, require_range

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Magnus coefficients for saturation vapour pressure over water
MAGNUS_A_HPA = 6.105
MAGNUS_B = 17.27
MAGNUS_C = 237.7

TEMP_MIN_C = -20.0
TEMP_MAX_C = 50.0
DEW_POINT_MIN_C = -40.0

# (WBGT °C, slowdown %) breakpoints for the heat pace model
HEAT_SLOWDOWN_BREAKPOINTS = [
    (10.0, 0.0),
    (18.0, 1.5),
    (23.0, 4.0),
    (28.0, 8.0),
    (32.0, 13.0),
]
HEAT_SLOWDOWN_SLOPE_ABOVE = 1.5   # % per °C beyond the last breakpoint
HEAT_SLOWDOWN_CAP = 20.0
HEAT_INDEX_MIN = -10.0
HEAT_INDEX_MAX = 45.0

# Above this WBGT, race organisers are advised to cancel or modify events
HIGH_HEAT_THRESHOLD = 28.0
EXTREME_HEAT_THRESHOLD = 32.0

# Heart rate drift per °C WBGT above the comfortable band
HEAT_HR_DRIFT_START = 15.0
HEAT_HR_DRIFT_BPM_PER_DEGREE = 1.0
HEAT_HR_DRIFT_CAP = 25.0

ALTITUDE_BASELINE_M = 1500.0
ALTITUDE_MIN_M = -500.0
ALTITUDE_MAX_M = 6000.0
VO2MAX_REDUCTION_PER_100M = 1.0
VO2MAX_REDUCTION_CAP = 30.0
ALTITUDE_HR_CAP_BPM = 20.0
ACCLIMATIZATION_MAX_DAYS = 365.0

WIND_SPEED_MAX_MPS = 40.0
RUNNER_SPEED_MAX_MPS = 12.0
DEFAULT_RUNNER_SPEED_MPS = 4.0

# Aerodynamic share of running cost in still air is k * v^2
# (~3.5% at 4 m/s, ~8% at 6 m/s)
AERODYNAMIC_COST_COEFFICIENT = 0.0022
WIND_STRONG_IMPACT_PERCENT = 5.0

BASELINE_PACE_MIN = 2.5   # min/km
BASELINE_PACE_MAX = 15.0


# ---------------------------------------------------------------------------
# Enums and results
# ---------------------------------------------------------------------------


class HeatRiskCategory(str, Enum):
    """WBGT risk bands used on race-day flag systems."""
    LOW_RISK = "LOW_RISK"
    MODERATE_RISK = "MODERATE_RISK"
    HIGH_RISK = "HIGH_RISK"
    EXTREME_RISK = "EXTREME_RISK"


class AltitudeIntensity(str, Enum):
    """Workout intensity class; harder work leans more on VO2max."""
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"


ALTITUDE_INTENSITY_WEIGHTS = {
    AltitudeIntensity.EASY: 0.5,
    AltitudeIntensity.MODERATE: 0.75,
    AltitudeIntensity.HARD: 1.0,
}


class AdaptationPhase(str, Enum):
    SEA_LEVEL = "SEA_LEVEL"
    ACUTE = "ACUTE"
    ADAPTATION = "ADAPTATION"
    OPTIMAL = "OPTIMAL"


class WindClassification(str, Enum):
    CALM = "CALM"
    HEADWIND = "HEADWIND"
    TAILWIND = "TAILWIND"
    CROSSWIND = "CROSSWIND"


# Angle of the wind's travel relative to the runner's heading
WIND_CLASS_RELATIVE_ANGLES = {
    WindClassification.HEADWIND: 180.0,
    WindClassification.TAILWIND: 0.0,
    WindClassification.CROSSWIND: 90.0,
}


@dataclass
class HeatPaceAdjustment:
    """Expected slowdown for a heat stress index."""
    heat_stress_index: float
    heat_acclimated: bool
    slowdown_percent: float
    guidance: Optional[str] = None   # Only above HIGH_HEAT_THRESHOLD


@dataclass
class HeatRiskAssessment:
    heat_stress_index: float
    category: HeatRiskCategory
    risk: str
    hr_adjustment_bpm: float
    recommendations: List[str] = field(default_factory=list)


@dataclass
class AltitudeProfile:
    """Altitude impact breakdown for one day of a stay at altitude."""
    altitude_m: float
    acclimatization_days: float
    intensity: AltitudeIntensity
    vo2max_reduction_percent: float
    performance_impact_percent: float
    hr_adjustment_bpm: float
    adaptation_phase: AdaptationPhase
    max_intensity_percent: float
    recommendations: List[str] = field(default_factory=list)


@dataclass
class WindResistance:
    wind_speed_mps: float
    runner_speed_mps: float
    headwind_component_mps: float     # Negative = tailwind
    crosswind_component_mps: float
    relative_air_speed_mps: float
    impact_percent: float             # Negative = benefit, never below -k * v^2
    classification: WindClassification
    recommendations: List[str] = field(default_factory=list)


@dataclass
class EnvironmentalConditions:
    """Inputs for the combined calculator. Each factor is optional."""
    temp_c: Optional[float] = None
    humidity_percent: Optional[float] = None
    dew_point_c: Optional[float] = None
    heat_acclimated: bool = False
    altitude_m: Optional[float] = None
    acclimatization_days: float = 0.0
    intensity: Union[AltitudeIntensity, str] = AltitudeIntensity.MODERATE
    wind_speed_kmh: Optional[float] = None
    wind_direction: Union[WindClassification, str] = WindClassification.HEADWIND
    baseline_pace_min_per_km: Optional[float] = None


@dataclass
class EnvironmentalAdjustment:
    heat_risk: Optional[HeatRiskAssessment] = None
    heat_pace: Optional[HeatPaceAdjustment] = None
    dew_point_c: Optional[float] = None
    altitude: Optional[AltitudeProfile] = None
    wind: Optional[WindResistance] = None
    total_slowdown_percent: float = 0.0
    baseline_pace_min_per_km: Optional[float] = None
    adjusted_pace_min_per_km: Optional[float] = None


# ---------------------------------------------------------------------------
# Heat
# ---------------------------------------------------------------------------


def _saturation_vapour_pressure(temp_c: float) -> float:
    """Saturation vapour pressure (hPa) at temp_c."""
    return MAGNUS_A_HPA * math.exp(MAGNUS_B * temp_c / (MAGNUS_C + temp_c))


def estimate_dew_point(temp_c: float, humidity_percent: float) -> Optional[float]:
    """
    Magnus dew point estimate. Returns None for 0% humidity, where the
    dew point is undefined.
    """
    temp_c = require_range(temp_c, "temp_c", TEMP_MIN_C, TEMP_MAX_C)
    humidity_percent = require_range(humidity_percent, "humidity_percent", 0.0, 100.0)
    if humidity_percent == 0:
        return None
    gamma = math.log(humidity_percent / 100.0) + MAGNUS_B * temp_c / (MAGNUS_C + temp_c)
    return MAGNUS_C * gamma / (MAGNUS_B - gamma)


def compute_heat_stress_index(
    temp_c: float,
    humidity_percent: float,
    dew_point_c: Optional[float] = None,
) -> float:
    """
    Approximate WBGT (°C) for shaded conditions.

    Vapour pressure is taken as the mean of the humidity-derived and the
    dew-point-derived estimates, so a consistent pair of readings gives the
    same result as either one alone. Without a dew point the humidity
    estimate is used directly. Increasing any input never lowers the index.

    Args:
        temp_c: Air temperature, -20 to 50 °C
        humidity_percent: Relative humidity, 0 to 100
        dew_point_c: Dew point, -40 °C up to the air temperature

    Returns:
        WBGT in °C (unrounded)

    Raises:
        InvalidInput: any reading outside its range
    """
    temp_c = require_range(temp_c, "temp_c", TEMP_MIN_C, TEMP_MAX_C)
    humidity_percent = require_range(humidity_percent, "humidity_percent", 0.0, 100.0)

    vapour_pressure = humidity_percent / 100.0 * _saturation_vapour_pressure(temp_c)
    if dew_point_c is not None:
        dew_point_c = require_range(dew_point_c, "dew_point_c", DEW_POINT_MIN_C, temp_c)
        from_dew_point = _saturation_vapour_pressure(dew_point_c)
        vapour_pressure = (vapour_pressure + from_dew_point) / 2.0

    return 0.567 * temp_c + 0.393 * vapour_pressure + 3.94


def _heat_slowdown(heat_stress_index: float) -> float:
    first_index, _ = HEAT_SLOWDOWN_BREAKPOINTS[0]
    if heat_stress_index <= first_index:
        return 0.0

    for (x0, y0), (x1, y1) in zip(HEAT_SLOWDOWN_BREAKPOINTS, HEAT_SLOWDOWN_BREAKPOINTS[1:]):
        if heat_stress_index <= x1:
            return y0 + (heat_stress_index - x0) * (y1 - y0) / (x1 - x0)

    last_index, last_slowdown = HEAT_SLOWDOWN_BREAKPOINTS[-1]
    slowdown = last_slowdown + (heat_stress_index - last_index) * HEAT_SLOWDOWN_SLOPE_ABOVE
    return min(slowdown, HEAT_SLOWDOWN_CAP)


def _heat_guidance(heat_stress_index: float, heat_acclimated: bool) -> Optional[str]:
    if heat_stress_index <= HIGH_HEAT_THRESHOLD:
        return None

    if heat_stress_index > EXTREME_HEAT_THRESHOLD:
        text = (
            f"Extreme heat stress (WBGT {heat_stress_index:.1f}°C). "
            "Move the session indoors or postpone it; do not race for time."
        )
    else:
        text = (
            f"High heat stress (WBGT {heat_stress_index:.1f}°C). "
            "Run by effort and heart rate, not pace, and cut quality volume."
        )
    if not heat_acclimated:
        text += " Without heat acclimatization the risk of heat illness is elevated."
    return text


def clamp_heat_stress_index(heat_stress_index: float) -> float:
    """Clamp a raw WBGT into the range the heat models accept."""
    # Slowdown saturates well below HEAT_INDEX_MAX
    return min(max(heat_stress_index, HEAT_INDEX_MIN), HEAT_INDEX_MAX)


def compute_pace_adjustment(heat_stress_index: float, heat_acclimated: bool) -> HeatPaceAdjustment:
    """
    Map a heat stress index to an expected percentage slowdown.

    Piecewise-linear through HEAT_SLOWDOWN_BREAKPOINTS, capped at
    HEAT_SLOWDOWN_CAP. Acclimated athletes get exactly half the slowdown.
    """
    heat_stress_index = require_range(
        heat_stress_index, "heat_stress_index", HEAT_INDEX_MIN, HEAT_INDEX_MAX
    )
    if not isinstance(heat_acclimated, bool):
        raise InvalidInput("heat_acclimated must be a boolean", field="heat_acclimated")

    slowdown = _heat_slowdown(heat_stress_index)
    if heat_acclimated:
        slowdown = slowdown / 2.0

    return HeatPaceAdjustment(
        heat_stress_index=heat_stress_index,
        heat_acclimated=heat_acclimated,
        slowdown_percent=slowdown,
        guidance=_heat_guidance(heat_stress_index, heat_acclimated),
    )


def classify_heat_risk(heat_stress_index: float) -> HeatRiskAssessment:
    """Risk band, heart rate drift and recommendations for a WBGT value."""
    heat_stress_index = require_range(
        heat_stress_index, "heat_stress_index", HEAT_INDEX_MIN, HEAT_INDEX_MAX
    )

    if heat_stress_index >= HIGH_HEAT_THRESHOLD:
        category = HeatRiskCategory.EXTREME_RISK
        risk = "Extreme risk of exertional heat illness"
        recommendations = [
            "Postpone or move the session indoors",
            "If running, keep it short and easy with medical support nearby",
            "Drink 150-250 ml every 15-20 minutes and use cooling (ice, cold towels)",
        ]
    elif heat_stress_index >= 23.0:
        category = HeatRiskCategory.HIGH_RISK
        risk = "High risk for unacclimatized and less fit runners"
        recommendations = [
            "Train early morning or late evening",
            "Convert pace targets to effort or heart rate targets",
            "Shorten intervals and extend recoveries",
            "Pre-cool and drink to a planned schedule",
        ]
    elif heat_stress_index >= 18.0:
        category = HeatRiskCategory.MODERATE_RISK
        risk = "Moderate risk; performance starts to drop"
        recommendations = [
            "Expect slower paces at the same effort",
            "Carry fluids on runs longer than 60 minutes",
        ]
    else:
        category = HeatRiskCategory.LOW_RISK
        risk = "Low risk"
        recommendations = ["Normal training"]

    hr_drift = max(0.0, heat_stress_index - HEAT_HR_DRIFT_START) * HEAT_HR_DRIFT_BPM_PER_DEGREE

    return HeatRiskAssessment(
        heat_stress_index=heat_stress_index,
        category=category,
        risk=risk,
        hr_adjustment_bpm=min(hr_drift, HEAT_HR_DRIFT_CAP),
        recommendations=recommendations,
    )


# ---------------------------------------------------------------------------
# Altitude
# ---------------------------------------------------------------------------


def _parse_intensity(intensity: Union[AltitudeIntensity, str]) -> AltitudeIntensity:
    if isinstance(intensity, AltitudeIntensity):
        return intensity
    try:
        return AltitudeIntensity(str(intensity).strip().lower())
    except ValueError:
        allowed = ", ".join(i.value for i in AltitudeIntensity)
        raise InvalidInput(f"intensity must be one of: {allowed}", field="intensity") from None


def _adaptation_fraction(acclimatization_days: float) -> float:
    """
    Share of the altitude penalty recovered after N days at altitude (0-0.7).

    Days 0-4 acute (to 10%), days 4-13 adaptation (to 50%),
    days 13-20 optimal (to 70%), then flat.
    """
    days = acclimatization_days
    if days <= 0:
        return 0.0
    if days <= 4:
        return 0.1 * days / 4
    if days <= 13:
        return 0.1 + 0.4 * (days - 4) / 9
    return 0.5 + 0.2 * min((days - 13) / 7, 1.0)


def _adaptation_phase(altitude_m: float, acclimatization_days: float) -> AdaptationPhase:
    if altitude_m <= ALTITUDE_BASELINE_M:
        return AdaptationPhase.SEA_LEVEL
    if acclimatization_days <= 4:
        return AdaptationPhase.ACUTE
    if acclimatization_days <= 13:
        return AdaptationPhase.ADAPTATION
    return AdaptationPhase.OPTIMAL


def compute_vo2max_reduction(altitude_m: float) -> float:
    """VO2max reduction (%) at altitude; zero at or below 1500m."""
    altitude_m = require_range(altitude_m, "altitude_m", ALTITUDE_MIN_M, ALTITUDE_MAX_M)
    if altitude_m <= ALTITUDE_BASELINE_M:
        return 0.0
    reduction = (altitude_m - ALTITUDE_BASELINE_M) / 100.0 * VO2MAX_REDUCTION_PER_100M
    return min(reduction, VO2MAX_REDUCTION_CAP)


def compute_altitude_adjustment(
    altitude_m: float,
    acclimatization_days: float,
    intensity: Union[AltitudeIntensity, str],
) -> float:
    """
    Percent performance impact of training or racing at altitude.

    impact = VO2max reduction * intensity weight * (1 - adaptation)

    Never increases as acclimatization_days grows.
    """
    vo2max_reduction = compute_vo2max_reduction(altitude_m)
    acclimatization_days = require_range(
        acclimatization_days, "acclimatization_days", 0.0, ACCLIMATIZATION_MAX_DAYS
    )
    level = _parse_intensity(intensity)

    impact = (
        vo2max_reduction
        * ALTITUDE_INTENSITY_WEIGHTS[level]
        * (1.0 - _adaptation_fraction(acclimatization_days))
    )
    logger.debug(
        f"Altitude {altitude_m}m day {acclimatization_days} {level.value}: impact={impact:.2f}%"
    )
    return impact


def _altitude_recommendations(altitude_m: float, phase: AdaptationPhase) -> List[str]:
    if phase == AdaptationPhase.SEA_LEVEL:
        return ["No altitude adjustment needed"]

    recommendations = []
    if phase == AdaptationPhase.ACUTE:
        recommendations += [
            "Keep the first days easy; no hard intervals",
            "Expect elevated resting heart rate and poorer sleep",
        ]
    elif phase == AdaptationPhase.ADAPTATION:
        recommendations += [
            "Reintroduce threshold work at reduced pace",
            "Monitor morning heart rate before adding intensity",
        ]
    else:
        recommendations += ["Full training can resume with altitude-adjusted paces"]

    if altitude_m >= 2500:
        recommendations.append("Know the symptoms of acute mountain sickness")
    elif altitude_m >= 1800:
        recommendations.append("Live high, train low works well at this altitude")

    recommendations.append("Increase iron-rich foods and fluid intake")
    return recommendations


def compute_altitude_profile(
    altitude_m: float,
    acclimatization_days: float,
    intensity: Union[AltitudeIntensity, str] = AltitudeIntensity.MODERATE,
) -> AltitudeProfile:
    """Full altitude breakdown: VO2max, pace impact, heart rate and phase."""
    impact = compute_altitude_adjustment(altitude_m, acclimatization_days, intensity)
    level = _parse_intensity(intensity)
    vo2max_reduction = compute_vo2max_reduction(altitude_m)
    adaptation = _adaptation_fraction(acclimatization_days)
    phase = _adaptation_phase(altitude_m, acclimatization_days)

    if phase == AdaptationPhase.SEA_LEVEL:
        hr_adjustment = 0.0
        max_intensity = 100.0
    else:
        base_hr = min((altitude_m - ALTITUDE_BASELINE_M) / 100.0, ALTITUDE_HR_CAP_BPM)
        hr_adjustment = base_hr * (1.0 - adaptation * 0.5)
        if phase == AdaptationPhase.ACUTE:
            max_intensity = max(55.0, 100.0 - vo2max_reduction - 15.0)
        elif phase == AdaptationPhase.ADAPTATION:
            max_intensity = max(65.0, 100.0 - vo2max_reduction - 10.0)
        else:
            max_intensity = max(75.0, 100.0 - vo2max_reduction - 5.0)

    return AltitudeProfile(
        altitude_m=float(altitude_m),
        acclimatization_days=float(acclimatization_days),
        intensity=level,
        vo2max_reduction_percent=vo2max_reduction,
        performance_impact_percent=impact,
        hr_adjustment_bpm=hr_adjustment,
        adaptation_phase=phase,
        max_intensity_percent=max_intensity,
        recommendations=_altitude_recommendations(altitude_m, phase),
    )


# ---------------------------------------------------------------------------
# Wind
# ---------------------------------------------------------------------------


def _wind_recommendations(classification: WindClassification, impact_percent: float) -> List[str]:
    if classification == WindClassification.CALM:
        return ["No wind adjustment needed"]

    if classification == WindClassification.HEADWIND:
        recommendations = [
            "Tuck in behind other runners to shelter from the wind",
            "Run by effort or heart rate rather than pace into the wind",
        ]
        if impact_percent >= WIND_STRONG_IMPACT_PERCENT:
            recommendations.append("Shorten your stride and keep a low, compact form")
    elif classification == WindClassification.TAILWIND:
        recommendations = [
            "Bank nothing on the tailwind leg; hold goal effort",
            "Expect the return leg into the wind to cost more than this leg saves",
        ]
    else:
        recommendations = [
            "Crosswind costs little pace but affects balance; stay relaxed",
            "Shelter on the windward side of a group",
        ]
    return recommendations


def compute_wind_resistance(
    wind_speed_mps: float,
    wind_direction_deg: float,
    runner_direction_deg: float,
    runner_speed_mps: float,
) -> WindResistance:
    """
    Impact of wind on running cost.

    wind_direction_deg is the compass direction the wind blows TOWARD, so a
    wind direction equal to the runner's heading is a pure tailwind.

    The wind vector is projected onto the direction of travel. Aerodynamic
    cost scales with v_rel^2 where v_rel = runner speed + headwind component;
    the result is the change of that cost relative to still air, expressed
    as percent of total running cost.

    A tailwind faster than the runner removes the aerodynamic cost but does
    not push: v_rel below zero counts as zero, so the benefit is bounded by
    the still-air share k * v^2.
    """
    wind_speed_mps = require_range(wind_speed_mps, "wind_speed_mps", 0.0, WIND_SPEED_MAX_MPS)
    wind_direction_deg = require_range(wind_direction_deg, "wind_direction_deg", 0.0, 360.0)
    runner_direction_deg = require_range(runner_direction_deg, "runner_direction_deg", 0.0, 360.0)
    runner_speed_mps = require_range(
        runner_speed_mps, "runner_speed_mps", 0.0, RUNNER_SPEED_MAX_MPS, min_inclusive=False
    )

    relative_angle = math.radians(wind_direction_deg - runner_direction_deg)
    headwind = -wind_speed_mps * math.cos(relative_angle)
    crosswind = abs(wind_speed_mps * math.sin(relative_angle))

    relative_air_speed = runner_speed_mps + headwind
    drag_term = max(relative_air_speed, 0.0) ** 2
    impact = 100.0 * AERODYNAMIC_COST_COEFFICIENT * (drag_term - runner_speed_mps ** 2)

    if wind_speed_mps == 0:
        classification = WindClassification.CALM
    elif abs(headwind) >= crosswind:
        classification = WindClassification.HEADWIND if headwind > 0 else WindClassification.TAILWIND
    else:
        classification = WindClassification.CROSSWIND

    return WindResistance(
        wind_speed_mps=wind_speed_mps,
        runner_speed_mps=runner_speed_mps,
        headwind_component_mps=headwind,
        crosswind_component_mps=crosswind,
        relative_air_speed_mps=relative_air_speed,
        impact_percent=impact,
        classification=classification,
        recommendations=_wind_recommendations(classification, impact),
    )


# ---------------------------------------------------------------------------
# Combined
# ---------------------------------------------------------------------------


def adjust_pace(pace_seconds_per_km: float, slowdown_percent: float) -> float:
    """Apply a percentage slowdown (negative = faster) to a pace."""
    pace_seconds_per_km = require_range(
        pace_seconds_per_km, "pace_seconds_per_km", 0.0, 3600.0, min_inclusive=False
    )
    slowdown_percent = require_range(slowdown_percent, "slowdown_percent", -50.0, 100.0)
    return pace_seconds_per_km * (1.0 + slowdown_percent / 100.0)


def _parse_wind_class(direction: Union[WindClassification, str]) -> WindClassification:
    if isinstance(direction, WindClassification):
        parsed = direction
    else:
        try:
            parsed = WindClassification(str(direction).strip().upper())
        except ValueError:
            parsed = None
    if parsed is None or parsed not in WIND_CLASS_RELATIVE_ANGLES:
        allowed = ", ".join(c.value for c in WIND_CLASS_RELATIVE_ANGLES)
        raise InvalidInput(f"wind_direction must be one of: {allowed}", field="wind_direction")
    return parsed


def compute_environmental_adjustment(conditions: EnvironmentalConditions) -> EnvironmentalAdjustment:
    """
    Combine heat, altitude and wind into one pace adjustment.

    Factors that are not supplied are skipped. Present factors compound:
    total = (1 + heat) * (1 + altitude) * (1 + wind) - 1.
    """
    result = EnvironmentalAdjustment()
    factors = []

    runner_speed = DEFAULT_RUNNER_SPEED_MPS
    if conditions.baseline_pace_min_per_km is not None:
        baseline = require_range(
            conditions.baseline_pace_min_per_km,
            "baseline_pace_min_per_km",
            BASELINE_PACE_MIN,
            BASELINE_PACE_MAX,
        )
        result.baseline_pace_min_per_km = baseline
        runner_speed = 1000.0 / (baseline * 60.0)

    has_temp = conditions.temp_c is not None
    has_humidity = conditions.humidity_percent is not None
    if has_temp != has_humidity:
        missing = "humidity_percent" if has_temp else "temp_c"
        raise InvalidInput(
            "temp_c and humidity_percent must be supplied together", field=missing
        )
    if has_temp:
        index = compute_heat_stress_index(
            conditions.temp_c, conditions.humidity_percent, conditions.dew_point_c
        )
        index = clamp_heat_stress_index(index)
        result.heat_risk = classify_heat_risk(index)
        result.heat_pace = compute_pace_adjustment(index, bool(conditions.heat_acclimated))
        if conditions.dew_point_c is not None:
            result.dew_point_c = float(conditions.dew_point_c)
        else:
            result.dew_point_c = estimate_dew_point(conditions.temp_c, conditions.humidity_percent)
        factors.append(result.heat_pace.slowdown_percent)

    if conditions.altitude_m is not None:
        result.altitude = compute_altitude_profile(
            conditions.altitude_m, conditions.acclimatization_days, conditions.intensity
        )
        factors.append(result.altitude.performance_impact_percent)

    if conditions.wind_speed_kmh is not None:
        wind_kmh = require_range(
            conditions.wind_speed_kmh, "wind_speed_kmh", 0.0, WIND_SPEED_MAX_MPS * 3.6
        )
        relative = WIND_CLASS_RELATIVE_ANGLES[_parse_wind_class(conditions.wind_direction)]
        wind_mps = min(wind_kmh / 3.6, WIND_SPEED_MAX_MPS)
        result.wind = compute_wind_resistance(wind_mps, relative, 0.0, runner_speed)
        factors.append(result.wind.impact_percent)

    multiplier = 1.0
    for percent in factors:
        multiplier *= 1.0 + percent / 100.0
    result.total_slowdown_percent = (multiplier - 1.0) * 100.0

    if result.baseline_pace_min_per_km is not None:
        result.adjusted_pace_min_per_km = result.baseline_pace_min_per_km * multiplier

    logger.info(
        f"Environmental adjustment: factors={len(factors)}, "
        f"total_slowdown={result.total_slowdown_percent:.2f}%"
    )
    return result
