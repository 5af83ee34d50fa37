"""
Race Pacing Strategy

Turns a goal time into per-kilometre split targets.

Strategies:
    even     - controlled first km (+1%), steady middle, final km push (-2%)
    negative - linear from +3% to -3% across the race
    positive - linear from -2% to +2% (fast start, fade; trail / hilly finishes)

Shape multipliers are renormalised so the splits always add up to the goal
time. An environmental slowdown (from the heat/altitude/wind calculators)
extends the goal time before the splits are built.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Union

from services.calculator_inputs import InvalidInput, require_range

logger = logging.getLogger(__name__)


RACE_DISTANCES_M = {
    "5k": 5000.0,
    "10k": 10000.0,
    "half_marathon": 21097.5,
    "marathon": 42195.0,
}

SPLIT_LENGTH_M = 1000.0
MAX_DISTANCE_M = 100000.0

# Plausible average paces (seconds per km)
FASTEST_PACE_S_PER_KM = 150.0
SLOWEST_PACE_S_PER_KM = 900.0


class PacingStrategyType(str, Enum):
    EVEN = "even"
    NEGATIVE = "negative"
    POSITIVE = "positive"


@dataclass
class Split:
    segment: str
    start_m: float
    end_m: float
    target_pace_seconds_per_km: float
    split_seconds: float
    cumulative_seconds: float
    effort: str


@dataclass
class PacingPlan:
    distance_m: float
    strategy: PacingStrategyType
    target_time_seconds: float
    slowdown_percent: float
    adjusted_target_time_seconds: float
    average_pace_seconds_per_km: float
    splits: List[Split] = field(default_factory=list)


def resolve_distance(distance: Union[str, float, int]) -> float:
    """Named race distance or metres -> metres."""
    if isinstance(distance, str):
        key = distance.strip().lower()
        if key in RACE_DISTANCES_M:
            return RACE_DISTANCES_M[key]
        try:
            distance = float(key)
        except ValueError:
            allowed = ", ".join(RACE_DISTANCES_M)
            raise InvalidInput(
                f"distance must be one of {allowed} or a number of metres", field="distance"
            ) from None
    return require_range(distance, "distance", 0.0, MAX_DISTANCE_M, min_inclusive=False)


def _segment_bounds(distance_m: float) -> List[tuple]:
    bounds = []
    start = 0.0
    while start < distance_m:
        end = min(start + SPLIT_LENGTH_M, distance_m)
        bounds.append((start, end))
        start = end
    return bounds


def _shape_multiplier(
    strategy: PacingStrategyType,
    index: int,
    count: int,
    midpoint_fraction: float,
) -> float:
    if strategy == PacingStrategyType.NEGATIVE:
        return 1.03 - 0.06 * midpoint_fraction
    if strategy == PacingStrategyType.POSITIVE:
        return 0.98 + 0.04 * midpoint_fraction
    if count == 1:
        return 1.0
    if index == 0:
        return 1.01
    if index == count - 1:
        return 0.98
    return 1.0


def _effort_label(relative_pace: float) -> str:
    if relative_pace > 1.005:
        return "Controlled"
    if relative_pace < 0.995:
        return "Push"
    return "Steady"


def _format_km(metres: float) -> str:
    return f"{round(metres / 1000.0, 2):g}"


def generate_pacing_strategy(
    distance: Union[str, float, int],
    target_time_seconds: float,
    strategy: Union[PacingStrategyType, str] = PacingStrategyType.EVEN,
    slowdown_percent: float = 0.0,
) -> PacingPlan:
    """
    Build per-kilometre splits for a goal time.

    Args:
        distance: "5k", "10k", "half_marathon", "marathon" or metres
        target_time_seconds: Goal time in ideal conditions
        strategy: "even", "negative" or "positive"
        slowdown_percent: Environmental slowdown applied to the goal time

    Returns:
        PacingPlan whose split_seconds sum to adjusted_target_time_seconds
    """
    distance_m = resolve_distance(distance)
    target = require_range(
        target_time_seconds, "target_time_seconds", 0.0, 86400.0, min_inclusive=False
    )
    slowdown = require_range(slowdown_percent, "slowdown_percent", -20.0, 50.0)
    try:
        strategy = PacingStrategyType(str(getattr(strategy, "value", strategy)).strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in PacingStrategyType)
        raise InvalidInput(f"strategy must be one of: {allowed}", field="strategy") from None

    average_pace = target / (distance_m / 1000.0)
    if not FASTEST_PACE_S_PER_KM <= average_pace <= SLOWEST_PACE_S_PER_KM:
        raise InvalidInput(
            f"Goal pace {average_pace:.0f} s/km is outside the plausible range "
            f"{FASTEST_PACE_S_PER_KM:.0f}-{SLOWEST_PACE_S_PER_KM:.0f} s/km",
            field="target_time_seconds",
        )

    adjusted_target = target * (1.0 + slowdown / 100.0)
    bounds = _segment_bounds(distance_m)
    count = len(bounds)

    multipliers = [
        _shape_multiplier(strategy, i, count, ((start + end) / 2.0) / distance_m)
        for i, (start, end) in enumerate(bounds)
    ]
    weighted_km = sum(m * (end - start) / 1000.0 for m, (start, end) in zip(multipliers, bounds))
    base_pace = adjusted_target / weighted_km
    adjusted_average = adjusted_target / (distance_m / 1000.0)

    splits = []
    cumulative = 0.0
    for i, (multiplier, (start, end)) in enumerate(zip(multipliers, bounds)):
        pace = base_pace * multiplier
        split_seconds = pace * (end - start) / 1000.0
        cumulative += split_seconds
        if i == count - 1:
            cumulative = adjusted_target
        splits.append(Split(
            segment=f"{_format_km(start)}-{_format_km(end)}K",
            start_m=start,
            end_m=end,
            target_pace_seconds_per_km=pace,
            split_seconds=split_seconds,
            cumulative_seconds=cumulative,
            effort=_effort_label(pace / adjusted_average),
        ))

    logger.debug(
        f"Pacing plan {distance_m}m {strategy.value}: {count} splits, "
        f"target={adjusted_target:.0f}s"
    )

    return PacingPlan(
        distance_m=distance_m,
        strategy=strategy,
        target_time_seconds=target,
        slowdown_percent=slowdown,
        adjusted_target_time_seconds=adjusted_target,
        average_pace_seconds_per_km=adjusted_average,
        splits=splits,
    )
