"""
Acute:Chronic Workload Ratio (ACWR)

Compares the most recent week of training load with the athlete's
longer-term load. A ratio in the 0.8-1.3 "sweet spot" (Gabbett 2016) means
load is rising at a rate the athlete is prepared for; spikes above 1.5 are
associated with elevated injury risk.

Two methods:
- rolling: mean of the last 7 days / mean of the last 28 days
- ewma:    exponentially weighted averages, lambda = 2 / (N + 1)
           (Williams et al. 2017), which reduce the lag of rolling windows

Loads are unit-agnostic (TSS, sRPE, minutes) as long as they are consistent.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from services.calculator_inputs import InvalidInput, require_number

logger = logging.getLogger(__name__)


DEFAULT_ACUTE_DAYS = 7
DEFAULT_CHRONIC_DAYS = 28
MAX_WINDOW_DAYS = 365


class ACWRMethod(str, Enum):
    ROLLING = "rolling"
    EWMA = "ewma"


class ACWRZone(str, Enum):
    """Load-ratio zones used by the workout guardrails."""
    DETRAINING = "DETRAINING"    # < 0.8
    OPTIMAL = "OPTIMAL"          # 0.8 - 1.3
    CAUTION = "CAUTION"          # 1.3 - 1.5
    DANGER = "DANGER"            # 1.5 - 2.0
    CRITICAL = "CRITICAL"        # >= 2.0


@dataclass
class ACWRZoneInfo:
    zone: ACWRZone
    label: str
    description: str
    color: str  # For UI display


@dataclass
class WorkloadRatio:
    method: ACWRMethod
    acute_days: int
    chronic_days: int
    acute_load: float
    chronic_load: float
    ratio: Optional[float]             # None when chronic load is zero
    zone: Optional[ACWRZoneInfo]


def classify_acwr(ratio: float) -> ACWRZoneInfo:
    """Map an ACWR value to its zone."""
    ratio = require_number(ratio, "ratio")
    if ratio < 0:
        raise InvalidInput("ratio must be non-negative", field="ratio")

    if ratio >= 2.0:
        return ACWRZoneInfo(
            zone=ACWRZone.CRITICAL,
            label="Critical",
            description="Load is critically high (ACWR > 2.0). Rest is recommended.",
            color="red",
        )
    elif ratio >= 1.5:
        return ACWRZoneInfo(
            zone=ACWRZone.DANGER,
            label="Danger",
            description="Load spike (ACWR 1.5-2.0). Recovery sessions only.",
            color="orange",
        )
    elif ratio >= 1.3:
        return ACWRZoneInfo(
            zone=ACWRZone.CAUTION,
            label="Caution",
            description="Load is high (ACWR 1.3-1.5). Limit intensity to easy running.",
            color="yellow",
        )
    elif ratio >= 0.8:
        return ACWRZoneInfo(
            zone=ACWRZone.OPTIMAL,
            label="Optimal",
            description="Load is in the 0.8-1.3 sweet spot.",
            color="green",
        )
    else:
        return ACWRZoneInfo(
            zone=ACWRZone.DETRAINING,
            label="Detraining",
            description="Low load relative to recent history. A good time to build.",
            color="blue",
        )


def _ewma(loads: Sequence[float], days: int) -> float:
    """EWMA over the whole series, seeded with the first value."""
    decay = 2.0 / (days + 1)
    average = loads[0]
    for load in loads[1:]:
        average = load * decay + (1.0 - decay) * average
    return average


def _validate_loads(daily_loads: Sequence[float]) -> List[float]:
    if daily_loads is None or isinstance(daily_loads, (str, bytes)):
        raise InvalidInput("daily_loads must be a list of numbers", field="daily_loads")
    loads = []
    for value in daily_loads:
        load = require_number(value, "daily_loads")
        if load < 0:
            raise InvalidInput("daily_loads must be non-negative", field="daily_loads")
        loads.append(load)
    return loads


def compute_acwr(
    daily_loads: Sequence[float],
    method: str = ACWRMethod.ROLLING,
    acute_days: int = DEFAULT_ACUTE_DAYS,
    chronic_days: int = DEFAULT_CHRONIC_DAYS,
) -> WorkloadRatio:
    """
    Compute the acute:chronic workload ratio.

    Args:
        daily_loads: One load per day, oldest first, most recent last.
            Rest days must be included as 0.
        method: "rolling" or "ewma"
        acute_days: Acute window (default 7)
        chronic_days: Chronic window (default 28), longer than acute_days

    Returns:
        WorkloadRatio; ratio and zone are None if the chronic load is zero.

    Raises:
        InvalidInput: bad windows, unknown method, negative loads, or
            fewer than chronic_days entries
    """
    try:
        method = ACWRMethod(method)
    except ValueError:
        raise InvalidInput("method must be 'rolling' or 'ewma'", field="method") from None

    for name, value in (("acute_days", acute_days), ("chronic_days", chronic_days)):
        if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= MAX_WINDOW_DAYS:
            raise InvalidInput(f"{name} must be an integer in [1, {MAX_WINDOW_DAYS}]", field=name)
    if acute_days >= chronic_days:
        raise InvalidInput("acute_days must be shorter than chronic_days", field="acute_days")

    loads = _validate_loads(daily_loads)
    if len(loads) < chronic_days:
        raise InvalidInput(
            f"At least {chronic_days} days of load are required, got {len(loads)}",
            field="daily_loads",
        )

    if method == ACWRMethod.ROLLING:
        acute = sum(loads[-acute_days:]) / acute_days
        chronic = sum(loads[-chronic_days:]) / chronic_days
    else:
        acute = _ewma(loads, acute_days)
        chronic = _ewma(loads, chronic_days)

    if chronic <= 0:
        logger.info("ACWR undefined: chronic load is zero")
        ratio = None
        zone = None
    else:
        ratio = acute / chronic
        zone = classify_acwr(ratio)

    return WorkloadRatio(
        method=method,
        acute_days=acute_days,
        chronic_days=chronic_days,
        acute_load=acute,
        chronic_load=chronic,
        ratio=ratio,
        zone=zone,
    )
