"""Effective-set classification.

A set counts toward training volume when it carries performance data (reps or
weight) and was performed at an intensity of at least 7/10. Intensity arrives
in whatever shape the client stored it: 8, "8", "8/10", "8 / 10", "RPE 8",
"@8" or "RIR 2". Parsing never raises; anything unusable is treated as absent.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any

from app.core.constants import EFFECTIVE_SET_MIN_INTENSITY, INTENSITY_MAX, INTENSITY_MIN
from app.schemas.exercise import SetRecord

_OUT_OF_TEN = re.compile(r"^(\d+(?:\.\d+)?)/10$")
_RPE = re.compile(r"^(?:rpe|@)(\d+(?:\.\d+)?)$")
_RIR = re.compile(r"^rir(\d+(?:\.\d+)?)$")


@dataclass(frozen=True)
class IntensityResult:
    value: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.value is not None


def parse_number(raw: Any) -> float | None:
    """Float value of a reps/weight field, or None when it is empty or not numeric."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        cleaned = raw.strip().replace(",", ".")
        if not cleaned:
            return None
        try:
            value = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def has_performance_data(set_: SetRecord) -> bool:
    return parse_number(set_.reps) is not None or parse_number(set_.weight) is not None


def _in_range(level: float, raw: Any) -> IntensityResult:
    value = math.floor(level)
    if value < INTENSITY_MIN or value > INTENSITY_MAX:
        return IntensityResult(error=f"intensity {raw!r} outside {INTENSITY_MIN}-{INTENSITY_MAX}")
    return IntensityResult(value=value)


def parse_intensity(raw: Any) -> IntensityResult:
    if raw is None or isinstance(raw, bool):
        return IntensityResult(error="missing intensity")
    if isinstance(raw, (int, float)):
        if math.isnan(raw) or math.isinf(raw):
            return IntensityResult(error=f"intensity {raw!r} is not a number")
        return _in_range(raw, raw)
    if not isinstance(raw, str):
        return IntensityResult(error=f"unsupported intensity type {type(raw).__name__}")

    cleaned = re.sub(r"\s+", "", raw).lower()
    if not cleaned:
        return IntensityResult(error="missing intensity")

    number = parse_number(cleaned)
    if number is not None:
        return _in_range(number, raw)
    match = _OUT_OF_TEN.match(cleaned) or _RPE.match(cleaned)
    if match:
        return _in_range(float(match.group(1)), raw)
    match = _RIR.match(cleaned)
    if match:
        return _in_range(INTENSITY_MAX - float(match.group(1)), raw)
    return IntensityResult(error=f"unrecognized intensity {raw!r}")


def is_effective(set_: SetRecord) -> bool:
    if not has_performance_data(set_):
        return False
    intensity = parse_intensity(set_.intensity)
    return intensity.ok and intensity.value >= EFFECTIVE_SET_MIN_INTENSITY


def count_effective_sets(sets: list[SetRecord]) -> int:
    return sum(1 for s in sets if is_effective(s))
