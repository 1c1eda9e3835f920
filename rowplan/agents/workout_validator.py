"""
Workout Reply Validation
------------------------
Pure Python checks run on the model's parsed JSON before it is returned
as a typed workout plan. The response schema sent to the model is advisory,
so nothing here assumes it was honoured.
"""

import math
import re
from datetime import date
from typing import Any, Dict, List, Sequence

from pydantic import ValidationError

from rowplan.agents.errors import GenerationError, GenerationErrorKind
from rowplan.models.schemas import GeneratedWorkout, Intensity, TrainingPeriod


REQUIRED_FIELDS = ("date", "intensity", "description", "durationMinutes")
INTENSITY_TAGS = {i.value for i in Intensity}
ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def _is_iso_date(value: str) -> bool:
    if not ISO_DATE.fullmatch(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _check_item(idx: int, item: Any) -> List[str]:
    if not isinstance(item, dict):
        return [f"workout {idx}: expected an object, got {type(item).__name__}"]

    violations: List[str] = []
    missing = [f for f in REQUIRED_FIELDS if f not in item]
    if missing:
        violations.append(f"workout {idx}: missing {', '.join(missing)}")

    if "date" in item:
        raw_date = item["date"]
        if not isinstance(raw_date, str):
            violations.append(f"workout {idx}: date must be a string")
        elif not _is_iso_date(raw_date):
            violations.append(f"workout {idx}: date '{raw_date}' is not YYYY-MM-DD")

    if "intensity" in item and (not isinstance(item["intensity"], str) or item["intensity"] not in INTENSITY_TAGS):
        violations.append(f"workout {idx}: unknown intensity '{item['intensity']}'")

    if "description" in item and not isinstance(item["description"], str):
        violations.append(f"workout {idx}: description must be a string")

    if "durationMinutes" in item:
        minutes = item["durationMinutes"]
        if isinstance(minutes, bool) or not isinstance(minutes, (int, float)):
            violations.append(f"workout {idx}: durationMinutes must be a number")
        elif not math.isfinite(minutes) or minutes <= 0:
            violations.append(f"workout {idx}: durationMinutes must be positive, got {minutes}")

    return violations


def check_workouts(raw: Any) -> Dict[str, Any]:
    """Check a parsed reply against the workout contract.

    Returns report: {ok, count, violations}.
    """
    if not isinstance(raw, list):
        return {
            "ok": False,
            "count": 0,
            "violations": [f"expected a list of workouts, got {type(raw).__name__}"],
        }

    violations: List[str] = []
    for idx, item in enumerate(raw):
        violations.extend(_check_item(idx, item))

    return {
        "ok": len(violations) == 0,
        "count": len(raw),
        "violations": violations,
    }


def coerce_workouts(raw: Any) -> List[GeneratedWorkout]:
    """Validate and convert the parsed reply into `GeneratedWorkout` models."""
    report = check_workouts(raw)
    if not report["ok"]:
        raise GenerationError(
            GenerationErrorKind.INVALID_RESPONSE_SHAPE,
            f"{len(report['violations'])} invalid field(s) in model reply",
            details=report["violations"],
        )
    try:
        return [GeneratedWorkout(**item) for item in raw]
    except ValidationError as e:
        raise GenerationError(
            GenerationErrorKind.INVALID_RESPONSE_SHAPE,
            "model reply failed schema validation",
            details=[err["msg"] for err in e.errors()],
        ) from e


def dates_outside_periods(workouts: Sequence[GeneratedWorkout], periods: Sequence[TrainingPeriod]) -> List[str]:
    """Workout dates not covered by any period. Diagnostic only."""
    outside: List[str] = []
    for w in workouts:
        day = date.fromisoformat(w.date)
        if not any(p.startDate <= day <= p.endDate for p in periods):
            outside.append(w.date)
    return outside
