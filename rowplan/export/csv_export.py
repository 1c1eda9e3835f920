"""
Workout CSV Export

Writes a generated workout plan as CSV text with the columns
Date, Intensity, Workout Description, Duration (min).

Only the description is quoted (with embedded quotes doubled). The other
columns are written as-is, so a comma inside a date or intensity value
would shift columns; model output does not contain one in practice.
"""

from datetime import date, datetime, timezone
from typing import List, Optional, Sequence, Union

from rowplan.models.schemas import GeneratedWorkout


CSV_HEADERS = ["Date", "Intensity", "Workout Description", "Duration (min)"]
CSV_CONTENT_TYPE = "text/csv;charset=utf-8"


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def _format_minutes(minutes: Union[int, float]) -> str:
    """Render a duration the way a JSON number prints: 60, not 60.0."""
    if isinstance(minutes, float) and minutes.is_integer():
        return str(int(minutes))
    return str(minutes)


def workouts_to_csv(workouts: Sequence[GeneratedWorkout]) -> str:
    """Build the CSV text. Rows keep input order; no trailing newline."""
    rows: List[List[str]] = [list(CSV_HEADERS)]
    for w in workouts:
        rows.append([
            w.date,
            w.intensity.value,
            _quote(w.description),
            _format_minutes(w.durationMinutes),
        ])
    return "\n".join(",".join(row) for row in rows)


def csv_filename(today: Optional[date] = None) -> str:
    """Download filename, dated at call time (UTC) unless `today` is given."""
    today = today or datetime.now(timezone.utc).date()
    return f"rowing_plan_{today.isoformat()}.csv"
