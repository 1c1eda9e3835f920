from typing import Any, Dict, List

import requests

from rowplan.agents.errors import GENERIC_FAILURE_MESSAGE, GenerationError, GenerationErrorKind
from rowplan.models.schemas import GeneratedWorkout


REQUEST_TIMEOUT_S = 180


class RowPlanClient:
    """Minimal HTTP client for a running RowPlan server."""

    def __init__(self, base_url: str, timeout: float = REQUEST_TIMEOUT_S) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def generate_workouts(self, body: Dict[str, Any]) -> List[GeneratedWorkout]:
        """POST a `{periods: [...]}` body and return the generated workouts."""
        try:
            r = requests.post(f"{self.base_url}/api/generate-workouts", json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise GenerationError(GenerationErrorKind.PROVIDER_UNAVAILABLE, str(e)) from e

        if r.status_code != 200:
            try:
                message = r.json().get("error", GENERIC_FAILURE_MESSAGE)
            except (ValueError, AttributeError):
                message = GENERIC_FAILURE_MESSAGE
            raise GenerationError(GenerationErrorKind.UNKNOWN, f"HTTP {r.status_code}: {message}")

        try:
            payload = r.json()
            return [GeneratedWorkout(**w) for w in payload["workouts"]]
        except (ValueError, KeyError, TypeError) as e:
            raise GenerationError(
                GenerationErrorKind.INVALID_RESPONSE_SHAPE,
                f"server reply is not a workout list: {e}",
            ) from e
