from datetime import date
from typing import Any, List

import pytest

from rowplan.logger import setup_logger
from rowplan.models.schemas import Distribution, TrainingPeriod


class FakeLLM:
    """Stands in for OpenAIClient: returns a canned reply or raises."""

    def __init__(self, reply: Any = None, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: List[dict] = []

    def available(self) -> bool:
        return True

    def chat_json(self, user, schema, schema_name, system=None):
        self.calls.append({"user": user, "schema": schema, "schema_name": schema_name})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture(autouse=True)
def _logger_to_current_stderr():
    # CliRunner swaps sys.stderr; re-bind loguru so later tests don't write to a closed stream.
    setup_logger("DEBUG")
    yield


@pytest.fixture
def base_period() -> TrainingPeriod:
    return TrainingPeriod(
        id="p-1",
        name="Base block",
        startDate=date(2026, 1, 5),
        endDate=date(2026, 1, 11),
        distribution=Distribution(UT2=70, UT1=20, AT=10, TR=0, AN=0),
    )


@pytest.fixture
def sample_reply() -> dict:
    return {
        "workouts": [
            {"date": "2026-01-05", "intensity": "UT2", "description": "Easy row, \"steady state\"", "durationMinutes": 60},
            {"date": "2026-01-06", "intensity": "AT", "description": "3 x 10' at threshold", "durationMinutes": 45.5},
        ]
    }
