from __future__ import annotations

"""
Scheduler Agent
---------------
Turns a list of training periods into a day-by-day rowing workout schedule
with a single structured-output model call. Workout content is entirely up
to the model; this module only builds the request and checks the reply.
"""

import json
from typing import Any, List, Optional, Sequence

from loguru import logger

from rowplan.agents.errors import GenerationError, GenerationErrorKind
from rowplan.agents.workout_validator import coerce_workouts, dates_outside_periods
from rowplan.llm.openai_client import OpenAIClient
from rowplan.models.schemas import GeneratedWorkout, Intensity, TrainingPeriod


SCHEMA_NAME = "rowing_workout_plan"

# Strict structured output needs an object root, so the workout array sits
# under a single "workouts" key.
WORKOUT_PLAN_SCHEMA = {
    "type": "object",
    "properties": {
        "workouts": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "date": {"type": "string"},
                    "intensity": {"type": "string"},
                    "description": {"type": "string"},
                    "durationMinutes": {"type": "number"},
                },
                "required": ["date", "intensity", "description", "durationMinutes"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["workouts"],
    "additionalProperties": False,
}


def _intensity_guide() -> str:
    return " ".join(f"{i.value}: {i.meaning}." for i in Intensity)


def build_prompt(periods: Sequence[TrainingPeriod]) -> str:
    """Instruction text sent to the model, with the periods embedded as JSON."""
    serialized = json.dumps([p.model_dump(mode="json") for p in periods], ensure_ascii=False)
    tags = ", ".join(i.value for i in Intensity)
    return (
        f"Generate a rowing workout schedule based on these training periods: {serialized}.\n"
        f"For each day in each period, assign a workout intensity ({tags}) following the percentage distribution provided.\n"
        f"{_intensity_guide()}\n"
        "Make the schedule realistic (e.g., rest days, varying intensities).\n"
        'Return an array of objects: { date: "YYYY-MM-DD", intensity: "UT2", '
        'description: "Detailed workout description", durationMinutes: 60 }'
    )


def _extract_workouts(data: Any) -> Any:
    """Pull the workout array out of the parsed reply.

    A bare array is accepted as-is; an object must carry it under "workouts".
    """
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and "workouts" in data:
        return data["workouts"]
    raise GenerationError(
        GenerationErrorKind.INVALID_RESPONSE_SHAPE,
        f"reply has no workout array (got {type(data).__name__})",
    )


def generate_workouts(
    periods: Sequence[TrainingPeriod],
    client: Optional[OpenAIClient] = None,
) -> List[GeneratedWorkout]:
    """Generate the workout schedule for `periods`.

    Makes exactly one provider call. Any failure is raised as GenerationError;
    unexpected exceptions are wrapped with kind UNKNOWN.
    """
    logger.info(f"Generating workouts for {len(periods)} period(s)")

    try:
        client = client or OpenAIClient()
        prompt = build_prompt(periods)
        data = client.chat_json(prompt, schema=WORKOUT_PLAN_SCHEMA, schema_name=SCHEMA_NAME)
        workouts = coerce_workouts(_extract_workouts(data))
    except GenerationError:
        raise
    except Exception as e:
        raise GenerationError(GenerationErrorKind.UNKNOWN, f"{type(e).__name__}: {e}") from e

    outside = dates_outside_periods(workouts, periods)
    if outside:
        logger.warning(f"{len(outside)} workout date(s) fall outside every period: {', '.join(outside[:5])}")

    logger.info(f"Generated {len(workouts)} workouts")
    return workouts
