from datetime import date
from enum import Enum
from typing import List, Union

from pydantic import BaseModel, Field, field_validator


class Intensity(str, Enum):
    UT2 = "UT2"
    UT1 = "UT1"
    AT = "AT"
    TR = "TR"
    AN = "AN"

    @property
    def meaning(self) -> str:
        return INTENSITY_MEANINGS[self]

    @property
    def heart_rate_band(self) -> str:
        return INTENSITY_HR_BANDS[self]


INTENSITY_MEANINGS = {
    Intensity.UT2: "Aerobic Base (long, steady)",
    Intensity.UT1: "Intensive Aerobic",
    Intensity.AT: "Threshold",
    Intensity.TR: "Transport",
    Intensity.AN: "Anaerobic",
}

INTENSITY_HR_BANDS = {
    Intensity.UT2: "60-70% HRmax",
    Intensity.UT1: "70-80% HRmax",
    Intensity.AT: "80-85% HRmax",
    Intensity.TR: "85-95% HRmax",
    Intensity.AN: "95%+ HRmax",
}


class Distribution(BaseModel):
    """Percentage of the period's sessions assigned to each intensity.

    The values are expected to total 100 but this is only reported
    (`is_balanced`), never enforced.
    """

    UT2: int = Field(default=0, ge=0, le=100)
    UT1: int = Field(default=0, ge=0, le=100)
    AT: int = Field(default=0, ge=0, le=100)
    TR: int = Field(default=0, ge=0, le=100)
    AN: int = Field(default=0, ge=0, le=100)

    @property
    def total(self) -> int:
        return sum(getattr(self, i.value) for i in Intensity)

    @property
    def is_balanced(self) -> bool:
        return self.total == 100


class TrainingPeriod(BaseModel):
    id: str
    name: str
    startDate: date
    endDate: date  # startDate <= endDate is not enforced
    distribution: Distribution = Field(default_factory=Distribution)


class GeneratedWorkout(BaseModel):
    date: str  # e.g. "2026-01-05"
    intensity: Intensity
    description: str
    durationMinutes: Union[int, float]

    @field_validator("durationMinutes", mode="before")
    @classmethod
    def _positive_number(cls, value):
        if isinstance(value, bool):
            raise ValueError("durationMinutes must be a number")
        if isinstance(value, (int, float)) and value <= 0:
            raise ValueError("durationMinutes must be positive")
        return value


class GenerateWorkoutsRequest(BaseModel):
    periods: List[TrainingPeriod] = Field(..., description="Training periods, in order. May be empty.")


class GenerateWorkoutsResponse(BaseModel):
    workouts: List[GeneratedWorkout]


class ExportCsvRequest(BaseModel):
    workouts: List[GeneratedWorkout] = Field(..., description="Workouts to write, in row order")


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Generic failure message")
