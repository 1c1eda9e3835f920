"""Generation error kinds.

Every failure of a generation call is raised as `GenerationError` and handled
at the request boundary. The kind is for server-side logs; callers only ever
see the generic failure message.

- PROVIDER_UNAVAILABLE: missing credential, network error, timeout, provider 4xx/5xx
- INVALID_RESPONSE_SHAPE: reply is not JSON or fails workout validation
- UNKNOWN: anything else raised while generating
"""

from enum import Enum
from typing import List, Optional


GENERIC_FAILURE_MESSAGE = "Failed to generate workouts"


class GenerationErrorKind(str, Enum):
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    INVALID_RESPONSE_SHAPE = "invalid_response_shape"
    UNKNOWN = "unknown"


class GenerationError(RuntimeError):
    """Raised when a workout generation call fails.

    Attributes:
        kind: Which class of failure occurred
        details: Optional list of detail strings (e.g. validation violations)
    """

    def __init__(self, kind: GenerationErrorKind, message: str, details: Optional[List[str]] = None):
        self.kind = kind
        self.details = details or []
        super().__init__(f"{kind.value}: {message}")
