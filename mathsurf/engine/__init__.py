"""Tutoring backend client."""

from mathsurf.engine.client import (
    EngineClient,
    EngineError,
    StepChoice,
    StepRequest,
    StepResult,
    build_step_request,
)

__all__ = [
    "EngineClient",
    "EngineError",
    "StepChoice",
    "StepRequest",
    "StepResult",
    "build_step_request",
]
