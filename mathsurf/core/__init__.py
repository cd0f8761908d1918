"""Core mathsurf functionality."""

from mathsurf.core.config import DEFAULT_CONFIG, SurfaceConfig
from mathsurf.core.operators import (
    DEFAULT_REGISTRY,
    OperatorRegistry,
    OperatorSpec,
    normalize_operator,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_REGISTRY",
    "OperatorRegistry",
    "OperatorSpec",
    "SurfaceConfig",
    "normalize_operator",
]
