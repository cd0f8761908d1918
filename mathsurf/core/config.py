"""Geometric tolerances used by the surface map engine."""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field


class SurfaceConfig(BaseModel):
    """Pixel margins and overlap ratios for building and querying surface maps."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    fracbar_expand_px: float = Field(default=3.0, ge=0)
    mixed_gap_px: float = Field(default=22.0, ge=0)
    minus_overlap_ratio: float = Field(default=0.25, ge=0)
    column_overlap_ratio: float = Field(default=0.5, ge=0)
    operand_center_tolerance_px: float = Field(default=20.0, ge=0)
    operator_hit_tolerance_px: float = Field(default=3.0, ge=0)
    min_visible_size_px: float = Field(default=0.5, ge=0)

    @classmethod
    def from_env(cls) -> "SurfaceConfig":
        """Build a config, overriding fields from ``MATHSURF_<FIELD>`` variables."""

        overrides: dict[str, str] = {}
        for name in cls.model_fields:
            raw = os.getenv(f"MATHSURF_{name.upper()}")
            if raw is not None and raw.strip():
                overrides[name] = raw.strip()
        return cls.model_validate(overrides)


DEFAULT_CONFIG = SurfaceConfig()
