"""Configuration models and YAML loader for the skill-matching engine."""

from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel


class InvalidConfigurationError(ValueError):
    """A scoring config has an unknown key or an invalid weight or threshold."""


class ScoringConfig(BaseModel):
    """Threshold and per-classification weights for skill matching.

    Accepts snake_case or camelCase keys (``fuzzyThreshold`` etc.), since
    configs often arrive straight from request parameters.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    fuzzy_threshold: float = Field(default=0.8, gt=0.0, le=1.0)
    exact_match_weight: float = Field(default=1.0, ge=0.0, le=1.0)
    partial_match_weight: float = Field(default=0.9, ge=0.0, le=1.0)
    fuzzy_match_weight: float = Field(default=0.7, ge=0.0, le=1.0)
    abbreviation_match_weight: float = Field(default=0.95, ge=0.0, le=1.0)

    @field_validator(
        "fuzzy_threshold",
        "exact_match_weight",
        "partial_match_weight",
        "fuzzy_match_weight",
        "abbreviation_match_weight",
        mode="before",
    )
    @classmethod
    def reject_bool(cls, v: object) -> object:
        if isinstance(v, bool):
            msg = "must be a number, not a boolean"
            raise ValueError(msg)
        return v


# Stricter profile used when matching on skill names alone: abbreviations are
# trusted almost as much as exact names, fuzzy hits count for little.
STRICT_SCORING = ScoringConfig(
    fuzzy_threshold=0.85,
    exact_match_weight=1.0,
    abbreviation_match_weight=0.98,
    partial_match_weight=0.85,
    fuzzy_match_weight=0.6,
)

SCORING_PRESETS: Mapping[str, ScoringConfig] = MappingProxyType({
    "default": ScoringConfig(),
    "strict": STRICT_SCORING,
})


def resolve_scoring_config(
    config: ScoringConfig | Mapping[str, Any] | None,
) -> ScoringConfig:
    """Turn a caller-supplied config into a validated ScoringConfig.

    ``None`` yields the defaults. Out-of-range values, booleans and unknown
    keys are reported, never clamped or ignored.

    Raises:
        InvalidConfigurationError: If a key, weight or threshold is invalid.
    """
    if config is None:
        return ScoringConfig()
    if isinstance(config, ScoringConfig):
        return config
    if not isinstance(config, Mapping):
        msg = f"scoring config must be a mapping, got {type(config).__name__}"
        raise InvalidConfigurationError(msg)
    try:
        return ScoringConfig.model_validate(dict(config))
    except ValidationError as e:
        msg = f"Invalid scoring configuration: {e}"
        raise InvalidConfigurationError(msg) from e


class RankingConfig(BaseModel):
    """Defaults for candidate ranking runs."""

    min_percentage: float = Field(default=20.0, ge=0.0, le=100.0)
    max_workers: int = Field(default=1, ge=1, le=64)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    profiles: dict[str, ScoringConfig] = Field(default_factory=dict)
    ranking: RankingConfig = Field(default_factory=RankingConfig)

    def profile(self, name: str | None) -> ScoringConfig:
        """Return a named scoring profile.

        Profiles declared in the settings file shadow the built-in presets.
        ``None`` selects the top-level ``scoring`` block.
        """
        if name is None:
            return self.scoring
        if name in self.profiles:
            return self.profiles[name]
        if name in SCORING_PRESETS:
            return SCORING_PRESETS[name]
        valid = ", ".join(sorted(set(self.profiles) | set(SCORING_PRESETS)))
        msg = f"Unknown scoring profile '{name}'. Available: {valid}"
        raise KeyError(msg)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
