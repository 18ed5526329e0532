"""Search configuration for the terminology engine.

Centralizes thresholds, caps, and matcher weights for code resolution and
symptom search.  All values are loaded from environment variables with
sensible defaults so the system works out-of-the-box.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default


# ---------------------------------------------------------------------------
# Feature flags
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SearchFeatureFlags:
    """Runtime feature flags for the search subsystem."""

    enable_search_logging: bool = field(
        default_factory=lambda: _env_bool("SEARCH_ENABLE_LOGGING", default=True),
    )
    debug_search: bool = field(
        default_factory=lambda: _env_bool("SEARCH_DEBUG", default=False),
    )


# ---------------------------------------------------------------------------
# Resolver / symptom search limits
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SearchTuning:
    """Operational limits and thresholds."""

    # Records must score strictly above this to be returned.
    confidence_threshold: float = field(
        default_factory=lambda: _env_float("SEARCH_CONFIDENCE_THRESHOLD", 0.6),
    )
    max_disease_groups: int = field(
        default_factory=lambda: _env_int("SEARCH_MAX_DISEASE_GROUPS", 20),
    )
    # Cap for TARGET_ONLY / TRADITIONAL_ONLY lookups.
    single_mode_limit: int = field(
        default_factory=lambda: _env_int("SEARCH_SINGLE_MODE_LIMIT", 6),
    )
    min_term_length: int = field(
        default_factory=lambda: _env_int("SEARCH_MIN_TERM_LENGTH", 2),
    )
    autocomplete_default_limit: int = field(
        default_factory=lambda: _env_int("SEARCH_AUTOCOMPLETE_DEFAULT_LIMIT", 10),
    )
    autocomplete_max_limit: int = field(
        default_factory=lambda: _env_int("SEARCH_AUTOCOMPLETE_MAX_LIMIT", 50),
    )


# ---------------------------------------------------------------------------
# Text matcher weights
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MatchWeights:
    """Weights used by the field-level text matcher."""

    # Discount applied to title fields relative to description/definition.
    title_weight: float = field(
        default_factory=lambda: _env_float("MATCH_W_TITLE", 0.8),
    )
    substring_bonus: float = field(
        default_factory=lambda: _env_float("MATCH_W_SUBSTRING_BONUS", 0.3),
    )
    # Term tokens must be longer than this to count as matchable.
    min_token_length: int = field(
        default_factory=lambda: _env_int("MATCH_MIN_TOKEN_LENGTH", 2),
    )


# ---------------------------------------------------------------------------
# Singleton instances (importable)
# ---------------------------------------------------------------------------

search_feature_flags = SearchFeatureFlags()
search_tuning = SearchTuning()
match_weights = MatchWeights()
