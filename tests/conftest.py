"""Shared pytest fixtures and configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

# Set TESTING mode BEFORE any package imports to prevent .env file loading.
os.environ["TESTING"] = "1"

# Clear environment variables BEFORE any imports that might use Pydantic Settings.
_ENV_VARS_TO_CLEAR = [
    "SCORING_TABLES_DIR",
    "SCORING_SCALE_SIZE",
    "SCORING_ENABLE_KEYWORD_FALLBACK",
    "SCORING_EXCLUDE_IMPUTED_FROM_CONFIDENCE",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_INCLUDE_TIMESTAMP",
    "LOG_INCLUDE_CALLER",
]

for _var in _ENV_VARS_TO_CLEAR:
    os.environ.pop(_var, None)

from psyscore.config import ScoringSettings  # noqa: E402
from psyscore.domain.value_objects import ResponseRecord  # noqa: E402
from psyscore.tables import ScoringTables, load_scoring_tables  # noqa: E402

if TYPE_CHECKING:
    from collections.abc import Callable


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear environment variables and cached settings/tables.

    This ensures tests use code defaults, not local developer overrides.
    """
    for var in _ENV_VARS_TO_CLEAR:
        monkeypatch.delenv(var, raising=False)

    from psyscore.config import get_settings  # noqa: PLC0415
    from psyscore.tables import clear_table_cache  # noqa: PLC0415

    get_settings.cache_clear()
    clear_table_cache()


@pytest.fixture(scope="session")
def tables() -> ScoringTables:
    """Packaged default scoring tables."""
    return load_scoring_tables()


@pytest.fixture
def scoring_settings() -> ScoringSettings:
    """Scoring settings with code defaults."""
    return ScoringSettings()


@pytest.fixture(scope="session")
def make_responses() -> Callable[..., list[ResponseRecord]]:
    """Build a run of trait-tagged responses from raw values."""

    def _make(domain: str, values: list[object], prefix: str | None = None) -> list[ResponseRecord]:
        stem = prefix or domain.upper()
        return [
            ResponseRecord(item_id=f"{stem}_{i + 1}", raw_value=v, domain_hint=domain)  # type: ignore[arg-type]
            for i, v in enumerate(values)
        ]

    return _make


@pytest.fixture(scope="session")
def openness_alternating() -> list[ResponseRecord]:
    """Ten openness-tagged answers alternating 4, 5, ... 4, 5."""
    return [
        ResponseRecord(item_id=f"OPEN_{i + 1}", raw_value=4 if i % 2 == 0 else 5, domain_hint="openness")
        for i in range(10)
    ]
