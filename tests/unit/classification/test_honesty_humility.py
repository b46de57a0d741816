"""Tests for the HEXACO honesty-humility estimate."""

from __future__ import annotations

import pytest

from psyscore.classification.honesty_humility import (
    classify_honesty_humility,
    estimate_honesty_humility,
)
from psyscore.domain.exceptions import ClassificationError
from psyscore.tables import ScoringTables
from psyscore.tables.models import ClassifierSpec

pytestmark = pytest.mark.unit

AVERAGE_PROFILE = dict.fromkeys(
    ("openness", "conscientiousness", "extraversion", "agreeableness", "neuroticism"), 50.0
)


@pytest.fixture
def hh_spec(tables: ScoringTables) -> ClassifierSpec:
    return tables.classifiers.classifiers["honesty_humility"]


class TestEstimate:
    """Deterministic estimation."""

    def test_trait_regression(self, hh_spec: ClassifierSpec) -> None:
        """An all-average profile maps to an average estimate."""
        estimate = estimate_honesty_humility(hh_spec, AVERAGE_PROFILE)
        assert estimate.honesty_humility == 50
        assert estimate.emotionality == 50
        assert estimate.method == "trait"

    def test_facets_insufficient_without_facet_input(self, hh_spec: ClassifierSpec) -> None:
        """Facets are marked insufficient, never filled with placeholders."""
        estimate = estimate_honesty_humility(hh_spec, AVERAGE_PROFILE)
        assert estimate.facets == {
            "sincerity": None,
            "fairness": None,
            "greed_avoidance": None,
            "modesty": None,
        }
        assert len(estimate.insufficient_facets) == 4

    def test_agreeableness_raises_estimate(self, hh_spec: ClassifierSpec) -> None:
        """Higher agreeableness gives a higher estimate."""
        high_a = estimate_honesty_humility(hh_spec, {**AVERAGE_PROFILE, "agreeableness": 90.0})
        assert high_a.honesty_humility > 50

    def test_facet_estimate(self, hh_spec: ClassifierSpec) -> None:
        """Facet domains feed the facets they weight."""
        scores = {"agreeableness.straightforwardness": 80.0, "agreeableness.modesty": 70.0}
        estimate = estimate_honesty_humility(hh_spec, scores)

        assert estimate.method == "facet"
        assert estimate.facets["sincerity"] == 76
        assert estimate.facets["modesty"] == 70
        assert estimate.facets["fairness"] is None
        assert estimate.honesty_humility == 73
        assert estimate.emotionality is None

    def test_idempotent(self, hh_spec: ClassifierSpec) -> None:
        """No randomness: repeated estimates are identical."""
        first = estimate_honesty_humility(hh_spec, AVERAGE_PROFILE)
        assert all(
            estimate_honesty_humility(hh_spec, AVERAGE_PROFILE) == first for _ in range(5)
        )

    def test_insufficient_input(self, hh_spec: ClassifierSpec) -> None:
        """Without facets or A/C/O there is nothing to estimate."""
        with pytest.raises(ClassificationError, match="insufficient trait scores"):
            estimate_honesty_humility(hh_spec, {"openness": 60.0})


class TestClassify:
    """Level bands through the criteria engine."""

    def test_average_band(self, hh_spec: ClassifierSpec) -> None:
        """50 falls in the average band."""
        estimate, result = classify_honesty_humility("honesty_humility", hh_spec, AVERAGE_PROFILE)
        assert result.primary_type == "average"
        assert result.primary.fit_score == 100
        assert not result.is_hybrid
        assert set(result.missing_dimensions) == set(estimate.facets)

    def test_very_high_band(self, hh_spec: ClassifierSpec) -> None:
        """73 falls in the very high band."""
        scores = {"agreeableness.straightforwardness": 80.0, "agreeableness.modesty": 70.0}
        _, result = classify_honesty_humility("honesty_humility", hh_spec, scores)
        assert result.primary_type == "very_high"
        assert result.missing_dimensions == ("fairness", "greed_avoidance")
