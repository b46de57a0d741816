"""Tests for the end-to-end scoring pipeline."""

from __future__ import annotations

import json

import pytest

from psyscore.config import ScoringSettings
from psyscore.confidence.policies import sem_confidence
from psyscore.confidence.registry import ConfidencePolicyRegistry
from psyscore.domain.enums import (
    ConfidenceLevel,
    DomainStatus,
    Provenance,
    RecommendationTier,
)
from psyscore.services import ScoringPipeline, score_session
from psyscore.tables import ScoringTables

pytestmark = pytest.mark.unit


def _session() -> list[dict[str, object]]:
    """Twenty answers: ten tagged openness items plus ten mapped items."""
    openness = [
        {"questionId": f"OPEN_{i + 1}", "value": 4 if i % 2 == 0 else 5, "trait": "openness"}
        for i in range(10)
    ]
    mapped = [
        {"itemId": f"BASELINE_{trait}_{n}", "score": 3}
        for trait, count in (("CONSCIENTIOUSNESS", 4), ("EXTRAVERSION", 4), ("NEUROTICISM", 2))
        for n in range(1, count + 1)
    ]
    return openness + mapped


@pytest.fixture
def pipeline(tables: ScoringTables) -> ScoringPipeline:
    return ScoringPipeline(tables=tables, settings=ScoringSettings())


class TestEndToEnd:
    """Full scoring of one session."""

    def test_openness_example(self, pipeline: ScoringPipeline) -> None:
        """Ten items alternating 4/5 score 88 with an SEM band around it."""
        report = pipeline.score(_session(), session_id="session-1")
        openness = report.domain_scores["openness"]

        assert openness.status is DomainStatus.SCORED
        assert openness.item_count == 10
        assert openness.average == 4.5
        assert openness.normalized_score == 88
        assert openness.provenance == {Provenance.TRAIT: 10}
        assert openness.confidence is not None
        assert openness.confidence.policy == "sem"
        assert openness.confidence.contains(88)
        assert openness.confidence_level is ConfidenceLevel.LOW

    def test_mapped_items(self, pipeline: ScoringPipeline) -> None:
        """Mapped items are scored with their reverse flags."""
        report = pipeline.score(_session())
        conscientiousness = report.domain_scores["conscientiousness"]
        assert conscientiousness.normalized_score == 50
        assert conscientiousness.provenance == {Provenance.DOMAIN_MAP: 4}

    def test_absent_domains_explicit(self, pipeline: ScoringPipeline) -> None:
        """Domains without items are insufficient_data, never zero."""
        report = pipeline.score(_session())
        assert "agreeableness" in report.absent_domains
        assert report.domain_scores["agreeableness"].normalized_score is None
        assert "openness" in report.scored_domains

    def test_idempotent(self, pipeline: ScoringPipeline) -> None:
        """Scoring the same input twice gives equal reports."""
        assert pipeline.score(_session()) == pipeline.score(_session())
        assert pipeline.score(_session()).to_dict() == pipeline.score(_session()).to_dict()

    def test_empty_session(self, pipeline: ScoringPipeline) -> None:
        """No responses still yields a complete, all-absent report."""
        report = pipeline.score([])
        assert report.scored_domains == ()
        assert set(report.absent_domains) == set(pipeline.tables.item_domains.domains)
        assert all(
            v is not None and v.recommendation_tier is RecommendationTier.NO_INDICATION
            for v in report.validations.values()
        )

    def test_score_session_wrapper(self, tables: ScoringTables) -> None:
        """score_session uses default settings."""
        report = score_session(_session(), tables=tables)
        assert report.domain_scores["openness"].normalized_score == 88

    def test_age_normative_comparison(self, pipeline: ScoringPipeline) -> None:
        """An age places the scored traits in their cohort."""
        report = pipeline.score(_session(), age=40)
        profile = report.age_normative
        assert profile is not None
        assert profile.age_group == "36-50"
        assert set(profile.scores) == {
            "openness",
            "conscientiousness",
            "extraversion",
            "neuroticism",
        }
        assert profile.scores["openness"].z_score == pytest.approx(3.8)
        assert "classifier:age_normative" not in report.errors

    def test_no_age_no_comparison(self, pipeline: ScoringPipeline) -> None:
        """Without an age the comparison is skipped silently."""
        report = pipeline.score(_session())
        assert report.age_normative is None
        assert report.to_dict()["age_normative"] is None

    def test_age_without_cohort(self, pipeline: ScoringPipeline) -> None:
        """An age outside every cohort degrades only that field."""
        report = pipeline.score(_session(), age=15)
        assert report.age_normative is None
        assert "classifier:age_normative" in report.errors
        assert report.classifications["ruo_archetype"] is not None


class TestDegradation:
    """Localized failures degrade single fields."""

    def test_classifiers_without_inputs(self, pipeline: ScoringPipeline) -> None:
        """Classifiers lacking agreeableness fail alone."""
        report = pipeline.score(_session())
        assert report.classifications["ruo_archetype"] is not None
        assert report.classifications["interpersonal_style"] is None
        assert "classifier:interpersonal_style" in report.errors
        assert report.honesty_humility is None

    def test_malformed_payload_recorded(self, pipeline: ScoringPipeline) -> None:
        """A malformed payload is dropped; the rest is scored."""
        report = pipeline.score([{"value": 5}, *_session()])
        assert "response:0" in report.errors
        assert report.domain_scores["openness"].normalized_score == 88

    def test_rejected_payloads_keyed_by_position(self, pipeline: ScoringPipeline) -> None:
        """Error keys name the offending payload, not its rank among rejections."""
        report = pipeline.score([*_session()[:1], {"value": 5}, {"score": 1}, *_session()[1:]])
        assert "response:1" in report.errors
        assert "response:2" in report.errors
        assert "response:0" not in report.errors

    def test_duplicates_and_unattributed(self, pipeline: ScoringPipeline) -> None:
        """Diagnostics list duplicates, unattributed and imputed items."""
        report = pipeline.score(
            [
                *_session(),
                {"itemId": "OPEN_1", "value": 1, "trait": "openness"},
                {"itemId": "MYSTERY", "value": 3},
                {"itemId": "BASELINE_AGREEABLENESS_2", "value": "no idea"},
            ]
        )
        assert report.duplicate_items == ("OPEN_1",)
        assert report.unattributed_items == ("MYSTERY",)
        assert report.unattributed_count == 1
        assert report.imputed_items == ("BASELINE_AGREEABLENESS_2",)
        assert report.domain_scores["openness"].normalized_score == 88

    def test_missing_policy_degrades_confidence(self, tables: ScoringTables) -> None:
        """An unregistered policy leaves the score without a band."""
        registry = ConfidencePolicyRegistry()
        registry.register("sem")(sem_confidence)
        pipeline = ScoringPipeline(tables=tables, settings=ScoringSettings(), registry=registry)

        report = pipeline.score([{"itemId": "ND_EF_PLANNING_1", "value": 5}])
        planning = report.domain_scores["ef_planning"]
        assert planning.normalized_score == 0
        assert planning.confidence is None
        assert "confidence:ef_planning" in report.errors


class TestSettings:
    """Runtime settings flow into the pipeline."""

    def test_keyword_fallback_toggle(self, tables: ScoringTables) -> None:
        """Disabling the fallback leaves keyword-only items unattributed."""
        payload = [{"itemId": "Q1", "value": 5, "text": "I worry about small things"}]

        enabled = ScoringPipeline(tables=tables, settings=ScoringSettings()).score(payload)
        assert enabled.keyword_attributed_items == ("Q1",)
        assert enabled.domain_scores["neuroticism"].provenance == {Provenance.KEYWORD_FALLBACK: 1}

        disabled = ScoringPipeline(
            tables=tables, settings=ScoringSettings(enable_keyword_fallback=False)
        ).score(payload)
        assert disabled.unattributed_items == ("Q1",)
        assert disabled.domain_scores["neuroticism"].is_absent

    def test_scale_size_override(self, tables: ScoringTables) -> None:
        """A 7-point scale rescales against 7."""
        pipeline = ScoringPipeline(tables=tables, settings=ScoringSettings(scale_size=7))
        report = pipeline.score([{"itemId": "Q1", "value": 7, "trait": "openness"}])
        assert report.domain_scores["openness"].normalized_score == 100

    def test_tag_only_domain(self, pipeline: ScoringPipeline) -> None:
        """Tags naming unmapped domains are scored after the table domains."""
        report = pipeline.score([{"itemId": "Q1", "value": 4, "trait": "resilience"}])
        assert list(report.domain_scores)[-1] == "resilience"
        assert report.domain_scores["resilience"].normalized_score == 75


class TestReportSerialization:
    """JSON-ready report output."""

    def test_to_dict_is_json_serializable(self, pipeline: ScoringPipeline) -> None:
        """The dict round-trips through json."""
        report = pipeline.score(_session(), session_id="s-9")
        payload = json.loads(json.dumps(report.to_dict()))

        assert payload["session_id"] == "s-9"
        openness = payload["domains"]["openness"]
        assert openness["normalized_score"] == 88
        assert openness["status"] == "scored"
        assert openness["confidence_level"] == "low"
        assert openness["provenance"] == {"trait": 10}

    def test_absent_domain_serialization(self, pipeline: ScoringPipeline) -> None:
        """Absent domains serialize with status and a null score."""
        domain = pipeline.score(_session()).to_dict()["domains"]["agreeableness"]
        assert domain["status"] == "insufficient_data"
        assert domain["normalized_score"] is None
        assert domain["confidence_interval"] is None

    def test_validation_serialization(self, pipeline: ScoringPipeline) -> None:
        """Validation results carry their tier and notes."""
        adhd = pipeline.score(_session()).to_dict()["validations"]["adhd"]
        assert adhd["recommendation_tier"] == "no_indication"
        assert adhd["valid"] is False
        assert len(adhd["notes"]) == 3
