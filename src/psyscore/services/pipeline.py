"""End-to-end scoring of one session.

Normalizer -> Accumulator -> Confidence/Validation -> Classification.
Every invocation recomputes everything from the full response list; the
pipeline holds only immutable configuration, so one instance can score
many sessions concurrently.

A failure confined to one domain, validation or classifier degrades only
that field of the report (recorded in ``ScoreReport.errors``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from psyscore.classification.classifier import run_classifiers
from psyscore.confidence.estimator import estimate_confidence, with_confidence
from psyscore.config import get_settings
from psyscore.domain.exceptions import DomainError
from psyscore.infrastructure.logging import get_logger, scoring_context
from psyscore.scoring.accumulator import accumulate, normalize_tally
from psyscore.services.responses import canonicalize_responses
from psyscore.tables.loader import load_scoring_tables
from psyscore.validation.multi_indicator import collect_evidence, validate

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from psyscore.config import ScoringSettings
    from psyscore.confidence.registry import ConfidencePolicyRegistry
    from psyscore.domain.value_objects import (
        AgeNormativeProfile,
        ArchetypeFit,
        ClassificationResult,
        ConfidenceInterval,
        DomainScore,
        HonestyHumilityEstimate,
        ResponseRecord,
        ValidationResult,
    )
    from psyscore.scoring.accumulator import AccumulationResult
    from psyscore.tables.loader import ScoringTables

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ScoreReport:
    """Structured scores for one session, ready for the reporting layer."""

    session_id: str | None
    domain_scores: dict[str, DomainScore]
    validations: dict[str, ValidationResult | None]
    classifications: dict[str, ClassificationResult | None]
    honesty_humility: HonestyHumilityEstimate | None = None
    age_normative: AgeNormativeProfile | None = None
    unattributed_items: tuple[str, ...] = ()
    keyword_attributed_items: tuple[str, ...] = ()
    duplicate_items: tuple[str, ...] = ()
    imputed_items: tuple[str, ...] = ()
    errors: dict[str, str] = field(default_factory=dict)
    table_version: str = ""

    @property
    def scored_domains(self) -> tuple[str, ...]:
        return tuple(d for d, s in self.domain_scores.items() if not s.is_absent)

    @property
    def absent_domains(self) -> tuple[str, ...]:
        """Domains with zero data (distinct from domains that scored low)."""
        return tuple(d for d, s in self.domain_scores.items() if s.is_absent)

    @property
    def unattributed_count(self) -> int:
        return len(self.unattributed_items)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation."""
        return {
            "session_id": self.session_id,
            "table_version": self.table_version,
            "domains": {name: _domain_to_dict(s) for name, s in self.domain_scores.items()},
            "validations": {
                name: _validation_to_dict(v) if v is not None else None
                for name, v in self.validations.items()
            },
            "classifications": {
                name: _classification_to_dict(c) if c is not None else None
                for name, c in self.classifications.items()
            },
            "honesty_humility": _honesty_to_dict(self.honesty_humility),
            "age_normative": _age_to_dict(self.age_normative),
            "diagnostics": {
                "unattributed_items": list(self.unattributed_items),
                "unattributed_count": self.unattributed_count,
                "keyword_attributed_items": list(self.keyword_attributed_items),
                "duplicate_items": list(self.duplicate_items),
                "imputed_items": list(self.imputed_items),
            },
            "errors": dict(self.errors),
        }


def _interval_to_dict(c: ConfidenceInterval | None) -> dict[str, Any] | None:
    if c is None:
        return None
    return {
        "lower": c.lower,
        "upper": c.upper,
        "margin_of_error": c.margin_of_error,
        "level": c.level.value,
        "confidence_pct": c.confidence_pct,
        "status": c.status.value,
        "policy": c.policy,
        "sample_size_factor": c.sample_size_factor,
        "variance_factor": c.variance_factor,
        "score_factor": c.score_factor,
    }


def _domain_to_dict(s: DomainScore) -> dict[str, Any]:
    return {
        "status": s.status.value,
        "normalized_score": s.normalized_score,
        "item_count": s.item_count,
        "imputed_count": s.imputed_count,
        "average": s.average,
        "raw_total": s.raw_total,
        "confidence_interval": _interval_to_dict(s.confidence),
        "confidence_level": s.confidence_level.value if s.confidence_level else None,
        "provenance": {p.value: n for p, n in s.provenance.items()},
    }


def _validation_to_dict(v: ValidationResult) -> dict[str, Any]:
    return {
        "indicators_met": {f.value: met for f, met in v.indicators_met.items()},
        "validated_count": v.validated_count,
        "valid": v.valid,
        "confidence": v.confidence,
        "recommendation_tier": v.recommendation_tier.value,
        "notes": list(v.notes),
    }


def _fit_to_dict(f: ArchetypeFit) -> dict[str, Any]:
    return {
        "archetype": f.archetype_name,
        "fit_score": f.fit_score,
        "matched_criteria": list(f.matched_criteria),
        "meets_all_criteria": f.meets_all_criteria,
    }


def _classification_to_dict(c: ClassificationResult) -> dict[str, Any]:
    return {
        "primary_type": c.primary_type,
        "secondary_type": c.secondary_type,
        "is_hybrid": c.is_hybrid,
        "low_confidence": c.is_low_confidence,
        "interpretation": c.interpretation,
        "fits": [_fit_to_dict(f) for f in c.fits],
        "dimensions": dict(c.dimensions),
        "missing_dimensions": list(c.missing_dimensions),
    }


def _honesty_to_dict(h: HonestyHumilityEstimate | None) -> dict[str, Any] | None:
    if h is None:
        return None
    return {
        "honesty_humility": h.honesty_humility,
        "emotionality": h.emotionality,
        "facets": dict(h.facets),
        "method": h.method,
    }


def _age_to_dict(a: AgeNormativeProfile | None) -> dict[str, Any] | None:
    if a is None:
        return None
    return {
        "age": a.age,
        "age_group": a.age_group,
        "pattern": a.pattern.value,
        "traits": {
            name: {
                "score": s.score,
                "cohort_mean": s.cohort_mean,
                "z_score": s.z_score,
                "percentile": s.percentile,
                "deviation": s.deviation.value,
            }
            for name, s in a.scores.items()
        },
    }


class ScoringPipeline:
    """Score complete response sets against a fixed table set."""

    def __init__(
        self,
        tables: ScoringTables | None = None,
        settings: ScoringSettings | None = None,
        registry: ConfidencePolicyRegistry | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            tables: Scoring tables (defaults to ``settings.tables_dir`` or packaged).
            settings: Scoring settings (defaults to environment).
            registry: Confidence policy registry (defaults to built-ins).
        """
        self._settings = settings or get_settings().scoring
        self._tables = tables or load_scoring_tables(settings=self._settings)
        self._registry = registry
        self._scale_size = self._settings.scale_size or self._tables.scale_size

    @property
    def tables(self) -> ScoringTables:
        return self._tables

    def score(
        self,
        responses: Iterable[Mapping[str, object] | ResponseRecord],
        *,
        session_id: str | None = None,
        age: float | None = None,
    ) -> ScoreReport:
        """Score the full response history of one session.

        Args:
            responses: Raw payloads or canonical records, in answer order.
            session_id: Optional id, bound to every log event of this run.
            age: Respondent age; enables the age-normative comparison.

        Returns:
            ScoreReport. Never raises for data problems; degraded fields are
            listed in ``errors``.
        """
        if session_id is None:
            return self._score(responses, session_id=None, age=age)
        with scoring_context(session_id=session_id):
            return self._score(responses, session_id=session_id, age=age)

    def _score(
        self,
        responses: Iterable[Mapping[str, object] | ResponseRecord],
        *,
        session_id: str | None,
        age: float | None,
    ) -> ScoreReport:
        errors: dict[str, str] = {}

        canonical = canonicalize_responses(responses, strict=False)
        for index, message in canonical.rejected:
            errors[f"response:{index}"] = message

        accumulation = accumulate(
            canonical.records,
            self._tables,
            scale_size=self._scale_size,
            enable_keyword_fallback=self._settings.enable_keyword_fallback,
        )
        domain_scores = self._score_domains(accumulation, errors)
        validations = self._validate(domain_scores, accumulation, errors)

        vector = {
            name: float(s.normalized_score)
            for name, s in domain_scores.items()
            if s.normalized_score is not None
        }
        outcome = run_classifiers(vector, self._tables.classifiers, age=age)
        errors.update({f"classifier:{name}": msg for name, msg in outcome.errors.items()})

        report = ScoreReport(
            session_id=session_id,
            domain_scores=domain_scores,
            validations=validations,
            classifications=outcome.results,
            honesty_humility=outcome.honesty_humility,
            age_normative=outcome.age_normative,
            unattributed_items=accumulation.unattributed_items,
            keyword_attributed_items=accumulation.keyword_attributed_items,
            duplicate_items=canonical.duplicate_items,
            imputed_items=tuple(
                c.item_id
                for tally in accumulation.tallies.values()
                for c in tally.contributions
                if c.imputed
            ),
            errors=errors,
            table_version=self._tables.version,
        )
        logger.info(
            "Session scored",
            responses=len(canonical.records),
            scored_domains=len(report.scored_domains),
            absent_domains=len(report.absent_domains),
            unattributed=report.unattributed_count,
            errors=len(errors),
        )
        return report

    def _domain_order(self, accumulation: AccumulationResult) -> list[str]:
        order = list(self._tables.item_domains.domains)
        order.extend(d for d in accumulation.tallies if d not in self._tables.item_domains.domains)
        return order

    def _score_domains(
        self,
        accumulation: AccumulationResult,
        errors: dict[str, str],
    ) -> dict[str, DomainScore]:
        scores: dict[str, DomainScore] = {}
        for domain in self._domain_order(accumulation):
            tally = accumulation.tallies.get(domain)
            spec = self._tables.domain_spec(domain)
            score = normalize_tally(tally, spec, scale_size=self._scale_size)
            if tally is not None and not score.is_absent:
                try:
                    interval = estimate_confidence(
                        score,
                        tally,
                        self._tables,
                        scale_size=self._scale_size,
                        exclude_imputed=self._settings.exclude_imputed_from_confidence,
                        registry=self._registry,
                    )
                    score = with_confidence(score, interval)
                except (DomainError, ValueError) as e:
                    logger.warning("Confidence unavailable", domain=domain, error=str(e))
                    errors[f"confidence:{domain}"] = str(e)
            scores[domain] = score
        return scores

    def _validate(
        self,
        scores: dict[str, DomainScore],
        accumulation: AccumulationResult,
        errors: dict[str, str],
    ) -> dict[str, ValidationResult | None]:
        table = self._tables.validation
        results: dict[str, ValidationResult | None] = {}
        for domain, rule in table.domains.items():
            try:
                evidence = collect_evidence(domain, rule, scores, accumulation.tallies)
                results[domain] = validate(evidence, rule, min_families=table.min_families)
            except (DomainError, ValueError) as e:
                logger.warning("Validation unavailable", domain=domain, error=str(e))
                errors[f"validation:{domain}"] = str(e)
                results[domain] = None
        return results


def score_session(
    responses: Iterable[Mapping[str, object] | ResponseRecord],
    *,
    session_id: str | None = None,
    tables: ScoringTables | None = None,
    age: float | None = None,
) -> ScoreReport:
    """Convenience wrapper: score one session with default settings."""
    return ScoringPipeline(tables=tables).score(responses, session_id=session_id, age=age)
