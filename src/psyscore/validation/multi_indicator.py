"""Multi-indicator validation for clinically framed screening domains.

A screening pattern is marked valid only when at least two of three
independent evidence families corroborate it:

- behavioral: the accumulated indicator score crosses its threshold
- structural: enough related functional sub-domains lie beyond a cutoff
- impact: enough self-reported impairment items are answered high

Disagreement between families is expected and resolved by the count; it
never raises. Missing evidence simply leaves a family unmet.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from psyscore.domain.enums import EvidenceFamily, RecommendationTier
from psyscore.domain.value_objects import ValidationResult
from psyscore.infrastructure.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from psyscore.domain.value_objects import DomainScore, DomainTally
    from psyscore.tables.models import ValidationRuleSpec

logger = get_logger(__name__)

MIN_CORROBORATING_FAMILIES = 2


@dataclass(frozen=True, slots=True)
class DomainEvidence:
    """Evidence gathered for one clinical domain from a scored session."""

    domain: str
    behavioral_score: int | None
    """Indicator domain score, None when the indicator domain is absent."""

    structural_scores: dict[str, int | None] = field(default_factory=dict)
    """Related sub-domain scores, None for absent sub-domains."""

    impact_ordinals: tuple[float, ...] = ()
    """Genuine (non-imputed) answers to the impact items."""


def collect_evidence(
    domain: str,
    rule: ValidationRuleSpec,
    scores: Mapping[str, DomainScore],
    tallies: Mapping[str, DomainTally],
) -> DomainEvidence:
    """Gather the three evidence families for ``domain`` from session scores."""
    behavioral = scores.get(rule.behavioral.domain)
    impact_tally = tallies.get(rule.impact.domain)
    return DomainEvidence(
        domain=domain,
        behavioral_score=behavioral.normalized_score if behavioral is not None else None,
        structural_scores={
            sub: (scores[sub].normalized_score if sub in scores else None)
            for sub in rule.structural.domains
        },
        impact_ordinals=impact_tally.genuine_ordinals if impact_tally is not None else (),
    )


def _behavioral(evidence: DomainEvidence, rule: ValidationRuleSpec) -> tuple[bool, str]:
    source = rule.behavioral.domain
    if evidence.behavioral_score is None:
        return False, f"behavioral: {source} has no data"
    met = evidence.behavioral_score >= rule.behavioral.threshold
    symbol = ">=" if met else "<"
    return met, (
        f"behavioral: {source}={evidence.behavioral_score} {symbol} "
        f"{rule.behavioral.threshold:g}"
    )


def _structural(evidence: DomainEvidence, rule: ValidationRuleSpec) -> tuple[bool, str]:
    structural = rule.structural
    present = {k: v for k, v in evidence.structural_scores.items() if v is not None}
    if structural.direction == "below":
        flagged = sorted(k for k, v in present.items() if v < structural.cutoff)
    else:
        flagged = sorted(k for k, v in present.items() if v > structural.cutoff)
    met = len(flagged) >= structural.min_count
    detail = ", ".join(flagged) if flagged else "none"
    return met, (
        f"structural: {len(flagged)} of {len(present)} scored sub-domains "
        f"{structural.direction} {structural.cutoff:g} ({detail}); need {structural.min_count}"
    )


def _impact(evidence: DomainEvidence, rule: ValidationRuleSpec) -> tuple[bool, str]:
    impact = rule.impact
    high = sum(1 for v in evidence.impact_ordinals if v >= impact.high_ordinal)
    met = high >= impact.min_count
    return met, (
        f"impact: {high} of {len(evidence.impact_ordinals)} items >= "
        f"{impact.high_ordinal:g}; need {impact.min_count}"
    )


def validate(
    evidence: DomainEvidence,
    rule: ValidationRuleSpec,
    *,
    min_families: int = MIN_CORROBORATING_FAMILIES,
) -> ValidationResult:
    """Apply the corroboration gate to one domain's evidence.

    Args:
        evidence: Evidence gathered for the domain.
        rule: Thresholds for each evidence family.
        min_families: Families required for a valid pattern (never below 2).

    Returns:
        ValidationResult with per-family outcomes and a recommendation tier.
    """
    min_families = max(min_families, MIN_CORROBORATING_FAMILIES)

    outcomes = {
        EvidenceFamily.BEHAVIORAL: _behavioral(evidence, rule),
        EvidenceFamily.STRUCTURAL: _structural(evidence, rule),
        EvidenceFamily.IMPACT: _impact(evidence, rule),
    }
    indicators_met = {family: met for family, (met, _) in outcomes.items()}
    validated_count = sum(indicators_met.values())
    tier = RecommendationTier.from_validated_count(validated_count, min_families=min_families)

    result = ValidationResult(
        domain=evidence.domain,
        indicators_met=indicators_met,
        validated_count=validated_count,
        valid=validated_count >= min_families,
        confidence=round(validated_count / len(EvidenceFamily), 2),
        recommendation_tier=tier,
        notes=tuple(note for _, note in outcomes.values()),
    )
    logger.debug(
        "Multi-indicator validation",
        domain=evidence.domain,
        validated_count=validated_count,
        tier=tier.value,
    )
    return result
