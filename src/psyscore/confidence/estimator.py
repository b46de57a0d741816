"""Attach confidence intervals to normalized domain scores."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from psyscore.confidence.registry import DEFAULT_REGISTRY, ConfidenceInputs
from psyscore.domain.exceptions import InsufficientDataError

if TYPE_CHECKING:
    from psyscore.confidence.registry import ConfidencePolicyRegistry
    from psyscore.domain.value_objects import ConfidenceInterval, DomainScore, DomainTally
    from psyscore.tables.loader import ScoringTables


def confidence_inputs(
    score: DomainScore,
    tally: DomainTally,
    *,
    scale_size: int,
    exclude_imputed: bool = True,
) -> ConfidenceInputs:
    """Collect policy inputs, optionally ignoring imputed midpoints."""
    if score.normalized_score is None:
        raise InsufficientDataError(score.domain)
    ordinals = tally.genuine_ordinals if exclude_imputed else tally.ordinals
    return ConfidenceInputs(
        domain=score.domain,
        score=score.normalized_score,
        item_count=len(ordinals),
        item_ordinals=ordinals,
        scale_size=scale_size,
    )


def estimate_confidence(
    score: DomainScore,
    tally: DomainTally,
    tables: ScoringTables,
    *,
    scale_size: int | None = None,
    exclude_imputed: bool = True,
    registry: ConfidencePolicyRegistry | None = None,
) -> ConfidenceInterval:
    """Compute the confidence interval for one scored domain.

    The policy comes from the domain's spec: ``sem`` for trait domains,
    ``screening`` for screening domains, unless overridden in the tables.

    Raises:
        InsufficientDataError: If the domain is absent.
        UnknownPolicyError: If the domain names an unregistered policy.
    """
    spec = tables.domain_spec(score.domain)
    policy = (registry or DEFAULT_REGISTRY).get(spec.policy)
    inputs = confidence_inputs(
        score,
        tally,
        scale_size=scale_size or tables.scale_size,
        exclude_imputed=exclude_imputed,
    )
    return policy(inputs, tables.confidence)


def with_confidence(score: DomainScore, interval: ConfidenceInterval) -> DomainScore:
    """Return a copy of ``score`` carrying ``interval``."""
    return replace(score, confidence=interval)
