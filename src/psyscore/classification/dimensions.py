"""Derived classifier dimensions.

Secondary models (attachment, temperament, circumplex, HEXACO) read
weighted blends of domain scores rather than raw domains. A negative
weight contributes ``100 - score``, so "low agreeableness" can feed
"avoidance" without a separate inversion step.

Facet-level weights are preferred whenever any of their facet domains
was scored; otherwise every trait-level source must be present.

A count dimension reports how many source domains reach a cutoff, which
lets symptom screens band a criterion count through the same engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from psyscore.tables.models import ClassifierSpec, DerivedDimensionSpec


def blend(weights: Mapping[str, float], scores: Mapping[str, float]) -> float | None:
    """Weighted mean of the available sources (None if none are present)."""
    total = 0.0
    weight_sum = 0.0
    for source, weight in weights.items():
        value = scores.get(source)
        if value is None:
            continue
        total += (value if weight > 0 else 100.0 - value) * abs(weight)
        weight_sum += abs(weight)
    if weight_sum == 0:
        return None
    return min(max(total / weight_sum, 0.0), 100.0)


def count_at_or_above(
    domains: Sequence[str], cutoff: float, scores: Mapping[str, float]
) -> float | None:
    """How many of ``domains`` score at least ``cutoff``.

    Unscored domains count as unmet; None when none of them is scored.
    """
    present = [scores[d] for d in domains if d in scores]
    if not present:
        return None
    return float(sum(1 for value in present if value >= cutoff))


def derive_dimension(
    spec: DerivedDimensionSpec,
    scores: Mapping[str, float],
) -> tuple[float | None, str | None]:
    """Derive one dimension.

    Returns:
        (value, method) where method is ``facet``, ``trait`` or ``count``;
        (None, None) when the inputs are insufficient.
    """
    if spec.count is not None:
        return count_at_or_above(spec.count.domains, spec.count.cutoff, scores), "count"
    if spec.facet_weights and any(source in scores for source in spec.facet_weights):
        return blend(spec.facet_weights, scores), "facet"
    if spec.weights and all(source in scores for source in spec.weights):
        return blend(spec.weights, scores), "trait"
    return None, None


def criteria_dimensions(spec: ClassifierSpec) -> tuple[str, ...]:
    """Dimensions referenced by a classifier's criteria, in first-use order."""
    seen: dict[str, None] = {}
    for archetype in spec.archetypes.values():
        for criterion in archetype.criteria:
            seen.setdefault(criterion.dimension, None)
    return tuple(seen)


def build_vector(
    spec: ClassifierSpec,
    scores: Mapping[str, float],
) -> tuple[dict[str, float], tuple[str, ...]]:
    """Build the score vector a classifier evaluates.

    Returns:
        (vector, missing) where ``missing`` lists dimensions that could not
        be supplied.
    """
    vector: dict[str, float] = {}
    missing: list[str] = []
    if spec.dimensions:
        for name, dim_spec in spec.dimensions.items():
            value, _ = derive_dimension(dim_spec, scores)
            if value is None:
                missing.append(name)
            else:
                vector[name] = value
        return vector, tuple(missing)

    for name in criteria_dimensions(spec):
        if name in scores:
            vector[name] = float(scores[name])
        else:
            missing.append(name)
    return vector, tuple(missing)
