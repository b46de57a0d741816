"""HEXACO honesty-humility estimation from Big-Five scores.

When NEO-style facet domains (``agreeableness.straightforwardness`` and
so on) are present, each HEXACO facet is a weighted blend of them and
the factor is the mean of the estimable facets. Otherwise the factor
comes from a trait-level regression on agreeableness, conscientiousness
and openness, and every facet is reported as insufficient.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from psyscore.classification.dimensions import derive_dimension
from psyscore.classification.engine import classify
from psyscore.domain.exceptions import ClassificationError
from psyscore.domain.value_objects import HonestyHumilityEstimate
from psyscore.scoring.normalizer import round_half_up

if TYPE_CHECKING:
    from collections.abc import Mapping

    from psyscore.domain.value_objects import ClassificationResult
    from psyscore.tables.models import ClassifierSpec

HONESTY_HUMILITY = "honesty_humility"
EMOTIONALITY = "emotionality"
_FACTORS = frozenset({HONESTY_HUMILITY, EMOTIONALITY})


def estimate_honesty_humility(
    spec: ClassifierSpec,
    scores: Mapping[str, float],
    *,
    name: str = HONESTY_HUMILITY,
) -> HonestyHumilityEstimate:
    """Estimate honesty-humility, emotionality and the four H facets.

    Raises:
        ClassificationError: If neither facets nor the trait sources are scored.
    """
    if HONESTY_HUMILITY not in spec.dimensions:
        raise ClassificationError(name, f"tables define no {HONESTY_HUMILITY!r} dimension")

    facets: dict[str, int | None] = {}
    for facet, facet_spec in spec.dimensions.items():
        if facet in _FACTORS:
            continue
        value, _ = derive_dimension(facet_spec, scores)
        facets[facet] = round_half_up(value) if value is not None else None

    estimable = [v for v in facets.values() if v is not None]
    if estimable:
        honesty = round_half_up(sum(estimable) / len(estimable))
        method = "facet"
    else:
        value, _ = derive_dimension(spec.dimensions[HONESTY_HUMILITY], scores)
        if value is None:
            raise ClassificationError(name, "insufficient trait scores for estimation")
        honesty = round_half_up(value)
        method = "trait"

    emotionality = None
    if EMOTIONALITY in spec.dimensions:
        value, _ = derive_dimension(spec.dimensions[EMOTIONALITY], scores)
        emotionality = round_half_up(value) if value is not None else None

    return HonestyHumilityEstimate(
        honesty_humility=honesty,
        emotionality=emotionality,
        facets=facets,
        method=method,
    )


def classify_honesty_humility(
    name: str,
    spec: ClassifierSpec,
    scores: Mapping[str, float],
    *,
    closeness_margin: float = 15.0,
    low_fit_threshold: float = 30.0,
) -> tuple[HonestyHumilityEstimate, ClassificationResult]:
    """Estimate honesty-humility and classify it into level bands."""
    estimate = estimate_honesty_humility(spec, scores, name=name)
    result = classify(
        name,
        spec,
        {HONESTY_HUMILITY: float(estimate.honesty_humility)},
        closeness_margin=closeness_margin,
        low_fit_threshold=low_fit_threshold,
        missing_dimensions=estimate.insufficient_facets,
    )
    return estimate, result
