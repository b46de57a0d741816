"""Built-in confidence policies.

``sem``: continuous trait domains. The interval half-width is
``z * SEM * sample_size_factor * variance_factor``, where the variance
factor drops below 1 when item responses are erratic. SEM is
``population_sd * sqrt(1 - reliability)``.

``screening``: clinically framed domains. A weighted composite of question
count, score decisiveness and item spread; the margin is
``base_margin / overall`` and the composite also decides whether the
reporting layer should surface the number at all.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from psyscore.confidence.registry import register_policy
from psyscore.domain.enums import ConfidenceLevel, ReportStatus
from psyscore.domain.value_objects import ConfidenceInterval
from psyscore.scoring.normalizer import round_half_up

if TYPE_CHECKING:
    from collections.abc import Sequence

    from psyscore.confidence.registry import ConfidenceInputs
    from psyscore.tables.models import AboveRule, BandRule, ConfidenceTable, StepRule

# Composite values are compared against level cutoffs after rounding so
# that 0.5 * 1.0 + 0.3 * 1.0 + ... never misses a boundary by 1e-16.
_COMPOSITE_PRECISION = 6


def step_value(quantity: float, steps: Sequence[StepRule]) -> float:
    """Value of the first step whose ``min`` the quantity reaches."""
    for rule in steps:
        if quantity >= rule.min:
            return rule.value
    return steps[-1].value


def above_value(quantity: float, rules: Sequence[AboveRule], default: float = 1.0) -> float:
    """Value of the first rule the quantity strictly exceeds."""
    for rule in rules:
        if quantity > rule.above:
            return rule.value
    return default


def band_value(quantity: float, bands: Sequence[BandRule], default: float = 1.0) -> float:
    """Value of the first band containing the quantity."""
    for band in bands:
        if band.low <= quantity <= band.high:
            return band.value
    return default


def population_sd(values: Sequence[float]) -> float:
    """Population standard deviation (ddof=0)."""
    return float(np.std(np.asarray(values, dtype=float)))


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Population SD divided by the mean (0 for a zero mean)."""
    arr = np.asarray(values, dtype=float)
    mean = float(arr.mean())
    if mean == 0:
        return 0.0
    return float(arr.std()) / abs(mean)


def _bounds(score: int, margin: float) -> tuple[int, int]:
    lower = max(0, round_half_up(score - margin))
    upper = min(100, round_half_up(score + margin))
    return lower, upper


@register_policy("sem")
def sem_confidence(inputs: ConfidenceInputs, table: ConfidenceTable) -> ConfidenceInterval:
    """Standard-error-of-measurement band for a continuous trait domain."""
    params = table.sem
    reliability = params.reliability_for(inputs.domain)
    sem = params.population_sd * math.sqrt(1 - reliability)
    sample_size_factor = step_value(inputs.item_count, params.sample_size_steps)

    variance_factor = 1.0
    if len(inputs.item_ordinals) >= params.min_items_for_variance:
        cv = coefficient_of_variation(inputs.item_ordinals)
        variance_factor = above_value(cv, params.cv_steps)

    margin = params.z * sem * sample_size_factor * variance_factor

    level = ConfidenceLevel.INSUFFICIENT
    confidence_pct = params.fallback_confidence_pct
    for rule in params.levels:
        within_margin = rule.max_margin is None or margin <= rule.max_margin
        if inputs.item_count >= rule.min_items and within_margin:
            level = ConfidenceLevel(rule.level)
            confidence_pct = rule.confidence_pct
            break

    lower, upper = _bounds(inputs.score, margin)
    return ConfidenceInterval(
        lower=lower,
        upper=upper,
        margin_of_error=round(margin, 2),
        level=level,
        sample_size_factor=sample_size_factor,
        variance_factor=variance_factor,
        confidence_pct=confidence_pct,
        status=ReportStatus.from_level(level),
        policy="sem",
    )


@register_policy("screening")
def screening_confidence(inputs: ConfidenceInputs, table: ConfidenceTable) -> ConfidenceInterval:
    """Weighted composite band for a screening/clinical domain."""
    params = table.screening
    question_confidence = step_value(inputs.item_count, params.question_steps)
    score_confidence = band_value(inputs.score, params.score_bands)

    variance_confidence = 1.0
    if len(inputs.item_ordinals) >= params.min_items_for_variance:
        # Spread thresholds are defined on the reference (1-5) scale.
        scale_ratio = (params.reference_scale_size - 1) / (inputs.scale_size - 1)
        sd = population_sd(inputs.item_ordinals) * scale_ratio
        variance_confidence = above_value(sd, params.sd_steps)

    weights = params.weights
    overall = round(
        weights.question * question_confidence
        + weights.score * score_confidence
        + weights.variance * variance_confidence,
        _COMPOSITE_PRECISION,
    )

    level = ConfidenceLevel.INSUFFICIENT
    for rule in params.levels:
        if overall >= rule.min_overall:
            level = ConfidenceLevel(rule.level)
            break

    margin = params.base_margin / overall
    lower, upper = _bounds(inputs.score, margin)
    return ConfidenceInterval(
        lower=lower,
        upper=upper,
        margin_of_error=round(margin, 2),
        level=level,
        sample_size_factor=question_confidence,
        variance_factor=variance_confidence,
        confidence_pct=round_half_up(overall * 100),
        status=ReportStatus.from_level(level),
        policy="screening",
        score_factor=score_confidence,
    )
