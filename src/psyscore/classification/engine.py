"""Weighted-criteria archetype classification.

Each satisfied criterion contributes ``+weight``. A missed criterion
subtracts ``distance_to_threshold * penalty_rate`` instead of zeroing the
fit, so near-misses rank just below matches rather than falling off a
cliff. Fits are clamped to 0-100, sorted descending (ties keep table
order), and the result is hybrid when the top two are closer than the
closeness margin.

A criterion whose dimension is missing from the vector is unmet but not
penalized.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from psyscore.domain.enums import CriterionOp
from psyscore.domain.exceptions import ClassificationError
from psyscore.domain.value_objects import ArchetypeFit, ClassificationResult, is_hybrid_pair
from psyscore.infrastructure.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from psyscore.tables.models import ArchetypeSpec, ClassifierSpec, CriterionSpec

logger = get_logger(__name__)

FIT_PRECISION = 2


def evaluate_criterion(criterion: CriterionSpec, value: float) -> tuple[bool, float]:
    """Return (satisfied, contribution) for one criterion."""
    if criterion.op is CriterionOp.MIN:
        satisfied = value >= criterion.threshold
        distance = criterion.threshold - value
    else:
        satisfied = value <= criterion.threshold
        distance = value - criterion.threshold
    if satisfied:
        return True, criterion.weight
    return False, -distance * criterion.penalty_rate


def fit_archetype(name: str, archetype: ArchetypeSpec, vector: Mapping[str, float]) -> ArchetypeFit:
    """Compute the clamped fit of ``vector`` against one archetype."""
    raw = 0.0
    matched: list[str] = []
    all_met = True
    for criterion in archetype.criteria:
        value = vector.get(criterion.dimension)
        if value is None:
            all_met = False
            continue
        satisfied, contribution = evaluate_criterion(criterion, value)
        raw += contribution
        if satisfied:
            matched.append(criterion.description)
        else:
            all_met = False
    return ArchetypeFit(
        archetype_name=name,
        fit_score=round(min(max(raw, 0.0), 100.0), FIT_PRECISION),
        matched_criteria=tuple(matched),
        meets_all_criteria=all_met,
        description=archetype.description,
    )


def rank_fits(fits: Sequence[ArchetypeFit]) -> tuple[ArchetypeFit, ...]:
    """Sort fits descending; the sort is stable so ties keep table order."""
    return tuple(sorted(fits, key=lambda f: f.fit_score, reverse=True))


def interpret(spec: ClassifierSpec, ranked: Sequence[ArchetypeFit], margin: float) -> str:
    """Pick the canned interpretation for a ranked result."""
    primary = ranked[0]
    if len(ranked) > 1 and is_hybrid_pair(primary.fit_score, ranked[1].fit_score, margin):
        secondary = ranked[1].archetype_name
        key = f"{primary.archetype_name}-{secondary}"
        if key in spec.hybrid_interpretations:
            return spec.hybrid_interpretations[key]
        return spec.fallback_interpretation.format(
            primary=primary.archetype_name, secondary=secondary
        )
    return primary.description


def classify(
    name: str,
    spec: ClassifierSpec,
    vector: Mapping[str, float],
    *,
    closeness_margin: float = 15.0,
    low_fit_threshold: float = 30.0,
    missing_dimensions: tuple[str, ...] = (),
) -> ClassificationResult:
    """Classify a score vector against a criteria classifier's archetypes.

    Args:
        name: Classifier name (for reporting).
        spec: Classifier definition from the tables.
        vector: Dimension name -> 0-100 value.
        closeness_margin: Fit gap below which the result is hybrid.
        low_fit_threshold: Top fit below which the result is logged as low-confidence.
        missing_dimensions: Dimensions the caller could not supply.

    Raises:
        ClassificationError: If the vector provides none of the needed dimensions.
    """
    if not vector:
        raise ClassificationError(name, "no input dimensions available")

    margin = spec.closeness_margin or closeness_margin
    ranked = rank_fits(
        [fit_archetype(arch_name, arch, vector) for arch_name, arch in spec.archetypes.items()]
    )
    result = ClassificationResult(
        classifier=name,
        fits=ranked,
        closeness_margin=margin,
        interpretation=interpret(spec, ranked, margin),
        dimensions={k: round(v, FIT_PRECISION) for k, v in vector.items()},
        missing_dimensions=missing_dimensions,
    )
    if result.primary.fit_score < low_fit_threshold:
        logger.info(
            "Low-confidence classification",
            classifier=name,
            primary_type=result.primary_type,
            fit_score=result.primary.fit_score,
        )
    return result
