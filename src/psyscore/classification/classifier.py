"""Run every configured classifier over a finished score vector."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from psyscore.classification.age_norms import AGE_NORMATIVE, compare_to_age_norms
from psyscore.classification.circumplex import classify_circumplex
from psyscore.classification.dimensions import build_vector
from psyscore.classification.engine import classify
from psyscore.classification.honesty_humility import HONESTY_HUMILITY, classify_honesty_humility
from psyscore.domain.exceptions import DomainError
from psyscore.infrastructure.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from psyscore.domain.value_objects import (
        AgeNormativeProfile,
        ClassificationResult,
        HonestyHumilityEstimate,
    )
    from psyscore.tables.models import ClassifierSpec, ClassifierTable

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ClassifierOutcome:
    """Results of all classifiers; a failed classifier maps to None."""

    results: dict[str, ClassificationResult | None] = field(default_factory=dict)
    honesty_humility: HonestyHumilityEstimate | None = None
    age_normative: AgeNormativeProfile | None = None
    errors: dict[str, str] = field(default_factory=dict)


def run_classifier(
    name: str,
    spec: ClassifierSpec,
    scores: Mapping[str, float],
    table: ClassifierTable,
) -> tuple[ClassificationResult, HonestyHumilityEstimate | None]:
    """Run one classifier, dispatching on its kind.

    Raises:
        ClassificationError: If the scores cannot feed the classifier.
    """
    if spec.kind == "circumplex":
        return classify_circumplex(
            name, spec, scores, closeness_margin=table.closeness_margin
        ), None
    if HONESTY_HUMILITY in spec.dimensions:
        estimate, result = classify_honesty_humility(
            name,
            spec,
            scores,
            closeness_margin=table.closeness_margin,
            low_fit_threshold=table.low_fit_threshold,
        )
        return result, estimate

    vector, missing = build_vector(spec, scores)
    result = classify(
        name,
        spec,
        vector,
        closeness_margin=table.closeness_margin,
        low_fit_threshold=table.low_fit_threshold,
        missing_dimensions=missing,
    )
    return result, None


def run_classifiers(
    scores: Mapping[str, float],
    table: ClassifierTable,
    *,
    age: float | None = None,
) -> ClassifierOutcome:
    """Run every classifier in ``table``; failures degrade only their own entry.

    The age-normative comparison runs only when ``age`` is given and the
    table carries age norms.
    """
    results: dict[str, ClassificationResult | None] = {}
    errors: dict[str, str] = {}
    honesty: HonestyHumilityEstimate | None = None
    age_profile: AgeNormativeProfile | None = None

    if age is not None and table.age_norms is not None:
        try:
            age_profile = compare_to_age_norms(scores, age, table.age_norms)
        except DomainError as e:
            logger.warning("Age-normative comparison unavailable", age=age, error=str(e))
            errors[AGE_NORMATIVE] = str(e)

    for name, spec in table.classifiers.items():
        try:
            result, estimate = run_classifier(name, spec, scores, table)
        except (DomainError, ValueError) as e:
            logger.warning("Classifier unavailable", classifier=name, error=str(e))
            results[name] = None
            errors[name] = str(e)
            continue
        results[name] = result
        if estimate is not None:
            honesty = estimate

    return ClassifierOutcome(
        results=results, honesty_humility=honesty, age_normative=age_profile, errors=errors
    )
