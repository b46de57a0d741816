"""Archetype classification over finished score vectors.

Public API:
- classify: Weighted-criteria fit scoring with hybrid detection
- classify_circumplex: Interpersonal octant from agency/communion
- estimate_honesty_humility: Deterministic HEXACO H estimate
- run_classifiers: Apply every classifier in the tables
- compare_to_age_norms: Trait scores against age-cohort norms
"""

from psyscore.classification.age_norms import compare_to_age_norms, z_to_percentile
from psyscore.classification.circumplex import classify_circumplex
from psyscore.classification.classifier import ClassifierOutcome, run_classifier, run_classifiers
from psyscore.classification.dimensions import (
    blend,
    build_vector,
    count_at_or_above,
    derive_dimension,
)
from psyscore.classification.engine import classify, evaluate_criterion, fit_archetype
from psyscore.classification.honesty_humility import (
    classify_honesty_humility,
    estimate_honesty_humility,
)

__all__ = [
    "ClassifierOutcome",
    "blend",
    "build_vector",
    "classify",
    "classify_circumplex",
    "classify_honesty_humility",
    "compare_to_age_norms",
    "count_at_or_above",
    "derive_dimension",
    "estimate_honesty_humility",
    "evaluate_criterion",
    "fit_archetype",
    "run_classifier",
    "run_classifiers",
    "z_to_percentile",
]
