"""Age-normative comparison of trait scores.

Each trait score is placed in its age cohort as ``z = (score - mean) / sd``
and a percentile from the standard normal CDF. Cohort norms and the z
cutoffs live in the ``age_norms`` block of ``classifiers.yaml``.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from psyscore.domain.enums import AgeDeviation, MaturationPattern
from psyscore.domain.exceptions import ClassificationError
from psyscore.domain.value_objects import AgeNormativeProfile, AgeNormScore
from psyscore.infrastructure.logging import get_logger
from psyscore.scoring.normalizer import round_half_up

if TYPE_CHECKING:
    from collections.abc import Mapping

    from psyscore.tables.models import AgeNormTable

logger = get_logger(__name__)

AGE_NORMATIVE = "age_normative"
Z_PRECISION = 2


def z_to_percentile(z: float) -> int:
    """Percentile (0-100) of ``z`` under the standard normal distribution."""
    return round_half_up(50.0 * (1.0 + math.erf(z / math.sqrt(2.0))))


def compare_to_age_norms(
    scores: Mapping[str, float],
    age: float,
    table: AgeNormTable,
) -> AgeNormativeProfile:
    """Compare every normed trait that was scored with its age cohort.

    Args:
        scores: Domain name -> 0-100 score.
        age: Respondent age in years.
        table: Cohort norms and z cutoffs.

    Raises:
        ClassificationError: If no cohort covers ``age`` or no normed trait
            was scored.
    """
    group = table.group_for(age)
    if group is None:
        raise ClassificationError(AGE_NORMATIVE, f"no age group covers age {age:g}")

    compared: dict[str, AgeNormScore] = {}
    for domain, norm in group.norms.items():
        score = scores.get(domain)
        if score is None:
            continue
        z = (score - norm.mean) / norm.sd
        compared[domain] = AgeNormScore(
            domain=domain,
            score=score,
            cohort_mean=norm.mean,
            z_score=round(z, Z_PRECISION),
            percentile=z_to_percentile(z),
            deviation=AgeDeviation.from_z(
                z, accelerated=table.accelerated_z, highly=table.highly_accelerated_z
            ),
        )
    if not compared:
        raise ClassificationError(AGE_NORMATIVE, "no normed trait was scored")

    ahead = sum(1 for s in compared.values() if s.deviation.is_ahead)
    behind = sum(1 for s in compared.values() if s.deviation.is_behind)
    profile = AgeNormativeProfile(
        age=age,
        age_group=group.label,
        scores=compared,
        pattern=MaturationPattern.from_counts(
            ahead, behind, min_traits=table.pattern_min_traits
        ),
    )
    logger.debug(
        "Age-normative comparison",
        age_group=group.label,
        traits=len(compared),
        pattern=profile.pattern.value,
    )
    return profile
