"""Interpersonal circumplex classification.

Agency and communion place a person on the interpersonal circle. The
octant fit falls off linearly with angular distance from the octant's
centre and is scaled by the vector's intensity (distance from the
circle's centre), so an undifferentiated profile near the centre yields
uniformly low fits instead of a confident octant.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from psyscore.classification.dimensions import build_vector
from psyscore.classification.engine import FIT_PRECISION, interpret, rank_fits
from psyscore.domain.exceptions import ClassificationError
from psyscore.domain.value_objects import ArchetypeFit, ClassificationResult

if TYPE_CHECKING:
    from collections.abc import Mapping

    from psyscore.tables.models import CircumplexSpec, ClassifierSpec


def angular_distance(a: float, b: float) -> float:
    """Smallest distance between two angles in degrees (0-180)."""
    diff = abs(a - b) % 360.0
    return min(diff, 360.0 - diff)


def effectiveness_level(x: float, y: float) -> tuple[float, str]:
    """Interpersonal effectiveness: overall elevation, rewarded for balance."""
    score = (x + y) / 2 * 0.7 + (100 - abs(x - y)) * 0.3
    if score > 70:
        return score, "High"
    if score > 50:
        return score, "Moderate"
    if score > 30:
        return score, "Developing"
    return score, "Low"


def octant_fits(
    x: float, y: float, circ: CircumplexSpec
) -> tuple[list[ArchetypeFit], float, float]:
    """Fit every octant for a point; returns (fits, angle, radius)."""
    dx, dy = x - circ.center, y - circ.center
    radius = float(np.hypot(dx, dy))
    angle = float(np.degrees(np.arctan2(dy, dx))) % 360.0
    intensity = min(1.0, radius / circ.intensity_radius)
    half_width = 180.0 / len(circ.octants)

    fits = []
    for octant in circ.octants:
        distance = angular_distance(angle, octant.angle)
        fit = 100.0 * (1.0 - distance / 180.0) * intensity
        matched = []
        if distance <= half_width:
            matched.append(f"angle within {octant.code} octant")
        if radius >= circ.min_radius:
            matched.append(f"intensity >= {circ.min_radius:g}")
        fits.append(
            ArchetypeFit(
                archetype_name=octant.code,
                fit_score=round(fit, FIT_PRECISION),
                matched_criteria=tuple(matched),
                meets_all_criteria=len(matched) == 2,
                description=(
                    f"{octant.label}: {octant.description}" if octant.description else octant.label
                ),
            )
        )
    return fits, angle, radius


def classify_circumplex(
    name: str,
    spec: ClassifierSpec,
    scores: Mapping[str, float],
    *,
    closeness_margin: float = 15.0,
) -> ClassificationResult:
    """Classify interpersonal style from domain scores.

    Raises:
        ClassificationError: If either axis cannot be derived.
    """
    circ = spec.circumplex
    if circ is None:
        raise ClassificationError(name, "missing circumplex geometry")

    vector, missing = build_vector(spec, scores)
    if circ.x not in vector or circ.y not in vector:
        raise ClassificationError(name, f"cannot derive axes: missing {', '.join(missing)}")

    x, y = vector[circ.x], vector[circ.y]
    fits, angle, radius = octant_fits(x, y, circ)
    ranked = rank_fits(fits)
    margin = spec.closeness_margin or closeness_margin
    effectiveness, level = effectiveness_level(x, y)

    interpretation = interpret(spec, ranked, margin)
    interpretation = f"{interpretation} Interpersonal effectiveness: {level}."

    dimensions = {
        circ.x: round(x, FIT_PRECISION),
        circ.y: round(y, FIT_PRECISION),
        "angle": round(angle, FIT_PRECISION),
        "radius": round(radius, FIT_PRECISION),
        "effectiveness": round(effectiveness, FIT_PRECISION),
    }
    return ClassificationResult(
        classifier=name,
        fits=ranked,
        closeness_margin=margin,
        interpretation=interpretation,
        dimensions=dimensions,
        missing_dimensions=missing,
    )
