"""Response normalization onto a canonical ordinal scale.

Raw values arrive as numbers, numeric strings, Likert labels or booleans.
Every encoding is mapped onto 1..scale_size; anything unrecognized falls
back to the scale midpoint and is flagged as imputed so downstream stages
can tell it apart from a genuine answer.
"""

from __future__ import annotations

import math
import re
from typing import TYPE_CHECKING

from psyscore.domain.value_objects import NormalizedValue

if TYPE_CHECKING:
    from psyscore.domain.value_objects import RawValue

# Labels are anchored on a 5-point scale and rescaled for other scale sizes.
LABEL_ORDINALS: dict[str, int] = {
    "strongly disagree": 1,
    "disagree": 2,
    "somewhat disagree": 2,
    "neutral": 3,
    "neither agree nor disagree": 3,
    "somewhat agree": 4,
    "agree": 4,
    "strongly agree": 5,
    "never": 1,
    "rarely": 2,
    "sometimes": 3,
    "often": 4,
    "very often": 5,
    "always": 5,
    "no": 1,
    "yes": 5,
}

_LABEL_ANCHOR_SCALE = 5
_SEPARATORS = re.compile(r"[\s_\-]+")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    Python's built-in ``round`` uses banker's rounding (``round(86.5) == 86``),
    which would make scores depend on the parity of the integer part.
    """
    return math.floor(value + 0.5)


def midpoint(scale_size: int) -> float:
    """Scale midpoint used for imputation."""
    return (scale_size + 1) / 2


def _canonical_label(text: str) -> str:
    return _SEPARATORS.sub(" ", text.strip().lower())


def _rescale_label(ordinal: int, scale_size: int) -> float:
    if scale_size == _LABEL_ANCHOR_SCALE:
        return float(ordinal)
    return 1 + (ordinal - 1) * (scale_size - 1) / (_LABEL_ANCHOR_SCALE - 1)


def _parse_number(text: str) -> float | None:
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _to_ordinal(raw_value: RawValue, scale_size: int) -> float | None:
    """Map a raw value to 1..scale_size, or None when unrecognized."""
    if raw_value is None:
        return None
    if isinstance(raw_value, bool):
        return float(scale_size) if raw_value else 1.0
    if isinstance(raw_value, (int, float)):
        if not math.isfinite(raw_value):
            return None
        return min(max(float(raw_value), 1.0), float(scale_size))
    if isinstance(raw_value, str):
        label = _canonical_label(raw_value)
        if not label:
            return None
        if label in LABEL_ORDINALS:
            return _rescale_label(LABEL_ORDINALS[label], scale_size)
        number = _parse_number(label)
        if number is not None:
            return min(max(number, 1.0), float(scale_size))
    return None


def normalize(
    raw_value: RawValue,
    is_reverse_keyed: bool = False,
    scale_size: int = 5,
) -> NormalizedValue:
    """Normalize one raw response value.

    Args:
        raw_value: Numeric score, Likert label, boolean, or None.
        is_reverse_keyed: Apply ``scale_size + 1 - ordinal`` when True.
        scale_size: Number of points on the response scale.

    Returns:
        NormalizedValue with the ordinal score and an imputed flag.

    Raises:
        ValueError: If scale_size is smaller than 2.
    """
    if scale_size < 2:
        raise ValueError(f"scale_size must be >= 2, got {scale_size}")

    ordinal = _to_ordinal(raw_value, scale_size)
    imputed = ordinal is None
    if ordinal is None:
        ordinal = midpoint(scale_size)

    if is_reverse_keyed:
        ordinal = scale_size + 1 - ordinal

    return NormalizedValue(score=ordinal, imputed=imputed, reversed=is_reverse_keyed)


def rescale_to_percent(average: float, scale_size: int) -> float:
    """Rescale an ordinal average (1..scale_size) to 0-100."""
    return (average - 1) / (scale_size - 1) * 100
