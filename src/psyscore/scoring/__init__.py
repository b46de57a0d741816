"""Response normalization and per-domain accumulation."""

from psyscore.scoring.accumulator import (
    AccumulationResult,
    accumulate,
    match_keywords,
    normalize_tally,
    resolve_domain,
)
from psyscore.scoring.normalizer import normalize, round_half_up

__all__ = [
    "AccumulationResult",
    "accumulate",
    "match_keywords",
    "normalize",
    "normalize_tally",
    "resolve_domain",
    "round_half_up",
]
