"""Scoring services.

Public API:
- ScoringPipeline: Score one session's responses end to end
- ScoreReport: Structured result for the reporting layer
- score_session: One-shot convenience wrapper
- canonicalize_responses: Map variant payload shapes onto ResponseRecord
"""

from psyscore.services.pipeline import ScoreReport, ScoringPipeline, score_session
from psyscore.services.responses import (
    CanonicalResponses,
    ResponsePayload,
    canonicalize_responses,
    parse_response,
)

__all__ = [
    "CanonicalResponses",
    "ResponsePayload",
    "ScoreReport",
    "ScoringPipeline",
    "canonicalize_responses",
    "parse_response",
    "score_session",
]
