"""Confidence bands and levels for domain scores.

Importing this package registers the built-in ``sem`` and ``screening``
policies on the default registry.
"""

from psyscore.confidence import policies as _policies  # noqa: F401  (registers policies)
from psyscore.confidence.estimator import confidence_inputs, estimate_confidence, with_confidence
from psyscore.confidence.registry import (
    ConfidenceInputs,
    ConfidencePolicyRegistry,
    get_policy,
    register_policy,
)

__all__ = [
    "ConfidenceInputs",
    "ConfidencePolicyRegistry",
    "confidence_inputs",
    "estimate_confidence",
    "get_policy",
    "register_policy",
    "with_confidence",
]
