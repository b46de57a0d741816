"""Domain layer for psyscore.

This module provides the pure value types shared by every scoring stage,
with no dependencies beyond the standard library.

Modules:
    enums: Domain enumerations (Provenance, ConfidenceLevel, RecommendationTier, etc.)
    value_objects: Immutable value types (ResponseRecord, DomainScore, etc.)
    exceptions: Domain-specific exceptions

Example:
    >>> from psyscore.domain import RecommendationTier
    >>> RecommendationTier.from_validated_count(1)
    <RecommendationTier.MONITOR: 'monitor'>
"""

from psyscore.domain.enums import (
    AgeDeviation,
    ConfidenceLevel,
    CriterionOp,
    DomainClass,
    DomainStatus,
    EvidenceFamily,
    MaturationPattern,
    NormalizationTarget,
    Provenance,
    RecommendationTier,
    ReportStatus,
)
from psyscore.domain.exceptions import (
    ClassificationError,
    DomainError,
    InsufficientDataError,
    ResponseError,
    ResponseSchemaError,
    ScoringError,
    TableError,
    UnknownPolicyError,
)
from psyscore.domain.value_objects import (
    AgeNormativeProfile,
    AgeNormScore,
    ArchetypeFit,
    ClassificationResult,
    ConfidenceInterval,
    Contribution,
    DomainScore,
    DomainTally,
    HonestyHumilityEstimate,
    NormalizedValue,
    ResponseRecord,
    ValidationResult,
)

__all__ = [
    "AgeDeviation",
    "AgeNormScore",
    "AgeNormativeProfile",
    "ArchetypeFit",
    "ClassificationError",
    "ClassificationResult",
    "ConfidenceInterval",
    "ConfidenceLevel",
    "Contribution",
    "CriterionOp",
    "DomainClass",
    "DomainError",
    "DomainScore",
    "DomainStatus",
    "DomainTally",
    "EvidenceFamily",
    "HonestyHumilityEstimate",
    "InsufficientDataError",
    "MaturationPattern",
    "NormalizationTarget",
    "NormalizedValue",
    "Provenance",
    "RecommendationTier",
    "ReportStatus",
    "ResponseError",
    "ResponseRecord",
    "ResponseSchemaError",
    "ScoringError",
    "TableError",
    "UnknownPolicyError",
    "ValidationResult",
]
