"""Domain enumerations for psyscore.

This module defines the categorical vocabulary shared by every stage:
- Provenance: How a response was attributed to a domain
- DomainClass: Which confidence policy a domain uses
- NormalizationTarget: Continuous 0-100 vs binary checklist scoring
- DomainStatus: Scored vs insufficient data
- ConfidenceLevel / ReportStatus: Confidence outcome and reporting instruction
- EvidenceFamily / RecommendationTier: Multi-indicator validation vocabulary
- AgeDeviation / MaturationPattern: Age-normative comparison outcome
"""

from __future__ import annotations

from enum import StrEnum


class Provenance(StrEnum):
    """How a single response was attributed to its domain.

    Ordered from most to least authoritative.
    """

    TRAIT = "trait"
    """Explicit domain/trait tag carried on the response record."""

    DOMAIN_MAP = "domainMap"
    """Lookup of the item id in the static item-domain map."""

    KEYWORD_FALLBACK = "keywordFallback"
    """Degraded keyword match against the item text."""


class DomainClass(StrEnum):
    """Domain class, selects the confidence policy."""

    TRAIT = "trait"
    """Continuous trait domain (SEM-based confidence)."""

    SCREENING = "screening"
    """Screening/clinical domain (weighted composite confidence)."""

    @property
    def default_policy(self) -> str:
        """Name of the confidence policy registered for this class."""
        return "sem" if self is DomainClass.TRAIT else "screening"


class NormalizationTarget(StrEnum):
    """How per-item values feed the domain total."""

    CONTINUOUS = "continuous"
    """Raw ordinal values; domain rescaled from the ordinal average."""

    BINARY = "binary"
    """Checklist items: endorsed (100) or not (0), averaged directly."""


class DomainStatus(StrEnum):
    """Whether a domain received any contributing items."""

    SCORED = "scored"
    INSUFFICIENT_DATA = "insufficient_data"


class ConfidenceLevel(StrEnum):
    """Categorical confidence label for a domain score."""

    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"
    INSUFFICIENT = "insufficient"

    @property
    def rank(self) -> int:
        """Ordinal rank (higher is more confident)."""
        return _LEVEL_RANK[self]


_LEVEL_RANK = {
    ConfidenceLevel.INSUFFICIENT: 0,
    ConfidenceLevel.LOW: 1,
    ConfidenceLevel.MODERATE: 2,
    ConfidenceLevel.HIGH: 3,
}


class ReportStatus(StrEnum):
    """Instruction to the reporting layer about surfacing a score."""

    REPORT = "report"
    REPORT_WITH_CAVEAT = "report_with_caveat"
    MENTION_INSUFFICIENT = "mention_insufficient"
    HIDE = "hide"

    @classmethod
    def from_level(cls, level: ConfidenceLevel) -> ReportStatus:
        """Map a confidence level onto its reporting instruction."""
        return {
            ConfidenceLevel.HIGH: cls.REPORT,
            ConfidenceLevel.MODERATE: cls.REPORT_WITH_CAVEAT,
            ConfidenceLevel.LOW: cls.MENTION_INSUFFICIENT,
            ConfidenceLevel.INSUFFICIENT: cls.HIDE,
        }[level]


class EvidenceFamily(StrEnum):
    """Independent evidence families for multi-indicator validation."""

    BEHAVIORAL = "behavioral"
    """Accumulated indicator score crosses a threshold."""

    STRUCTURAL = "structural"
    """Related functional sub-domains are out of range."""

    IMPACT = "impact"
    """Self-reported difficulty/impairment items score high."""


class RecommendationTier(StrEnum):
    """Outcome tier of multi-indicator validation."""

    CLINICAL_ASSESSMENT = "clinical_assessment"
    MONITOR = "monitor"
    NO_INDICATION = "no_indication"

    @classmethod
    def from_validated_count(cls, count: int, *, min_families: int = 2) -> RecommendationTier:
        """Determine tier from the number of corroborating families.

        Args:
            count: Number of evidence families that were met.
            min_families: Families required for a valid pattern.

        Returns:
            The recommendation tier.
        """
        if count >= min_families:
            return cls.CLINICAL_ASSESSMENT
        if count >= 1:
            return cls.MONITOR
        return cls.NO_INDICATION


class CriterionOp(StrEnum):
    """Comparison used by a classifier criterion."""

    MIN = "min"
    """Satisfied when value >= threshold."""

    MAX = "max"
    """Satisfied when value <= threshold."""


class AgeDeviation(StrEnum):
    """Standing of a trait score against its age cohort."""

    HIGHLY_DELAYED = "highly_delayed"
    DELAYED = "delayed"
    TYPICAL = "typical"
    ACCELERATED = "accelerated"
    HIGHLY_ACCELERATED = "highly_accelerated"

    @classmethod
    def from_z(cls, z: float, *, accelerated: float = 0.8, highly: float = 1.5) -> AgeDeviation:
        """Band a cohort z-score; the cutoffs are inclusive."""
        if z >= highly:
            return cls.HIGHLY_ACCELERATED
        if z >= accelerated:
            return cls.ACCELERATED
        if z <= -highly:
            return cls.HIGHLY_DELAYED
        if z <= -accelerated:
            return cls.DELAYED
        return cls.TYPICAL

    @property
    def is_ahead(self) -> bool:
        return self in (AgeDeviation.ACCELERATED, AgeDeviation.HIGHLY_ACCELERATED)

    @property
    def is_behind(self) -> bool:
        return self in (AgeDeviation.DELAYED, AgeDeviation.HIGHLY_DELAYED)


class MaturationPattern(StrEnum):
    """Overall development pattern across the normed traits."""

    EARLY_MATURATION = "early_maturation"
    EXTENDED_EXPLORATION = "extended_exploration"
    MIXED = "mixed"
    TYPICAL = "typical"

    @classmethod
    def from_counts(cls, ahead: int, behind: int, *, min_traits: int = 3) -> MaturationPattern:
        """Summarize how many traits run ahead of or behind the cohort."""
        if ahead >= min_traits:
            return cls.EARLY_MATURATION
        if behind >= min_traits:
            return cls.EXTENDED_EXPLORATION
        if ahead and behind:
            return cls.MIXED
        return cls.TYPICAL
