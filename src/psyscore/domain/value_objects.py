"""Immutable value objects for the psyscore domain.

Value objects are immutable (frozen) dataclasses that represent domain
concepts without identity. Every pipeline stage returns new instances of
these types; nothing hands back a live accumulator.

All value objects use:
- frozen=True: Makes instances immutable
- slots=True: Optimizes memory usage
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from psyscore.domain.enums import (
    ConfidenceLevel,
    DomainStatus,
    EvidenceFamily,
    MaturationPattern,
    Provenance,
    RecommendationTier,
    ReportStatus,
)

if TYPE_CHECKING:
    from datetime import datetime

    from psyscore.domain.enums import AgeDeviation

RawValue = int | float | str | bool | None


@dataclass(frozen=True, slots=True)
class ResponseRecord:
    """One answered questionnaire item, in canonical form.

    Variant encodings are mapped onto this type at the boundary
    (see ``psyscore.services.responses``) before any scoring happens.
    """

    item_id: str
    """Item identifier; unique within a session."""

    raw_value: RawValue
    """Numeric score, textual Likert label, boolean, or None when unanswered."""

    domain_hint: str | None = None
    """Explicit domain/trait tag. Always wins over map or keyword attribution."""

    is_reverse_keyed: bool | None = None
    """Per-record reverse flag. None defers to the item-domain map."""

    timestamp: datetime | None = None
    """When the response was recorded."""

    item_text: str | None = None
    """Question wording; only used by the keyword fallback."""

    response_time_ms: int | None = None
    """Time taken to answer, if the collaborator recorded it."""

    def __post_init__(self) -> None:
        """Validate record data.

        Raises:
            ValueError: If item_id is empty or response time is negative.
        """
        if not self.item_id or not self.item_id.strip():
            raise ValueError("Response item_id cannot be empty")
        if self.response_time_ms is not None and self.response_time_ms < 0:
            raise ValueError(f"response_time_ms must be >= 0, got {self.response_time_ms}")


@dataclass(frozen=True, slots=True)
class NormalizedValue:
    """Result of normalizing a single raw response value."""

    score: float
    """Ordinal score on 1..scale_size, after reverse-keying."""

    imputed: bool = False
    """True when the raw value was missing/unrecognized and the midpoint was used."""

    reversed: bool = False
    """True when reverse-keying was applied."""

    def __post_init__(self) -> None:
        if self.score < 1:
            raise ValueError(f"Normalized score must be >= 1, got {self.score}")


@dataclass(frozen=True, slots=True)
class Contribution:
    """One response's contribution to a domain total."""

    item_id: str
    domain: str
    provenance: Provenance
    ordinal: float
    """Ordinal score (1..scale_size) after reverse-keying."""

    value: float
    """Amount added to the domain raw total (ordinal, or 0/100 for checklists)."""

    imputed: bool = False


@dataclass(frozen=True, slots=True)
class DomainTally:
    """Accumulated, not yet normalized, totals for one domain."""

    domain: str
    raw_total: float
    item_count: int
    contributions: tuple[Contribution, ...] = ()

    def __post_init__(self) -> None:
        if self.item_count != len(self.contributions):
            raise ValueError(
                f"item_count ({self.item_count}) must match contributions "
                f"({len(self.contributions)}) for {self.domain}"
            )

    @property
    def imputed_count(self) -> int:
        """Number of contributions that were imputed midpoints."""
        return sum(1 for c in self.contributions if c.imputed)

    @property
    def ordinals(self) -> tuple[float, ...]:
        """Per-item ordinal scores, in response order."""
        return tuple(c.ordinal for c in self.contributions)

    @property
    def genuine_ordinals(self) -> tuple[float, ...]:
        """Per-item ordinal scores excluding imputed values."""
        return tuple(c.ordinal for c in self.contributions if not c.imputed)

    @property
    def provenance_counts(self) -> dict[Provenance, int]:
        """Number of contributions per attribution provenance."""
        counts: dict[Provenance, int] = {}
        for c in self.contributions:
            counts[c.provenance] = counts.get(c.provenance, 0) + 1
        return counts


@dataclass(frozen=True, slots=True)
class ConfidenceInterval:
    """Bounded confidence band around a normalized domain score.

    ``sample_size_factor`` and ``variance_factor`` are the policy's own
    adjustment terms: the SEM multiplier and CV factor for trait domains,
    question and variance confidence for screening domains.
    """

    lower: int
    upper: int
    margin_of_error: float
    level: ConfidenceLevel
    sample_size_factor: float
    variance_factor: float
    confidence_pct: int
    """Nominal confidence percentage attached to the level."""

    status: ReportStatus
    """Instruction to the reporting layer."""

    policy: str
    """Name of the confidence policy that produced this interval."""

    score_factor: float | None = None
    """Score-band confidence (screening policy only)."""

    def __post_init__(self) -> None:
        """Validate interval bounds.

        Raises:
            ValueError: If bounds fall outside [0, 100] or are inverted.
        """
        if not 0 <= self.lower <= self.upper <= 100:
            raise ValueError(
                f"Interval bounds must satisfy 0 <= lower <= upper <= 100, "
                f"got [{self.lower}, {self.upper}]"
            )
        if self.margin_of_error < 0:
            raise ValueError(f"margin_of_error must be >= 0, got {self.margin_of_error}")

    def contains(self, score: float) -> bool:
        """Check whether a score lies inside the band."""
        return self.lower <= score <= self.upper


@dataclass(frozen=True, slots=True)
class DomainScore:
    """Normalized score for one domain.

    A domain with no contributing items is never given a number: it
    carries ``status=insufficient_data`` and ``normalized_score=None``.
    """

    domain: str
    status: DomainStatus
    raw_total: float
    item_count: int
    average: float | None
    normalized_score: int | None
    confidence: ConfidenceInterval | None = None
    provenance: dict[Provenance, int] = field(default_factory=dict)
    imputed_count: int = 0

    def __post_init__(self) -> None:
        """Enforce the scored/absent invariant.

        Raises:
            ValueError: If an absent domain carries a score, or a scored
                domain lacks one or falls outside its confidence band.
        """
        if self.item_count < 0:
            raise ValueError(f"item_count must be >= 0, got {self.item_count}")
        if self.item_count == 0:
            if self.normalized_score is not None or self.average is not None:
                raise ValueError(f"Domain {self.domain} has no items but carries a score")
            if self.status is not DomainStatus.INSUFFICIENT_DATA:
                raise ValueError(f"Domain {self.domain} has no items and must be insufficient_data")
            return
        if self.normalized_score is None:
            raise ValueError(f"Domain {self.domain} has items but no normalized score")
        if not 0 <= self.normalized_score <= 100:
            raise ValueError(f"normalized_score must be 0-100, got {self.normalized_score}")
        if self.status is not DomainStatus.SCORED:
            raise ValueError(f"Domain {self.domain} has items and must be scored")
        if self.confidence is not None and not self.confidence.contains(self.normalized_score):
            raise ValueError(f"Domain {self.domain} score lies outside its confidence interval")
        if self.imputed_count > self.item_count:
            raise ValueError("imputed_count cannot exceed item_count")

    @classmethod
    def absent(cls, domain: str) -> DomainScore:
        """Create the explicit insufficient-data marker for a domain."""
        return cls(
            domain=domain,
            status=DomainStatus.INSUFFICIENT_DATA,
            raw_total=0.0,
            item_count=0,
            average=None,
            normalized_score=None,
        )

    @property
    def is_absent(self) -> bool:
        """True when the domain received no data (distinct from a low score)."""
        return self.status is DomainStatus.INSUFFICIENT_DATA

    @property
    def confidence_level(self) -> ConfidenceLevel | None:
        """Categorical confidence, if an interval was computed."""
        return self.confidence.level if self.confidence is not None else None


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of multi-indicator validation for one clinical domain."""

    domain: str
    indicators_met: dict[EvidenceFamily, bool]
    validated_count: int
    valid: bool
    confidence: float
    """Share of evidence families that corroborate the pattern (0-1)."""

    recommendation_tier: RecommendationTier
    notes: tuple[str, ...] = ()
    """Human-readable reasons per family, including missing evidence."""

    def __post_init__(self) -> None:
        """Validate internal consistency of the gate.

        Raises:
            ValueError: If counts, validity and tier disagree.
        """
        met = sum(1 for v in self.indicators_met.values() if v)
        if met != self.validated_count:
            raise ValueError(
                f"validated_count ({self.validated_count}) does not match indicators ({met})"
            )
        if not 0 <= self.validated_count <= len(EvidenceFamily):
            raise ValueError(f"validated_count must be 0-3, got {self.validated_count}")
        if self.valid and self.validated_count < 2:
            raise ValueError("A pattern cannot be valid with fewer than two evidence families")
        if self.valid != (self.recommendation_tier is RecommendationTier.CLINICAL_ASSESSMENT):
            raise ValueError("Only valid patterns may recommend clinical_assessment")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be 0-1, got {self.confidence}")


@dataclass(frozen=True, slots=True)
class ArchetypeFit:
    """Fit of one score vector against one archetype."""

    archetype_name: str
    fit_score: float
    """Clamped fit on a 0-100 scale."""

    matched_criteria: tuple[str, ...] = ()
    meets_all_criteria: bool = False
    description: str = ""

    def __post_init__(self) -> None:
        if not 0.0 <= self.fit_score <= 100.0:
            raise ValueError(f"fit_score must be 0-100, got {self.fit_score}")


def is_hybrid_pair(top: float, second: float, margin: float) -> bool:
    """Return True when two fit scores are too close to pick one."""
    return (top - second) < margin


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """Sorted archetype fits with primary pick and hybrid detection."""

    classifier: str
    fits: tuple[ArchetypeFit, ...]
    closeness_margin: float = 15.0
    interpretation: str = ""
    dimensions: dict[str, float] = field(default_factory=dict)
    """Score vector the classifier actually evaluated."""

    missing_dimensions: tuple[str, ...] = ()
    """Dimensions the classifier needed but the vector lacked."""

    is_hybrid: bool = field(init=False)
    """True when the top two fits differ by less than closeness_margin."""

    def __post_init__(self) -> None:
        """Validate ordering and derive hybrid status.

        Note: Uses object.__setattr__ because the dataclass is frozen.
        """
        if not self.fits:
            raise ValueError(f"Classification {self.classifier} has no candidate fits")
        scores = [f.fit_score for f in self.fits]
        if scores != sorted(scores, reverse=True):
            raise ValueError("fits must be sorted by descending fit_score")
        hybrid = len(self.fits) > 1 and is_hybrid_pair(
            self.fits[0].fit_score, self.fits[1].fit_score, self.closeness_margin
        )
        object.__setattr__(self, "is_hybrid", hybrid)

    @property
    def primary(self) -> ArchetypeFit:
        """Top-ranked fit."""
        return self.fits[0]

    @property
    def primary_type(self) -> str:
        """Name of the top-ranked archetype."""
        return self.fits[0].archetype_name

    @property
    def secondary_type(self) -> str | None:
        """Runner-up archetype when the result is hybrid."""
        return self.fits[1].archetype_name if self.is_hybrid else None

    @property
    def is_low_confidence(self) -> bool:
        """True when even the best candidate misses some of its criteria."""
        return not self.fits[0].meets_all_criteria


@dataclass(frozen=True, slots=True)
class HonestyHumilityEstimate:
    """Deterministic HEXACO estimate derived from Big-Five scores.

    Facets without facet-level input are reported as None rather than
    filled with a placeholder.
    """

    honesty_humility: int
    emotionality: int | None
    facets: dict[str, int | None]
    method: str
    """``facet`` when facet domains fed the estimate, otherwise ``trait``."""

    def __post_init__(self) -> None:
        for name in ("honesty_humility", "emotionality"):
            value = getattr(self, name)
            if value is not None and not 0 <= value <= 100:
                raise ValueError(f"{name} must be 0-100, got {value}")

    @property
    def insufficient_facets(self) -> tuple[str, ...]:
        """Facets that could not be estimated."""
        return tuple(name for name, value in self.facets.items() if value is None)


@dataclass(frozen=True, slots=True)
class AgeNormScore:
    """One trait score placed within its age cohort."""

    domain: str
    score: float
    cohort_mean: float
    z_score: float
    percentile: int
    deviation: AgeDeviation

    def __post_init__(self) -> None:
        if not 0 <= self.percentile <= 100:
            raise ValueError(f"percentile must be 0-100, got {self.percentile}")


@dataclass(frozen=True, slots=True)
class AgeNormativeProfile:
    """Trait scores compared with age-matched norms."""

    age: float
    age_group: str
    scores: dict[str, AgeNormScore] = field(default_factory=dict)
    pattern: MaturationPattern = MaturationPattern.TYPICAL

    @property
    def ahead(self) -> tuple[str, ...]:
        """Traits above the cohort band."""
        return tuple(d for d, s in self.scores.items() if s.deviation.is_ahead)

    @property
    def behind(self) -> tuple[str, ...]:
        return tuple(d for d, s in self.scores.items() if s.deviation.is_behind)
