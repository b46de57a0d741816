"""Pydantic schemas for the declarative scoring tables.

Each YAML table is parsed into one of these frozen models. Validation
happens once at load time so the pipeline can trust every constant it
reads afterwards.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from psyscore.domain.enums import CriterionOp, DomainClass, NormalizationTarget


class _Table(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# ---------------------------------------------------------------------------
# item_domains.yaml
# ---------------------------------------------------------------------------


class ItemSpec(_Table):
    """One item in a domain's ordered item list."""

    id: str = Field(min_length=1)
    reverse: bool = False


class DomainSpec(_Table):
    """Static description of one scorable domain."""

    name: str = ""
    domain_class: DomainClass = DomainClass.TRAIT
    target: NormalizationTarget = NormalizationTarget.CONTINUOUS
    confidence_policy: str | None = Field(
        default=None,
        description="Registered policy name; None uses the domain class default",
    )
    endorse_threshold: float = Field(
        default=4.0,
        ge=1.0,
        description="Ordinal at or above which a binary checklist item counts as endorsed",
    )
    items: tuple[ItemSpec, ...] = ()
    keywords: tuple[str, ...] = ()

    @field_validator("keywords")
    @classmethod
    def lowercase_keywords(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(k.strip().lower() for k in v if k.strip())

    @property
    def policy(self) -> str:
        """Effective confidence policy name."""
        return self.confidence_policy or self.domain_class.default_policy


class ItemDomainTable(_Table):
    """Parsed ``item_domains.yaml``."""

    version: str
    scale_size: int = Field(default=5, ge=2, le=11)
    domains: dict[str, DomainSpec]

    @model_validator(mode="before")
    @classmethod
    def inject_domain_names(cls, data: object) -> object:
        if isinstance(data, dict) and isinstance(data.get("domains"), dict):
            domains = {}
            for name, spec in data["domains"].items():
                spec = dict(spec or {})
                spec.setdefault("name", name)
                domains[name] = spec
            data = {**data, "domains": domains}
        return data

    @model_validator(mode="after")
    def check_unique_items(self) -> ItemDomainTable:
        """An item id may belong to at most one domain."""
        seen: dict[str, str] = {}
        for name, spec in self.domains.items():
            if spec.name != name:
                raise ValueError(f"Domain key {name!r} does not match name {spec.name!r}")
            for item in spec.items:
                if item.id in seen:
                    raise ValueError(
                        f"Item {item.id!r} is mapped to both {seen[item.id]!r} and {name!r}"
                    )
                seen[item.id] = name
        return self


# ---------------------------------------------------------------------------
# confidence.yaml
# ---------------------------------------------------------------------------


class StepRule(_Table):
    """``value`` applies when the measured quantity is at least ``min``."""

    min: float
    value: float


class AboveRule(_Table):
    """``value`` applies when the measured quantity is strictly above ``above``."""

    above: float
    value: float


class BandRule(_Table):
    """``value`` applies when the measured quantity lies within [low, high]."""

    low: float
    high: float
    value: float


class TraitLevelRule(_Table):
    level: Literal["high", "moderate", "low"]
    min_items: int = Field(ge=0)
    max_margin: float | None = None
    confidence_pct: int = Field(ge=0, le=100)


class SemPolicyTable(_Table):
    """Constants for the standard-error-of-measurement policy."""

    population_sd: float = Field(default=15.0, gt=0)
    z: float = Field(default=1.96, gt=0)
    default_reliability: float = Field(default=0.85, gt=0, lt=1)
    reliabilities: dict[str, float] = Field(default_factory=dict)
    sample_size_steps: tuple[StepRule, ...]
    min_items_for_variance: int = Field(default=3, ge=2)
    cv_steps: tuple[AboveRule, ...] = ()
    levels: tuple[TraitLevelRule, ...]
    fallback_confidence_pct: int = Field(default=50, ge=0, le=100)

    @field_validator("reliabilities")
    @classmethod
    def check_reliabilities(cls, v: dict[str, float]) -> dict[str, float]:
        for trait, r in v.items():
            if not 0 < r < 1:
                raise ValueError(f"Reliability for {trait} must be in (0, 1), got {r}")
        return v

    @field_validator("sample_size_steps")
    @classmethod
    def check_steps(cls, v: tuple[StepRule, ...]) -> tuple[StepRule, ...]:
        if not v or v[-1].min > 0:
            raise ValueError("sample_size_steps must end with a catch-all step (min: 0)")
        return v

    def reliability_for(self, domain: str) -> float:
        """Reliability coefficient for a trait (falls back to the default)."""
        return self.reliabilities.get(domain, self.default_reliability)


class ScreeningLevelRule(_Table):
    level: Literal["high", "moderate", "low"]
    min_overall: float = Field(ge=0, le=1)


class CompositeWeights(_Table):
    question: float = 0.5
    score: float = 0.3
    variance: float = 0.2

    @model_validator(mode="after")
    def check_sum(self) -> CompositeWeights:
        total = self.question + self.score + self.variance
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Composite weights must sum to 1.0, got {total}")
        return self


class ScreeningPolicyTable(_Table):
    """Constants for the weighted composite screening policy."""

    question_steps: tuple[StepRule, ...]
    score_bands: tuple[BandRule, ...] = ()
    min_items_for_variance: int = Field(default=3, ge=2)
    sd_steps: tuple[AboveRule, ...] = ()
    reference_scale_size: int = Field(default=5, ge=2)
    weights: CompositeWeights = Field(default_factory=CompositeWeights)
    base_margin: float = Field(default=12.0, gt=0)
    levels: tuple[ScreeningLevelRule, ...]

    @field_validator("question_steps")
    @classmethod
    def check_steps(cls, v: tuple[StepRule, ...]) -> tuple[StepRule, ...]:
        if not v or v[-1].min > 0:
            raise ValueError("question_steps must end with a catch-all step (min: 0)")
        return v


class ConfidenceTable(_Table):
    """Parsed ``confidence.yaml``."""

    version: str
    sem: SemPolicyTable
    screening: ScreeningPolicyTable


# ---------------------------------------------------------------------------
# validation.yaml
# ---------------------------------------------------------------------------


class BehavioralRule(_Table):
    domain: str
    threshold: float = Field(ge=0, le=100)


class StructuralRule(_Table):
    domains: tuple[str, ...] = Field(min_length=2)
    cutoff: float = Field(ge=0, le=100)
    direction: Literal["below", "above"] = "below"
    min_count: int = Field(default=2, ge=2)


class ImpactRule(_Table):
    domain: str
    high_ordinal: float = Field(default=4.0, ge=1)
    min_count: int = Field(default=2, ge=2)


class ValidationRuleSpec(_Table):
    """Evidence-family rules for one clinically framed domain."""

    label: str = ""
    behavioral: BehavioralRule
    structural: StructuralRule
    impact: ImpactRule


class ValidationTable(_Table):
    """Parsed ``validation.yaml``."""

    version: str
    min_families: int = Field(default=2, ge=2, le=3)
    domains: dict[str, ValidationRuleSpec]


# ---------------------------------------------------------------------------
# classifiers.yaml
# ---------------------------------------------------------------------------


class CriterionSpec(_Table):
    """One weighted threshold criterion."""

    dimension: str
    op: CriterionOp
    threshold: float
    weight: float = Field(gt=0)
    penalty_rate: float = Field(default=0.0, ge=0)
    label: str | None = None

    @property
    def description(self) -> str:
        symbol = ">=" if self.op is CriterionOp.MIN else "<="
        return self.label or f"{self.dimension} {symbol} {self.threshold:g}"


class ArchetypeSpec(_Table):
    description: str = ""
    criteria: tuple[CriterionSpec, ...] = Field(min_length=1)


class CountRule(_Table):
    """Number of ``domains`` scoring at or above ``cutoff``."""

    domains: tuple[str, ...] = Field(min_length=1)
    cutoff: float = Field(ge=0, le=100)


class DerivedDimensionSpec(_Table):
    """Weighted blend of domain scores; negative weights use ``100 - score``.

    ``facet_weights`` take precedence when any of their facet domains is
    scored; otherwise the trait-level ``weights`` are used. ``count``
    replaces the blend with a criterion count.
    """

    weights: dict[str, float] = Field(default_factory=dict)
    facet_weights: dict[str, float] = Field(default_factory=dict)
    count: CountRule | None = None

    @model_validator(mode="after")
    def check_sources(self) -> DerivedDimensionSpec:
        if self.count is not None:
            if self.weights or self.facet_weights:
                raise ValueError("A count dimension cannot also carry weights")
            return self
        if not self.weights and not self.facet_weights:
            raise ValueError("A derived dimension needs weights, facet_weights or count")
        for source, w in {**self.weights, **self.facet_weights}.items():
            if w == 0:
                raise ValueError(f"Weight for {source} must be non-zero")
        return self


class OctantSpec(_Table):
    code: str
    label: str
    angle: float = Field(ge=0, lt=360)
    description: str = ""


class CircumplexSpec(_Table):
    """Geometry for the interpersonal circumplex classifier."""

    x: str
    y: str
    center: float = 50.0
    intensity_radius: float = Field(default=20.0, gt=0)
    min_radius: float = Field(default=10.0, ge=0)
    octants: tuple[OctantSpec, ...] = Field(min_length=2)


class ClassifierSpec(_Table):
    """One classifier: its input dimensions and candidate archetypes."""

    kind: Literal["criteria", "circumplex"] = "criteria"
    label: str = ""
    closeness_margin: float | None = Field(default=None, gt=0)
    dimensions: dict[str, DerivedDimensionSpec] = Field(default_factory=dict)
    archetypes: dict[str, ArchetypeSpec] = Field(default_factory=dict)
    circumplex: CircumplexSpec | None = None
    hybrid_interpretations: dict[str, str] = Field(default_factory=dict)
    fallback_interpretation: str = (
        "Shows characteristics of both {primary} and {secondary} types."
    )

    @model_validator(mode="after")
    def check_kind(self) -> ClassifierSpec:
        if self.kind == "criteria" and len(self.archetypes) < 1:
            raise ValueError("criteria classifiers need at least one archetype")
        if self.kind == "circumplex" and self.circumplex is None:
            raise ValueError("circumplex classifiers need a circumplex block")
        return self


class TraitNorm(_Table):
    mean: float = Field(ge=0, le=100)
    sd: float = Field(gt=0)


class AgeGroupSpec(_Table):
    """Trait norms for one age cohort; ``max_age`` None means open-ended."""

    label: str
    min_age: int = Field(ge=0)
    max_age: int | None = None
    norms: dict[str, TraitNorm] = Field(min_length=1)

    @model_validator(mode="after")
    def check_range(self) -> AgeGroupSpec:
        if self.max_age is not None and self.max_age < self.min_age:
            raise ValueError(f"Age group {self.label}: max_age below min_age")
        return self

    def contains(self, age: float) -> bool:
        return age >= self.min_age and (self.max_age is None or age < self.max_age + 1)


class AgeNormTable(_Table):
    """Age-cohort norms and the z cutoffs for deviation bands."""

    accelerated_z: float = Field(default=0.8, gt=0)
    highly_accelerated_z: float = Field(default=1.5, gt=0)
    pattern_min_traits: int = Field(default=3, ge=1)
    groups: tuple[AgeGroupSpec, ...] = Field(min_length=1)

    @model_validator(mode="after")
    def check_groups(self) -> AgeNormTable:
        if self.highly_accelerated_z < self.accelerated_z:
            raise ValueError("highly_accelerated_z must not be below accelerated_z")
        ordered = sorted(self.groups, key=lambda g: g.min_age)
        for lower, upper in zip(ordered, ordered[1:], strict=False):
            if lower.max_age is None or lower.max_age >= upper.min_age:
                raise ValueError(f"Age groups {lower.label} and {upper.label} overlap")
        return self

    def group_for(self, age: float) -> AgeGroupSpec | None:
        """Cohort containing ``age``, or None when no group covers it."""
        return next((g for g in self.groups if g.contains(age)), None)


class ClassifierTable(_Table):
    """Parsed ``classifiers.yaml``."""

    version: str
    closeness_margin: float = Field(default=15.0, gt=0)
    low_fit_threshold: float = Field(default=30.0, ge=0, le=100)
    classifiers: dict[str, ClassifierSpec]
    age_norms: AgeNormTable | None = None
