"""Multi-indicator validation (>= 2 of 3 evidence families)."""

from psyscore.validation.multi_indicator import DomainEvidence, collect_evidence, validate

__all__ = ["DomainEvidence", "collect_evidence", "validate"]
