"""Domain-specific exceptions for psyscore.

This module defines a hierarchical exception system for domain errors:

    DomainError (base)
    ├── TableError
    ├── ResponseError
    │   └── ResponseSchemaError
    ├── ScoringError
    │   └── InsufficientDataError
    ├── ClassificationError
    └── UnknownPolicyError
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for domain errors.

    All domain-specific exceptions inherit from this class so that a
    single except clause can degrade one report field without aborting
    the whole report.
    """


class TableError(DomainError):
    """Raised when a declarative configuration table is missing or malformed."""

    def __init__(self, table: str, message: str) -> None:
        """Initialize with the offending table name.

        Args:
            table: Table file name (e.g. ``item_domains.yaml``).
            message: Description of the problem.
        """
        self.table = table
        super().__init__(f"{table}: {message}")


class ResponseError(DomainError):
    """Errors related to incoming response records."""


class ResponseSchemaError(ResponseError):
    """Raised when a response payload cannot be mapped to a canonical record."""

    def __init__(self, index: int, message: str) -> None:
        """Initialize with the payload position.

        Args:
            index: Position of the payload in the submitted list.
            message: Description of the schema violation.
        """
        self.index = index
        super().__init__(f"Response #{index}: {message}")


class ScoringError(DomainError):
    """Errors while turning accumulated responses into scores."""


class InsufficientDataError(ScoringError):
    """Raised when an operation requires data that a domain does not have.

    Absent domains are reported as ``insufficient_data``; this exception is
    used only where a caller asks for a value that cannot exist.
    """

    def __init__(self, domain: str, message: str = "no contributing items") -> None:
        self.domain = domain
        super().__init__(f"{domain}: {message}")


class ClassificationError(DomainError):
    """Raised when a classifier cannot run over the given score vector."""

    def __init__(self, classifier: str, message: str) -> None:
        self.classifier = classifier
        super().__init__(f"{classifier}: {message}")


class UnknownPolicyError(DomainError):
    """Raised when a domain names a confidence policy that is not registered."""
