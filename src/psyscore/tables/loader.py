"""Loading of the versioned YAML scoring tables.

The tables are process-wide immutable configuration. The packaged
defaults are parsed once and cached; pointing ``SCORING_TABLES_DIR`` (or
calling ``load_scoring_tables`` with an explicit directory) swaps in a
different table set without touching code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

import yaml
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from psyscore.domain.exceptions import TableError
from psyscore.infrastructure.logging import get_logger
from psyscore.tables.models import (
    ClassifierTable,
    ConfidenceTable,
    DomainSpec,
    ItemDomainTable,
    ItemSpec,
    ValidationTable,
)

if TYPE_CHECKING:
    from psyscore.config import ScoringSettings

logger = get_logger(__name__)

ITEM_DOMAINS_FILE = "item_domains.yaml"
CONFIDENCE_FILE = "confidence.yaml"
VALIDATION_FILE = "validation.yaml"
CLASSIFIERS_FILE = "classifiers.yaml"

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def default_tables_dir() -> Path:
    """Directory of the tables shipped inside the package."""
    return Path(__file__).resolve().parent.parent / "data" / "tables"


@dataclass(frozen=True, slots=True)
class ScoringTables:
    """All declarative tables needed by one scoring run."""

    item_domains: ItemDomainTable
    confidence: ConfidenceTable
    validation: ValidationTable
    classifiers: ClassifierTable
    source: Path | None = None

    item_index: dict[str, tuple[str, ItemSpec]] = field(init=False)
    """item_id -> (domain name, item spec)."""

    def __post_init__(self) -> None:
        """Build the item lookup and check cross-table references.

        Note: Uses object.__setattr__ because the dataclass is frozen.
        """
        index = {
            item.id: (name, item)
            for name, spec in self.item_domains.domains.items()
            for item in spec.items
        }
        object.__setattr__(self, "item_index", index)
        self._check_validation_references()
        self._check_count_references()

    def _check_validation_references(self) -> None:
        known = set(self.item_domains.domains)
        for clinical, rule in self.validation.domains.items():
            referenced = {rule.behavioral.domain, rule.impact.domain, *rule.structural.domains}
            missing = sorted(referenced - known)
            if missing:
                raise TableError(
                    VALIDATION_FILE,
                    f"{clinical} references unknown domains: {', '.join(missing)}",
                )

    def _check_count_references(self) -> None:
        known = set(self.item_domains.domains)
        for name, spec in self.classifiers.classifiers.items():
            for dimension, derived in spec.dimensions.items():
                if derived.count is None:
                    continue
                missing = sorted(set(derived.count.domains) - known)
                if missing:
                    raise TableError(
                        CLASSIFIERS_FILE,
                        f"{name}.{dimension} counts unknown domains: {', '.join(missing)}",
                    )

    @property
    def version(self) -> str:
        """Version tag of the table set.

        A single tag when every table agrees, otherwise the per-table tags
        joined with ``+`` in load order.
        """
        versions = (
            self.item_domains.version,
            self.confidence.version,
            self.validation.version,
            self.classifiers.version,
        )
        if len(set(versions)) == 1:
            return versions[0]
        return "+".join(versions)

    @property
    def scale_size(self) -> int:
        return self.item_domains.scale_size

    def domain_spec(self, domain: str) -> DomainSpec:
        """Spec for a domain; unmapped domains get trait defaults."""
        spec = self.item_domains.domains.get(domain)
        if spec is None:
            return DomainSpec(name=domain)
        return spec


def _read_table(directory: Path, filename: str, model: type[_ModelT]) -> _ModelT:
    path = directory / filename
    try:
        with path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise TableError(filename, f"not found in {directory}") from e
    except yaml.YAMLError as e:
        raise TableError(filename, f"malformed YAML: {e}") from e

    if not isinstance(data, dict):
        raise TableError(filename, "top level must be a mapping")
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise TableError(filename, str(e)) from e


def read_scoring_tables(directory: Path) -> ScoringTables:
    """Parse every table in ``directory`` (uncached).

    Raises:
        TableError: If any table is missing, malformed or inconsistent.
    """
    tables = ScoringTables(
        item_domains=_read_table(directory, ITEM_DOMAINS_FILE, ItemDomainTable),
        confidence=_read_table(directory, CONFIDENCE_FILE, ConfidenceTable),
        validation=_read_table(directory, VALIDATION_FILE, ValidationTable),
        classifiers=_read_table(directory, CLASSIFIERS_FILE, ClassifierTable),
        source=directory,
    )
    logger.info(
        "Scoring tables loaded",
        source=str(directory),
        version=tables.version,
        domains=len(tables.item_domains.domains),
        classifiers=len(tables.classifiers.classifiers),
    )
    return tables


@lru_cache(maxsize=8)
def _cached_tables(directory: Path) -> ScoringTables:
    return read_scoring_tables(directory)


def load_scoring_tables(
    directory: Path | None = None,
    *,
    settings: ScoringSettings | None = None,
) -> ScoringTables:
    """Load (and cache) the scoring tables.

    Resolution order: explicit ``directory``, then ``settings.tables_dir``,
    then the packaged defaults.
    """
    if directory is None and settings is not None:
        directory = settings.tables_dir
    return _cached_tables((directory or default_tables_dir()).resolve())


def clear_table_cache() -> None:
    """Forget cached tables so edited files are re-read on next load."""
    _cached_tables.cache_clear()
