"""Domain accumulation and normalization.

Responses are attributed to domains in strict order of authority:

1. explicit domain/trait tag on the record (``trait``)
2. the static item-domain map (``domainMap``)
3. keyword match against the item text (``keywordFallback``, degraded)

Items that resolve to no domain, or to several equally, are dropped and
reported as unattributed. Each stage returns new immutable values.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

from psyscore.domain.enums import DomainStatus, NormalizationTarget, Provenance
from psyscore.domain.value_objects import Contribution, DomainScore, DomainTally
from psyscore.infrastructure.logging import get_logger
from psyscore.scoring.normalizer import normalize, rescale_to_percent, round_half_up

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from psyscore.domain.value_objects import ResponseRecord
    from psyscore.tables.loader import ScoringTables
    from psyscore.tables.models import DomainSpec

logger = get_logger(__name__)

ENDORSED = 100.0
NOT_ENDORSED = 0.0


@dataclass(frozen=True, slots=True)
class AccumulationResult:
    """Per-domain tallies for one session plus attribution diagnostics."""

    tallies: dict[str, DomainTally]
    unattributed_items: tuple[str, ...] = ()
    keyword_attributed_items: tuple[str, ...] = ()

    @property
    def contribution_count(self) -> int:
        return sum(t.item_count for t in self.tallies.values())


@lru_cache(maxsize=512)
def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    # Prefix match so stems like "impuls" catch "impulsive".
    return re.compile(r"\b" + re.escape(keyword))


def match_keywords(text: str, domains: Iterable[DomainSpec]) -> str | None:
    """Resolve item text to the single domain with the most keyword hits.

    Returns None when nothing matches or the best match is tied.
    """
    lowered = text.lower()
    hits: list[tuple[int, str]] = []
    for spec in domains:
        count = sum(1 for kw in spec.keywords if _keyword_pattern(kw).search(lowered))
        if count:
            hits.append((count, spec.name))
    if not hits:
        return None
    hits.sort(key=lambda h: h[0], reverse=True)
    if len(hits) > 1 and hits[0][0] == hits[1][0]:
        return None
    return hits[0][1]


def resolve_domain(
    record: ResponseRecord,
    tables: ScoringTables,
    *,
    enable_keyword_fallback: bool = True,
) -> tuple[str, Provenance] | None:
    """Resolve the domain of one response, or None if unattributable."""
    if record.domain_hint:
        return record.domain_hint, Provenance.TRAIT

    mapped = tables.item_index.get(record.item_id)
    if mapped is not None:
        return mapped[0], Provenance.DOMAIN_MAP

    if enable_keyword_fallback and record.item_text:
        domain = match_keywords(record.item_text, tables.item_domains.domains.values())
        if domain is not None:
            return domain, Provenance.KEYWORD_FALLBACK
    return None


def _is_reverse_keyed(record: ResponseRecord, tables: ScoringTables) -> bool:
    if record.is_reverse_keyed is not None:
        return record.is_reverse_keyed
    mapped = tables.item_index.get(record.item_id)
    return mapped[1].reverse if mapped is not None else False


def accumulate(
    responses: Sequence[ResponseRecord],
    tables: ScoringTables,
    *,
    scale_size: int | None = None,
    enable_keyword_fallback: bool = True,
) -> AccumulationResult:
    """Accumulate normalized responses per domain.

    Args:
        responses: Canonical response records for one session.
        tables: Scoring tables supplying the item-domain map.
        scale_size: Response scale size (defaults to the table's).
        enable_keyword_fallback: Allow degraded keyword attribution.

    Returns:
        AccumulationResult with one tally per domain that received items.
    """
    scale = scale_size or tables.scale_size
    grouped: dict[str, list[Contribution]] = {}
    unattributed: list[str] = []
    keyword_items: list[str] = []

    for record in responses:
        resolved = resolve_domain(
            record, tables, enable_keyword_fallback=enable_keyword_fallback
        )
        if resolved is None:
            unattributed.append(record.item_id)
            continue

        domain, provenance = resolved
        if provenance is Provenance.KEYWORD_FALLBACK:
            keyword_items.append(record.item_id)
            logger.warning(
                "Item attributed by keyword fallback",
                item_id=record.item_id,
                domain=domain,
            )

        spec = tables.domain_spec(domain)
        normalized = normalize(
            record.raw_value,
            is_reverse_keyed=_is_reverse_keyed(record, tables),
            scale_size=scale,
        )
        if normalized.imputed:
            logger.warning(
                "Unrecognized response value imputed to midpoint",
                item_id=record.item_id,
                domain=domain,
            )

        if spec.target is NormalizationTarget.BINARY:
            value = ENDORSED if normalized.score >= spec.endorse_threshold else NOT_ENDORSED
        else:
            value = normalized.score

        grouped.setdefault(domain, []).append(
            Contribution(
                item_id=record.item_id,
                domain=domain,
                provenance=provenance,
                ordinal=normalized.score,
                value=value,
                imputed=normalized.imputed,
            )
        )

    if unattributed:
        logger.warning(
            "Responses could not be attributed to any domain",
            count=len(unattributed),
            item_ids=unattributed,
        )

    tallies = {
        domain: DomainTally(
            domain=domain,
            raw_total=sum(c.value for c in contributions),
            item_count=len(contributions),
            contributions=tuple(contributions),
        )
        for domain, contributions in grouped.items()
    }
    return AccumulationResult(
        tallies=tallies,
        unattributed_items=tuple(unattributed),
        keyword_attributed_items=tuple(keyword_items),
    )


def normalize_tally(
    tally: DomainTally | None,
    spec: DomainSpec,
    *,
    scale_size: int,
) -> DomainScore:
    """Turn one domain tally into a DomainScore (without confidence).

    A missing or empty tally yields the explicit insufficient-data marker,
    never a numeric default.
    """
    if tally is None or tally.item_count == 0:
        return DomainScore.absent(spec.name)

    average = tally.raw_total / tally.item_count
    if spec.target is NormalizationTarget.BINARY:
        percent = average
    else:
        percent = rescale_to_percent(average, scale_size)
    normalized = min(max(round_half_up(percent), 0), 100)

    return DomainScore(
        domain=tally.domain,
        status=DomainStatus.SCORED,
        raw_total=tally.raw_total,
        item_count=tally.item_count,
        average=average,
        normalized_score=normalized,
        provenance=tally.provenance_counts,
        imputed_count=tally.imputed_count,
    )
