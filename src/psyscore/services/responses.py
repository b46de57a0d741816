"""Canonicalization of incoming response payloads.

Upstream collaborators deliver responses under many field names
(``questionId`` vs ``itemId``, ``value`` vs ``score`` vs ``answer``...).
All variants are mapped onto one ``ResponseRecord`` here, at the system
boundary, so no scoring stage has to defend against shape variance.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from psyscore.domain.exceptions import ResponseSchemaError
from psyscore.domain.value_objects import ResponseRecord
from psyscore.infrastructure.logging import get_logger

logger = get_logger(__name__)


class ResponsePayload(BaseModel):
    """Boundary schema accepting every known response field spelling."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    item_id: str = Field(
        validation_alias=AliasChoices("item_id", "itemId", "questionId", "question_id", "id"),
        min_length=1,
    )
    raw_value: int | float | str | bool | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "raw_value", "rawValue", "value", "score", "answer", "response"
        ),
    )
    domain_hint: str | None = Field(
        default=None,
        validation_alias=AliasChoices("domain_hint", "domainHint", "trait", "domain"),
    )
    is_reverse_keyed: bool | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "is_reverse_keyed", "isReverseKeyed", "reverse_scored", "reverseScored", "reverse"
        ),
    )
    timestamp: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("timestamp", "answeredAt", "answered_at", "createdAt"),
    )
    item_text: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "item_text", "itemText", "text", "questionText", "question_text"
        ),
    )
    response_time_ms: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("response_time_ms", "responseTimeMs", "responseTime"),
    )

    @field_validator("item_id", mode="before")
    @classmethod
    def coerce_item_id(cls, v: object) -> object:
        """Accept integer ids from numeric question banks."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("raw_value", mode="before")
    @classmethod
    def drop_unsupported_value(cls, v: object) -> object:
        """Unsupported encodings become None and are imputed downstream."""
        if v is None or isinstance(v, (bool, int, float, str)):
            return v
        return None

    @field_validator("domain_hint", mode="before")
    @classmethod
    def normalize_domain_hint(cls, v: object) -> object:
        """Lowercase trait tags; facet tags (``trait.facetName``) keep facet casing."""
        if not isinstance(v, str):
            return v
        v = v.strip()
        if not v:
            return None
        trait, sep, facet = v.partition(".")
        return f"{trait.lower()}{sep}{facet}"

    def to_record(self) -> ResponseRecord:
        return ResponseRecord(
            item_id=self.item_id,
            raw_value=self.raw_value,
            domain_hint=self.domain_hint,
            is_reverse_keyed=self.is_reverse_keyed,
            timestamp=self.timestamp,
            item_text=self.item_text,
            response_time_ms=self.response_time_ms,
        )


@dataclass(frozen=True, slots=True)
class CanonicalResponses:
    """Canonical records for one session plus boundary diagnostics."""

    records: tuple[ResponseRecord, ...]
    duplicate_items: tuple[str, ...] = ()
    rejected: tuple[tuple[int, str], ...] = ()
    """(payload index, schema error message) for payloads that were dropped."""


def parse_response(
    payload: Mapping[str, object] | ResponseRecord,
    index: int = 0,
) -> ResponseRecord:
    """Map one payload onto a ResponseRecord.

    Raises:
        ResponseSchemaError: If the payload has no usable item id or bad field types.
    """
    if isinstance(payload, ResponseRecord):
        return payload
    try:
        return ResponsePayload.model_validate(payload).to_record()
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'payload'}: {err['msg']}"
            for err in e.errors()
        )
        raise ResponseSchemaError(index, problems) from e


def canonicalize_responses(
    payloads: Iterable[Mapping[str, object] | ResponseRecord],
    *,
    strict: bool = True,
) -> CanonicalResponses:
    """Canonicalize a session's payloads.

    Duplicate item ids keep the first record (a recorded response is
    immutable); later duplicates are dropped and reported.

    Args:
        payloads: Raw mappings or already-canonical records.
        strict: Raise on the first schema error instead of dropping the payload.

    Raises:
        ResponseSchemaError: On a malformed payload when ``strict`` is True.
    """
    records: list[ResponseRecord] = []
    seen: set[str] = set()
    duplicates: list[str] = []
    rejected: list[tuple[int, str]] = []

    for index, payload in enumerate(payloads):
        try:
            record = parse_response(payload, index)
        except ResponseSchemaError as e:
            if strict:
                raise
            logger.warning("Response payload rejected", index=index, error=str(e))
            rejected.append((index, str(e)))
            continue
        if record.item_id in seen:
            duplicates.append(record.item_id)
            continue
        seen.add(record.item_id)
        records.append(record)

    if duplicates:
        logger.warning(
            "Duplicate responses ignored",
            count=len(duplicates),
            item_ids=duplicates,
        )
    return CanonicalResponses(
        records=tuple(records),
        duplicate_items=tuple(duplicates),
        rejected=tuple(rejected),
    )
