"""Tests for response payload canonicalization."""

from __future__ import annotations

from datetime import datetime

import pytest

from psyscore.domain.exceptions import ResponseSchemaError
from psyscore.domain.value_objects import ResponseRecord
from psyscore.services.responses import canonicalize_responses, parse_response

pytestmark = pytest.mark.unit


class TestParseResponse:
    """Single payload parsing."""

    @pytest.mark.parametrize(
        "payload",
        [
            {"item_id": "Q1", "raw_value": 4},
            {"itemId": "Q1", "value": 4},
            {"questionId": "Q1", "score": 4},
            {"question_id": "Q1", "answer": 4},
            {"id": "Q1", "response": 4},
            {"itemId": "Q1", "rawValue": 4},
        ],
    )
    def test_field_name_variants(self, payload: dict[str, object]) -> None:
        """Every known spelling maps onto the same record."""
        record = parse_response(payload)
        assert record.item_id == "Q1"
        assert record.raw_value == 4

    def test_full_payload(self) -> None:
        """All optional fields are carried across."""
        record = parse_response(
            {
                "questionId": "BASELINE_OPENNESS_3",
                "answer": "agree",
                "trait": "Openness",
                "reverseScored": True,
                "questionText": "I have a vivid imagination.",
                "answeredAt": "2024-03-01T10:00:00Z",
                "responseTimeMs": 1500,
                "sessionNote": "ignored",
            }
        )
        assert record.domain_hint == "openness"
        assert record.is_reverse_keyed is True
        assert record.item_text == "I have a vivid imagination."
        assert isinstance(record.timestamp, datetime)
        assert record.response_time_ms == 1500

    def test_integer_ids_coerced(self) -> None:
        """Numeric question banks are accepted."""
        assert parse_response({"questionId": 17, "value": 3}).item_id == "17"

    def test_facet_tag_casing(self) -> None:
        """Trait names are lowercased; facet names keep their casing."""
        payload = {"id": "Q1", "value": 3, "trait": "Extraversion.excitementSeeking"}
        record = parse_response(payload)
        assert record.domain_hint == "extraversion.excitementSeeking"

    def test_blank_tag_is_none(self) -> None:
        """An empty tag defers to the item-domain map."""
        assert parse_response({"id": "Q1", "value": 3, "trait": "  "}).domain_hint is None

    def test_unsupported_value_becomes_none(self) -> None:
        """Nested values cannot be scored and are imputed later."""
        assert parse_response({"id": "Q1", "value": {"a": 1}}).raw_value is None

    def test_missing_id(self) -> None:
        """A payload without an item id is a schema error."""
        with pytest.raises(ResponseSchemaError, match="Response #4"):
            parse_response({"value": 3}, index=4)

    def test_negative_response_time(self) -> None:
        """Response times must be non-negative."""
        with pytest.raises(ResponseSchemaError):
            parse_response({"id": "Q1", "value": 3, "responseTime": -5})

    def test_record_passthrough(self) -> None:
        """Canonical records are returned unchanged."""
        record = ResponseRecord(item_id="Q1", raw_value=2)
        assert parse_response(record) is record


class TestCanonicalizeResponses:
    """Session-level canonicalization."""

    def test_duplicates_keep_first(self) -> None:
        """Later answers to the same item are dropped and reported."""
        result = canonicalize_responses(
            [
                {"itemId": "Q1", "value": 2},
                {"itemId": "Q2", "value": 4},
                {"itemId": "Q1", "value": 5},
            ]
        )
        assert [r.item_id for r in result.records] == ["Q1", "Q2"]
        assert result.records[0].raw_value == 2
        assert result.duplicate_items == ("Q1",)

    def test_strict_raises(self) -> None:
        """Strict mode raises on the first malformed payload."""
        with pytest.raises(ResponseSchemaError, match="Response #1"):
            canonicalize_responses([{"itemId": "Q1", "value": 2}, {"value": 3}])

    def test_lenient_drops_malformed(self) -> None:
        """Lenient mode drops malformed payloads and records why."""
        result = canonicalize_responses(
            [{"itemId": "Q1", "value": 2}, {"value": 3}], strict=False
        )
        assert len(result.records) == 1
        assert len(result.rejected) == 1
        index, message = result.rejected[0]
        assert index == 1
        assert message.startswith("Response #1")

    def test_rejections_keep_payload_index(self) -> None:
        """Rejections are keyed by their position in the input."""
        result = canonicalize_responses(
            [
                {"itemId": "Q1", "value": 2},
                {"value": 3},
                {"score": 4},
                {"itemId": "Q2", "value": 1},
            ],
            strict=False,
        )
        assert [index for index, _ in result.rejected] == [1, 2]
        assert [r.item_id for r in result.records] == ["Q1", "Q2"]

    def test_order_preserved(self) -> None:
        """Records keep answer order."""
        payloads = [{"id": f"Q{i}", "value": 3} for i in range(5)]
        result = canonicalize_responses(payloads)
        assert [r.item_id for r in result.records] == [f"Q{i}" for i in range(5)]
