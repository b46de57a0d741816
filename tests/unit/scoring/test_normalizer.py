"""Tests for response normalization."""

from __future__ import annotations

import pytest

from psyscore.scoring.normalizer import midpoint, normalize, rescale_to_percent, round_half_up

pytestmark = pytest.mark.unit


class TestNumericValues:
    """Numeric raw values."""

    @pytest.mark.parametrize("value", [1, 2, 3, 4, 5])
    def test_passthrough(self, value: int) -> None:
        """In-range integers are kept as ordinals."""
        result = normalize(value)
        assert result.score == value
        assert not result.imputed
        assert not result.reversed

    @pytest.mark.parametrize("value", [1, 2, 3, 4, 5])
    def test_reverse_round_trip(self, value: int) -> None:
        """Reverse-keying v equals the plain score of 6 - v."""
        assert normalize(value, is_reverse_keyed=True).score == normalize(6 - value).score

    def test_reverse_on_seven_point_scale(self) -> None:
        """Reverse keying uses scale_size + 1."""
        assert normalize(2, is_reverse_keyed=True, scale_size=7).score == 6

    def test_out_of_range_clamped(self) -> None:
        """Values outside the scale are clamped, not rejected."""
        assert normalize(9).score == 5
        assert normalize(0).score == 1

    def test_numeric_string(self) -> None:
        """Numeric strings are parsed."""
        assert normalize(" 4 ").score == 4
        assert normalize("3.5").score == 3.5

    def test_non_finite_imputed(self) -> None:
        """NaN and infinity are unrecognized."""
        assert normalize(float("nan")).imputed
        assert normalize(float("inf")).imputed


class TestLabels:
    """Textual Likert labels."""

    @pytest.mark.parametrize(
        ("label", "expected"),
        [
            ("Strongly Disagree", 1),
            ("disagree", 2),
            ("Neutral", 3),
            ("neither agree nor disagree", 3),
            ("agree", 4),
            ("strongly_agree", 5),
            ("strongly-agree", 5),
            ("Never", 1),
            ("very often", 5),
            ("always", 5),
        ],
    )
    def test_label_ordinals(self, label: str, expected: int) -> None:
        """Labels map to 5-point ordinals regardless of case or separators."""
        assert normalize(label).score == expected

    def test_labels_rescale_to_other_scales(self) -> None:
        """On a 7-point scale, 'agree' (4 of 5) becomes 5.5."""
        assert normalize("agree", scale_size=7).score == pytest.approx(5.5)
        assert normalize("strongly agree", scale_size=7).score == 7

    def test_booleans(self) -> None:
        """True is the top of the scale, False the bottom."""
        assert normalize(True).score == 5
        assert normalize(False).score == 1


class TestImputation:
    """Missing and unrecognized values."""

    @pytest.mark.parametrize("value", [None, "", "maybe", "   "])
    def test_unrecognized_imputed_to_midpoint(self, value: object) -> None:
        """Unrecognized values use the midpoint and are flagged."""
        result = normalize(value)  # type: ignore[arg-type]
        assert result.score == 3
        assert result.imputed

    def test_imputed_reverse_stays_midpoint(self) -> None:
        """The midpoint is its own reverse."""
        result = normalize(None, is_reverse_keyed=True)
        assert result.score == 3
        assert result.imputed and result.reversed

    def test_midpoint_even_scale(self) -> None:
        """Even scales have a fractional midpoint."""
        assert midpoint(4) == 2.5

    def test_reject_degenerate_scale(self) -> None:
        """A scale needs at least two points."""
        with pytest.raises(ValueError, match="scale_size"):
            normalize(1, scale_size=1)


class TestRescaling:
    """Percent rescaling and rounding."""

    def test_rescale_endpoints(self) -> None:
        """1 maps to 0 and scale_size to 100."""
        assert rescale_to_percent(1, 5) == 0
        assert rescale_to_percent(5, 5) == 100
        assert rescale_to_percent(4.5, 5) == 87.5

    @pytest.mark.parametrize(("value", "expected"), [(87.5, 88), (86.5, 87), (0.5, 1), (12.49, 12)])
    def test_round_half_up(self, value: float, expected: int) -> None:
        """Halves round up, unlike banker's rounding."""
        assert round_half_up(value) == expected
