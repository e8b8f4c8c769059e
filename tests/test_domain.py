"""
Unit tests for the domain detector.
"""

import pytest

from knotcanvas.domain import DOMAIN_RULES, detect, is_untouched_interval, suggest


class TestDetect:
    """Rule order and individual heuristics."""

    def test_trig(self):
        result = detect("sin(3*t)", "cos(t)", "0")
        assert (result.t_min, result.t_max) == ("0", "2*pi")

    def test_affine(self):
        result = detect("2*t", "3*t", "0")
        assert (result.t_min, result.t_max) == ("0", "10")

    @pytest.mark.parametrize("formulas", [
        ("exp(t)", "t", "0"),
        ("t^2", "t", "0"),
        ("pow(t, 2)", "0", "0"),
    ])
    def test_exponential(self, formulas):
        result = detect(*formulas)
        assert (result.t_min, result.t_max) == ("0", "5")

    def test_trig_takes_priority(self):
        result = detect("exp(t)*cos(t)", "t", "0")
        assert result.t_max == "2*pi"

    @pytest.mark.parametrize("formulas", [
        ("t", "-t + 1", "0"),
        ("t/2 - 3", "0.5*t", "4"),
        ("T", "2T", "1"),
    ])
    def test_affine_variants(self, formulas):
        assert detect(*formulas).t_max == "10"

    def test_non_affine_falls_back(self):
        result = detect("t*t", "0", "0")
        assert (result.t_min, result.t_max) == ("0", "2*pi")

    def test_case_insensitive(self):
        assert detect("SIN(t)", "0", "0").t_max == "2*pi"
        assert detect("EXP(t)", "0", "0").t_max == "5"

    def test_reason_is_given(self):
        for formulas in (("sin(t)", "0", "0"), ("exp(t)", "0", "0"), ("t", "0", "0"), ("t*t", "0", "0")):
            assert detect(*formulas).reason

    def test_rules_are_ordered(self):
        assert [s.t_max for _, s in DOMAIN_RULES] == ["2*pi", "5", "10"]


class TestUntouchedInterval:
    """The detector never overrides a customized interval."""

    @pytest.mark.parametrize("t_min, t_max", [("0", "2*pi"), ("", ""), (" 0 ", "2*pi "), ("", "2*pi")])
    def test_untouched(self, t_min, t_max):
        assert is_untouched_interval(t_min, t_max)

    @pytest.mark.parametrize("t_min, t_max", [("0", "10"), ("1", "2*pi"), ("0", "2 * pi"), ("-pi", "pi")])
    def test_touched(self, t_min, t_max):
        assert not is_untouched_interval(t_min, t_max)

    def test_suggest_respects_custom_interval(self):
        assert suggest("2*t", "3*t", "0", "0", "4") is None

    def test_suggest_on_untouched(self):
        assert suggest("2*t", "3*t", "0", "0", "2*pi").t_max == "10"
