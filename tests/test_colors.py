"""Tests for typegauge.ui.colors – palette, color blending and timer color."""

from __future__ import annotations

import pytest

from typegauge.ui.colors import PassageColors, blend_hex, timer_color


# ===========================================================================
# PassageColors – constants exist
# ===========================================================================

class TestPassageColors:
    @pytest.mark.parametrize(
        "name",
        ["BG", "PRIMARY", "CORRECT", "WRONG", "CURRENT", "PENDING", "TIMER_CALM", "TIMER_URGENT"],
    )
    def test_is_hex(self, name: str):
        value = getattr(PassageColors, name)
        assert value.startswith("#")
        assert len(value) == 7


# ===========================================================================
# blend_hex
# ===========================================================================

class TestBlendHex:
    def test_t_zero_returns_a(self):
        assert blend_hex("#FF0000", "#0000FF", 0.0) == "#FF0000"

    def test_t_one_returns_b(self):
        assert blend_hex("#FF0000", "#0000FF", 1.0) == "#0000FF"

    def test_midpoint(self):
        result = blend_hex("#000000", "#FFFFFF", 0.5)
        assert result == "#7F7F7F"

    def test_clamped(self):
        assert blend_hex("#FF0000", "#0000FF", -1.0) == "#FF0000"
        assert blend_hex("#FF0000", "#0000FF", 2.0) == "#0000FF"

    def test_invalid_returns_a(self):
        assert blend_hex("FF0000", "#0000FF", 0.5) == "FF0000"
        assert blend_hex("#FF0000", "#FFF", 0.5) == "#FF0000"
        assert blend_hex("#GGHHII", "#000000", 0.5) == "#GGHHII"

    def test_whitespace_padding(self):
        assert blend_hex("  #FF0000  ", "  #0000FF  ", 0.0) == "#FF0000"


# ===========================================================================
# timer_color
# ===========================================================================

class TestTimerColor:
    def test_full_time_is_calm(self):
        assert timer_color(60, 60) == PassageColors.TIMER_CALM.upper()

    def test_no_time_is_urgent(self):
        assert timer_color(0, 60) == PassageColors.TIMER_URGENT.upper()

    def test_zero_total(self):
        assert timer_color(0, 0) == PassageColors.TIMER_URGENT
