"""Tests for the weekly theme catalog."""
from __future__ import annotations

from practice_quiz.themes import WEEKS_OFFERED, all_themes, get_theme, theme_for_week


class TestThemes:
    def test_catalog(self):
        ids = [t.id for t in all_themes()]
        assert ids == [
            "taylor-swift", "kpop-demon", "labubu-forest",
            "space-adventure", "ocean-depths", "magical-castle",
        ]

    def test_every_theme_is_bilingual(self):
        for theme in all_themes():
            for text in (theme.description, theme.greeting, theme.motivational):
                assert text["en"] and text["de"]

    def test_get_theme(self):
        assert get_theme("ocean-depths").name == "Ocean Depths"
        assert get_theme("nope") is None

    def test_weekly_rotation(self):
        assert theme_for_week(1).id == "taylor-swift"
        assert theme_for_week(6).id == "magical-castle"
        assert theme_for_week(7).id == "taylor-swift"
        assert theme_for_week(WEEKS_OFFERED).id == "magical-castle"

    def test_to_dict(self):
        d = get_theme("space-adventure").to_dict()
        assert d["emoji"] == "\U0001F680"
        assert d["colors"]["primary"] == "#3498DB"
