from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from stagelog.errors import DateParseFallback
from stagelog.services.date_normalizer import DateNormalizer, display_time

NOW = datetime(2026, 5, 1, 12, 30, 0)


@pytest.fixture
def normalizer() -> DateNormalizer:
    return DateNormalizer(clock=lambda: NOW, fallback_days=7, roll_forward=True)


class TestParsing:
    def test_abbreviated_month_with_time(self, normalizer):
        assert normalizer.normalize("JUN 10", "8:00 PM", 2026) == datetime(2026, 6, 10, 20, 0)

    def test_full_month_name(self, normalizer):
        assert normalizer.normalize("June 3", "9:15 am", 2026) == datetime(2026, 6, 3, 9, 15)

    def test_midnight_and_noon(self, normalizer):
        assert normalizer.normalize("JUN 10", "12:30 AM", 2026) == datetime(2026, 6, 10, 0, 30)
        assert normalizer.normalize("JUN 10", "12:00 PM", 2026) == datetime(2026, 6, 10, 12, 0)

    def test_missing_time_uses_default_show_time(self, normalizer):
        assert normalizer.normalize("SEPT 12", None, 2026) == datetime(2026, 9, 12, 19, 0)

    def test_year_defaults_to_clock(self, normalizer):
        assert normalizer.normalize("JUN 10", "8:00 PM") == datetime(2026, 6, 10, 20, 0)


class TestFallback:
    @pytest.mark.parametrize(
        "date_fragment, time_fragment",
        [
            ("", None),
            (None, "8:00 PM"),
            ("   ", "8:00 PM"),
            ("not a date", "8:00 PM"),
            ("FOO 10", "8:00 PM"),
            ("FEB 30", "8:00 PM"),
            ("JUN 10", "25:00 PM"),
            ("JUN 10", "eight-ish"),
        ],
    )
    def test_unparseable_falls_back_to_seven_days(self, normalizer, date_fragment, time_fragment):
        assert normalizer.normalize(date_fragment, time_fragment, 2026) == NOW + timedelta(days=7)

    def test_fallback_against_real_clock(self):
        before = datetime.now()
        result = DateNormalizer(fallback_days=7).normalize("", None)
        after = datetime.now()

        assert before + timedelta(days=7) <= result <= after + timedelta(days=7)

    def test_parse_raises_instead_of_falling_back(self, normalizer):
        with pytest.raises(DateParseFallback):
            normalizer.parse("FEB 30", "8:00 PM", 2026)

    def test_leap_day(self, normalizer):
        assert normalizer.normalize("FEB 29", "8:00 PM", 2028) == datetime(2028, 2, 29, 20, 0)
        assert normalizer.normalize("FEB 29", "8:00 PM", 2027) == NOW + timedelta(days=7)


class TestYearPolicy:
    def test_past_date_rolls_to_next_year(self):
        normalizer = DateNormalizer(clock=lambda: datetime(2026, 11, 15, 10, 0), roll_forward=True)
        assert normalizer.normalize("JAN 5", "7:00 PM") == datetime(2027, 1, 5, 19, 0)

    def test_yesterday_does_not_roll(self):
        normalizer = DateNormalizer(clock=lambda: datetime(2026, 6, 11, 10, 0), roll_forward=True)
        assert normalizer.normalize("JUN 10", "8:00 PM") == datetime(2026, 6, 10, 20, 0)

    def test_show_still_listed_after_it_happened_keeps_its_year(self):
        normalizer = DateNormalizer(clock=lambda: datetime(2026, 11, 15, 10, 0), roll_forward=True)
        assert normalizer.normalize("AUG 20", "8:00 PM") == datetime(2026, 8, 20, 20, 0)

    def test_same_card_resolves_identically_before_and_after_the_show(self):
        before = DateNormalizer(clock=lambda: datetime(2026, 6, 9, 10, 0), roll_forward=True)
        after = DateNormalizer(clock=lambda: datetime(2026, 6, 12, 10, 0), roll_forward=True)
        assert before.normalize("JUN 10", "8:00 PM") == after.normalize("JUN 10", "8:00 PM")

    def test_roll_forward_disabled(self):
        normalizer = DateNormalizer(clock=lambda: datetime(2026, 11, 15, 10, 0), roll_forward=False)
        assert normalizer.normalize("JAN 5", "7:00 PM") == datetime(2026, 1, 5, 19, 0)

    def test_explicit_reference_year_is_respected(self):
        normalizer = DateNormalizer(clock=lambda: datetime(2026, 11, 15, 10, 0), roll_forward=True)
        assert normalizer.normalize("JAN 5", "7:00 PM", 2026) == datetime(2026, 1, 5, 19, 0)


def test_display_time():
    assert display_time(datetime(2026, 6, 10, 20, 0)) == "8:00 PM"
    assert display_time(datetime(2026, 6, 10, 0, 5)) == "12:05 AM"
    assert display_time(datetime(2026, 6, 10, 12, 0)) == "12:00 PM"
