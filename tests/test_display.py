"""Unit tests for display formatting helpers."""
import pytest

from courtscout.handlers.display import (
    access_text,
    active_filters_label,
    clean_phone_digits,
    courts_text,
    format_rating,
    format_time,
    full_address,
    hours_rows,
    normalize_website,
    rating_segments,
    skill_levels_text,
)
from courtscout.models import (
    AccessFilter,
    AccessType,
    CourtType,
    Courts,
    CourtsBucket,
    FilterCriteria,
    Schedule,
    SkillLevel,
    SortKey,
)

from factories import make_venue


class TestRatings:
    """Test rating presentation."""

    def test_half_segment(self):
        segments = rating_segments(7.6)
        assert segments.full == 7
        assert segments.half is True
        assert segments.label == "7.6/10"

    def test_no_half_segment(self):
        segments = rating_segments("7.4")
        assert segments.full == 7
        assert segments.half is False

    def test_clamped(self):
        assert rating_segments(12).full == 10
        assert rating_segments(-1).full == 0

    def test_missing(self):
        assert rating_segments(None) is None
        assert rating_segments("n/a") is None
        assert format_rating(None) == "—"
        assert format_rating(9) == "9.0/10"


class TestTimes:
    """Test wall-clock formatting."""

    @pytest.mark.parametrize(
        "raw,text",
        [
            ("13:05:00", "1:05 PM"),
            ("00:30", "12:30 AM"),
            ("12:00", "12:00 PM"),
            ("9:15", "9:15 AM"),
            ("noon", "noon"),
            (None, ""),
        ],
    )
    def test_format_time(self, raw, text):
        assert format_time(raw) == text

    def test_hours_rows(self):
        schedule = Schedule.model_validate(
            {
                "mon": {"open": "06:00", "close": "22:00"},
                "tue": {"open": "07:00"},
                "wed": {"close": "21:30"},
            }
        )

        rows = hours_rows(schedule, today="tue")

        assert [row.label for row in rows] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert rows[0].text == "6:00 AM – 10:00 PM"
        assert rows[1].text == "7:00 AM – ?"
        assert rows[2].text == "? – 9:30 PM"
        assert rows[3].text == "Closed"
        assert [row.day for row in rows if row.is_today] == ["tue"]

    def test_hours_rows_without_schedule(self):
        assert {row.text for row in hours_rows(None)} == {"Closed"}


class TestVenueText:
    """Test venue field formatting."""

    def test_courts_text(self):
        assert courts_text(Courts(indoor=2, outdoor=4)) == "2 indoor • 4 outdoor"
        assert courts_text(Courts(outdoor=3)) == "3 outdoor"
        assert courts_text(Courts()) == "—"

    def test_access_text(self):
        assert access_text(AccessType.PUBLIC) == "Public"
        assert access_text(AccessType.PAID) == "Membership/Paid"
        assert access_text(AccessType.UNKNOWN) == "—"

    def test_skill_levels_in_vocabulary_order(self):
        levels = frozenset({SkillLevel.PRO, SkillLevel.BEGINNER})
        assert skill_levels_text(levels) == "Beginner (<3.0) • Pro (5.0+)"

    def test_full_address_skips_blanks(self):
        venue = make_venue(address="1 Main St", city="Springfield", state=None, zip=12345)
        assert full_address(venue) == "1 Main St, Springfield, 12345"

    def test_normalize_website(self):
        assert normalize_website("courts.example.com") == "https://courts.example.com"
        assert normalize_website("HTTP://courts.example.com") == "HTTP://courts.example.com"
        assert normalize_website("  ") == ""

    def test_clean_phone_digits(self):
        assert clean_phone_digits("+1 (215) 555-0100") == "+12155550100"
        assert clean_phone_digits("(215) 555-0100 ext+2") == "21555501002"
        assert clean_phone_digits(None) == ""


class TestActiveFiltersLabel:
    """Test the one-line filter summary."""

    def test_defaults_are_empty(self):
        assert active_filters_label(FilterCriteria()) == ""

    def test_every_filter(self):
        criteria = FilterCriteria(
            access=AccessFilter.PUBLIC,
            court_type=CourtType.INDOOR,
            courts_bucket=CourtsBucket.MEDIUM,
            open_now_only=True,
            verified_only=True,
            skill_levels=["advanced", "beginner"],
        )

        label = active_filters_label(criteria, SortKey.RATING)

        assert label == (
            "Free/Public • Indoor • Courts: 3-5 • Open now • Verified only • "
            "Skill: Beginner (<3.0), Advanced (4.0+) • Sort: Rating"
        )
