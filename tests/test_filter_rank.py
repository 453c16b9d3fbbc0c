"""Unit tests for filtering and ranking."""
import random

import pytest

from courtscout.models import (
    AccessFilter,
    CourtType,
    CourtsBucket,
    FilterCriteria,
    SortKey,
)
from courtscout.services.filter_rank import apply, filter_records, matches, rank_records

from factories import annotate, make_venue


def ids(items):
    return [item.venue.id for item in items]


@pytest.fixture
def mixed_records():
    """A varied set covering every filter dimension."""
    return [
        annotate(make_venue(1, visited=1, distance_mi=4.0, rating_overall=8.0,
                            courts={"indoor": 4, "outdoor": 0}, access_type="paid",
                            skill_levels=["advanced"]), open_now=True),
        annotate(make_venue(2, visited=0, distance_mi=1.0, rating_overall=9.5,
                            courts={"indoor": 0, "outdoor": 2}, skill_levels="beginner"), open_now=False),
        annotate(make_venue(3, visited=0, distance_mi=None, rating_overall=None,
                            courts={"indoor": 1, "outdoor": 10}), open_now=True),
        annotate(make_venue(4, visited=1, distance_mi=0.5, rating_overall=0,
                            courts={"indoor": 0, "outdoor": 6}, access_type="unknown",
                            skill_levels='["pro","beginner"]'), open_now=False),
        annotate(make_venue(5, visited=0, distance_mi=2.5, rating_overall=6.0,
                            courts=None, access_type="public"), open_now=True),
    ]


class TestMatches:
    """Test individual filter criteria."""

    def test_default_criteria_match_everything(self, mixed_records):
        assert all(matches(item, FilterCriteria()) for item in mixed_records)

    def test_verified_only(self, mixed_records):
        assert ids(filter_records(mixed_records, FilterCriteria(verified_only=True))) == ["1", "4"]

    def test_open_now_only(self, mixed_records):
        assert ids(filter_records(mixed_records, FilterCriteria(open_now_only=True))) == ["1", "3", "5"]

    def test_access(self, mixed_records):
        assert ids(filter_records(mixed_records, FilterCriteria(access=AccessFilter.PAID))) == ["1"]
        assert ids(filter_records(mixed_records, FilterCriteria(access=AccessFilter.PUBLIC))) == ["2", "3", "5"]

    def test_court_type(self, mixed_records):
        assert ids(filter_records(mixed_records, FilterCriteria(court_type=CourtType.INDOOR))) == ["1", "3"]
        assert ids(filter_records(mixed_records, FilterCriteria(court_type=CourtType.OUTDOOR))) == ["2", "3", "4"]

    def test_courts_bucket(self, mixed_records):
        assert ids(filter_records(mixed_records, FilterCriteria(courts_bucket=CourtsBucket.MEDIUM))) == ["1"]
        assert ids(filter_records(mixed_records, FilterCriteria(courts_bucket=CourtsBucket.LARGE))) == ["4"]
        assert ids(filter_records(mixed_records, FilterCriteria(courts_bucket=CourtsBucket.XLARGE))) == ["3"]

    def test_skill_levels_match_any(self, mixed_records):
        criteria = FilterCriteria(skill_levels=["beginner", "advanced"])
        assert ids(filter_records(mixed_records, criteria)) == ["1", "2", "4"]

    def test_venue_without_skill_tags_excluded_when_filtering_by_skill(self, mixed_records):
        criteria = FilterCriteria(skill_levels=["pro"])
        assert ids(filter_records(mixed_records, criteria)) == ["4"]

    def test_criteria_are_conjunctive(self, mixed_records):
        criteria = FilterCriteria(open_now_only=True, court_type=CourtType.INDOOR, verified_only=True)
        assert ids(filter_records(mixed_records, criteria)) == ["1"]


class TestRanking:
    """Test ranking rules."""

    def test_distance_ranking(self, mixed_records):
        assert ids(rank_records(mixed_records, SortKey.DISTANCE)) == ["4", "1", "2", "5", "3"]

    def test_rating_ranking_missing_rating_below_zero(self, mixed_records):
        # Venue 4 has a real 0 rating; venue 3 has none
        assert ids(rank_records(mixed_records, SortKey.RATING)) == ["1", "4", "2", "5", "3"]

    def test_courts_ranking(self, mixed_records):
        assert ids(rank_records(mixed_records, SortKey.COURTS)) == ["4", "1", "3", "2", "5"]

    def test_accepts_string_sort_key(self, mixed_records):
        assert ids(rank_records(mixed_records, "rating")) == ids(rank_records(mixed_records, SortKey.RATING))

    def test_ties_keep_input_order(self):
        records = [annotate(make_venue(i, distance_mi=1.0)) for i in range(5)]
        assert ids(rank_records(records, SortKey.DISTANCE)) == ["0", "1", "2", "3", "4"]

    def test_input_is_not_modified(self, mixed_records):
        before = ids(mixed_records)
        apply(mixed_records, FilterCriteria(), SortKey.RATING)
        assert ids(mixed_records) == before


class TestPipelineProperties:
    """Properties that must hold for any record set and criteria."""

    @pytest.fixture
    def random_records(self):
        rng = random.Random(7)
        records = []
        for i in range(60):
            venue = make_venue(
                i,
                visited=rng.choice([0, 1]),
                distance_mi=rng.choice([None, round(rng.uniform(0, 50), 2)]),
                rating_overall=rng.choice([None, round(rng.uniform(0, 10), 1)]),
                courts={"indoor": rng.randint(0, 6), "outdoor": rng.randint(0, 8)},
                access_type=rng.choice(["public", "paid", None]),
                skill_levels=rng.sample(["beginner", "intermediate", "advanced", "pro"], rng.randint(0, 2)),
            )
            records.append(annotate(venue, open_now=rng.choice([True, False])))
        return records

    @pytest.fixture(
        params=[
            FilterCriteria(),
            FilterCriteria(open_now_only=True),
            FilterCriteria(court_type=CourtType.INDOOR, courts_bucket=CourtsBucket.MEDIUM),
            FilterCriteria(access=AccessFilter.PUBLIC, skill_levels="beginner,pro"),
            FilterCriteria(verified_only=True, court_type=CourtType.OUTDOOR),
        ]
    )
    def criteria(self, request):
        return request.param

    @pytest.mark.parametrize("sort_key", list(SortKey))
    def test_output_is_subset(self, random_records, criteria, sort_key):
        output = apply(random_records, criteria, sort_key)
        assert set(ids(output)) <= set(ids(random_records))
        assert len(output) == len(set(ids(output)))

    @pytest.mark.parametrize("sort_key", list(SortKey))
    def test_filtering_is_idempotent(self, random_records, criteria, sort_key):
        once = apply(random_records, criteria, sort_key)
        twice = apply(once, criteria, sort_key)
        assert ids(twice) == ids(once)

    @pytest.mark.parametrize("sort_key", list(SortKey))
    def test_verified_first(self, random_records, criteria, sort_key):
        flags = [item.venue.visited for item in apply(random_records, criteria, sort_key)]
        assert flags == sorted(flags, reverse=True)

    def test_missing_distance_last_within_group(self, random_records):
        output = apply(random_records, FilterCriteria(), SortKey.DISTANCE)
        for verified in (True, False):
            group = [item.venue.distance_mi for item in output if item.venue.visited is verified]
            known = [d for d in group if d is not None]
            assert group[: len(known)] == sorted(known)
            assert all(d is None for d in group[len(known):])
