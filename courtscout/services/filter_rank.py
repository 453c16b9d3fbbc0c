"""Filtering and ranking of annotated venues."""
import logging
import math
from typing import Callable, Iterable

from courtscout.models import (
    AccessFilter,
    AnnotatedVenue,
    CourtType,
    CourtsBucket,
    FilterCriteria,
    SortKey,
)

logger = logging.getLogger(__name__)


def matches(item: AnnotatedVenue, criteria: FilterCriteria) -> bool:
    """Whether a venue satisfies every enabled criterion."""
    venue = item.venue

    if criteria.verified_only and not venue.visited:
        return False

    if criteria.open_now_only and not item.open_now:
        return False

    if criteria.access != AccessFilter.ANY and venue.access_type.value != criteria.access.value:
        return False

    if criteria.court_type == CourtType.INDOOR and venue.courts.indoor <= 0:
        return False
    if criteria.court_type == CourtType.OUTDOOR and venue.courts.outdoor <= 0:
        return False

    if criteria.courts_bucket != CourtsBucket.ANY and not criteria.courts_bucket.contains(
        item.total_courts
    ):
        return False

    # Skill tags are OR-ed: one shared tag is enough
    if criteria.skill_levels and criteria.skill_levels.isdisjoint(venue.skill_levels):
        return False

    return True


def filter_records(
    records: Iterable[AnnotatedVenue], criteria: FilterCriteria
) -> list[AnnotatedVenue]:
    """Keep the records matching all criteria, preserving input order."""
    return [item for item in records if matches(item, criteria)]


def _distance_key(item: AnnotatedVenue) -> float:
    distance = item.venue.distance_mi
    return math.inf if distance is None else distance


def _rating_key(item: AnnotatedVenue) -> float:
    # Missing ratings rank below every real rating, including 0
    rating = item.venue.rating_overall
    return math.inf if rating is None else -rating


def _courts_key(item: AnnotatedVenue) -> int:
    return -item.total_courts


_SORT_KEYS: dict[SortKey, Callable[[AnnotatedVenue], float]] = {
    SortKey.DISTANCE: _distance_key,
    SortKey.RATING: _rating_key,
    SortKey.COURTS: _courts_key,
}


def rank_records(
    records: Iterable[AnnotatedVenue], sort_key: SortKey
) -> list[AnnotatedVenue]:
    """Verified venues first, then the rest; each group ordered by sort_key.

    The verified-first partition is fixed and is never overridden by the sort
    key. sorted() is stable, so ties keep their input order.
    """
    key = _SORT_KEYS[SortKey(sort_key)]
    verified: list[AnnotatedVenue] = []
    others: list[AnnotatedVenue] = []
    for item in records:
        (verified if item.venue.visited else others).append(item)
    return sorted(verified, key=key) + sorted(others, key=key)


def apply(
    records: Iterable[AnnotatedVenue],
    criteria: FilterCriteria,
    sort_key: SortKey = SortKey.DISTANCE,
) -> list[AnnotatedVenue]:
    """Filter then rank. Pure and deterministic.

    Args:
        records: Annotated venues from the current fetch
        criteria: Filter constraints (conjunction)
        sort_key: Ordering applied within the verified and unverified groups

    Returns:
        New list; the input is not modified
    """
    records = list(records)
    ranked = rank_records(filter_records(records, criteria), sort_key)
    logger.debug(
        f"[FilterRankPipeline] {len(ranked)}/{len(records)} venues match, "
        f"sort={SortKey(sort_key).value}"
    )
    return ranked
