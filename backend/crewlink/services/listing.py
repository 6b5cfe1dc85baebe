"""
Listing aggregation.
Joins visible postings with employer, lodging and review data, then filters,
sorts and paginates the joined view.

The view is rebuilt from the stores on every query. Secondary records may be
stale or missing; a posting is never dropped because one of them is.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Iterable, Mapping, Optional, TypeVar

from crewlink.models.employer_profile import EmployerProfile
from crewlink.models.job_posting import JobPosting, PostingStatus
from crewlink.models.lodging_profile import LodgingProfile
from crewlink.services.errors import UpstreamReadError
from crewlink.services.pagination import Page, apply_pagination
from crewlink.services.region_parser import (
    Region,
    district_options,
    parse_region,
    province_options,
)
from crewlink.services.review_aggregator import (
    NO_REVIEWS,
    ReviewAggregate,
    aggregate_by_employer,
)
from crewlink.services.stores import ListingStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LodgingFilter(str, Enum):
    ANY = "any"
    PROVIDED = "provided"
    NOT_PROVIDED = "not-provided"


@dataclass(frozen=True)
class ListingFilter:
    """User-controlled filters. Every field at its default is a no-op."""
    search_term: str = ""
    province: str = ""
    district: str = ""
    lodging: LodgingFilter = LodgingFilter.ANY
    facility: str = ""


@dataclass(frozen=True)
class ListingItem:
    """A visible posting joined with its employer's secondary data."""
    posting: JobPosting
    employer_name: Optional[str] = None
    region: Optional[str] = None  # None when the employer profile is missing
    lodging_provided: bool = False
    facilities: frozenset[str] = field(default_factory=frozenset)
    reviews: ReviewAggregate = NO_REVIEWS

    @property
    def parsed_region(self) -> Region:
        return parse_region(self.region)


@dataclass(frozen=True)
class RegionOptions:
    provinces: list[str]
    districts: list[str]


def is_visible(posting: JobPosting) -> bool:
    """Approved, not hidden by moderation, not deactivated by the employer."""
    return (
        posting.status == PostingStatus.APPROVED.value
        and posting.is_hidden is not True
        and posting.is_active is not False
    )


def _created_sort_key(posting: JobPosting) -> datetime:
    created_at = posting.created_at
    if created_at is None:
        return datetime.min
    if created_at.tzinfo is not None:
        created_at = created_at.astimezone(timezone.utc).replace(tzinfo=None)
    return created_at


def newest_first(postings: Iterable[JobPosting]) -> list[JobPosting]:
    """Sort by creation time descending; postings without one go last."""
    return sorted(postings, key=_created_sort_key, reverse=True)


def visible_postings(postings: Iterable[JobPosting]) -> list[JobPosting]:
    return newest_first(p for p in postings if is_visible(p))


def join_posting(
    posting: JobPosting,
    employer: Optional[EmployerProfile],
    lodging: Optional[LodgingProfile],
    reviews: Optional[ReviewAggregate],
) -> ListingItem:
    employer_name = posting.employer_name or (employer.name if employer else None)
    return ListingItem(
        posting=posting,
        employer_name=employer_name,
        region=employer.region if employer else None,
        lodging_provided=bool(employer is not None and employer.dormitory) or lodging is not None,
        facilities=frozenset(employer.dormitory_facilities or []) if employer else frozenset(),
        reviews=reviews or NO_REVIEWS,
    )


def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle in (haystack or "").lower()


def matches_filter(item: ListingItem, filters: ListingFilter) -> bool:
    term = filters.search_term.strip().lower()
    if term and not (
        _contains(item.posting.title, term)
        or _contains(item.employer_name, term)
        or _contains(item.posting.description, term)
    ):
        return False

    if filters.province or filters.district:
        region = item.parsed_region
        if filters.province and region.province != filters.province:
            return False
        if filters.district and region.district != filters.district:
            return False

    if filters.lodging == LodgingFilter.PROVIDED and not item.lodging_provided:
        return False
    if filters.lodging == LodgingFilter.NOT_PROVIDED and item.lodging_provided:
        return False

    if filters.facility and filters.facility not in item.facilities:
        return False

    return True


def aggregate_listing(
    postings: Iterable[JobPosting],
    employers: Mapping[str, EmployerProfile],
    lodgings: Mapping[str, LodgingProfile],
    review_aggregates: Mapping[str, ReviewAggregate],
    filters: ListingFilter,
    page: int,
    limit: int,
) -> Page[ListingItem]:
    """
    Pure listing pipeline over snapshots of the four stores.

    Maps are keyed by str(employer_id). A missing key means "no data" for
    that field only.
    """
    items = []
    for posting in visible_postings(postings):
        key = str(posting.employer_id)
        item = join_posting(
            posting,
            employers.get(key),
            lodgings.get(key),
            review_aggregates.get(key),
        )
        if matches_filter(item, filters):
            items.append(item)

    return apply_pagination(items, page, limit)


async def _recover(description: str, read: Awaitable[T]) -> Optional[T]:
    try:
        return await read
    except UpstreamReadError as e:
        logger.warning(f"{description} unavailable, continuing without it: {e}")
        return None


async def _lookup_each(
    fetch: Callable[[str], Awaitable[Optional[T]]],
    employer_ids: list[str],
    description: str,
) -> dict[str, T]:
    results = await asyncio.gather(
        *(_recover(f"{description} {employer_id}", fetch(employer_id)) for employer_id in employer_ids)
    )
    return {
        employer_id: record
        for employer_id, record in zip(employer_ids, results)
        if record is not None
    }


async def _review_aggregates(store: ListingStore, employer_ids: list[str]) -> dict[str, ReviewAggregate]:
    reviews = await _recover("reviews", store.list_reviews())
    if reviews is None:
        return {}
    return aggregate_by_employer(reviews, employer_ids)


async def build_listing(
    store: ListingStore,
    filters: ListingFilter,
    page: int,
    limit: int,
) -> Page[ListingItem]:
    """
    Fetch, join, filter and paginate.

    A failure to list postings propagates; failures of secondary reads only
    blank the affected fields.
    """
    postings = await store.list_postings()
    employer_ids = list(dict.fromkeys(str(p.employer_id) for p in postings if is_visible(p)))

    employers, lodgings, review_aggregates = await asyncio.gather(
        _lookup_each(store.get_employer_profile, employer_ids, "employer profile"),
        _lookup_each(store.get_lodging_profile, employer_ids, "lodging profile"),
        _review_aggregates(store, employer_ids),
    )

    result = aggregate_listing(
        postings, employers, lodgings, review_aggregates, filters, page, limit
    )
    logger.info(
        f"Listing page {page}: {len(result.data)} of {result.pagination.total_items} postings",
        extra={"filters": filters.__dict__, "page": page, "limit": limit},
    )
    return result


async def build_region_options(store: ListingStore, province: str = "") -> RegionOptions:
    """Province choices across all employers, and districts of `province`."""
    profiles = await store.list_employer_profiles()
    regions = [profile.region for profile in profiles]
    return RegionOptions(
        provinces=province_options(regions),
        districts=district_options(regions, province) if province else [],
    )
