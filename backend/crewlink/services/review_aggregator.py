"""
Per-employer review summary.

`count` covers every review of the employer. The average only covers
reviews carrying a positive rating (accommodation rating preferred over the
overall rating); with none, the average is None rather than 0.
"""
from dataclasses import dataclass
from typing import Iterable, Optional
from uuid import UUID

from crewlink.models.review import ReviewRecord


@dataclass(frozen=True)
class ReviewAggregate:
    count: int = 0
    average_rating: Optional[float] = None


NO_REVIEWS = ReviewAggregate()


def _effective_rating(review: ReviewRecord) -> Optional[float]:
    value = review.accommodation_rating
    if value is None:
        value = review.rating
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if value > 0 else None


def aggregate_reviews(reviews: Iterable[ReviewRecord], employer_id: UUID) -> ReviewAggregate:
    count = 0
    ratings: list[float] = []
    for review in reviews:
        if str(review.employer_id) != str(employer_id):
            continue
        count += 1
        rating = _effective_rating(review)
        if rating is not None:
            ratings.append(rating)
    
    average = sum(ratings) / len(ratings) if ratings else None
    return ReviewAggregate(count=count, average_rating=average)


def aggregate_by_employer(
    reviews: Iterable[ReviewRecord],
    employer_ids: Iterable[UUID],
) -> dict[str, ReviewAggregate]:
    """Aggregate for each employer id, keyed by its string form."""
    reviews = list(reviews)
    return {
        str(employer_id): aggregate_reviews(reviews, employer_id)
        for employer_id in employer_ids
    }
