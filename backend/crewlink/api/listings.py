"""
Listings API endpoints.
Public job board: visible postings joined with employer, lodging and review data.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from crewlink.config import settings
from crewlink.database import get_db
from crewlink.schemas.listing import (
    ListingItemResponse,
    ListingResponse,
    PaginationResponse,
    RegionOptionsResponse,
    ReviewSummary,
)
from crewlink.services.listing import (
    ListingFilter,
    ListingItem,
    LodgingFilter,
    build_listing,
    build_region_options,
)
from crewlink.services.stores import SqlAlchemyStore

logger = logging.getLogger(__name__)
router = APIRouter()


def _to_response(item: ListingItem) -> ListingItemResponse:
    posting = item.posting
    region = item.parsed_region
    return ListingItemResponse(
        id=posting.id,
        employer_id=str(posting.employer_id),
        employer_name=item.employer_name,
        title=posting.title,
        description=posting.description,
        location=posting.location,
        salary_min=posting.salary_min,
        salary_max=posting.salary_max,
        salary_unit=posting.salary_unit,
        created_at=posting.created_at,
        region=item.region,
        province=region.province,
        district=region.district,
        lodging_provided=item.lodging_provided,
        facilities=sorted(item.facilities),
        reviews=ReviewSummary(
            count=item.reviews.count,
            average_rating=item.reviews.average_rating,
        ),
    )


@router.get("/", response_model=ListingResponse)
async def list_postings(
    search: str = Query("", description="Substring of title, employer name or description"),
    province: str = Query("", description="Province, e.g. 강원도"),
    district: str = Query("", description="District within the province, e.g. 평창군"),
    lodging: LodgingFilter = Query(LodgingFilter.ANY, description="any | provided | not-provided"),
    facility: str = Query("", description="Required lodging facility tag"),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    """
    List visible postings, newest first, filtered and paginated.
    
    Postings whose employer, lodging or review data cannot be loaded are
    still listed with those fields empty.
    """
    filters = ListingFilter(
        search_term=search,
        province=province,
        district=district,
        lodging=lodging,
        facility=facility,
    )
    result = await build_listing(
        SqlAlchemyStore(db),
        filters,
        page=page,
        limit=limit or settings.listing_page_size,
    )
    
    pagination = result.pagination
    return ListingResponse(
        items=[_to_response(item) for item in result.data],
        pagination=PaginationResponse(
            current_page=pagination.current_page,
            total_pages=pagination.total_pages,
            total_items=pagination.total_items,
            has_next=pagination.has_next,
            has_prev=pagination.has_prev,
        ),
    )


@router.get("/regions", response_model=RegionOptionsResponse)
async def list_regions(
    province: str = Query("", description="Return districts of this province"),
    db: AsyncSession = Depends(get_db)
):
    """Province options across employers, and district options for `province`."""
    options = await build_region_options(SqlAlchemyStore(db), province)
    return RegionOptionsResponse(provinces=options.provinces, districts=options.districts)
