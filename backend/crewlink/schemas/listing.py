"""Listing-related Pydantic schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class PaginationResponse(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    has_next: bool
    has_prev: bool


class ReviewSummary(BaseModel):
    count: int
    average_rating: Optional[float] = None  # None = no rating yet


class ListingItemResponse(BaseModel):
    """A visible posting joined with employer, lodging and review data."""
    id: int
    employer_id: str
    employer_name: Optional[str] = None
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    salary_unit: Optional[str] = None
    created_at: Optional[datetime] = None
    region: Optional[str] = None
    province: str = ""
    district: str = ""
    lodging_provided: bool
    facilities: list[str]
    reviews: ReviewSummary


class ListingResponse(BaseModel):
    items: list[ListingItemResponse]
    pagination: PaginationResponse


class RegionOptionsResponse(BaseModel):
    provinces: list[str]
    districts: list[str]
