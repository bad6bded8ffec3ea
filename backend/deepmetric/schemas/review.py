"""
Review schemas for Deepmetric.
"""

from typing import List, Optional
from pydantic import Field

from .base import CamelModel


class Review(CamelModel):
    """A rating and comment left by a user on a course. Immutable."""
    id: str
    course_id: str
    user_id: str
    user_name: str
    rating: int
    comment: str = ""
    created_at: str


class ReviewCreate(CamelModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""


class ReviewStats(CamelModel):
    """Average rating and review count; average is None when unrated."""
    average: Optional[float] = None
    count: int = 0


class CourseReviews(CamelModel):
    reviews: List[Review]
    stats: ReviewStats
    has_user_rated: bool = False
