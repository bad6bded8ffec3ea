"""
Course schemas for Deepmetric.
"""

from enum import Enum
from typing import List, Optional
from pydantic import Field, field_validator

from .base import CamelModel


class CourseLevel(str, Enum):
    """Difficulty levels for courses."""
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class CourseBase(CamelModel):
    """Editable course fields."""
    title: str
    description: str = ""  # Rich text (HTML)
    instructor: str = ""
    duration: str = ""
    level: CourseLevel = CourseLevel.BEGINNER
    price: float = Field(0, ge=0)  # In GHC
    tags: List[str] = Field(default_factory=list)
    image: str = ""
    requirements: Optional[List[str]] = None

    @field_validator("tags", "requirements", mode="before")
    @classmethod
    def strip_blank_entries(cls, v):
        if isinstance(v, str):
            v = v.split(",")
        if isinstance(v, list):
            return [item.strip() for item in v if isinstance(item, str) and item.strip()]
        return v


class Course(CourseBase):
    """A catalog entry."""
    id: str

    def __repr__(self) -> str:
        return f"<Course(id='{self.id}', title='{self.title}')>"


class CourseCreate(CourseBase):
    """Payload for creating a course; the id is generated when omitted."""
    id: Optional[str] = None


class CourseUpdate(CourseBase):
    """Payload for replacing a course in place."""
    pass
