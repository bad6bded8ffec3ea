"""
Catalog and review store for Deepmetric.

Holds the course list and the review list. Both are loaded from storage on
first use and written back on every change.
"""

from datetime import datetime, timezone
from typing import List, Optional
import logging
import uuid

from deepmetric.core.storage import KeyValueStore, COURSES_KEY, REVIEWS_KEY
from deepmetric.schemas.course import Course, CourseCreate, CourseLevel, CourseUpdate
from deepmetric.schemas.review import Review, ReviewStats
from deepmetric.utils.text import normalize_tag, strip_html


logger = logging.getLogger(__name__)


DEFAULT_COURSES: List[Course] = [
    Course(
        id="1",
        title="Data Analytics Fundamentals",
        description="<p>Learn to collect, clean and summarize data with spreadsheets and SQL.</p>",
        instructor="Dr. Kwame Mensah",
        duration="6 weeks",
        level=CourseLevel.BEGINNER,
        price=1200,
        tags=["Data Analysis", "Excel", "SQL"],
        image="https://images.unsplash.com/photo-1551288049-bebda4e38f71",
        requirements=["Complete all weekly quizzes", "Submit the final dashboard project"]
    ),
    Course(
        id="2",
        title="Python for Data Science",
        description="<p>Use <strong>pandas</strong>, NumPy and matplotlib to explore real datasets.</p>",
        instructor="Abena Owusu",
        duration="8 weeks",
        level=CourseLevel.INTERMEDIATE,
        price=1800,
        tags=["Python", "Pandas", "Data Science"],
        image="https://images.unsplash.com/photo-1526379095098-d400fd0bf935"
    ),
    Course(
        id="3",
        title="Machine Learning in Practice",
        description="<p>Build, evaluate and deploy supervised learning models.</p>",
        instructor="Dr. Yaw Boateng",
        duration="10 weeks",
        level=CourseLevel.ADVANCED,
        price=2500,
        tags=["Machine Learning", "Python", "scikit-learn"],
        image="https://images.unsplash.com/photo-1555949963-aa79dcee981c",
        requirements=["Capstone model with a written evaluation report"]
    ),
    Course(
        id="4",
        title="Business Intelligence with Power BI",
        description="<p>Design interactive reports and KPIs for decision makers.</p>",
        instructor="Efua Asante",
        duration="5 weeks",
        level=CourseLevel.BEGINNER,
        price=950,
        tags=["Power BI", "Business Intelligence", "Visualization"],
        image="https://images.unsplash.com/photo-1460925895917-afdab827c52f"
    ),
]


class DuplicateCourseError(ValueError):
    """A course with the same id already exists."""

    def __init__(self, course_id: str):
        super().__init__(f"Course {course_id} already exists")
        self.course_id = course_id


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class CatalogStore:
    """
    The course catalog. Only admins change it; edits overwrite by id.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._courses: Optional[List[Course]] = None

    @property
    def courses(self) -> List[Course]:
        if self._courses is None:
            records = self.store.get(COURSES_KEY, default=[])
            self._courses = [Course.model_validate(record) for record in records]
        return self._courses

    def _save(self) -> None:
        self.store.set(COURSES_KEY, [course.to_record() for course in self.courses])

    def list_courses(
        self,
        level: Optional[CourseLevel] = None,
        tag: Optional[str] = None,
        search: Optional[str] = None
    ) -> List[Course]:
        """
        List courses in catalog order with optional filtering.

        Args:
            level: Only courses at this level
            tag: Only courses carrying this tag (case-insensitive)
            search: Case-insensitive match on title, description or tags

        Returns:
            List[Course]: Matching courses
        """
        courses = self.courses

        if level:
            courses = [c for c in courses if c.level == level]

        if tag:
            wanted = normalize_tag(tag)
            courses = [c for c in courses if wanted in {normalize_tag(t) for t in c.tags}]

        if search:
            term = search.strip().lower()
            courses = [
                c for c in courses
                if term in c.title.lower()
                or term in strip_html(c.description).lower()
                or any(term in t.lower() for t in c.tags)
            ]

        return list(courses)

    def get_course(self, course_id: str) -> Optional[Course]:
        return next((c for c in self.courses if c.id == course_id), None)

    def create_course(self, data: CourseCreate) -> Course:
        """
        Append a course to the catalog.

        Raises:
            DuplicateCourseError: If the id is already taken
        """
        course_id = data.id or uuid.uuid4().hex
        if self.get_course(course_id) is not None:
            raise DuplicateCourseError(course_id)

        course = Course(**data.model_dump(exclude={"id"}), id=course_id)
        self.courses.append(course)
        self._save()
        logger.info(f"Course created: {course.id} ({course.title})")
        return course

    def update_course(self, course_id: str, data: CourseUpdate) -> Optional[Course]:
        """Replace the course with the given id; None if there is none."""
        existing = self.get_course(course_id)
        if existing is None:
            return None

        course = Course(**data.model_dump(), id=course_id)
        self._courses = [course if c.id == course_id else c for c in self.courses]
        self._save()
        logger.info(f"Course updated: {course.id} ({course.title})")
        return course

    def delete_course(self, course_id: str) -> bool:
        """
        Remove a course from the catalog.

        User records that reference it keep their ids.
        """
        remaining = [c for c in self.courses if c.id != course_id]
        if len(remaining) == len(self.courses):
            return False

        self._courses = remaining
        self._save()
        logger.info(f"Course deleted: {course_id}")
        return True


class ReviewStore:
    """
    Append-only list of course reviews.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._reviews: Optional[List[Review]] = None

    @property
    def reviews(self) -> List[Review]:
        if self._reviews is None:
            records = self.store.get(REVIEWS_KEY, default=[])
            self._reviews = [Review.model_validate(record) for record in records]
        return self._reviews

    def submit_review(
        self,
        user_id: str,
        user_name: str,
        course_id: str,
        rating: int,
        comment: str = ""
    ) -> Review:
        """
        Append a review.

        The rating range is checked by the caller. Earlier reviews by the
        same user for the same course are kept.
        """
        review = Review(
            id=uuid.uuid4().hex,
            course_id=course_id,
            user_id=user_id,
            user_name=user_name,
            rating=rating,
            comment=comment,
            created_at=_timestamp()
        )
        self.reviews.append(review)
        self.store.set(REVIEWS_KEY, [r.to_record() for r in self.reviews])
        logger.info(f"Review {review.id} submitted for course {course_id} by user {user_id}")
        return review

    def reviews_for(self, course_id: str) -> List[Review]:
        return [r for r in self.reviews if r.course_id == course_id]

    def review_stats(self, course_id: str) -> ReviewStats:
        """Average rating and count; the average is None with no reviews."""
        ratings = [r.rating for r in self.reviews_for(course_id)]
        if not ratings:
            return ReviewStats(average=None, count=0)
        return ReviewStats(average=sum(ratings) / len(ratings), count=len(ratings))

    def has_user_rated(self, user_id: str, course_id: str) -> bool:
        return any(r.course_id == course_id and r.user_id == user_id for r in self.reviews)
