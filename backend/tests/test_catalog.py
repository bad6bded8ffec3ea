"""
Tests for the course catalog and reviews.
"""

import pytest
from pydantic import ValidationError

from deepmetric.core.storage import COURSES_KEY
from deepmetric.schemas.course import CourseCreate, CourseLevel, CourseUpdate
from deepmetric.schemas.review import ReviewCreate
from deepmetric.services.catalog import CatalogStore, DEFAULT_COURSES, DuplicateCourseError


def new_course(**overrides) -> CourseCreate:
    data = {
        "title": "SQL for Analysts",
        "description": "<p>Joins, window functions and <em>CTEs</em>.</p>",
        "instructor": "Kojo Addo",
        "duration": "4 weeks",
        "level": "Intermediate",
        "price": 700,
        "tags": ["SQL", " ", "Databases"]
    }
    data.update(overrides)
    return CourseCreate(**data)


class TestCatalog:
    def test_default_catalog_is_seeded(self, catalog):
        assert [c.id for c in catalog.courses] == [c.id for c in DEFAULT_COURSES]

    def test_create_generates_id_and_strips_blank_tags(self, catalog, store):
        course = catalog.create_course(new_course())

        assert course.id
        assert course.tags == ["SQL", "Databases"]
        assert CatalogStore(store).get_course(course.id) == course

    def test_create_with_taken_id_fails(self, catalog):
        with pytest.raises(DuplicateCourseError):
            catalog.create_course(new_course(id="1"))

    def test_comma_separated_tags_are_split(self):
        assert new_course(tags="SQL, Databases,").tags == ["SQL", "Databases"]

    def test_negative_price_is_rejected(self):
        with pytest.raises(ValidationError):
            new_course(price=-5)

    def test_update_replaces_course_in_place(self, catalog, store):
        data = new_course().model_dump(exclude={"id"})
        data["title"] = "Renamed"
        updated = catalog.update_course("2", CourseUpdate(**data))

        assert updated.id == "2"
        ids = [c.id for c in CatalogStore(store).courses]
        assert ids == ["1", "2", "3", "4"]
        assert CatalogStore(store).get_course("2").title == "Renamed"

    def test_update_unknown_course(self, catalog):
        assert catalog.update_course("nope", CourseUpdate(title="x")) is None

    def test_delete(self, catalog, store):
        assert catalog.delete_course("3")
        assert not catalog.delete_course("3")
        assert CatalogStore(store).get_course("3") is None

    def test_emptied_catalog_stays_empty(self, catalog, store):
        for course_id in ["1", "2", "3", "4"]:
            catalog.delete_course(course_id)

        assert store.exists(COURSES_KEY)
        assert CatalogStore(store).courses == []

    def test_filters(self, catalog):
        assert [c.id for c in catalog.list_courses(level=CourseLevel.ADVANCED)] == ["3"]
        assert [c.id for c in catalog.list_courses(tag="python")] == ["2", "3"]
        assert [c.id for c in catalog.list_courses(search="PANDAS")] == ["2"]
        assert catalog.list_courses(search="quantum") == []


class TestReviews:
    def test_stats_without_reviews(self, reviews):
        stats = reviews.review_stats("1")

        assert stats.average is None
        assert stats.count == 0

    def test_average_rating(self, reviews, store):
        reviews.submit_review("u1", "Ama", "1", 5, "Great")
        reviews.submit_review("u2", "Kofi", "1", 4)
        reviews.submit_review("u2", "Kofi", "2", 1)

        stats = reviews.review_stats("1")
        assert stats.average == 4.5
        assert stats.count == 2
        assert len(reviews.reviews_for("2")) == 1

    def test_repeat_reviews_are_kept(self, reviews):
        reviews.submit_review("u1", "Ama", "1", 2)
        reviews.submit_review("u1", "Ama", "1", 4)

        assert reviews.review_stats("1").count == 2
        assert reviews.has_user_rated("u1", "1")
        assert not reviews.has_user_rated("u1", "2")

    def test_rating_bounds(self):
        with pytest.raises(ValidationError):
            ReviewCreate(rating=0)
        with pytest.raises(ValidationError):
            ReviewCreate(rating=6)
