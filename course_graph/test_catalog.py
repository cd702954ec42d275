"""Tests for loading, querying and building the course catalog."""

import json
import sqlite3

import pytest

from course_graph.catalog import (
    CatalogUnavailableError,
    CourseCatalog,
    build_database,
    load_catalog,
)
from course_graph.sample_courses import COURSE_RECORDS


@pytest.fixture
def courses_json(tmp_path):
    path = tmp_path / "all_courses.json"
    path.write_text(json.dumps(COURSE_RECORDS), encoding="utf-8")
    return path


class TestCourseRecords:

    def test_blank_fields_become_none(self):
        catalog = CourseCatalog.from_records([
            {"code": "CSC108H1", "title": "Intro", "prerequisites": "  ", "hours": ""},
        ])
        course = catalog.get_course("CSC108H1")
        assert course.prerequisites is None
        assert course.hours is None
        assert course.exclusion is None

    def test_partially_filled_columns_load_as_none(self):
        catalog = CourseCatalog.from_records([
            {"code": "DDD100H1"},
            {"code": "CCC100H1", "title": "Second", "prerequisites": "DDD100H1"},
        ])
        course = catalog.get_course("DDD100H1")
        assert course.prerequisites is None
        assert course.title is None
        assert catalog.get_course("CCC100H1").prerequisites == "DDD100H1"
        assert [c.title for c in catalog.list_courses()] == ["Second", None]

    def test_partially_filled_columns_survive_database_round_trip(self, tmp_path):
        json_path = tmp_path / "all_courses.json"
        json_path.write_text(json.dumps([
            {"code": "DDD100H1"},
            {"code": "CCC100H1", "prerequisites": "DDD100H1"},
        ]), encoding="utf-8")
        db_path = tmp_path / "courses.db"
        build_database(json_path, db_path, verbose=False)

        for catalog in [load_catalog(json_path), load_catalog(db_path)]:
            assert catalog.get_course("DDD100H1").prerequisites is None
            assert catalog.get_course("CCC100H1").prerequisites == "DDD100H1"

    def test_codes_are_upper_cased_and_first_duplicate_kept(self):
        catalog = CourseCatalog.from_records([
            {"code": "csc108h1", "title": "First"},
            {"code": "CSC108H1", "title": "Second"},
            {"title": "No code"},
        ])
        assert len(catalog) == 1
        assert catalog.get_course("CSC108H1").title == "First"

    def test_unknown_fields_are_ignored(self):
        catalog = CourseCatalog.from_records([{"code": "CSC108H1", "campus": "St. George"}])
        assert catalog.get_course("CSC108H1").code == "CSC108H1"

    def test_requirement_text_joins_prerequisites_and_corequisites(self):
        catalog = CourseCatalog.from_records([
            {"code": "PHY131H1", "prerequisites": "MAT135H1", "corequisites": "MAT136H1"},
        ])
        assert catalog.get_course("PHY131H1").requirement_text == "MAT135H1 MAT136H1"


class TestCatalogQueries:

    def test_get_course(self, catalog):
        assert catalog.get_course("CSC236H1").title == "Introduction to the Theory of Computation"
        assert catalog.get_course("ZZZ999H1") is None
        assert "CSC236H1" in catalog

    def test_get_all_courses_keeps_catalog_order(self, catalog):
        codes = [c.code for c in catalog.get_all_courses()]
        assert codes == [r["code"] for r in COURSE_RECORDS]

    def test_list_courses_sorted(self, catalog):
        codes = [c.code for c in catalog.list_courses()]
        assert codes == sorted(codes)
        assert codes[0] == "AAA100H1"

    def test_search_by_code_and_title(self, catalog):
        assert [c.code for c in catalog.search_courses("csc36")] == ["CSC369H1"]
        assert [c.code for c in catalog.search_courses("operating")] == ["CSC369H1", "CSC469H1"]
        assert len(catalog.search_courses("CSC", limit=3)) == 3
        assert catalog.search_courses("   ") == []

    def test_statistics(self, catalog):
        stats = catalog.get_statistics()
        assert stats["total_courses"] == len(COURSE_RECORDS)
        assert stats["courses_with_prerequisites"] == 8
        assert stats["courses_with_exclusions"] == 2
        assert stats["total_subjects"] == 3


class TestCatalogSources:

    def test_from_json(self, courses_json):
        catalog = CourseCatalog.from_json(courses_json)
        assert len(catalog) == len(COURSE_RECORDS)
        assert catalog.get_course("CSC148H1").prerequisites == "CSC108H1"

    def test_missing_json(self, tmp_path):
        with pytest.raises(CatalogUnavailableError):
            CourseCatalog.from_json(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CatalogUnavailableError):
            CourseCatalog.from_json(path)

    def test_missing_database(self, tmp_path):
        with pytest.raises(CatalogUnavailableError):
            CourseCatalog.from_sqlite(tmp_path / "missing.db")

    def test_database_without_courses_table(self, tmp_path):
        path = tmp_path / "empty.db"
        sqlite3.connect(str(path)).close()
        with pytest.raises(CatalogUnavailableError):
            CourseCatalog.from_sqlite(path)


class TestBuildDatabase:

    def test_builds_readable_database(self, courses_json, tmp_path):
        db_path = tmp_path / "courses.db"
        count = build_database(courses_json, db_path, verbose=False)

        assert count == len(COURSE_RECORDS)
        catalog = load_catalog(db_path)
        assert len(catalog) == count
        assert catalog.get_course("CSC236H1").exclusion == "CSC240H1"
        assert catalog.get_course("CSC108H1").prerequisites is None

    def test_replaces_existing_database(self, courses_json, tmp_path):
        db_path = tmp_path / "courses.db"
        build_database(courses_json, db_path, verbose=False)
        build_database(courses_json, db_path, verbose=False)

        conn = sqlite3.connect(str(db_path))
        try:
            (rows,) = conn.execute("SELECT COUNT(*) FROM courses").fetchone()
        finally:
            conn.close()
        assert rows == len(COURSE_RECORDS)

    def test_load_catalog_dispatches_on_suffix(self, courses_json):
        assert len(load_catalog(courses_json)) == len(COURSE_RECORDS)
