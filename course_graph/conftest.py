import pytest

from course_graph.catalog import CourseCatalog
from course_graph.sample_courses import COURSE_RECORDS, CYCLE_RECORDS


@pytest.fixture
def catalog():
    return CourseCatalog.from_records(COURSE_RECORDS)


@pytest.fixture
def cycle_catalog():
    return CourseCatalog.from_records(CYCLE_RECORDS)
