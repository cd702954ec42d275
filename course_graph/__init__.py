"""
Course dependency graphs built from catalog requirement text
"""

from course_graph.catalog import (
    CatalogUnavailableError,
    CourseCatalog,
    CourseNotFoundError,
    build_database,
    load_catalog,
)
from course_graph.graph_core import (
    InvalidRelationTypeError,
    MatchStrategy,
    build_postrequisite_graph,
    build_prerequisite_graph,
    classify_relations,
    detect_cycles,
    extract_codes,
)

__version__ = "1.0.0"
