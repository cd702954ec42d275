"""
Course dependency graph construction.

Edges between courses are not stored anywhere; they are extracted from the
free-text prerequisite, corequisite and exclusion fields of each course.
"""

import re
from collections import deque
from enum import Enum
from typing import Dict, Iterable, List, Optional

from course_graph.catalog import CourseCatalog, CourseNotFoundError
from course_graph.models import (
    Course,
    CourseSummary,
    EdgeKind,
    GraphData,
    GraphEdge,
    GraphNode,
    NodeGroup,
    RelationGroups,
    RelationItem,
    RelationResult,
)

# ============================================================================
# CODE EXTRACTION
# ============================================================================

# CSC236H1, MAT137Y1
COURSE_CODE_PATTERN = re.compile(r"[A-Z]{3}\d{3}[HY][01]")

# Also accepts four-letter subjects; only relation classification uses it
RELAXED_CODE_PATTERN = re.compile(r"[A-Z]{3,4}\d{3}[HY][01]")


class MatchStrategy(str, Enum):
    SUBSTRING = "substring"
    TOKEN = "token"


def extract_codes(text: Optional[str], pattern: re.Pattern = COURSE_CODE_PATTERN) -> List[str]:
    """
    Find every course code in a block of requirement text.

    Args:
        text: Free text such as "CSC148H1, CSC165H1/ MAT102H1"
        pattern: Compiled course code pattern

    Returns:
        Matched codes left to right, duplicates included
    """
    if not text:
        return []
    return pattern.findall(text)


def mentions(text: Optional[str], code: str,
             strategy: MatchStrategy = MatchStrategy.SUBSTRING) -> bool:
    """
    Check whether requirement text refers to a course code.

    SUBSTRING is plain containment and also matches a code embedded in a
    longer token (e.g. "CSC108H1" inside "XCSC108H1"). TOKEN requires the code
    to stand on its own.
    """
    if not text or not code:
        return False
    if strategy == MatchStrategy.SUBSTRING:
        return code in text
    return re.search(
        rf"(?<![A-Za-z0-9]){re.escape(code)}(?![A-Za-z0-9])", text) is not None


def _normalize_code(code: str) -> str:
    return str(code).strip().upper()


# ============================================================================
# TRAVERSAL CONTEXT
# ============================================================================

class GraphContext:
    """Nodes and edges accumulated by a single graph request"""

    def __init__(self, catalog: CourseCatalog,
                 strategy: MatchStrategy = MatchStrategy.SUBSTRING):
        self.catalog = catalog
        self.strategy = strategy
        self.nodes: Dict[str, GraphNode] = {}
        self.edges: List[GraphEdge] = []
        self._edge_keys = set()
        self._all_courses: Optional[List[Course]] = None

    def all_courses(self) -> List[Course]:
        if self._all_courses is None:
            self._all_courses = self.catalog.get_all_courses()
        return self._all_courses

    def add_node(self, course: Course, level: int, group: NodeGroup) -> GraphNode:
        """Add a node unless one already exists for the course"""
        if course.code not in self.nodes:
            self.nodes[course.code] = GraphNode.from_course(course, level, group)
        return self.nodes[course.code]

    def add_edge(self, source: str, target: str, kind: EdgeKind) -> bool:
        key = (source, target, kind)
        if key in self._edge_keys:
            return False
        self._edge_keys.add(key)
        self.edges.append(GraphEdge(source=source, target=target, kind=kind))
        return True

    def has_edge_between(self, source: str, target: str) -> bool:
        return any(e.source == source and e.target == target for e in self.edges)

    def to_graph(self) -> GraphData:
        return GraphData(nodes=list(self.nodes.values()), edges=list(self.edges))


def _get_root(catalog: CourseCatalog, root_code: str) -> Course:
    course = catalog.get_course(root_code)
    if course is None:
        raise CourseNotFoundError(root_code)
    return course


# ============================================================================
# PREREQUISITE MODE
# ============================================================================

def build_prerequisite_graph(
        catalog: CourseCatalog,
        root_code: str,
        strategy: MatchStrategy = MatchStrategy.SUBSTRING) -> GraphData:
    """
    Build the prerequisite graph around a course.

    Prerequisites and corequisites are followed backwards breadth-first and
    placed at negative levels. Courses that mention the root in their
    requirements are added one level below it, and the root's exclusions are
    added beside it.

    Args:
        catalog: Course catalog to read from
        root_code: Course code at the centre of the graph (e.g. "CSC236H1")
        strategy: How postrequisite mentions of the root are matched

    Returns:
        GraphData with nodes in discovery order

    Raises:
        CourseNotFoundError: If the root course is not in the catalog
    """
    root_code = _normalize_code(root_code)
    root_course = _get_root(catalog, root_code)
    ctx = GraphContext(catalog, strategy)

    _add_prerequisites(ctx, root_code)
    _add_postrequisite_overlay(ctx, root_code)
    _add_exclusion_overlay(ctx, root_course)

    return ctx.to_graph()


def _add_prerequisites(ctx: GraphContext, root_code: str) -> None:
    queue = deque([root_code])
    processed = set()
    current_level = 0

    while queue:
        current_code = queue.popleft()
        if current_code in processed:
            continue
        processed.add(current_code)

        course = ctx.catalog.get_course(current_code)
        if course is None:
            continue

        group = NodeGroup.ROOT if current_code == root_code else NodeGroup.EXPLORED
        ctx.add_node(course, current_level, group)

        for prereq_code in extract_codes(course.requirement_text):
            prereq = ctx.catalog.get_course(prereq_code)
            if prereq is None:
                continue
            ctx.add_node(prereq, current_level - 1, NodeGroup.EXPLORED)
            ctx.add_edge(prereq.code, current_code, EdgeKind.PREREQUISITE)
            if prereq.code not in processed:
                queue.append(prereq.code)

        # One level per processed course, not per BFS depth
        current_level -= 1


def _add_postrequisite_overlay(ctx: GraphContext, root_code: str) -> None:
    for course in ctx.all_courses():
        if mentions(course.requirement_text, root_code, ctx.strategy):
            ctx.add_node(course, 1, NodeGroup.UNEXPLORED)
            ctx.add_edge(root_code, course.code, EdgeKind.POSTREQUISITE)


def _add_exclusion_overlay(ctx: GraphContext, root_course: Course) -> None:
    root_code = root_course.code
    for excluded_code in extract_codes(root_course.exclusion):
        excluded = ctx.catalog.get_course(excluded_code)
        if excluded is None or excluded.code == root_code:
            continue

        node = ctx.nodes.get(excluded.code)
        if node is None:
            ctx.add_node(excluded, 0, NodeGroup.EXCLUSION)
        else:
            node.group = NodeGroup.EXCLUSION

        if not ctx.has_edge_between(root_code, excluded.code):
            ctx.add_edge(root_code, excluded.code, EdgeKind.EXCLUSION)


# ============================================================================
# POSTREQUISITE MODE
# ============================================================================

MAX_POSTREQUISITE_LEVEL = 3


def build_postrequisite_graph(
        catalog: CourseCatalog,
        root_code: str,
        max_level: int = MAX_POSTREQUISITE_LEVEL,
        strategy: MatchStrategy = MatchStrategy.SUBSTRING) -> GraphData:
    """
    Build the graph of courses that depend on a course.

    Level 1 holds courses whose requirements mention the root, level 2 the
    courses mentioning a level 1 course, and so on up to ``max_level``. A
    course keeps the first (lowest) level it was found at. Edges are then
    derived between adjacent levels only.

    Args:
        catalog: Course catalog to read from
        root_code: Course code at the top of the graph
        max_level: Number of expansion rounds beyond the root
        strategy: How requirement text mentions are matched

    Returns:
        GraphData with nodes ordered by level

    Raises:
        CourseNotFoundError: If the root course is not in the catalog
        ValueError: If max_level is outside 1..MAX_POSTREQUISITE_LEVEL
    """
    if not 1 <= max_level <= MAX_POSTREQUISITE_LEVEL:
        raise ValueError(
            f"max_level must be between 1 and {MAX_POSTREQUISITE_LEVEL}, got {max_level}")

    root_code = _normalize_code(root_code)
    root_course = _get_root(catalog, root_code)
    ctx = GraphContext(catalog, strategy)
    all_courses = ctx.all_courses()

    levels: List[List[Course]] = [[root_course]]
    while len(levels) <= max_level:
        # Only strictly lower levels are excluded; the level being built may list a course twice
        placed = {course.code for level in levels for course in level}
        next_level = []
        for course in levels[-1]:
            for candidate in all_courses:
                if candidate.code in placed:
                    continue
                if mentions(candidate.requirement_text, course.code, strategy):
                    next_level.append(candidate)
        if not next_level:
            break
        levels.append(next_level)

    for depth, level_courses in enumerate(levels):
        if depth == 0:
            group = NodeGroup.ROOT
        elif depth == 1:
            group = NodeGroup.EXPLORED
        else:
            group = NodeGroup.UNEXPLORED
        for course in level_courses:
            ctx.add_node(course, depth, group)

    for lower_level, higher_level in zip(levels, levels[1:]):
        for lower in lower_level:
            for higher in higher_level:
                if mentions(higher.requirement_text, lower.code, strategy):
                    ctx.add_edge(lower.code, higher.code, EdgeKind.POSTREQUISITE)

    return ctx.to_graph()


# ============================================================================
# RELATION CLASSIFICATION
# ============================================================================

RELATION_TYPES = ("prerequisites", "postrequisites")


class InvalidRelationTypeError(ValueError):
    """Relation classification mode is not one of RELATION_TYPES"""

    def __init__(self, relation_type: str):
        self.relation_type = relation_type
        super().__init__(
            f"Invalid relation type: {relation_type}. "
            f"Use one of: {', '.join(RELATION_TYPES)}")


DIRECT_PREREQUISITE = "Direct Prerequisite"
INDIRECT_PREREQUISITE = "Indirect Prerequisite"
DIRECT_POSTREQUISITE = "Direct Postrequisite"
INDIRECT_POSTREQUISITE = "Indirect Postrequisite"


def _relation_items(courses: Iterable[Course], relation: str) -> List[RelationItem]:
    return [RelationItem(code=c.code, title=c.title, relation=relation) for c in courses]


def _resolve_codes(catalog: CourseCatalog, codes: Iterable[str]) -> List[Course]:
    """Look up codes in order, dropping unknown codes and repeats"""
    resolved = {}
    for code in codes:
        if code in resolved:
            continue
        course = catalog.get_course(code)
        if course is not None:
            resolved[code] = course
    return list(resolved.values())


def _courses_requiring(all_courses: List[Course], code: str,
                       strategy: MatchStrategy) -> List[Course]:
    return [c for c in all_courses if mentions(c.prerequisites, code, strategy)]


def direct_prerequisites(catalog: CourseCatalog, code: str) -> List[RelationItem]:
    course = catalog.get_course(code)
    if course is None:
        return []
    codes = extract_codes(course.prerequisites, RELAXED_CODE_PATTERN)
    return _relation_items(_resolve_codes(catalog, codes), DIRECT_PREREQUISITE)


def indirect_prerequisites(catalog: CourseCatalog, code: str,
                           strategy: MatchStrategy = MatchStrategy.SUBSTRING) -> List[RelationItem]:
    """Courses listed alongside ``code`` in the prerequisites of its dependents"""
    related = {}
    for dependent in _courses_requiring(catalog.get_all_courses(), code, strategy):
        for other in extract_codes(dependent.prerequisites, RELAXED_CODE_PATTERN):
            if other != code:
                related.setdefault(other, None)
    return _relation_items(_resolve_codes(catalog, related), INDIRECT_PREREQUISITE)


def direct_postrequisites(catalog: CourseCatalog, code: str,
                          strategy: MatchStrategy = MatchStrategy.SUBSTRING) -> List[RelationItem]:
    dependents = _courses_requiring(catalog.get_all_courses(), code, strategy)
    return _relation_items(dependents, DIRECT_POSTREQUISITE)


def indirect_postrequisites(catalog: CourseCatalog, code: str,
                            strategy: MatchStrategy = MatchStrategy.SUBSTRING) -> List[RelationItem]:
    """Courses requiring a course that requires ``code``"""
    all_courses = catalog.get_all_courses()
    found: Dict[str, Course] = {}
    for dependent in _courses_requiring(all_courses, code, strategy):
        for second in _courses_requiring(all_courses, dependent.code, strategy):
            found.setdefault(second.code, second)
    return _relation_items(found.values(), INDIRECT_POSTREQUISITE)


def classify_relations(
        catalog: CourseCatalog,
        code: str,
        relation_type: str,
        strategy: MatchStrategy = MatchStrategy.SUBSTRING) -> RelationResult:
    """
    Classify the courses related to a course as direct or indirect.

    Args:
        catalog: Course catalog to read from
        code: Course code to classify around
        relation_type: "prerequisites" or "postrequisites"
        strategy: How prerequisite text mentions are matched

    Returns:
        RelationResult; the course title is empty when the code is unknown

    Raises:
        InvalidRelationTypeError: If relation_type is not supported
    """
    if relation_type not in RELATION_TYPES:
        raise InvalidRelationTypeError(relation_type)

    code = _normalize_code(code)
    course = catalog.get_course(code)
    title = course.title if course is not None and course.title else ""

    if relation_type == "prerequisites":
        results = RelationGroups(
            direct=direct_prerequisites(catalog, code),
            indirect=indirect_prerequisites(catalog, code, strategy),
        )
    else:
        results = RelationGroups(
            direct=direct_postrequisites(catalog, code, strategy),
            indirect=indirect_postrequisites(catalog, code, strategy),
        )

    return RelationResult(
        course=CourseSummary(code=code, title=title),
        relation_type=relation_type,
        results=results,
    )


# ============================================================================
# CATALOG DIAGNOSTICS
# ============================================================================

def detect_cycles(catalog: CourseCatalog) -> List[List[str]]:
    """
    Detect cycles among the prerequisite mentions of the whole catalog.

    Each cycle is rotated to start at its smallest code.

    Returns:
        List of cycles (each cycle is a list of course codes)

    Raises:
        ImportError: If NetworkX not installed
    """
    try:
        import networkx as nx
    except ImportError:
        raise ImportError(
            "NetworkX required. Install with: pip install networkx")

    G = nx.DiGraph()
    for course in catalog.get_all_courses():
        for code in extract_codes(course.requirement_text):
            if code in catalog:
                G.add_edge(code, course.code)

    cycles = []
    for cycle in nx.simple_cycles(G):
        start = cycle.index(min(cycle))
        cycles.append(cycle[start:] + cycle[:start])
    return sorted(cycles, key=lambda x: (len(x), x))
