"""
Data models for the course dependency graph
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# COURSE RECORDS
# ============================================================================

COURSE_FIELDS = [
    "code",
    "title",
    "description",
    "hours",
    "prerequisites",
    "corequisites",
    "exclusion",
    "recommended_preparation",
    "breadth_requirements",
    "previous_course_number",
]


class Course(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    title: Optional[str] = None
    description: Optional[str] = None
    hours: Optional[str] = None
    prerequisites: Optional[str] = None
    corequisites: Optional[str] = None
    exclusion: Optional[str] = None
    recommended_preparation: Optional[str] = None
    breadth_requirements: Optional[str] = None
    previous_course_number: Optional[str] = None

    @property
    def requirement_text(self) -> str:
        """Prerequisites and corequisites joined, the text scanned for links"""
        return f"{self.prerequisites or ''} {self.corequisites or ''}"


class CourseSummary(BaseModel):
    code: str
    title: Optional[str] = None


# ============================================================================
# GRAPH MODELS
# ============================================================================

class NodeGroup(str, Enum):
    ROOT = "root"
    EXPLORED = "explored"
    UNEXPLORED = "unexplored"
    EXCLUSION = "exclusion"


class EdgeKind(str, Enum):
    PREREQUISITE = "prerequisite"
    POSTREQUISITE = "postrequisite"
    EXCLUSION = "exclusion"


class CourseData(BaseModel):
    code: str
    title: Optional[str] = None
    description: Optional[str] = None


class GraphNode(BaseModel):
    id: str
    label: str
    title: Optional[str] = None
    group: NodeGroup
    level: int
    course_data: CourseData = Field(alias="courseData")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_course(cls, course: Course, level: int, group: NodeGroup) -> "GraphNode":
        return cls(
            id=course.code,
            label=course.code,
            title=course.title,
            group=group,
            level=level,
            course_data=CourseData(
                code=course.code,
                title=course.title,
                description=course.description,
            ),
        )


class GraphEdge(BaseModel):
    source: str = Field(alias="from")
    target: str = Field(alias="to")
    kind: EdgeKind

    model_config = ConfigDict(populate_by_name=True)


class GraphData(BaseModel):
    nodes: List[GraphNode]
    edges: List[GraphEdge]


# ============================================================================
# RELATION CLASSIFICATION
# ============================================================================

class RelationItem(BaseModel):
    code: str
    title: Optional[str] = None
    relation: str


class RelationGroups(BaseModel):
    direct: List[RelationItem] = []
    indirect: List[RelationItem] = []


class RelationResult(BaseModel):
    course: CourseSummary
    relation_type: str = Field(alias="relationType")
    results: RelationGroups

    model_config = ConfigDict(populate_by_name=True)
