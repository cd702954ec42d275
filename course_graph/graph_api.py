#!/usr/bin/env python3
"""
Course Dependency Graph API
"""

import os
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from course_graph.catalog import (
    CatalogUnavailableError,
    CourseCatalog,
    CourseNotFoundError,
    load_catalog,
)
from course_graph.graph_core import (
    InvalidRelationTypeError,
    MatchStrategy,
    build_postrequisite_graph,
    build_prerequisite_graph,
    classify_relations,
    detect_cycles,
)
from course_graph.models import Course, CourseSummary, GraphData, RelationResult

DB_FILE = os.environ.get("DB_FILE", "courses.db")
JSON_FILE = os.environ.get("JSON_FILE", "all_courses.json")

GRAPH_MODES = ("prerequisite", "postrequisite")

# ============================================================================
# DATA STORAGE CLASS
# ============================================================================

class CourseGraphDataStore:
    """Holds the catalog shared by all requests"""

    def __init__(self):
        self.catalog: Optional[CourseCatalog] = None

    def load_data(self, db_path: str = DB_FILE, json_path: str = JSON_FILE):
        """Load the catalog from the database, falling back to the JSON export"""
        if Path(db_path).exists():
            self.catalog = load_catalog(db_path, verbose=True)
        else:
            print(f"Database {db_path} not found, reading {json_path}")
            self.catalog = load_catalog(json_path, verbose=True)

    def require_catalog(self) -> CourseCatalog:
        if self.catalog is None:
            raise CatalogUnavailableError("Data not loaded")
        return self.catalog

# ============================================================================
# FASTAPI APPLICATION
# ============================================================================

app = FastAPI(
    title="Course Dependency Graph API",
    description="API for exploring prerequisites, corequisites, exclusions and postrequisites of catalog courses",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

data_store = CourseGraphDataStore()


def _catalog() -> CourseCatalog:
    try:
        return data_store.require_catalog()
    except CatalogUnavailableError:
        raise HTTPException(status_code=503, detail="Data not loaded")

# ============================================================================
# API ENDPOINTS
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Load data on startup"""
    try:
        data_store.load_data(DB_FILE, JSON_FILE)
    except CatalogUnavailableError as e:
        print(f"Warning: Could not load data on startup: {e}")
        print("API will return 503 until data is loaded")

@app.get("/")
async def root():
    """API health check"""
    return {
        "status": "online",
        "message": "Course Dependency Graph API",
        "data_loaded": data_store.catalog is not None
    }

@app.get("/api/courses", response_model=List[CourseSummary])
async def get_courses():
    """Get code and title of every course, sorted by code"""
    return _catalog().list_courses()

@app.get("/api/courses/search")
async def search_courses(
    query: str = Query(..., min_length=2, description="Search term"),
    limit: int = Query(20, ge=1, le=100, description="Maximum results")
):
    """Search for courses by code or title"""
    results = _catalog().search_courses(query, limit=limit)
    return {"query": query, "count": len(results), "results": results}

@app.get("/api/statistics")
async def get_statistics():
    """Catalog summary counts"""
    return _catalog().get_statistics()

@app.get("/api/courses/{course_code}", response_model=Course)
async def get_course(course_code: str):
    """Get the full record for a course"""
    code = course_code.strip().upper()
    course = _catalog().get_course(code)
    if course is None:
        raise HTTPException(status_code=404, detail=f"Course {code} not found")
    return course

@app.get("/api/graph/{course_code}", response_model=GraphData)
async def get_graph(
    course_code: str,
    mode: str = Query("prerequisite", description="prerequisite or postrequisite"),
    match: MatchStrategy = Query(MatchStrategy.SUBSTRING, description="How code mentions are matched"),
    depth: int = Query(3, ge=1, le=3, description="Expansion rounds in postrequisite mode")
):
    """Get graph data for visualization (nodes and edges)"""
    catalog = _catalog()
    if mode not in GRAPH_MODES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid mode: {mode}. Use one of: {', '.join(GRAPH_MODES)}")

    try:
        if mode == "prerequisite":
            return build_prerequisite_graph(catalog, course_code, strategy=match)
        return build_postrequisite_graph(catalog, course_code, max_level=depth, strategy=match)
    except CourseNotFoundError as e:
        raise HTTPException(status_code=404, detail=f"Course {e.code} not found")

@app.get("/api/relations/{course_code}", response_model=RelationResult)
async def get_relations(
    course_code: str,
    relation_type: str = Query("prerequisites", alias="type", description="prerequisites or postrequisites"),
    match: MatchStrategy = Query(MatchStrategy.SUBSTRING, description="How code mentions are matched")
):
    """Classify related courses as direct or indirect"""
    catalog = _catalog()
    try:
        return classify_relations(catalog, course_code, relation_type, strategy=match)
    except InvalidRelationTypeError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/api/cycles")
async def get_cycles():
    """List prerequisite cycles found in the catalog"""
    cycles = detect_cycles(_catalog())
    return {"count": len(cycles), "cycles": cycles}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "3001")))
