"""
Course catalog backed by a pandas DataFrame.

The catalog is built from the scraped ``all_courses.json`` file or from the
SQLite ``courses.db`` produced by ``build_database``. The graph builder only
reads from it through ``get_course`` and ``get_all_courses``.
"""

import sqlite3
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pandas as pd

from course_graph.models import COURSE_FIELDS, Course, CourseSummary

# ============================================================================
# ERRORS
# ============================================================================


class CatalogUnavailableError(RuntimeError):
    """Catalog source is missing, unreadable, or was never loaded"""


class CourseNotFoundError(ValueError):
    """Requested course code has no catalog entry"""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Course not found: {code}")


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _clean_value(value) -> Optional[str]:
    if value is None or pd.isna(value):
        return None
    value = str(value).strip()
    return value or None


def _records(df: pd.DataFrame) -> List[Dict]:
    """Rows as dicts with every missing value as None"""
    return [
        {key: _clean_value(value) for key, value in row.items()}
        for row in df.to_dict("records")
    ]


def _courses_frame(records: Iterable[Dict]) -> pd.DataFrame:
    """Normalize raw course records into a frame indexed by course code"""
    df = pd.DataFrame.from_records(list(records))

    for col in COURSE_FIELDS:
        if col not in df.columns:
            df[col] = None

    df = df[COURSE_FIELDS].astype(object)
    df = df.where(pd.notna(df), None)
    for col in COURSE_FIELDS:
        df[col] = df[col].map(_clean_value)
    df = df.astype(object).where(df.notna(), None)

    # Records without a code cannot be looked up
    df = df[df["code"].notna()].copy()
    df["code"] = df["code"].str.upper()
    df = df.drop_duplicates(subset="code", keep="first")

    df.index = df["code"].tolist()
    return df


def _read_json_records(json_path) -> pd.DataFrame:
    path = Path(json_path)
    if not path.exists():
        raise CatalogUnavailableError(f"Course JSON file not found: {path}")
    try:
        return pd.read_json(path, orient="records", dtype=False, convert_dates=False)
    except ValueError as e:
        raise CatalogUnavailableError(f"Could not parse course JSON {path}: {e}") from e


# ============================================================================
# CATALOG
# ============================================================================

class CourseCatalog:
    """In-memory, read-only course catalog"""

    def __init__(self, courses_df: pd.DataFrame):
        self.courses_df = courses_df
        self._courses: Dict[str, Course] = {
            row["code"]: Course(**row)
            for row in _records(courses_df)
        }
        self._all_courses: List[Course] = list(self._courses.values())

    @classmethod
    def from_records(cls, records: Iterable[Dict]) -> "CourseCatalog":
        return cls(_courses_frame(records))

    @classmethod
    def from_json(cls, json_path, verbose: bool = False) -> "CourseCatalog":
        """
        Load a catalog from the scraper's JSON output.

        Args:
            json_path: Path to a JSON array of course objects
            verbose: Print loading status messages

        Raises:
            CatalogUnavailableError: If the file is missing or not valid JSON
        """
        if verbose:
            print(f"Loading courses from {json_path}...")
        raw = _read_json_records(json_path)
        catalog = cls(_courses_frame(raw.to_dict("records")))
        if verbose:
            print(f"Loaded {len(catalog)} courses")
        return catalog

    @classmethod
    def from_sqlite(cls, db_path, verbose: bool = False) -> "CourseCatalog":
        """
        Load a catalog from the ``courses`` table of a SQLite database.

        Raises:
            CatalogUnavailableError: If the database is missing or has no courses table
        """
        path = Path(db_path)
        if not path.exists():
            raise CatalogUnavailableError(f"Course database not found: {path}")

        if verbose:
            print(f"Loading courses from {path}...")
        conn = sqlite3.connect(str(path))
        try:
            raw = pd.read_sql_query("SELECT * FROM courses", conn)
        except (sqlite3.Error, pd.errors.DatabaseError) as e:
            raise CatalogUnavailableError(f"Could not read course database {path}: {e}") from e
        finally:
            conn.close()

        catalog = cls(_courses_frame(raw.to_dict("records")))
        if verbose:
            print(f"Loaded {len(catalog)} courses")
        return catalog

    def __len__(self) -> int:
        return len(self._all_courses)

    def __contains__(self, code: str) -> bool:
        return code in self._courses

    def get_course(self, code: str) -> Optional[Course]:
        return self._courses.get(code)

    def get_all_courses(self) -> List[Course]:
        """All courses in catalog order"""
        return list(self._all_courses)

    def list_courses(self) -> List[CourseSummary]:
        """Code and title of every course, sorted by code"""
        rows = self.courses_df[["code", "title"]].sort_values("code")
        return [CourseSummary(**row) for row in _records(rows)]

    def search_courses(self, query: str, limit: int = 20) -> List[CourseSummary]:
        """
        Search for courses by code or title.

        Args:
            query: Case-insensitive search term
            limit: Maximum number of results

        Returns:
            Matching courses sorted by code
        """
        query_upper = query.strip().upper()
        if not query_upper:
            return []

        df = self.courses_df
        matches = df[
            df["code"].str.contains(query_upper, na=False, regex=False) |
            df["title"].fillna("").str.upper().str.contains(query_upper, regex=False)
        ]
        matches = matches.sort_values("code").head(limit)
        return [CourseSummary(**row) for row in _records(matches[["code", "title"]])]

    def get_statistics(self) -> Dict:
        df = self.courses_df
        return {
            "total_courses": int(len(df)),
            "courses_with_prerequisites": int(df["prerequisites"].notna().sum()),
            "courses_with_corequisites": int(df["corequisites"].notna().sum()),
            "courses_with_exclusions": int(df["exclusion"].notna().sum()),
            "total_subjects": int(df["code"].str[:3].nunique()),
        }


def load_catalog(path, verbose: bool = False) -> CourseCatalog:
    """Load a catalog from a ``.json`` export or a SQLite database file"""
    suffix = Path(path).suffix.lower()
    if suffix == ".json":
        return CourseCatalog.from_json(path, verbose=verbose)
    return CourseCatalog.from_sqlite(path, verbose=verbose)


# ============================================================================
# DATABASE BUILD
# ============================================================================

CREATE_COURSES_TABLE = """
CREATE TABLE courses (
    code TEXT PRIMARY KEY,
    title TEXT,
    description TEXT,
    hours TEXT,
    prerequisites TEXT,
    corequisites TEXT,
    exclusion TEXT,
    recommended_preparation TEXT,
    breadth_requirements TEXT,
    previous_course_number TEXT
)
"""


def build_database(json_path, db_path, verbose: bool = True) -> int:
    """
    Rebuild the SQLite course database from the scraped JSON file.

    Any existing database file is deleted first.

    Args:
        json_path: Path to the scraper's JSON output
        db_path: Path of the SQLite database to create
        verbose: Print status messages

    Returns:
        Number of courses inserted

    Raises:
        CatalogUnavailableError: If the JSON file is missing or invalid
    """
    raw = _read_json_records(json_path)
    df = _courses_frame(raw.to_dict("records"))

    db_file = Path(db_path)
    if db_file.exists():
        db_file.unlink()
        if verbose:
            print(f"Deleted existing database file: {db_file}")

    conn = sqlite3.connect(str(db_file))
    try:
        conn.execute(CREATE_COURSES_TABLE)
        df[COURSE_FIELDS].to_sql("courses", conn, if_exists="append", index=False)
        conn.commit()
    finally:
        conn.close()

    if verbose:
        print(f"Inserted {len(df)} courses into {db_file}")
    return len(df)
