#!/usr/bin/env python3

import argparse

from course_graph.catalog import CatalogUnavailableError, build_database, load_catalog


def main():
    ap = argparse.ArgumentParser(description="Build the SQLite course database from scraped course JSON")
    ap.add_argument("--json", default="all_courses.json", help="Path to scraped courses JSON")
    ap.add_argument("--db", default="courses.db", help="Output path for the SQLite database")
    ap.add_argument("--quiet", action="store_true", help="Only print errors")

    args = ap.parse_args()

    try:
        count = build_database(args.json, args.db, verbose=not args.quiet)
    except CatalogUnavailableError as e:
        print(f"Error: {e}")
        raise SystemExit(1)

    if args.quiet:
        return

    # Display summary
    stats = load_catalog(args.db).get_statistics()
    print(f"\nCourse database written: {args.db} ({count} courses)")
    print(f"Courses with prerequisites: {stats['courses_with_prerequisites']}")
    print(f"Courses with corequisites: {stats['courses_with_corequisites']}")
    print(f"Courses with exclusions: {stats['courses_with_exclusions']}")
    print(f"Subjects: {stats['total_subjects']}")

if __name__ == "__main__":
    main()
