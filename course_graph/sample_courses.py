"""Small course catalog shared by the test modules"""

COURSE_RECORDS = [
    {"code": "CSC108H1", "title": "Introduction to Computer Programming",
     "description": "Programming in a language such as Python."},
    {"code": "CSC148H1", "title": "Introduction to Computer Science",
     "prerequisites": "CSC108H1"},
    {"code": "CSC165H1", "title": "Mathematical Expression and Reasoning for Computer Science"},
    {"code": "MAT102H1", "title": "Introduction to Mathematical Proofs"},
    {"code": "CSC236H1", "title": "Introduction to the Theory of Computation",
     "prerequisites": "CSC148H1, CSC165H1/ MAT102H1",
     "exclusion": "CSC240H1"},
    {"code": "CSC240H1", "title": "Enriched Introduction to the Theory of Computation",
     "prerequisites": "CSC148H1",
     "exclusion": "CSC236H1"},
    {"code": "CSC263H1", "title": "Data Structures and Analysis",
     "prerequisites": "CSC236H1, CSC207H1"},
    {"code": "CSC373H1", "title": "Algorithm Design, Analysis & Complexity",
     "prerequisites": "CSC263H1"},
    {"code": "CSC369H1", "title": "Operating Systems",
     "prerequisites": "CSC209H1, CSC263H1"},
    {"code": "CSC458H1", "title": "Computer Networking Systems",
     "prerequisites": "CSC369H1"},
    {"code": "CSC469H1", "title": "Operating Systems Design and Implementation",
     "prerequisites": "CSC458H1"},
    {"code": "AAA100H1", "title": "Standalone Course"},
]

CYCLE_RECORDS = [
    {"code": "AAA101H1", "title": "Course A", "prerequisites": "BBB101H1"},
    {"code": "BBB101H1", "title": "Course B", "prerequisites": "AAA101H1"},
]
