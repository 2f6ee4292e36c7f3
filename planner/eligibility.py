"""Freischaltung von Kursen: bestanden / gesperrt / verfügbar.

Reihenfolge der Regeln (erste zutreffende gewinnt):
  1. Kurs bestanden                                   → passed
  2. Eine Voraussetzung nicht bestanden               → blocked
  3. Co-Requisiten vorhanden, keiner bestanden oder
     geplant, und der Kurs hat Voraussetzungen        → blocked
  4. Wahlfach unterhalb des nötigen Studienfortschritts → blocked
  5. sonst                                            → available

Alle Funktionen sind rein: Eingaben werden nie verändert.
"""

import logging
from enum import Enum
from typing import Iterable, Optional

from config.defaults import default_eligibility_rules
from config.schema import EligibilityRules
from models.course import Course

logger = logging.getLogger(__name__)


class CourseStatus(str, Enum):
    PASSED = "passed"
    BLOCKED = "blocked"
    AVAILABLE = "available"


def term_progress_level(
    catalog: list[Course],
    completed_or_planned: set[str],
    rules: Optional[EligibilityRules] = None,
) -> int:
    """Höchstes Semester T, in dem genügend Pflichtkurse bestanden/geplant sind.

    Alle Semester 1..max_term werden geprüft (kein vorzeitiger Abbruch);
    Semester ohne Pflichtkurse zählen nie als erreicht.
    Leerer Katalog → 0.
    """
    rules = rules or default_eligibility_rules()
    if not catalog:
        return 0

    required_by_term: dict[int, list[str]] = {}
    for course in catalog:
        if not course.is_elective:
            required_by_term.setdefault(course.term, []).append(course.id)

    highest = 0
    for term in range(1, rules.max_term + 1):
        required = required_by_term.get(term, [])
        if not required:
            continue
        done = sum(1 for cid in required if cid in completed_or_planned)
        if done / len(required) >= rules.term_reached_ratio:
            highest = term
    return highest


def _status_with_level(
    course: Course,
    passed_courses: set[str],
    planned_courses: set[str],
    progress_level: int,
    rules: EligibilityRules,
) -> CourseStatus:
    if course.id in passed_courses:
        return CourseStatus.PASSED

    if any(pre not in passed_courses for pre in course.prerequisites):
        return CourseStatus.BLOCKED

    # Co-Requisiten allein sperren nie – sie dürfen gemeinsam belegt werden
    if course.corequisites and course.prerequisites:
        coreq_ok = any(
            co in passed_courses or co in planned_courses
            for co in course.corequisites
        )
        if not coreq_ok:
            return CourseStatus.BLOCKED

    if course.is_elective:
        needed = rules.min_progress_for(course.elective_type, course.term)
        if progress_level < needed:
            return CourseStatus.BLOCKED

    return CourseStatus.AVAILABLE


def resolve_status(
    course: Course,
    passed_courses: set[str],
    planned_courses: set[str],
    catalog: list[Course],
    rules: Optional[EligibilityRules] = None,
) -> CourseStatus:
    """Status eines einzelnen Kurses.

    `catalog` ist der vollständige Kurskatalog; er wird nur für den
    Studienfortschritt (Wahlfächer) benötigt.
    """
    rules = rules or default_eligibility_rules()
    level = 0
    if course.is_elective and course.id not in passed_courses:
        level = term_progress_level(catalog, passed_courses | planned_courses, rules)
    return _status_with_level(course, passed_courses, planned_courses, level, rules)


class EligibilityResolver:
    """Bewertet viele Kurse gegen denselben Fortschritts-Schnappschuss.

    Der Studienfortschritt wird pro Aufruf einmal berechnet statt pro Kurs.
    """

    def __init__(self, catalog: list[Course], rules: Optional[EligibilityRules] = None) -> None:
        self.catalog = list(catalog)
        self.rules = rules or default_eligibility_rules()

    def progress_level(self, passed_courses: set[str], planned_courses: set[str]) -> int:
        return term_progress_level(self.catalog, passed_courses | planned_courses, self.rules)

    def status(
        self, course: Course, passed_courses: set[str], planned_courses: set[str]
    ) -> CourseStatus:
        return resolve_status(course, passed_courses, planned_courses, self.catalog, self.rules)

    def resolve_all(
        self,
        passed_courses: set[str],
        planned_courses: set[str],
        courses: Optional[Iterable[Course]] = None,
    ) -> dict[str, CourseStatus]:
        """Status aller (bzw. der übergebenen) Kurse, Schlüssel = Kurs-ID."""
        level = self.progress_level(passed_courses, planned_courses)
        result: dict[str, CourseStatus] = {}
        for course in (self.catalog if courses is None else courses):
            result[course.id] = _status_with_level(
                course, passed_courses, planned_courses, level, self.rules
            )
        logger.debug(
            f"Freischaltung: {sum(1 for s in result.values() if s == CourseStatus.AVAILABLE)} "
            f"verfügbar, Fortschritt Semester {level}"
        )
        return result

    def available_courses(
        self, passed_courses: set[str], planned_courses: set[str]
    ) -> list[Course]:
        """Alle verfügbaren Kurse in Katalogreihenfolge."""
        statuses = self.resolve_all(passed_courses, planned_courses)
        return [c for c in self.catalog if statuses[c.id] == CourseStatus.AVAILABLE]

    def is_elective_available_for_term(self, course: Course, term: int) -> bool:
        """Ist ein Wahlfach für ein Zielsemester vorgesehen? (Semesterplanung)

        Wahlfächer ohne Typ sind nie für ein Semester vorgesehen.
        """
        if not course.is_elective or course.elective_type is None:
            return False
        return term >= self.rules.min_progress_for(course.elective_type, course.term)
