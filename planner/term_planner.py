"""Semesterplanung: Kurse einem Zielsemester zuordnen.

Kurse mit Co-Requisiten werden nur gemeinsam vorgeschlagen (Cluster).
Bearbeitung in drei Durchgängen:
  1. Pflichtkurse des Zielsemesters
  2. Wahlfächer, die für das Zielsemester freigegeben sind
  3. Nachholer: Pflichtkurse früherer Semester
"""

import logging
from typing import Callable, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from config.defaults import default_eligibility_rules
from config.schema import EligibilityRules
from models.course import Course
from planner.eligibility import CourseStatus, EligibilityResolver

logger = logging.getLogger(__name__)

DEFAULT_TERM_MAX_CREDITS = 22


class TermPlanItem(BaseModel):
    """Ein Kurs, der für ein bestimmtes Semester vorgemerkt ist."""

    model_config = ConfigDict(populate_by_name=True)

    course_id: str = Field(alias="courseId")
    planned_term: int = Field(ge=1, alias="plannedTerm")
    section_id: Optional[str] = Field(default=None, alias="sectionId")
    priority: int = 0


def planned_term_credits(
    items: Sequence[TermPlanItem], term: int, courses: Sequence[Course]
) -> int:
    """Summe der Credits aller für `term` vorgemerkten Kurse (unbekannt → 0)."""
    credits_by_id = {c.id: c.credits for c in courses}
    return sum(
        credits_by_id.get(item.course_id, 0)
        for item in items
        if item.planned_term == term
    )


def build_corequisite_clusters(
    courses: Sequence[Course],
    passed_courses: set[str],
    planned_ids: set[str],
) -> list[list[str]]:
    """Transitive Co-Requisiten-Gruppen offener Kurse.

    Bestandene und bereits geplante Kurse werden weder als Cluster-Start
    noch als Mitglied aufgenommen. Jeder Kurs erscheint in höchstens
    einem Cluster.
    """
    by_id = {c.id: c for c in courses}
    clusters: list[list[str]] = []
    processed: set[str] = set()

    for course in courses:
        if course.id in processed or course.id in passed_courses or course.id in planned_ids:
            continue

        cluster = [course.id]
        queue = list(course.corequisites)
        while queue:
            co_id = queue.pop(0)
            if co_id in cluster or co_id in passed_courses or co_id in planned_ids:
                continue
            cluster.append(co_id)
            co_course = by_id.get(co_id)
            if co_course is not None:
                queue.extend(n for n in co_course.corequisites if n not in cluster)

        clusters.append(cluster)
        processed.update(cluster)
    return clusters


def suggest_courses_for_term(
    term: int,
    courses: Sequence[Course],
    passed_courses: set[str],
    term_plan: Sequence[TermPlanItem],
    rules: Optional[EligibilityRules] = None,
    max_credits: int = DEFAULT_TERM_MAX_CREDITS,
) -> list[str]:
    """Kurs-IDs, die zusätzlich im Semester `term` belegt werden sollten.

    Ein Cluster wird nur vollständig übernommen: er muss in die restlichen
    Semester-Credits passen, und jedes Mitglied muss verfügbar sein, wenn
    der ganze Cluster als geplant angenommen wird.
    """
    rules = rules or default_eligibility_rules()
    resolver = EligibilityResolver(list(courses), rules)
    by_id = {c.id: c for c in courses}

    remaining = max_credits - planned_term_credits(term_plan, term, courses)
    planned_ids = {item.course_id for item in term_plan}
    clusters = build_corequisite_clusters(courses, passed_courses, planned_ids)

    suggestions: list[str] = []
    used: set[str] = set()
    credits_added = 0

    def open_for_term(course: Course) -> bool:
        return not course.is_elective or resolver.is_elective_available_for_term(course, term)

    def take_clusters(matches: Callable[[Course], bool]) -> None:
        nonlocal credits_added
        for cluster in clusters:
            if any(cid in used for cid in cluster):
                continue
            members = [by_id[cid] for cid in cluster if cid in by_id]
            if not members or not any(matches(c) for c in members):
                continue

            cluster_credits = sum(c.credits for c in members)
            if credits_added + cluster_credits > remaining:
                continue

            assumed = planned_ids | set(cluster)
            statuses = resolver.resolve_all(passed_courses, assumed, members)
            if all(statuses[c.id] == CourseStatus.AVAILABLE and open_for_term(c) for c in members):
                suggestions.extend(c.id for c in members)
                used.update(cluster)
                credits_added += cluster_credits

    # ── 1. Pflichtkurse des Semesters ──
    take_clusters(lambda c: c.term == term and not c.is_elective)
    # ── 2. Wahlfächer ──
    take_clusters(lambda c: c.is_elective and resolver.is_elective_available_for_term(c, term))
    # ── 3. Nachholer ──
    take_clusters(lambda c: c.term < term and not c.is_elective)

    logger.info(
        f"Semester {term}: {len(suggestions)} Kurse vorgeschlagen "
        f"(+{credits_added} Credits, Rest {remaining - credits_added})"
    )
    return suggestions
