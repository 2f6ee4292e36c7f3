"""Planer-Kern: Freischaltung, Konflikte, Planvorschlag, Voraussetzungsgraph."""

from .eligibility import CourseStatus, EligibilityResolver, resolve_status, term_progress_level
from .conflicts import has_conflict, find_time_conflict, detect_plan_conflicts
from .suggest import suggest_plan, select_section, remove_course
from .prereq_graph import PrereqCycleError, build_edges, has_cycle, find_cycle, apply_course_edit
from .term_planner import TermPlanItem, suggest_courses_for_term, build_corequisite_clusters

__all__ = [
    "CourseStatus",
    "EligibilityResolver",
    "resolve_status",
    "term_progress_level",
    "has_conflict",
    "find_time_conflict",
    "detect_plan_conflicts",
    "suggest_plan",
    "select_section",
    "remove_course",
    "PrereqCycleError",
    "build_edges",
    "has_cycle",
    "find_cycle",
    "apply_course_edit",
    "TermPlanItem",
    "suggest_courses_for_term",
    "build_corequisite_clusters",
]
