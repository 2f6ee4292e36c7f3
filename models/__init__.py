from models.course import Course, normalize_course_id, course_ids_match
from models.section import Section, TimeBlock, Weekday
from models.progress import StudentProgress, StudentProgressRecord, ProgressStatus
from models.plan import CoursePlan, PlannedSection, ScheduleConflict
from models.catalog import Catalog, CatalogReport, TermInfo

__all__ = [
    "Course",
    "normalize_course_id",
    "course_ids_match",
    "Section",
    "TimeBlock",
    "Weekday",
    "StudentProgress",
    "StudentProgressRecord",
    "ProgressStatus",
    "CoursePlan",
    "PlannedSection",
    "ScheduleConflict",
    "Catalog",
    "CatalogReport",
    "TermInfo",
]
