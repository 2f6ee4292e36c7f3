"""Tests für Planvalidierung und Fortschrittsstatistik."""

import pytest

from analysis.plan_validator import PlanValidator, ValidationReport, can_save_plan
from analysis.progress_stats import progress_statistics
from config.defaults import default_planner_config
from config.schema import PlanLimits
from models.catalog import Catalog
from models.course import Course
from models.plan import PlannedSection
from models.progress import StudentProgress
from models.section import Section, TimeBlock, Weekday


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

def _section(course_id: str, crn: str, start: int, end: int,
             day: Weekday = Weekday.MONDAY, closed: bool = False) -> Section:
    return Section(
        course_id=course_id, crn=crn, closed=closed,
        schedule=[TimeBlock(day=day, start=start, end=end)],
    )


def _catalog() -> Catalog:
    """A (4 Cr.) → B (3 Cr.); C (5 Cr.) ohne Voraussetzung."""
    courses = [
        Course(id="A", name="Anatomie", credits=4, term=1),
        Course(id="B", name="Biochemie", credits=3, term=1, prerequisites=["A"]),
        Course(id="C", name="Chemie", credits=5, term=2),
    ]
    sections = [
        _section("A", "A1", 540, 630),
        _section("B", "B1", 600, 660),
        _section("B", "B2", 700, 760),
        _section("C", "C1", 420, 500, closed=True),
    ]
    return Catalog(courses=courses, sections=sections)


def _entry(catalog: Catalog, crn: str) -> PlannedSection:
    section = catalog.section_by_crn(crn)
    return PlannedSection.of(section.course_id, section)


def _constraints(report: ValidationReport) -> set[str]:
    return {v.constraint for v in report.violations}


# ─── PlanValidator ────────────────────────────────────────────────────────────

class TestPlanValidator:
    def test_valid_plan(self):
        """Verfügbare Kurse ohne Konflikt → gültig."""
        catalog = _catalog()
        plan = [_entry(catalog, "B2")]
        report = PlanValidator().validate(plan, catalog, {"A"})
        assert report.is_valid
        assert report.violations == []
        assert report.total_credits == 3

    def test_schedule_conflict_is_error(self):
        """Überschneidung → Fehler."""
        catalog = _catalog()
        plan = [_entry(catalog, "A1"), _entry(catalog, "B1")]
        report = PlanValidator().validate(plan, catalog, set())
        assert not report.is_valid
        assert "schedule_conflict" in {v.constraint for v in report.errors}

    def test_blocked_course_is_error(self):
        """Gesperrter Kurs im Plan → not_available mit fehlender Voraussetzung."""
        catalog = _catalog()
        report = PlanValidator().validate([_entry(catalog, "B2")], catalog, set())
        errors = [v for v in report.errors if v.constraint == "not_available"]
        assert len(errors) == 1
        assert "A" in errors[0].description

    def test_passed_course_is_warning(self):
        """Bereits bestandener Kurs → Warnung."""
        catalog = _catalog()
        report = PlanValidator().validate([_entry(catalog, "A1")], catalog, {"A"})
        assert report.is_valid
        assert "already_passed" in _constraints(report)

    def test_closed_section_warning(self):
        """Geschlossene Sektion → Warnung."""
        catalog = _catalog()
        report = PlanValidator().validate([_entry(catalog, "C1")], catalog, set())
        assert report.is_valid
        assert "closed_section" in {v.constraint for v in report.warnings}

    def test_section_of_other_course(self):
        """Sektion eines anderen Kurses → section_mismatch."""
        catalog = _catalog()
        entry = PlannedSection.of("C", catalog.section_by_crn("A1"))
        report = PlanValidator().validate([entry], catalog, set())
        assert "section_mismatch" in {v.constraint for v in report.errors}

    def test_unknown_course_warning(self):
        """Kurs außerhalb des Katalogs → Warnung, 0 Credits."""
        catalog = _catalog()
        entry = PlannedSection.of("Z", _section("Z", "Z1", 420, 480, day=Weekday.SATURDAY))
        report = PlanValidator().validate([entry], catalog, set())
        assert "unknown_course" in _constraints(report)
        assert report.total_credits == 0

    def test_coreq_in_same_plan(self):
        """Co-Requisiten im selben Plan gelten als geplant."""
        catalog = Catalog(
            courses=[
                Course(id="BASE", name="Basis", credits=3, term=1),
                Course(id="T", name="Theorie", credits=3, term=2,
                       prerequisites=["BASE"], corequisites=["L"]),
                Course(id="L", name="Labor", credits=2, term=2, prerequisites=["BASE"]),
            ],
            sections=[_section("T", "T1", 420, 480), _section("L", "L1", 480, 540)],
        )
        plan = [_entry(catalog, "T1"), _entry(catalog, "L1")]
        assert PlanValidator().validate(plan, catalog, {"BASE"}).is_valid

    def test_credit_limits(self):
        """Über Vorschlagsgrenze → Warnung, über Höchstgrenze → Fehler."""
        catalog = _catalog()
        plan = [_entry(catalog, "A1"), _entry(catalog, "C1")]
        config = default_planner_config().model_copy(
            update={"limits": PlanLimits(max_credits=8, hard_max_credits=10)}
        )
        report = PlanValidator(config).validate(plan, catalog, set())
        assert report.is_valid
        assert "credit_limit" in {v.constraint for v in report.warnings}

        config = default_planner_config().model_copy(
            update={"limits": PlanLimits(max_credits=5, hard_max_credits=8)}
        )
        report = PlanValidator(config).validate(plan, catalog, set())
        assert "credit_limit" in {v.constraint for v in report.errors}


# ─── can_save_plan ────────────────────────────────────────────────────────────

class TestCanSavePlan:
    def test_empty_plan(self):
        """Leerer Plan wird nicht gespeichert."""
        assert can_save_plan([], _catalog()) is False

    def test_conflict(self):
        catalog = _catalog()
        assert can_save_plan([_entry(catalog, "A1"), _entry(catalog, "B1")], catalog) is False

    def test_ok(self):
        catalog = _catalog()
        assert can_save_plan([_entry(catalog, "A1"), _entry(catalog, "B2")], catalog) is True

    def test_over_hard_limit(self):
        """Mehr als die Höchstgrenze → nicht speicherbar."""
        catalog = _catalog()
        config = default_planner_config().model_copy(
            update={"limits": PlanLimits(max_credits=5, hard_max_credits=6)}
        )
        plan = [_entry(catalog, "A1"), _entry(catalog, "B2")]
        assert can_save_plan(plan, catalog, config) is False


# ─── Fortschrittsstatistik ────────────────────────────────────────────────────

class TestProgressStatistics:
    def test_counts_and_credits(self):
        """Kurse und Credits bestanden / geplant."""
        catalog = _catalog()
        progress = StudentProgress().mark_passed("A", "A").mark_planned("C")
        stats = progress_statistics(catalog, progress)
        assert stats.total_courses == 3
        assert stats.passed_courses == 1
        assert stats.planned_courses == 1
        assert (stats.passed_credits, stats.planned_credits, stats.total_credits) == (4, 5, 12)
        assert stats.credit_percent == 33
        assert stats.gpa == pytest.approx(4.0)

    def test_term_completion(self):
        """Pflichtkurse je Semester mit Erfüllungsgrad."""
        catalog = _catalog()
        stats = progress_statistics(catalog, StudentProgress().mark_passed("A"))
        term1 = stats.terms[0]
        assert (term1.term, term1.required, term1.passed) == (1, 2, 1)
        assert term1.percent == 50
        assert stats.progress_level == 1

    def test_unknown_courses_ignored(self):
        """Fortschritt für Kurse außerhalb des Katalogs zählt nicht."""
        stats = progress_statistics(_catalog(), StudentProgress().mark_passed("ZZZ"))
        assert stats.passed_courses == 0
        assert stats.course_percent == 0

    def test_empty_catalog(self):
        stats = progress_statistics(Catalog(courses=[]), StudentProgress())
        assert stats.total_courses == 0
        assert stats.credit_percent == 0
        assert stats.terms == []
