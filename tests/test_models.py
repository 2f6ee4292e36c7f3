"""Tests für die Datenmodelle (Kurse, Sektionen, Fortschritt, Plan, Katalog)."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from models.catalog import Catalog
from models.course import Course, course_ids_match, normalize_course_id
from models.plan import CoursePlan, PlannedSection
from models.progress import ProgressStatus, StudentProgress
from models.section import Section, TimeBlock, Weekday


def _course(cid: str, term: int = 1, credits: int = 3, **kwargs) -> Course:
    return Course(id=cid, name=f"Kurs {cid}", credits=credits, term=term, **kwargs)


def _section(course_id: str, crn: str, closed: bool = False) -> Section:
    return Section(
        course_id=course_id, crn=crn, closed=closed,
        schedule=[TimeBlock(day=Weekday.MONDAY, start=420, end=510)],
    )


# ─── Kurs-IDs ─────────────────────────────────────────────────────────────────

class TestCourseIds:
    def test_normalize(self):
        """Bindestriche und Kleinschreibung werden ignoriert."""
        assert normalize_course_id("med-100") == "MED100"
        assert normalize_course_id(" MED 100 ") == "MED100"

    def test_match(self):
        """MED-100 und MED100 bezeichnen denselben Kurs."""
        assert course_ids_match("MED-100", "MED100")
        assert course_ids_match("A", "A")
        assert not course_ids_match("MED-100", "MED-101")

    def test_empty_ids_do_not_match(self):
        """Leere normalisierte IDs gelten nicht als gleich."""
        assert not course_ids_match("-", "--")


# ─── Course ───────────────────────────────────────────────────────────────────

class TestCourse:
    def test_from_json_aliases(self):
        """camelCase-Felder aus dem Katalog werden gelesen."""
        course = Course.model_validate({
            "id": "MED-100", "name": "Anatomía", "credits": 4, "term": 1,
            "isElective": False, "theoreticalHours": 48, "practicalHours": 16,
        })
        assert course.theoretical_hours == 48
        assert course.total_hours == 64

    def test_duplicate_prerequisites_removed(self):
        """Doppelte Voraussetzungen werden entfernt, Reihenfolge bleibt."""
        course = _course("C", prerequisites=["A", "B", "A", " "])
        assert course.prerequisites == ["A", "B"]

    def test_empty_id_rejected(self):
        """Leere Kurs-ID ist ungültig."""
        with pytest.raises(ValidationError):
            _course("  ")

    def test_negative_credits_rejected(self):
        """Credits ≥ 0."""
        with pytest.raises(ValidationError):
            _course("A", credits=-1)

    def test_term_starts_at_one(self):
        """Semester ≥ 1."""
        with pytest.raises(ValidationError):
            _course("A", term=0)

    def test_self_corequisite_rejected(self):
        """Ein Kurs kann nicht sein eigener Co-Requisit sein."""
        with pytest.raises(ValidationError):
            _course("A", corequisites=["A"])

    def test_empty_elective_type_is_none(self):
        """Leerer Wahlfach-Typ wird als 'ohne Typ' gelesen."""
        course = Course.model_validate(
            {"id": "W", "name": "W", "credits": 2, "term": 1, "isElective": True, "electiveType": ""}
        )
        assert course.elective_type is None


# ─── TimeBlock / Section ──────────────────────────────────────────────────────

class TestTimeBlock:
    def test_start_before_end(self):
        """Terminierter Block braucht Beginn < Ende."""
        with pytest.raises(ValidationError):
            TimeBlock(day=Weekday.MONDAY, start=600, end=600)

    def test_non_timed(self):
        """Nicht terminierter Block hat keinen Tag und keine Dauer."""
        block = TimeBlock.non_timed("Virtual")
        assert not block.is_timed
        assert block.duration == 0
        assert str(block) == "Virtual"

    def test_str(self):
        """Anzeige "Monday 09:00-10:30"."""
        assert str(TimeBlock(day=Weekday.MONDAY, start=540, end=630)) == "Monday 09:00-10:30"

    def test_hashable(self):
        """Blöcke sind unveränderlich und als Set-Elemente nutzbar."""
        a = TimeBlock(day=Weekday.MONDAY, start=540, end=630)
        b = TimeBlock(day=Weekday.MONDAY, start=540, end=630)
        assert len({a, b}) == 1

    def test_weekday_index(self):
        """Montag = 0, Sonntag = 6."""
        assert Weekday.MONDAY.index == 0
        assert Weekday.SUNDAY.index == 6


class TestSection:
    def test_scheduling_days_ignore_non_timed(self):
        """Virtuelle Blöcke zählen nicht als Unterrichtstag."""
        section = Section(
            course_id="A", crn="A1",
            schedule=[
                TimeBlock(day=Weekday.TUESDAY, start=420, end=510),
                TimeBlock.non_timed("TBA"),
            ],
        )
        assert section.scheduling_days == {Weekday.TUESDAY}
        assert len(section.timed_blocks) == 1

    def test_is_full(self):
        """Voll bei Einschreibungen ≥ Kapazität."""
        section = Section(course_id="A", crn="A1", max_capacity=2, current_enrollment=2)
        assert section.is_full


# ─── StudentProgress ──────────────────────────────────────────────────────────

class TestStudentProgress:
    def test_mark_passed_returns_new_snapshot(self):
        """Änderungen erzeugen neue Objekte, das Original bleibt leer."""
        empty = StudentProgress()
        progress = empty.mark_passed("A", "b")
        assert progress.passed_courses() == {"A"}
        assert progress.records["A"].grade == "B"
        assert empty.records == {}

    def test_failing_grade_rejected(self):
        """Note außerhalb der Bestehensnoten → ValueError."""
        with pytest.raises(ValueError):
            StudentProgress().mark_passed("A", "D")

    def test_planned_includes_in_progress(self):
        """Geplant und laufend zählen beide als geplant."""
        progress = StudentProgress().mark_planned("A").mark_in_progress("B")
        assert progress.planned_courses() == {"A", "B"}
        assert progress.status_of("B") == ProgressStatus.IN_PROGRESS

    def test_one_record_per_course(self):
        """Ein späterer Status ersetzt den früheren."""
        progress = StudentProgress().mark_planned("A").mark_passed("A")
        assert progress.planned_courses() == set()
        assert progress.passed_courses() == {"A"}

    def test_remove(self):
        """Entfernen ohne Eintrag ist kein Fehler."""
        progress = StudentProgress().mark_planned("A")
        assert progress.remove("A").records == {}
        assert progress.remove("Z").records.keys() == {"A"}

    def test_credit_totals(self):
        """Credits bestanden / geplant / gesamt."""
        courses = [_course("A", credits=4), _course("B", credits=3), _course("C", credits=2)]
        progress = StudentProgress().mark_passed("A").mark_planned("B")
        assert progress.credit_totals(courses) == {"passed": 4, "planned": 3, "total": 9}

    def test_gpa_weighted(self):
        """GPA nach Credits gewichtet, Kurse ohne Note zählen nicht."""
        courses = [_course("A", credits=4), _course("B", credits=2), _course("C")]
        progress = StudentProgress().mark_passed("A", "A").mark_passed("B", "C").mark_passed("C")
        points = {"A": 4.0, "B": 3.0, "C": 2.0}
        assert progress.gpa(courses, points) == pytest.approx((4 * 4.0 + 2 * 2.0) / 6)

    def test_gpa_empty(self):
        """Ohne Noten → 0.0."""
        assert StudentProgress().gpa([], {"A": 4.0}) == 0.0

    def test_save_and_load(self, tmp_path: Path):
        """JSON-Roundtrip des Fortschritts."""
        path = tmp_path / "progress.json"
        progress = StudentProgress().mark_passed("A", "A").mark_planned("B")
        progress.save_json(path)
        loaded = StudentProgress.load_json(path)
        assert loaded.passed_courses() == {"A"}
        assert loaded.planned_courses() == {"B"}

    def test_load_missing_file(self, tmp_path: Path):
        """Fehlende Datei → leerer Fortschritt."""
        assert StudentProgress.load_json(tmp_path / "nope.json").records == {}


# ─── CoursePlan ───────────────────────────────────────────────────────────────

class TestCoursePlan:
    def test_duplicate_course_rejected(self):
        """Jeder Kurs höchstens einmal im Plan."""
        entry = PlannedSection.of("A", _section("A", "A1"))
        with pytest.raises(ValidationError):
            CoursePlan(entries=[entry, entry])

    def test_total_credits(self):
        """Unbekannte Kurse zählen 0 Credits."""
        plan = CoursePlan(entries=[
            PlannedSection.of("A", _section("A", "A1")),
            PlannedSection.of("Z", _section("Z", "Z1")),
        ])
        assert plan.total_credits([_course("A", credits=4)]) == 4
        assert plan.course_ids == ["A", "Z"]
        assert plan.get_entry("Z").section_crn == "Z1"
        assert plan.get_entry("Q") is None

    def test_save_and_load(self, tmp_path: Path):
        """Gespeicherter Plan enthält Zeitstempel und Sektionen."""
        path = tmp_path / "plan.json"
        CoursePlan(entries=[PlannedSection.of("A", _section("A", "A1"))]).save_json(path)
        loaded = CoursePlan.load_json(path)
        assert loaded.saved_at is not None
        assert loaded.entries[0].section.schedule[0].start == 420

    def test_load_missing_raises(self, tmp_path: Path):
        """Fehlender Plan → FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            CoursePlan.load_json(tmp_path / "plan.json")


# ─── Catalog ──────────────────────────────────────────────────────────────────

class TestCatalog:
    def _catalog(self) -> Catalog:
        return Catalog(
            courses=[_course("MED-100"), _course("MED-101", prerequisites=["MED-100"])],
            sections=[
                _section("MED100", "MED100001"),
                _section("MED-100", "MED100002", closed=True),
                _section("MED-101", "MED101001"),
            ],
        )

    def test_course_by_id_normalized(self):
        """Lookup exakt, sonst normalisiert."""
        catalog = self._catalog()
        assert catalog.course_by_id("MED100").id == "MED-100"
        assert catalog.course_by_id("MED-999") is None

    def test_sections_for_course(self):
        """Sektionen tolerant gegenüber ID-Format; geschlossene optional."""
        catalog = self._catalog()
        assert len(catalog.sections_for_course("MED-100")) == 2
        assert [s.crn for s in catalog.sections_for_course("MED-100", include_closed=False)] == [
            "MED100001"
        ]

    def test_section_by_crn(self):
        assert self._catalog().section_by_crn("MED101001").course_id == "MED-101"

    def test_term_summary(self):
        """Semesterübersicht summiert Credits."""
        info = self._catalog().term_summary()
        assert len(info) == 1
        assert info[0].credits == 6
        assert info[0].course_count == 2

    def test_integrity_consistent(self):
        """Konsistenter Katalog ohne Fehler."""
        report = self._catalog().check_integrity()
        assert report.is_consistent
        assert report.errors == []

    def test_integrity_finds_problems(self):
        """Doppelte CRN, unbekannte Voraussetzung und Zyklus sind Fehler."""
        catalog = Catalog(
            courses=[
                _course("A", prerequisites=["B"]),
                _course("B", prerequisites=["A"]),
                _course("C", prerequisites=["X"]),
            ],
            sections=[_section("A", "S1"), _section("B", "S1"), _section("Q", "S2")],
        )
        report = catalog.check_integrity()
        assert not report.is_consistent
        text = " ".join(report.errors)
        assert "CRN S1" in text
        assert "unbekannte Voraussetzung X" in text
        assert "Zyklus" in text
        assert any("unbekannten Kurs Q" in w for w in report.warnings)
