"""Studienfortschritt: bestandene, laufende und geplante Kurse (Pydantic v2)."""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.course import Course

# Fallback-Credits für Kurse, die im Katalog fehlen (nur GPA-Gewichtung)
UNKNOWN_COURSE_CREDITS = 3


class ProgressStatus(str, Enum):
    PASSED = "passed"
    IN_PROGRESS = "in_progress"
    PLANNED = "planned"


class StudentProgressRecord(BaseModel):
    """Fortschritt eines Studierenden in genau einem Kurs."""

    model_config = ConfigDict(populate_by_name=True)

    course_id: str = Field(alias="courseId")
    status: ProgressStatus
    grade: Optional[str] = None
    completed_at: Optional[datetime] = Field(None, alias="completedAt")
    section_id: Optional[str] = Field(None, alias="sectionId")


class StudentProgress(BaseModel):
    """Alle Fortschritts-Einträge eines Studierenden (ein Eintrag pro Kurs).

    Änderungen erzeugen jeweils einen neuen Schnappschuss; der Planer liest
    nur die abgeleiteten Mengen passed_courses() und planned_courses().
    """

    records: dict[str, StudentProgressRecord] = {}

    # ─── Abgeleitete Mengen ───

    def passed_courses(self) -> set[str]:
        """IDs aller bestandenen Kurse."""
        return {cid for cid, r in self.records.items() if r.status == ProgressStatus.PASSED}

    def planned_courses(self) -> set[str]:
        """IDs aller geplanten oder laufenden Kurse."""
        return {
            cid for cid, r in self.records.items()
            if r.status in (ProgressStatus.PLANNED, ProgressStatus.IN_PROGRESS)
        }

    def status_of(self, course_id: str) -> Optional[ProgressStatus]:
        record = self.records.get(course_id)
        return record.status if record else None

    # ─── Änderungen (liefern neue Schnappschüsse) ───

    def _with(self, record: StudentProgressRecord) -> "StudentProgress":
        records = dict(self.records)
        records[record.course_id] = record
        return StudentProgress(records=records)

    def mark_passed(
        self,
        course_id: str,
        grade: Optional[str] = None,
        passing_grades: Iterable[str] = ("A", "B", "C"),
    ) -> "StudentProgress":
        """Markiert einen Kurs als bestanden.

        Eine angegebene Note muss eine Bestehensnote sein (Standard: C oder besser).
        """
        allowed = list(passing_grades)
        if grade is not None:
            grade = grade.strip().upper()
            if grade not in allowed:
                raise ValueError(
                    f"Note '{grade}' reicht nicht zum Bestehen von {course_id} "
                    f"(erlaubt: {', '.join(allowed)})."
                )
        return self._with(StudentProgressRecord(
            course_id=course_id,
            status=ProgressStatus.PASSED,
            grade=grade,
            completed_at=datetime.now(timezone.utc),
        ))

    def mark_in_progress(self, course_id: str, section_id: Optional[str] = None) -> "StudentProgress":
        return self._with(StudentProgressRecord(
            course_id=course_id, status=ProgressStatus.IN_PROGRESS, section_id=section_id,
        ))

    def mark_planned(self, course_id: str, section_id: Optional[str] = None) -> "StudentProgress":
        return self._with(StudentProgressRecord(
            course_id=course_id, status=ProgressStatus.PLANNED, section_id=section_id,
        ))

    def remove(self, course_id: str) -> "StudentProgress":
        """Entfernt den Eintrag eines Kurses (kein Fehler, wenn keiner existiert)."""
        records = {cid: r for cid, r in self.records.items() if cid != course_id}
        return StudentProgress(records=records)

    # ─── Auswertung ───

    def credit_totals(self, courses: list[Course]) -> dict[str, int]:
        """Credits: bestanden / geplant (inkl. laufend) / Gesamtcurriculum."""
        passed = planned = total = 0
        for course in courses:
            total += course.credits
            status = self.status_of(course.id)
            if status == ProgressStatus.PASSED:
                passed += course.credits
            elif status in (ProgressStatus.PLANNED, ProgressStatus.IN_PROGRESS):
                planned += course.credits
        return {"passed": passed, "planned": planned, "total": total}

    def gpa(self, courses: list[Course], grade_points: dict[str, float]) -> float:
        """Credit-gewichteter Notendurchschnitt der bestandenen Kurse mit Note."""
        credits_by_id = {c.id: c.credits for c in courses}
        total_points = 0.0
        total_credits = 0
        for record in self.records.values():
            if record.status != ProgressStatus.PASSED or not record.grade:
                continue
            points = grade_points.get(record.grade)
            if points is None:
                continue
            weight = credits_by_id.get(record.course_id, UNKNOWN_COURSE_CREDITS)
            total_points += points * weight
            total_credits += weight
        return total_points / total_credits if total_credits > 0 else 0.0

    # ─── Persistenz ───

    def save_json(self, path: Path) -> None:
        """Speichert den Fortschritt als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "StudentProgress":
        """Lädt den Fortschritt; ohne Datei ergibt sich ein leerer Fortschritt."""
        path = Path(path)
        if not path.exists():
            return cls()
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
