"""Kursplan: gewählte Sektionen pro Kurs (Pydantic v2)."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from models.course import Course
from models.section import Section


class PlannedSection(BaseModel):
    """Ein Kurs im Plan mit der gewählten Sektion."""

    model_config = ConfigDict(populate_by_name=True)

    course_id: str = Field(alias="courseId")
    section_crn: str = Field(alias="sectionCrn")
    section: Section

    @classmethod
    def of(cls, course_id: str, section: Section) -> "PlannedSection":
        return cls(course_id=course_id, section_crn=section.crn, section=section)


class ScheduleConflict(BaseModel):
    """Ein Terminkonflikt zwischen zwei Kursen eines Plans."""

    course1: str
    course2: str
    conflict_time: str    # z.B. "Monday 09:00-10:30"


class CoursePlan(BaseModel):
    """Geordneter Kursplan; jeder Kurs kommt höchstens einmal vor."""

    entries: list[PlannedSection] = []
    saved_at: Optional[datetime] = None

    @model_validator(mode='after')
    def _check_unique_courses(self):
        seen: set[str] = set()
        for entry in self.entries:
            if entry.course_id in seen:
                raise ValueError(f"Kurs {entry.course_id} ist mehrfach im Plan.")
            seen.add(entry.course_id)
        return self

    @property
    def course_ids(self) -> list[str]:
        return [e.course_id for e in self.entries]

    def total_credits(self, courses: list[Course]) -> int:
        """Summe der Credits; Kurse außerhalb des Katalogs zählen 0."""
        credits_by_id = {c.id: c.credits for c in courses}
        return sum(credits_by_id.get(e.course_id, 0) for e in self.entries)

    def get_entry(self, course_id: str) -> Optional[PlannedSection]:
        for entry in self.entries:
            if entry.course_id == course_id:
                return entry
        return None

    # ─── Persistenz ───

    def save_json(self, path: Path) -> None:
        """Speichert den Plan als JSON-Datei (mit Zeitstempel)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        stamped = self.model_copy(update={"saved_at": datetime.now(timezone.utc)})
        with open(path, "w", encoding="utf-8") as f:
            f.write(stamped.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "CoursePlan":
        """Lädt einen gespeicherten Plan."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Plan nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
