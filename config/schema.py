from pydantic import BaseModel, Field, model_validator
from typing import Optional
from enum import Enum


class ElectiveType(str, Enum):
    GENERAL = "general"
    PROFESSIONAL = "professional"


# ─── FREISCHALTUNG (Voraussetzungen + Wahlfächer) ───

class EligibilityRules(BaseModel):
    """Regeln für die Freischaltung von Wahlfächern.

    Der Studienfortschritt ("erreichtes Semester") ist eine Heuristik:
    Ein Semester gilt als erreicht, sobald mindestens `term_reached_ratio`
    seiner Pflichtkurse bestanden oder eingeplant sind.
    """
    # Anteil der Pflichtkurse eines Semesters, ab dem es als erreicht gilt
    term_reached_ratio: float = Field(0.5, gt=0.0, le=1.0,
        description="Anteil Pflichtkurse, ab dem ein Semester als erreicht gilt")
    # Höchstes Semester, das beim Fortschritts-Scan geprüft wird
    max_term: int = Field(18, ge=1, le=40,
        description="Letztes Semester im Fortschritts-Scan")
    # Allgemeine Wahlfächer ab diesem erreichten Semester
    general_min_progress: int = Field(6, ge=0,
        description="Allgemeine Wahlfächer: Mindest-Fortschritt")
    # Grenze zwischen Grundlagen- und klinischen Fachwahlfächern
    professional_term_boundary: int = Field(11, ge=1,
        description="Fachwahlfächer bis zu diesem Semester gelten als Grundlagen")
    # Fachwahlfächer (Grundlagen) ab diesem erreichten Semester
    professional_basic_min_progress: int = Field(11, ge=0,
        description="Fachwahlfächer (Grundlagen): Mindest-Fortschritt")
    # Fachwahlfächer (klinisch) ab diesem erreichten Semester
    professional_clinical_min_progress: int = Field(15, ge=0,
        description="Fachwahlfächer (klinisch): Mindest-Fortschritt")

    def min_progress_for(self, elective_type: Optional[ElectiveType], term: int) -> int:
        """Benötigter Studienfortschritt für ein Wahlfach (0 = keine Schranke)."""
        if elective_type == ElectiveType.GENERAL:
            return self.general_min_progress
        if elective_type == ElectiveType.PROFESSIONAL:
            if term <= self.professional_term_boundary:
                return self.professional_basic_min_progress
            return self.professional_clinical_min_progress
        return 0


# ─── CREDIT-GRENZEN ───

class PlanLimits(BaseModel):
    """Credit-Grenzen für Planvorschläge und gespeicherte Pläne."""
    # Zielwert für den automatischen Planvorschlag
    max_credits: int = Field(28, ge=1, le=60,
        description="Credit-Obergrenze für den automatischen Vorschlag")
    # Harte Obergrenze: Pläne darüber dürfen nicht gespeichert werden
    hard_max_credits: int = Field(31, ge=1, le=60,
        description="Absolute Credit-Obergrenze eines gespeicherten Plans")
    # Credit-Ziel pro Semester für die Semesterplanung
    term_max_credits: int = Field(22, ge=1, le=60,
        description="Credit-Obergrenze pro Semester (Semesterplanung)")

    @model_validator(mode='after')
    def _check_limits(self):
        if self.max_credits > self.hard_max_credits:
            raise ValueError(
                f"max_credits ({self.max_credits}) > hard_max_credits ({self.hard_max_credits})"
            )
        return self


# ─── ZEITBLÖCKE ───

class TimeDefaults(BaseModel):
    """Ersatzwerte für die Normalisierung von Uhrzeiten."""
    # Ersatz-Beginn für unlesbare 12h-Eingaben (Format "HH:MM", 24h)
    fallback_start: str = Field("07:00", pattern=r"^\d{2}:\d{2}$",
        description="Ersatz-Beginn für unlesbare Eingaben")
    # Ersatz-Ende für unlesbare 12h-Eingaben (Format "HH:MM", 24h)
    fallback_end: str = Field("09:00", pattern=r"^\d{2}:\d{2}$",
        description="Ersatz-Ende für unlesbare Eingaben")
    # Dauer eines Blocks ohne Credit-Angabe (Minuten)
    default_block_minutes: int = Field(90, ge=15, le=480,
        description="Standarddauer eines Blocks (Minuten)")
    # Wöchentliche Präsenzminuten pro Credit (Text-Import)
    minutes_per_credit: int = Field(45, ge=1, le=240,
        description="Wochenminuten pro Credit")

    @model_validator(mode='after')
    def _check_fallback_order(self):
        if self.fallback_start >= self.fallback_end:
            raise ValueError(
                f"fallback_start ({self.fallback_start}) muss vor fallback_end "
                f"({self.fallback_end}) liegen")
        return self


# ─── DATENPFADE ───

class DataPaths(BaseModel):
    """Dateipfade der Datensätze (relativ zum Arbeitsverzeichnis)."""
    courses_json: str = Field("data/courses.json",
        description="Kurskatalog (JSON-Array)")
    sections_json: str = Field("data/sections.json",
        description="Sektionen (flaches Array oder {courses: [...]})")
    progress_json: str = Field("output/student_progress.json",
        description="Studienfortschritt")
    plan_json: str = Field("output/course_plan.json",
        description="Gespeicherter Kursplan")


# ─── GESAMT-CONFIG ───

class PlannerConfig(BaseModel):
    """Gesamtkonfiguration des Studienplaners."""
    # Name des Studiengangs (nur Anzeige)
    program_name: str = Field("Medizin",
        description="Name des Studiengangs")
    # Freischaltungsregeln
    eligibility: EligibilityRules = Field(default_factory=EligibilityRules)
    # Credit-Grenzen
    limits: PlanLimits = Field(default_factory=PlanLimits)
    # Normalisierung von Uhrzeiten
    times: TimeDefaults = Field(default_factory=TimeDefaults)
    # Dateipfade
    paths: DataPaths = Field(default_factory=DataPaths)
    # Noten, mit denen ein Kurs als bestanden gilt
    passing_grades: list[str] = Field(default=["A", "B", "C"],
        description="Noten, mit denen ein Kurs bestanden ist")
    # Notenpunkte für die GPA-Berechnung
    grade_points: dict[str, float] = Field(
        default={"A": 4.0, "B": 3.0, "C": 2.0, "D": 1.0, "F": 0.0},
        description="Notenpunkte für die GPA")

    @model_validator(mode='after')
    def _check_passing_grades(self):
        unknown = [g for g in self.passing_grades if g not in self.grade_points]
        if unknown:
            raise ValueError(f"Unbekannte Bestehensnoten ohne Notenpunkte: {unknown}")
        return self
