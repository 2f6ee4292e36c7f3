"""Datenmodell für einen Kurs des Curriculums (Pydantic v2)."""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from config.schema import ElectiveType

_NON_ALNUM = re.compile(r"[^0-9A-Za-z]")


def normalize_course_id(course_id: str) -> str:
    """'med-100' → 'MED100'. Entfernt alle Nicht-Alphanumerika."""
    return _NON_ALNUM.sub("", course_id or "").upper()


def course_ids_match(a: str, b: str) -> bool:
    """True bei exakter oder normalisierter Übereinstimmung (MED-100 == MED100)."""
    if a == b:
        return True
    norm_a = normalize_course_id(a)
    return bool(norm_a) and norm_a == normalize_course_id(b)


class Course(BaseModel):
    """Repräsentiert einen Kurs des Kurskatalogs.

    Der Katalog wird von der Katalogpflege erstellt; der Planer liest ihn nur.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str                                    # "MED-100"
    name: str                                  # "Anatomie I"
    credits: int = Field(ge=0)
    term: int = Field(ge=1)                    # Nominelles Semester im Curriculum
    prerequisites: list[str] = []              # Müssen bestanden sein
    corequisites: list[str] = []               # Parallel belegbar
    is_elective: bool = Field(False, alias="isElective")
    elective_type: Optional[ElectiveType] = Field(None, alias="electiveType")
    theoretical_hours: int = Field(0, ge=0, alias="theoreticalHours")
    practical_hours: int = Field(0, ge=0, alias="practicalHours")
    block: Optional[str] = None                # "Ciencias Básicas", nur Anzeige
    description: str = ""

    @field_validator("id")
    @classmethod
    def _strip_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Kurs-ID darf nicht leer sein.")
        return v

    @field_validator("prerequisites", "corequisites", mode="before")
    @classmethod
    def _dedupe_ids(cls, v):
        if v is None:
            return []
        seen: list[str] = []
        for item in v:
            item = str(item).strip()
            if item and item not in seen:
                seen.append(item)
        return seen

    @field_validator("elective_type", mode="before")
    @classmethod
    def _empty_type_is_none(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    @model_validator(mode='after')
    def _check_self_reference(self):
        if self.id in self.prerequisites:
            raise ValueError(f"Kurs {self.id} ist seine eigene Voraussetzung.")
        if self.id in self.corequisites:
            raise ValueError(f"Kurs {self.id} ist sein eigener Co-Requisit.")
        return self

    @property
    def total_hours(self) -> int:
        """Summe aus Theorie- und Praxisstunden."""
        return self.theoretical_hours + self.practical_hours
