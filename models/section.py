"""Datenmodelle für Sektionen und wöchentliche Zeitblöcke (Pydantic v2)."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @property
    def index(self) -> int:
        """0=Montag .. 6=Sonntag."""
        return list(Weekday).index(self)


class TimeBlock(BaseModel):
    """Ein wiederkehrender Wochentermin (Tag + Beginn/Ende in Minuten).

    Immutable (frozen) damit es als Dict-Key / Set-Element nutzbar ist.
    Ohne Tag (day=None) ist der Block "nicht terminiert" (virtuell,
    Rotation, TBA): er kollidiert nie und zählt nicht als Unterrichtstag.
    """

    model_config = ConfigDict(frozen=True)

    # Wochentag oder None für nicht terminierte Blöcke
    day: Optional[Weekday] = None
    # Beginn in Minuten seit Mitternacht (0-1439)
    start: int = Field(0, ge=0, le=1439)
    # Ende in Minuten seit Mitternacht
    end: int = Field(0, ge=0, le=1440)
    # Originalbezeichnung bei nicht terminierten Blöcken ("Virtual", "TBA")
    label: Optional[str] = None

    @model_validator(mode='after')
    def _check_interval(self):
        if self.day is not None and self.start >= self.end:
            raise ValueError(
                f"Zeitblock {self.day.value}: Beginn ({self.start}) muss vor Ende ({self.end}) liegen."
            )
        return self

    @classmethod
    def non_timed(cls, label: Optional[str] = None) -> "TimeBlock":
        """Erzeugt einen nicht terminierten Block."""
        return cls(day=None, start=0, end=0, label=label)

    @property
    def is_timed(self) -> bool:
        return self.day is not None

    @property
    def duration(self) -> int:
        """Dauer in Minuten (0 für nicht terminierte Blöcke)."""
        return self.end - self.start if self.is_timed else 0

    def __str__(self) -> str:
        if not self.is_timed:
            return self.label or "n/a"
        return (
            f"{self.day.value} {self.start // 60:02d}:{self.start % 60:02d}"
            f"-{self.end // 60:02d}:{self.end % 60:02d}"
        )


class Section(BaseModel):
    """Eine Sektion (Parallelgruppe) eines Kurses mit eindeutiger CRN."""

    model_config = ConfigDict(populate_by_name=True)

    course_id: str = Field(alias="courseId")
    crn: str
    room: str = "TBA"
    schedule: list[TimeBlock] = []
    id: Optional[str] = None                   # "sect-MED100001"
    section_number: str = Field("", alias="sectionNumber")
    instructor: str = "Por Asignar"
    max_capacity: int = Field(30, ge=0, alias="maxCapacity")
    current_enrollment: int = Field(0, ge=0, alias="currentEnrollment")
    closed: bool = False
    label: str = ""                            # Rohtext des Stundenplans

    @property
    def timed_blocks(self) -> list[TimeBlock]:
        """Alle terminierten Blöcke."""
        return [b for b in self.schedule if b.is_timed]

    @property
    def scheduling_days(self) -> set[Weekday]:
        """Wochentage, an denen die Sektion stattfindet."""
        return {b.day for b in self.schedule if b.is_timed}

    @property
    def is_full(self) -> bool:
        return self.max_capacity > 0 and self.current_enrollment >= self.max_capacity

    def __repr__(self) -> str:
        return f"Section({self.crn}, {self.course_id}, {len(self.schedule)} Blöcke)"
