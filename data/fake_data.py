"""Demo-Katalog-Generator für den Studienplaner.

Erzeugt einen reproduzierbaren Medizin-Katalog (Kurse + Sektionen) mit
typischen Stolperstellen für Tests und Vorführungen:

  1. Voraussetzungsketten: jeder Pflichtkurs ab Semester 2 hängt von
     einem Kurs des Vorsemesters ab (azyklisch nach Konstruktion).
  2. Co-Requisiten-Paare: Theorie + Praktikum im selben Semester.
  3. Überschneidungen: Sektionen eines Semesters teilen sich wenige
     Zeitfenster, damit der Planvorschlag ausweichen muss.
  4. Geschlossene und virtuelle Sektionen.
  5. Allgemeine und Fach-Wahlfächer (Grundlagen / klinisch).
"""

import random
from typing import Optional

from config.schema import ElectiveType
from models.catalog import Catalog
from models.course import Course
from models.section import Section, TimeBlock, Weekday

# ─── Namens-Listen ────────────────────────────────────────────────────────────

_REQUIRED_TOPICS = [
    "Anatomía", "Bioquímica", "Histología", "Fisiología", "Embriología",
    "Microbiología", "Farmacología", "Patología", "Inmunología", "Genética",
    "Semiología", "Medicina Interna", "Cirugía", "Pediatría",
    "Ginecología", "Psiquiatría", "Neurología", "Cardiología",
    "Radiología", "Epidemiología", "Salud Pública", "Bioética",
]

_GENERAL_ELECTIVES = [
    "Inglés Médico", "Arte y Medicina", "Deporte y Salud", "Historia de la Medicina",
]

_PROFESSIONAL_ELECTIVES = [
    "Nutrición Clínica", "Medicina Deportiva", "Geriatría", "Medicina Tropical",
    "Cuidados Paliativos", "Toxicología",
]

_INSTRUCTORS = [
    "Dra. García", "Dr. Martínez", "Dra. López", "Dr. Pérez", "Dra. Sánchez",
    "Dr. Ramírez", "Dra. Torres", "Dr. Flores", "Por Asignar",
]

_BLOCKS = {
    range(1, 6): "Ciencias Básicas",
    range(6, 12): "Ciencias Preclínicas",
    range(12, 19): "Ciencias Clínicas",
}

# Zeitfenster (Beginn in Minuten) und typische Tagesmuster
_START_TIMES = [7 * 60, 9 * 60, 11 * 60, 14 * 60, 16 * 60]
_DAY_PATTERNS = [
    [Weekday.MONDAY, Weekday.WEDNESDAY],
    [Weekday.TUESDAY, Weekday.THURSDAY],
    [Weekday.MONDAY, Weekday.WEDNESDAY, Weekday.FRIDAY],
    [Weekday.FRIDAY],
    [Weekday.SATURDAY],
]


def _block_name(term: int) -> Optional[str]:
    for terms, name in _BLOCKS.items():
        if term in terms:
            return name
    return None


class FakeCatalogGenerator:
    """Erzeugt einen Demo-Katalog.

    Args:
        terms:             Anzahl Semester (1..18)
        courses_per_term:  Pflichtkurse pro Semester
        seed:              Zufalls-Seed (gleicher Seed → gleicher Katalog)
    """

    def __init__(self, terms: int = 12, courses_per_term: int = 4, seed: Optional[int] = None) -> None:
        self.terms = max(1, min(terms, 18))
        self.courses_per_term = max(1, courses_per_term)
        self.rng = random.Random(seed)
        self._number = 100

    def _next_id(self) -> str:
        course_id = f"MED-{self._number}"
        self._number += 1
        return course_id

    # ─── Kurse ────────────────────────────────────────────────────────────────

    def _generate_required(self) -> list[Course]:
        """Pflichtkurse mit Voraussetzungsketten und Co-Requisiten-Paaren."""
        courses: list[Course] = []
        previous: list[str] = []
        for term in range(1, self.terms + 1):
            current: list[str] = []
            for i in range(self.courses_per_term):
                topic = _REQUIRED_TOPICS[(term * self.courses_per_term + i) % len(_REQUIRED_TOPICS)]
                course_id = self._next_id()
                prereqs = [self.rng.choice(previous)] if previous and self.rng.random() < 0.7 else []
                theory = self.rng.choice([32, 48, 64])
                practice = self.rng.choice([0, 16, 32])
                courses.append(Course(
                    id=course_id,
                    name=f"{topic} {term}",
                    credits=self.rng.choice([3, 4, 5, 6]),
                    term=term,
                    prerequisites=prereqs,
                    theoretical_hours=theory,
                    practical_hours=practice,
                    block=_block_name(term),
                ))
                current.append(course_id)

            # Praktikum als Co-Requisit des ersten Kurses (nur mit Voraussetzung sperrend)
            if self.rng.random() < 0.5:
                lead = courses[-len(current)]
                lab_id = self._next_id()
                courses.append(Course(
                    id=lab_id,
                    name=f"Laboratorio de {lead.name}",
                    credits=2,
                    term=term,
                    prerequisites=list(lead.prerequisites),
                    corequisites=[lead.id],
                    practical_hours=32,
                    block=_block_name(term),
                ))
                current.append(lab_id)
            previous = current
        return courses

    def _generate_electives(self) -> list[Course]:
        electives: list[Course] = []
        for name in _GENERAL_ELECTIVES:
            electives.append(Course(
                id=self._next_id(),
                name=name,
                credits=2,
                term=self.rng.randint(1, self.terms),
                is_elective=True,
                elective_type=ElectiveType.GENERAL,
                theoretical_hours=32,
            ))
        for name in _PROFESSIONAL_ELECTIVES:
            term = self.rng.randint(1, self.terms)
            electives.append(Course(
                id=self._next_id(),
                name=name,
                credits=3,
                term=term,
                is_elective=True,
                elective_type=ElectiveType.PROFESSIONAL,
                theoretical_hours=32,
                practical_hours=16,
                block=_block_name(term),
            ))
        return electives

    # ─── Sektionen ────────────────────────────────────────────────────────────

    def _sections_for(self, course: Course) -> list[Section]:
        """1-3 Sektionen pro Kurs, CRN = Kurscode ohne Bindestrich + Nummer."""
        sections: list[Section] = []
        code = course.id.replace("-", "")
        for n in range(1, self.rng.randint(1, 3) + 1):
            crn = f"{code}{n:03d}"
            if course.is_elective and self.rng.random() < 0.25:
                schedule = [TimeBlock.non_timed("Virtual")]
                room = "Virtual"
            else:
                days = self.rng.choice(_DAY_PATTERNS)
                start = self.rng.choice(_START_TIMES)
                length = self.rng.choice([90, 120])
                schedule = [TimeBlock(day=d, start=start, end=start + length) for d in days]
                room = f"{self.rng.choice('ABC')}-{self.rng.randint(101, 320)}"
            sections.append(Section(
                id=f"sect-{crn}",
                course_id=course.id,
                crn=crn,
                section_number=f"{n:03d}",
                room=room,
                instructor=self.rng.choice(_INSTRUCTORS),
                max_capacity=30,
                current_enrollment=self.rng.randint(0, 30),
                closed=self.rng.random() < 0.1,
                schedule=schedule,
            ))
        return sections

    # ─── Vollständiger Datensatz ──────────────────────────────────────────────

    def generate(self) -> Catalog:
        """Erzeugt den vollständigen Katalog."""
        courses = self._generate_required() + self._generate_electives()
        sections = [s for c in courses for s in self._sections_for(c)]
        return Catalog(courses=courses, sections=sections)

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, catalog: Catalog) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der erzeugten Daten aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Erzeugter Demo-Katalog", box=box.ROUNDED)
        table.add_column("Kategorie", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        table.add_column("Details")

        electives = [c for c in catalog.courses if c.is_elective]
        with_coreq = sum(1 for c in catalog.courses if c.corequisites)
        closed = sum(1 for s in catalog.sections if s.closed)
        virtual = sum(1 for s in catalog.sections if not s.timed_blocks)
        table.add_row("Kurse", str(len(catalog.courses)),
                      f"{len(catalog.courses) - len(electives)} Pflicht, {len(electives)} Wahl")
        table.add_row("Semester", str(self.terms), "")
        table.add_row("Co-Requisiten", str(with_coreq), "")
        table.add_row("Sektionen", str(len(catalog.sections)),
                      f"{closed} geschlossen, {virtual} virtuell")

        console.print(table)
