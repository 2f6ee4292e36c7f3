"""Studienfortschritt: Kennzahlen für Statistik-Ansicht und CLI."""

from typing import Optional

from pydantic import BaseModel

from config.defaults import default_planner_config
from config.schema import PlannerConfig
from models.catalog import Catalog
from models.progress import StudentProgress
from planner.eligibility import term_progress_level


class TermCompletion(BaseModel):
    """Erfüllung der Pflichtkurse eines Semesters."""

    term: int
    required: int
    passed: int
    planned: int

    @property
    def percent(self) -> int:
        return round(self.passed / self.required * 100) if self.required else 0


class ProgressStats(BaseModel):
    """Kennzahlen des Studienfortschritts."""

    total_courses: int
    passed_courses: int
    planned_courses: int
    total_credits: int
    passed_credits: int
    planned_credits: int
    gpa: float
    progress_level: int
    terms: list[TermCompletion] = []

    @property
    def course_percent(self) -> int:
        return round(self.passed_courses / self.total_courses * 100) if self.total_courses else 0

    @property
    def credit_percent(self) -> int:
        return round(self.passed_credits / self.total_credits * 100) if self.total_credits else 0

    def print_rich(self) -> None:
        """Gibt die Kennzahlen als Rich-Tabellen aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        lines = [
            f"Kurse bestanden:   [bold]{self.passed_courses}[/bold] / {self.total_courses} "
            f"([cyan]{self.course_percent}%[/cyan])",
            f"Credits bestanden: [bold]{self.passed_credits}[/bold] / {self.total_credits} "
            f"([cyan]{self.credit_percent}%[/cyan])",
            f"Geplant/laufend:   {self.planned_courses} Kurse, {self.planned_credits} Credits",
            f"Notendurchschnitt: [bold]{self.gpa:.2f}[/bold]",
            f"Erreichtes Semester: [bold]{self.progress_level}[/bold]",
        ]
        console.print(Panel("\n".join(lines), title="Studienfortschritt", border_style="cyan"))

        if not self.terms:
            return
        table = Table(title="Pflichtkurse pro Semester", box=box.SIMPLE_HEAD)
        table.add_column("Semester", justify="right", style="bold")
        table.add_column("Pflicht", justify="right")
        table.add_column("Bestanden", justify="right")
        table.add_column("Geplant", justify="right")
        table.add_column("Erfüllt", justify="right")
        for t in self.terms:
            color = "green" if t.percent == 100 else ("yellow" if t.percent >= 50 else "dim")
            table.add_row(
                str(t.term), str(t.required), str(t.passed), str(t.planned),
                f"[{color}]{t.percent}%[/{color}]",
            )
        console.print(table)


def progress_statistics(
    catalog: Catalog,
    progress: StudentProgress,
    config: Optional[PlannerConfig] = None,
) -> ProgressStats:
    """Berechnet alle Kennzahlen aus Katalog und Fortschritt."""
    config = config or default_planner_config()
    passed = progress.passed_courses()
    planned = progress.planned_courses()
    known = {c.id for c in catalog.courses}
    totals = progress.credit_totals(catalog.courses)

    terms: dict[int, TermCompletion] = {}
    for course in catalog.courses:
        if course.is_elective:
            continue
        info = terms.setdefault(
            course.term, TermCompletion(term=course.term, required=0, passed=0, planned=0)
        )
        info.required += 1
        if course.id in passed:
            info.passed += 1
        elif course.id in planned:
            info.planned += 1

    return ProgressStats(
        total_courses=len(catalog.courses),
        passed_courses=len(passed & known),
        planned_courses=len(planned & known),
        total_credits=totals["total"],
        passed_credits=totals["passed"],
        planned_credits=totals["planned"],
        gpa=round(progress.gpa(catalog.courses, config.grade_points), 2),
        progress_level=term_progress_level(catalog.courses, passed | planned, config.eligibility),
        terms=[terms[t] for t in sorted(terms)],
    )
