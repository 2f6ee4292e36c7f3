"""Validierung eines Kursplans vor dem Speichern.

Prüft den Plan unabhängig vom Vorschlagsalgorithmus, d.h. auch manuell
zusammengestellte Pläne.
"""

from collections import Counter
from typing import Literal, Optional, Sequence

from pydantic import BaseModel

from config.defaults import default_planner_config
from config.schema import PlannerConfig
from models.catalog import Catalog
from models.course import course_ids_match
from models.plan import PlannedSection
from planner.conflicts import detect_plan_conflicts
from planner.eligibility import CourseStatus, EligibilityResolver


class ValidationViolation(BaseModel):
    """Ein einzelnes Problem im Plan."""

    severity: Literal["error", "warning"]
    constraint: str      # z.B. "schedule_conflict"
    description: str
    entity: str          # Kurs-ID oder CRN


class ValidationReport(BaseModel):
    """Ergebnis der Planprüfung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)
    total_credits: int = 0

    @property
    def errors(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "warning"]

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ PLAN GÜLTIG[/bold green]"
            if self.is_valid
            else "[bold red]✗ PROBLEME GEFUNDEN[/bold red]"
        )
        lines = [
            status,
            f"Credits: {self.total_credits} | "
            f"Fehler: {len(self.errors)} | Warnungen: {len(self.warnings)}",
        ]
        console.print(Panel("\n".join(lines), title="Plan-Validierung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Probleme gefunden.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Prüfung", width=22)
        table.add_column("Kurs/CRN", width=12)
        table.add_column("Beschreibung")

        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.constraint,
                v.entity,
                v.description,
            )
        console.print(table)


class PlanValidator:
    """Prüft einen Kursplan gegen Katalog, Fortschritt und Credit-Grenzen."""

    def __init__(self, config: Optional[PlannerConfig] = None) -> None:
        self.config = config or default_planner_config()

    def validate(
        self,
        plan: Sequence[PlannedSection],
        catalog: Catalog,
        passed_courses: set[str],
        planned_courses: Optional[set[str]] = None,
    ) -> ValidationReport:
        """Führt alle Prüfungen durch und gibt einen ValidationReport zurück."""
        planned_courses = planned_courses or set()
        violations: list[ValidationViolation] = []

        violations.extend(self._check_duplicates(plan))
        violations.extend(self._check_conflicts(plan))
        violations.extend(self._check_sections(plan, catalog))
        violations.extend(self._check_eligibility(plan, catalog, passed_courses, planned_courses))
        credits = _plan_credits(plan, catalog)
        violations.extend(self._check_credits(credits))

        has_errors = any(v.severity == "error" for v in violations)
        return ValidationReport(violations=violations, is_valid=not has_errors, total_credits=credits)

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_duplicates(self, plan: Sequence[PlannedSection]) -> list[ValidationViolation]:
        """Jeder Kurs darf nur einmal im Plan stehen."""
        counts = Counter(e.course_id for e in plan)
        return [
            ValidationViolation(
                severity="error",
                constraint="duplicate_course",
                entity=course_id,
                description=f"Kurs ist {n}x im Plan.",
            )
            for course_id, n in counts.items() if n > 1
        ]

    def _check_conflicts(self, plan: Sequence[PlannedSection]) -> list[ValidationViolation]:
        """Keine zwei Sektionen dürfen sich zeitlich überschneiden."""
        return [
            ValidationViolation(
                severity="error",
                constraint="schedule_conflict",
                entity=c.course1,
                description=f"Überschneidung mit {c.course2} ({c.conflict_time}).",
            )
            for c in detect_plan_conflicts(plan)
        ]

    def _check_sections(
        self, plan: Sequence[PlannedSection], catalog: Catalog
    ) -> list[ValidationViolation]:
        """Gewählte Sektion gehört zum Kurs und ist offen."""
        violations: list[ValidationViolation] = []
        for entry in plan:
            if not course_ids_match(entry.section.course_id, entry.course_id):
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="section_mismatch",
                    entity=entry.section_crn,
                    description=(
                        f"Sektion gehört zu {entry.section.course_id}, "
                        f"nicht zu {entry.course_id}."
                    ),
                ))
            if entry.section_crn != entry.section.crn:
                violations.append(ValidationViolation(
                    severity="warning",
                    constraint="section_mismatch",
                    entity=entry.section_crn,
                    description=f"CRN im Plan weicht von der Sektion ab ({entry.section.crn}).",
                ))
            known = catalog.section_by_crn(entry.section_crn)
            if (known is not None and known.closed) or entry.section.closed:
                violations.append(ValidationViolation(
                    severity="warning",
                    constraint="closed_section",
                    entity=entry.section_crn,
                    description=f"Sektion von {entry.course_id} ist geschlossen.",
                ))
        return violations

    def _check_eligibility(
        self,
        plan: Sequence[PlannedSection],
        catalog: Catalog,
        passed_courses: set[str],
        planned_courses: set[str],
    ) -> list[ValidationViolation]:
        """Nur verfügbare Kurse gehören in den Plan.

        Die Kurse des Plans gelten dabei gegenseitig als geplant
        (Co-Requisiten dürfen gemeinsam belegt werden).
        """
        resolver = EligibilityResolver(catalog.courses, self.config.eligibility)
        assumed = planned_courses | {e.course_id for e in plan}
        violations: list[ValidationViolation] = []
        for entry in plan:
            course = catalog.course_by_id(entry.course_id)
            if course is None:
                violations.append(ValidationViolation(
                    severity="warning",
                    constraint="unknown_course",
                    entity=entry.course_id,
                    description="Kurs nicht im Katalog (zählt 0 Credits).",
                ))
                continue
            status = resolver.resolve_all(passed_courses, assumed, [course])[course.id]
            if status == CourseStatus.PASSED:
                violations.append(ValidationViolation(
                    severity="warning",
                    constraint="already_passed",
                    entity=course.id,
                    description="Kurs ist bereits bestanden.",
                ))
            elif status == CourseStatus.BLOCKED:
                missing = [p for p in course.prerequisites if p not in passed_courses]
                reason = (
                    f"fehlende Voraussetzungen: {', '.join(missing)}"
                    if missing else "Co-Requisit oder Studienfortschritt fehlt"
                )
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="not_available",
                    entity=course.id,
                    description=f"Kurs ist gesperrt ({reason}).",
                ))
        return violations

    def _check_credits(self, credits: int) -> list[ValidationViolation]:
        """Harte Grenze = Fehler, Vorschlagsgrenze = Warnung."""
        limits = self.config.limits
        if credits > limits.hard_max_credits:
            return [ValidationViolation(
                severity="error",
                constraint="credit_limit",
                entity="Plan",
                description=f"{credits} Credits > Höchstgrenze {limits.hard_max_credits}.",
            )]
        if credits > limits.max_credits:
            return [ValidationViolation(
                severity="warning",
                constraint="credit_limit",
                entity="Plan",
                description=f"{credits} Credits > empfohlene Grenze {limits.max_credits}.",
            )]
        return []


def _plan_credits(plan: Sequence[PlannedSection], catalog: Catalog) -> int:
    total = 0
    for entry in plan:
        course = catalog.course_by_id(entry.course_id)
        total += course.credits if course is not None else 0
    return total


def can_save_plan(
    plan: Sequence[PlannedSection],
    catalog: Catalog,
    config: Optional[PlannerConfig] = None,
) -> bool:
    """Darf der Plan gespeichert werden? Nicht leer, ohne Konflikte, ≤ Höchstgrenze."""
    config = config or default_planner_config()
    if not plan:
        return False
    if detect_plan_conflicts(plan):
        return False
    return _plan_credits(plan, catalog) <= config.limits.hard_max_credits
