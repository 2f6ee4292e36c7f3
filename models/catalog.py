"""Catalog: Kurskatalog + Sektionen + Integritäts-Check (Pydantic v2)."""

from collections import Counter
from typing import Optional

from pydantic import BaseModel

from models.course import Course, course_ids_match
from models.section import Section


class CatalogReport(BaseModel):
    """Ergebnis des Integritäts-Checks."""

    is_consistent: bool
    errors: list[str]      # Kritische Probleme (Planung unzuverlässig)
    warnings: list[str]    # Hinweise

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if self.is_consistent:
            status = "[bold green]✓ KONSISTENT[/bold green]"
        else:
            status = "[bold red]✗ INKONSISTENT[/bold red]"

        lines = [status]
        if self.errors:
            lines.append("\n[red bold]Fehler (kritisch):[/red bold]")
            for e in self.errors:
                lines.append(f"  [red]• {e}[/red]")
        if self.warnings:
            lines.append("\n[yellow bold]Warnungen:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        if not self.errors and not self.warnings:
            lines.append("[dim]Keine Probleme gefunden.[/dim]")

        console.print(Panel("\n".join(lines), title="Katalog-Check", border_style="cyan"))


class TermInfo(BaseModel):
    """Übersicht über ein Semester des Curriculums."""

    term: int
    name: str
    block: Optional[str] = None
    credits: int
    course_count: int


class Catalog(BaseModel):
    """Vollständiger Datensatz: Kurse und Sektionen."""

    courses: list[Course]
    sections: list[Section] = []

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        electives = [c for c in self.courses if c.is_elective]
        terms = {c.term for c in self.courses}
        lines = [
            f"Kurse: {len(self.courses)} "
            f"({len(self.courses) - len(electives)} Pflicht, {len(electives)} Wahl)",
            f"Semester: {len(terms)}" if terms else "",
            f"Credits (Curriculum): {sum(c.credits for c in self.courses)}",
            f"Sektionen: {len(self.sections)} "
            f"({sum(1 for s in self.sections if s.closed)} geschlossen)",
        ]
        return "\n".join(l for l in lines if l)

    # ─── Lookups ───

    def course_by_id(self, course_id: str) -> Optional[Course]:
        for course in self.courses:
            if course.id == course_id:
                return course
        for course in self.courses:
            if course_ids_match(course.id, course_id):
                return course
        return None

    def sections_for_course(self, course_id: str, include_closed: bool = True) -> list[Section]:
        """Alle Sektionen eines Kurses (tolerant gegenüber ID-Formatierung)."""
        return [
            s for s in self.sections
            if course_ids_match(s.course_id, course_id)
            and (include_closed or not s.closed)
        ]

    def section_by_crn(self, crn: str) -> Optional[Section]:
        for section in self.sections:
            if section.crn == crn:
                return section
        return None

    def term_summary(self) -> list[TermInfo]:
        """Semesterübersicht (Credits und Kursanzahl), aufsteigend sortiert."""
        by_term: dict[int, TermInfo] = {}
        for course in self.courses:
            info = by_term.get(course.term)
            if info is None:
                info = TermInfo(
                    term=course.term,
                    name=f"Semester {course.term}",
                    block=course.block,
                    credits=0,
                    course_count=0,
                )
                by_term[course.term] = info
            info.credits += course.credits
            info.course_count += 1
        return [by_term[t] for t in sorted(by_term)]

    # ─── Integritäts-Check ───

    def check_integrity(self) -> CatalogReport:
        """Prüft den Katalog vor der Planung.

        Prüfungen:
        1. Kurs-IDs eindeutig
        2. CRNs über den gesamten Sektionskatalog eindeutig
        3. Voraussetzungen / Co-Requisiten verweisen auf bekannte Kurse
        4. Keine Zyklen in den Voraussetzungen
        5. Sektionen gehören zu bekannten Kursen
        """
        from planner.prereq_graph import build_edges, find_cycle

        errors: list[str] = []
        warnings: list[str] = []

        # ── 1. Kurs-IDs ──────────────────────────────────────────────────
        id_counts = Counter(c.id for c in self.courses)
        for cid, n in id_counts.items():
            if n > 1:
                errors.append(f"Kurs-ID {cid} ist {n}x vorhanden.")

        # ── 2. CRNs ──────────────────────────────────────────────────────
        crn_counts = Counter(s.crn for s in self.sections)
        for crn, n in crn_counts.items():
            if n > 1:
                errors.append(f"CRN {crn} ist {n}x vergeben.")

        # ── 3. Referenzen ────────────────────────────────────────────────
        known = set(id_counts)
        for course in self.courses:
            for pre in course.prerequisites:
                if pre not in known:
                    errors.append(f"Kurs {course.id}: unbekannte Voraussetzung {pre}.")
            for co in course.corequisites:
                if co not in known:
                    warnings.append(f"Kurs {course.id}: unbekannter Co-Requisit {co}.")

        # ── 4. Zyklen ────────────────────────────────────────────────────
        cycle = find_cycle(build_edges(self.courses))
        if cycle:
            errors.append(f"Zyklus in den Voraussetzungen: {' → '.join(cycle)}.")

        # ── 5. Sektionen ─────────────────────────────────────────────────
        orphan_courses = sorted({
            s.course_id for s in self.sections
            if not any(course_ids_match(s.course_id, cid) for cid in known)
        })
        for cid in orphan_courses:
            warnings.append(f"Sektionen für unbekannten Kurs {cid}.")

        without_sections = [
            c.id for c in self.courses
            if self.sections and not self.sections_for_course(c.id)
        ]
        if without_sections:
            shown = ", ".join(without_sections[:6])
            more = "..." if len(without_sections) > 6 else ""
            warnings.append(
                f"{len(without_sections)} Kurse ohne Sektionen ({shown}{more}) – "
                f"können nicht automatisch eingeplant werden."
            )

        return CatalogReport(
            is_consistent=not errors,
            errors=errors,
            warnings=warnings,
        )

