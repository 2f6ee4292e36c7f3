"""Studienplaner — Haupt-CLI.

Verwendung:
  python main.py config init                  Standardkonfiguration anlegen
  python main.py config edit                  Konfiguration bearbeiten
  python main.py config show                  Konfiguration anzeigen
  python main.py generate                     Demo-Katalog erzeugen
  python main.py status                       Freischaltung aller Kurse
  python main.py progress pass <kurs> -g A    Kurs als bestanden markieren
  python main.py suggest --save               Kursplan vorschlagen + speichern
  python main.py term-suggest <semester>      Kurse für ein Semester vorschlagen
  python main.py conflicts                    Konflikte des gespeicherten Plans
  python main.py catalog check                Integritäts-Check des Katalogs
  python main.py catalog edit-prereqs <kurs> <ids...>
  python main.py import-sections <datei.txt>  Registratur-Text importieren
  python main.py export                       Plan als Excel exportieren
  python main.py stats                        Studienfortschritt
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()
logger = logging.getLogger(__name__)

_STATUS_STYLE = {
    "passed": "[green]bestanden[/green]",
    "blocked": "[red]gesperrt[/red]",
    "available": "[cyan]verfügbar[/cyan]",
}


def _abort(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    sys.exit(1)


def _load_config():
    """Lädt die Konfiguration (Standardwerte ohne Datei) oder bricht ab."""
    from config.manager import ConfigManager
    try:
        return ConfigManager().load_or_default()
    except ValueError as e:
        _abort(str(e))


def _provider(config):
    from data.provider import JsonCatalogProvider
    return JsonCatalogProvider(
        Path(config.paths.courses_json), Path(config.paths.sections_json)
    )


def _load_catalog(config):
    """Lädt Kurse + Sektionen oder bricht mit Fehlermeldung ab."""
    from data.loader import CatalogImportError
    from data.provider import load_catalog
    try:
        return load_catalog(_provider(config))
    except FileNotFoundError as e:
        _abort(f"{e}\nVerwenden Sie [bold]python main.py generate[/bold] für Demo-Daten.")
    except CatalogImportError as e:
        _abort(f"Katalog ungültig: {e}")


def _load_progress(config):
    from models.progress import StudentProgress
    try:
        return StudentProgress.load_json(Path(config.paths.progress_json))
    except ValueError as e:
        _abort(f"Fortschrittsdatei ungültig: {e}")


def _load_plan(config, required: bool = True):
    from models.plan import CoursePlan
    path = Path(config.paths.plan_json)
    if not path.exists():
        if required:
            _abort(
                f"Kein gespeicherter Plan: {path}\n"
                "Verwenden Sie [bold]python main.py suggest --save[/bold]."
            )
        return CoursePlan()
    try:
        return CoursePlan.load_json(path)
    except ValueError as e:
        _abort(f"Plan ungültig: {e}")


def _print_plan(entries, catalog, title: str = "Kursplan") -> None:
    from export.helpers import format_crn, format_schedule_display

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Kurs", style="bold")
    table.add_column("Name")
    table.add_column("CRN")
    table.add_column("Credits", justify="right")
    table.add_column("Raum")
    table.add_column("Stundenplan")
    total = 0
    for entry in entries:
        course = catalog.course_by_id(entry.course_id)
        credits = course.credits if course else 0
        total += credits
        table.add_row(
            entry.course_id,
            course.name if course else "?",
            format_crn(entry.section_crn),
            str(credits),
            entry.section.room,
            format_schedule_display(entry.section),
        )
    table.add_row("", "[bold]Gesamt[/bold]", "", f"[bold]{total}[/bold]", "", "")
    console.print(table)


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen oder bearbeiten."""


@cmd_config.command("init")
@click.option("--force", is_flag=True, default=False, help="Bestehende Datei überschreiben.")
def config_init(force: bool):
    """Legt die Standardkonfiguration als YAML an."""
    from config.defaults import default_planner_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check() and not force:
        console.print(
            "[yellow]Eine Konfiguration existiert bereits.[/yellow]\n"
            "Verwenden Sie [bold]python main.py config edit[/bold] oder --force."
        )
        return
    mgr.save(default_planner_config())


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    from config.manager import ConfigManager
    ConfigManager().show(_load_config())


@cmd_config.command("edit")
def config_edit():
    """Bearbeitet die Konfiguration interaktiv."""
    from config.manager import ConfigManager
    ConfigManager().edit_interactive(_load_config())


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--terms", default=12, help="Anzahl Semester (1-18).")
@click.option("--output-dir", default=None,
              help="Zielordner (Standard: Pfade aus der Konfiguration).")
def cmd_generate(seed: int, terms: int, output_dir: Optional[str]):
    """Erzeugt einen Demo-Katalog (Kurse + Sektionen) als JSON."""
    from data.fake_data import FakeCatalogGenerator
    from data.provider import JsonCatalogProvider

    config = _load_config()
    console.print("[bold]Demo-Katalog wird generiert...[/bold]")
    gen = FakeCatalogGenerator(terms=terms, seed=seed)
    catalog = gen.generate()
    gen.print_summary(catalog)

    if output_dir:
        provider = JsonCatalogProvider(
            Path(output_dir) / "courses.json", Path(output_dir) / "sections.json"
        )
    else:
        provider = _provider(config)
    provider.save_courses(catalog.courses)
    provider.save_sections(catalog.sections)
    console.print(f"[green]✓[/green] Kurse gespeichert: {provider.courses_path}")
    console.print(f"[green]✓[/green] Sektionen gespeichert: {provider.sections_path}")

    console.print(f"\n[dim]{catalog.summary()}[/dim]")
    catalog.check_integrity().print_rich()


# ─── STATUS ───────────────────────────────────────────────────────────────────

@click.command("status")
@click.option("--term", type=int, default=None, help="Nur Kurse dieses Semesters.")
@click.option("--only", type=click.Choice(["available", "blocked", "passed"]), default=None,
              help="Nur Kurse mit diesem Status.")
def cmd_status(term: Optional[int], only: Optional[str]):
    """Zeigt den Freischaltungs-Status aller Kurse."""
    from planner.eligibility import EligibilityResolver

    config = _load_config()
    catalog = _load_catalog(config)
    progress = _load_progress(config)
    passed, planned = progress.passed_courses(), progress.planned_courses()

    resolver = EligibilityResolver(catalog.courses, config.eligibility)
    statuses = resolver.resolve_all(passed, planned)
    level = resolver.progress_level(passed, planned)

    table = Table(title=f"Kursstatus (erreichtes Semester: {level})", box=box.ROUNDED)
    table.add_column("Kurs", style="bold")
    table.add_column("Name")
    table.add_column("Sem.", justify="right")
    table.add_column("Credits", justify="right")
    table.add_column("Art")
    table.add_column("Status")
    shown = 0
    for course in catalog.courses:
        status = statuses[course.id]
        if term is not None and course.term != term:
            continue
        if only is not None and status.value != only:
            continue
        kind = "Pflicht"
        if course.is_elective:
            kind = f"Wahl ({course.elective_type.value})" if course.elective_type else "Wahl"
        label = _STATUS_STYLE[status.value]
        if course.id in planned and status.value != "passed":
            label += " [dim](geplant)[/dim]"
        table.add_row(course.id, course.name, str(course.term), str(course.credits), kind, label)
        shown += 1
    console.print(table)
    console.print(f"[dim]{shown} von {len(catalog.courses)} Kursen angezeigt.[/dim]")


# ─── PROGRESS ─────────────────────────────────────────────────────────────────

@click.group("progress")
def cmd_progress():
    """Studienfortschritt bearbeiten (bestanden, geplant, laufend)."""


def _progress_edit(course_id: str, action: str, grade: Optional[str] = None) -> None:
    config = _load_config()
    catalog = _load_catalog(config)
    progress = _load_progress(config)

    course = catalog.course_by_id(course_id)
    if course is None:
        _abort(f"Unbekannter Kurs: {course_id}")

    try:
        if action == "pass":
            progress = progress.mark_passed(course.id, grade, config.passing_grades)
        elif action == "plan":
            progress = progress.mark_planned(course.id)
        elif action == "start":
            progress = progress.mark_in_progress(course.id)
        else:
            progress = progress.remove(course.id)
    except ValueError as e:
        _abort(str(e))

    progress.save_json(Path(config.paths.progress_json))
    console.print(f"[green]✓[/green] {course.id} ({course.name}) aktualisiert.")


@cmd_progress.command("pass")
@click.argument("course_id")
@click.option("--grade", "-g", default=None, help="Note (A/B/C zählen als bestanden).")
def progress_pass(course_id: str, grade: Optional[str]):
    """Markiert einen Kurs als bestanden."""
    _progress_edit(course_id, "pass", grade)


@cmd_progress.command("plan")
@click.argument("course_id")
def progress_plan(course_id: str):
    """Markiert einen Kurs als geplant."""
    _progress_edit(course_id, "plan")


@cmd_progress.command("start")
@click.argument("course_id")
def progress_start(course_id: str):
    """Markiert einen Kurs als laufend."""
    _progress_edit(course_id, "start")


@cmd_progress.command("remove")
@click.argument("course_id")
def progress_remove(course_id: str):
    """Entfernt den Fortschrittseintrag eines Kurses."""
    _progress_edit(course_id, "remove")


# ─── SUGGEST ──────────────────────────────────────────────────────────────────

@click.command("suggest")
@click.option("--max-credits", type=int, default=None,
              help="Credit-Grenze (Standard aus der Konfiguration).")
@click.option("--save", is_flag=True, default=False, help="Vorschlag als Plan speichern.")
@click.option("--fresh", is_flag=True, default=False,
              help="Gespeicherten Plan ignorieren und neu beginnen.")
def cmd_suggest(max_credits: Optional[int], save: bool, fresh: bool):
    """Schlägt einen konfliktfreien Kursplan vor (greedy)."""
    from analysis.plan_validator import PlanValidator, can_save_plan
    from models.plan import CoursePlan
    from planner.eligibility import EligibilityResolver
    from planner.suggest import suggest_plan

    config = _load_config()
    catalog = _load_catalog(config)
    progress = _load_progress(config)
    passed, planned = progress.passed_courses(), progress.planned_courses()
    limit = max_credits or config.limits.max_credits
    if limit > config.limits.hard_max_credits:
        console.print(
            f"[yellow]Hinweis: {limit} Credits liegen über der Speichergrenze "
            f"{config.limits.hard_max_credits}.[/yellow]"
        )

    current = [] if fresh else _load_plan(config, required=False).entries
    available = EligibilityResolver(catalog.courses, config.eligibility).available_courses(
        passed, planned
    )
    # Bereits geplante Kurse zählen mit ihren Credits
    listed = {c.id for c in available}
    for entry in current:
        course = catalog.course_by_id(entry.course_id)
        if course is not None and course.id not in listed:
            available.append(course)
            listed.add(course.id)

    open_sections = [s for s in catalog.sections if not s.closed]
    plan = suggest_plan(available, open_sections, current, max_credits=limit)

    _print_plan(plan, catalog, title=f"Planvorschlag (≤ {limit} Credits)")
    report = PlanValidator(config).validate(plan, catalog, passed, planned)
    report.print_rich()

    if save:
        if not can_save_plan(plan, catalog, config):
            _abort(
                "Plan kann nicht gespeichert werden "
                "(leer, Konflikte oder über der Credit-Höchstgrenze)."
            )
        path = Path(config.paths.plan_json)
        CoursePlan(entries=plan).save_json(path)
        console.print(f"[green]✓[/green] Plan gespeichert: {path}")


# ─── TERM-SUGGEST ─────────────────────────────────────────────────────────────

@click.command("term-suggest")
@click.argument("term", type=int)
@click.option("--max-credits", type=int, default=None,
              help="Credit-Grenze pro Semester (Standard aus der Konfiguration).")
def cmd_term_suggest(term: int, max_credits: Optional[int]):
    """Schlägt Kurse für ein Semester vor (Co-Requisiten gemeinsam)."""
    from planner.term_planner import TermPlanItem, suggest_courses_for_term

    config = _load_config()
    catalog = _load_catalog(config)
    progress = _load_progress(config)
    limit = max_credits or config.limits.term_max_credits

    # Bereits geplante/laufende Kurse zählen für dieses Semester
    term_plan = [
        TermPlanItem(course_id=cid, planned_term=term)
        for cid in sorted(progress.planned_courses())
    ]
    ids = suggest_courses_for_term(
        term, catalog.courses, progress.passed_courses(), term_plan,
        config.eligibility, max_credits=limit,
    )

    if not ids:
        console.print(f"[yellow]Keine weiteren Kurse für Semester {term} möglich.[/yellow]")
        return

    table = Table(title=f"Vorschlag für Semester {term}", box=box.ROUNDED)
    table.add_column("Kurs", style="bold")
    table.add_column("Name")
    table.add_column("Sem.", justify="right")
    table.add_column("Credits", justify="right")
    table.add_column("Co-Requisiten")
    total = 0
    for cid in ids:
        course = catalog.course_by_id(cid)
        if course is None:
            continue
        total += course.credits
        table.add_row(
            course.id, course.name, str(course.term), str(course.credits),
            ", ".join(course.corequisites),
        )
    console.print(table)
    console.print(f"Zusätzliche Credits: [bold]{total}[/bold] (Grenze {limit})")


# ─── CONFLICTS ────────────────────────────────────────────────────────────────

@click.command("conflicts")
def cmd_conflicts():
    """Listet Terminkonflikte im gespeicherten Plan."""
    from planner.conflicts import detect_plan_conflicts

    config = _load_config()
    plan = _load_plan(config)
    conflicts = detect_plan_conflicts(plan.entries)

    if not conflicts:
        console.print("[green]✓ Keine Konflikte im Plan.[/green]")
        return

    table = Table(title="Terminkonflikte", box=box.ROUNDED)
    table.add_column("Kurs 1", style="bold")
    table.add_column("Kurs 2", style="bold")
    table.add_column("Zeit")
    for c in conflicts:
        table.add_row(c.course1, c.course2, c.conflict_time)
    console.print(table)
    sys.exit(1)


# ─── CATALOG ──────────────────────────────────────────────────────────────────

@click.group("catalog")
def cmd_catalog():
    """Kurskatalog prüfen und pflegen."""


@cmd_catalog.command("check")
def catalog_check():
    """Integritäts-Check (IDs, CRNs, Referenzen, Zyklen)."""
    config = _load_config()
    catalog = _load_catalog(config)
    console.print(f"\n{catalog.summary()}\n")
    report = catalog.check_integrity()
    report.print_rich()
    sys.exit(0 if report.is_consistent else 1)


@cmd_catalog.command("edit-prereqs")
@click.argument("course_id")
@click.argument("prerequisites", nargs=-1)
def catalog_edit_prereqs(course_id: str, prerequisites: tuple[str, ...]):
    """Setzt die Voraussetzungen eines Kurses (ohne IDs: alle entfernen)."""
    from models.course import Course
    from planner.prereq_graph import PrereqCycleError, apply_course_edit

    config = _load_config()
    provider = _provider(config)
    catalog = _load_catalog(config)
    course = catalog.course_by_id(course_id)
    if course is None:
        _abort(f"Unbekannter Kurs: {course_id}")

    unknown = [p for p in prerequisites if catalog.course_by_id(p) is None]
    if unknown:
        _abort(f"Unbekannte Voraussetzungen: {', '.join(unknown)}")
    # Katalog-IDs speichern, die Zyklusprüfung vergleicht exakt
    prereq_ids = [catalog.course_by_id(p).id for p in prerequisites]

    try:
        updated = Course.model_validate({**course.model_dump(), "prerequisites": prereq_ids})
        courses = apply_course_edit(catalog.courses, updated)
    except PrereqCycleError as e:
        _abort(str(e))
    except ValueError as e:
        _abort(f"Ungültige Änderung: {e}")

    provider.save_courses(courses)
    console.print(
        f"[green]✓[/green] {updated.id}: Voraussetzungen = "
        f"{', '.join(updated.prerequisites) or '(keine)'}"
    )


# ─── IMPORT-SECTIONS ──────────────────────────────────────────────────────────

@click.command("import-sections")
@click.argument("datei", type=click.Path(exists=True, path_type=Path))
@click.option("--output", "-o", default=None,
              help="Ziel-JSON (Standard: Sektionspfad aus der Konfiguration).")
def cmd_import_sections(datei: Path, output: Optional[str]):
    """Importiert Sektionen aus dem Textexport der Registratur."""
    from data.loader import CatalogImportError, load_courses
    from data.provider import JsonCatalogProvider
    from data.text_import import SectionTextImporter

    config = _load_config()
    credits_by_id: dict[str, int] = {}
    try:
        credits_by_id = {c.id: c.credits for c in load_courses(Path(config.paths.courses_json))}
    except FileNotFoundError:
        console.print("[yellow]Kein Kurskatalog – Blockdauer = Standardwert.[/yellow]")
    except CatalogImportError as e:
        _abort(f"Katalog ungültig: {e}")

    importer = SectionTextImporter(credits_by_id, config.times)
    console.print(f"[bold]Importiere:[/bold] {datei}")
    try:
        sections = importer.import_file(datei)
    except CatalogImportError as e:
        _abort(f"Import fehlgeschlagen: {e}")

    target = Path(output) if output else Path(config.paths.sections_json)
    provider = JsonCatalogProvider(Path(config.paths.courses_json), target)
    provider.save_sections(sections)
    console.print(f"[green]✓[/green] {len(sections)} Sektionen gespeichert: {target}")
    if importer.skipped:
        console.print(f"[yellow]{len(importer.skipped)} Datensätze übersprungen.[/yellow]")


# ─── EXPORT ───────────────────────────────────────────────────────────────────

@click.command("export")
@click.option("--output", "-o", default="output/kursplan.xlsx",
              help="Ausgabepfad der Excel-Datei.")
def cmd_export(output: str):
    """Exportiert den gespeicherten Plan als Excel."""
    from export.excel_export import PlanExcelExporter

    config = _load_config()
    catalog = _load_catalog(config)
    plan = _load_plan(config)

    out_path = Path(output)
    PlanExcelExporter(plan.entries, catalog, title=f"Kursplan {config.program_name}").export(out_path)
    console.print(f"[green]✓[/green] Excel gespeichert: {out_path}")


# ─── STATS ────────────────────────────────────────────────────────────────────

@click.command("stats")
def cmd_stats():
    """Zeigt Kennzahlen des Studienfortschritts."""
    from analysis.progress_stats import progress_statistics

    config = _load_config()
    catalog = _load_catalog(config)
    progress = _load_progress(config)
    progress_statistics(catalog, progress, config).print_rich()


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Ausführliche Log-Ausgabe.")
def cli(verbose: bool):
    """Studienplaner: Freischaltung, Konflikte und Planvorschläge.

    Starten Sie mit: python main.py generate
    """
    if verbose:
        from rich.logging import RichHandler
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")


def main():
    """Einstiegspunkt. Zeigt beim ersten Aufruf ohne Argumente einen Hinweis."""
    from config.manager import ConfigManager

    if len(sys.argv) == 1 and ConfigManager().first_run_check():
        console.print(Panel(
            "[bold]Willkommen beim Studienplaner![/bold]\n\n"
            "Keine Konfiguration gefunden – es gelten die Standardwerte.\n"
            "Anlegen mit [bold]python main.py config init[/bold].",
            border_style="cyan",
        ))
    cli()


# Befehle registrieren
cli.add_command(cmd_config)
cli.add_command(cmd_generate)
cli.add_command(cmd_status)
cli.add_command(cmd_progress)
cli.add_command(cmd_suggest)
cli.add_command(cmd_term_suggest)
cli.add_command(cmd_conflicts)
cli.add_command(cmd_catalog)
cli.add_command(cmd_import_sections)
cli.add_command(cmd_export)
cli.add_command(cmd_stats)


if __name__ == "__main__":
    main()
