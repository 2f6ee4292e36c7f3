"""Konfigurationsmanager: Laden, Speichern, Validieren und interaktives Bearbeiten.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, FloatPrompt, IntPrompt, Prompt
from rich.table import Table
from rich import box
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.defaults import default_planner_config
from config.schema import (
    EligibilityRules,
    PlanLimits,
    PlannerConfig,
)

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Studienplaner — Konfiguration
# Version: 1.0
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "eligibility": (
        "Freischaltung",
        "Wahlfächer werden über den Studienfortschritt freigeschaltet.\n"
        "Ein Semester gilt als erreicht ab term_reached_ratio bestandener/geplanter Pflichtkurse.",
    ),
    "limits": (
        "Credit-Grenzen",
        "max_credits: Ziel des automatischen Vorschlags, hard_max_credits: Speichergrenze.",
    ),
    "times": (
        "Uhrzeiten",
        "Ersatzwerte für unlesbare Zeitangaben (24h-Format).",
    ),
    "paths": (
        "Datenpfade",
        None,
    ),
    "passing_grades": (
        "Noten",
        None,
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "planner_config.yaml"

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> PlannerConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py config init' aus."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return PlannerConfig.model_validate(dict(raw or {}))
        except ValidationError as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    def load_or_default(self, path: Optional[Path] = None) -> PlannerConfig:
        """Lädt die Config, fällt ohne Datei auf die Standardwerte zurück."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            return default_planner_config()
        return self.load(target)

    # ─── Speichern ───

    def save(self, config: PlannerConfig, path: Optional[Path] = None) -> None:
        """Speichere Config als YAML mit deutschen Kommentaren."""
        target = path or self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: PlannerConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        if "limits" in cm:
            limits_map = CommentedMap(cm["limits"])
            limits_map.yaml_add_eol_comment("Greedy-Vorschlag", "max_credits")
            cm["limits"] = limits_map

        return cm

    # ─── Anzeige ───

    def show(self, config: PlannerConfig) -> None:
        """Gibt die Konfiguration als Rich-Tabellen aus."""
        console.print(Panel(
            f"[bold]{config.program_name}[/bold]",
            title="Studienplaner-Konfiguration",
            border_style="cyan",
        ))
        for title, section in (
            ("Freischaltung", config.eligibility),
            ("Credit-Grenzen", config.limits),
            ("Uhrzeiten", config.times),
            ("Datenpfade", config.paths),
        ):
            table = Table(title=title, box=box.ROUNDED)
            table.add_column("Parameter", style="bold")
            table.add_column("Wert")
            for k, v in section.model_dump().items():
                table.add_row(k, str(v))
            console.print(table)
        console.print(
            f"[bold]Bestehensnoten:[/bold] {', '.join(config.passing_grades)}"
        )

    # ─── Interaktives Bearbeiten ───

    def edit_interactive(self, config: PlannerConfig) -> PlannerConfig:
        """Interaktives Bearbeitungsmenü für die Konfiguration."""
        while True:
            console.print()
            console.print(Panel(
                "[bold]Konfiguration bearbeiten[/bold]",
                border_style="cyan",
            ))
            console.print("  [bold]1.[/bold] Studiengang")
            console.print("  [bold]2.[/bold] Freischaltungsregeln (Wahlfächer)")
            console.print("  [bold]3.[/bold] Credit-Grenzen")
            console.print("  [bold]0.[/bold] Speichern & Zurück")

            choice = Prompt.ask("\nAuswahl", default="0")

            if choice == "1":
                name = Prompt.ask("Name des Studiengangs", default=config.program_name)
                config = config.model_copy(update={"program_name": name})
            elif choice == "2":
                config = config.model_copy(
                    update={"eligibility": self._edit_eligibility(config.eligibility)}
                )
            elif choice == "3":
                config = config.model_copy(
                    update={"limits": self._edit_limits(config.limits)}
                )
            elif choice == "0":
                self.save(config)
                break
            else:
                console.print("[yellow]Ungültige Auswahl.[/yellow]")

        return config

    def _edit_eligibility(self, rules: EligibilityRules) -> EligibilityRules:
        """Freischaltungsregeln interaktiv anpassen."""
        if not Confirm.ask("Freischaltungsregeln ändern?", default=False):
            return rules
        try:
            return EligibilityRules(
                term_reached_ratio=FloatPrompt.ask(
                    "Anteil Pflichtkurse für 'Semester erreicht'",
                    default=rules.term_reached_ratio),
                max_term=IntPrompt.ask("Letztes Semester im Scan", default=rules.max_term),
                general_min_progress=IntPrompt.ask(
                    "Allgemeine Wahlfächer ab Semester",
                    default=rules.general_min_progress),
                professional_term_boundary=IntPrompt.ask(
                    "Grenze Grundlagen/klinisch (Semester)",
                    default=rules.professional_term_boundary),
                professional_basic_min_progress=IntPrompt.ask(
                    "Fachwahlfächer (Grundlagen) ab Semester",
                    default=rules.professional_basic_min_progress),
                professional_clinical_min_progress=IntPrompt.ask(
                    "Fachwahlfächer (klinisch) ab Semester",
                    default=rules.professional_clinical_min_progress),
            )
        except ValidationError as e:
            console.print(f"[red]Ungültige Eingabe:[/red] {e}")
            return rules

    def _edit_limits(self, limits: PlanLimits) -> PlanLimits:
        """Credit-Grenzen interaktiv anpassen."""
        try:
            return PlanLimits(
                max_credits=IntPrompt.ask("Credits im Vorschlag (max)",
                                          default=limits.max_credits),
                hard_max_credits=IntPrompt.ask("Credits beim Speichern (max)",
                                               default=limits.hard_max_credits),
                term_max_credits=IntPrompt.ask("Credits pro Semester (max)",
                                               default=limits.term_max_credits),
            )
        except ValidationError as e:
            console.print(f"[red]Ungültige Eingabe:[/red] {e}")
            return limits
