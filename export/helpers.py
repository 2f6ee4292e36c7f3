"""Gemeinsame Hilfsfunktionen für Export und CLI-Ausgabe."""

from collections import defaultdict
from datetime import date
from typing import Optional

from config.defaults import WEEKDAY_DISPLAY_ES
from data.loader import split_crn
from data.time_normalizer import format_time_12h
from models.course import Course
from models.section import Section, TimeBlock, Weekday

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "pflicht":   "B3D4FF",
    "general":   "FFF2B3",
    "professional": "B3FFB3",
    "wahl":      "E0E0E0",
    "conflict":  "FF9999",
    "free":      "F5F5F5",
    "virtual":   "FFFFB3",
    "header":    "4472C4",
}


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def get_course_color(course: Optional[Course]) -> str:
    """Hex-Farbe nach Kursart (Pflicht / Wahlfach-Typ)."""
    if course is None:
        return COLORS["free"]
    if not course.is_elective:
        return COLORS["pflicht"]
    if course.elective_type is None:
        return COLORS["wahl"]
    return COLORS.get(course.elective_type.value, COLORS["wahl"])


# ─── CRN ──────────────────────────────────────────────────────────────────────

def format_crn(crn: str) -> str:
    """ "MED100001" → "MED-100-001"; andere CRNs unverändert."""
    parts = split_crn(crn)
    if parts is None:
        return crn
    return "-".join(parts)


# ─── Stundenplan-Text ─────────────────────────────────────────────────────────

def _day_label(day: Weekday) -> str:
    return WEEKDAY_DISPLAY_ES.get(day.value, day.value)


def format_block(block: TimeBlock) -> str:
    """ "Lun 7:00 AM a 9:00 AM" bzw. Label für nicht terminierte Blöcke."""
    if not block.is_timed:
        return block.label or "TBA"
    return f"{_day_label(block.day)} {format_time_12h(block.start)} a {format_time_12h(block.end)}"


def format_schedule_display(section: Section) -> str:
    """Kompakter Stundenplan einer Sektion.

    Gleiche Zeiten an allen Tagen → "Lun/Mié 7:00 AM a 9:00 AM",
    sonst je Tag, durch Komma getrennt. Ohne terminierte Blöcke → Label.
    Pro Tag zählt nur der erste Block.
    """
    first_by_day: dict[Weekday, TimeBlock] = {}
    for block in section.timed_blocks:
        first_by_day.setdefault(block.day, block)

    if not first_by_day:
        if section.label:
            return section.label
        if section.schedule and section.schedule[0].label:
            return section.schedule[0].label
        return "TBA"

    blocks = list(first_by_day.values())
    first = blocks[0]
    if all(b.start == first.start and b.end == first.end for b in blocks):
        days = "/".join(_day_label(b.day) for b in blocks)
        return f"{days} {format_time_12h(first.start)} a {format_time_12h(first.end)}"
    return ", ".join(format_block(b) for b in blocks)


# ─── Wochenraster ─────────────────────────────────────────────────────────────

def hour_range(sections: list[Section], default: tuple[int, int] = (7, 18)) -> range:
    """Volle Stunden, die alle terminierten Blöcke abdecken (mind. `default`)."""
    first, last = default
    for section in sections:
        for block in section.timed_blocks:
            first = min(first, block.start // 60)
            last = max(last, (block.end + 59) // 60)
    return range(first, last)


def blocks_by_hour(
    entries: list[tuple[str, Section]],
) -> dict[tuple[Weekday, int], list[str]]:
    """Baut {(Tag, Stunde): [Kurs-IDs]} für alle Stunden, die ein Block berührt."""
    grid: dict[tuple[Weekday, int], list[str]] = defaultdict(list)
    for course_id, section in entries:
        for block in section.timed_blocks:
            for hour in range(block.start // 60, (block.end + 59) // 60):
                if course_id not in grid[(block.day, hour)]:
                    grid[(block.day, hour)].append(course_id)
    return grid
