"""JSON-Import für Kurskatalog und Sektionen.

Kurse:     JSON-Array von Kursen oder {"courses": [...]}
Sektionen: zwei Formen werden erkannt
  - flach:        [{"courseId", "crn", "room", "schedule": [{"day", "startTime", "endTime"}]}]
  - verschachtelt: {"courses": [{"id", "name", "sections": [{"crn", "label", "room",
                    "closed", "slots": [{"day", "start", "end"}]}]}]}
    Slots enthalten Wochenminuten (Tag × 1440 + Minute); das Label wird
    bevorzugt, wenn es sich lesen lässt.

Die Formerkennung findet ausschließlich hier statt; alle anderen Module
sehen nur Course- und Section-Objekte.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from config.defaults import DAY_MINUTE_OFFSETS
from data.time_normalizer import block_from_24h, parse_day, parse_time_label
from models.course import Course
from models.section import Section, TimeBlock

logger = logging.getLogger(__name__)

_CRN_RE = re.compile(r"^([A-Z]{3,4})(\d{3})(\d{3})$")


class CatalogImportError(Exception):
    """Fehler beim Import von Kursen oder Sektionen."""


# ─── CRN ──────────────────────────────────────────────────────────────────────

def split_crn(crn: str) -> Optional[tuple[str, str, str]]:
    """ "MED100001" → ("MED", "100", "001"), sonst None."""
    m = _CRN_RE.match((crn or "").strip().upper())
    if not m:
        return None
    return m.group(1), m.group(2), m.group(3)


def course_id_from_crn(crn: str) -> Optional[str]:
    """ "MED100001" → "MED-100"."""
    parts = split_crn(crn)
    if parts is None:
        return None
    return f"{parts[0]}-{parts[1]}"


# ─── Kurse ────────────────────────────────────────────────────────────────────

def _read_json(path: Path) -> Any:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise CatalogImportError(f"{path.name}: ungültiges JSON ({e})") from e


def parse_courses(raw: Any) -> list[Course]:
    """Kursliste aus geparstem JSON.

    Raises:
        CatalogImportError: Unerwartete Struktur oder ungültiger Datensatz.
    """
    if isinstance(raw, dict):
        raw = raw.get("courses", [])
    if not isinstance(raw, list):
        raise CatalogImportError("Kurskatalog muss ein JSON-Array sein.")

    courses: list[Course] = []
    seen: set[str] = set()
    for i, record in enumerate(raw, start=1):
        if not isinstance(record, dict):
            raise CatalogImportError(f"Kurs #{i}: Objekt erwartet, {type(record).__name__} gefunden.")
        label = record.get("id") or f"#{i}"
        try:
            course = Course.model_validate(record)
        except ValidationError as e:
            first = e.errors()[0]
            loc = ".".join(str(p) for p in first["loc"])
            raise CatalogImportError(f"Kurs {label}: {loc}: {first['msg']}") from e
        if course.id in seen:
            raise CatalogImportError(f"Kurs-ID {course.id} ist doppelt vorhanden.")
        seen.add(course.id)
        courses.append(course)

    logger.info(f"{len(courses)} Kurse geladen")
    return courses


def load_courses(path: Path) -> list[Course]:
    """Lädt den Kurskatalog aus einer JSON-Datei."""
    return parse_courses(_read_json(path))


# ─── Sektionen ────────────────────────────────────────────────────────────────

def _flat_section(record: dict, index: int) -> Section:
    blocks = [
        block_from_24h(
            entry.get("day"),
            entry.get("startTime", entry.get("start")),
            entry.get("endTime", entry.get("end")),
            label=entry.get("label") or record.get("label") or None,
        )
        for entry in record.get("schedule", [])
        if isinstance(entry, dict)
    ]
    data = {k: v for k, v in record.items() if k != "schedule"}
    try:
        return Section.model_validate({**data, "schedule": blocks})
    except ValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(p) for p in first["loc"])
        raise CatalogImportError(
            f"Sektion {record.get('crn') or f'#{index}'}: {loc}: {first['msg']}"
        ) from e


def _slot_block(slot: dict, label: str) -> TimeBlock:
    """Wochenminuten-Slot → Zeitblock; Ende vor Beginn wird um 12h verschoben."""
    weekday = parse_day(slot.get("day"))
    start, end = slot.get("start"), slot.get("end")
    if weekday is None or not isinstance(start, int) or not isinstance(end, int):
        return TimeBlock.non_timed(label or "TBA")

    offset = DAY_MINUTE_OFFSETS[weekday.value]
    if start >= offset:
        start -= offset
        end -= offset
    if end < start:
        end += 12 * 60
    if not (0 <= start < end <= 24 * 60):
        return TimeBlock.non_timed(label or "TBA")
    return TimeBlock(day=weekday, start=start, end=end)


def _nested_blocks(section: dict) -> list[TimeBlock]:
    label = section.get("label") or ""
    parsed = parse_time_label(label)
    if parsed is not None:
        days, start, end = parsed
        return [TimeBlock(day=day, start=start, end=end) for day in days]
    slots = [s for s in section.get("slots", []) if isinstance(s, dict)]
    if not slots:
        return [TimeBlock.non_timed(label or "TBA")]
    return [_slot_block(s, label) for s in slots]


def _nested_sections(raw: dict) -> list[Section]:
    sections: list[Section] = []
    for index, course in enumerate(raw.get("courses", [])):
        if not isinstance(course, dict):
            raise CatalogImportError(f"Kurs #{index}: Objekt erwartet.")
        for entry in course.get("sections") or []:
            if not isinstance(entry, dict):
                raise CatalogImportError(
                    f"Kurs {course.get('id') or f'#{index}'}: Sektion muss ein Objekt sein."
                )
            crn = str(entry.get("crn", "")).strip()
            if not crn:
                raise CatalogImportError(f"Sektion ohne CRN in Kurs {course.get('name', '?')}.")
            course_id = course.get("id") or course_id_from_crn(crn)
            if not course_id:
                raise CatalogImportError(f"Sektion {crn}: Kurs-ID nicht ableitbar.")
            parts = split_crn(crn)
            try:
                sections.append(Section(
                    course_id=course_id,
                    crn=crn,
                    id=f"sect-{crn}",
                    section_number=parts[2] if parts else "",
                    room=entry.get("room") or "TBA",
                    closed=bool(entry.get("closed", False)),
                    label=entry.get("label") or "",
                    schedule=_nested_blocks(entry),
                ))
            except ValidationError as e:
                first = e.errors()[0]
                loc = ".".join(str(p) for p in first["loc"])
                raise CatalogImportError(f"Sektion {crn}: {loc}: {first['msg']}") from e
    return sections


def parse_sections(raw: Any) -> list[Section]:
    """Sektionen aus geparstem JSON (flach oder verschachtelt).

    Raises:
        CatalogImportError: Unbekannte Struktur, ungültiger Datensatz
            oder doppelte CRN.
    """
    if isinstance(raw, dict) and isinstance(raw.get("courses"), list):
        sections = _nested_sections(raw)
        shape = "verschachtelt"
    elif isinstance(raw, list):
        sections = [
            _flat_section(record, i)
            for i, record in enumerate(raw, start=1)
            if isinstance(record, dict)
        ]
        shape = "flach"
    else:
        raise CatalogImportError(
            "Sektionen: erwartet JSON-Array oder Objekt mit 'courses'-Liste."
        )

    seen: set[str] = set()
    for section in sections:
        if section.crn in seen:
            raise CatalogImportError(f"CRN {section.crn} ist doppelt vergeben.")
        seen.add(section.crn)

    logger.info(f"{len(sections)} Sektionen geladen (Format: {shape})")
    return sections


def load_sections(path: Path) -> list[Section]:
    """Lädt Sektionen aus einer JSON-Datei."""
    return parse_sections(_read_json(path))
