"""Import der Sektionsliste aus dem Textexport der Registratur.

Aufbau einer Zeile (Tabs oder ≥ 2 Leerzeichen als Trenner):

    MED100001   Anatomía I   LMIV 7:00 am   A-101

  - Ein Datensatz beginnt mit einer Zeile, die einen Code [A-Z]{3,4}\\d{6}
    enthält; Folgezeilen werden angehängt.
  - Stundenplan = zweite Spalte nach dem Code, Raum = dritte.
  - MED100001 → Kurs MED-100, Sektion 001.
  - Dauer = Credits × 45 min / Anzahl Tage (ohne Credits: 90 min).
"""

import logging
import re
from pathlib import Path
from typing import Optional

from config.schema import TimeDefaults
from data.loader import CatalogImportError, split_crn
from data.time_normalizer import parse_day_codes
from models.section import Section, TimeBlock

logger = logging.getLogger(__name__)

_CODE_ANYWHERE = re.compile(r"\b[A-Z]{3,4}\d{6}\b")
_CODE_TOKEN = re.compile(r"^[A-Z]{3,4}\d{6}\b")
_SPLIT = re.compile(r" {2,}")
_SCHEDULE = re.compile(r"\b([LMAIJVSD]+)\s*(\d{1,2}):(\d{2})(?:.*?\b((?i:am|pm))\b)?")
_ASIG_VIRTUAL = re.compile(r"asig\.?\s*virtual", re.IGNORECASE)


def join_records(text: str) -> list[str]:
    """Fasst Folgezeilen zu je einem Datensatz zusammen.

    Zeilen vor dem ersten Code (Kopfzeilen, Metadaten) werden verworfen.
    """
    records: list[str] = []
    current = ""
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        if _CODE_ANYWHERE.search(line):
            if current:
                records.append(current)
            current = line
        elif current:
            current += " " + line
    if current:
        records.append(current)
    return records


def _split_fields(record: str) -> list[str]:
    parts = record.split("\t") if "\t" in record else _SPLIT.split(record)
    return [p.strip() for p in parts if p.strip()]


class SectionTextImporter:
    """Wandelt den Registratur-Text in Section-Objekte.

    Args:
        credits_by_id: Credits je Kurs-ID (für die Blockdauer).
        defaults:      Zeit-Defaults (Standarddauer, Minuten pro Credit).
    """

    def __init__(
        self,
        credits_by_id: Optional[dict[str, int]] = None,
        defaults: Optional[TimeDefaults] = None,
    ) -> None:
        self.credits_by_id = credits_by_id or {}
        self.defaults = defaults or TimeDefaults()
        self.skipped: list[str] = []

    # ─── Öffentliche API ───

    def import_file(self, path: Path) -> list[Section]:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Textdatei nicht gefunden: {path}")
        return self.parse(path.read_text(encoding="utf-8"))

    def parse(self, text: str) -> list[Section]:
        """Alle Datensätze des Textes.

        Raises:
            CatalogImportError: Eine CRN kommt mehrfach vor.
        """
        self.skipped = []
        sections: list[Section] = []
        seen: set[str] = set()
        for record in join_records(text):
            section = self._parse_record(record)
            if section is None:
                self.skipped.append(record)
                continue
            if section.crn in seen:
                raise CatalogImportError(f"CRN {section.crn} ist doppelt vergeben.")
            seen.add(section.crn)
            sections.append(section)

        if self.skipped:
            logger.warning(f"Text-Import: {len(self.skipped)} Zeilen ohne gültigen Code übersprungen")
        logger.info(f"Text-Import: {len(sections)} Sektionen")
        return sections

    # ─── Einzelner Datensatz ───

    def _parse_record(self, record: str) -> Optional[Section]:
        parts = _split_fields(record)
        idx = next((i for i, p in enumerate(parts) if _CODE_TOKEN.match(p)), None)
        if idx is None:
            return None

        crn = _CODE_TOKEN.match(parts[idx]).group(0)
        split = split_crn(crn)
        if split is None:
            return None
        letters, number, section_number = split
        course_id = f"{letters}-{number}"

        schedule_raw = parts[idx + 2] if idx + 2 < len(parts) else ""
        room_raw = parts[idx + 3] if idx + 3 < len(parts) else "TBA"
        is_virtual = "virtual" in schedule_raw.lower() or "VIRTU" in room_raw.upper()

        return Section(
            id=f"sect-{crn}",
            course_id=course_id,
            crn=crn,
            section_number=section_number,
            room="Virtual" if is_virtual else room_raw,
            label=schedule_raw,
            schedule=self.parse_schedule(schedule_raw, room_raw, self.credits_by_id.get(course_id, 0)),
        )

    def parse_schedule(self, schedule_raw: str, room_raw: str = "", credits: int = 0) -> list[TimeBlock]:
        """Stundenplan-Spalte → Zeitblöcke.

        Ohne am/pm gelten die Stunden 12 und 1–6 als Nachmittag.
        """
        lower = schedule_raw.lower()
        is_virtual = "virtual" in lower or "VIRTU" in room_raw.upper()
        match = _SCHEDULE.search(schedule_raw)

        if _ASIG_VIRTUAL.search(schedule_raw) or (is_virtual and not match):
            return [TimeBlock.non_timed("Virtual")]
        if match is None:
            if "hosp" in lower:
                return [TimeBlock.non_timed("Hospital (rotativo)")]
            return [TimeBlock.non_timed("TBA")]

        days = parse_day_codes(match.group(1))
        hour, minute = int(match.group(2)), int(match.group(3))
        meridiem = (match.group(4) or "").lower()
        if meridiem:
            is_pm = meridiem == "pm"
        else:
            is_pm = hour == 12 or 1 <= hour <= 6

        if hour == 12:
            hour = 12 if is_pm else 0
        elif is_pm:
            hour += 12
        start = hour * 60 + minute

        if credits > 0:
            duration = round(credits * self.defaults.minutes_per_credit / max(len(days), 1))
        else:
            duration = self.defaults.default_block_minutes
        end = min(start + duration, 24 * 60)

        if not days or start >= end:
            return [TimeBlock.non_timed(schedule_raw or "TBA")]
        return [TimeBlock(day=day, start=start, end=end) for day in days]
