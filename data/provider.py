"""Datenquellen für Kurse und Sektionen.

Die Planer-Funktionen erhalten Kurse und Sektionen immer als fertige
Listen; ein Provider kapselt nur, woher sie kommen.
"""

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Optional, Protocol

from data.loader import CatalogImportError, load_courses, load_sections
from data.time_normalizer import minutes_to_time
from models.catalog import Catalog
from models.course import Course
from models.section import Section
from planner.prereq_graph import validate_catalog

logger = logging.getLogger(__name__)


class CatalogProvider(Protocol):
    """Lesender Zugriff auf Kurskatalog und Sektionen."""

    def get_courses(self) -> list[Course]: ...

    def get_sections(self) -> list[Section]: ...


def load_catalog(provider: CatalogProvider) -> Catalog:
    """Fasst Kurse und Sektionen eines Providers zu einem Catalog zusammen."""
    return Catalog(courses=provider.get_courses(), sections=provider.get_sections())


class StaticCatalogProvider:
    """In-Memory-Provider (Tests, Demo-Daten)."""

    def __init__(self, courses: list[Course], sections: Optional[list[Section]] = None) -> None:
        self._courses = list(courses)
        self._sections = list(sections or [])

    def get_courses(self) -> list[Course]:
        return list(self._courses)

    def get_sections(self) -> list[Section]:
        return list(self._sections)


class JsonCatalogProvider:
    """Liest und schreibt Kurse/Sektionen als JSON-Dateien.

    Gelesene Daten werden im Speicher gehalten, bis clear_cache() aufgerufen
    oder neu gespeichert wird. Gespeichert werden Sektionen immer im flachen
    Format.
    """

    def __init__(self, courses_path: Path, sections_path: Path) -> None:
        self.courses_path = Path(courses_path)
        self.sections_path = Path(sections_path)
        self._courses: Optional[list[Course]] = None
        self._sections: Optional[list[Section]] = None

    def get_courses(self) -> list[Course]:
        if self._courses is None:
            self._courses = load_courses(self.courses_path)
        else:
            logger.debug(f"Kurse aus Cache ({len(self._courses)})")
        return list(self._courses)

    def get_sections(self) -> list[Section]:
        """Sektionen; fehlt die Datei, gibt es keine Sektionen."""
        if self._sections is None:
            if self.sections_path.exists():
                self._sections = load_sections(self.sections_path)
            else:
                logger.warning(f"Keine Sektionsdatei gefunden: {self.sections_path}")
                self._sections = []
        return list(self._sections)

    def save_courses(self, courses: list[Course]) -> None:
        """Speichert den Kurskatalog.

        Raises:
            PrereqCycleError: Die Voraussetzungen enthalten einen Zyklus
                (die Datei bleibt unverändert).
        """
        validate_catalog(courses)
        self._write(self.courses_path, [c.model_dump(mode="json", by_alias=True) for c in courses])
        self._courses = list(courses)
        logger.info(f"{len(courses)} Kurse gespeichert → {self.courses_path}")

    def save_sections(self, sections: list[Section]) -> None:
        """Speichert Sektionen im flachen Format.

        Raises:
            CatalogImportError: Eine CRN ist mehrfach vergeben.
        """
        duplicates = sorted(crn for crn, n in Counter(s.crn for s in sections).items() if n > 1)
        if duplicates:
            raise CatalogImportError(f"Doppelte CRNs: {', '.join(duplicates)}")
        self._write(self.sections_path, [_flat_record(s) for s in sections])
        self._sections = list(sections)
        logger.info(f"{len(sections)} Sektionen gespeichert → {self.sections_path}")

    def clear_cache(self) -> None:
        self._courses = None
        self._sections = None

    @staticmethod
    def _write(path: Path, payload: list) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)


def _flat_record(section: Section) -> dict:
    """Section → flacher JSON-Datensatz (camelCase, 24h-Uhrzeiten)."""
    record = section.model_dump(mode="json", by_alias=True, exclude={"schedule"})
    record["schedule"] = [
        {
            "day": block.day.value,
            "startTime": minutes_to_time(block.start),
            "endTime": "24:00" if block.end == 24 * 60 else minutes_to_time(block.end),
        }
        if block.is_timed
        else {"day": None, "startTime": None, "endTime": None, "label": block.label}
        for block in section.schedule
    ]
    return record
