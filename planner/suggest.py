"""Automatischer Planvorschlag (greedy, deterministisch, ohne Backtracking).

Ablauf:
  1. Credits des bestehenden Plans bestimmen (Kurse außerhalb von
     available_courses zählen 0 – Aufrufer sollten bereits geplante Kurse
     mitübergeben).
  2. Kandidaten sortieren: Semester aufsteigend, dann Credits absteigend
     (stabil bei Gleichstand).
  3. Je Kandidat die erste Sektion (Eingabereihenfolge) wählen, die mit keinem
     Planeintrag kollidiert. Ohne passende Sektion wird der Kurs übersprungen.
  4. Abbruch, sobald die Credit-Grenze erreicht ist.

Der Vorschlag ist nicht optimal: übersprungene Kurse werden später nicht
erneut geprüft.
"""

import logging
from typing import Optional, Sequence

from models.course import Course, course_ids_match
from models.plan import PlannedSection
from models.section import Section
from planner.conflicts import conflicts_with_any

logger = logging.getLogger(__name__)

# Standard-Credit-Grenze des Vorschlags (knapp unter der Speichergrenze 31)
DEFAULT_MAX_CREDITS = 28


def sections_for(course_id: str, all_sections: Sequence[Section]) -> list[Section]:
    """Sektionen eines Kurses in Eingabereihenfolge (MED-100 == MED100)."""
    return [s for s in all_sections if course_ids_match(s.course_id, course_id)]


def _first_free_section(
    course_id: str,
    all_sections: Sequence[Section],
    plan: Sequence[PlannedSection],
) -> Optional[Section]:
    for section in sections_for(course_id, all_sections):
        if not conflicts_with_any(section, plan):
            return section
    return None


def suggest_plan(
    available_courses: Sequence[Course],
    all_sections: Sequence[Section],
    current_plan: Sequence[PlannedSection],
    max_credits: int = DEFAULT_MAX_CREDITS,
) -> list[PlannedSection]:
    """Erweitert current_plan greedy bis zur Credit-Grenze.

    Bestehende Einträge bleiben unverändert am Anfang erhalten; die
    Eingaben werden nicht verändert.
    """
    new_plan: list[PlannedSection] = list(current_plan)
    in_plan = {entry.course_id for entry in new_plan}

    credits_by_id: dict[str, int] = {}
    for course in available_courses:
        credits_by_id.setdefault(course.id, course.credits)
    current_credits = sum(credits_by_id.get(entry.course_id, 0) for entry in new_plan)

    candidates = sorted(
        (c for c in available_courses if c.id not in in_plan),
        key=lambda c: (c.term, -c.credits),
    )

    added = 0
    for course in candidates:
        if current_credits >= max_credits:
            break
        if course.id in in_plan:
            continue
        if current_credits + course.credits > max_credits:
            continue

        section = _first_free_section(course.id, all_sections, new_plan)
        if section is None:
            logger.debug(f"Vorschlag: {course.id} übersprungen (keine konfliktfreie Sektion)")
            continue

        new_plan.append(PlannedSection.of(course.id, section))
        in_plan.add(course.id)
        current_credits += course.credits
        added += 1

    logger.info(
        f"Vorschlag: {added} Kurse ergänzt, {current_credits}/{max_credits} Credits"
    )
    return new_plan


def select_section(
    plan: Sequence[PlannedSection], course_id: str, section: Section
) -> list[PlannedSection]:
    """Manuelle Wahl: ersetzt eine bestehende Wahl für den Kurs oder hängt an."""
    result = [e for e in plan if e.course_id != course_id]
    result.append(PlannedSection.of(course_id, section))
    return result


def remove_course(plan: Sequence[PlannedSection], course_id: str) -> list[PlannedSection]:
    """Entfernt einen Kurs aus dem Plan (kein Fehler, wenn nicht enthalten)."""
    return [e for e in plan if e.course_id != course_id]
