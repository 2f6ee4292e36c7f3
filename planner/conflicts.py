"""Terminkonflikte zwischen Sektionen.

Zwei Blöcke kollidieren nur, wenn beide terminiert sind, am selben
Wochentag liegen und sich die halboffenen Intervalle [start, end)
überschneiden. Angrenzende Blöcke (10:00 Ende / 10:00 Beginn) kollidieren nicht.
"""

from typing import Optional, Sequence

from models.plan import PlannedSection, ScheduleConflict
from models.section import Section, TimeBlock


def blocks_overlap(a: TimeBlock, b: TimeBlock) -> bool:
    """True wenn sich zwei terminierte Blöcke am selben Tag überschneiden."""
    if not a.is_timed or not b.is_timed:
        return False
    if a.day != b.day:
        return False
    return a.start < b.end and b.start < a.end


def _first_overlap(a: Section, b: Section) -> Optional[TimeBlock]:
    for block_a in a.schedule:
        for block_b in b.schedule:
            if blocks_overlap(block_a, block_b):
                return block_a
    return None


def has_conflict(section_a: Section, section_b: Section) -> bool:
    """Kollidieren zwei Sektionen? Symmetrisch, bricht beim ersten Treffer ab."""
    return _first_overlap(section_a, section_b) is not None


def find_time_conflict(section_a: Section, section_b: Section) -> Optional[str]:
    """Beschreibung der ersten Überschneidung (aus Sicht von A) oder None."""
    block = _first_overlap(section_a, section_b)
    return str(block) if block is not None else None


def conflicts_with_any(candidate: Section, planned: Sequence[PlannedSection]) -> bool:
    """Kollidiert die Sektion mit irgendeinem Eintrag des Plans?"""
    return any(has_conflict(entry.section, candidate) for entry in planned)


def detect_plan_conflicts(entries: Sequence[PlannedSection]) -> list[ScheduleConflict]:
    """Alle kollidierenden Paare eines Plans (in Planreihenfolge)."""
    conflicts: list[ScheduleConflict] = []
    for i in range(len(entries)):
        for j in range(i + 1, len(entries)):
            first, second = entries[i], entries[j]
            when = find_time_conflict(first.section, second.section)
            if when:
                conflicts.append(ScheduleConflict(
                    course1=first.course_id,
                    course2=second.course_id,
                    conflict_time=when,
                ))
    return conflicts
