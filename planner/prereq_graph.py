"""Zyklenprüfung im Voraussetzungsgraphen.

Kante kurs → voraussetzung bedeutet "kurs hängt von voraussetzung ab".
Ein Zyklus macht das Curriculum unerfüllbar; Katalogänderungen mit Zyklus
werden abgelehnt, bevor sie gespeichert werden.
"""

import logging
from typing import Optional, Sequence

from models.course import Course

logger = logging.getLogger(__name__)

_WHITE, _GRAY, _BLACK = 0, 1, 2


class PrereqCycleError(ValueError):
    """Eine Katalogänderung würde einen Voraussetzungs-Zyklus erzeugen."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__(
            f"Die Änderung erzeugt einen Zyklus in den Voraussetzungen: {' → '.join(cycle)}"
        )


def build_edges(courses: Sequence[Course]) -> list[tuple[str, str]]:
    """Eine Kante (kurs, voraussetzung) pro Voraussetzung jedes Kurses."""
    edges: list[tuple[str, str]] = []
    for course in courses:
        for pre in course.prerequisites:
            edges.append((course.id, pre))
    return edges


def _adjacency(edges: Sequence[tuple[str, str]]) -> dict[str, list[str]]:
    adj: dict[str, list[str]] = {}
    for src, dst in edges:
        adj.setdefault(src, []).append(dst)
        adj.setdefault(dst, [])
    return adj


def find_cycle(edges: Sequence[tuple[str, str]]) -> Optional[list[str]]:
    """Erster gefundener Zyklus als Knotenpfad (Start = Ende) oder None.

    Dreifarbige Tiefensuche über alle Knoten (der Graph kann ein Wald sein).
    Iterativ, damit lange Voraussetzungsketten kein Rekursionslimit erreichen.
    """
    adj = _adjacency(edges)
    color = {node: _WHITE for node in adj}

    for root in adj:
        if color[root] != _WHITE:
            continue
        color[root] = _GRAY
        path = [root]
        stack = [(root, iter(adj[root]))]
        while stack:
            node, neighbours = stack[-1]
            advanced = False
            for nxt in neighbours:
                if color[nxt] == _GRAY:
                    return path[path.index(nxt):] + [nxt]
                if color[nxt] == _WHITE:
                    color[nxt] = _GRAY
                    path.append(nxt)
                    stack.append((nxt, iter(adj[nxt])))
                    advanced = True
                    break
            if not advanced:
                color[node] = _BLACK
                path.pop()
                stack.pop()
    return None


def has_cycle(edges: Sequence[tuple[str, str]]) -> bool:
    """True sobald eine Rückwärtskante (auch Selbstschleife) gefunden wird."""
    return find_cycle(edges) is not None


def apply_course_edit(courses: Sequence[Course], updated: Course) -> list[Course]:
    """Übernimmt eine Kursänderung nur, wenn sie keinen Zyklus erzeugt.

    Gibt eine neue Kursliste zurück; die Eingabe bleibt unverändert.
    Unbekannte IDs werden angehängt (neuer Kurs).
    Raises:
        PrereqCycleError: Die Änderung würde einen Zyklus erzeugen.
    """
    replaced = False
    result: list[Course] = []
    for course in courses:
        if course.id == updated.id:
            result.append(updated)
            replaced = True
        else:
            result.append(course)
    if not replaced:
        result.append(updated)

    cycle = find_cycle(build_edges(result))
    if cycle:
        logger.warning(f"Katalogänderung an {updated.id} abgelehnt: Zyklus {cycle}")
        raise PrereqCycleError(cycle)
    return result


def validate_catalog(courses: Sequence[Course]) -> None:
    """Prüft einen kompletten Katalog vor dem Speichern.

    Raises:
        PrereqCycleError: Der Katalog enthält einen Zyklus.
    """
    cycle = find_cycle(build_edges(courses))
    if cycle:
        raise PrereqCycleError(cycle)
