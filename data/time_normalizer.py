"""Normalisierung von Uhrzeiten und Wochentagen.

Alle Zeitblöcke werden intern als Minuten seit Mitternacht gespeichert.
Eingaben kommen aus drei Quellen:
  - 24h-Strings "HH:MM" (flache Sektionsdaten)
  - 12h-Paare ("02:30", "PM") aus der Kurspflege
  - Rohtext der Registratur ("J7:00 a 10:00 am", "LMIV 7:00")

Unlesbare Eingaben führen nie zu einer Exception, sondern zu einem
Ersatzblock (12h) bzw. einem nicht terminierten Block (24h).
"""

import logging
import re
from typing import Optional

from config.defaults import REGISTRAR_DAY_CODES
from config.schema import TimeDefaults
from models.section import TimeBlock, Weekday

logger = logging.getLogger(__name__)

_HHMM_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")
_LABEL_RANGE_RE = re.compile(r"(\d{1,2}):(\d{2})\s+a\s+(\d{1,2}):(\d{2})\s*(am|pm)", re.IGNORECASE)
_LABEL_DAYS_RE = re.compile(r"^\s*([LMAIJVSD]+)")

# ─── Tages-Mapping ────────────────────────────────────────────────────────────

_DAY_NAMES = {
    # Englisch
    "monday": Weekday.MONDAY, "tuesday": Weekday.TUESDAY,
    "wednesday": Weekday.WEDNESDAY, "thursday": Weekday.THURSDAY,
    "friday": Weekday.FRIDAY, "saturday": Weekday.SATURDAY,
    "sunday": Weekday.SUNDAY,
    "mon": Weekday.MONDAY, "tue": Weekday.TUESDAY, "wed": Weekday.WEDNESDAY,
    "thu": Weekday.THURSDAY, "fri": Weekday.FRIDAY, "sat": Weekday.SATURDAY,
    "sun": Weekday.SUNDAY,
    # Spanisch
    "lunes": Weekday.MONDAY, "martes": Weekday.TUESDAY,
    "miércoles": Weekday.WEDNESDAY, "miercoles": Weekday.WEDNESDAY,
    "jueves": Weekday.THURSDAY, "viernes": Weekday.FRIDAY,
    "sábado": Weekday.SATURDAY, "sabado": Weekday.SATURDAY,
    "domingo": Weekday.SUNDAY,
    # Deutsch
    "montag": Weekday.MONDAY, "dienstag": Weekday.TUESDAY,
    "mittwoch": Weekday.WEDNESDAY, "donnerstag": Weekday.THURSDAY,
    "freitag": Weekday.FRIDAY, "samstag": Weekday.SATURDAY,
    "sonntag": Weekday.SUNDAY,
    "mo": Weekday.MONDAY, "di": Weekday.TUESDAY, "do": Weekday.THURSDAY,
    "fr": Weekday.FRIDAY, "sa": Weekday.SATURDAY, "so": Weekday.SUNDAY,
}


def parse_day(token: Optional[str]) -> Optional[Weekday]:
    """Wochentag aus Name (en/es/de) oder Registratur-Code (L, MA, MI, ...).

    Unbekannte Tokens → None.
    """
    if not token:
        return None
    raw = token.strip()
    code = REGISTRAR_DAY_CODES.get(raw.upper())
    if code is not None:
        return Weekday(code)
    return _DAY_NAMES.get(raw.lower())


def parse_day_codes(codes: str) -> list[Weekday]:
    """Zerlegt eine Code-Folge wie "LMIV" oder "MAJ" in Wochentage.

    "MA" und "MI" werden vor dem einzelnen "M" erkannt; unbekannte
    Zeichen werden übersprungen.
    """
    days: list[Weekday] = []
    text = codes.strip().upper()
    i = 0
    while i < len(text):
        pair = text[i:i + 2]
        if pair in ("MA", "MI"):
            days.append(Weekday(REGISTRAR_DAY_CODES[pair]))
            i += 2
            continue
        single = REGISTRAR_DAY_CODES.get(text[i])
        if single is not None:
            days.append(Weekday(single))
        i += 1
    return days


# ─── 24h ──────────────────────────────────────────────────────────────────────

def time_to_minutes(hhmm: Optional[str]) -> Optional[int]:
    """ "HH:MM" → Minuten seit Mitternacht, None bei ungültiger Eingabe."""
    if not hhmm:
        return None
    m = _HHMM_RE.match(hhmm)
    if not m:
        return None
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 24 or minutes > 59 or (hours == 24 and minutes > 0):
        return None
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    """Minuten seit Mitternacht → "HH:MM" (Überlauf wird auf 24h umgebrochen)."""
    minutes %= 24 * 60
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


# ─── 12h ──────────────────────────────────────────────────────────────────────

def to_24h(time12: str, period: str) -> str:
    """ "02:30" + "PM" → "14:30".

    Stunde wird auf 1..12, Minuten auf 0..59 begrenzt;
    12 AM → 00:xx, 12 PM → 12:xx.
    """
    h_str, _, m_str = (time12 or "").partition(":")
    try:
        hours = int(h_str)
    except ValueError:
        hours = 12
    try:
        minutes = int(m_str) if m_str else 0
    except ValueError:
        minutes = 0
    hours = max(1, min(12, hours))
    minutes = max(0, min(59, minutes))

    if (period or "").strip().upper() == "AM":
        if hours == 12:
            hours = 0
    elif hours != 12:
        hours += 12
    return f"{hours:02d}:{minutes:02d}"


def to_12h(hhmm: Optional[str]) -> tuple[str, str]:
    """ "14:30" → ("02:30", "PM"). Unlesbare Eingabe → ("07:00", "AM")."""
    total = time_to_minutes(hhmm) if hhmm else None
    if total is None or total >= 24 * 60:
        return ("07:00", "AM")
    hours, minutes = divmod(total, 60)
    period = "PM" if hours >= 12 else "AM"
    hours %= 12
    if hours == 0:
        hours = 12
    return (f"{hours:02d}:{minutes:02d}", period)


def format_time_12h(minutes: int) -> str:
    """Minuten → "7:00 AM" (Anzeigeformat ohne führende Null)."""
    time12, period = to_12h(minutes_to_time(minutes))
    return f"{int(time12[:2])}:{time12[3:]} {period}"


# ─── Zeitblöcke ───────────────────────────────────────────────────────────────

def _fallback_block(day: Weekday, defaults: TimeDefaults) -> TimeBlock:
    return TimeBlock(
        day=day,
        start=time_to_minutes(defaults.fallback_start),
        end=time_to_minutes(defaults.fallback_end),
    )


def block_from_12h(
    day: Weekday,
    start12: str,
    ap_start: str,
    end12: str,
    ap_end: str,
    defaults: Optional[TimeDefaults] = None,
) -> TimeBlock:
    """Zeitblock aus 12h-Eingaben (Kurspflege).

    Ergibt sich kein gültiges Intervall (Beginn ≥ Ende), wird der
    konfigurierte Ersatzblock (Standard 07:00–09:00) verwendet.
    """
    defaults = defaults or TimeDefaults()
    if ap_start.strip().upper() not in ("AM", "PM") or ap_end.strip().upper() not in ("AM", "PM"):
        logger.debug(f"Ungültige Tageszeit {ap_start!r}/{ap_end!r} → Ersatzblock")
        return _fallback_block(day, defaults)
    start = time_to_minutes(to_24h(start12, ap_start))
    end = time_to_minutes(to_24h(end12, ap_end))
    if start is None or end is None or start >= end:
        logger.debug(f"Ungültiges Intervall {start12} {ap_start}–{end12} {ap_end} → Ersatzblock")
        return _fallback_block(day, defaults)
    return TimeBlock(day=day, start=start, end=end)


def block_from_24h(
    day: Optional[str],
    start: Optional[str],
    end: Optional[str],
    label: Optional[str] = None,
) -> TimeBlock:
    """Zeitblock aus 24h-Strings (flache Sektionsdaten).

    Fehlende/ungültige Werte oder unbekannte Tage → nicht terminiert.
    Ende vor Beginn wird als AM/PM-Verwechslung behandelt (+12h), sofern
    das Ergebnis gültig ist; sonst nicht terminiert.
    """
    weekday = parse_day(day)
    start_min = time_to_minutes(start)
    end_min = time_to_minutes(end)
    if weekday is None or start_min is None or end_min is None or start_min >= 24 * 60:
        return TimeBlock.non_timed(label or "TBA")

    if end_min < start_min:
        repaired = end_min + 12 * 60
        if repaired > start_min and repaired <= 24 * 60:
            logger.debug(f"{day} {start}-{end}: Ende +12h korrigiert")
            end_min = repaired
        else:
            return TimeBlock.non_timed(label or "TBA")
    if end_min == start_min:
        return TimeBlock.non_timed(label or "TBA")
    return TimeBlock(day=weekday, start=start_min, end=end_min)


# ─── Registratur-Labels ───────────────────────────────────────────────────────

def parse_time_label(label: str) -> Optional[tuple[list[Weekday], int, int]]:
    """ "J7:00 a 10:00 am" → ([Thursday], 420, 600) oder None.

    Die Tageszeit am Ende gilt für das Ende und, sofern er dann noch davor
    liegt, auch für den Beginn. "12:xx am" als Ende vor dem Beginn wird
    als Mittag gelesen.
    """
    if not label:
        return None
    day_match = _LABEL_DAYS_RE.match(label)
    range_match = _LABEL_RANGE_RE.search(label)
    if not day_match or not range_match:
        return None
    days = parse_day_codes(day_match.group(1))
    if not days:
        return None

    start_h, start_m, end_h, end_m = (int(g) for g in range_match.groups()[:4])
    is_pm = range_match.group(5).lower() == "pm"
    start = start_h * 60 + start_m
    end = end_h * 60 + end_m

    if is_pm:
        if end_h != 12:
            end += 12 * 60
        # "11:00 a 1:00 pm": Beginn bleibt vormittags
        if start_h != 12 and start + 12 * 60 < end:
            start += 12 * 60
    else:
        if start_h == 12:
            start -= 12 * 60
        if end_h == 12:
            end = max(0, end - 12 * 60)
            if end < start:
                end += 12 * 60

    if start < 0 or end > 24 * 60 or start >= end:
        return None
    return days, start, end
