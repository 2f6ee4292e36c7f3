from config.schema import (
    DataPaths,
    EligibilityRules,
    PlanLimits,
    PlannerConfig,
    TimeDefaults,
)


# Kanonische Wochentage (Reihenfolge = Darstellung im Wochenraster)
WEEKDAYS = [
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
]

# Kurzformen für Tabellen und Export
WEEKDAY_SHORT = {
    "Monday": "Mo", "Tuesday": "Di", "Wednesday": "Mi", "Thursday": "Do",
    "Friday": "Fr", "Saturday": "Sa", "Sunday": "So",
}

# Spanische Kurzformen (Anzeige im Format der Fakultät, z.B. "Lun/Mié")
WEEKDAY_DISPLAY_ES = {
    "Monday": "Lun", "Tuesday": "Mar", "Wednesday": "Mié", "Thursday": "Jue",
    "Friday": "Vie", "Saturday": "Sáb", "Sunday": "Dom",
}

# Tages-Codes der Registratur ("L", "MA", "MI", "J", "V", "S", "D")
REGISTRAR_DAY_CODES = {
    "L": "Monday",
    "MA": "Tuesday",
    "MI": "Wednesday",
    "J": "Thursday",
    "V": "Friday",
    "S": "Saturday",
    "D": "Sunday",
}

# Minuten-Offset pro Tag in den verschachtelten Sektionsdaten (Wochenminuten)
DAY_MINUTE_OFFSETS = {day: i * 1440 for i, day in enumerate(WEEKDAYS)}


def default_eligibility_rules() -> EligibilityRules:
    """Freischaltungsregeln des Medizin-Curriculums (18 Semester).

    Allgemeine Wahlfächer:          ab erreichtem Semester 6
    Fachwahlfächer Sem. 1-11:       ab erreichtem Semester 11
    Fachwahlfächer Sem. 12-18:      ab erreichtem Semester 15
    Ein Semester gilt als erreicht, wenn ≥ 50 % seiner Pflichtkurse
    bestanden oder eingeplant sind.
    """
    return EligibilityRules(
        term_reached_ratio=0.5,
        max_term=18,
        general_min_progress=6,
        professional_term_boundary=11,
        professional_basic_min_progress=11,
        professional_clinical_min_progress=15,
    )


def default_plan_limits() -> PlanLimits:
    """Credit-Grenzen: Vorschlag bis 28, Speichern bis 31, Semester 22."""
    return PlanLimits(max_credits=28, hard_max_credits=31, term_max_credits=22)


def default_planner_config() -> PlannerConfig:
    """Vollständige Standardkonfiguration."""
    return PlannerConfig(
        program_name="Medizin",
        eligibility=default_eligibility_rules(),
        limits=default_plan_limits(),
        times=TimeDefaults(),
        paths=DataPaths(),
    )
