"""Tests für das Konfigurationssystem und die CLI."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from config.schema import (
    ElectiveType,
    EligibilityRules,
    PlanLimits,
    PlannerConfig,
    TimeDefaults,
)
from config.defaults import (
    DAY_MINUTE_OFFSETS,
    REGISTRAR_DAY_CODES,
    WEEKDAYS,
    default_eligibility_rules,
    default_plan_limits,
    default_planner_config,
)
from config.manager import ConfigManager


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_eligibility_rules(self):
        """Wahlfach-Schwellen 6 / 11 / 15, 50 %-Heuristik."""
        rules = default_eligibility_rules()
        assert rules.term_reached_ratio == 0.5
        assert rules.max_term == 18
        assert rules.general_min_progress == 6
        assert rules.professional_basic_min_progress == 11
        assert rules.professional_clinical_min_progress == 15

    def test_default_plan_limits(self):
        """Vorschlag 28, Speichern 31, Semester 22."""
        limits = default_plan_limits()
        assert (limits.max_credits, limits.hard_max_credits, limits.term_max_credits) == (28, 31, 22)

    def test_default_planner_config_valid(self):
        """Vollständige Default-Config ist valide."""
        config = default_planner_config()
        assert config.program_name == "Medizin"
        assert config.passing_grades == ["A", "B", "C"]
        assert config.times.fallback_start == "07:00"
        assert config.paths.courses_json == "data/courses.json"

    def test_registrar_codes_cover_week(self):
        """Registratur-Codes decken alle sieben Wochentage ab."""
        assert sorted(REGISTRAR_DAY_CODES.values()) == sorted(WEEKDAYS)

    def test_day_minute_offsets(self):
        """Wochenminuten: Montag 0, Dienstag 1440, ..."""
        assert DAY_MINUTE_OFFSETS["Monday"] == 0
        assert DAY_MINUTE_OFFSETS["Wednesday"] == 2 * 1440


# ─── PYDANTIC-VALIDIERUNG ─────────────────────────────────────────────────────

class TestPydanticValidation:
    @pytest.mark.parametrize("etype,term,expected", [
        (ElectiveType.GENERAL, 1, 6),
        (ElectiveType.GENERAL, 18, 6),
        (ElectiveType.PROFESSIONAL, 11, 11),
        (ElectiveType.PROFESSIONAL, 12, 15),
        (None, 5, 0),
    ])
    def test_min_progress_for(self, etype, term, expected):
        """Benötigter Fortschritt je Wahlfach-Typ und Semester."""
        assert EligibilityRules().min_progress_for(etype, term) == expected

    def test_ratio_must_be_positive(self):
        """term_reached_ratio = 0 ist ungültig."""
        with pytest.raises(ValidationError):
            EligibilityRules(term_reached_ratio=0.0)

    def test_max_above_hard_limit_raises(self):
        """Vorschlagsgrenze über der Speichergrenze → Fehler."""
        with pytest.raises(ValidationError):
            PlanLimits(max_credits=35, hard_max_credits=31)

    def test_fallback_order(self):
        """Ersatz-Beginn muss vor Ersatz-Ende liegen."""
        with pytest.raises(ValidationError):
            TimeDefaults(fallback_start="10:00", fallback_end="09:00")

    def test_fallback_format(self):
        """Ersatzzeiten im Format HH:MM."""
        with pytest.raises(ValidationError):
            TimeDefaults(fallback_start="7 Uhr")

    def test_unknown_passing_grade(self):
        """Bestehensnoten brauchen Notenpunkte."""
        with pytest.raises(ValidationError):
            PlannerConfig(passing_grades=["A", "Z"])


# ─── YAML SPEICHERN / LADEN ───────────────────────────────────────────────────

def _manager(tmp_path: Path) -> ConfigManager:
    mgr = ConfigManager()
    mgr.CONFIG_DIR = tmp_path
    mgr.DEFAULT_CONFIG = tmp_path / "planner_config.yaml"
    return mgr


class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Config speichern, laden und validieren — vollständiger Roundtrip."""
        config = default_planner_config().model_copy(update={"program_name": "Test"})
        mgr = _manager(tmp_path)

        mgr.save(config)
        assert mgr.DEFAULT_CONFIG.exists()

        loaded = mgr.load(mgr.DEFAULT_CONFIG)
        assert loaded.program_name == "Test"
        assert loaded.limits == config.limits
        assert loaded.eligibility == config.eligibility
        assert loaded.grade_points == config.grade_points

    def test_yaml_has_comments(self, tmp_path: Path):
        """Gespeicherte Datei enthält Kopf und Abschnittskommentare."""
        mgr = _manager(tmp_path)
        mgr.save(default_planner_config())
        text = mgr.DEFAULT_CONFIG.read_text(encoding="utf-8")
        assert "Studienplaner" in text
        assert "Credit-Grenzen" in text

    def test_first_run_check_no_file(self, tmp_path: Path):
        """first_run_check gibt True zurück wenn keine Config existiert."""
        mgr = ConfigManager()
        mgr.DEFAULT_CONFIG = tmp_path / "nonexistent.yaml"
        assert mgr.first_run_check() is True

    def test_first_run_check_with_file(self, tmp_path: Path):
        """first_run_check gibt False zurück wenn Config existiert."""
        mgr = _manager(tmp_path)
        mgr.save(default_planner_config())
        assert mgr.first_run_check() is False

    def test_load_nonexistent_raises(self, tmp_path: Path):
        """Laden einer nicht-existenten Datei → FileNotFoundError."""
        mgr = ConfigManager()
        with pytest.raises(FileNotFoundError):
            mgr.load(tmp_path / "not_there.yaml")

    def test_load_or_default_without_file(self, tmp_path: Path):
        """Ohne Datei gelten die Standardwerte."""
        mgr = _manager(tmp_path)
        assert mgr.load_or_default() == default_planner_config()

    def test_invalid_file_raises_value_error(self, tmp_path: Path):
        """Ungültige Werte → ValueError mit Dateiname."""
        path = tmp_path / "planner_config.yaml"
        path.write_text("limits:\n  max_credits: 40\n  hard_max_credits: 31\n", encoding="utf-8")
        with pytest.raises(ValueError, match="ungültig"):
            ConfigManager().load(path)


# ─── CLI ──────────────────────────────────────────────────────────────────────

def _write_dataset(root: Path) -> None:
    """Mini-Katalog: A (Sem. 1) und B (braucht A), je eine Sektion."""
    data = root / "data"
    data.mkdir(parents=True, exist_ok=True)
    courses = [
        {"id": "A", "name": "Anatomie", "credits": 4, "term": 1},
        {"id": "B", "name": "Biochemie", "credits": 3, "term": 1, "prerequisites": ["A"]},
    ]
    sections = [
        {"courseId": "A", "crn": "A1", "room": "R1",
         "schedule": [{"day": "Monday", "startTime": "09:00", "endTime": "10:30"}]},
        {"courseId": "B", "crn": "B1", "room": "R2",
         "schedule": [{"day": "Monday", "startTime": "10:00", "endTime": "11:00"}]},
    ]
    (data / "courses.json").write_text(json.dumps(courses), encoding="utf-8")
    (data / "sections.json").write_text(json.dumps(sections), encoding="utf-8")


class TestCli:
    def test_help(self):
        """main.py --help gibt Usage aus."""
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Usage" in result.output

    @pytest.mark.parametrize("command", [
        ["config", "--help"],
        ["generate", "--help"],
        ["status", "--help"],
        ["progress", "pass", "--help"],
        ["suggest", "--help"],
        ["term-suggest", "--help"],
        ["conflicts", "--help"],
        ["catalog", "check", "--help"],
        ["catalog", "edit-prereqs", "--help"],
        ["import-sections", "--help"],
        ["export", "--help"],
        ["stats", "--help"],
    ])
    def test_command_exists(self, command):
        """Alle Befehle sind registriert."""
        from click.testing import CliRunner
        from main import cli
        result = CliRunner().invoke(cli, command)
        assert result.exit_code == 0

    def test_config_init_creates_file(self):
        """config init legt die YAML-Datei an."""
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["config", "init"])
            assert result.exit_code == 0
            assert Path("config/planner_config.yaml").exists()

    def test_status_without_catalog(self):
        """status ohne Kurskatalog → Abbruch mit Fehlercode."""
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["status"])
            assert result.exit_code == 1

    def test_workflow(self):
        """Bestehen → Vorschlag speichern → Konflikte → Export → Statistik."""
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write_dataset(Path("."))

            result = runner.invoke(cli, ["status"])
            assert result.exit_code == 0
            assert "Anatomie" in result.output

            result = runner.invoke(cli, ["progress", "pass", "A", "-g", "B"])
            assert result.exit_code == 0
            assert Path("output/student_progress.json").exists()

            result = runner.invoke(cli, ["suggest", "--save"])
            assert result.exit_code == 0
            plan = json.loads(Path("output/course_plan.json").read_text(encoding="utf-8"))
            assert [e["course_id"] for e in plan["entries"]] == ["B"]

            assert runner.invoke(cli, ["conflicts"]).exit_code == 0

            result = runner.invoke(cli, ["export", "-o", "out/plan.xlsx"])
            assert result.exit_code == 0
            assert Path("out/plan.xlsx").exists()

            assert runner.invoke(cli, ["stats"]).exit_code == 0

    def test_failing_grade_rejected(self):
        """Note D reicht nicht zum Bestehen."""
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write_dataset(Path("."))
            result = runner.invoke(cli, ["progress", "pass", "A", "-g", "D"])
            assert result.exit_code == 1
            assert not Path("output/student_progress.json").exists()

    def test_edit_prereqs_rejects_cycle(self):
        """Zyklische Voraussetzung wird abgelehnt, Datei bleibt unverändert."""
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write_dataset(Path("."))
            before = Path("data/courses.json").read_text(encoding="utf-8")
            result = runner.invoke(cli, ["catalog", "edit-prereqs", "A", "B"])
            assert result.exit_code == 1
            assert "Zyklus" in result.output
            assert Path("data/courses.json").read_text(encoding="utf-8") == before

    def test_edit_prereqs_normalized_id_cycle(self):
        """Zyklus wird auch über eine nicht-kanonische ID (MED200) erkannt."""
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write_dataset(Path("."))
            courses = [
                {"id": "MED-100", "name": "Anatomie", "credits": 4, "term": 1},
                {"id": "MED-200", "name": "Physiologie", "credits": 4, "term": 2,
                 "prerequisites": ["MED-100"]},
            ]
            Path("data/courses.json").write_text(json.dumps(courses), encoding="utf-8")
            before = Path("data/courses.json").read_text(encoding="utf-8")
            result = runner.invoke(cli, ["catalog", "edit-prereqs", "MED-100", "MED200"])
            assert result.exit_code == 1
            assert "Zyklus" in result.output
            assert Path("data/courses.json").read_text(encoding="utf-8") == before

    def test_edit_prereqs_stores_catalog_id(self):
        """Normalisiert angegebene Voraussetzung wird mit Katalog-ID gespeichert."""
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write_dataset(Path("."))
            courses = [
                {"id": "MED-100", "name": "Anatomie", "credits": 4, "term": 1},
                {"id": "MED-200", "name": "Physiologie", "credits": 4, "term": 2},
            ]
            Path("data/courses.json").write_text(json.dumps(courses), encoding="utf-8")
            result = runner.invoke(cli, ["catalog", "edit-prereqs", "MED-200", "med100"])
            assert result.exit_code == 0
            saved = json.loads(Path("data/courses.json").read_text(encoding="utf-8"))
            assert {c["id"]: c["prerequisites"] for c in saved} == {
                "MED-100": [], "MED-200": ["MED-100"],
            }
            check = runner.invoke(cli, ["catalog", "check"])
            assert check.exit_code == 0

    def test_catalog_check_consistent(self):
        """Konsistenter Katalog → Exit-Code 0."""
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write_dataset(Path("."))
            result = runner.invoke(cli, ["catalog", "check"])
            assert result.exit_code == 0
