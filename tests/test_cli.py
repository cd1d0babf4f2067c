"""Tests for the ``transcripts`` command-line interface.

Each test writes a settings file with zero simulated delays and points every
command at a storage file under ``tmp_path`` so nothing leaks between runs.
"""

from __future__ import annotations

import json
import typing as typ

import pytest
from bs4 import BeautifulSoup

from transcript_designer.cli import main
from transcript_designer.storage import JsonFileStorage
from transcript_designer.store import Preferences, TemplateStore

if typ.TYPE_CHECKING:
    from pathlib import Path

SETTINGS = """
programs: [PGP TBM, PGP Rise]
cohorts: [Class of 2025, Class of 2026]
terms: [Term I, Term II]
simulation:
  actor: Tester
  calculation_delay: 0
  generation_delay: 0
"""


class CliHarness:
    """Run CLI commands against an isolated settings and storage file."""

    def __init__(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        self.tmp_path = tmp_path
        self.capsys = capsys
        self.config = tmp_path / "designer.yaml"
        self.config.write_text(SETTINGS.strip() + "\n", encoding="utf-8")
        self.storage = tmp_path / "storage.json"

    def run(self, *args: str) -> str:
        """Run one command and return its stdout."""
        tokens = [*args, "--config", str(self.config), "--storage", str(self.storage)]
        try:
            main(tokens)
        except SystemExit as exc:
            if exc.code not in (0, None):
                raise
        return self.capsys.readouterr().out

    def fail(self, *args: str) -> str:
        """Run a command expected to fail and return its stderr."""
        tokens = [*args, "--config", str(self.config), "--storage", str(self.storage)]
        with pytest.raises(SystemExit) as excinfo:
            main(tokens)
        assert excinfo.value.code == 1, f"Expected exit status 1, got {excinfo.value.code}"
        return self.capsys.readouterr().err

    def store(self) -> TemplateStore:
        return TemplateStore(JsonFileStorage(self.storage))

    def active_id(self) -> str | None:
        return Preferences(JsonFileStorage(self.storage)).active_template_id


@pytest.fixture
def cli(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> CliHarness:
    return CliHarness(tmp_path, capsys)


def test_create_selects_and_lists_template(cli: CliHarness) -> None:
    output = cli.run("create", "Fall Design")
    assert output.startswith("created Fall Design")

    (template,) = cli.store().list()
    assert cli.active_id() == template.id
    listing = cli.run("list")
    assert f"* {template.id}  Fall Design" in listing
    assert "types=transcript" in listing


def test_list_without_templates(cli: CliHarness) -> None:
    assert cli.run("list").strip() == "no templates saved"


def test_edit_commands_update_selected_template(cli: CliHarness) -> None:
    cli.run("create", "Fall Design")
    cli.run("edit", "header", "institute_name", "Test Institute")
    cli.run("edit", "column", "inClass", "show_percentage")
    cli.run("edit", "label", "inClass", "percentage_label", "Score")
    cli.run("edit", "format", "outClass", "grid")
    cli.run("edit", "unified")
    cli.run("edit", "summary-visibility", "overall-default")
    cli.run("edit", "summary-field", "overall-default", "show_cgpa")
    cli.run("edit", "summary-label", "overall-default", "credits_required_label", "All")
    cli.run("edit", "student", "name", "Student:")
    cli.run("edit", "variable", "name", "{{student.name}}")

    (template,) = cli.store().list()
    document = template.data
    assert document.header.institute_name == "Test Institute"
    assert document.table_configs.in_class.show_percentage is True
    assert document.table_configs.in_class.percentage_label == "Score"
    assert document.table_configs.out_class.format == "grid"
    assert document.is_unified_tables is True
    overall = document.summary_config.sections[2]
    assert overall.is_visible is True
    assert overall.show_cgpa is False
    assert overall.credits_required_label == "All"
    assert document.student.name == "Student:{{student.name}}"


def test_logo_is_embedded_and_cleared(cli: CliHarness) -> None:
    cli.run("create", "Fall Design")
    image = cli.tmp_path / "logo.png"
    image.write_bytes(b"\x89PNG")
    cli.run("edit", "logo", str(image))
    (template,) = cli.store().list()
    assert (template.data.header.logo or "").startswith("data:image/png;base64,")

    cli.run("edit", "logo", "--clear")
    (template,) = cli.store().list()
    assert template.data.header.logo is None


def test_map_enforces_cohort_exclusivity(cli: CliHarness) -> None:
    cli.run("create", "Fall")
    cli.run("map", "--programs", "PGP TBM", "--cohorts", "Class of 2025")
    cli.run("create", "Spring")
    output = cli.run(
        "map",
        "--cohorts",
        "Class of 2025",
        "--cohorts",
        "Class of 2026",
        "--types",
        "term-report",
    )
    assert "cohorts=Class of 2025,Class of 2026" in output

    fall, spring = cli.store().list()
    assert fall.cohorts == ()
    assert spring.cohorts == ("Class of 2025", "Class of 2026")
    assert spring.types == ("term-report",)


def test_map_rejects_unconfigured_program(cli: CliHarness) -> None:
    cli.run("create", "Fall")
    error = cli.fail("map", "--programs", "Unknown MBA")
    assert "Unknown program: Unknown MBA" in error


def test_commands_need_a_selected_template(cli: CliHarness) -> None:
    error = cli.fail("edit", "unified")
    assert "No template selected" in error


def test_select_switches_active_template(cli: CliHarness) -> None:
    cli.run("create", "Fall")
    cli.run("create", "Spring")
    fall, _spring = cli.store().list()
    assert cli.run("select", fall.id).startswith("selected Fall")
    assert cli.active_id() == fall.id
    assert "Unknown template" in cli.fail("select", "missing")


def test_export_update_and_preview(cli: CliHarness) -> None:
    cli.run("create", "Fall")
    exported = cli.tmp_path / "fall.yaml"
    cli.run("export", str(exported))
    text = exported.read_text(encoding="utf-8").replace(
        "Masters' Union", "Exported Institute"
    )
    exported.write_text(text, encoding="utf-8")

    cli.run("update", "--name", "Fall v2", "--from-file", str(exported))
    (template,) = cli.store().list()
    assert template.name == "Fall v2"
    assert template.data.header.institute_name == "Exported Institute"

    preview = cli.tmp_path / "out" / "fall.html"
    cli.run("preview", "--output", str(preview))
    soup = BeautifulSoup(preview.read_text(encoding="utf-8"), "html.parser")
    assert soup.title is not None and soup.title.string == "Fall v2"
    assert soup.select_one(".institute-name").get_text() == "Exported Institute"


def test_workflow_commands(cli: CliHarness) -> None:
    cli.run("create", "Fall")
    cli.run(
        "map",
        "--programs",
        "PGP TBM",
        "--cohorts",
        "Class of 2025",
        "--types",
        "transcript",
        "--types",
        "term-report",
    )
    selection = ["--program", "PGP TBM", "--cohort", "Class of 2025"]
    assert cli.run("workflow", "calculate", *selection, "--term", "Term I").startswith(
        "Term I: TGPA "
    )

    out_dir = cli.tmp_path / "exports"
    cli.run(
        "workflow", "report", *selection, "--term", "Term I", "--output-dir", str(out_dir)
    )
    cli.run("workflow", "final", *selection, "--output-dir", str(out_dir))
    assert sorted(p.name for p in out_dir.iterdir()) == [
        "PGP_TBM_Class_of_2025_Term_I_term_report.csv",
        "PGP_TBM_Class_of_2025_final_transcript.csv",
    ]

    status = cli.run("workflow", "status", *selection)
    assert "report generated" in status
    assert "final document generated" in status
    assert "through Term I" in status

    history = cli.run("workflow", "history", *selection)
    actions = [line.split("  ")[2] for line in history.strip().splitlines()]
    assert actions == ["calculate_tgpa", "generate_term_report", "generate_final_document"]
    assert "Tester" in history


def test_workflow_report_without_mapping_fails(cli: CliHarness) -> None:
    """A missing term-report template is reported and changes nothing."""
    cli.run("create", "Fall")
    cli.run("map", "--programs", "PGP TBM", "--cohorts", "Class of 2025")
    selection = ["--program", "PGP TBM", "--cohort", "Class of 2025"]
    cli.run("workflow", "calculate", *selection, "--term", "Term I")
    before = json.loads(cli.storage.read_text(encoding="utf-8"))

    error = cli.fail("workflow", "report", *selection, "--term", "Term I")
    assert "No term-report template is mapped to PGP TBM / Class of 2025" in error
    assert json.loads(cli.storage.read_text(encoding="utf-8")) == before


def test_storage_path_from_environment(
    cli: CliHarness, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_storage = cli.tmp_path / "env-storage.json"
    monkeypatch.setenv("TRANSCRIPTS_STORAGE", str(env_storage))
    try:
        main(["create", "From Env", "--config", str(cli.config)])
    except SystemExit as exc:
        if exc.code not in (0, None):
            raise
    assert env_storage.exists(), "Expected TRANSCRIPTS_STORAGE to choose the storage file"
