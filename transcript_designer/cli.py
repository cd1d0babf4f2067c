"""Cyclopts CLI entrypoint for designing transcript templates.

The ``transcripts`` console script defined here manages saved templates
(create, update, map to programs/cohorts, export), applies individual editor
operations to a template's document, writes HTML previews, and drives the
simulated GPA/document workflow for a program cohort. Every command reads the
designer settings file first; when the default ``config/designer.yaml`` is
absent the built-in defaults apply.

Examples
--------
Create a template and preview it:

>>> from transcript_designer.cli import app
>>> app(["create", "Fall Design"])  # doctest: +SKIP
>>> app(["preview", "--output", "public/fall.html"])  # doctest: +SKIP

Map it to a cohort and generate the final transcript export:

>>> app(
...     ["map", "--programs", "PGP TBM", "--cohorts", "Class of 2025"]
... )  # doctest: +SKIP
>>> app(
...     ["workflow", "final", "--program", "PGP TBM", "--cohort", "Class of 2025"]
... )  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from . import editor
from .config import DesignerConfig, load_designer_config
from .document import default_document, dump_document, image_data_url, load_document
from .preview import PreviewPageBuilder
from .storage import JsonFileStorage
from .store import Preferences, TemplateStore
from .workflow import (
    CohortKey,
    CsvDocumentGenerator,
    RandomScoringService,
    WorkflowSimulator,
    WorkflowStateError,
)

if typ.TYPE_CHECKING:
    from .document.models import Document, Template
    from .workflow import GeneratedArtifact

DEFAULT_CONFIG = Path("config/designer.yaml")

logger = logging.getLogger(__name__)

app = App(name="transcripts", config=cyclopts.config.Env("TRANSCRIPTS_", command=False))  # type: ignore[unknown-argument]
edit_app = App(name="edit", help="Apply a single edit to a template's document.")
workflow_app = App(name="workflow", help="Simulate GPA calculation and document generation.")
app.command(edit_app)
app.command(workflow_app)

ConfigOption = typ.Annotated[Path, Parameter(help="Path to designer settings")]
StorageOption = typ.Annotated[
    Path | None, Parameter(help="Override the storage file from the settings")
]
TemplateOption = typ.Annotated[
    str | None, Parameter(help="Template id; defaults to the selected template")
]
VerboseOption = typ.Annotated[bool, Parameter(help="Enable debug logging")]
ClassTypeOption = typ.Annotated[
    str, Parameter(help="Column configuration to edit: inClass or outClass")
]


@dc.dataclass(slots=True)
class _Session:
    """Objects shared by every command invocation."""

    settings: DesignerConfig
    store: TemplateStore
    preferences: Preferences
    storage: JsonFileStorage


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_settings(path: Path) -> DesignerConfig:
    """Load ``path``, falling back to defaults only for a missing default file."""
    if path == DEFAULT_CONFIG and not path.exists():
        logger.debug("No settings at %s; using defaults", path)
        return DesignerConfig()
    return load_designer_config(path)


def _open_session(config: Path, storage: Path | None, *, verbose: bool) -> _Session:
    _configure_logging(verbose=verbose)
    settings = _load_settings(config)
    backend = JsonFileStorage(storage or settings.storage.path)
    return _Session(
        settings=settings,
        store=TemplateStore(backend),
        preferences=Preferences(backend),
        storage=backend,
    )


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _resolve_template(session: _Session, template_id: str | None) -> Template:
    """Return the requested template, or the selected one when ``template_id`` is unset.

    Raises
    ------
    LookupError
        If no template is selected or the id is unknown.
    """
    target = template_id or session.preferences.active_template_id
    if not target:
        msg = "No template selected. Pass --template or run 'transcripts select'."
        raise LookupError(msg)
    template = session.store.get(target)
    if template is None:
        msg = f"Unknown template '{target}'."
        raise LookupError(msg)
    return template


def _apply_edit(
    session: _Session,
    template_id: str | None,
    change: typ.Callable[[Document], Document],
) -> None:
    template = _resolve_template(session, template_id)
    session.store.update(template.id, template.name, change(template.data))
    print(f"updated {template.name} ({template.id})")


def _check_names(kind: str, names: typ.Iterable[str], allowed: tuple[str, ...]) -> None:
    unknown = [name for name in names if name not in allowed]
    if unknown:
        msg = f"Unknown {kind}: {', '.join(unknown)}. Configured: {', '.join(allowed)}"
        raise ValueError(msg)


def _cohort_key(session: _Session, program: str, cohort: str) -> CohortKey:
    _check_names("program", [program], session.settings.programs)
    _check_names("cohort", [cohort], session.settings.cohorts)
    return CohortKey(program=program, cohort=cohort)


def _simulator(session: _Session) -> WorkflowSimulator:
    simulation = session.settings.simulation
    return WorkflowSimulator(
        session.store,
        session.storage,
        RandomScoringService(delay=simulation.calculation_delay),
        CsvDocumentGenerator(delay=simulation.generation_delay),
        terms=session.settings.terms,
    )


def _write_artifact(artifact: GeneratedArtifact, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / artifact.filename
    path.write_text(artifact.content, encoding="utf-8")
    return path


@app.command(name="list", help="List saved templates and their mappings.")
def list_templates(
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Print one line per template: id, name, types, programs, cohorts."""
    session = _open_session(config, storage, verbose=verbose)
    active = session.preferences.active_template_id
    templates = session.store.list()
    if not templates:
        print("no templates saved")
        return
    for template in templates:
        marker = "*" if template.id == active else " "
        print(
            f"{marker} {template.id}  {template.name}  "
            f"types={','.join(template.types)}  "
            f"programs={','.join(template.programs) or '-'}  "
            f"cohorts={','.join(template.cohorts) or '-'}  "
            f"modified={template.last_modified.isoformat(timespec='seconds')}"
        )


@app.command(help="Save a new template and select it.")
def create(
    name: str,
    *,
    from_file: typ.Annotated[
        Path | None, Parameter(help="YAML document to start from")
    ] = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Create a template from the default document or a YAML document file.

    Parameters
    ----------
    name : str
        Display name of the new template.
    from_file : Path or None, optional
        Document to save instead of the built-in default document.
    """
    session = _open_session(config, storage, verbose=verbose)
    document = load_document(from_file) if from_file else default_document()
    template = session.store.create(name, document)
    session.preferences.active_template_id = template.id
    print(f"created {template.name} ({template.id})")


@app.command(help="Rename a template or replace its document from YAML.")
def update(
    *,
    template: TemplateOption = None,
    name: typ.Annotated[str | None, Parameter(help="New display name")] = None,
    from_file: typ.Annotated[
        Path | None, Parameter(help="YAML document replacing the saved one")
    ] = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    current = _resolve_template(session, template)
    document = load_document(from_file) if from_file else current.data
    updated = session.store.update(current.id, name or current.name, document)
    if updated is not None:
        print(f"updated {updated.name} ({updated.id})")


@app.command(name="map", help="Map a template to programs, cohorts, and document types.")
def map_template(
    *,
    template: TemplateOption = None,
    programs: typ.Annotated[
        list[str] | None, Parameter(help="Programs served by the template")
    ] = None,
    cohorts: typ.Annotated[
        list[str] | None,
        Parameter(help="Cohorts claimed by the template; removed from other templates"),
    ] = None,
    types: typ.Annotated[
        list[str] | None, Parameter(help="Document types: transcript, term-report")
    ] = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Update the mapping metadata of a template.

    Only the options that are given are changed. Claiming a cohort removes it
    from every other template.
    """
    session = _open_session(config, storage, verbose=verbose)
    current = _resolve_template(session, template)
    fields: dict[str, list[str]] = {}
    if programs is not None:
        _check_names("program", programs, session.settings.programs)
        fields["programs"] = programs
    if cohorts is not None:
        _check_names("cohort", cohorts, session.settings.cohorts)
        fields["cohorts"] = cohorts
    if types is not None:
        fields["types"] = types
    patched = session.store.patch_meta(current.id, **fields)
    if patched is not None:
        print(
            f"mapped {patched.name}: types={','.join(patched.types)} "
            f"programs={','.join(patched.programs) or '-'} "
            f"cohorts={','.join(patched.cohorts) or '-'}"
        )


@app.command(help="Select the template that later commands operate on.")
def select(
    template_id: str,
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    chosen = _resolve_template(session, template_id)
    session.preferences.active_template_id = chosen.id
    session.preferences.view = "editor"
    print(f"selected {chosen.name} ({chosen.id})")


@app.command(help="Write a template's document to a YAML file.")
def export(
    output: Path,
    *,
    template: TemplateOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    current = _resolve_template(session, template)
    written = dump_document(current.data, output)
    print(f"wrote {_format_path(written)}")


@app.command(help="Render a template (or YAML document) to an HTML preview.")
def preview(
    *,
    template: TemplateOption = None,
    from_file: typ.Annotated[
        Path | None, Parameter(help="Preview a YAML document instead of a template")
    ] = None,
    output: typ.Annotated[
        Path | None, Parameter(help="Destination HTML file")
    ] = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Write the A4 preview page for the chosen document.

    Parameters
    ----------
    template : str or None, optional
        Template to preview; defaults to the selected template.
    from_file : Path or None, optional
        YAML document to preview without touching saved templates.
    output : Path or None, optional
        Destination HTML file; defaults to ``preview.output`` from the
        settings.
    """
    session = _open_session(config, storage, verbose=verbose)
    if from_file:
        document = load_document(from_file)
        title = None
    else:
        current = _resolve_template(session, template)
        document = current.data
        title = current.name
    destination = output or session.settings.preview.output
    written = PreviewPageBuilder(document, destination, title=title).run()
    print(f"wrote {_format_path(written)}")


@edit_app.command(help="Set a header field (institute_name, sub_header, ...).")
def header(
    field: str,
    value: str,
    *,
    template: TemplateOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    _apply_edit(session, template, lambda doc: editor.update_header(doc, field, value))


@edit_app.command(help="Set a student field (name, roll_no, status).")
def student(
    field: str,
    value: str,
    *,
    template: TemplateOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    _apply_edit(session, template, lambda doc: editor.update_student(doc, field, value))


@edit_app.command(help="Set a footer field (footer_text, signatory_name, ...).")
def footer(
    field: str,
    value: str,
    *,
    template: TemplateOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    _apply_edit(session, template, lambda doc: editor.update_footer(doc, field, value))


@edit_app.command(help="Append a placeholder token such as {{student.name}} to a student field.")
def variable(
    field: str,
    token: str,
    *,
    template: TemplateOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    _apply_edit(
        session, template, lambda doc: editor.append_student_variable(doc, field, token)
    )


@edit_app.command(help="Show or hide a course table column (show_gpa, show_percentage, ...).")
def column(
    class_type: ClassTypeOption,
    flag: str,
    *,
    template: TemplateOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    _apply_edit(session, template, lambda doc: editor.toggle_column(doc, class_type, flag))


@edit_app.command(help="Rename a course table column header (gpa_label, ...).")
def label(
    class_type: ClassTypeOption,
    field: str,
    text: str,
    *,
    template: TemplateOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    _apply_edit(
        session,
        template,
        lambda doc: editor.update_column_label(doc, class_type, field, text),
    )


@edit_app.command(name="format", help="Switch a course table between grid and list layouts.")
def table_format(
    class_type: ClassTypeOption,
    layout: str,
    *,
    template: TemplateOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    _apply_edit(
        session, template, lambda doc: editor.update_table_format(doc, class_type, layout)
    )


@edit_app.command(help="Toggle one combined table for InClass and OutClass terms.")
def unified(
    *,
    template: TemplateOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    _apply_edit(session, template, editor.toggle_unified_tables)


@edit_app.command(name="summary-visibility", help="Show or hide a summary section.")
def summary_visibility(
    section_id: str,
    *,
    template: TemplateOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    _apply_edit(
        session,
        template,
        lambda doc: editor.toggle_summary_section_visibility(doc, section_id),
    )


@edit_app.command(name="summary-field", help="Toggle a summary field (show_cgpa, ...).")
def summary_field(
    section_id: str,
    field: str,
    *,
    template: TemplateOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    _apply_edit(
        session, template, lambda doc: editor.toggle_summary_field(doc, section_id, field)
    )


@edit_app.command(name="summary-label", help="Rename a summary field (cgpa_label, ...).")
def summary_label(
    section_id: str,
    field: str,
    text: str,
    *,
    template: TemplateOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    _apply_edit(
        session,
        template,
        lambda doc: editor.update_summary_field_label(doc, section_id, field, text),
    )


@edit_app.command(help="Embed an image file as the header logo.")
def logo(
    image: Path | None = None,
    *,
    clear: typ.Annotated[bool, Parameter(help="Remove the current logo")] = False,
    template: TemplateOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    value = None if clear or image is None else image_data_url(image)
    _apply_edit(session, template, lambda doc: editor.update_header(doc, "logo", value))


@edit_app.command(help="Embed an image file as the footer signature.")
def signature(
    image: Path | None = None,
    *,
    clear: typ.Annotated[bool, Parameter(help="Remove the current signature")] = False,
    template: TemplateOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    value = None if clear or image is None else image_data_url(image)
    _apply_edit(
        session, template, lambda doc: editor.update_footer(doc, "signature", value)
    )


ProgramOption = typ.Annotated[str, Parameter(help="Program name")]
CohortOption = typ.Annotated[str, Parameter(help="Cohort name")]
ActorOption = typ.Annotated[
    str | None, Parameter(help="Name recorded in the history; defaults to settings")
]
OutputDirOption = typ.Annotated[Path, Parameter(help="Folder for generated exports")]


@workflow_app.command(help="Simulate the TGPA calculation for one term.")
def calculate(
    *,
    program: ProgramOption,
    cohort: CohortOption,
    term: typ.Annotated[str, Parameter(help="Term identifier")],
    actor: ActorOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    key = _cohort_key(session, program, cohort)
    result = _simulator(session).calculate_term_gpa(
        key, term, actor or session.settings.simulation.actor
    )
    print(f"{term}: TGPA {result.value:.2f}")


@workflow_app.command(help="Generate the term report export for a calculated term.")
def report(
    *,
    program: ProgramOption,
    cohort: CohortOption,
    term: typ.Annotated[str, Parameter(help="Term identifier")],
    output_dir: OutputDirOption = Path(),
    actor: ActorOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    key = _cohort_key(session, program, cohort)
    artifact = _simulator(session).generate_term_report(
        key, term, actor or session.settings.simulation.actor
    )
    print(f"wrote {_format_path(_write_artifact(artifact, output_dir))}")


@workflow_app.command(help="Generate the final transcript export from the aggregate GPA.")
def final(
    *,
    program: ProgramOption,
    cohort: CohortOption,
    output_dir: OutputDirOption = Path(),
    actor: ActorOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    key = _cohort_key(session, program, cohort)
    artifact = _simulator(session).generate_final_document(
        key, actor or session.settings.simulation.actor
    )
    print(f"wrote {_format_path(_write_artifact(artifact, output_dir))}")


@workflow_app.command(help="Show calculation and generation status for a cohort.")
def status(
    *,
    program: ProgramOption,
    cohort: CohortOption,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    key = _cohort_key(session, program, cohort)
    snapshot = _simulator(session).snapshot(key)
    for term_state in snapshot.terms:
        value = f"{term_state.value:.2f}" if term_state.value is not None else "-"
        report_state = "generated" if term_state.report_generated else "pending"
        print(f"{term_state.term_id}: TGPA {value}  report {report_state}")
    if snapshot.aggregate is not None:
        print(f"CGPA {snapshot.aggregate:.2f} through {snapshot.through_term}")
    else:
        print("CGPA -")
    print(f"final document {'generated' if snapshot.final_generated else 'pending'}")


@workflow_app.command(help="Print the workflow history, optionally for one cohort.")
def history(
    *,
    program: typ.Annotated[str | None, Parameter(help="Program name")] = None,
    cohort: typ.Annotated[str | None, Parameter(help="Cohort name")] = None,
    config: ConfigOption = DEFAULT_CONFIG,
    storage: StorageOption = None,
    verbose: VerboseOption = False,
) -> None:
    session = _open_session(config, storage, verbose=verbose)
    if (program is None) != (cohort is None):
        msg = "Pass both --program and --cohort, or neither."
        raise ValueError(msg)
    key = CohortKey(program, cohort) if program and cohort else None
    records = _simulator(session).history(key)
    if not records:
        print("no history recorded")
        return
    for record in records:
        details = f"  {record.details}" if record.details else ""
        print(
            f"{record.timestamp.isoformat(timespec='seconds')}  "
            f"{record.program} / {record.cohort}  {record.action}  "
            f"{record.actor}{details}"
        )


def main(tokens: list[str] | None = None) -> None:
    """Invoke the Cyclopts application that powers the `transcripts` console command.

    Parameters
    ----------
    tokens : list of str, optional
        Arguments to parse instead of ``sys.argv``.

    Returns
    -------
    None
        Precondition failures (unknown templates, missing mappings, invalid
        settings or edits) are reported on stderr and exit with status 1.

    Examples
    --------
    >>> main(["list"])  # doctest: +SKIP
    """
    try:
        app(tokens)
    except (LookupError, ValueError, WorkflowStateError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
