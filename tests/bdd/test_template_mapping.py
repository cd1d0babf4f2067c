"""Behaviour tests for template mapping and workflow gating.

The first scenario checks that a cohort is claimed by at most one template:
mapping it onto a second template strips it from the first. The second
scenario requests a term report for a cohort whose only template serves the
``transcript`` type and verifies the request is refused without touching the
workflow snapshot or the history.

Usage
-----
Run ``pytest tests/bdd/test_template_mapping.py -v``. The scenarios live in
``features/template_mapping.feature``.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from transcript_designer.document import default_document
from transcript_designer.storage import MemoryStorage
from transcript_designer.store import TemplateStore
from transcript_designer.workflow import (
    ACTION_TERM_REPORT,
    CohortKey,
    CsvDocumentGenerator,
    TemplateMappingError,
    WorkflowSimulator,
)

if typ.TYPE_CHECKING:
    from transcript_designer.document import Template

FEATURE_FILE = Path(__file__).resolve().parents[2] / "features" / "template_mapping.feature"
scenarios(FEATURE_FILE)

ScenarioState = dict[str, typ.Any]


class ConstantScoring:
    def score(self, key: CohortKey, term_id: str) -> float:
        return 3.5


def _names(text: str) -> list[str]:
    return [part.strip() for part in text.split(",") if part.strip()]


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Create a store and simulator over shared in-memory storage."""
    storage = MemoryStorage()
    store = TemplateStore(storage)
    simulator = WorkflowSimulator(
        store,
        storage,
        ConstantScoring(),
        CsvDocumentGenerator(delay=0),
        terms=["Term I", "Term II", "Term III"],
    )
    return {"storage": storage, "store": store, "simulator": simulator}


def _template(state: ScenarioState, name: str) -> Template:
    store: TemplateStore = state["store"]
    template = next((t for t in store.list() if t.name == name), None)
    assert template is not None, f"No template named {name!r}"
    return template


@given(parsers.parse('a template "{name}" mapped to cohorts "{cohorts}"'))
def given_mapped_template(scenario_state: ScenarioState, name: str, cohorts: str) -> None:
    store: TemplateStore = scenario_state["store"]
    template = store.create(name, default_document())
    store.patch_meta(template.id, cohorts=_names(cohorts))


@given(parsers.parse('an unmapped template "{name}"'))
def given_template(scenario_state: ScenarioState, name: str) -> None:
    scenario_state["store"].create(name, default_document())


@given(parsers.parse('"{name}" serves program "{program}"'))
def given_program(scenario_state: ScenarioState, name: str, program: str) -> None:
    template = _template(scenario_state, name)
    scenario_state["store"].patch_meta(template.id, programs=[program])


@given(
    parsers.parse('the TGPA for "{term}" is calculated for "{program}" and "{cohort}"')
)
def given_calculated(
    scenario_state: ScenarioState, term: str, program: str, cohort: str
) -> None:
    simulator: WorkflowSimulator = scenario_state["simulator"]
    key = CohortKey(program, cohort)
    simulator.calculate_term_gpa(key, term, "Admin")
    scenario_state["snapshot_before"] = simulator.snapshot(key)
    scenario_state["stored_before"] = scenario_state["storage"].load(key.storage_key())
    scenario_state["history_before"] = simulator.history()


@when(parsers.parse('I map "{name}" to cohorts "{cohorts}"'))
def when_map(scenario_state: ScenarioState, name: str, cohorts: str) -> None:
    template = _template(scenario_state, name)
    scenario_state["store"].patch_meta(template.id, cohorts=_names(cohorts))


@when(parsers.parse('I request the "{term}" report for "{program}" and "{cohort}"'))
def when_request_report(
    scenario_state: ScenarioState, term: str, program: str, cohort: str
) -> None:
    simulator: WorkflowSimulator = scenario_state["simulator"]
    with pytest.raises(TemplateMappingError) as excinfo:
        simulator.generate_term_report(CohortKey(program, cohort), term, "Admin")
    scenario_state["error"] = excinfo.value


@then(parsers.parse('"{name}" has no cohorts'))
def then_no_cohorts(scenario_state: ScenarioState, name: str) -> None:
    template = _template(scenario_state, name)
    assert template.cohorts == (), f"Expected no cohorts, got {template.cohorts!r}"


@then(parsers.parse('"{name}" has cohorts "{cohorts}"'))
def then_has_cohorts(scenario_state: ScenarioState, name: str, cohorts: str) -> None:
    template = _template(scenario_state, name)
    assert list(template.cohorts) == _names(cohorts)


@then(parsers.parse('the request is refused with a message naming "{doc_type}"'))
def then_refused(scenario_state: ScenarioState, doc_type: str) -> None:
    assert doc_type in str(scenario_state["error"])


@then(parsers.parse('the workflow state for "{program}" and "{cohort}" is unchanged'))
def then_state_unchanged(scenario_state: ScenarioState, program: str, cohort: str) -> None:
    key = CohortKey(program, cohort)
    simulator: WorkflowSimulator = scenario_state["simulator"]
    assert simulator.snapshot(key) == scenario_state["snapshot_before"]
    assert scenario_state["storage"].load(key.storage_key()) == (
        scenario_state["stored_before"]
    )
    term = simulator.snapshot(key).term("Term I")
    assert term is not None and term.report_generated is False


@then("no report history is recorded")
def then_no_history(scenario_state: ScenarioState) -> None:
    simulator: WorkflowSimulator = scenario_state["simulator"]
    history = simulator.history()
    assert history == scenario_state["history_before"]
    assert all(record.action != ACTION_TERM_REPORT for record in history)
