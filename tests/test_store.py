"""Unit tests for the template store, preferences, and storage backends.

These tests exercise :class:`TemplateStore` write-through persistence, the
cohort exclusivity rule applied by ``patch_meta``, lookups by program/cohort/
type, and recovery from unreadable saved data.

Usage
-----
Run ``pytest tests/test_store.py -v``. Only pytest's built-in ``tmp_path`` and
``caplog`` fixtures are required.
"""

from __future__ import annotations

import datetime as dt
import itertools
import json
import logging
import typing as typ

import pytest

from transcript_designer._constants import TEMPLATES_KEY
from transcript_designer.document import default_document, encode_template
from transcript_designer.storage import JsonFileStorage, MemoryStorage
from transcript_designer.store import Preferences, TemplateStore

if typ.TYPE_CHECKING:
    from pathlib import Path

START = dt.datetime(2025, 1, 1, 9, 0, tzinfo=dt.UTC)


def _store(storage: MemoryStorage | None = None) -> TemplateStore:
    """Return a store with a ticking clock and predictable ids."""
    ticks = itertools.count()
    ids = itertools.count(1)
    return TemplateStore(
        storage or MemoryStorage(),
        clock=lambda: START + dt.timedelta(minutes=next(ticks)),
        id_factory=lambda: f"tpl-{next(ids)}",
    )


def test_create_persists_template_list() -> None:
    """Creating a template writes the full list through to storage."""
    storage = MemoryStorage()
    store = _store(storage)
    template = store.create("Fall Design", default_document())

    assert template.types == ("transcript",), "New templates map to transcripts"
    assert template.programs == () and template.cohorts == ()
    reloaded = TemplateStore(storage)
    assert [t.id for t in reloaded.list()] == ["tpl-1"], (
        "Expected the created template to be readable from storage"
    )
    assert reloaded.get("tpl-1") == template, (
        "Reloaded template should equal the created one"
    )


def test_update_refreshes_last_modified() -> None:
    """Updating replaces name and data and stamps a newer timestamp."""
    store = _store()
    template = store.create("Draft", default_document())
    updated = store.update(template.id, "Final", default_document())

    assert updated is not None
    assert updated.name == "Final"
    assert updated.last_modified > template.last_modified, (
        "Expected update to refresh last_modified"
    )


def test_update_unknown_id_is_ignored() -> None:
    """Unknown ids neither raise nor write."""
    storage = MemoryStorage()
    store = _store(storage)
    assert store.update("missing", "Name", default_document()) is None
    assert storage.load(TEMPLATES_KEY) is None, "No write expected for unknown id"


def test_patch_meta_moves_cohort_between_templates() -> None:
    """A cohort claimed by a second template is removed from the first."""
    store = _store()
    first = store.create("Fall", default_document())
    second = store.create("Spring", default_document())
    store.patch_meta(first.id, cohorts=["Class of 2024", "Class of 2025"])
    store.patch_meta(second.id, cohorts=["Class of 2025", "Class of 2026"])

    first_after = store.get(first.id)
    second_after = store.get(second.id)
    assert first_after is not None and second_after is not None
    assert first_after.cohorts == ("Class of 2024",), (
        f"Expected Class of 2025 to move away, got {first_after.cohorts!r}"
    )
    assert second_after.cohorts == ("Class of 2025", "Class of 2026")


def test_no_cohort_is_claimed_twice() -> None:
    """After any sequence of cohort patches each cohort has one owner at most."""
    store = _store()
    templates = [store.create(f"T{i}", default_document()) for i in range(3)]
    assignments = [
        (0, ["A", "B"]),
        (1, ["B", "C"]),
        (2, ["A", "C", "D"]),
        (0, ["D"]),
        (1, ["A", "B", "C"]),
    ]
    for index, cohorts in assignments:
        store.patch_meta(templates[index].id, cohorts=cohorts)

    claimed = [cohort for t in store.list() for cohort in t.cohorts]
    assert len(claimed) == len(set(claimed)), (
        f"Cohorts claimed more than once: {claimed!r}"
    )
    assert sorted(claimed) == ["A", "B", "C", "D"]


def test_patch_meta_keeps_last_modified() -> None:
    """Mapping changes are not content edits."""
    store = _store()
    template = store.create("Fall", default_document())
    patched = store.patch_meta(template.id, programs=["PGP TBM"], types=["term-report"])

    assert patched is not None
    assert patched.last_modified == template.last_modified
    assert patched.types == ("term-report",)
    assert patched.programs == ("PGP TBM",)


def test_patch_meta_rejects_unknown_fields_and_types() -> None:
    """Only mapping fields may be patched and only known types are accepted."""
    store = _store()
    template = store.create("Fall", default_document())
    with pytest.raises(TypeError, match="data"):
        store.patch_meta(template.id, data={})
    with pytest.raises(ValueError, match="brochure"):
        store.patch_meta(template.id, types=["transcript", "brochure"])


def test_find_for_requires_all_three_to_match() -> None:
    """find_for matches on program, cohort, and document type together."""
    store = _store()
    template = store.create("Fall", default_document())
    store.patch_meta(template.id, programs=["PGP TBM"], cohorts=["Class of 2025"])

    found = store.find_for("PGP TBM", "Class of 2025", "transcript")
    assert found is not None and found.id == template.id
    assert store.find_for("PGP TBM", "Class of 2025", "term-report") is None
    assert store.find_for("PGP Rise", "Class of 2025", "transcript") is None
    assert store.find_for("PGP TBM", "Class of 2026", "transcript") is None


def test_malformed_saved_list_loads_empty(caplog: pytest.LogCaptureFixture) -> None:
    """Unreadable saved data is logged and treated as an empty list."""
    storage = MemoryStorage({TEMPLATES_KEY: "{not json"})
    with caplog.at_level(logging.ERROR):
        store = TemplateStore(storage)
    assert store.list() == []
    assert "Failed to load templates" in caplog.text


def test_legacy_template_is_upgraded_on_load() -> None:
    """Templates saved before type mapping and table configs still load."""
    storage = MemoryStorage()
    legacy = encode_template(_store().create("Old", default_document()))
    del legacy["types"]
    del legacy["data"]["tableConfigs"]
    del legacy["data"]["schemaVersion"]
    legacy["data"]["summaryConfig"] = legacy["data"]["summaryConfig"]["sections"][:1]
    storage.save(TEMPLATES_KEY, json.dumps([legacy]))

    template = TemplateStore(storage).get(legacy["id"])
    assert template is not None
    assert template.types == ("transcript",)
    assert template.data.table_configs.out_class.format == "list"
    section_ids = [s.id for s in template.data.summary_config.sections]
    assert section_ids == ["inclass-default", "outclass-default", "overall-default"]


def test_preferences_round_trip() -> None:
    """Advisory preferences are stored as JSON strings."""
    prefs = Preferences(MemoryStorage())
    assert prefs.active_template_id is None
    prefs.active_template_id = "tpl-1"
    prefs.view = "editor"
    assert prefs.active_template_id == "tpl-1"
    assert prefs.view == "editor"


def test_json_file_storage_persists_keys(tmp_path: Path) -> None:
    """All keys live in one JSON object on disk."""
    path = tmp_path / "nested" / "storage.json"
    storage = JsonFileStorage(path)
    storage.save("one", '"1"')
    storage.save("two", '"2"')

    assert json.loads(path.read_text(encoding="utf-8")) == {"one": '"1"', "two": '"2"'}
    assert JsonFileStorage(path).load("two") == '"2"'


def test_json_file_storage_recovers_from_corruption(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """A corrupt storage file reads as empty and is replaced on save."""
    path = tmp_path / "storage.json"
    path.write_text("[1, 2", encoding="utf-8")
    storage = JsonFileStorage(path)
    with caplog.at_level(logging.ERROR):
        assert storage.load("anything") is None
    storage.save("key", '"value"')
    assert storage.load("key") == '"value"'
