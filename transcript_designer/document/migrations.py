"""Versioned upgrade chain for saved document payloads.

Older saved documents predate per-class table configuration and some of the
summary sections. :func:`upgrade_payload` brings any saved mapping up to
:data:`CURRENT_SCHEMA_VERSION` at the load boundary. Every step runs on every
load in version order, whatever ``schemaVersion`` the payload records, so a
hand-edited file stamped as current still gains missing table configs and
summary sections.

Every step is a pure function of a mapping and is idempotent on its own, so
steps can be tested independently and re-running the chain never changes an
already upgraded payload.

Example
-------
>>> legacy = {"summaryConfig": {"version": 1, "sections": []}}
>>> upgraded = upgrade_payload(legacy)
>>> sorted(upgraded["tableConfigs"])
['inClass', 'outClass']
>>> [s["id"] for s in upgraded["summaryConfig"]["sections"]]
['inclass-default', 'outclass-default', 'overall-default']
>>> upgrade_payload(upgraded) == upgraded
True
"""

from __future__ import annotations

import copy
import dataclasses as dc
import logging
import typing as typ

from transcript_designer._constants import DOCUMENT_SCHEMA_VERSION

from .defaults import DEFAULT_SUMMARY_SECTIONS, DEFAULT_TABLE_CONFIGS
from .helpers import _encode_flat

logger = logging.getLogger(__name__)

Payload = dict[str, typ.Any]

CURRENT_SCHEMA_VERSION = DOCUMENT_SCHEMA_VERSION


@dc.dataclass(frozen=True, slots=True)
class Migration:
    """A single upgrade step tagged with the schema version it produces."""

    version: int
    name: str
    apply: typ.Callable[[Payload], Payload]


def backfill_table_configs(payload: Payload) -> Payload:
    """Substitute the default table configs when ``tableConfigs`` is absent."""
    if payload.get("tableConfigs"):
        return payload
    return {
        **payload,
        "tableConfigs": {
            "inClass": _encode_flat(DEFAULT_TABLE_CONFIGS.in_class),
            "outClass": _encode_flat(DEFAULT_TABLE_CONFIGS.out_class),
        },
    }


def wrap_summary_sections(payload: Payload) -> Payload:
    """Normalize ``summaryConfig`` into ``{"version": ..., "sections": [...]}``."""
    summary = payload.get("summaryConfig")
    match summary:
        case {"sections": list()}:
            return payload
        case list() as sections:
            wrapped = {"version": 1, "sections": list(sections)}
        case _:
            wrapped = {
                "version": 1,
                "sections": [_encode_flat(s) for s in DEFAULT_SUMMARY_SECTIONS],
            }
    return {**payload, "summaryConfig": wrapped}


def backfill_summary_sections(payload: Payload) -> Payload:
    """Append canonical summary sections missing from the payload.

    Existing sections keep their position and customizations; matching is by
    section ``id``, and no section is ever duplicated.
    """
    summary = payload.get("summaryConfig")
    if not isinstance(summary, dict) or not isinstance(summary.get("sections"), list):
        payload = wrap_summary_sections(payload)
        summary = payload["summaryConfig"]
    sections: list[typ.Any] = summary["sections"]
    present = {
        section.get("id") for section in sections if isinstance(section, dict)
    }
    missing = [
        _encode_flat(section)
        for section in DEFAULT_SUMMARY_SECTIONS
        if section.id not in present
    ]
    if not missing:
        return payload
    return {**payload, "summaryConfig": {**summary, "sections": [*sections, *missing]}}


MIGRATIONS: tuple[Migration, ...] = (
    Migration(1, "backfill table configs", backfill_table_configs),
    Migration(2, "wrap summary sections", wrap_summary_sections),
    Migration(3, "backfill summary sections", backfill_summary_sections),
)


def payload_version(payload: typ.Mapping[str, typ.Any]) -> int:
    """Return the schema version recorded in ``payload`` (``0`` when absent)."""
    try:
        return int(payload.get("schemaVersion") or 0)
    except (TypeError, ValueError):
        return 0


def upgrade_payload(payload: typ.Mapping[str, typ.Any]) -> Payload:
    """Run the migration chain and stamp the current schema version.

    Parameters
    ----------
    payload : Mapping
        A saved document mapping. It is deep-copied, never modified.

    Returns
    -------
    dict
        The upgraded mapping with ``schemaVersion`` set to
        :data:`CURRENT_SCHEMA_VERSION`.
    """
    upgraded: Payload = copy.deepcopy(dict(payload))
    version = payload_version(upgraded)
    for migration in MIGRATIONS:
        applied = migration.apply(upgraded)
        if applied != upgraded:
            logger.debug(
                "Applied document migration %d (%s)", migration.version, migration.name
            )
        upgraded = applied
    upgraded["schemaVersion"] = max(version, CURRENT_SCHEMA_VERSION)
    return upgraded


__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "MIGRATIONS",
    "Migration",
    "backfill_summary_sections",
    "backfill_table_configs",
    "payload_version",
    "upgrade_payload",
    "wrap_summary_sections",
]
