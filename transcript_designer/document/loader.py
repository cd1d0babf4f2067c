"""Load and save transcript documents at the persistence boundary."""

from __future__ import annotations

import base64
import mimetypes
import typing as typ

from ruamel.yaml import YAML

from .codec import decode_document, decode_template, encode_document
from .migrations import upgrade_payload
from .models import DocumentFormatError

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .models import Document, Template


def document_from_payload(payload: object) -> Document:
    """Upgrade a saved document mapping and decode it."""
    if not isinstance(payload, typ.Mapping):
        msg = "Document payload must be a mapping."
        raise DocumentFormatError(msg)
    return decode_document(upgrade_payload(payload))


def template_from_payload(payload: object) -> Template:
    """Decode a saved template, upgrading its embedded document first."""
    if not isinstance(payload, typ.Mapping):
        msg = "Template payload must be a mapping."
        raise DocumentFormatError(msg)
    data = payload.get("data")
    upgraded = upgrade_payload(data if isinstance(data, typ.Mapping) else {})
    return decode_template({**payload, "data": upgraded})


def load_document(path: Path) -> Document:
    """Load a document from a YAML (or JSON) file.

    Parameters
    ----------
    path : Path
        File holding a document mapping in the saved camelCase shape.

    Returns
    -------
    Document
        The upgraded, decoded document.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    DocumentFormatError
        If the file does not hold a valid document mapping.
    YAMLError
        If the file cannot be parsed.
    """
    if not path.exists():
        msg = f"Document file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    return document_from_payload(loaded)


def dump_document(document: Document, path: Path) -> Path:
    """Write ``document`` to ``path`` as YAML and return the path."""
    yaml = _build_roundtrip_yaml()
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        yaml.dump(encode_document(document), handle)
    return path


def _build_roundtrip_yaml() -> YAML:
    yaml = YAML()
    yaml.preserve_quotes = True
    yaml.width = 120
    yaml.indent(mapping=2, sequence=4, offset=2)
    return yaml


def image_data_url(path: Path) -> str:
    """Return a base64 ``data:`` URL for an image file.

    Logos and signatures are embedded in the document as data URLs so the
    saved template stays self-contained.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    ValueError
        If the file type is not recognised as an image.
    """
    if not path.exists():
        msg = f"Image file '{path}' not found."
        raise FileNotFoundError(msg)
    mime_type, _encoding = mimetypes.guess_type(path.name)
    if not mime_type or not mime_type.startswith("image/"):
        msg = f"'{path.name}' is not a recognised image file."
        raise ValueError(msg)
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


__all__ = [
    "document_from_payload",
    "dump_document",
    "image_data_url",
    "load_document",
    "template_from_payload",
]
