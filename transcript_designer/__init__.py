"""Design, preview, and map academic transcript templates.

This package exposes the CLI entry points used by the ``transcripts`` console
script to manage saved templates, edit their documents, render HTML previews,
and simulate cohort GPA and document-generation workflows.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from transcript_designer import main
>>> main(["list"])  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
