"""xjstbuild Translator - Points compiler errors at the original template files."""

from __future__ import annotations

import os
import re

from xjstbuild.compiler import PositionedCompileError, TemplateSyntaxError
from xjstbuild.source_map import SourceMap, render_context

# Compiler-internal position suffix, e.g. "Unexpected token at: 12:4"
_POSITION_SUFFIX = re.compile(r"\sat:\s\d+:\d+")


def clean_message(message: str) -> str:
    """First line of a compiler message without its " at: L:C" suffix."""
    first_line = message.split("\n", 1)[0]
    return _POSITION_SUFFIX.sub("", first_line, count=1)


def relative_path(filename: str, root: str) -> str:
    rel = os.path.relpath(filename, root)
    if not rel.startswith("."):
        rel = "./" + rel
    return rel


def translate_error(error: Exception, source_map: SourceMap, root: str) -> Exception:
    """Map a positioned compiler error onto its original file.

    Returns a new TemplateSyntaxError when the error's line resolves through
    `source_map`; any other error, including positions inside the appended
    scaffolding, is returned as the very same object.
    """
    if not isinstance(error, PositionedCompileError):
        return error

    original = source_map.get_original(error.line, error.column)
    if original is None:
        return error

    rel_path = relative_path(original.filename, root)
    context = render_context(original.source, original.line, original.column)
    return TemplateSyntaxError(
        f"{clean_message(error.message)} at {rel_path}\n{context}",
        filename=original.filename,
        line=original.line,
        column=original.column,
    )
