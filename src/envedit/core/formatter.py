"""
Render entries back into .env lines.

Quoting policy: values are written bare unless they contain whitespace or one
of ``# " ' \\``. Quoted values use double quotes with ``\\`` and ``"``
escaped by a backslash and line breaks written as ``\\n`` and ``\\r``.
Every dialect parser reads this output back to the same entry.
"""

import re

from .lexer import Entry, EntryType


_NEEDS_QUOTES = re.compile(r"[\s#\"'\\]")


def quote_value(value: str) -> str:
    """Quote a value if the bare form would not survive re-parsing."""
    if not _NEEDS_QUOTES.search(value):
        return value
    escaped = (
        value.replace('\\', '\\\\')
        .replace('"', '\\"')
        .replace('\n', '\\n')
        .replace('\r', '\\r')
    )
    return f'"{escaped}"'


def format_setter(key: str, value: str = "", comment: str = "", export: bool = False) -> str:
    """Render a ``[export ]KEY=VALUE[ # comment]`` line."""
    export_prefix = "export " if export else ""
    line = f"{export_prefix}{key}={quote_value(value or '')}"
    if comment:
        line += f" # {comment}"
    return line


def format_comment(comment: str = "") -> str:
    """Render a comment line; an empty comment renders a blank line."""
    if not comment:
        return ""
    return f"# {comment}"


def format_entry(entry: Entry) -> str:
    """Render one entry, ignoring any raw text it carries."""
    if entry.type == EntryType.SETTER:
        return format_setter(entry.key, entry.value, entry.comment, entry.export)
    if entry.type == EntryType.COMMENT:
        return format_comment(entry.comment)
    return ""
