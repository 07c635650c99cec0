"""
envedit - Structured editor for .env files

Parses a .env file into typed entries, edits keys in place and writes the
file back without disturbing the lines you did not touch.
"""

__version__ = "0.1.0"

from .core import lexer, formatter, reader, writer, editor
from .core.config import EditorConfig
from .core.editor import BufferState, Editor
from .core.errors import (
    EditorError,
    InvalidEntryError,
    KeyNotFoundError,
    NoBackupAvailableError,
    NotFoundError,
    UnknownDialectError,
    WritePermissionError,
)

__all__ = [
    "lexer",
    "formatter",
    "reader",
    "writer",
    "editor",
    "Editor",
    "EditorConfig",
    "BufferState",
    "EditorError",
    "InvalidEntryError",
    "KeyNotFoundError",
    "NotFoundError",
    "NoBackupAvailableError",
    "UnknownDialectError",
    "WritePermissionError",
]
