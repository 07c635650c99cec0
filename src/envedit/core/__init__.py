"""
envedit core modules.

Includes:
- lexer: Entry model and dialect parsers
- formatter: Rendering of setter and comment lines
- reader: Read-only access to the file on disk
- writer: Mutable entry buffer and file output
- editor: Public editing API
- restore: Restoring a file from a backup
- config: Path resolution and settings
- errors: Exception types
"""

from . import lexer
from . import formatter
from . import reader
from . import writer
from . import editor
from . import restore
from . import config
from . import errors

__all__ = [
    "lexer",
    "formatter",
    "reader",
    "writer",
    "editor",
    "restore",
    "config",
    "errors",
]
