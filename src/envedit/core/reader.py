"""
Read-only access to a .env file on disk.
"""

import copy
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from .lexer import DEFAULT_DIALECT, Entry, Parser, get_parser


logger = logging.getLogger(__name__)


def detect_newline(content: str) -> str:
    """Return the line terminator used by content, defaulting to ``\\n``."""
    if "\r\n" in content:
        return "\r\n"
    if "\r" in content and "\n" not in content:
        return "\r"
    return "\n"


class Reader:
    """
    Loads a file and exposes its raw text, entries and key index.

    A missing file reads as empty content.
    """

    def __init__(self, parser: Optional[Parser] = None):
        self.parser = parser or get_parser(DEFAULT_DIALECT)
        self.file_path: Optional[Path] = None
        self._content = ""
        self._entries: List[Entry] = []
        self._keys: Dict[str, dict] = {}

    def load(self, file_path: Union[str, Path, None]) -> "Reader":
        """
        Load a file, or reset to empty content when file_path is None.

        Args:
            file_path: Path of the .env file

        Returns:
            The reader
        """
        self.file_path = Path(file_path) if file_path is not None else None
        content = ""

        if self.file_path is not None and self.file_path.is_file():
            with open(self.file_path, 'r', encoding='utf-8', newline='') as f:
                content = f.read()
            logger.debug("Loaded %s (%d bytes)", self.file_path, len(content))
        elif self.file_path is not None:
            logger.debug("%s does not exist, reading as empty", self.file_path)

        self._content = content
        self._entries, self._keys = self.parser.parse(content)
        return self

    def exists(self) -> bool:
        return self.file_path is not None and self.file_path.is_file()

    def content(self) -> str:
        """Raw text of the loaded file."""
        return self._content

    def newline(self) -> str:
        return detect_newline(self._content)

    def entries(self) -> List[Entry]:
        """Parsed entries (copies, safe to mutate)."""
        return copy.deepcopy(self._entries)

    def keys(self) -> Dict[str, dict]:
        """Key index of the loaded file."""
        return copy.deepcopy(self._keys)
