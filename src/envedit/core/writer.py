"""
Mutable entry buffer and text regeneration.

The buffer is an ordered list of entries; its order is the rendering order.
Entries that still carry their original ``raw`` text are written back
verbatim, edited or appended entries go through the formatter.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from .errors import InvalidEntryError, WritePermissionError
from .formatter import format_entry
from .lexer import LINE_BREAK, Entry, EntryType, get_keys


logger = logging.getLogger(__name__)


class Writer:
    """
    Owns the editable buffer.

    Every mutator returns the writer so calls can be chained.
    """

    def __init__(self, newline: str = "\n"):
        self.newline = newline
        self._buffer: List[Entry] = []
        self._index: Dict[str, dict] = {}

    def set_buffer(self, entries: Iterable[Entry] = ()) -> "Writer":
        """Replace the whole buffer."""
        self._buffer = list(entries)
        self._reindex()
        return self

    def get_buffer(self, as_text: bool = False) -> Union[List[Entry], str]:
        """
        Return the buffer.

        Args:
            as_text: Render the buffer as file text instead of entries

        Returns:
            List of Entry copies, or the text that save_to would write
        """
        if as_text:
            return self.build_text()
        return copy.deepcopy(self._buffer)

    def build_text(self) -> str:
        """Render the buffer, one line per entry, with a trailing newline."""
        if not self._buffer:
            return ""
        lines = [
            entry.raw if entry.raw is not None else format_entry(entry)
            for entry in self._buffer
        ]
        return self.newline.join(lines) + self.newline

    def keys(self) -> Dict[str, dict]:
        """Key index of the buffer, last occurrence wins."""
        return copy.deepcopy(self._index)

    def has_setter(self, key: str) -> bool:
        return key in self._index

    def append_empty(self) -> "Writer":
        return self._append(Entry(type=EntryType.EMPTY))

    def append_comment(self, comment: str) -> "Writer":
        return self._append(Entry(type=EntryType.COMMENT, comment=str(comment)))

    def append_setter(
        self,
        key: str,
        value: Optional[str] = None,
        comment: Optional[str] = None,
        export: bool = False,
    ) -> "Writer":
        """Append a setter without checking for an existing key."""
        return self._append(Entry(
            type=EntryType.SETTER,
            export=bool(export),
            key=str(key),
            value=_text(value),
            comment=_text(comment),
        ))

    def update_setter(
        self,
        key: str,
        value: Optional[str] = None,
        comment: Optional[str] = None,
        export: bool = False,
    ) -> "Writer":
        """Overwrite value, comment and export of the setter for key."""
        return self._update(key, value=_text(value), comment=_text(comment), export=bool(export))

    def update_setter_comment(self, key: str, comment: Optional[str] = None) -> "Writer":
        return self._update(key, comment=_text(comment))

    def update_setter_export(self, key: str, state: bool) -> "Writer":
        return self._update(key, export=bool(state))

    def delete_setter(self, key: str) -> "Writer":
        """Remove the setter for key; absent keys are ignored."""
        self._buffer = [
            entry for entry in self._buffer
            if entry.type != EntryType.SETTER or entry.key != key
        ]
        self._reindex()
        return self

    def save_to(self, file_path: Union[str, Path]) -> "Writer":
        """
        Write the buffer to a file, replacing its contents.

        Raises:
            WritePermissionError: If the file, or its directory when the file
                does not exist yet, is not writable
        """
        path = Path(file_path)
        self._ensure_writable(path)

        with open(path, 'w', encoding='utf-8', newline='') as f:
            f.write(self.build_text())

        logger.debug("Wrote %d entries to %s", len(self._buffer), path)
        return self

    @staticmethod
    def _ensure_writable(path: Path):
        if path.is_file():
            writable = os.access(path, os.W_OK)
        else:
            writable = path.parent.is_dir() and os.access(path.parent, os.W_OK)

        if not writable:
            raise WritePermissionError(f"Unable to write to the file at {path}.")

    def _append(self, entry: Entry) -> "Writer":
        _check_single_line(key=entry.key, comment=entry.comment)
        self._buffer.append(entry)
        self._reindex()
        return self

    def _update(self, key: str, **changes) -> "Writer":
        _check_single_line(comment=changes.get("comment", ""))
        for entry in self._buffer:
            if entry.type == EntryType.SETTER and entry.key == key:
                for name, value in changes.items():
                    setattr(entry, name, value)
                entry.raw = None
        self._reindex()
        return self

    def _reindex(self):
        self._index = get_keys(self._buffer)


def _text(value: Optional[str]) -> str:
    return "" if value is None else str(value)


def _check_single_line(**fields):
    """Keys and comments cannot be quoted, so a line break would split the entry."""
    for name, text in fields.items():
        if LINE_BREAK.search(text):
            raise InvalidEntryError(f"The {name} {text!r} must not contain line breaks.")
