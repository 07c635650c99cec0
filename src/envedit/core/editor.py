"""
Editor for .env files.

Ties the reader (what is on disk) and the writer (what will be written)
together behind one API:

    editor = Editor(".env")
    editor.set_key("APP_DEBUG", "false", comment="set by deploy")
    editor.delete_key("LEGACY_TOKEN")
    editor.save()

Lookups (get_keys, get_key, get_value, key_exists) reflect the buffer, so
unsaved edits are visible. get_content and get_entries reflect the file.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .config import EditorConfig
from .errors import EditorError, KeyNotFoundError
from .lexer import Entry, get_parser
from .reader import Reader
from .restore import BackupRestorer
from .writer import Writer


logger = logging.getLogger(__name__)


class BufferState(Enum):
    """Lifecycle of the editor buffer."""
    UNLOADED = "unloaded"
    CLEAN = "clean"
    DIRTY = "dirty"


class Editor:
    """
    Structured editor for a single .env file.

    Mutators return the editor so calls can be chained.
    """

    def __init__(
        self,
        file_path: Union[str, Path, None] = None,
        config: Optional[EditorConfig] = None,
        restorer: Optional[BackupRestorer] = None,
    ):
        """
        Create an editor, loading file_path when given.

        Args:
            file_path: .env file to load right away
            config: Path resolution and dialect settings
            restorer: Collaborator used by restore(); defaults to a
                BackupRestorer on the configured backup directory
        """
        self.config = config or EditorConfig()
        self.restorer = restorer or BackupRestorer(self.config.resolve_backup_dir())
        self.reader = Reader(get_parser(self.config.dialect))
        self.writer = Writer()

        self.file_path: Optional[Path] = None
        self.state = BufferState.UNLOADED

        if file_path is not None:
            self.load(file_path)

    def load(
        self,
        file_path: Union[str, Path, None] = None,
        restore_if_not_found: bool = False,
        restore_path: Union[str, Path, None] = None,
    ) -> "Editor":
        """
        Load a file for editing.

        Args:
            file_path: File to load; defaults to the configured .env file
            restore_if_not_found: Restore the file from a backup if it is missing
            restore_path: Backup file to restore from

        Returns:
            The editor. A missing file gives an empty buffer.
        """
        self._init()

        self.file_path = self.config.resolve_path(file_path)
        self.reader.load(self.file_path)

        if self.reader.exists():
            self._build_buffer()
            return self

        if restore_if_not_found:
            return self.restore(restore_path)

        self.state = BufferState.CLEAN
        return self

    # Reading

    def get_content(self) -> str:
        """Raw text of the file as last loaded or saved."""
        return self.reader.content()

    def get_entries(self) -> List[Entry]:
        """Entries parsed from the file."""
        return self.reader.entries()

    def get_keys(self, keys: Optional[Iterable[str]] = None) -> Dict[str, dict]:
        """
        Return all keys, or only those of the given keys that exist.

        Returns:
            Dictionary of key -> {"line", "export", "value", "comment"}
        """
        all_keys = self.writer.keys()
        if not keys:
            return all_keys

        wanted = set(keys)
        return {key: info for key, info in all_keys.items() if key in wanted}

    def get_key(self, key: str) -> dict:
        """
        Return the setter fields for key.

        Raises:
            KeyNotFoundError: If the key is not set
        """
        all_keys = self.get_keys([key])
        if key in all_keys:
            return all_keys[key]

        raise KeyNotFoundError(f"Requested key '{key}' not found in your environment file.")

    def get_value(self, key: str) -> str:
        return self.get_key(key)['value']

    def key_exists(self, key: str) -> bool:
        return self.writer.has_setter(key)

    # Writing

    def has_changed(self) -> bool:
        """True when the buffer holds edits not yet saved."""
        return self.state == BufferState.DIRTY

    def get_buffer(self, as_text: bool = False) -> Union[List[Entry], str]:
        return self.writer.get_buffer(as_text)

    def add_empty(self) -> "Editor":
        self.writer.append_empty()
        return self._changed()

    def add_comment(self, comment: str) -> "Editor":
        self.writer.append_comment(comment)
        return self._changed()

    def set_keys(self, data: Union[Mapping[str, str], Iterable[Mapping]]) -> "Editor":
        """
        Set many keys.

        Args:
            data: Either a mapping of key -> value, or an iterable of dicts
                with "key" and optional "value", "comment", "export". Items that
                are not mappings or have no "key" are skipped.

        A key already in the buffer is updated in place; comment and export
        left as None keep their previous values. New keys are appended.
        """
        if isinstance(data, Mapping):
            data = [{'key': key, 'value': value} for key, value in data.items()]

        for setter in data:
            if not isinstance(setter, Mapping) or 'key' not in setter:
                continue

            key = str(setter['key'])
            value = setter.get('value')
            comment = setter.get('comment')
            export = setter.get('export')

            if not self.writer.has_setter(key):
                self.writer.append_setter(key, value, comment, bool(export))
            else:
                old_info = self.writer.keys()[key]
                comment = old_info['comment'] if comment is None else comment
                export = old_info['export'] if export is None else export
                self.writer.update_setter(key, value, comment, export)

            self._changed()

        return self

    def set_key(
        self,
        key: str,
        value: Optional[str] = None,
        comment: Optional[str] = None,
        export: Optional[bool] = None,
    ) -> "Editor":
        """
        Set one key.

        Args:
            key: Key name
            value: New value; None writes an empty value
            comment: Inline comment; None keeps the current one
            export: Lead the line with "export "; None keeps the current state
        """
        return self.set_keys([{'key': key, 'value': value, 'comment': comment, 'export': export}])

    def set_setter_comment(self, key: str, comment: Optional[str] = None) -> "Editor":
        if not self.writer.has_setter(key):
            return self
        self.writer.update_setter_comment(key, comment)
        return self._changed()

    def clear_setter_comment(self, key: str) -> "Editor":
        return self.set_setter_comment(key, None)

    def set_export_setter(self, key: str, state: bool = True) -> "Editor":
        if not self.writer.has_setter(key):
            return self
        self.writer.update_setter_export(key, state)
        return self._changed()

    def delete_keys(self, keys: Iterable[str] = ()) -> "Editor":
        for key in keys:
            if self.writer.has_setter(key):
                self.writer.delete_setter(key)
                self._changed()
        return self

    def delete_key(self, key: str) -> "Editor":
        return self.delete_keys([key])

    def save(self, rebuild_buffer: bool = True) -> "Editor":
        """
        Write the buffer to the loaded file.

        Args:
            rebuild_buffer: Rebuild the buffer from the written file so it
                matches what is on disk

        Raises:
            EditorError: If no file has been loaded
            WritePermissionError: If the file cannot be written
        """
        if self.file_path is None:
            raise EditorError("No file loaded; call load() before save().")

        self.writer.save_to(self.file_path)
        self.reader.load(self.file_path)
        logger.debug("Saved %s", self.file_path)

        if rebuild_buffer and self.has_changed():
            self._build_buffer()

        return self

    def restore(self, restore_path: Union[str, Path, None] = None) -> "Editor":
        """
        Restore the loaded file from a backup and reload it.

        Raises:
            NoBackupAvailableError: If the restorer finds no backup
        """
        if self.file_path is None:
            self.file_path = self.config.resolve_path()

        self.restorer.restore(self.file_path, restore_path)
        return self.load(self.file_path)

    def _init(self):
        self.state = BufferState.UNLOADED
        self.file_path = None
        self.reader.load(None)
        self.writer.set_buffer([])
        self.writer.newline = "\n"

    def _build_buffer(self):
        self.writer.newline = self.reader.newline()
        self.writer.set_buffer(self.reader.entries())
        self.state = BufferState.CLEAN

    def _changed(self) -> "Editor":
        self.state = BufferState.DIRTY
        return self
