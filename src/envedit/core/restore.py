"""
Restore a .env file from a backup copy.

Only the restore side lives here; backups are created by whatever tooling the
project already uses and dropped into the backup directory as ``*.backup``
files.
"""

import logging
import shutil
from pathlib import Path
from typing import Optional, Union

from .errors import NoBackupAvailableError


logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"


class BackupRestorer:
    """Copies a backup over the target file."""

    def __init__(self, backup_dir: Union[str, Path]):
        self.backup_dir = Path(backup_dir)

    def latest_backup(self) -> Optional[Path]:
        """Newest ``*.backup`` file in the backup directory, if any."""
        if not self.backup_dir.is_dir():
            return None

        backups = [
            path for path in self.backup_dir.iterdir()
            if path.is_file() and path.name.endswith(BACKUP_SUFFIX)
        ]
        if not backups:
            return None

        return max(backups, key=lambda path: path.stat().st_mtime)

    def restore(self, target_path: Union[str, Path], restore_path: Union[str, Path, None] = None) -> Path:
        """
        Restore target_path from restore_path or the latest backup.

        Args:
            target_path: File to overwrite
            restore_path: Explicit source file

        Returns:
            The source that was used

        Raises:
            NoBackupAvailableError: If no source file can be found
        """
        source = Path(restore_path) if restore_path is not None else self.latest_backup()

        if source is None or not source.is_file():
            raise NoBackupAvailableError("There are no available backups to restore.")

        target = Path(target_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)

        logger.debug("Restored %s from %s", target, source)
        return source
