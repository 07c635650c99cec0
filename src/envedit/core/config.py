"""
Editor configuration and file path resolution.

Values can be overridden through environment variables:
- ENVEDIT_PROJECT_ROOT
- ENVEDIT_FILE
- ENVEDIT_DIALECT
- ENVEDIT_BACKUP_DIR
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .lexer import DEFAULT_DIALECT


DEFAULT_ENV_FILE = ".env"
BACKUP_DIR = ".envedit/backups"


@dataclass
class EditorConfig:
    """Where the editor looks for files and how it parses them."""
    project_root: str = "."
    env_file: str = DEFAULT_ENV_FILE
    dialect: str = DEFAULT_DIALECT
    backup_dir: Optional[str] = None

    @classmethod
    def from_env(cls, **overrides) -> "EditorConfig":
        """
        Build a config from ENVEDIT_* environment variables.

        Args:
            **overrides: Explicit values; None entries are ignored

        Returns:
            EditorConfig instance
        """
        values = {
            'project_root': os.getenv('ENVEDIT_PROJECT_ROOT'),
            'env_file': os.getenv('ENVEDIT_FILE'),
            'dialect': os.getenv('ENVEDIT_DIALECT'),
            'backup_dir': os.getenv('ENVEDIT_BACKUP_DIR'),
        }
        values.update(overrides)
        return cls(**{name: value for name, value in values.items() if value is not None})

    @property
    def root(self) -> Path:
        return Path(self.project_root)

    def resolve_path(self, file_path: Union[str, Path, None] = None) -> Path:
        """
        Resolve the .env file to work on.

        Args:
            file_path: Explicit path; relative paths are taken from project_root

        Returns:
            The explicit path, or project_root / env_file
        """
        path = Path(file_path) if file_path is not None else Path(self.env_file)
        if path.is_absolute():
            return path
        return self.root / path

    def resolve_backup_dir(self) -> Path:
        if self.backup_dir is None:
            return self.root / BACKUP_DIR
        return self.resolve_path(self.backup_dir)
