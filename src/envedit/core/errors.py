class EditorError(Exception):
    """Base class for envedit errors."""


class KeyNotFoundError(EditorError):
    """Raised when a requested key is not in the file."""


NotFoundError = KeyNotFoundError


class WritePermissionError(EditorError):
    """Raised when the target file can neither be written nor created."""


class NoBackupAvailableError(EditorError):
    """Raised when a restore is requested but no backup can be found."""


class UnknownDialectError(EditorError, ValueError):
    """Raised when a parser dialect name is not registered."""


class InvalidEntryError(EditorError, ValueError):
    """Raised when a key or comment would span more than one line."""
