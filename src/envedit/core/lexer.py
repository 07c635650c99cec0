"""
Line-oriented .env parser.

Turns raw file text into an ordered list of typed entries plus a key index.
Every entry keeps the original line in ``raw`` so that untouched lines can be
written back exactly as they were read:
    write(parse(file)) == file (line content byte-identical)

Several dialects exist to stay compatible with the quirks of different
dotenv implementations. Pick one by name with ``get_parser`` or by upstream
version with ``compatible_dialect``.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .errors import UnknownDialectError


logger = logging.getLogger(__name__)

DEFAULT_DIALECT = "v3"

BOM = "\ufeff"
LINE_BREAK = re.compile(r"\r\n|\r|\n")
# Escapes understood inside double quotes
DOUBLE_QUOTE_ESCAPES = {'"': '"', '\\': '\\', 'n': '\n', 'r': '\r'}


def split_lines(content: str) -> List[str]:
    """
    Split content on line terminators only.

    Unlike str.splitlines, form feeds, vertical tabs and Unicode separators
    stay inside the line.
    """
    lines = LINE_BREAK.split(content)
    if lines[-1] == "":
        lines.pop()
    return lines


class EntryType(Enum):
    """Entry types for .env file lines."""
    EMPTY = "empty"
    COMMENT = "comment"
    SETTER = "setter"


@dataclass
class Entry:
    """A single logical line of the .env file."""
    type: EntryType = EntryType.EMPTY
    line: Optional[int] = None
    export: bool = False
    key: str = ""
    value: str = ""
    comment: str = ""
    raw: Optional[str] = None  # Original text, None once the entry is edited

    def fields(self) -> dict:
        """Key index view of a setter."""
        return {
            "line": self.line,
            "export": self.export,
            "value": self.value,
            "comment": self.comment,
        }

    def __repr__(self):
        if self.type == EntryType.SETTER:
            export = "export " if self.export else ""
            return f"Entry({self.type.value}, {export}{self.key}={self.value!r})"
        return f"Entry({self.type.value}, {self.comment[:20]!r})"


class _Unparsable(Exception):
    """Raised internally when a line does not fit the setter grammar."""


class Parser:
    """
    Base parser.

    Subclasses tune the grammar through the class attributes below and
    ``_comment_payload``.
    """

    name = ""
    key_pattern = r"[A-Za-z_][A-Za-z0-9_.]*"
    export_pattern = r"export "
    # Inline comment start inside an unquoted value
    inline_comment = re.compile(r"\s#")

    def __init__(self):
        self._setter_re = re.compile(
            r"^\s*(?P<export>" + self.export_pattern + r")?"
            r"(?P<key>" + self.key_pattern + r")\s*=(?P<rest>.*)$"
        )

    def parse(self, content: str) -> Tuple[List[Entry], Dict[str, dict]]:
        """
        Parse content into entries and a key index.

        Args:
            content: String content of a .env file

        Returns:
            Tuple of (entries, key index). Duplicate keys keep every line in
            the entries; the index holds the last occurrence.
        """
        entries = []
        index: Dict[str, dict] = {}

        for number, line in enumerate(split_lines(content), start=1):
            if number == 1 and line.startswith(BOM):
                # Match without the byte order mark, write it back through raw
                entry = self.parse_line(line[len(BOM):], number)
                entry.raw = line
            else:
                entry = self.parse_line(line, number)
            entries.append(entry)
            if entry.type == EntryType.SETTER:
                index[entry.key] = entry.fields()

        logger.debug("%s parser read %d lines, %d keys", self.name, len(entries), len(index))
        return entries, index

    def parse_line(self, line: str, number: Optional[int] = None) -> Entry:
        """Parse a single physical line (without terminator) into an entry."""
        stripped = line.strip()

        if not stripped:
            return Entry(type=EntryType.EMPTY, line=number, raw=line)

        if stripped.startswith('#'):
            return Entry(
                type=EntryType.COMMENT,
                line=number,
                comment=self._comment_payload(line.lstrip()[1:]),
                raw=line,
            )

        match = self._setter_re.match(line)
        if match:
            try:
                value, comment = self._parse_value(match.group("rest"))
            except _Unparsable:
                pass
            else:
                return Entry(
                    type=EntryType.SETTER,
                    line=number,
                    export=match.group("export") is not None,
                    key=match.group("key"),
                    value=value,
                    comment=comment,
                    raw=line,
                )

        # Keep anything else as an opaque comment so nothing is lost
        logger.warning("Line %s kept as opaque text: %r", number, line)
        return Entry(type=EntryType.COMMENT, line=number, comment=stripped, raw=line)

    def _comment_payload(self, text: str) -> str:
        """Text after the ``#`` marker; drop the single separating space."""
        if text.startswith(' '):
            text = text[1:]
        return text.rstrip()

    def _parse_value(self, rest: str) -> Tuple[str, str]:
        """Split the text after ``=`` into (value, inline comment)."""
        text = rest.lstrip()

        if text[:1] == '"':
            value, tail = self._read_double_quoted(text[1:])
        elif text[:1] == "'":
            end = text.find("'", 1)
            if end < 0:
                raise _Unparsable(rest)
            value, tail = text[1:end], text[end + 1:]
        else:
            return self._split_unquoted(rest)

        tail = tail.strip()
        if not tail:
            return value, ""
        if tail.startswith('#'):
            return value, tail[1:].strip()
        raise _Unparsable(rest)

    def _split_unquoted(self, rest: str) -> Tuple[str, str]:
        match = self.inline_comment.search(rest)
        if match is None:
            return rest.strip(), ""
        return rest[:match.start()].strip(), rest[match.end():].strip()

    @staticmethod
    def _read_double_quoted(text: str) -> Tuple[str, str]:
        """Read up to the closing quote, unescaping ``\\" \\\\ \\n \\r``."""
        chars = []
        i = 0
        while i < len(text):
            char = text[i]
            if char == '\\' and i + 1 < len(text) and text[i + 1] in DOUBLE_QUOTE_ESCAPES:
                chars.append(DOUBLE_QUOTE_ESCAPES[text[i + 1]])
                i += 2
                continue
            if char == '"':
                return ''.join(chars), text[i + 1:]
            chars.append(char)
            i += 1
        raise _Unparsable(text)


class ParserV1(Parser):
    """Tolerant grammar of dotenv 3.x: loose keys, any ``#`` opens a comment."""

    name = "v1"
    key_pattern = r"[^\s=#]+"
    inline_comment = re.compile(r"#")

    def _comment_payload(self, text: str) -> str:
        return text.strip()


class ParserV2(Parser):
    """dotenv 4.x grammar."""

    name = "v2"


class ParserV3(Parser):
    """dotenv 5.x grammar; ``export`` may be followed by any whitespace."""

    name = "v3"
    export_pattern = r"export\s+"


DIALECTS = {
    "v1": ParserV1,
    "v2": ParserV2,
    "v3": ParserV3,
}

# Minimum upstream dotenv version -> dialect
COMPATIBLE_DIALECT_MAP = {
    "5.0.0": "v3",
    "4.0.0": "v2",
    "3.3.0": "v1",
}


def _version_tuple(version: str) -> Tuple[int, ...]:
    parts = []
    for piece in re.sub(r"[^0-9.]", "", version).split('.'):
        if piece:
            parts.append(int(piece))
    return tuple(parts)


def compatible_dialect(version: str) -> str:
    """
    Pick the dialect matching an upstream dotenv version.

    Args:
        version: Version string such as "v5.4.1" or "4.2"

    Returns:
        Dialect name; "v1" when the version is older than every mapped one
    """
    installed = _version_tuple(version)
    ordered = sorted(COMPATIBLE_DIALECT_MAP, key=_version_tuple, reverse=True)
    for minimum in ordered:
        if installed >= _version_tuple(minimum):
            return COMPATIBLE_DIALECT_MAP[minimum]
    return "v1"


def get_parser(dialect: str = DEFAULT_DIALECT) -> Parser:
    """Return a parser instance for a dialect name."""
    try:
        return DIALECTS[dialect]()
    except KeyError:
        raise UnknownDialectError(
            f"Unknown dialect '{dialect}'. Choose one of: {', '.join(sorted(DIALECTS))}"
        ) from None


def parse(content: str, dialect: str = DEFAULT_DIALECT) -> Tuple[List[Entry], Dict[str, dict]]:
    """
    Parse .env file content.

    Args:
        content: String content of .env file
        dialect: Dialect name

    Returns:
        Tuple of (entries, key index)
    """
    return get_parser(dialect).parse(content)


def get_keys(entries: List[Entry]) -> Dict[str, dict]:
    """
    Build the key index from entries.

    Args:
        entries: List of Entry objects

    Returns:
        Dictionary of key -> setter fields, last occurrence wins
    """
    return {
        entry.key: entry.fields()
        for entry in entries
        if entry.type == EntryType.SETTER and entry.key
    }
