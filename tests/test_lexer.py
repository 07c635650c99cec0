"""
Tests for the envedit lexer.

Covers line classification, value tokenizing per dialect and the key index.
"""

import pytest
from envedit.core.errors import UnknownDialectError
from envedit.core.formatter import format_entry
from envedit.core.lexer import (
    DIALECTS,
    Entry,
    EntryType,
    ParserV1,
    ParserV3,
    compatible_dialect,
    get_keys,
    get_parser,
    parse,
)


class TestClassification:
    """Test that each line gets the right entry type."""

    def test_empty_file(self):
        """Empty content should give no entries and no keys."""
        assert parse("") == ([], {})

    def test_blank_lines(self):
        """Blank and whitespace-only lines should be empty entries."""
        entries, _ = parse("\n   \n")
        assert [e.type for e in entries] == [EntryType.EMPTY, EntryType.EMPTY]
        assert entries[1].raw == "   "

    def test_comment(self):
        """Comment lines should keep their payload."""
        entries, _ = parse("# Database settings\n")
        assert entries[0].type == EntryType.COMMENT
        assert entries[0].comment == "Database settings"
        assert entries[0].raw == "# Database settings"

    def test_indented_comment(self):
        """Leading whitespace before the marker is allowed."""
        entries, _ = parse("   # indented\n")
        assert entries[0].type == EntryType.COMMENT
        assert entries[0].comment == "indented"

    def test_commented_out_setter_is_comment(self):
        """A disabled setter is a comment, not a setter."""
        entries, keys = parse("# FOO=bar\n")
        assert entries[0].type == EntryType.COMMENT
        assert entries[0].comment == "FOO=bar"
        assert keys == {}

    def test_setter(self):
        """Key-value lines should be setters."""
        entries, _ = parse("DATABASE_URL=postgres://localhost/db\n")
        entry = entries[0]
        assert entry.type == EntryType.SETTER
        assert entry.key == "DATABASE_URL"
        assert entry.value == "postgres://localhost/db"
        assert entry.export is False
        assert entry.comment == ""
        assert entry.line == 1

    def test_export_setter(self):
        """The export prefix should be recorded."""
        entries, _ = parse("export API_KEY=secret123\n")
        assert entries[0].export is True
        assert entries[0].key == "API_KEY"

    def test_line_numbers(self):
        """Entries should carry 1-based line numbers."""
        entries, _ = parse("FOO=bar\n# note\nexport BAZ=1\n")
        assert [e.line for e in entries] == [1, 2, 3]
        assert [e.type for e in entries] == [
            EntryType.SETTER,
            EntryType.COMMENT,
            EntryType.SETTER,
        ]

    def test_malformed_line_kept_as_comment(self):
        """Lines outside the grammar survive as opaque comments."""
        entries, keys = parse("this is not a setter\n")
        assert entries[0].type == EntryType.COMMENT
        assert entries[0].comment == "this is not a setter"
        assert entries[0].raw == "this is not a setter"
        assert keys == {}

    def test_unterminated_quote_kept_as_comment(self):
        """An unterminated quote makes the line opaque."""
        entries, _ = parse('KEY="abc\n')
        assert entries[0].type == EntryType.COMMENT
        assert entries[0].raw == 'KEY="abc'

    def test_text_after_closing_quote_kept_as_comment(self):
        """Trailing garbage after a quoted value makes the line opaque."""
        entries, _ = parse('KEY="abc" def\n')
        assert entries[0].type == EntryType.COMMENT


class TestValues:
    """Test value and inline comment tokenizing."""

    def test_empty_value(self):
        entries, _ = parse("KEY=\n")
        assert entries[0].type == EntryType.SETTER
        assert entries[0].value == ""

    def test_value_with_equals_sign(self):
        """Only the first = separates key and value."""
        entries, _ = parse("KEY=value=with=equals\n")
        assert entries[0].value == "value=with=equals"

    def test_whitespace_around_equals(self):
        entries, _ = parse("KEY = value\n")
        assert entries[0].key == "KEY"
        assert entries[0].value == "value"
        assert entries[0].raw == "KEY = value"

    def test_double_quoted_value(self):
        entries, _ = parse('MESSAGE="Hello World"\n')
        assert entries[0].value == "Hello World"

    def test_double_quoted_escapes(self):
        """Escaped quotes and backslashes are unescaped."""
        entries, _ = parse(r'MESSAGE="say \"hi\" \\ now"' + "\n")
        assert entries[0].value == 'say "hi" \\ now'

    def test_single_quoted_value_is_literal(self):
        entries, _ = parse("MESSAGE='a # b \\n'\n")
        assert entries[0].value == "a # b \\n"
        assert entries[0].comment == ""

    def test_inline_comment_unquoted(self):
        entries, _ = parse("KEY=value # the note\n")
        assert entries[0].value == "value"
        assert entries[0].comment == "the note"

    def test_inline_comment_quoted(self):
        entries, _ = parse('KEY="a # b" # the note\n')
        assert entries[0].value == "a # b"
        assert entries[0].comment == "the note"

    def test_empty_value_with_comment(self):
        entries, _ = parse("KEY= # only a note\n")
        assert entries[0].value == ""
        assert entries[0].comment == "only a note"

    def test_hash_inside_unquoted_value(self):
        """Without preceding whitespace # belongs to the value."""
        entries, _ = parse("KEY=abc#def\n")
        assert entries[0].value == "abc#def"
        assert entries[0].comment == ""

    def test_windows_line_endings(self):
        entries, keys = parse("A=1\r\nB=2\r\n")
        assert keys["A"]["value"] == "1"
        assert keys["B"]["value"] == "2"

    def test_escaped_line_breaks_in_double_quotes(self):
        entries, _ = parse(r'PEM="line1\nline2\r\n"' + "\n")
        assert entries[0].value == "line1\nline2\r\n"

    def test_only_real_line_breaks_split_lines(self):
        """Form feeds and Unicode separators stay inside the line."""
        entries, keys = parse("A=foo\x0cbar\nB=x\u2028y\x1cz\n")
        assert len(entries) == 2
        assert keys["A"]["value"] == "foo\x0cbar"
        assert keys["B"]["value"] == "x\u2028y\x1cz"
        assert entries[1].raw == "B=x\u2028y\x1cz"

    def test_byte_order_mark(self):
        """A leading BOM is ignored for matching and kept in raw."""
        entries, keys = parse("\ufeffFOO=bar\nBAZ=1\n")
        assert entries[0].type == EntryType.SETTER
        assert keys["FOO"]["value"] == "bar"
        assert entries[0].raw == "\ufeffFOO=bar"


class TestDialects:
    """Test the differences between parser dialects."""

    def test_v1_any_hash_starts_comment(self):
        entries, _ = parse("KEY=abc#def\n", dialect="v1")
        assert entries[0].value == "abc"
        assert entries[0].comment == "def"

    def test_v1_loose_keys(self):
        entries, _ = parse("my-key=1\n", dialect="v1")
        assert entries[0].type == EntryType.SETTER
        assert entries[0].key == "my-key"

    def test_v3_strict_keys(self):
        entries, _ = parse("my-key=1\n", dialect="v3")
        assert entries[0].type == EntryType.COMMENT

    def test_v1_strips_comment_payload(self):
        entries, _ = parse("#   spaced   \n", dialect="v1")
        assert entries[0].comment == "spaced"

    def test_v3_keeps_comment_indentation(self):
        entries, _ = parse("#   spaced   \n", dialect="v3")
        assert entries[0].comment == "  spaced"

    def test_v3_export_with_tab(self):
        entries, _ = parse("export\tKEY=1\n", dialect="v3")
        assert entries[0].type == EntryType.SETTER
        assert entries[0].export is True

    def test_v2_export_requires_single_space(self):
        entries, _ = parse("export\tKEY=1\n", dialect="v2")
        assert entries[0].type == EntryType.COMMENT

    def test_get_parser(self):
        assert isinstance(get_parser("v1"), ParserV1)
        assert isinstance(get_parser(), ParserV3)

    def test_unknown_dialect(self):
        with pytest.raises(UnknownDialectError):
            get_parser("v9")

    def test_unknown_dialect_is_value_error(self):
        with pytest.raises(ValueError):
            parse("A=1\n", dialect="latest")

    def test_compatible_dialect(self):
        assert compatible_dialect("v5.4.1") == "v3"
        assert compatible_dialect("5.0.0") == "v3"
        assert compatible_dialect("4.2") == "v2"
        assert compatible_dialect("3.3.0") == "v1"

    def test_compatible_dialect_too_old(self):
        """Versions older than every mapped one fall back to v1."""
        assert compatible_dialect("2.1.0") == "v1"


class TestKeyIndex:
    """Test the derived key index."""

    def test_index_fields(self):
        _, keys = parse("FOO=bar\n# note\nexport BAZ=1 # one\n")
        assert keys == {
            "FOO": {"line": 1, "export": False, "value": "bar", "comment": ""},
            "BAZ": {"line": 3, "export": True, "value": "1", "comment": "one"},
        }

    def test_duplicate_keys_last_wins(self):
        """Both lines stay in the entries, the index keeps the last."""
        entries, keys = parse("A=1\nA=2\n")
        assert len(entries) == 2
        assert keys["A"]["value"] == "2"
        assert keys["A"]["line"] == 2

    def test_get_keys_matches_parse(self):
        entries, keys = parse("A=1\n\nB=2\n")
        assert get_keys(entries) == keys


class TestRoundTrip:
    """Formatter output should parse back to the same entries."""

    ENTRIES = [
        Entry(type=EntryType.COMMENT, comment="Application"),
        Entry(type=EntryType.SETTER, key="APP_NAME", value="My App"),
        Entry(type=EntryType.SETTER, key="EMPTY", value=""),
        Entry(type=EntryType.SETTER, key="NOTED", value="", comment="fill me"),
        Entry(type=EntryType.EMPTY),
        Entry(type=EntryType.SETTER, key="QUOTES", value='say "hi" it\'s \\ fine', export=True),
        Entry(type=EntryType.SETTER, key="HASH", value="a#b", comment="has # inside"),
        Entry(type=EntryType.SETTER, key="URL", value="postgres://u:p@h:5432/db?x=1"),
        Entry(type=EntryType.SETTER, key="MULTILINE", value="one\ntwo\r\nthree"),
    ]

    @pytest.mark.parametrize("dialect", sorted(DIALECTS))
    def test_formatter_output_round_trips(self, dialect):
        text = "\n".join(format_entry(e) for e in self.ENTRIES) + "\n"
        parsed, _ = parse(text, dialect=dialect)

        def shape(entry):
            return (entry.type, entry.key, entry.value, entry.export, entry.comment)

        assert [shape(e) for e in parsed] == [shape(e) for e in self.ENTRIES]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
