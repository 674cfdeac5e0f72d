#!/usr/bin/env python3
"""
iOS .strings format handler.

Handles parsing and reconstruction of Apple Localizable.strings files as
found in <locale>.lproj bundle directories.
"""

import re

from ..errors import InvalidFormat
from .base import FormatHandler, TranslationEntry


# One token of a .strings file: whitespace, a comment, or a "key" = "value"; pair.
# Quoted strings may contain escaped quotes and span several lines.
_TOKEN_PATTERN = re.compile(
    r'''
      (?P<space>\s+)
    | //(?P<line_comment>[^\n]*)
    | /\*(?P<block_comment>.*?)\*/
    | "(?P<key>(?:[^"\\]|\\.)*)"\s*=\s*"(?P<value>(?:[^"\\]|\\.)*)"\s*;
    ''',
    re.VERBOSE | re.DOTALL,
)

_ESCAPE_PATTERN = re.compile(r'\\([Uu][0-9a-fA-F]{4}|.)', re.DOTALL)

# Any other escaped character stands for itself, as in Apple's plist parser.
_UNESCAPES = {
    'a': '\a',
    'b': '\b',
    'f': '\f',
    'n': '\n',
    'r': '\r',
    't': '\t',
    'v': '\v',
    '"': '"',
    '\\': '\\',
}

_ESCAPES = str.maketrans({
    '\\': '\\\\',
    '"': '\\"',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
})


class IosStringsHandler(FormatHandler):
    """
    Strict reader and writer for Localizable.strings tables.

    Input is tokenized as a whole rather than line by line, so pairs may
    follow a comment on the same line and values may span lines:
    ```
    /* Shown on launch */ "greeting" = "Hello, %@!";
    // English: Two lines
    "two.lines" = "first
    second";
    ```
    Anything that is not whitespace, a comment or a pair raises InvalidFormat
    instead of being skipped.
    """

    def parse(self, content: str) -> list[TranslationEntry]:
        """
        Parse .strings content into translation entries.

        Comments directly preceding a pair become the entry's context.

        Args:
            content: Raw .strings file content

        Returns:
            List of TranslationEntry objects in file order

        Raises:
            InvalidFormat: On any text that is neither a comment nor a pair
        """
        entries = []
        current_comment = []
        pos = 0
        line = 1

        while pos < len(content):
            match = _TOKEN_PATTERN.match(content, pos)
            if not match:
                raise InvalidFormat(f"unexpected text in .strings content at line {line}")

            if match.group('line_comment') is not None:
                current_comment.append(match.group('line_comment').strip())
            elif match.group('block_comment') is not None:
                current_comment.append(match.group('block_comment').strip())
            elif match.group('key') is not None:
                entries.append(TranslationEntry(
                    id=self._unescape_string(match.group('key')),
                    text=self._unescape_string(match.group('value')),
                    context='\n'.join(current_comment) if current_comment else None,
                    metadata={
                        'comments': current_comment.copy(),
                        'line': line,
                    },
                ))
                current_comment = []

            line += match.group(0).count('\n')
            pos = match.end()

        return entries

    def _unescape_string(self, s: str) -> str:
        """Unescape .strings file escapes."""
        def replace(match: re.Match) -> str:
            escaped = match.group(1)
            if len(escaped) == 5:
                return chr(int(escaped[1:], 16))
            return _UNESCAPES.get(escaped, escaped)

        return _ESCAPE_PATTERN.sub(replace, s)

    def _escape_string(self, s: str) -> str:
        """Escape backslashes, quotes and control characters so the pair reads back unchanged."""
        return s.translate(_ESCAPES)

    def reconstruct(self, entries: list[TranslationEntry]) -> str:
        """
        Render entries as .strings content.

        Each entry becomes an optional `// context` line followed by its
        pair; entries are separated by a blank line.
        """
        blocks = []

        for entry in entries:
            lines = []
            if entry.context is not None:
                lines.append(f'// {self._escape_comment(entry.context)}')
            lines.append(f'"{self._escape_string(entry.id)}" = "{self._escape_string(entry.text)}";')
            blocks.append('\n'.join(lines))

        if not blocks:
            return ''
        return '\n\n'.join(blocks) + '\n'

    def _escape_comment(self, s: str) -> str:
        """Keep a comment on a single line."""
        return s.replace('\r', '\\r').replace('\n', '\\n')
