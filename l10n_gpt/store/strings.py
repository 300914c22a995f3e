"""
Apple .strings store.

Format:
    /* Greeting shown on launch */
    "hello" = "Hello";

Comments directly preceding an entry become that entry's comment. The
documentation-comment convention is also understood:

    /**
     * @key hello
     * Shown on the welcome screen
     */
    "hello" = "Hello";

yields the comment "Shown on the welcome screen". A comment separated from
the next entry by a blank line (a file header) belongs to no entry. Keys may
be unquoted (`hello = "Hello";`). `\\U00E9` style escapes are decoded on read;
non-ASCII text is written as UTF-8.
"""

from __future__ import annotations

import codecs
import re
from pathlib import Path
from typing import Mapping, Optional

from l10n_gpt.errors import StoreError
from l10n_gpt.models import LocalizationKey, LocalizationUnit, SimpleUnit, TranslationState
from l10n_gpt.store.base import LocalizationResource, UnitValue


_TOKEN_PATTERN = re.compile(
    r'''
      (?P<block>/\*.*?\*/)
    | (?P<line>//[^\n]*)
    | (?:"(?P<key>(?:[^"\\]|\\.)*)"|(?P<bare>[\w.\-]+))\s*=\s*"(?P<value>(?:[^"\\]|\\.)*)"\s*;
    | (?P<ws>\s+)
    ''',
    re.DOTALL | re.VERBOSE,
)

_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t", "r": "\r", "'": "'"}
_ESCAPE_PATTERN = re.compile(r'\\(?:[uU]([0-9a-fA-F]{4})|(.))', re.DOTALL)
# A backslash is written doubled only where it would otherwise start a known escape
_WRITE_PATTERN = re.compile(r'\\(?=[\\"\'ntruU]|\Z)|["\n\t\r]')
_WRITE_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t", "\r": "\\r"}
_BLANK_LINE = re.compile(r"\n[ \t\r]*\n")


def _unescape_match(match: re.Match) -> str:
    if match.group(1) is not None:
        return chr(int(match.group(1), 16))
    # Unknown escapes are kept as written
    return _ESCAPES.get(match.group(2), match.group(0))


def unescape(text: str) -> str:
    decoded = _ESCAPE_PATTERN.sub(_unescape_match, text)
    # \UD83D\UDE00 style surrogate pairs
    return decoded.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "replace")


def escape(text: str) -> str:
    return _WRITE_PATTERN.sub(lambda m: _WRITE_ESCAPES[m.group(0)], text)


def clean_comment(raw: str) -> Optional[str]:
    """Strip comment markers, '*' decoration and @key lines."""
    if raw.startswith("//"):
        body = raw[2:]
    else:
        body = raw[2:-2]

    lines = [re.sub(r"^\s*\*+\s?", "", line) for line in body.splitlines()]
    lines = [line.rstrip() for line in lines if not line.strip().startswith("@key")]
    text = "\n".join(lines).strip()
    return text or None


def parse_strings(content: str) -> dict[LocalizationKey, SimpleUnit]:
    """Parse .strings content into units, in file order.

    Raises:
        StoreError: on any text that is not a comment, entry or whitespace
    """
    entries: dict[LocalizationKey, SimpleUnit] = {}
    pending_comment: Optional[str] = None
    pos = 0

    while pos < len(content):
        match = _TOKEN_PATTERN.match(content, pos)
        if match is None:
            line_no = content.count("\n", 0, pos) + 1
            snippet = content[pos:pos + 40].split("\n", 1)[0]
            raise StoreError(f"Cannot parse .strings content at line {line_no}: {snippet!r}")

        if match.group("block") is not None:
            pending_comment = clean_comment(match.group("block"))
        elif match.group("line") is not None:
            pending_comment = clean_comment(match.group("line"))
        elif match.group("value") is not None:
            key = match.group("bare") or unescape(match.group("key"))
            entries[key] = SimpleUnit(unescape(match.group("value")), pending_comment)
            pending_comment = None
        elif pending_comment is not None and _BLANK_LINE.search(match.group("ws")):
            # A comment followed by a blank line is a file header, not an entry comment
            pending_comment = None

        pos = match.end()

    return entries


def format_strings(entries: Mapping[LocalizationKey, SimpleUnit]) -> str:
    blocks = []
    for key, unit in entries.items():
        lines = []
        if unit.comment:
            lines.append(f"/* {unit.comment.replace('*/', '* /')} */")
        lines.append(f'"{escape(key)}" = "{escape(unit.value)}";')
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + ("\n" if blocks else "")


def read_text(path: Path) -> str:
    """Read a .strings file, which Xcode may have saved as UTF-16."""
    data = path.read_bytes()
    if data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return data.decode("utf-16")
    return data.decode("utf-8-sig")


class StringsResource(LocalizationResource):
    """Flat .strings file. No plural forms, no translation states."""

    def __init__(self, path: Path, language: Optional[str] = None):
        super().__init__(path, language)
        self._entries: dict[LocalizationKey, SimpleUnit] = {}
        if self.path.exists():
            try:
                self._entries = parse_strings(read_text(self.path))
            except (OSError, UnicodeDecodeError) as e:
                raise StoreError(f"Cannot read {self.path}: {e}") from e

    def read(self) -> dict[LocalizationKey, LocalizationUnit]:
        return dict(self._entries)

    def update(
        self,
        key: LocalizationKey,
        value: UnitValue,
        comment: Optional[str] = None,
        state: Optional[TranslationState] = None,
        language: Optional[str] = None,
    ) -> None:
        if not isinstance(value, str):
            raise StoreError(f".strings files cannot hold plural forms (key {key!r})")
        existing = self._entries.get(key)
        if comment is None and existing is not None:
            comment = existing.comment
        self._entries[key] = SimpleUnit(value, comment)

    def write(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(format_strings(self._entries), encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Cannot write {self.path}: {e}") from e
