"""Lexer - splits Mustache template source into text and tag tokens."""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from mustc.exceptions import TemplateSyntaxError

DEFAULT_DELIMITERS = ("{{", "}}")


class TokenType(Enum):
    TEXT = "text"
    VARIABLE = "variable"
    UNESCAPED = "unescaped"
    SECTION = "section"
    INVERTED = "inverted"
    CLOSE = "close"
    PARTIAL = "partial"
    COMMENT = "comment"
    DELIMITER = "delimiter"


SIGILS = {
    "#": TokenType.SECTION,
    "^": TokenType.INVERTED,
    "/": TokenType.CLOSE,
    ">": TokenType.PARTIAL,
    "&": TokenType.UNESCAPED,
    "!": TokenType.COMMENT,
    "=": TokenType.DELIMITER,
}

# Tags that may stand alone on a line and then take the whole line with them.
STANDALONE_TYPES = frozenset(
    {
        TokenType.SECTION,
        TokenType.INVERTED,
        TokenType.CLOSE,
        TokenType.PARTIAL,
        TokenType.COMMENT,
        TokenType.DELIMITER,
    }
)


@dataclass(frozen=True)
class Token:
    """A text span or a tag.

    For tags, ``value`` is the stripped tag name (comment text for comments).
    ``raw`` is the tag exactly as written, delimiters included.
    """

    type: TokenType
    value: str
    offset: int
    end: int
    line: int
    column: int
    raw: str = ""


class Lexer:
    """Tokenizer for Mustache template source.

    Recognizes:
    - {{name}}, {{{name}}}, {{&name}}
    - {{#name}}, {{^name}}, {{/name}}
    - {{>partial}}
    - {{! comment }}
    - {{=<% %>=}} (delimiter change, effective until the end of the source)
    """

    def __init__(self, source: str, template_name: Optional[str] = None):
        self.source = source
        self.template_name = template_name
        self._line_starts = [0]
        for i, ch in enumerate(source):
            if ch == "\n":
                self._line_starts.append(i + 1)

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        source = self.source
        otag, ctag = DEFAULT_DELIMITERS
        pos = 0

        while pos < len(source):
            start = source.find(otag, pos)
            if start == -1:
                tokens.append(self._text(pos, len(source)))
                break
            if start > pos:
                tokens.append(self._text(pos, start))

            token, (otag, ctag) = self._tag(start, otag, ctag)
            tokens.append(token)
            pos = token.end

        return tokens

    def position(self, offset: int) -> Tuple[int, int]:
        """Return the 1-based (line, column) of a source offset."""
        index = bisect.bisect_right(self._line_starts, offset) - 1
        return index + 1, offset - self._line_starts[index] + 1

    def _text(self, start: int, end: int) -> Token:
        line, column = self.position(start)
        return Token(
            TokenType.TEXT, self.source[start:end], start, end, line, column
        )

    def _tag(self, start: int, otag: str, ctag: str) -> Tuple[Token, Tuple[str, str]]:
        source = self.source
        inner = start + len(otag)

        if (otag, ctag) == DEFAULT_DELIMITERS and source.startswith("{", inner):
            close = source.find("}}}", inner + 1)
            if close == -1:
                raise self._error("Unterminated triple mustache", start, source[start:])
            end = close + 3
            content = source[inner + 1 : close].strip()
            kind = TokenType.UNESCAPED
        else:
            close = source.find(ctag, inner)
            if close == -1:
                raise self._error("Unterminated tag", start, source[start:])
            end = close + len(ctag)
            content = source[inner:close].strip()
            kind = SIGILS.get(content[:1], TokenType.VARIABLE)
            if kind is not TokenType.VARIABLE:
                content = content[1:].strip()

        raw = source[start:end]
        delimiters = (otag, ctag)

        if kind is TokenType.DELIMITER:
            delimiters = self._delimiters(content, start, raw)
        elif kind is not TokenType.COMMENT and not content:
            raise self._error("Empty tag", start, raw)

        line, column = self.position(start)
        return Token(kind, content, start, end, line, column, raw), delimiters

    def _delimiters(self, content: str, start: int, raw: str) -> Tuple[str, str]:
        if not content.endswith("="):
            raise self._error("Malformed delimiter tag", start, raw)
        parts = content[:-1].split()
        if len(parts) != 2 or any("=" in part for part in parts):
            raise self._error("Malformed delimiter tag", start, raw)
        return parts[0], parts[1]

    def _error(self, message: str, offset: int, fragment: str) -> TemplateSyntaxError:
        line, column = self.position(offset)
        if len(fragment) > 40:
            fragment = fragment[:40] + "..."
        return TemplateSyntaxError(
            message,
            fragment=fragment,
            template=self.template_name,
            line=line,
            column=column,
            offset=offset,
        )
