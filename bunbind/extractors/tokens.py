"""Lexer for the subset of Rust syntax needed to find function signatures."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Sequence

IDENT = "ident"
LIFETIME = "lifetime"
STRING = "string"
CHAR = "char"
NUMBER = "number"
PUNCT = "punct"

_WORD_KINDS = {IDENT, LIFETIME, NUMBER, STRING}

_TOKEN_PATTERNS: Sequence[tuple[str, str]] = (
    ("whitespace", r"\s+"),
    ("line_comment", r"//[^\n]*"),
    (STRING, r'b?r(?P<hashes>#*)".*?"(?P=hashes)|b?"(?:\\.|[^"\\])*"'),
    (CHAR, r"b?'(?:\\u\{[0-9a-fA-F]+\}|\\x[0-9a-fA-F]{2}|\\.|[^\\'\n])'"),
    (LIFETIME, r"'[^\W\d]\w*"),
    (IDENT, r"(?:r#)?[^\W\d]\w*"),
    (NUMBER, r"\d[\w]*(?:\.\d\w*)?"),
    (PUNCT, r"::|->|=>|\.\.=|\.\.\.|\.\.|[^\s\w]"),
)
_TOKEN_RE = re.compile(
    "|".join(f"(?P<{name}>{pattern})" for name, pattern in _TOKEN_PATTERNS),
    re.DOTALL,
)


class SignatureParseError(ValueError):
    """Raised when source text cannot be scanned for signatures."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        super().__init__(f"line {line}: {message}" if line is not None else message)


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    line: int

    def is_punct(self, text: str) -> bool:
        return self.kind == PUNCT and self.text == text

    def is_ident(self, text: str) -> bool:
        return self.kind == IDENT and self.text == text


def tokenize(source: str) -> List[Token]:
    """Split ``source`` into tokens, dropping whitespace and comments.

    Block comments nest as they do in Rust. Unterminated comments and
    literals raise :class:`SignatureParseError`.
    """
    tokens: List[Token] = []
    position = 0
    line = 1
    length = len(source)
    while position < length:
        if source.startswith("/*", position):
            end = _block_comment_end(source, position, line)
            line += source.count("\n", position, end)
            position = end
            continue

        match = _TOKEN_RE.match(source, position)
        if match is None:
            raise SignatureParseError(f"unexpected character {source[position]!r}", line)
        kind = match.lastgroup or PUNCT
        text = match.group()
        if kind == PUNCT and text in {'"', "'"}:
            raise SignatureParseError("unterminated literal", line)
        if kind not in {"whitespace", "line_comment"}:
            tokens.append(Token(kind=kind, text=text, line=line))
        line += text.count("\n")
        position = match.end()
    return tokens


def _block_comment_end(source: str, start: int, line: int) -> int:
    depth = 0
    position = start
    while position < len(source):
        if source.startswith("/*", position):
            depth += 1
            position += 2
        elif source.startswith("*/", position):
            depth -= 1
            position += 2
            if depth == 0:
                return position
        else:
            position += 1
    raise SignatureParseError("unterminated block comment", line)


def render_type(tokens: Iterable[Token]) -> str:
    """Join type tokens into a canonical spelling such as ``*const u8``.

    Words are separated by one space, punctuation hugs its neighbours, and
    commas, semicolons, ``->`` and ``+`` are followed by a space.
    """
    parts: List[str] = []
    previous: Token | None = None
    for token in tokens:
        if previous is not None:
            if previous.kind in _WORD_KINDS and token.kind in _WORD_KINDS:
                parts.append(" ")
            elif previous.kind == PUNCT and previous.text in {",", ";", "->", "+"}:
                parts.append(" ")
            elif token.kind == PUNCT and token.text in {"->", "+"}:
                parts.append(" ")
        parts.append(token.text)
        previous = token
    return "".join(parts)


def normalize_type(text: str) -> str:
    """Return the canonical spelling of a free-form type string."""
    return render_type(tokenize(text))


__all__ = [
    "CHAR",
    "IDENT",
    "LIFETIME",
    "NUMBER",
    "PUNCT",
    "STRING",
    "SignatureParseError",
    "Token",
    "normalize_type",
    "render_type",
    "tokenize",
]
