"""Extract C-ABI exported function signatures from Rust source."""

from __future__ import annotations

from typing import Iterator, List, Optional, Sequence

from ..logging import get_logger
from ..models import ExportedFunction, Parameter
from .base import Extractor
from .tokens import IDENT, PUNCT, STRING, SignatureParseError, Token, render_type, tokenize

_OPENERS = {"(": ")", "[": "]", "{": "}", "<": ">"}
_CLOSERS = {value: key for key, value in _OPENERS.items()}
_BLOCK_ITEMS = {"impl", "trait"}


class RustExtractor(Extractor):
    """Finds ``pub extern "C" fn`` and ``#[no_mangle] pub fn`` declarations.

    Only bare ``pub`` counts as public. Function bodies, ``impl``/``trait``
    blocks and ``extern { ... }`` import blocks are skipped without parsing.
    """

    name = "rust"
    suffixes = (".rs",)

    def extract(self, source: str) -> List[ExportedFunction]:
        return list(_ItemScanner(tokenize(source)).functions())


class _ItemScanner:
    def __init__(self, tokens: Sequence[Token]) -> None:
        self._tokens = tokens
        self._pos = 0
        self._logger = get_logger("extractors.rust")
        self._reset_item()

    # ------------------------------------------------------------------
    # Item level

    def functions(self) -> Iterator[ExportedFunction]:
        while self._pos < len(self._tokens):
            token = self._tokens[self._pos]

            if token.is_punct("#"):
                self._attribute()
            elif token.kind == IDENT and token.text == "pub":
                self._visibility()
            elif token.kind == IDENT and token.text == "extern":
                self._extern()
            elif token.kind == IDENT and token.text == "fn":
                function = self._function()
                self._reset_item()
                if function is not None:
                    yield function
            elif token.kind == IDENT and token.text in _BLOCK_ITEMS:
                self._skip_block_item(token)
                self._reset_item()
            elif token.kind == IDENT and self._peek_punct(1, "!"):
                self._skip_macro()
                self._reset_item()
            elif token.kind == PUNCT and token.text in {";", "{", "}"}:
                self._pos += 1
                self._reset_item()
            else:
                # qualifiers (unsafe, const, ...) and unrelated item tokens
                self._pos += 1

    def _reset_item(self) -> None:
        self._public = False
        self._extern_abi = False
        self._no_mangle = False

    def _attribute(self) -> None:
        start = self._tokens[self._pos]
        self._pos += 1
        inner = self._peek_punct(0, "!")
        if inner:
            self._pos += 1
        if not self._peek_punct(0, "["):
            return
        body = self._group(start)
        if not inner and any(tok.kind == IDENT and tok.text == "no_mangle" for tok in body):
            self._no_mangle = True

    def _visibility(self) -> None:
        self._pos += 1
        if self._peek_punct(0, "("):
            # pub(crate), pub(super), pub(in path) are not visible across the FFI boundary
            self._group(self._tokens[self._pos])
            return
        self._public = True

    def _extern(self) -> None:
        start = self._tokens[self._pos]
        self._pos += 1
        if self._peek_kind(0, STRING):
            self._pos += 1
        if self._peek_punct(0, "{"):
            # foreign imports, not exports
            self._group(start)
            self._reset_item()
            return
        self._extern_abi = True

    def _skip_block_item(self, start: Token) -> None:
        self._pos += 1
        depth = 0
        while self._pos < len(self._tokens):
            token = self._tokens[self._pos]
            if token.kind == PUNCT and token.text in {"(", "["}:
                depth += 1
            elif token.kind == PUNCT and token.text in {")", "]"}:
                depth -= 1
            elif depth == 0 and token.is_punct(";"):
                self._pos += 1
                return
            elif depth == 0 and token.is_punct("{"):
                self._group(start)
                return
            self._pos += 1
        raise SignatureParseError(f"unterminated {start.text} block", start.line)

    def _skip_macro(self) -> None:
        start = self._tokens[self._pos]
        self._pos += 2
        if self._peek_kind(0, IDENT):  # macro_rules! name
            self._pos += 1
        if self._pos < len(self._tokens) and self._tokens[self._pos].text in {"(", "[", "{"}:
            self._group(start)

    # ------------------------------------------------------------------
    # Function signatures

    def _function(self) -> Optional[ExportedFunction]:
        keyword = self._tokens[self._pos]
        self._pos += 1
        if not self._peek_kind(0, IDENT):
            # fn pointer type such as `static CB: fn(i32) = ...`
            return None
        name = self._tokens[self._pos].text
        if name.startswith("r#"):
            name = name[2:]
        self._pos += 1

        generic = self._peek_punct(0, "<")
        if generic:
            self._group(keyword)
        if not self._peek_punct(0, "("):
            raise SignatureParseError(f"expected parameter list after fn {name}", keyword.line)
        params = self._parameters(name, self._group(keyword, what=f"parameter list of fn {name}"))
        return_type = self._return_type(name, keyword)
        self._skip_where_clause()
        self._skip_body(name, keyword)

        exported = self._public and (self._extern_abi or self._no_mangle)
        if not exported:
            return None
        if generic:
            self._logger.debug("Skipping generic exported fn %s (line %d)", name, keyword.line)
            return None
        return ExportedFunction(
            name=name,
            params=tuple(params),
            return_type=return_type,
            line=keyword.line,
        )

    def _parameters(self, fn_name: str, tokens: Sequence[Token]) -> List[Parameter]:
        params: List[Parameter] = []
        for index, chunk in enumerate(_split_top_level(tokens, ","), start=1):
            if not chunk:
                continue
            colon = next(
                (i for i, tok in enumerate(_top_level(chunk)) if tok.is_punct(":")),
                None,
            )
            if colon is None or colon == len(chunk) - 1:
                raise SignatureParseError(
                    f"parameter {index} of fn {fn_name} has no type", chunk[0].line
                )
            pattern = [tok for tok in chunk[:colon] if tok.kind == IDENT and tok.text != "mut"]
            params.append(
                Parameter(
                    type=render_type(chunk[colon + 1 :]),
                    name=pattern[-1].text if pattern else "",
                )
            )
        return params

    def _return_type(self, fn_name: str, keyword: Token) -> str:
        if not self._peek_punct(0, "->"):
            return "void"
        self._pos += 1
        collected: List[Token] = []
        depth = 0
        while self._pos < len(self._tokens):
            token = self._tokens[self._pos]
            if depth == 0 and (
                token.is_punct("{") or token.is_punct(";") or token.is_ident("where")
            ):
                break
            if token.kind == PUNCT and token.text in _OPENERS:
                depth += 1
            elif token.kind == PUNCT and token.text in _CLOSERS:
                depth -= 1
            collected.append(token)
            self._pos += 1
        if not collected:
            raise SignatureParseError(f"missing return type for fn {fn_name}", keyword.line)
        return render_type(collected)

    def _skip_where_clause(self) -> None:
        if not self._peek_ident(0, "where"):
            return
        depth = 0
        while self._pos < len(self._tokens):
            token = self._tokens[self._pos]
            if depth == 0 and (token.is_punct("{") or token.is_punct(";")):
                return
            if token.kind == PUNCT and token.text in {"(", "[", "<"}:
                depth += 1
            elif token.kind == PUNCT and token.text in {")", "]", ">"}:
                depth -= 1
            self._pos += 1

    def _skip_body(self, fn_name: str, keyword: Token) -> None:
        if self._pos >= len(self._tokens):
            return
        if self._peek_punct(0, ";"):
            self._pos += 1
            return
        if self._peek_punct(0, "{"):
            self._group(keyword, what=f"body of fn {fn_name}")
            return
        token = self._tokens[self._pos]
        raise SignatureParseError(
            f"unexpected {token.text!r} after signature of fn {fn_name}", token.line
        )

    # ------------------------------------------------------------------
    # Token helpers

    def _group(self, start: Token, what: str | None = None) -> List[Token]:
        """Consume a balanced group at the cursor and return its inner tokens.

        Only the opener kind at the cursor is counted, so `<`/`>` inside a
        parenthesised group do not matter and `->` is never mistaken for `>`.
        """
        opener = self._tokens[self._pos].text
        closer = _OPENERS[opener]
        self._pos += 1
        depth = 1
        inner: List[Token] = []
        while self._pos < len(self._tokens):
            token = self._tokens[self._pos]
            self._pos += 1
            if token.kind == PUNCT and token.text == opener:
                depth += 1
            elif token.kind == PUNCT and token.text == closer:
                depth -= 1
                if depth == 0:
                    return inner
            inner.append(token)
        label = what or f"{opener}{closer} group"
        raise SignatureParseError(f"unterminated {label}", start.line)

    def _peek(self, offset: int) -> Optional[Token]:
        index = self._pos + offset
        return self._tokens[index] if index < len(self._tokens) else None

    def _peek_punct(self, offset: int, text: str) -> bool:
        token = self._peek(offset)
        return token is not None and token.is_punct(text)

    def _peek_ident(self, offset: int, text: str) -> bool:
        token = self._peek(offset)
        return token is not None and token.is_ident(text)

    def _peek_kind(self, offset: int, kind: str) -> bool:
        token = self._peek(offset)
        return token is not None and token.kind == kind


def _top_level(tokens: Sequence[Token]) -> Iterator[Token]:
    """Yield tokens, replacing anything nested inside brackets with a placeholder."""
    depth = 0
    placeholder = Token(kind=PUNCT, text="", line=0)
    for token in tokens:
        if token.kind == PUNCT and token.text in _OPENERS:
            depth += 1
            yield placeholder
        elif token.kind == PUNCT and token.text in _CLOSERS:
            depth -= 1
            yield placeholder
        else:
            yield token if depth == 0 else placeholder


def _split_top_level(tokens: Sequence[Token], separator: str) -> List[List[Token]]:
    chunks: List[List[Token]] = [[]]
    for original, flat in zip(tokens, _top_level(tokens)):
        if flat.is_punct(separator):
            chunks.append([])
        else:
            chunks[-1].append(original)
    return chunks


__all__ = ["RustExtractor"]
