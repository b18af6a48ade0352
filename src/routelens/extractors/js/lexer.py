from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# longest first
_PUNCTUATORS = (
    ">>>=", "...", "===", "!==", "**=", "<<=", ">>=", ">>>", "&&=", "||=", "??=",
    "=>", "==", "!=", "<=", ">=", "&&", "||", "??", "?.", "++", "--", "+=", "-=",
    "*=", "/=", "%=", "&=", "|=", "^=", "**", "<<", ">>",
)

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}

# a "/" after one of these keywords starts a regex literal, not a division
_REGEX_KEYWORDS = {
    "return", "typeof", "instanceof", "in", "of", "new", "delete", "void",
    "throw", "case", "do", "else", "yield", "await",
}


@dataclass(frozen=True)
class Token:
    kind: str  # ident | string | template | number | regex | punct
    value: str
    start: int
    end: int

    def is_punct(self, value: str) -> bool:
        return self.kind == "punct" and self.value == value

    def is_ident(self, value: Optional[str] = None) -> bool:
        return self.kind == "ident" and (value is None or self.value == value)


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch in "_$"


def _is_ident_part(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"


def _regex_allowed(prev: Optional[Token]) -> bool:
    if prev is None:
        return True
    if prev.kind == "punct":
        return prev.value not in _CLOSERS
    if prev.kind == "ident":
        return prev.value in _REGEX_KEYWORDS
    return False


def _scan_quoted(text: str, i: int, quote: str) -> int:
    """Return the index just past the closing quote (or end of line/text)."""
    n = len(text)
    j = i + 1
    while j < n:
        ch = text[j]
        if ch == "\\":
            j += 2
            continue
        if ch == quote:
            return j + 1
        if ch == "\n" and quote != "`":
            return j
        j += 1
    return n


def _scan_regex(text: str, i: int) -> Optional[int]:
    n = len(text)
    j = i + 1
    in_class = False
    while j < n:
        ch = text[j]
        if ch == "\n":
            return None
        if ch == "\\":
            j += 2
            continue
        if in_class:
            if ch == "]":
                in_class = False
        elif ch == "[":
            in_class = True
        elif ch == "/":
            j += 1
            while j < n and _is_ident_part(text[j]):
                j += 1
            return j
        j += 1
    return None


def tokenize(text: str) -> list[Token]:
    """
    Tokenize the subset of JavaScript the extractors care about.

    Comments and whitespace are dropped. String tokens carry their unquoted
    body. Malformed input never raises; an unterminated literal simply runs
    to the end of its line (or of the text for template literals).
    """
    tokens: list[Token] = []
    n = len(text)
    i = 0
    prev: Optional[Token] = None

    while i < n:
        ch = text[i]

        if ch.isspace():
            i += 1
            continue

        if text.startswith("//", i):
            nl = text.find("\n", i)
            i = n if nl == -1 else nl + 1
            continue

        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue

        tok: Optional[Token] = None

        if ch in "'\"`":
            j = _scan_quoted(text, i, ch)
            closed = j > i + 1 and j <= n and text[j - 1] == ch
            body = text[i + 1 : j - 1] if closed else text[i + 1 : j]
            tok = Token("template" if ch == "`" else "string", body, i, j)
        elif _is_ident_start(ch):
            j = i + 1
            while j < n and _is_ident_part(text[j]):
                j += 1
            tok = Token("ident", text[i:j], i, j)
        elif ch.isdigit() or (ch == "." and i + 1 < n and text[i + 1].isdigit()):
            j = i + 1
            while j < n and (_is_ident_part(text[j]) or text[j] == "."):
                j += 1
            tok = Token("number", text[i:j], i, j)
        elif ch == "/" and _regex_allowed(prev):
            j = _scan_regex(text, i)
            if j is not None:
                tok = Token("regex", text[i:j], i, j)

        if tok is None:
            for p in _PUNCTUATORS:
                if text.startswith(p, i):
                    tok = Token("punct", p, i, i + len(p))
                    break
            else:
                tok = Token("punct", ch, i, i + 1)

        tokens.append(tok)
        prev = tok
        i = tok.end

    return tokens


def matching_close(tokens: list[Token], open_index: int) -> int:
    """
    Index of the bracket closing tokens[open_index].

    Unbalanced input closes at the last token.
    """
    opener = tokens[open_index].value
    if tokens[open_index].kind != "punct" or opener not in _OPENERS:
        raise ValueError(f"token {open_index} is not an opening bracket")

    depth = 0
    for j in range(open_index, len(tokens)):
        tok = tokens[j]
        if tok.kind != "punct":
            continue
        if tok.value in _OPENERS:
            depth += 1
        elif tok.value in _CLOSERS:
            depth -= 1
            if depth == 0:
                return j
    return len(tokens) - 1


def brace_depths(tokens: list[Token]) -> list[int]:
    """Nesting depth (all bracket kinds) in effect before each token."""
    out: list[int] = []
    depth = 0
    for tok in tokens:
        if tok.kind == "punct" and tok.value in _CLOSERS:
            depth = max(depth - 1, 0)
        out.append(depth)
        if tok.kind == "punct" and tok.value in _OPENERS:
            depth += 1
    return out


def dotted_path(value: str) -> list[str]:
    """Token values for a dotted expression: "req.body" -> ["req", ".", "body"]."""
    out: list[str] = []
    for i, part in enumerate(value.split(".")):
        if i:
            out.append(".")
        out.append(part)
    return out


def match_sequence(tokens: list[Token], index: int, values: list[str]) -> bool:
    if index < 0 or index + len(values) > len(tokens):
        return False
    for offset, expected in enumerate(values):
        tok = tokens[index + offset]
        if tok.kind not in ("ident", "punct") or tok.value != expected:
            return False
    return True
