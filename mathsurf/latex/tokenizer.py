"""Deterministic tokenizer for the arithmetic subset of LaTeX."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from mathsurf.core.operators import OPERATOR_CHARS


class TokenKind(str, Enum):
    """Token categories emitted by the tokenizer."""

    NUMBER = "NUMBER"
    OP = "OP"
    FRAC = "FRAC"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    LBRACE = "LBRACE"
    RBRACE = "RBRACE"
    SPACE = "SPACE"
    MIXED = "MIXED"


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    text: str


_COMMANDS = {
    "frac": Token(TokenKind.FRAC, r"\frac"),
    "cdot": Token(TokenKind.OP, "*"),
    "times": Token(TokenKind.OP, "*"),
    "div": Token(TokenKind.OP, "/"),
}
# Sizing prefixes; the delimiter after them is tokenized normally.
_TRANSPARENT_COMMANDS = {"left", "right"}
_BRACKETS = {
    "(": TokenKind.LPAREN,
    "[": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "]": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
}


def tokenize_latex(latex: str) -> list[Token]:
    """Scan LaTeX into tokens; unsupported input is skipped, never raised on."""

    out: list[Token] = []
    i = 0
    n = len(latex)
    while i < n:
        ch = latex[i]
        if ch.isspace():
            j = i + 1
            while j < n and latex[j].isspace():
                j += 1
            out.append(Token(TokenKind.SPACE, latex[i:j]))
            i = j
            continue
        if ch.isdigit():
            j = i + 1
            while j < n and (latex[j].isdigit() or latex[j] == "."):
                j += 1
            out.append(Token(TokenKind.NUMBER, latex[i:j]))
            i = j
            continue
        if ch == "\\":
            j = i + 1
            while j < n and latex[j].isalpha():
                j += 1
            name = latex[i + 1 : j]
            if not name and j < n:
                # Control symbols such as "\," or "\{" carry no arithmetic.
                j += 1
            i = j
            if name in _TRANSPARENT_COMMANDS:
                continue
            token = _COMMANDS.get(name)
            if token is not None:
                out.append(token)
            continue
        kind = _BRACKETS.get(ch)
        if kind is not None:
            out.append(Token(kind, ch))
        elif ch in OPERATOR_CHARS:
            out.append(Token(TokenKind.OP, ch))
        i += 1
    return out


def preprocess_mixed_numbers(tokens: list[Token]) -> list[Token]:
    """Fuse ``NUMBER SPACE NUMBER OP('/') NUMBER`` into MIXED tokens and drop spaces."""

    out: list[Token] = []
    i = 0
    n = len(tokens)
    while i < n:
        window = tokens[i : i + 5]
        if (
            len(window) == 5
            and window[0].kind is TokenKind.NUMBER
            and window[1].kind is TokenKind.SPACE
            and window[2].kind is TokenKind.NUMBER
            and window[3].kind is TokenKind.OP
            and window[3].text == "/"
            and window[4].kind is TokenKind.NUMBER
        ):
            value = f"{window[0].text}_{window[2].text}_{window[4].text}"
            out.append(Token(TokenKind.MIXED, value))
            i += 5
            continue
        if tokens[i].kind is not TokenKind.SPACE:
            out.append(tokens[i])
        i += 1
    return out
