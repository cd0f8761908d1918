"""Classify renderer elements into semantic surface kinds."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from mathsurf.core.operators import DEFAULT_REGISTRY, OPERATOR_CHARS


class SurfaceKind(str, Enum):
    """Semantic kinds of surface nodes."""

    ROOT = "Root"
    NUM = "Num"
    DECIMAL = "Decimal"
    VAR = "Var"
    BINARY_OP = "BinaryOp"
    OP = "Op"
    MINUS_BINARY = "MinusBinary"
    MINUS_UNARY = "MinusUnary"
    RELATION = "Relation"
    PAREN_OPEN = "ParenOpen"
    PAREN_CLOSE = "ParenClose"
    FRAC_BAR = "FracBar"
    FRACTION = "Fraction"
    MIXED_NUMBER = "MixedNumber"
    OTHER = "Other"


ATOMIC_KINDS = frozenset(
    {
        SurfaceKind.NUM,
        SurfaceKind.VAR,
        SurfaceKind.BINARY_OP,
        SurfaceKind.RELATION,
        SurfaceKind.PAREN_OPEN,
        SurfaceKind.PAREN_CLOSE,
        SurfaceKind.FRAC_BAR,
    }
)

# Layout-only wrappers emitted by KaTeX.
STRUCTURAL_CLASSES = frozenset(
    {"vlist", "vlist-t", "vlist-r", "vbox", "pstrut", "sizing", "fontsize-ensurer", "mspace"}
)

_INTEGER = re.compile(r"^[0-9]+$")
_DECIMAL = re.compile(r"^[0-9]+\.[0-9]+$")
_LATIN_LETTER = re.compile(r"^[A-Za-z]$")
_GREEK_LETTER = re.compile(r"^[\u0370-\u03FF\u1F00-\u1FFF]$")
_GREEK_CHAR = re.compile(r"[\u0370-\u03FF\u1F00-\u1FFF]")
_ASCII_LETTER = re.compile(r"[A-Za-z]")
_DIGIT = re.compile(r"[0-9]")


@dataclass(frozen=True, slots=True)
class NodeInfo:
    kind: SurfaceKind
    role: str
    id_prefix: str
    atomic: bool


_NUM = NodeInfo(SurfaceKind.NUM, "operand", "num", True)
_VAR = NodeInfo(SurfaceKind.VAR, "operand", "var", True)
_BINARY_OP = NodeInfo(SurfaceKind.BINARY_OP, "operator", "op", True)
_RELATION = NodeInfo(SurfaceKind.RELATION, "operator", "rel", True)
_PAREN_OPEN = NodeInfo(SurfaceKind.PAREN_OPEN, "decorator", "paren", True)
_PAREN_CLOSE = NodeInfo(SurfaceKind.PAREN_CLOSE, "decorator", "paren", True)
_FRAC_BAR = NodeInfo(SurfaceKind.FRAC_BAR, "decorator", "fracbar", True)
_FRACTION = NodeInfo(SurfaceKind.FRACTION, "operator", "frac", False)
_OTHER = NodeInfo(SurfaceKind.OTHER, "group", "node", False)


def has_digit(text: str) -> bool:
    return bool(_DIGIT.search(text or ""))


def has_operator_char(text: str) -> bool:
    return any(ch in OPERATOR_CHARS for ch in text or "")


def has_greek_char(text: str) -> bool:
    return bool(_GREEK_CHAR.search(text or ""))


def has_ascii_letter(text: str) -> bool:
    return bool(_ASCII_LETTER.search(text or ""))


def is_decimal_text(text: str) -> bool:
    return bool(_DECIMAL.match((text or "").strip()))


class ElementClassifier:
    """Map (class tags, text) of one element to a ``NodeInfo`` by fixed precedence."""

    def is_structural(self, classes: list[str]) -> bool:
        return any(cls in STRUCTURAL_CLASSES for cls in classes)

    def is_atomic_kind(self, kind: SurfaceKind) -> bool:
        return kind in ATOMIC_KINDS

    def is_mixed_content(self, text: str) -> bool:
        """True for text where the renderer merged digits and operator glyphs."""

        return has_digit(text) and has_operator_char(text)

    def classify(self, classes: list[str], text: str) -> NodeInfo:
        t = (text or "").strip()

        if _INTEGER.match(t) or _DECIMAL.match(t):
            return _NUM
        if _LATIN_LETTER.match(t) or _GREEK_LETTER.match(t):
            return _VAR

        spec = DEFAULT_REGISTRY.lookup(t) if t else None
        if spec is not None and spec.relation:
            return _RELATION
        if len(t) == 1 and t in OPERATOR_CHARS:
            return _BINARY_OP
        if "mbin" in classes:
            return _BINARY_OP
        if "mrel" in classes:
            return _RELATION

        if t in {"(", "[", "{"}:
            return _PAREN_OPEN
        if t in {")", "]", "}"}:
            return _PAREN_CLOSE
        if "mopen" in classes:
            return _PAREN_OPEN
        if "mclose" in classes:
            return _PAREN_CLOSE

        if "frac-line" in classes:
            return _FRAC_BAR
        if "mfrac" in classes:
            return _FRACTION

        if has_greek_char(t):
            return _VAR
        if has_digit(t) and not has_ascii_letter(t) and not has_operator_char(t):
            return _NUM

        return _OTHER


class ContentSegmenter:
    """Split text that mixes digits, operator glyphs and letters into typed runs."""

    def segment(self, text: str) -> list[tuple[str, str]]:
        """Return ``(segment_type, text)`` pairs; types are ``num``, ``op`` and ``var``."""

        out: list[tuple[str, str]] = []
        i = 0
        n = len(text)
        while i < n:
            ch = text[i]
            if ch.isdigit():
                j = i + 1
                while j < n and (text[j].isdigit() or text[j] == "."):
                    j += 1
                out.append(("num", text[i:j]))
                i = j
                continue
            if ch in OPERATOR_CHARS:
                out.append(("op", ch))
            elif _LATIN_LETTER.match(ch) or _GREEK_LETTER.match(ch):
                out.append(("var", ch))
            i += 1
        return out

    def node_info(self, segment_type: str) -> NodeInfo:
        if segment_type == "num":
            return _NUM
        if segment_type == "op":
            return _BINARY_OP
        if segment_type == "var":
            return _VAR
        return _OTHER
