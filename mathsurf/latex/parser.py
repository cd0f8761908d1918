"""Recursive-descent parser producing an AST from arithmetic LaTeX."""

from __future__ import annotations

import re

from mathsurf.core.ast import (
    AstNode,
    BinaryOpNode,
    FractionNode,
    IntegerNode,
    MixedNode,
    UnaryOpNode,
)
from mathsurf.core.operators import MINUS_GLYPHS, normalize_operator
from mathsurf.latex.tokenizer import Token, TokenKind, preprocess_mixed_numbers, tokenize_latex

_BARE_INTEGER = re.compile(r"^[0-9]+$")
_ADDITIVE = {"+", "-"}
_MULTIPLICATIVE = {"*", "/"}


class _Parser:
    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.i = 0
        self.warnings: list[str] = []

    def _peek(self) -> Token | None:
        return self.tokens[self.i] if self.i < len(self.tokens) else None

    def _pop(self) -> Token | None:
        tok = self._peek()
        if tok is not None:
            self.i += 1
        return tok

    def _peek_operator(self, symbols: set[str]) -> bool:
        tok = self._peek()
        return tok is not None and tok.kind is TokenKind.OP and normalize_operator(tok.text) in symbols

    def _expect(self, kind: TokenKind, text: str) -> None:
        tok = self._peek()
        if tok is not None and tok.kind is kind:
            self.i += 1
            return
        # Unbalanced input is tolerated.
        self.warnings.append(f"expected '{text}' near token index {self.i}")

    def parse(self) -> AstNode | None:
        if not self.tokens:
            return None
        node = self._parse_add_sub()
        if node is not None and self._peek() is not None:
            self.warnings.append(f"unparsed trailing tokens from index {self.i}")
        return node

    def _parse_add_sub(self) -> AstNode | None:
        left = self._parse_mul_div()
        while self._peek_operator(_ADDITIVE):
            op_tok = self._pop()
            right = self._parse_mul_div()
            if left is None or right is None or op_tok is None:
                return None
            left = BinaryOpNode(
                node="binaryOp", op=normalize_operator(op_tok.text), left=left, right=right
            )
        return left

    def _parse_mul_div(self) -> AstNode | None:
        left = self._parse_primary()
        while self._peek_operator(_MULTIPLICATIVE):
            op_tok = self._pop()
            right = self._parse_primary()
            if left is None or right is None or op_tok is None:
                return None
            left = BinaryOpNode(
                node="binaryOp", op=normalize_operator(op_tok.text), left=left, right=right
            )
        return left

    def _parse_primary(self) -> AstNode | None:
        tok = self._peek()
        if tok is None:
            return None

        if tok.kind is TokenKind.MIXED:
            self._pop()
            whole, numerator, denominator = tok.text.split("_")
            return MixedNode(
                node="mixed", whole=whole, numerator=numerator, denominator=denominator
            )

        if tok.kind is TokenKind.NUMBER:
            self._pop()
            nxt = self._peek()
            if nxt is not None and nxt.kind is TokenKind.FRAC:
                mixed = self._parse_mixed_fraction(tok.text)
                if mixed is not None:
                    return mixed
            return IntegerNode(node="integer", value=tok.text)

        if tok.kind is TokenKind.LPAREN:
            self._pop()
            inner = self._parse_add_sub()
            self._expect(TokenKind.RPAREN, ")")
            return inner

        if tok.kind is TokenKind.OP and tok.text in MINUS_GLYPHS:
            self._pop()
            arg = self._parse_primary()
            if arg is None:
                return None
            if isinstance(arg, IntegerNode) and not arg.value.startswith("-"):
                return IntegerNode(node="integer", value=f"-{arg.value}")
            return UnaryOpNode(node="unaryOp", op="-", arg=arg)

        if tok.kind is TokenKind.FRAC:
            self._pop()
            num = self._parse_group()
            den = self._parse_group()
            if num is None or den is None:
                return None
            return FractionNode(node="fraction", args=[num, den])

        return None

    def _parse_mixed_fraction(self, whole: str) -> MixedNode | None:
        """Fold ``whole \\frac{a}{b}`` when both parts are bare integers; else rewind."""

        mark = self.i
        self._pop()
        num = self._parse_group()
        den = self._parse_group()
        if _is_bare_integer(num) and _is_bare_integer(den):
            return MixedNode(
                node="mixed", whole=whole, numerator=num.value, denominator=den.value
            )
        self.i = mark
        self.warnings.append(
            f"fraction after {whole} is not a mixed number and was left unparsed"
        )
        return None

    def _parse_group(self) -> AstNode | None:
        tok = self._peek()
        if tok is not None and tok.kind is TokenKind.LBRACE:
            self._pop()
            inner = self._parse_add_sub()
            self._expect(TokenKind.RBRACE, "}")
            return inner
        return self._parse_primary()


def _is_bare_integer(node: AstNode | None) -> bool:
    return isinstance(node, IntegerNode) and bool(_BARE_INTEGER.match(node.value))


def parse_tokens(tokens: list[Token]) -> tuple[AstNode | None, list[str]]:
    """Parse preprocessed tokens; any unexpected failure becomes ``None``."""

    parser = _Parser(tokens)
    try:
        ast = parser.parse()
    except Exception as exc:  # noqa: BLE001 - parse failure degrades to no AST
        return None, [f"parse failed: {exc}"]
    if ast is None:
        return None, parser.warnings or ["could not parse expression"]
    return ast, parser.warnings


def parse_latex_with_warnings(latex: str) -> tuple[AstNode | None, list[str]]:
    """Parse LaTeX into an AST, also returning non-fatal parser warnings."""

    return parse_tokens(preprocess_mixed_numbers(tokenize_latex(latex)))


def parse_latex(latex: str) -> AstNode | None:
    """Parse LaTeX into an AST, or ``None`` when it cannot be parsed."""

    ast, _ = parse_latex_with_warnings(latex)
    return ast
