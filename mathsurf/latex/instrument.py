"""Re-serialize an augmented AST into LaTeX annotated with structural paths.

Each number, operator, fraction and mixed number is wrapped in KaTeX's
``\\htmlData{ast-id=<path>, role=<role>[, operator=<op>]}{...}`` so the
renderer exposes the path as ``data-*`` attributes on the typeset element.
"""

from __future__ import annotations

from pydantic import BaseModel, model_validator

from mathsurf.core.ast import (
    AstNode,
    BinaryOpNode,
    FractionNode,
    IntegerNode,
    MixedNode,
    UnaryOpNode,
)
from mathsurf.core.operators import display_operator, precedence
from mathsurf.latex.parser import parse_latex, parse_latex_with_warnings
from mathsurf.latex.paths import augment_with_ids

ANNOTATION_COMMAND = r"\htmlData"
PARSE_FAILED = "AST parser failed to parse expression"
EMPTY_OUTPUT = "toInstrumentedLatex returned empty result"


class InstrumentationResult(BaseModel):
    """Outcome of instrumenting a LaTeX expression."""

    success: bool
    latex: str
    reason: str | None = None

    @model_validator(mode="after")
    def _validate_outcome(self) -> "InstrumentationResult":
        if self.success and not self.latex.strip():
            raise ValueError("InstrumentationResult.latex must be non-empty on success")
        if not self.success and not self.reason:
            raise ValueError("InstrumentationResult.reason is required on failure")
        return self


def _escape_path(path: str | None) -> str:
    return (path or "").replace("{", "").replace("}", "").replace("\\", "")


def _annotate(path: str | None, role: str, body: str, *, operator: str | None = None) -> str:
    meta = f"ast-id={_escape_path(path)}, role={role}"
    if operator is not None:
        meta += f", operator={operator}"
    return f"{ANNOTATION_COMMAND}{{{meta}}}{{{body}}}"


def _needs_parens(child: AstNode, parent_op: str, *, right: bool) -> bool:
    if not isinstance(child, BinaryOpNode):
        return False
    child_prec = precedence(child.op)
    parent_prec = precedence(parent_op)
    if right:
        return child_prec <= parent_prec
    return child_prec < parent_prec


def _wrap(text: str) -> str:
    return f"({text})"


def _is_negative_literal(node: AstNode) -> bool:
    return isinstance(node, IntegerNode) and node.value.startswith("-")


def to_instrumented_latex(ast: AstNode | None) -> str:
    """Serialize an augmented AST; returns ``""`` for a missing AST."""

    if ast is None:
        return ""
    return _serialize(ast)


def _serialize(node: AstNode) -> str:
    if isinstance(node, IntegerNode):
        return _annotate(node.path, "number", node.value)

    if isinstance(node, BinaryOpNode):
        left = _serialize(node.left)
        right = _serialize(node.right)
        if _needs_parens(node.left, node.op, right=False):
            left = _wrap(left)
        if _needs_parens(node.right, node.op, right=True):
            right = _wrap(right)
        op = _annotate(node.path, "operator", display_operator(node.op), operator=node.op)
        return f"{left} {op} {right}"

    if isinstance(node, FractionNode):
        num = _serialize(node.args[0])
        den = _serialize(node.args[1])
        return _annotate(node.path, "fraction", rf"\frac{{{num}}}{{{den}}}")

    if isinstance(node, UnaryOpNode):
        arg = _serialize(node.arg)
        if isinstance(node.arg, (BinaryOpNode, UnaryOpNode)) or _is_negative_literal(node.arg):
            arg = _wrap(arg)
        return f"-{arg}"

    if isinstance(node, MixedNode):
        body = rf"{node.whole}\frac{{{node.numerator}}}{{{node.denominator}}}"
        return _annotate(node.path, "mixed", body)

    return ""


def build_ast_from_latex(latex: str) -> AstNode | None:
    """Parse LaTeX and assign structural paths."""

    return augment_with_ids(parse_latex(latex))


def instrument_latex(latex: str) -> InstrumentationResult:
    """Parse, augment and serialize ``latex``; failures carry a reason, never raise."""

    _, result, _ = instrument_with_warnings(latex)
    return result


def instrument_with_warnings(latex: str) -> tuple[AstNode | None, InstrumentationResult, list[str]]:
    """Like :func:`instrument_latex` but also return the augmented AST and parser warnings."""

    ast, warnings = parse_latex_with_warnings(latex)
    augment_with_ids(ast)
    if ast is None:
        return None, InstrumentationResult(success=False, latex="", reason=PARSE_FAILED), warnings
    return ast, _instrumented(ast, EMPTY_OUTPUT), warnings


def instrument_from_ast(ast: AstNode | None) -> InstrumentationResult:
    """Instrument a pre-built AST, assigning paths first when it has none."""

    if ast is None:
        return InstrumentationResult(success=False, latex="", reason="No AST provided")
    if ast.path is None:
        augment_with_ids(ast)
    return _instrumented(ast, "toInstrumentedLatex failed for provided AST")


def _instrumented(ast: AstNode, empty_reason: str) -> InstrumentationResult:
    instrumented = to_instrumented_latex(ast)
    if not instrumented.strip():
        return InstrumentationResult(success=False, latex="", reason=empty_reason)
    return InstrumentationResult(success=True, latex=instrumented)


def strip_annotations(latex: str) -> str:
    """Replace every ``\\htmlData{meta}{body}`` with ``body``."""

    out: list[str] = []
    i = 0
    n = len(latex)
    while i < n:
        if latex.startswith(ANNOTATION_COMMAND, i):
            meta_end = _group_end(latex, i + len(ANNOTATION_COMMAND))
            if meta_end is not None:
                body_end = _group_end(latex, meta_end)
                if body_end is not None:
                    out.append(strip_annotations(latex[meta_end + 1 : body_end - 1]))
                    i = body_end
                    continue
        out.append(latex[i])
        i += 1
    return "".join(out)


def _group_end(text: str, start: int) -> int | None:
    """Return the index just past the brace group opening at ``start``."""

    if start >= len(text) or text[start] != "{":
        return None
    depth = 0
    for j in range(start, len(text)):
        if text[j] == "{":
            depth += 1
        elif text[j] == "}":
            depth -= 1
            if depth == 0:
                return j + 1
    return None
