"""Best-effort exact evaluation of arithmetic ASTs with SymPy."""

from __future__ import annotations

from mathsurf.core.ast import (
    AstNode,
    BinaryOpNode,
    FractionNode,
    IntegerNode,
    MixedNode,
    UnaryOpNode,
)
from mathsurf.latex.parser import parse_latex_with_warnings


def ast_to_sympy(ast: AstNode | None) -> tuple[object | None, list[str]]:
    """Convert an AST to an exact SymPy number with non-fatal warnings.

    Decimal literals, fractions and mixed numbers become ``Rational`` values,
    so ``1\\frac{1}{2} + 0.5`` evaluates to ``2`` rather than ``2.0``.
    """

    if ast is None:
        return None, ["no AST to evaluate"]

    try:
        import sympy
    except Exception:
        return None, ["sympy not installed"]

    def _fail(msg: str) -> tuple[object | None, list[str]]:
        return None, [msg]

    def _rational(text: str) -> object | None:
        try:
            return sympy.Rational(text)
        except (TypeError, ValueError):
            return None

    def _rec(node: AstNode) -> tuple[object | None, list[str]]:
        if isinstance(node, IntegerNode):
            value = _rational(node.value)
            if value is None:
                return _fail(f"unsupported numeral {node.value!r}")
            return value, []

        if isinstance(node, MixedNode):
            whole = _rational(node.whole)
            num = _rational(node.numerator)
            den = _rational(node.denominator)
            if whole is None or num is None or den is None:
                return _fail("unsupported mixed number parts")
            if den == 0:
                return _fail("division by zero")
            return whole + num / den, []

        if isinstance(node, FractionNode):
            num, num_w = _rec(node.numerator)
            den, den_w = _rec(node.denominator)
            child_warnings = num_w + den_w
            if num is None or den is None:
                return None, child_warnings
            if den == 0:
                return None, child_warnings + ["division by zero"]
            return num / den, child_warnings

        if isinstance(node, UnaryOpNode):
            arg, arg_w = _rec(node.arg)
            if arg is None:
                return None, arg_w
            return -arg, arg_w

        if isinstance(node, BinaryOpNode):
            left, left_w = _rec(node.left)
            right, right_w = _rec(node.right)
            child_warnings = left_w + right_w
            if left is None or right is None:
                return None, child_warnings
            if node.op == "+":
                return sympy.Add(left, right), child_warnings
            if node.op == "-":
                return sympy.Add(left, -right), child_warnings
            if node.op == "*":
                return sympy.Mul(left, right), child_warnings
            if right == 0:
                return None, child_warnings + ["division by zero"]
            return left / right, child_warnings

        return _fail(f"unsupported node={node.__class__.__name__}")

    return _rec(ast)


def evaluate_latex(latex: str) -> tuple[object | None, list[str]]:
    """Parse ``latex`` and evaluate it exactly; parser warnings come first."""

    ast, parse_warnings = parse_latex_with_warnings(latex)
    if ast is None:
        return None, parse_warnings + ["AST parser failed to parse expression"]
    value, warnings = ast_to_sympy(ast)
    return value, parse_warnings + warnings
