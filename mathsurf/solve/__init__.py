"""Exact evaluation helpers."""

from mathsurf.solve.sympy_bridge import ast_to_sympy, evaluate_latex

__all__ = ["ast_to_sympy", "evaluate_latex"]
