"""Structural paths for AST nodes and in-order descriptor enumeration.

Paths are the join key between the AST and the rendered surface tree and the
address the tutoring backend uses to target a step:

- the root is ``"root"``;
- a binary operation's children are ``<path>.term[0]`` / ``<path>.term[1]``,
  with the ``root.`` prefix dropped (``term[0]`` / ``term[1]``);
- a fraction's numerator and denominator are ``<path>.num`` / ``<path>.den``;
- a unary minus' argument is ``<path>.arg``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from mathsurf.core.ast import (
    AstNode,
    BinaryOpNode,
    FractionNode,
    IntegerNode,
    MixedNode,
    UnaryOpNode,
)

ROOT_PATH = "root"
_TERM_SEGMENT = re.compile(r"^term\[[01]\]$")
_CHILD_SEGMENTS = {"num", "den", "arg"}


@dataclass(frozen=True, slots=True)
class OperatorDescriptor:
    node_id: str
    operator: str
    position: int
    arity: int = 2


@dataclass(frozen=True, slots=True)
class IntegerDescriptor:
    node_id: str
    value: str
    position: int


@dataclass(frozen=True, slots=True)
class MixedDescriptor:
    node_id: str
    whole: str
    numerator: str
    denominator: str
    position: int


def child_paths(path: str) -> tuple[str, str]:
    """Return the left/right operand paths of the binary operation at ``path``."""

    if path == ROOT_PATH:
        return "term[0]", "term[1]"
    return f"{path}.term[0]", f"{path}.term[1]"


def is_valid_path(path: str) -> bool:
    """Check that ``path`` is well-formed under the structural path scheme."""

    if not path:
        return False
    segments = path.split(".")
    head = segments[0]
    if head != ROOT_PATH and not _TERM_SEGMENT.match(head):
        return False
    for index, segment in enumerate(segments[1:]):
        if segment in _CHILD_SEGMENTS:
            continue
        if _TERM_SEGMENT.match(segment) and not (index == 0 and head == ROOT_PATH):
            continue
        return False
    return True


def augment_with_ids(root: AstNode | None) -> AstNode | None:
    """Assign ``path`` to every node in place and return the same root."""

    if root is None:
        return None
    _assign(root, ROOT_PATH)
    return root


def _assign(node: AstNode, path: str) -> None:
    node.path = path
    if isinstance(node, BinaryOpNode):
        left, right = child_paths(path)
        _assign(node.left, left)
        _assign(node.right, right)
    elif isinstance(node, FractionNode):
        _assign(node.args[0], f"{path}.num")
        _assign(node.args[1], f"{path}.den")
    elif isinstance(node, UnaryOpNode):
        _assign(node.arg, f"{path}.arg")


def enumerate_operators(ast: AstNode | None) -> list[OperatorDescriptor]:
    """List binary/unary operators in reading order (left, self, right)."""

    out: list[OperatorDescriptor] = []

    def _rec(node: AstNode) -> None:
        if isinstance(node, BinaryOpNode):
            _rec(node.left)
            if node.path:
                out.append(OperatorDescriptor(node.path, node.op, len(out), arity=2))
            _rec(node.right)
        elif isinstance(node, FractionNode):
            _rec(node.args[0])
            _rec(node.args[1])
        elif isinstance(node, UnaryOpNode):
            if node.path:
                out.append(OperatorDescriptor(node.path, node.op, len(out), arity=1))
            _rec(node.arg)

    if ast is not None:
        _rec(ast)
    return out


def enumerate_integers(ast: AstNode | None) -> list[IntegerDescriptor]:
    """List integer leaves in reading order."""

    out: list[IntegerDescriptor] = []

    def _rec(node: AstNode) -> None:
        if isinstance(node, IntegerNode):
            if node.path and node.value:
                out.append(IntegerDescriptor(node.path, node.value, len(out)))
        elif isinstance(node, BinaryOpNode):
            _rec(node.left)
            _rec(node.right)
        elif isinstance(node, FractionNode):
            _rec(node.args[0])
            _rec(node.args[1])
        elif isinstance(node, UnaryOpNode):
            _rec(node.arg)

    if ast is not None:
        _rec(ast)
    return out


def enumerate_mixed_numbers(ast: AstNode | None) -> list[MixedDescriptor]:
    """List mixed-number nodes in reading order."""

    out: list[MixedDescriptor] = []
    for node in iter_nodes(ast):
        if isinstance(node, MixedNode) and node.path:
            out.append(
                MixedDescriptor(
                    node.path, node.whole, node.numerator, node.denominator, len(out)
                )
            )
    return out


def iter_nodes(ast: AstNode | None):
    """Yield nodes in reading order (operators between their operands)."""

    if ast is None:
        return
    if isinstance(ast, BinaryOpNode):
        yield from iter_nodes(ast.left)
        yield ast
        yield from iter_nodes(ast.right)
    elif isinstance(ast, FractionNode):
        yield ast
        yield from iter_nodes(ast.args[0])
        yield from iter_nodes(ast.args[1])
    elif isinstance(ast, UnaryOpNode):
        yield ast
        yield from iter_nodes(ast.arg)
    else:
        yield ast


def node_at_path(ast: AstNode | None, path: str) -> AstNode | None:
    """Return the augmented node whose path equals ``path``."""

    for node in iter_nodes(ast):
        if node.path == path:
            return node
    return None
