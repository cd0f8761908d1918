"""Match AST descriptors to surface leaves: flatten, bucket, pair.

Both trees are projected to flat lists in reading order (in-order traversal for
the AST, column-aware linearization for the surface tree) and paired by
position, per operator symbol for operators. Surplus items on either side stay
uncorrelated.
"""

from __future__ import annotations

from dataclasses import dataclass

from mathsurf.core.ast import AstNode
from mathsurf.core.config import DEFAULT_CONFIG, SurfaceConfig
from mathsurf.core.operators import normalize_operator
from mathsurf.latex.paths import (
    IntegerDescriptor,
    MixedDescriptor,
    OperatorDescriptor,
    enumerate_integers,
    enumerate_mixed_numbers,
    enumerate_operators,
)
from mathsurf.surface.classifier import SurfaceKind
from mathsurf.surface.enhancer import MIXED_PART_OF
from mathsurf.surface.geometry import horizontal_overlap
from mathsurf.surface.node import SurfaceMap, SurfaceNode

_NUMERIC_KINDS = frozenset({SurfaceKind.NUM, SurfaceKind.DECIMAL})
SURFACE_OPERATOR_KINDS = frozenset(
    {
        SurfaceKind.BINARY_OP,
        SurfaceKind.MINUS_BINARY,
        SurfaceKind.MINUS_UNARY,
        SurfaceKind.RELATION,
    }
)
_UNARY_MINUS_BUCKET = "-u"


@dataclass(frozen=True, slots=True)
class CorrelationSummary:
    integers: int
    operators: int
    mixed_numbers: int


def ordered_leaves(node: SurfaceNode, config: SurfaceConfig | None = None) -> list[SurfaceNode]:
    """Leaves of ``node`` in reading order.

    Children are sorted by left edge; consecutive children overlapping the
    previous one horizontally by more than ``column_overlap_ratio`` of the
    narrower width form a column, read top to bottom (numerator before
    denominator).
    """

    cfg = config or DEFAULT_CONFIG
    if not node.children:
        return [node]

    children = sorted(node.children, key=lambda child: child.bbox.left)
    groups: list[list[SurfaceNode]] = [[children[0]]]
    for curr in children[1:]:
        prev = groups[-1][-1]
        min_width = min(curr.bbox.right - curr.bbox.left, prev.bbox.right - prev.bbox.left)
        if horizontal_overlap(curr.bbox, prev.bbox) > cfg.column_overlap_ratio * min_width:
            groups[-1].append(curr)
        else:
            groups.append([curr])

    out: list[SurfaceNode] = []
    for group in groups:
        if len(group) > 1:
            group.sort(key=lambda child: child.bbox.top)
        for child in group:
            out.extend(ordered_leaves(child, cfg))
    return out


def _propagate_number_id(node: SurfaceNode, node_id: str, value: str | None) -> None:
    parent = node.parent
    while parent is not None and parent.kind in _NUMERIC_KINDS:
        if not parent.ast_node_id:
            parent.ast_node_id = node_id
        if parent.ast_integer_value is None:
            parent.ast_integer_value = value
        parent = parent.parent


def correlate_integers(leaves: list[SurfaceNode], integers: list[IntegerDescriptor]) -> int:
    """Pair numeric leaves with AST integers index-for-index; return the pair count."""

    surface_numbers = [
        leaf
        for leaf in leaves
        if leaf.kind in _NUMERIC_KINDS
        and not any(child.kind in _NUMERIC_KINDS for child in leaf.children)
        and not leaf.meta.get(MIXED_PART_OF)
    ]
    count = min(len(integers), len(surface_numbers))
    for desc, node in zip(integers, surface_numbers):
        node.ast_node_id = desc.node_id
        node.ast_integer_value = desc.value
        _propagate_number_id(node, desc.node_id, desc.value)
    return count


def _propagate_operator_id(node: SurfaceNode) -> None:
    # Annotation wrappers around one glyph classify as the same operator kind.
    parent = node.parent
    while parent is not None and parent.kind == node.kind:
        if not parent.ast_node_id:
            parent.ast_node_id = node.ast_node_id
            parent.ast_operator = node.ast_operator
            parent.ast_operator_index = node.ast_operator_index
        parent = parent.parent


def _ast_bucket(desc: OperatorDescriptor) -> str:
    symbol = normalize_operator(desc.operator)
    if symbol == "-" and desc.arity == 1:
        return _UNARY_MINUS_BUCKET
    return symbol


def _surface_bucket(node: SurfaceNode) -> str:
    if node.kind == SurfaceKind.MINUS_UNARY:
        return _UNARY_MINUS_BUCKET
    return normalize_operator(node.text)


def correlate_operators(leaves: list[SurfaceNode], operators: list[OperatorDescriptor]) -> int:
    """Pair operator leaves with AST operators per normalized symbol bucket."""

    ast_by_symbol: dict[str, list[OperatorDescriptor]] = {}
    for desc in operators:
        ast_by_symbol.setdefault(_ast_bucket(desc), []).append(desc)

    surface_by_symbol: dict[str, list[SurfaceNode]] = {}
    for leaf in leaves:
        if leaf.kind in SURFACE_OPERATOR_KINDS:
            surface_by_symbol.setdefault(_surface_bucket(leaf), []).append(leaf)

    paired = 0
    for symbol, ast_ops in ast_by_symbol.items():
        surface_ops = surface_by_symbol.get(symbol, [])
        for i, (desc, node) in enumerate(zip(ast_ops, surface_ops)):
            node.ast_node_id = desc.node_id
            node.ast_operator = desc.operator
            node.ast_operator_index = sum(1 for prior in ast_ops[:i] if prior.node_id == desc.node_id)
            _propagate_operator_id(node)
            paired += 1
    return paired


def correlate_mixed_numbers(
    leaves: list[SurfaceNode],
    mixed: list[MixedDescriptor],
    atoms: list[SurfaceNode],
) -> int:
    """Stamp mixed-number paths on the whole-part leaf, its fraction and containers."""

    wholes = [leaf for leaf in leaves if leaf.kind == SurfaceKind.MIXED_NUMBER]
    count = min(len(mixed), len(wholes))
    for desc, node in zip(mixed, wholes):
        node.ast_node_id = desc.node_id
        node.ast_integer_value = desc.whole
        node.meta["mixed"] = {
            "whole": desc.whole,
            "numerator": desc.numerator,
            "denominator": desc.denominator,
        }
        for part in atoms:
            if part.meta.get(MIXED_PART_OF) == node.id and not part.ast_node_id:
                part.ast_node_id = desc.node_id
                _propagate_number_id(part, desc.node_id, None)
        _propagate_number_id(node, desc.node_id, None)
    return count


def correlate_with_ast(
    surface_map: SurfaceMap,
    ast: AstNode | None,
    config: SurfaceConfig | None = None,
) -> CorrelationSummary:
    """Run every correlation pass over one shared reading-order linearization."""

    if ast is None:
        return CorrelationSummary(0, 0, 0)
    leaves = ordered_leaves(surface_map.root, config)
    return CorrelationSummary(
        integers=correlate_integers(leaves, enumerate_integers(ast)),
        operators=correlate_operators(leaves, enumerate_operators(ast)),
        mixed_numbers=correlate_mixed_numbers(
            leaves, enumerate_mixed_numbers(ast), surface_map.atoms
        ),
    )
