"""Flatten, bucket, pair: AST to surface correlation."""

from __future__ import annotations

from mathsurf.latex.instrument import build_ast_from_latex, instrument_latex
from mathsurf.surface.builder import build_surface_map
from mathsurf.surface.classifier import SurfaceKind
from mathsurf.surface.correlate import (
    correlate_integers,
    correlate_operators,
    correlate_with_ast,
    ordered_leaves,
)
from mathsurf.latex.paths import enumerate_integers, enumerate_operators
from mathsurf.surface.enhancer import enhance_surface_map
from mathsurf.surface.node import SurfaceMap


def _prepared(render, latex: str, *, annotated: bool = True) -> SurfaceMap:
    source = instrument_latex(latex).latex if annotated else latex
    return enhance_surface_map(build_surface_map(render(source)))


def _leaf_ids(surface_map: SurfaceMap, kinds: set[SurfaceKind]) -> list[tuple[str, str | None]]:
    return [
        (leaf.text, leaf.ast_node_id)
        for leaf in ordered_leaves(surface_map.root)
        if leaf.kind in kinds
    ]


def test_fraction_leaves_read_top_to_bottom(render) -> None:
    surface_map = _prepared(render, r"\frac{12}{5}", annotated=False)
    leaves = [
        leaf.text or leaf.kind.value
        for leaf in ordered_leaves(surface_map.root)
        if leaf.kind in {SurfaceKind.NUM, SurfaceKind.FRAC_BAR}
    ]
    assert leaves == ["12", "FracBar", "5"]


def test_integers_pair_in_reading_order(render) -> None:
    latex = r"2+\frac{1}{3}"
    surface_map = _prepared(render, latex)
    summary = correlate_with_ast(surface_map, build_ast_from_latex(latex))
    assert summary.integers == 3
    assert _leaf_ids(surface_map, {SurfaceKind.NUM}) == [
        ("2", "term[0]"),
        ("1", "term[1].num"),
        ("3", "term[1].den"),
    ]


def test_operators_pair_within_symbol_buckets(render) -> None:
    latex = "2*3+4*5"
    surface_map = _prepared(render, latex)
    summary = correlate_with_ast(surface_map, build_ast_from_latex(latex))
    assert summary.operators == 3
    assert _leaf_ids(surface_map, {SurfaceKind.BINARY_OP}) == [
        ("⋅", "term[0]"),
        ("+", "root"),
        ("⋅", "term[1]"),
    ]
    times = [leaf for leaf in ordered_leaves(surface_map.root) if leaf.text == "⋅"]
    assert [leaf.ast_operator for leaf in times] == ["*", "*"]
    assert [leaf.ast_operator_index for leaf in times] == [0, 0]


def test_operator_ids_reach_annotation_wrappers(render) -> None:
    surface_map = _prepared(render, "2+3")
    correlate_with_ast(surface_map, build_ast_from_latex("2+3"))
    plus = [atom for atom in surface_map.atoms if atom.text == "+"]
    assert len(plus) == 2
    assert {atom.ast_node_id for atom in plus} == {"root"}
    numbers = [atom for atom in surface_map.atoms if atom.kind == SurfaceKind.NUM]
    assert [atom.ast_node_id for atom in numbers] == ["term[0]", "term[0]", "term[1]", "term[1]"]


def test_binary_and_unary_minus_use_separate_buckets(render) -> None:
    latex = r"-\frac{1}{2}-3"
    surface_map = _prepared(render, latex)
    correlate_with_ast(surface_map, build_ast_from_latex(latex))
    minus = {
        leaf.kind: leaf.ast_node_id
        for leaf in ordered_leaves(surface_map.root)
        if leaf.text == "−"
    }
    assert minus == {SurfaceKind.MINUS_UNARY: "term[0]", SurfaceKind.MINUS_BINARY: "root"}


def test_shortfall_pairs_only_the_overlap(render) -> None:
    surface_map = _prepared(render, "2+3", annotated=False)
    ast = build_ast_from_latex("2+3+4")
    leaves = ordered_leaves(surface_map.root)

    assert correlate_integers(leaves, enumerate_integers(ast)) == 2
    assert correlate_operators(leaves, enumerate_operators(ast)) == 1
    assert _leaf_ids(surface_map, {SurfaceKind.NUM}) == [
        ("2", "term[0].term[0]"),
        ("3", "term[0].term[1]"),
    ]
    assert _leaf_ids(surface_map, {SurfaceKind.BINARY_OP}) == [("+", "term[0]")]


def test_mixed_number_correlation(render) -> None:
    latex = "1 2/3"
    surface_map = _prepared(render, latex)
    summary = correlate_with_ast(surface_map, build_ast_from_latex(latex))
    assert summary.integers == 0
    assert summary.mixed_numbers == 1

    whole = next(atom for atom in surface_map.atoms if atom.kind == SurfaceKind.MIXED_NUMBER)
    assert whole.ast_node_id == "root"
    assert whole.meta["mixed"] == {"whole": "1", "numerator": "2", "denominator": "3"}
    parts = [
        atom
        for atom in surface_map.atoms
        if atom.text in {"2", "3"} and not atom.children
    ]
    assert {atom.ast_node_id for atom in parts} == {"root"}


def test_no_ast_means_no_correlation(render) -> None:
    surface_map = _prepared(render, "2+3", annotated=False)
    summary = correlate_with_ast(surface_map, None)
    assert (summary.integers, summary.operators, summary.mixed_numbers) == (0, 0, 0)
    assert all(atom.ast_node_id is None for atom in surface_map.atoms)
