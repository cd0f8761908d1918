"""Surface map construction from rendered element trees."""

from __future__ import annotations

from mathsurf.latex.instrument import instrument_latex
from mathsurf.surface.builder import SurfaceMapBuilder, build_surface_map
from mathsurf.surface.classifier import SurfaceKind
from mathsurf.surface.geometry import BBox
from mathsurf.surface.node import surface_map_to_dict
from mathsurf.surface.visual import RENDER_CONTAINER_CLASS, VisualElement


def _container(*children: VisualElement) -> VisualElement:
    container = VisualElement(classes=[RENDER_CONTAINER_CLASS], bbox=BBox(100, 50, 300, 90))
    base = (
        container.add(VisualElement(classes=["katex"]))
        .add(VisualElement(classes=["katex-html"]))
        .add(VisualElement(classes=["base"], bbox=BBox(100, 50, 300, 90)))
    )
    for child in children:
        base.add(child)
    return container


def test_build_sum_from_rendered_layout(render) -> None:
    surface_map = build_surface_map(render(instrument_latex("2+3").latex))

    assert surface_map.root.id == "root"
    assert surface_map.root.kind == SurfaceKind.ROOT
    assert [(atom.kind, atom.text) for atom in surface_map.atoms] == [
        (SurfaceKind.NUM, "2"),
        (SurfaceKind.NUM, "2"),
        (SurfaceKind.BINARY_OP, "+"),
        (SurfaceKind.BINARY_OP, "+"),
        (SurfaceKind.NUM, "3"),
        (SurfaceKind.NUM, "3"),
    ]
    assert [atom.id for atom in surface_map.atoms] == ["num-1", "num-2", "op-3", "op-4", "num-5", "num-6"]
    # Boxes are relative to the render container.
    assert surface_map.atoms[1].bbox == BBox(0, 20, 10, 40)
    assert len(surface_map.root.children) == 3


def test_element_index_maps_back_to_nodes(render) -> None:
    container = render("2+3")
    surface_map = build_surface_map(container)
    for atom in surface_map.atoms:
        assert surface_map.node_for_element(atom.element) is atom


def test_structural_wrappers_are_transparent() -> None:
    vlist = VisualElement(classes=["vlist"], bbox=BBox(100, 60, 110, 80))
    vlist.add(VisualElement(classes=["mord"], text="7", bbox=BBox(100, 60, 110, 80)))
    plus = VisualElement(classes=["mbin"], text="+", bbox=BBox(118, 60, 128, 80))
    surface_map = build_surface_map(_container(vlist, plus))
    seven, op = surface_map.atoms
    assert (seven.kind, seven.text) == (SurfaceKind.NUM, "7")
    assert seven.parent is surface_map.root
    assert op.kind == SurfaceKind.BINARY_OP


def test_single_number_base_is_an_atom_itself() -> None:
    vlist = VisualElement(classes=["vlist"], bbox=BBox(100, 60, 110, 80))
    vlist.add(VisualElement(classes=["mord"], text="7", bbox=BBox(100, 60, 110, 80)))
    surface_map = build_surface_map(_container(vlist))
    base, glyph = surface_map.atoms
    assert base.parent is surface_map.root
    assert glyph.parent is base
    assert {base.text, glyph.text} == {"7"}


def test_invisible_and_empty_other_elements_are_skipped() -> None:
    strut = VisualElement(classes=["strut"], bbox=BBox(100, 50, 100, 90))
    tiny = VisualElement(classes=["mord"], text="ab", bbox=BBox(110, 60, 110.3, 80))
    holder = VisualElement(classes=["mord"], bbox=BBox(120, 60, 140, 80))
    holder.add(VisualElement(classes=["mord"], text="4", bbox=BBox(120, 60, 130, 80)))
    word = VisualElement(classes=["mord"], text="ab", bbox=BBox(150, 60, 170, 80))

    surface_map = build_surface_map(_container(strut, tiny, holder, word))

    # "ab4ab" has no operator glyph, so the base is a visible Other group.
    (base,) = surface_map.root.children
    assert base.kind == SurfaceKind.OTHER
    kinds = [child.kind for child in base.children]
    assert kinds == [SurfaceKind.NUM, SurfaceKind.OTHER]
    # The holder's text content is "4" too, so it classifies as a number.
    assert [atom.text for atom in surface_map.atoms] == ["4", "4"]


def test_mixed_content_is_segmented_into_synthetic_nodes() -> None:
    merged = VisualElement(classes=["mord"], text="12+3", bbox=BBox(100, 60, 130, 80))
    surface_map = SurfaceMapBuilder().build(_container(merged))

    atoms = surface_map.atoms
    assert [(atom.kind, atom.text) for atom in atoms] == [
        (SurfaceKind.NUM, "12"),
        (SurfaceKind.BINARY_OP, "+"),
        (SurfaceKind.NUM, "3"),
    ]
    assert all(atom.synthetic for atom in atoms)
    assert [atom.bbox.left for atom in atoms] == [0, 10, 20]
    assert surface_map.node_for_element(merged) is atoms[-1]


def test_mixed_content_with_children_recurses(render) -> None:
    surface_map = build_surface_map(render("-3+2"))
    texts = [atom.text for atom in surface_map.atoms]
    assert texts[:2] == ["−", "3"]
    assert not any(atom.synthetic for atom in surface_map.atoms)


def test_plain_projection(render) -> None:
    payload = surface_map_to_dict(build_surface_map(render(instrument_latex("2+3").latex)))
    assert payload["atoms"] == ["num-1", "num-2", "op-3", "op-4", "num-5", "num-6"]
    first = payload["root"]["children"][0]
    assert first["kind"] == "Num"
    assert first["bbox"] == {"left": 0.0, "top": 20.0, "right": 10.0, "bottom": 40.0}
    assert first["children"][0]["id"] == "num-2"
