"""Post-process atoms of a freshly built surface map.

Passes, in order: widen fraction-bar hit zones, reclassify Greek and decimal
atoms, tell unary from binary minus by visual predecessor, detect mixed
numbers and number operator slots left to right. Every pass mutates atoms in
place and can be re-run without changing the result.
"""

from __future__ import annotations

from mathsurf.core.config import DEFAULT_CONFIG, SurfaceConfig
from mathsurf.core.operators import MINUS_GLYPHS
from mathsurf.surface.classifier import SurfaceKind, has_greek_char, is_decimal_text
from mathsurf.surface.geometry import clamp, vertical_overlap
from mathsurf.surface.node import SurfaceMap, SurfaceNode

OPERATOR_SLOT_KINDS = frozenset(
    {
        SurfaceKind.BINARY_OP,
        SurfaceKind.MINUS_BINARY,
        SurfaceKind.MINUS_UNARY,
        SurfaceKind.RELATION,
        SurfaceKind.FRACTION,
    }
)

# A minus whose visual predecessor is one of these starts an operand.
_UNARY_CONTEXT_KINDS = frozenset(
    {
        SurfaceKind.BINARY_OP,
        SurfaceKind.OP,
        SurfaceKind.MINUS_BINARY,
        SurfaceKind.MINUS_UNARY,
        SurfaceKind.RELATION,
        SurfaceKind.PAREN_OPEN,
        SurfaceKind.FRAC_BAR,
    }
)

_NUMERIC_KINDS = frozenset({SurfaceKind.NUM, SurfaceKind.DECIMAL})

MIXED_WITH_FRACBAR = "mixedWithFracBarId"
MIXED_PART_OF = "mixedPartOf"
FRACBAR_EXPANDED = "fracBarExpanded"


def sort_atoms(atoms: list[SurfaceNode]) -> list[SurfaceNode]:
    """Stable spatial order: left edge, then top edge."""

    return sorted(atoms, key=lambda node: (node.bbox.left, node.bbox.top))


def _related(a: SurfaceNode, b: SurfaceNode) -> bool:
    return a.is_ancestor_of(b) or b.is_ancestor_of(a)


class SurfaceMapEnhancer:
    def __init__(self, config: SurfaceConfig | None = None) -> None:
        self.config = config or DEFAULT_CONFIG

    def enhance(self, surface_map: SurfaceMap) -> SurfaceMap:
        self.widen_frac_bars(surface_map)
        atoms_sorted = sort_atoms(surface_map.atoms)
        self.reclassify(atoms_sorted)
        self.disambiguate_minus(atoms_sorted)
        self.detect_mixed_numbers(atoms_sorted)
        self.assign_operator_indices(atoms_sorted)
        return surface_map

    def widen_frac_bars(self, surface_map: SurfaceMap) -> None:
        expand = self.config.fracbar_expand_px
        height = surface_map.root.bbox.height
        for node in surface_map.atoms:
            if node.kind != SurfaceKind.FRAC_BAR or node.meta.get(FRACBAR_EXPANDED):
                continue
            node.bbox.top = clamp(node.bbox.top - expand, 0.0, height)
            node.bbox.bottom = clamp(node.bbox.bottom + expand, 0.0, height)
            node.meta[FRACBAR_EXPANDED] = True

    def reclassify(self, atoms_sorted: list[SurfaceNode]) -> None:
        for node in atoms_sorted:
            text = node.text.strip()
            if has_greek_char(text):
                node.kind = SurfaceKind.VAR
            if is_decimal_text(text):
                node.kind = SurfaceKind.DECIMAL

    def disambiguate_minus(self, atoms_sorted: list[SurfaceNode]) -> None:
        ratio = self.config.minus_overlap_ratio
        for i, node in enumerate(atoms_sorted):
            if node.text.strip() not in MINUS_GLYPHS:
                continue
            prev = None
            for j in range(i - 1, -1, -1):
                candidate = atoms_sorted[j]
                if _related(node, candidate):
                    continue
                min_height = min(node.bbox.height, candidate.bbox.height)
                if vertical_overlap(node.bbox, candidate.bbox) > ratio * min_height:
                    prev = candidate
                    break
            if prev is None or prev.kind in _UNARY_CONTEXT_KINDS:
                node.kind = SurfaceKind.MINUS_UNARY
            else:
                node.kind = SurfaceKind.MINUS_BINARY

    def detect_mixed_numbers(self, atoms_sorted: list[SurfaceNode]) -> None:
        gap = self.config.mixed_gap_px
        bars = [node for node in atoms_sorted if node.kind == SurfaceKind.FRAC_BAR]
        for node in atoms_sorted:
            if node.kind not in _NUMERIC_KINDS or node.meta.get(MIXED_PART_OF):
                continue
            right = node.bbox.right
            mid_y = node.bbox.mid_y
            bar = next(
                (
                    m
                    for m in bars
                    if m.bbox.left > right
                    and m.bbox.left - right < gap
                    and m.bbox.top < mid_y < m.bbox.bottom
                ),
                None,
            )
            if bar is None:
                continue
            node.kind = SurfaceKind.MIXED_NUMBER
            node.meta[MIXED_WITH_FRACBAR] = bar.id
            self._mark_mixed_parts(node, bar, atoms_sorted)

    def _mark_mixed_parts(self, whole: SurfaceNode, bar: SurfaceNode, atoms_sorted: list[SurfaceNode]) -> None:
        """Tag the bar and the numerals stacked on it as belonging to ``whole``."""

        bar.meta[MIXED_PART_OF] = whole.id
        for node in atoms_sorted:
            if node.kind not in _NUMERIC_KINDS or node is whole:
                continue
            box = node.bbox
            inside = box.left >= bar.bbox.left - 1 and box.right <= bar.bbox.right + 1
            stacked = box.bottom <= bar.bbox.mid_y or box.top >= bar.bbox.mid_y
            if inside and stacked:
                node.meta[MIXED_PART_OF] = whole.id

    def assign_operator_indices(self, atoms_sorted: list[SurfaceNode]) -> None:
        assigned: list[SurfaceNode] = []
        next_index = 0
        for node in atoms_sorted:
            if node.kind not in OPERATOR_SLOT_KINDS:
                continue
            shared = next(
                (
                    other.operator_index
                    for other in assigned
                    if other.kind == node.kind and _related(node, other)
                ),
                None,
            )
            if shared is None:
                node.operator_index = next_index
                next_index += 1
            else:
                node.operator_index = shared
            assigned.append(node)


def enhance_surface_map(surface_map: SurfaceMap, config: SurfaceConfig | None = None) -> SurfaceMap:
    return SurfaceMapEnhancer(config).enhance(surface_map)
