"""Build a surface tree and its atoms from a rendered element tree."""

from __future__ import annotations

from dataclasses import dataclass, field

from mathsurf.core.config import DEFAULT_CONFIG, SurfaceConfig
from mathsurf.surface.classifier import ContentSegmenter, ElementClassifier, SurfaceKind
from mathsurf.surface.geometry import BBox, interpolate
from mathsurf.surface.node import SurfaceMap, SurfaceNode, SurfaceNodeFactory
from mathsurf.surface.visual import VisualElement


@dataclass
class _BuildContext:
    origin: BBox
    factory: SurfaceNodeFactory
    atoms: list[SurfaceNode] = field(default_factory=list)
    element_index: dict[VisualElement, SurfaceNode] = field(default_factory=dict)


class SurfaceMapBuilder:
    """Single recursive pass over the renderer's ``.katex-html .base`` groups."""

    def __init__(
        self,
        classifier: ElementClassifier | None = None,
        segmenter: ContentSegmenter | None = None,
        config: SurfaceConfig | None = None,
    ) -> None:
        self.classifier = classifier or ElementClassifier()
        self.segmenter = segmenter or ContentSegmenter()
        self.config = config or DEFAULT_CONFIG

    def build(self, container: VisualElement) -> SurfaceMap:
        origin = container.bbox.copy()
        factory = SurfaceNodeFactory()
        root = factory.create_root(origin.width, origin.height, container)
        ctx = _BuildContext(origin=origin, factory=factory)

        for base in container.select("katex-html", "base"):
            self._traverse(base, root, ctx)

        return SurfaceMap(
            root=root,
            atoms=ctx.atoms,
            element_index=ctx.element_index,
            origin=origin,
            container=container,
        )

    def _traverse(self, element: VisualElement, parent: SurfaceNode, ctx: _BuildContext) -> None:
        text = element.text_content().strip()

        if self.classifier.is_structural(element.classes):
            self._traverse_children(element, parent, ctx)
            return

        if self.classifier.is_mixed_content(text):
            self._handle_mixed_content(element, parent, text, ctx)
            return

        info = self.classifier.classify(element.classes, text)
        bbox = element.bbox.relative_to(ctx.origin)
        min_size = self.config.min_visible_size_px
        has_size = bbox.width > min_size and bbox.height > min_size

        if info.kind == SurfaceKind.OTHER and (not text or not has_size):
            self._traverse_children(element, parent, ctx)
            return

        node = ctx.factory.create(info, bbox, element=element, text=text)
        parent.add_child(node)
        ctx.element_index[element] = node

        is_atomic = info.atomic or self.classifier.is_atomic_kind(node.kind)
        if is_atomic and (node.kind == SurfaceKind.FRAC_BAR or text):
            ctx.atoms.append(node)

        self._traverse_children(element, node, ctx)

    def _traverse_children(self, element: VisualElement, parent: SurfaceNode, ctx: _BuildContext) -> None:
        for child in element.children:
            self._traverse(child, parent, ctx)

    def _handle_mixed_content(
        self,
        element: VisualElement,
        parent: SurfaceNode,
        text: str,
        ctx: _BuildContext,
    ) -> None:
        if element.children:
            self._traverse_children(element, parent, ctx)
            return

        segments = self.segmenter.segment(text)
        bbox = element.bbox.relative_to(ctx.origin)
        for index, (segment_type, segment_text) in enumerate(segments):
            info = self.segmenter.node_info(segment_type)
            node = ctx.factory.create(
                info,
                interpolate(bbox, index, len(segments)),
                element=element,
                text=segment_text,
                synthetic=True,
            )
            parent.add_child(node)
            # Several synthetic nodes share one element; the last one is indexed.
            ctx.element_index[element] = node
            if info.atomic and segment_text.strip():
                ctx.atoms.append(node)


def build_surface_map(container: VisualElement, config: SurfaceConfig | None = None) -> SurfaceMap:
    """Build a surface map with the default classifier and segmenter."""

    return SurfaceMapBuilder(config=config).build(container)
