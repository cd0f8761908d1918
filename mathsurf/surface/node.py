"""Surface tree nodes, the node factory and the built ``SurfaceMap``."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field

from mathsurf.surface.classifier import NodeInfo, SurfaceKind
from mathsurf.surface.geometry import BBox
from mathsurf.surface.visual import VisualElement

_DIGITS36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(_DIGITS36[rem])
    return "".join(reversed(out))


@dataclass(eq=False)
class SurfaceNode:
    """One semantic node of the rendered expression.

    ``bbox`` is relative to the render container. ``synthetic`` nodes were
    manufactured by content segmentation and share their ``element`` with
    sibling segments. The ``ast_*`` fields are written once by correlation.
    """

    id: str
    kind: SurfaceKind
    role: str
    bbox: BBox
    element: VisualElement | None = field(default=None, repr=False)
    text: str = ""
    children: list["SurfaceNode"] = field(default_factory=list, repr=False)
    parent: "SurfaceNode | None" = field(default=None, repr=False)
    synthetic: bool = False
    ast_node_id: str | None = None
    ast_operator: str | None = None
    ast_operator_index: int | None = None
    ast_integer_value: str | None = None
    operator_index: int | None = None
    meta: dict = field(default_factory=dict)

    def add_child(self, child: "SurfaceNode") -> None:
        self.children.append(child)
        child.parent = self

    def iter_ancestors(self):
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def is_ancestor_of(self, other: "SurfaceNode") -> bool:
        return any(ancestor is self for ancestor in other.iter_ancestors())

    @property
    def depth(self) -> int:
        return sum(1 for _ in self.iter_ancestors())


class SurfaceNodeFactory:
    """Create nodes with ids ``<prefix>-<base36 counter>`` unique per build."""

    def __init__(self) -> None:
        self._counter = 0

    def next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}-{_base36(self._counter)}"

    def create_root(self, width: float, height: float, element: VisualElement | None = None) -> SurfaceNode:
        return SurfaceNode(
            id="root",
            kind=SurfaceKind.ROOT,
            role="root",
            bbox=BBox(0.0, 0.0, width, height),
            element=element,
        )

    def create(
        self,
        info: NodeInfo,
        bbox: BBox,
        *,
        element: VisualElement | None,
        text: str,
        synthetic: bool = False,
    ) -> SurfaceNode:
        return SurfaceNode(
            id=self.next_id(info.id_prefix),
            kind=info.kind,
            role=info.role,
            bbox=bbox,
            element=element,
            text=text,
            synthetic=synthetic,
        )


@dataclass(eq=False)
class SurfaceMap:
    """Surface tree plus its interactive atoms, owned by one rebuild."""

    root: SurfaceNode
    atoms: list[SurfaceNode]
    element_index: dict[VisualElement, SurfaceNode]
    origin: BBox
    container: VisualElement | None = field(default=None, repr=False)

    def node_for_element(self, element: VisualElement) -> SurfaceNode | None:
        return self.element_index.get(element)

    def find_by_ast_id(self, path: str) -> list[SurfaceNode]:
        return [atom for atom in self.atoms if atom.ast_node_id == path]

    def to_relative(self, x: float, y: float) -> tuple[float, float]:
        """Convert absolute (page) coordinates to container-relative ones."""

        return x - self.origin.left, y - self.origin.top


class SurfaceNodePlain(BaseModel):
    """JSON projection of a surface node for diagnostics and export."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    kind: str
    role: str
    operator_index: int | None = Field(default=None, alias="operatorIndex")
    bbox: dict[str, float]
    text: str = ""
    ast_node_id: str | None = Field(default=None, alias="astNodeId")
    children: list["SurfaceNodePlain"] = Field(default_factory=list)


def node_to_plain(node: SurfaceNode) -> SurfaceNodePlain:
    return SurfaceNodePlain(
        id=node.id,
        kind=SurfaceKind(node.kind).value,
        role=node.role,
        operator_index=node.operator_index,
        bbox=node.bbox.to_dict(),
        text=node.text,
        ast_node_id=node.ast_node_id,
        children=[node_to_plain(child) for child in node.children],
    )


def surface_map_to_dict(surface_map: SurfaceMap) -> dict:
    """Plain-object projection of the whole map (tree plus atom ids)."""

    return {
        "root": node_to_plain(surface_map.root).model_dump(by_alias=True, exclude_none=True),
        "atoms": [atom.id for atom in surface_map.atoms],
    }
