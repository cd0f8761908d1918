"""Locate the operand surface nodes of an operator for smart selection."""

from __future__ import annotations

from dataclasses import dataclass

from mathsurf.core.config import DEFAULT_CONFIG, SurfaceConfig
from mathsurf.latex.paths import child_paths
from mathsurf.surface.classifier import SurfaceKind
from mathsurf.surface.geometry import BBox
from mathsurf.surface.node import SurfaceMap, SurfaceNode

OPERAND_KINDS = frozenset(
    {
        SurfaceKind.NUM,
        SurfaceKind.VAR,
        SurfaceKind.FRACTION,
        SurfaceKind.DECIMAL,
        SurfaceKind.MIXED_NUMBER,
    }
)
SELECTABLE_OPERATOR_KINDS = frozenset(
    {SurfaceKind.BINARY_OP, SurfaceKind.OP, SurfaceKind.MINUS_BINARY}
)


@dataclass(slots=True)
class OperandPair:
    left: SurfaceNode | None
    right: SurfaceNode | None


def _matches(ast_id: str, path: str) -> bool:
    return ast_id == path or ast_id.startswith(path + ".")


def find_operands(
    surface_map: SurfaceMap,
    operator_path: str,
    config: SurfaceConfig | None = None,
) -> OperandPair | None:
    """Find left/right operands of the operator at ``operator_path``.

    Exact or prefix matches of the expected child paths win; geometric
    adjacency to the operator fills whichever side is still missing.
    """

    if not operator_path:
        return None
    cfg = config or DEFAULT_CONFIG
    left_path, right_path = child_paths(operator_path)

    left: SurfaceNode | None = None
    right: SurfaceNode | None = None
    for atom in surface_map.atoms:
        if not atom.ast_node_id:
            continue
        if _matches(atom.ast_node_id, left_path) and (atom.ast_node_id == left_path or left is None):
            left = atom
        if _matches(atom.ast_node_id, right_path) and (atom.ast_node_id == right_path or right is None):
            right = atom

    if left is None or right is None:
        operator = next(
            (atom for atom in surface_map.atoms if atom.ast_node_id == operator_path), None
        )
        if operator is not None:
            left, right = _geometric_fallback(surface_map, operator, left, right, cfg)

    return OperandPair(left=left, right=right)


def _geometric_fallback(
    surface_map: SurfaceMap,
    operator: SurfaceNode,
    left: SurfaceNode | None,
    right: SurfaceNode | None,
    cfg: SurfaceConfig,
) -> tuple[SurfaceNode | None, SurfaceNode | None]:
    op_center = operator.bbox.center_x
    op_mid_y = operator.bbox.mid_y
    candidates = [
        atom
        for atom in surface_map.atoms
        if atom is not operator
        and atom.kind in OPERAND_KINDS
        and abs(atom.bbox.mid_y - op_mid_y) < cfg.operand_center_tolerance_px
    ]
    if left is None:
        lefts = [atom for atom in candidates if atom.bbox.right <= op_center]
        if lefts:
            left = max(lefts, key=lambda atom: atom.bbox.right)
    if right is None:
        rights = [atom for atom in candidates if atom.bbox.left >= op_center]
        if rights:
            right = min(rights, key=lambda atom: atom.bbox.left)
    return left, right


class OperatorSelection:
    """An operator atom together with its operand atoms, for highlighting."""

    def __init__(
        self,
        operator: SurfaceNode,
        left: SurfaceNode | None,
        right: SurfaceNode | None,
        ast_path: str,
        symbol: str,
    ) -> None:
        self.operator = operator
        self.left = left
        self.right = right
        self.ast_path = ast_path
        self.symbol = symbol

    @classmethod
    def create(
        cls,
        operator: SurfaceNode | None,
        surface_map: SurfaceMap,
        config: SurfaceConfig | None = None,
    ) -> "OperatorSelection | None":
        """Build a selection for a correlated operator atom, else ``None``."""

        if operator is None or operator.kind not in SELECTABLE_OPERATOR_KINDS:
            return None
        if not operator.ast_node_id:
            return None
        operands = find_operands(surface_map, operator.ast_node_id, config)
        if operands is None:
            return None
        return cls(
            operator,
            operands.left,
            operands.right,
            operator.ast_node_id,
            operator.text or "?",
        )

    def is_complete(self) -> bool:
        return self.left is not None and self.right is not None

    def bounding_boxes(self) -> list[tuple[str, SurfaceNode, BBox]]:
        out: list[tuple[str, SurfaceNode, BBox]] = [("operator", self.operator, self.operator.bbox)]
        if self.left is not None:
            out.append(("left-operand", self.left, self.left.bbox))
        if self.right is not None:
            out.append(("right-operand", self.right, self.right.bbox))
        return out
