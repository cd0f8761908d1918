"""Read and write the ``data-*`` annotations the renderer places on elements."""

from __future__ import annotations

from pydantic import BaseModel, Field

from mathsurf.surface.classifier import SurfaceKind
from mathsurf.surface.node import SurfaceMap, SurfaceNode
from mathsurf.surface.visual import RENDER_CONTAINER_CLASS, VisualElement

AST_ID_KEY = "ast-id"
ROLE_KEY = "role"
OPERATOR_KEY = "operator"

# Atoms a user can act on; each should end up with a stable id.
INTERACTIVE_KINDS = frozenset(
    {
        SurfaceKind.NUM,
        SurfaceKind.DECIMAL,
        SurfaceKind.MIXED_NUMBER,
        SurfaceKind.BINARY_OP,
        SurfaceKind.MINUS_BINARY,
    }
)
_NUMBER_KINDS = frozenset({SurfaceKind.NUM, SurfaceKind.DECIMAL, SurfaceKind.MIXED_NUMBER})


def _find_annotated(element: VisualElement | None) -> VisualElement | None:
    """Nearest element (self first) carrying ``ast-id``, stopping at the container."""

    while element is not None:
        if element.data.get(AST_ID_KEY):
            return element
        if element.has_class(RENDER_CONTAINER_CLASS):
            return None
        element = element.parent
    return None


def recover_annotations(surface_map: SurfaceMap) -> int:
    """Fill ``ast_node_id`` of uncorrelated atoms from renderer annotations.

    This is a lower-confidence alternative to positional correlation. Returns
    the number of atoms updated.
    """

    recovered = 0
    for atom in surface_map.atoms:
        if atom.ast_node_id:
            continue
        annotated = _find_annotated(atom.element)
        if annotated is None:
            continue
        atom.ast_node_id = annotated.data[AST_ID_KEY]
        role = annotated.data.get(ROLE_KEY)
        if role:
            atom.role = role
        operator = annotated.data.get(OPERATOR_KEY)
        if operator and atom.ast_operator is None:
            atom.ast_operator = operator
        atom.meta["recoveredFromAnnotation"] = True
        recovered += 1
    return recovered


def inject_annotations(surface_map: SurfaceMap) -> int:
    """Write correlated ids back onto visual elements that lack them."""

    injected = 0
    for atom in surface_map.atoms:
        element = atom.element
        if element is None or not atom.ast_node_id or element.data.get(AST_ID_KEY):
            continue
        element.data[AST_ID_KEY] = atom.ast_node_id
        if atom.kind in _NUMBER_KINDS:
            element.data[ROLE_KEY] = "number"
        elif atom.ast_operator is not None:
            element.data[ROLE_KEY] = "operator"
            element.data[OPERATOR_KEY] = atom.ast_operator
        injected += 1
    return injected


class StableIdReport(BaseModel):
    """Which interactive atoms did not receive a stable id."""

    checked: int = 0
    missing: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing


def stable_id_report(surface_map: SurfaceMap) -> StableIdReport:
    interactive: list[SurfaceNode] = [
        atom for atom in surface_map.atoms if atom.kind in INTERACTIVE_KINDS
    ]
    return StableIdReport(
        checked=len(interactive),
        missing=[atom.id for atom in interactive if not atom.ast_node_id],
    )
