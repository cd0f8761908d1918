"""Surface map: semantic model of rendered output, correlated with the AST."""

from mathsurf.surface.annotations import (
    StableIdReport,
    inject_annotations,
    recover_annotations,
    stable_id_report,
)
from mathsurf.surface.builder import SurfaceMapBuilder, build_surface_map
from mathsurf.surface.classifier import ContentSegmenter, ElementClassifier, NodeInfo, SurfaceKind
from mathsurf.surface.correlate import (
    CorrelationSummary,
    correlate_integers,
    correlate_mixed_numbers,
    correlate_operators,
    correlate_with_ast,
    ordered_leaves,
)
from mathsurf.surface.enhancer import SurfaceMapEnhancer, enhance_surface_map
from mathsurf.surface.geometry import BBox
from mathsurf.surface.hittest import hit_test_point
from mathsurf.surface.node import SurfaceMap, SurfaceNode, SurfaceNodeFactory, surface_map_to_dict
from mathsurf.surface.operands import OperandPair, OperatorSelection, find_operands
from mathsurf.surface.visual import VisualElement, load_visual_tree, visual_tree_from_dict

__all__ = [
    "BBox",
    "ContentSegmenter",
    "CorrelationSummary",
    "ElementClassifier",
    "NodeInfo",
    "OperandPair",
    "OperatorSelection",
    "StableIdReport",
    "SurfaceKind",
    "SurfaceMap",
    "SurfaceMapBuilder",
    "SurfaceMapEnhancer",
    "SurfaceNode",
    "SurfaceNodeFactory",
    "VisualElement",
    "build_surface_map",
    "correlate_integers",
    "correlate_mixed_numbers",
    "correlate_operators",
    "correlate_with_ast",
    "enhance_surface_map",
    "find_operands",
    "hit_test_point",
    "inject_annotations",
    "load_visual_tree",
    "ordered_leaves",
    "recover_annotations",
    "stable_id_report",
    "surface_map_to_dict",
    "visual_tree_from_dict",
]
