"""Renderer-neutral model of typeset output.

A ``VisualElement`` stands in for one element of the renderer's output tree:
its class tags, its own text, its absolute bounding box and the ``data-*``
attributes the renderer copied from ``\\htmlData`` annotations. Layout
snapshots exported from a browser can be loaded from JSON.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator

from mathsurf.surface.geometry import BBox

RENDER_CONTAINER_CLASS = "formula-render-area"


@dataclass(eq=False)
class VisualElement:
    classes: list[str] = field(default_factory=list)
    text: str = ""
    bbox: BBox = field(default_factory=lambda: BBox(0.0, 0.0, 0.0, 0.0))
    data: dict[str, str] = field(default_factory=dict)
    children: list["VisualElement"] = field(default_factory=list)
    parent: "VisualElement | None" = field(default=None, repr=False)

    def add(self, child: "VisualElement") -> "VisualElement":
        child.parent = self
        self.children.append(child)
        return child

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def text_content(self) -> str:
        """Own text followed by all descendant text, like DOM ``textContent``."""

        return self.text + "".join(child.text_content() for child in self.children)

    def iter_descendants(self):
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def select(self, ancestor_class: str, class_name: str) -> list["VisualElement"]:
        """Descendants tagged ``class_name`` inside an ``ancestor_class`` element.

        Mirrors the CSS selector ``.ancestor_class .class_name`` in document order.
        """

        out: list[VisualElement] = []

        def _rec(element: VisualElement, inside: bool) -> None:
            for child in element.children:
                if inside and child.has_class(class_name):
                    out.append(child)
                _rec(child, inside or child.has_class(ancestor_class))

        _rec(self, self.has_class(ancestor_class))
        return out


class BBoxPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    left: float
    top: float
    right: float
    bottom: float

    @model_validator(mode="after")
    def _validate_extent(self) -> "BBoxPayload":
        if self.right < self.left or self.bottom < self.top:
            raise ValueError("bbox right/bottom must be >= left/top")
        return self


class VisualElementPayload(BaseModel):
    """JSON shape of one element in a layout snapshot."""

    model_config = ConfigDict(extra="forbid")

    classes: list[str] = Field(default_factory=list)
    text: str = ""
    bbox: BBoxPayload
    data: dict[str, str] = Field(default_factory=dict)
    children: list["VisualElementPayload"] = Field(default_factory=list)


def _from_payload(payload: VisualElementPayload) -> VisualElement:
    box = payload.bbox
    element = VisualElement(
        classes=list(payload.classes),
        text=payload.text,
        bbox=BBox(box.left, box.top, box.right, box.bottom),
        data=dict(payload.data),
    )
    for child in payload.children:
        element.add(_from_payload(child))
    return element


def visual_tree_from_dict(payload: dict) -> VisualElement:
    """Validate a layout snapshot dict and build the element tree."""

    return _from_payload(VisualElementPayload.model_validate(payload))


def load_visual_tree(path: str) -> VisualElement:
    """Load a layout snapshot from a JSON file."""

    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return visual_tree_from_dict(payload)


def visual_tree_to_dict(element: VisualElement) -> dict:
    out: dict = {"classes": list(element.classes), "bbox": element.bbox.to_dict()}
    if element.text:
        out["text"] = element.text
    if element.data:
        out["data"] = dict(element.data)
    if element.children:
        out["children"] = [visual_tree_to_dict(child) for child in element.children]
    return out
