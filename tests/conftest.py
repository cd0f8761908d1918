"""Shared fixtures: a small KaTeX-like layout stub.

``render_katex(latex)`` lays out the subset of LaTeX the instrumenter emits
(numbers, ``+ - \\cdot \\div``, parentheses, ``\\frac`` and ``\\htmlData``)
into a ``VisualElement`` tree shaped like KaTeX's HTML output, with absolute
boxes inside a ``formula-render-area`` container at ``ORIGIN``.

Metrics: glyphs are 10px wide and 20px tall around the axis; binary
operators get 8px spacers on both sides; fraction numerators/denominators sit
12px above/below the axis, centred over a 1px rule.
"""

from __future__ import annotations

import pytest

from mathsurf.surface.geometry import BBox
from mathsurf.surface.visual import RENDER_CONTAINER_CLASS, VisualElement

ORIGIN = (100.0, 50.0)
HEIGHT = 60.0
AXIS_Y = ORIGIN[1] + HEIGHT / 2
GLYPH_W = 10.0
GLYPH_H = 20.0
SPACE_W = 8.0
NULLDELIM_W = 2.0
FRAC_SHIFT = 12.0

_COMMAND_GLYPHS = {"cdot": "⋅", "times": "×", "div": "÷"}
_CHAR_GLYPHS = {"+": "+", "-": "−", "*": "∗", "/": "/"}
_UNFITTED = ("mspace", "pstrut")


def _read_raw_group(src: str, i: int) -> tuple[str, int]:
    while src[i].isspace():
        i += 1
    assert src[i] == "{", f"expected '{{' at {i} in {src!r}"
    end = src.index("}", i)
    return src[i + 1 : end], end + 1


def _read_group(src: str, i: int) -> tuple[list, int]:
    while src[i].isspace():
        i += 1
    assert src[i] == "{", f"expected '{{' at {i} in {src!r}"
    return _read_items(src, i + 1, "}")


def _parse_meta(meta: str) -> dict[str, str]:
    out: dict[str, str] = {}
    for part in meta.split(","):
        key, _, value = part.strip().partition("=")
        out[key] = value
    return out


def _read_items(src: str, i: int, stop: str | None) -> tuple[list, int]:
    items: list = []
    n = len(src)
    while i < n:
        ch = src[i]
        if stop is not None and ch == stop:
            return items, i + 1
        if ch.isspace():
            i += 1
        elif ch.isdigit():
            j = i + 1
            while j < n and (src[j].isdigit() or src[j] == "."):
                j += 1
            items.append(("num", src[i:j]))
            i = j
        elif ch == "\\":
            j = i + 1
            while j < n and src[j].isalpha():
                j += 1
            name = src[i + 1 : j]
            i = j
            if name == "htmlData":
                meta, i = _read_raw_group(src, i)
                body, i = _read_group(src, i)
                items.append(("html", _parse_meta(meta), body))
            elif name == "frac":
                num, i = _read_group(src, i)
                den, i = _read_group(src, i)
                items.append(("frac", num, den))
            elif name in _COMMAND_GLYPHS:
                items.append(("op", _COMMAND_GLYPHS[name]))
        elif ch in "([":
            items.append(("open", ch))
            i += 1
        elif ch in ")]":
            items.append(("close", ch))
            i += 1
        elif ch in _CHAR_GLYPHS:
            items.append(("op", _CHAR_GLYPHS[ch]))
            i += 1
        elif ch == "{":
            group, i = _read_items(src, i + 1, "}")
            items.extend(group)
        else:
            i += 1
    return items, i


class _Layout:
    def __init__(self) -> None:
        self.last: str | None = None

    def _glyph(self, parent: VisualElement, classes: list[str], text: str, x: float, cy: float) -> float:
        width = GLYPH_W * len(text)
        parent.add(
            VisualElement(
                classes=classes,
                text=text,
                bbox=BBox(x, cy - GLYPH_H / 2, x + width, cy + GLYPH_H / 2),
            )
        )
        return x + width

    def _space(self, parent: VisualElement, x: float, cy: float) -> float:
        parent.add(VisualElement(classes=["mspace"], bbox=BBox(x, cy, x + SPACE_W, cy)))
        return x + SPACE_W

    def place(self, items: list, x: float, cy: float, parent: VisualElement) -> float:
        for item in items:
            tag = item[0]
            if tag == "num":
                x = self._glyph(parent, ["mord"], item[1], x, cy)
                self.last = "ord"
            elif tag == "op":
                if self.last in {"ord", "close"}:
                    x = self._space(parent, x, cy)
                    x = self._glyph(parent, ["mbin"], item[1], x, cy)
                    x = self._space(parent, x, cy)
                else:
                    x = self._glyph(parent, ["mord"], item[1], x, cy)
                self.last = "bin"
            elif tag == "open":
                x = self._glyph(parent, ["mopen"], item[1], x, cy)
                self.last = "open"
            elif tag == "close":
                x = self._glyph(parent, ["mclose"], item[1], x, cy)
                self.last = "close"
            elif tag == "html":
                wrapper = parent.add(VisualElement(classes=["enclosing"], data=dict(item[1])))
                x = self.place(item[2], x, cy, wrapper)
            elif tag == "frac":
                x = self._fraction(item[1], item[2], x, cy, parent)
                self.last = "ord"
        return x

    def _stack(self, items: list, cy: float) -> tuple[VisualElement, float]:
        sizing = VisualElement(classes=["sizing", "reset-size6", "size3", "mtight"])
        saved = self.last
        self.last = None
        width = self.place(items, 0.0, cy, sizing)
        self.last = saved
        return sizing, width

    def _fraction(self, num: list, den: list, x: float, cy: float, parent: VisualElement) -> float:
        num_sizing, num_w = self._stack(num, cy - FRAC_SHIFT)
        den_sizing, den_w = self._stack(den, cy + FRAC_SHIFT)
        width = max(num_w, den_w)
        left = x + NULLDELIM_W
        _shift(num_sizing, left + (width - num_w) / 2)
        _shift(den_sizing, left + (width - den_w) / 2)

        outer = parent.add(VisualElement(classes=["mord"]))
        outer.add(
            VisualElement(
                classes=["mopen", "nulldelimiter"],
                bbox=BBox(x, cy - GLYPH_H / 2, left, cy + GLYPH_H / 2),
            )
        )
        mfrac = outer.add(VisualElement(classes=["mfrac"]))
        vlist = (
            mfrac.add(VisualElement(classes=["vlist-t", "vlist-t2"]))
            .add(VisualElement(classes=["vlist-r"]))
            .add(VisualElement(classes=["vlist"]))
        )

        # KaTeX emits the denominator first.
        den_wrap = vlist.add(VisualElement())
        den_wrap.add(VisualElement(classes=["pstrut"], bbox=BBox(left, cy, left, cy)))
        den_wrap.add(den_sizing)

        line_wrap = vlist.add(VisualElement())
        line_wrap.add(VisualElement(classes=["pstrut"], bbox=BBox(left, cy, left, cy)))
        line_wrap.add(
            VisualElement(classes=["frac-line"], bbox=BBox(left, cy - 0.5, left + width, cy + 0.5))
        )

        num_wrap = vlist.add(VisualElement())
        num_wrap.add(VisualElement(classes=["pstrut"], bbox=BBox(left, cy, left, cy)))
        num_wrap.add(num_sizing)

        right = left + width
        outer.add(
            VisualElement(
                classes=["mclose", "nulldelimiter"],
                bbox=BBox(right, cy - GLYPH_H / 2, right + NULLDELIM_W, cy + GLYPH_H / 2),
            )
        )
        return right + NULLDELIM_W


def _shift(element: VisualElement, dx: float) -> None:
    for child in element.children:
        child.bbox = BBox(child.bbox.left + dx, child.bbox.top, child.bbox.right + dx, child.bbox.bottom)
        _shift(child, dx)


def _fit(element: VisualElement) -> BBox | None:
    """Give container elements the union box of their visible children."""

    boxes = []
    for child in element.children:
        box = _fit(child)
        if box is not None and not any(cls in _UNFITTED for cls in child.classes):
            boxes.append(box)
    if element.children and boxes:
        element.bbox = BBox(
            min(b.left for b in boxes),
            min(b.top for b in boxes),
            max(b.right for b in boxes),
            max(b.bottom for b in boxes),
        )
    return element.bbox


def render_katex(latex: str) -> VisualElement:
    items, _ = _read_items(latex, 0, None)
    base = VisualElement(classes=["base"])
    right = _Layout().place(items, ORIGIN[0], AXIS_Y, base)
    katex_html = VisualElement(classes=["katex-html"])
    katex_html.add(base)
    katex = VisualElement(classes=["katex"])
    katex.add(katex_html)
    _fit(katex)

    container = VisualElement(
        classes=[RENDER_CONTAINER_CLASS],
        bbox=BBox(ORIGIN[0], ORIGIN[1], max(right, ORIGIN[0] + 1.0) + 20.0, ORIGIN[1] + HEIGHT),
    )
    container.add(katex)
    return container


@pytest.fixture
def render():
    """The stub renderer, as a ``latex -> VisualElement`` callable."""

    return render_katex


@pytest.fixture
def absolute():
    """Convert container-relative coordinates of a node centre to page coordinates."""

    def _absolute(node) -> tuple[float, float]:
        return ORIGIN[0] + node.bbox.center_x, ORIGIN[1] + node.bbox.mid_y

    return _absolute
