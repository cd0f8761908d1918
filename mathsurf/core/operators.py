"""Operator registry mapping glyph variants to canonical operator symbols."""

from __future__ import annotations

from dataclasses import dataclass


def _normalize_surface(surface: str) -> str:
    return " ".join(surface.strip().split())


@dataclass(frozen=True, slots=True)
class OperatorSpec:
    """Canonical operator metadata shared by the parser and the surface map."""

    canonical_id: str
    symbol: str
    surface_forms: tuple[str, ...]
    precedence: int
    display_latex: str
    relation: bool = False


class OperatorRegistry:
    """Deterministic lookup table for operator glyphs and canonical symbols."""

    def __init__(self, specs: list[OperatorSpec]) -> None:
        self._specs: tuple[OperatorSpec, ...] = tuple(specs)
        self._by_surface: dict[str, OperatorSpec] = {}
        self._by_symbol: dict[str, OperatorSpec] = {}

        for spec in self._specs:
            if spec.symbol not in self._by_symbol:
                self._by_symbol[spec.symbol] = spec
            for surface in (spec.symbol, *spec.surface_forms):
                normalized = _normalize_surface(surface)
                if normalized and normalized not in self._by_surface:
                    self._by_surface[normalized] = spec

    def lookup(self, surface: str) -> OperatorSpec | None:
        """Lookup operator spec by glyph or LaTeX command (e.g. ``\\cdot``)."""

        return self._by_surface.get(_normalize_surface(surface))

    def canonical(self, symbol: str) -> OperatorSpec | None:
        """Lookup operator spec by canonical symbol (e.g. ``"*"``)."""

        return self._by_symbol.get(symbol)

    def all_symbols(self) -> set[str]:
        """Return all canonical symbols represented by this registry."""

        return set(self._by_symbol.keys())


DEFAULT_REGISTRY = OperatorRegistry(
    [
        OperatorSpec(
            canonical_id="add",
            symbol="+",
            surface_forms=("+",),
            precedence=1,
            display_latex="+",
        ),
        OperatorSpec(
            canonical_id="sub",
            symbol="-",
            surface_forms=("-", "−"),
            precedence=1,
            display_latex="-",
        ),
        OperatorSpec(
            canonical_id="mul",
            symbol="*",
            surface_forms=("*", "×", "·", "⋅", "∗", r"\cdot", r"\times"),
            precedence=2,
            display_latex=r"\cdot",
        ),
        OperatorSpec(
            canonical_id="div",
            symbol="/",
            surface_forms=("/", ":", "÷", r"\div"),
            precedence=2,
            display_latex=r"\div",
        ),
        OperatorSpec(
            canonical_id="eq",
            symbol="=",
            surface_forms=("=",),
            precedence=0,
            display_latex="=",
            relation=True,
        ),
    ]
)

# Single characters the tokenizer and classifier treat as operator glyphs.
OPERATOR_CHARS = frozenset("+-−*×·⋅∗/:÷")
MINUS_GLYPHS = frozenset({"-", "−"})


def normalize_operator(surface: str, registry: OperatorRegistry = DEFAULT_REGISTRY) -> str:
    """Collapse a glyph variant to its canonical symbol; unknown glyphs pass through."""

    spec = registry.lookup(surface)
    if spec is None:
        return surface.strip()
    return spec.symbol


def display_operator(symbol: str, registry: OperatorRegistry = DEFAULT_REGISTRY) -> str:
    """Return the LaTeX used to typeset a canonical operator symbol."""

    spec = registry.canonical(symbol)
    if spec is None:
        return symbol
    return spec.display_latex


def precedence(symbol: str, registry: OperatorRegistry = DEFAULT_REGISTRY) -> int:
    spec = registry.canonical(symbol)
    return 0 if spec is None else spec.precedence
