"""Rebuild session owning the single active surface map.

A rebuild runs parse, augment and instrument, then hands the LaTeX to an
external renderer. Its output is built, enhanced and correlated, and only
installed when the ticket is still the latest one requested. Queries always
run against the installed map.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from mathsurf.core.ast import AstNode
from mathsurf.core.config import DEFAULT_CONFIG, SurfaceConfig
from mathsurf.latex.instrument import InstrumentationResult, instrument_with_warnings
from mathsurf.surface.builder import SurfaceMapBuilder
from mathsurf.surface.correlate import CorrelationSummary, correlate_with_ast
from mathsurf.surface.enhancer import SurfaceMapEnhancer
from mathsurf.surface.hittest import hit_test_point
from mathsurf.surface.node import SurfaceMap, SurfaceNode
from mathsurf.surface.operands import OperandPair, OperatorSelection, find_operands
from mathsurf.surface.visual import VisualElement
from mathsurf.trace import EventSink, RebuildEventKind, new_event


@dataclass(frozen=True)
class RebuildTicket:
    """Handle for one requested rebuild; ``render_latex`` goes to the renderer."""

    generation: int
    latex: str
    ast: AstNode | None
    instrumentation: InstrumentationResult
    render_latex: str

    @property
    def instrumented(self) -> bool:
        return self.instrumentation.success


class SurfaceSession:
    def __init__(
        self,
        config: SurfaceConfig | None = None,
        trace_logger: EventSink | None = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.trace_logger = trace_logger
        self.events: list[dict] = []
        self.last_summary: CorrelationSummary | None = None
        self._builder = SurfaceMapBuilder(config=self.config)
        self._enhancer = SurfaceMapEnhancer(self.config)
        self._generation = 0
        self._active: SurfaceMap | None = None
        self._active_ticket: RebuildTicket | None = None

    @property
    def active_map(self) -> SurfaceMap | None:
        return self._active

    @property
    def active_ticket(self) -> RebuildTicket | None:
        return self._active_ticket

    @property
    def generation(self) -> int:
        return self._generation

    def _record(self, kind: RebuildEventKind, message: str, *, generation: int, data: dict | None = None) -> None:
        event = new_event(kind, message, data=data, generation=generation)
        self.events.append(event)
        if self.trace_logger is not None:
            self.trace_logger.append(event)

    def request(self, latex: str) -> RebuildTicket:
        """Start a rebuild for ``latex``; any earlier ticket becomes stale."""

        self._generation += 1
        generation = self._generation
        self._record(RebuildEventKind.REQUEST, "rebuild requested", generation=generation, data={"latex": latex})

        ast, instrumentation, warnings = instrument_with_warnings(latex)
        if instrumentation.success:
            render_latex = instrumentation.latex
            self._record(
                RebuildEventKind.INSTRUMENT,
                "instrumented latex",
                generation=generation,
                data={"warnings": warnings} if warnings else None,
            )
        else:
            render_latex = latex
            self._record(
                RebuildEventKind.ERROR,
                "instrumentation failed; rendering plain latex",
                generation=generation,
                data={"reason": instrumentation.reason, "latex": latex, "warnings": warnings},
            )

        return RebuildTicket(
            generation=generation,
            latex=latex,
            ast=ast if instrumentation.success else None,
            instrumentation=instrumentation,
            render_latex=render_latex,
        )

    def complete(self, ticket: RebuildTicket, rendered: VisualElement) -> SurfaceMap | None:
        """Build the map for ``rendered`` and install it unless ``ticket`` is stale."""

        generation = ticket.generation
        if generation != self._generation:
            self._record(
                RebuildEventKind.DISCARD,
                "stale rebuild discarded",
                generation=generation,
                data={"latest": self._generation},
            )
            return None

        surface_map = self._builder.build(rendered)
        self._record(
            RebuildEventKind.BUILD,
            "surface map built",
            generation=generation,
            data={"atoms": len(surface_map.atoms)},
        )
        self._enhancer.enhance(surface_map)
        self._record(RebuildEventKind.ENHANCE, "surface map enhanced", generation=generation)

        if ticket.ast is not None:
            summary = correlate_with_ast(surface_map, ticket.ast, self.config)
            self.last_summary = summary
            self._record(
                RebuildEventKind.CORRELATE,
                "correlated with ast",
                generation=generation,
                data={
                    "integers": summary.integers,
                    "operators": summary.operators,
                    "mixed_numbers": summary.mixed_numbers,
                },
            )
        else:
            self.last_summary = None

        self._active = surface_map
        self._active_ticket = ticket
        self._record(RebuildEventKind.INSTALL, "surface map installed", generation=generation)
        return surface_map

    def rebuild(self, latex: str, render: Callable[[str], VisualElement]) -> SurfaceMap | None:
        """Request, render synchronously and complete in one call."""

        ticket = self.request(latex)
        try:
            rendered = render(ticket.render_latex)
        except Exception as exc:
            self._record(
                RebuildEventKind.ERROR,
                "renderer failed",
                generation=ticket.generation,
                data={"error": str(exc)},
            )
            raise
        self._record(RebuildEventKind.RENDER, "rendered", generation=ticket.generation)
        return self.complete(ticket, rendered)

    def hit_test(self, x: float, y: float) -> SurfaceNode | None:
        if self._active is None:
            return None
        return hit_test_point(self._active, x, y, self.config)

    def operands(self, operator_path: str) -> OperandPair | None:
        if self._active is None:
            return None
        return find_operands(self._active, operator_path, self.config)

    def select_operator(self, node: SurfaceNode | None) -> OperatorSelection | None:
        if self._active is None:
            return None
        return OperatorSelection.create(node, self._active, self.config)
