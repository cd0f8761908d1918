"""Build, enhance and correlate a surface map from a rendered layout snapshot.

The layout is a JSON dump of the renderer's element tree (classes, text,
absolute boxes, data attributes) produced for ``--latex``'s instrumented form.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from mathsurf.core.config import SurfaceConfig
from mathsurf.session import SurfaceSession
from mathsurf.surface.annotations import recover_annotations, stable_id_report
from mathsurf.surface.node import SurfaceNode, surface_map_to_dict
from mathsurf.surface.visual import load_visual_tree
from mathsurf.trace import BestEffortTraceLogger


def _describe(node: SurfaceNode | None) -> str:
    if node is None:
        return "none"
    return f"{node.id} kind={node.kind.value} ast={node.ast_node_id or '-'} text={node.text!r}"


def main(argv: list[str] | None = None) -> int:
    """Run the surface map CLI."""

    parser = argparse.ArgumentParser(description="Build a surface map from a layout JSON.")
    parser.add_argument("layout", help="Path to rendered layout JSON.")
    parser.add_argument("--latex", required=True, help="Source LaTeX that was rendered.")
    parser.add_argument(
        "--hit",
        nargs=2,
        type=float,
        metavar=("X", "Y"),
        help="Hit-test an absolute point.",
    )
    parser.add_argument("--operands", metavar="PATH", help="Find operands of the operator at PATH.")
    parser.add_argument("--out", help="Write the surface map projection as JSON.")
    parser.add_argument("--trace-out", help="Append rebuild events to this JSONL file.")
    args = parser.parse_args(argv)
    trace_logger: BestEffortTraceLogger | None = None

    try:
        if args.trace_out:
            trace_logger = BestEffortTraceLogger(args.trace_out)
        session = SurfaceSession(config=SurfaceConfig.from_env(), trace_logger=trace_logger)

        ticket = session.request(args.latex)
        if not ticket.instrumented:
            print(f"WARNING: {ticket.instrumentation.reason}; click targeting disabled")
        container = load_visual_tree(args.layout)
        surface_map = session.complete(ticket, container)
        if surface_map is None:
            print("ERROR: rebuild was discarded")
            return 1

        recovered = recover_annotations(surface_map)
        if recovered:
            print(f"WARNING: {recovered} atom(s) joined from annotations only")
        report = stable_id_report(surface_map)
        if not report.ok:
            print(f"WARNING: {len(report.missing)} interactive atom(s) without ast id: {', '.join(report.missing)}")

        if args.hit is not None:
            x, y = args.hit
            print(f"HIT: {_describe(session.hit_test(x, y))}")

        if args.operands:
            pair = session.operands(args.operands)
            if pair is None:
                print("OPERANDS: none")
            else:
                print(f"OPERANDS: left={_describe(pair.left)} right={_describe(pair.right)}")

        if args.out:
            out_path = Path(args.out)
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_text(
                json.dumps(surface_map_to_dict(surface_map), ensure_ascii=False, indent=2) + "\n",
                encoding="utf-8",
            )

        summary = session.last_summary
        correlated = "" if summary is None else (
            f" integers={summary.integers} operators={summary.operators} mixed={summary.mixed_numbers}"
        )
        print(f"OK: atoms={len(surface_map.atoms)}{correlated}")
        return 0
    except Exception as exc:  # noqa: BLE001 - CLI boundary
        print(f"ERROR: {exc}")
        return 1
    finally:
        if trace_logger is not None:
            trace_logger.close()


if __name__ == "__main__":
    raise SystemExit(main())
