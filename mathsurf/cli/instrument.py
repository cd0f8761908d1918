"""Instrument a LaTeX expression with structural path annotations."""

from __future__ import annotations

import argparse
import json

from mathsurf.core.ast import ast_to_dict
from mathsurf.latex.instrument import instrument_with_warnings


def main(argv: list[str] | None = None) -> int:
    """Run the instrumentation CLI."""

    parser = argparse.ArgumentParser(description="Annotate LaTeX with AST paths.")
    parser.add_argument("latex", help="LaTeX expression, e.g. '2+\\frac{1}{3}'.")
    parser.add_argument("--print-ast", action="store_true", help="Also print the augmented AST.")
    parser.add_argument("--evaluate", action="store_true", help="Also evaluate exactly with SymPy.")
    parser.add_argument("--json", dest="as_json", action="store_true", help="Print one JSON object.")
    args = parser.parse_args(argv)

    try:
        ast, result, warnings = instrument_with_warnings(args.latex)

        value = None
        if args.evaluate and ast is not None:
            from mathsurf.solve.sympy_bridge import ast_to_sympy

            value, eval_warnings = ast_to_sympy(ast)
            warnings = warnings + eval_warnings

        if args.as_json:
            payload = result.model_dump()
            payload["warnings"] = warnings
            if args.print_ast:
                payload["ast"] = ast_to_dict(ast) if ast is not None else None
            if args.evaluate:
                payload["value"] = None if value is None else str(value)
            print(json.dumps(payload, ensure_ascii=False, sort_keys=True))
            return 0 if result.success else 1

        for warning in warnings:
            print(f"WARNING: {warning}")
        if not result.success:
            print(f"ERROR: {result.reason}")
            return 1
        print(f"OK: {result.latex}")
        if args.print_ast:
            print(json.dumps(ast_to_dict(ast), ensure_ascii=False, indent=2))
        if args.evaluate and value is not None:
            print(f"VALUE: {value}")
        return 0
    except Exception as exc:  # noqa: BLE001 - CLI boundary
        print(f"ERROR: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
