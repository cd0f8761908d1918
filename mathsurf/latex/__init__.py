"""LaTeX tokenizing, parsing, path assignment and instrumentation."""

from mathsurf.latex.instrument import (
    InstrumentationResult,
    build_ast_from_latex,
    instrument_from_ast,
    instrument_latex,
    strip_annotations,
    to_instrumented_latex,
)
from mathsurf.latex.parser import parse_latex, parse_latex_with_warnings
from mathsurf.latex.paths import (
    IntegerDescriptor,
    MixedDescriptor,
    OperatorDescriptor,
    augment_with_ids,
    child_paths,
    enumerate_integers,
    enumerate_mixed_numbers,
    enumerate_operators,
    is_valid_path,
)
from mathsurf.latex.tokenizer import Token, TokenKind, preprocess_mixed_numbers, tokenize_latex

__all__ = [
    "InstrumentationResult",
    "IntegerDescriptor",
    "MixedDescriptor",
    "OperatorDescriptor",
    "Token",
    "TokenKind",
    "augment_with_ids",
    "build_ast_from_latex",
    "child_paths",
    "enumerate_integers",
    "enumerate_mixed_numbers",
    "enumerate_operators",
    "instrument_from_ast",
    "instrument_latex",
    "is_valid_path",
    "parse_latex",
    "parse_latex_with_warnings",
    "preprocess_mixed_numbers",
    "strip_annotations",
    "to_instrumented_latex",
    "tokenize_latex",
]
