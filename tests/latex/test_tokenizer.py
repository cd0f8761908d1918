"""Tokenizer and mixed-number pre-pass tests."""

from __future__ import annotations

from mathsurf.latex.tokenizer import Token, TokenKind, preprocess_mixed_numbers, tokenize_latex


def _kinds(tokens: list[Token]) -> list[tuple[str, str]]:
    return [(tok.kind.value, tok.text) for tok in tokens]


def test_tokenize_simple_sum() -> None:
    tokens = preprocess_mixed_numbers(tokenize_latex("2+3"))
    assert tokens == [
        Token(TokenKind.NUMBER, "2"),
        Token(TokenKind.OP, "+"),
        Token(TokenKind.NUMBER, "3"),
    ]


def test_tokenize_commands_and_brackets() -> None:
    tokens = tokenize_latex(r"\left(12.5 \cdot \frac{1}{4}\right) \div 2")
    assert _kinds(preprocess_mixed_numbers(tokens)) == [
        ("LPAREN", "("),
        ("NUMBER", "12.5"),
        ("OP", "*"),
        ("FRAC", r"\frac"),
        ("LBRACE", "{"),
        ("NUMBER", "1"),
        ("RBRACE", "}"),
        ("LBRACE", "{"),
        ("NUMBER", "4"),
        ("RBRACE", "}"),
        ("RPAREN", ")"),
        ("OP", "/"),
        ("NUMBER", "2"),
    ]


def test_tokenize_collapses_whitespace_runs() -> None:
    tokens = tokenize_latex("1   2")
    assert _kinds(tokens) == [("NUMBER", "1"), ("SPACE", "   "), ("NUMBER", "2")]


def test_unknown_commands_and_characters_are_skipped() -> None:
    tokens = preprocess_mixed_numbers(tokenize_latex(r"\alpha 2 \, + ? 3"))
    assert _kinds(tokens) == [("NUMBER", "2"), ("OP", "+"), ("NUMBER", "3")]


def test_mixed_number_window_fuses_to_one_token() -> None:
    tokens = preprocess_mixed_numbers(tokenize_latex("1 2/3"))
    assert tokens == [Token(TokenKind.MIXED, "1_2_3")]


def test_mixed_number_requires_slash() -> None:
    tokens = preprocess_mixed_numbers(tokenize_latex("1 2*3"))
    assert [tok.kind for tok in tokens] == [
        TokenKind.NUMBER,
        TokenKind.NUMBER,
        TokenKind.OP,
        TokenKind.NUMBER,
    ]


def test_empty_input_has_no_tokens() -> None:
    assert tokenize_latex("") == []
    assert preprocess_mixed_numbers(tokenize_latex("   ")) == []
