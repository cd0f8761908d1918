"""AST node definitions for arithmetic LaTeX expressions."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class IntegerNode(BaseModel):
    """Numeric literal; the sign of a folded unary minus lives in ``value``."""

    node: Literal["integer"]
    value: str = Field(min_length=1)
    path: str | None = None


class BinaryOpNode(BaseModel):
    """Binary arithmetic operation with a normalized operator symbol."""

    node: Literal["binaryOp"]
    op: Literal["+", "-", "*", "/"]
    left: "AstNode"
    right: "AstNode"
    path: str | None = None


class UnaryOpNode(BaseModel):
    """Unary minus applied to a non-literal or already negative operand."""

    node: Literal["unaryOp"]
    op: Literal["-"] = "-"
    arg: "AstNode"
    path: str | None = None


class FractionNode(BaseModel):
    """Typeset fraction ``\\frac{num}{den}``."""

    node: Literal["fraction"]
    args: list["AstNode"] = Field(min_length=2, max_length=2)
    path: str | None = None

    @property
    def numerator(self) -> "AstNode":
        return self.args[0]

    @property
    def denominator(self) -> "AstNode":
        return self.args[1]


class MixedNode(BaseModel):
    """Mixed number such as ``1\\frac{2}{3}``."""

    node: Literal["mixed"]
    whole: str = Field(min_length=1)
    numerator: str = Field(min_length=1)
    denominator: str = Field(min_length=1)
    path: str | None = None


AstNode = Annotated[
    Union[
        IntegerNode,
        BinaryOpNode,
        UnaryOpNode,
        FractionNode,
        MixedNode,
    ],
    Field(discriminator="node"),
]


def parse_ast(data: dict) -> AstNode:
    """Parse and validate a dict into an AstNode."""

    return TypeAdapter(AstNode).validate_python(data)


def ast_to_dict(ast: AstNode, *, include_paths: bool = True) -> dict:
    """Serialize an AstNode into a dict."""

    if include_paths:
        return ast.model_dump(exclude_none=True)
    return _strip_paths(ast.model_dump(exclude_none=True))


def _strip_paths(payload):
    if isinstance(payload, dict):
        return {key: _strip_paths(value) for key, value in payload.items() if key != "path"}
    if isinstance(payload, list):
        return [_strip_paths(item) for item in payload]
    return payload
