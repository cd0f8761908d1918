"""Keep a LaTeX AST and its rendered surface tree in lock-step."""

__version__ = "0.1.0"
