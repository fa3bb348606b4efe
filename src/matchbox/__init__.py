"""matchbox: a type checker and interpreter for a small language with
algebraic data types and pattern matching."""

__version__ = "0.1.0"
