"""Evaluator helper modules for the formula runtime."""

__all__ = [
    "bind",
    "common",
    "expr",
    "fn",
]
