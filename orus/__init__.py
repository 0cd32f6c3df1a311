"""Compiler front-end pieces for the Orus language: types, symbols and diagnostics."""

__version__ = "0.1.0"

__all__ = ["diagnostics", "reporter", "runtime", "symbols", "typesys"]