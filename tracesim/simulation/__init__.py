"""Simulation package shim.

Exposes the command-line entry point at `tracesim.simulation` so both
`run.py` and the installed `tracesim` script share one `main()`.
"""
from .driver import main

__all__ = ["main"]
