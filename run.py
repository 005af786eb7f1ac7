"""Entry point for the trace-driven cache simulator.

Usage:
    python run.py trace_path cache_size cache_associativity cache_block_size
    python run.py --help    # all options
"""
import sys

from tracesim.simulation import main


if __name__ == '__main__':
    sys.exit(main())
