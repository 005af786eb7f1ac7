"""Test configuration for pytest.

Ensure the repository root is on sys.path so tests can import the `tracesim`
package without needing PYTHONPATH set externally, and provide a helper
fixture for writing trace files.
"""
import os
import sys

import pytest

# Compute project root: two directories above this file (tracesim/tests -> tracesim -> project root)
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


@pytest.fixture
def write_trace(tmp_path):
    """Write `lines` to a trace file under tmp_path and return its path."""
    def _write(lines, name='trace.txt'):
        path = tmp_path / name
        path.write_text(''.join(line + '\n' for line in lines), encoding='utf-8')
        return str(path)
    return _write
