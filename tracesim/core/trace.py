"""Trace file reader.

A trace holds one memory reference per line:

    <hex-address> <I|R|W>

where I is an instruction fetch, R a data read and W a data write. The
address may carry a 0x prefix. Blank lines are ignored.

TraceReader is an explicit handle owned by the caller:

    with TraceReader("gcc.trace") as refs:
        for ref in refs:
            ...

Iteration is lazy and ends at end of file. A malformed line raises
TraceFormatError (or is logged and skipped with strict=False), so running
out of references and hitting bad input are never confused. A reader is
consumed once; open a new one to start over.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from tracesim.core.errors import TraceError, TraceFormatError

LOGGER = logging.getLogger(__name__)

_HEX_ADDRESS = re.compile(r"(?:0[xX])?[0-9a-fA-F]+")


class ReferenceKind(Enum):
    INSTRUCTION = "I"
    DATA_READ = "R"
    DATA_WRITE = "W"


@dataclass(frozen=True)
class MemoryReference:
    address: int
    kind: ReferenceKind

    @property
    def is_write(self) -> bool:
        return self.kind is ReferenceKind.DATA_WRITE


def parse_line(line: str) -> Optional[MemoryReference]:
    """Parse one trace line. Returns None for blank lines.

    Raises ValueError describing what is wrong with the line otherwise.
    """
    fields = line.split()
    if not fields:
        return None
    if len(fields) != 2:
        raise ValueError(f"expected 2 fields, got {len(fields)}")

    addr_str, kind_str = fields
    if not _HEX_ADDRESS.fullmatch(addr_str):
        raise ValueError(f"bad hexadecimal address {addr_str!r}")
    address = int(addr_str, 16)
    try:
        kind = ReferenceKind(kind_str)
    except ValueError:
        raise ValueError(f"unknown reference type {kind_str!r}") from None
    return MemoryReference(address, kind)


class TraceReader:
    def __init__(self, path: str, strict: bool = True):
        self.path = str(path)
        self.strict = strict
        self.line_number = 0
        self.skipped = 0
        self._fh = None
        self._closed = False

    def open(self) -> "TraceReader":
        if self._fh is not None:
            raise TraceError(f"trace {self.path} is already open")
        # OSError (missing file, permissions) propagates to the caller.
        # Binary mode: lines are decoded one at a time so bad bytes are a
        # malformed line, not a crash.
        self._fh = open(self.path, "rb")
        self._closed = False
        self.line_number = 0
        self.skipped = 0
        return self

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None
        self._closed = True

    def __enter__(self) -> "TraceReader":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    def __iter__(self) -> Iterator[MemoryReference]:
        if self._fh is None:
            if self._closed:
                raise TraceError(f"trace {self.path} is closed; reopen it to read again")
            raise TraceError(f"trace {self.path} is not open")
        return self._references()

    def _references(self) -> Iterator[MemoryReference]:
        for raw in self._fh:
            self.line_number += 1
            try:
                # UnicodeDecodeError is a ValueError
                ref = parse_line(raw.decode("utf-8"))
            except ValueError as e:
                line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
                if self.strict:
                    raise TraceFormatError(self.path, self.line_number, line, str(e)) from e
                LOGGER.warning("%s:%d: skipping malformed line %r (%s)",
                               self.path, self.line_number, line, e)
                self.skipped += 1
                continue
            if ref is not None:
                yield ref


def read_trace(path: str, strict: bool = True) -> Iterator[MemoryReference]:
    """Yield the references of a trace file, closing it when exhausted."""
    with TraceReader(path, strict=strict) as reader:
        yield from reader


__all__ = ["MemoryReference", "ReferenceKind", "TraceReader", "parse_line", "read_trace"]
