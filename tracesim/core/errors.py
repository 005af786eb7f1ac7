"""Exceptions raised by the cache model and the trace reader."""


class GeometryError(ValueError):
    """The requested (size, associativity, block_size) is not a valid cache."""


class InvalidBlockSize(GeometryError):
    def __init__(self, block_size: int):
        self.block_size = block_size
        super().__init__(f"Cache block size ({block_size}) is not a power of two.")


class ZeroSets(GeometryError):
    def __init__(self, size: int, associativity: int, block_size: int):
        self.size = size
        self.associativity = associativity
        self.block_size = block_size
        super().__init__(
            f"Number of sets (0) must be non-zero: cache size ({size}) is smaller "
            f"than associativity ({associativity}) x block size ({block_size})."
        )


class InvalidSetCount(GeometryError):
    def __init__(self, number_of_sets: int):
        self.number_of_sets = number_of_sets
        super().__init__(f"Number of sets ({number_of_sets}) must be a power of two.")


class AddressWidthExceeded(GeometryError):
    def __init__(self, offset_width: int, index_width: int, address_width: int):
        self.offset_width = offset_width
        self.index_width = index_width
        self.address_width = address_width
        super().__init__(
            f"Offset ({offset_width}) and index ({index_width}) bits do not fit "
            f"in a {address_width}-bit address."
        )


class NotPowerOfTwo(ValueError):
    def __init__(self, n: int):
        self.n = n
        super().__init__(f"{n} is not a power of two")


class TraceError(Exception):
    """Problem reading a trace file."""


class TraceFormatError(TraceError):
    """A trace line is not of the form `<hex-address> <I|R|W>`."""

    def __init__(self, path: str, line_number: int, line: str, reason: str = ""):
        self.path = path
        self.line_number = line_number
        self.line = line
        self.reason = reason
        msg = f"{path}:{line_number}: cannot parse trace line {line!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)
