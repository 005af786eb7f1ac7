"""Configuration constants for the simulator.

The machine address width is fixed configuration, not discovered at
runtime: trace addresses are conventionally 32-bit.
"""
ADDRESS_WIDTH = 32

# hit-rate history is sampled once every N references
DEFAULT_SAMPLE_EVERY = 1

# trace-file letter -> reference category name
REFERENCE_KIND_LETTERS = {
    "I": "instruction",
    "R": "data read",
    "W": "data write",
}
