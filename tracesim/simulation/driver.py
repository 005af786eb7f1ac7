"""Command-line driver.

Usage:
    tracesim trace_path cache_size cache_associativity cache_block_size

Builds the cache, feeds it every reference of the trace file and prints the
number of references, the number of hits and the hit ratio. Exits with a
non-zero status when the cache parameters are invalid or the trace cannot
be read; no reference is simulated in that case.
"""
import argparse
import logging
import sys
from typing import List, Optional

from tracesim.core.cache import create_cache
from tracesim.core.constants import ADDRESS_WIDTH, DEFAULT_SAMPLE_EVERY, REFERENCE_KIND_LETTERS
from tracesim.core.errors import GeometryError, TraceError
from tracesim.core.simulator import CacheSimulator
from tracesim.core.trace import TraceReader
from tracesim.data.counters import PerfCounters
from tracesim.data.stats_export import Exporter, export_chart_json, export_chart_pdf

LOGGER = logging.getLogger(__name__)


def positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer {text!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError(f"({value}) must be greater than 0")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tracesim",
        description="Trace-driven simulator of a single-level, write-back, write-allocate cache.")
    parser.add_argument("trace_path", help="trace file, one '<hex-address> <I|R|W>' per line")
    parser.add_argument("cache_size", type=positive_int, help="cache size in bytes")
    parser.add_argument("cache_associativity", type=positive_int, help="blocks per set")
    parser.add_argument("cache_block_size", type=positive_int, help="block size in bytes")
    parser.add_argument("--address-width", type=positive_int, default=ADDRESS_WIDTH,
                        help="machine address width in bits (default: %(default)s)")
    parser.add_argument("--skip-malformed", action="store_true",
                        help="skip malformed trace lines instead of failing")
    parser.add_argument("--breakdown", action="store_true",
                        help="also print reference and miss counts per reference type")
    parser.add_argument("--csv", metavar="PATH", help="write statistics to a CSV file")
    parser.add_argument("--json", metavar="PATH", help="write statistics and hit-rate history to JSON")
    parser.add_argument("--chart", metavar="PATH", help="plot the hit-rate history to a PDF")
    parser.add_argument("--sample-every", type=positive_int, default=DEFAULT_SAMPLE_EVERY,
                        help="record the hit rate every N references (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="-v for progress, -vv to log every miss")
    return parser


def print_report(counters: PerfCounters, breakdown: bool = False, out=None):
    out = out or sys.stdout
    print(f"Total number of memory references is ({counters.references})", file=out)
    print(f"Total number of hits is ({counters.hits})", file=out)
    print(f"The hit ratio is ({counters.hit_ratio:f})", file=out)
    if breakdown:
        for kind, c in counters.counts.items():
            label = REFERENCE_KIND_LETTERS[kind.value]
            print(f"  {label}: {c.references} references, {c.misses} misses", file=out)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = [logging.WARNING, logging.INFO, logging.DEBUG][min(args.verbose, 2)]
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    try:
        cache = create_cache(args.cache_size, args.cache_associativity, args.cache_block_size,
                             address_width=args.address_width)
    except GeometryError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    # history is only kept when something will read it
    sample_every = args.sample_every if (args.json or args.chart) else None
    sim = CacheSimulator(cache, sample_every=sample_every)
    try:
        with TraceReader(args.trace_path, strict=not args.skip_malformed) as reader:
            counters = sim.run(reader)
    except OSError as e:
        print(f"ERROR: Unable to open trace file ({args.trace_path}): {e.strerror or e}", file=sys.stderr)
        return 1
    except TraceError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if reader.skipped:
        LOGGER.warning("skipped %d malformed trace lines", reader.skipped)
    print_report(counters, breakdown=args.breakdown)

    try:
        if args.csv:
            Exporter.export_stats_csv(args.csv, counters)
            LOGGER.info("statistics written to %s", args.csv)
        if args.json:
            export_chart_json(sim.hit_rate_history, counters.as_dict(), args.json)
            LOGGER.info("statistics written to %s", args.json)
        if args.chart:
            export_chart_pdf(sim.hit_rate_history, args.chart, sample_every=args.sample_every)
            LOGGER.info("hit-rate chart written to %s", args.chart)
    except OSError as e:
        print(f"ERROR: Unable to write statistics: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
