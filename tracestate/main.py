"""
tracestate-dump: print the contents of a state file, or extract an address
range from it.
"""
import sys
import logging
import argparse

from tracestate.config import DEFAULT_FILL_BYTE, configure_logging
from tracestate.core.errors import StateFileError
from tracestate.state import open_state
from tracestate.report import print_report

l = logging.getLogger(name=__name__)

def parse_int(text):
    return int(text, 0)

def build_parser():
    parser = argparse.ArgumentParser(prog="tracestate-dump", description=__doc__.strip())
    parser.add_argument("statefile", help="state file to read")
    parser.add_argument("--no-blocks", action="store_true", help="do not list memory blocks")
    parser.add_argument("--pos", action="store_true", help="show the file offset of each block")
    parser.add_argument("--taint", action="store_true", help="show taint counts for each block")
    parser.add_argument("--range", nargs=2, type=parse_int, metavar=("FIRST", "LAST"),
                        help="write the bytes of an inclusive address range instead of the report")
    parser.add_argument("--output", "-o", help="file for --range output (default: stdout)")
    parser.add_argument("--fill", type=parse_int, default=DEFAULT_FILL_BYTE,
                        help="byte used for addresses missing from the state file")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser

def dump_range(state_iface, first, last, output_path, fill_byte):
    if output_path is None:
        return state_iface.write_range(sys.stdout.buffer, first, last, fill_byte=fill_byte)
    with open(output_path, 'wb') as output:
        return state_iface.write_range(output, first, last, fill_byte=fill_byte)

def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    configure_logging(verbose=args.verbose)

    try:
        with open_state(args.statefile) as state_iface:
            if args.range:
                first, last = args.range
                written = dump_range(state_iface, first, last, args.output, args.fill)
                l.info(f"Wrote {written} bytes")
            else:
                print_report(state_iface, show_blocks=not args.no_blocks,
                             show_pos=args.pos, show_taint=args.taint)
    except (OSError, StateFileError) as e:
        print(f"tracestate-dump: {e}", file=sys.stderr)
        return 1
    return 0

if __name__ == '__main__':
    sys.exit(main())
