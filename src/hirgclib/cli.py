"""Command-line interface for rebuilding a target from its reference and compressed file."""
import argparse
import sys
from typing import NoReturn

from hirgclib import HirgcError, RESOURCES
from hirgclib.session import ReconstructionSession
from hirgclib.utils import DecompressConfig, DEFAULT_OUTPUT, KMER_LENGTH, get_logger, set_verbosity


# Constants ------------------------------------------------------------------------------------------------------------
_LOGGER = get_logger('cli')
PROG = 'hirgclib-decompress'


# Classes --------------------------------------------------------------------------------------------------------------
class ArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports a malformed invocation as one reason line plus the usage line."""
    def error(self, message: str) -> NoReturn:
        self.exit(1, f'Error: {message}\n{self.format_usage()}')


# Functions ------------------------------------------------------------------------------------------------------------
def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog=PROG,
        description='Rebuild a target sequence from a reference and a HIRGC-style compressed file.'
    )
    parser.add_argument('-r', '--reference', required=True, metavar='FILE',
                        help="Reference sequence file, optionally compressed ('-' for stdin)")
    parser.add_argument('-t', '--target', required=True, metavar='FILE', help='Compressed target file')
    parser.add_argument('-o', '--output', default=DEFAULT_OUTPUT, metavar='FILE',
                        help=f"Output file, '-' for stdout (default: {DEFAULT_OUTPUT})")
    parser.add_argument('-k', '--kmer-length', dest='kmer_length', type=int, default=KMER_LENGTH, metavar='K',
                        help=f'Anchor length used by the compressor (default: {KMER_LENGTH})')
    parser.add_argument('--max-seq-length', dest='max_seq_length', type=int, metavar='N',
                        help=f'Maximum reference/target length (default: ${RESOURCES.MAX_SEQ_LENGTH_ENV} or '
                             f'{RESOURCES.DEFAULT_MAX_SEQ_LENGTH})')
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true', help='Log debug messages')
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Only log warnings and errors')
    parser.add_argument('--version', action='version', version=f'%(prog)s {RESOURCES.version}')
    return parser


def main(argv: list[str] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbosity(args.verbose, args.quiet)
    if args.reference == '-' and args.target == '-': parser.error('reference and target cannot both be stdin')
    try: config = DecompressConfig.from_args(args)
    except ValueError as e: parser.error(str(e))
    try: ReconstructionSession.from_config(config).write(config.output)
    except HirgcError as e:
        _LOGGER.debug('Decompression failed', exc_info=True)
        print(f'Error: {e}', file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
