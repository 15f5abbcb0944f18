"""Command line front end: ``python -m tagtree [FILE]``."""

import argparse
import logging
import sys

from .parser import HTMLParser
from .serialize import to_html, to_test_format
from .tokenizer import Tokenizer
from .tokens import ErrorLog, StrictModeError

logger = logging.getLogger(__name__)


def setup_logging(verbose=False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(prog="tagtree", description="Parse markup and print its token stream or tree")
    parser.add_argument("file", nargs="?", default=None, help="Input file (default: read stdin)")
    parser.add_argument("--tokens", action="store_true", help="Print the token stream instead of the tree")
    parser.add_argument(
        "--format",
        choices=["tree", "html"],
        default="tree",
        help="Tree output format (default: tree)",
    )
    parser.add_argument("--strict", action="store_true", help="Stop at the first parse error")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _read_input(path):
    if path is None or path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def main(argv=None):
    args = parse_arguments(argv)
    setup_logging(args.verbose)

    try:
        text = _read_input(args.file)
    except OSError as e:
        print(f"tagtree: cannot read {args.file}: {e}", file=sys.stderr)
        return 2

    errors = ErrorLog(strict=args.strict)
    try:
        if args.tokens:
            tokenizer = Tokenizer(errors=errors)
            tokenizer.reset(text)
            for token in tokenizer:
                print(repr(token))
        else:
            parser = HTMLParser(strict=args.strict)
            errors = parser.error_log
            document = parser.parse(text)
            if args.format == "html":
                print(to_html(document))
            else:
                print(to_test_format(document))
    except StrictModeError as e:
        print(f"tagtree: {e}", file=sys.stderr)
        return 1

    for error in errors:
        print(str(error), file=sys.stderr)
    logger.debug(f"Finished with {len(errors)} parse errors")
    return 0


if __name__ == "__main__":
    sys.exit(main())
