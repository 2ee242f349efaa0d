from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from loguru import logger

from doresult.config import fault_policy_from_env
from doresult.fileio import DEFAULT_CHUNK_SIZE, describe_error, read_from_file


class InterceptHandler(logging.Handler):
    """Forward stdlib ``logging`` records from doresult into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(exception=record.exc_info).log(level, record.getMessage())


def configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else "WARNING"
    logger.remove()
    logger.add(sys.stderr, level=level)
    package_logger = logging.getLogger("doresult")
    package_logger.handlers = [InterceptHandler()]
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    package_logger.propagate = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doresult",
        description="Read files through carrier-returning functions",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log frame lifecycles")
    subparsers = parser.add_subparsers(dest="command", required=True)

    read = subparsers.add_parser("read", help="print a file's content or its error code")
    read.add_argument("path")
    read.add_argument("--encoding", default=None, help="decode the content as text")
    read.add_argument("--chunk-size", type=positive_int, default=DEFAULT_CHUNK_SIZE)
    read.set_defaults(func=handle_read)
    return parser


def positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {raw!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def handle_read(args: argparse.Namespace) -> int:
    return run_read(args.path, encoding=args.encoding, chunk_size=args.chunk_size)


def run_read(path: str, *, encoding: str | None, chunk_size: int) -> int:
    result = read_from_file(path, chunk_size=chunk_size, encoding=encoding)
    if not result:
        code = result.error()
        logger.debug("read_from_file({!r}) failed with {}", path, code)
        print(f"Failed to read file with error {code} ({describe_error(code)})")
        return 1

    content = result.value
    if isinstance(content, bytes):
        sys.stdout.flush()
        sys.stdout.buffer.write(content)
        sys.stdout.buffer.flush()
    else:
        print(content)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        fault_policy_from_env()
    except ValueError as exc:
        parser.error(str(exc))
    configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
