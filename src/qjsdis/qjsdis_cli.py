"""
Command-line interface for the disassembler.
"""

import argparse
import logging
from logging.handlers import RotatingFileHandler
import sys
from typing import List, NoReturn

from qjsdis.qjsdis_config import DisassemblerConfig
from qjsdis.qjsdis_disassembler import Disassembler
from qjsdis.qjsdis_engine import load_engine
from qjsdis.qjsdis_error import QJSDisCompileError, QJSDisConfigError, QJSDisDecodeError, QJSDisUsageError


class QJSDisArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors as exceptions rather than exiting."""

    def error(self, message: str) -> NoReturn:
        raise QJSDisUsageError(message)


def build_parser() -> QJSDisArgumentParser:
    """Create the command line parser."""
    parser = QJSDisArgumentParser(
        prog="qjsdis",
        description="Compile a script without running it and disassemble its bytecode",
        add_help=False
    )
    parser.add_argument('--help', '-h', action='store_true', help='print help message')
    parser.add_argument('--file', '-f', help='input file containing code')
    parser.add_argument('--strip', '-s', action='store_true', help='strip source information')
    parser.add_argument('--config', '-c', help='YAML configuration file')
    return parser


def setup_logging(config: DisassemblerConfig) -> None:
    """Configure logging to a rotating log file if one is configured, otherwise to stderr."""
    handler: logging.Handler
    if config.log_file:
        # Keep up to 5 old logs, max 1MB each
        handler = RotatingFileHandler(
            config.log_file,
            maxBytes=1024*1024,
            backupCount=5,
            encoding='utf-8'
        )

    else:
        handler = logging.StreamHandler(sys.stderr)

    logging.basicConfig(
        level=config.get_log_level(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[handler],
        force=True
    )


def read_source(filename: str) -> str:
    """Read a source file as UTF-8 text."""
    with open(filename, 'r', encoding='utf-8') as f:
        return f.read()


def load_config(config_path: str | None) -> DisassemblerConfig:
    """Load the configuration file, or return the defaults if there isn't one."""
    if config_path is None:
        return DisassemblerConfig()

    return DisassemblerConfig.load_from_file(config_path)


def main(argv: List[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()

    try:
        args = parser.parse_args(argv)

    except QJSDisUsageError as e:
        print(f"{parser.prog}: {e.message}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    if args.help:
        parser.print_help()
        return 1

    if not args.file:
        print("No input file provided with -f. Exiting.", file=sys.stderr)
        return 1

    try:
        config = load_config(args.config)

    except (OSError, QJSDisConfigError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    config_errors = config.validate()
    if config_errors:
        print("Configuration errors found:", file=sys.stderr)
        for error in config_errors:
            print(f"  - {error}", file=sys.stderr)

        return 1

    try:
        setup_logging(config)

    except OSError as e:
        print(f"Cannot open log file {config.log_file}: {e.strerror}", file=sys.stderr)
        return 1

    logger = logging.getLogger("QJSDis")

    try:
        source = read_source(args.file)

    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Cannot read %s: %s", args.file, e)
        print(f"Failed to open file {args.file}", file=sys.stderr)
        return 1

    try:
        engine = load_engine(config.engine)

    except QJSDisConfigError as e:
        print(str(e), file=sys.stderr)
        return 1

    try:
        function = engine.compile(source, args.file)

    except QJSDisCompileError as e:
        print(e.diagnostic, file=sys.stderr)
        return 1

    disassembler = Disassembler(
        strip=args.strip,
        indent_width=config.indent_width,
        max_depth=config.max_depth
    )

    try:
        lines = disassembler.disassemble(function)

    except QJSDisDecodeError as e:
        logger.debug("Disassembly of %s failed", args.file, exc_info=True)
        print(str(e), file=sys.stderr)
        return 1

    sys.stdout.write("".join(line + "\n" for line in lines))
    return 0


if __name__ == '__main__':
    sys.exit(main())
