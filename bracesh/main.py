#!/usr/bin/env python3
"""
bracesh - command line entry point

Usage:
    python -m bracesh                 read lines from standard input
    python -m bracesh -c 'LINE'       evaluate one line and exit
    python -m bracesh --config FILE   load settings from a JSON file

Author: YSNRFD
Version: 1.0.0
"""

import argparse
import sys
from typing import List, Optional

from bracesh.core.config_loader import ConfigLoader
from bracesh.exceptions import ConfigError, FatalShellError
from bracesh.logger import Logger, parse_level
from bracesh.shell.shell import Shell


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='bracesh',
        description='Shell expression evaluator with brace grouping.'
    )
    parser.add_argument('-c', dest='command', metavar='LINE',
                        help='evaluate LINE and exit with its status')
    parser.add_argument('--config', metavar='FILE',
                        help='JSON configuration file')
    parser.add_argument('--log-level', metavar='LEVEL',
                        help='override the configured log level')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for bracesh.

    Startup sequence:
    1. Load configuration
    2. Initialize logging
    3. Initialize the shell
    4. Evaluate -c LINE or run the read loop
    5. Finish
    """
    args = build_parser().parse_args(argv)

    loader = ConfigLoader()
    if args.config:
        try:
            loader.load(args.config)
        except ConfigError as e:
            print(f"bracesh: {e.message}", file=sys.stderr)
            return 2
    config = loader.config

    level = parse_level(args.log_level or config.logging.level)
    Logger.initialize(
        level=level,
        log_file=config.logging.log_file,
        console=config.logging.console_output,
    )

    shell = Shell(config)
    shell.init()
    try:
        if args.command is not None:
            status = shell.evaluate(args.command)
            return shell.exit_status if shell.exiting else status
        return shell.run()
    except FatalShellError as e:
        print(f"bracesh: fatal: {e.message}", file=sys.stderr)
        return 1
    finally:
        shell.finish()


if __name__ == '__main__':
    sys.exit(main())
