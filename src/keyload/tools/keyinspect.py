"""
Key inspection tool.

  - decode RSA key files (PEM or DER, any supported container) and show
    which container they are in, and the key size
  - check that every key in a configuration file can be loaded
"""

import argparse
import logging
import os
import sys
from argparse import Namespace as ArgsType
from pathlib import Path

from pydantic import ValidationError

from keyload.common.config import ConfigurationError, get_config
from keyload.common.data import KeyClass, KeyEncoding
from keyload.common.keyring import load_keyring
from keyload.common.logging import get_logger
from keyload.decoder.errors import KeyDecodeError
from keyload.decoder.load import load_key_file
from keyload.version import __verbose_version__

_DEFAULTS = {
    "debug": False,
    "config": None,
}


def parse_args(defaults: dict, argv: list[str] | None = None) -> ArgsType:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description=f"RSA key inspector {__verbose_version__}",
        add_help=True,
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "files",
        metavar="FILE",
        type=Path,
        nargs="*",
        help="Key files to inspect",
    )

    # Optional arguments
    parser.add_argument(
        "--config",
        dest="config",
        metavar="CFGFILE",
        type=str,
        default=defaults["config"],
        help="Check all keys in this configuration file",
    )
    parser.add_argument(
        "--private",
        dest="key_class",
        action="store_const",
        const=KeyClass.PRIVATE,
        default=KeyClass.PUBLIC,
        help="Decode the files as private keys",
    )
    _encoding = parser.add_mutually_exclusive_group()
    _encoding.add_argument(
        "--pem",
        dest="encoding",
        action="store_const",
        const=KeyEncoding.PEM,
        help="Files are PEM (default: detect)",
    )
    _encoding.add_argument(
        "--der",
        dest="encoding",
        action="store_const",
        const=KeyEncoding.DER,
        help="Files are DER (default: detect)",
    )
    parser.add_argument(
        "--debug",
        dest="debug",
        action="store_true",
        default=defaults["debug"],
        help="Enable debug operation",
    )

    args = parser.parse_args(argv)
    if not args.files and not args.config:
        parser.error("Nothing to do, give key files and/or --config")
    return args


def inspect_files(args: ArgsType, logger: logging.Logger) -> bool:
    """Decode every file given on the command line and print a line about each."""
    res = True
    for filename in args.files:
        try:
            decoded = load_key_file(filename, args.key_class, args.encoding)
        except (KeyDecodeError, OSError, RuntimeError) as exc:
            logger.error(f"{filename}: {exc}")
            res = False
            continue
        print(f"{filename}: {decoded}")
    return res


def check_config(args: ArgsType, logger: logging.Logger) -> bool:
    """Load every key in the configuration file."""
    try:
        config = get_config(args.config)
        keyring = load_keyring(config)
    except (ConfigurationError, ValidationError, OSError) as exc:
        logger.error(f"Configuration {args.config}: {exc}")
        return False
    for name in keyring:
        print(f"{args.config}: {name}: {keyring[name]}")
    return True


def keyinspect(logger: logging.Logger, args: ArgsType) -> bool:
    """Main entry point for inspecting keys."""
    res = True
    if args.files:
        res = inspect_files(args, logger) and res
    if args.config:
        res = check_config(args, logger) and res
    return res


def main() -> None:
    """Main program function."""
    try:
        progname = os.path.basename(sys.argv[0])
        args = parse_args(_DEFAULTS)
        logger = get_logger(progname=progname, debug=args.debug).getChild(__name__)
        res = keyinspect(logger, args)
        if res is True:
            sys.exit(0)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    main()
