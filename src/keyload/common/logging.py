"""Logging initialisation for the command line tools. Library code only uses logging.getLogger()."""

import logging
import logging.handlers
import os
import sys
import time
from pathlib import Path

FILE_FORMATTER = "%(asctime)s: %(name)s: %(levelname)s %(message)s"
SYSLOG_FORMATTER = "%(name)s: %(levelname)s %(message)s"


def _log_filename(progname: str, log_dir: Path) -> Path:
    return log_dir / f"{progname}-{time.strftime('%Y%m%d-%H%M%S')}-{os.getpid()}.log"


def get_logger(
    progname: str,
    debug: bool = False,
    syslog: bool = False,
    log_dir: Path | None = None,
) -> logging.Logger:
    """
    Initialize the root logger and return it.

    Output goes to stderr. When stderr is not a TTY only warnings and errors
    are shown there, unless debugging. Optionally also log to syslog, and to a
    per-run log file in `log_dir'.
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, stream=sys.stderr, format=FILE_FORMATTER)
    logger = logging.getLogger()
    if not sys.stderr.isatty() and not debug:
        for this_h in logger.handlers:
            this_h.setLevel(logging.WARNING)

    handlers: list[tuple[logging.Handler, str]] = []
    if syslog:
        handlers += [(logging.handlers.SysLogHandler(), SYSLOG_FORMATTER)]
    if log_dir is not None:
        handlers += [(logging.FileHandler(_log_filename(progname, log_dir)), FILE_FORMATTER)]
    for handler, fmt in handlers:
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)
    return logger
