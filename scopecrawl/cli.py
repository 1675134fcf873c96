"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from scopecrawl import config as env
from scopecrawl.container import Container
from scopecrawl.exceptions import StartupError
from scopecrawl.services.shutdown import ShutdownSignal

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_WRITE_FAILED = 1
EXIT_STARTUP = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scopecrawl",
        description=(
            "Fetch a page, record every link on it, and recursively fetch the links "
            "that stay under the initial url. Interrupt with Ctrl+C to save progress "
            f"in {env.CHECKPOINT_FILE}; continue later with -resume."
        ),
    )
    parser.add_argument("-verbose", "--verbose", action="store_true", help="Enable verbose mode")
    parser.add_argument("-resume", "--resume", action="store_true", help="Resume last execution")
    parser.add_argument("-url", "--url", default="", help="Initial URL to fetch")
    parser.add_argument(
        "-output", "--output", default=env.DEFAULT_OUTPUT_FILE,
        help=f"Output filename (default: {env.DEFAULT_OUTPUT_FILE})",
    )
    parser.add_argument(
        "-workers", "--workers", type=int, default=None,
        help="Maximum concurrent fetches (default: SCOPECRAWL_MAX_WORKERS or 4)",
    )
    parser.add_argument(
        "-scope", "--scope", choices=env.SCOPE_MODES, default=None,
        help="Scope test against the initial url (default: SCOPECRAWL_SCOPE_MODE or prefix)",
    )
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s",
    )


def _terminate(code: int) -> None:
    """Exit at once, leaving in-flight fetch threads behind."""
    logging.shutdown()
    sys.stdout.flush()
    sys.stderr.flush()
    os._exit(code)


def main(argv: Optional[Sequence[str]] = None, container: Optional[Container] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    container = container or Container()
    if args.workers is not None:
        if args.workers < 1:
            logger.error("-workers must be at least 1")
            return EXIT_STARTUP
        container.config.SCOPECRAWL_MAX_WORKERS.from_value(args.workers)
    if args.scope is not None:
        container.config.SCOPECRAWL_SCOPE_MODE.from_value(args.scope)

    logger.debug("Resume: %s", args.resume)
    logger.debug("InitialURL: %s", args.url)
    logger.debug("OutputFile: %s", args.output)

    try:
        session = container.crawl_session_factory().create(
            args.url or None,
            resume=args.resume,
            output_path=args.output,
        )
    except StartupError as e:
        logger.error("FATAL: %s", e)
        return EXIT_STARTUP

    shutdown = ShutdownSignal(stop_event=session.stop_event)
    shutdown.install()
    try:
        supervisor = container.crawl_supervisor(session=session, output_path=args.output)
        result = supervisor.run()
    finally:
        shutdown.restore()

    logger.info(
        "%d urls, %d completed%s",
        result.urls_total,
        result.urls_completed,
        " (interrupted)" if result.stopped else "",
    )
    code = EXIT_OK if result.saved else EXIT_WRITE_FAILED
    if result.stopped:
        _terminate(code)
    return code
