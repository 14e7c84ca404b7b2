"""Command line entry point for the simulator.

Parses the argument vector, configures logging from the selected level and
hands the configuration to the collaborators that consume it.
"""

import logging
import sys
from typing import List, Optional

from . import __version__
from .config import Configuration, LogLevel, parse
from .simtime import simtime_to_timedelta

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 2


def setup_logging(config: Configuration) -> None:
    """Configure the root logger from the log level on the command line."""
    logging.basicConfig(
        level=config.get_log_level().to_logging_level(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
        ],
        force=True,
    )


def log_summary(config: Configuration) -> None:
    """Log the resolved configuration."""
    threads = config.n_worker_threads
    logger.log(
        LogLevel.MESSAGE,
        "Running with %s, minimum run-ahead %s",
        f"{threads} worker threads" if threads else "a single thread",
        simtime_to_timedelta(config.min_run_ahead_time),
    )
    if config.force_buffer_sizes:
        logger.info(
            "TCP autotuning disabled: send buffer %d bytes, receive buffer %d bytes",
            config.send_buffer_size,
            config.recv_buffer_size,
        )
    if config.delayed_acks:
        logger.info("Delayed acknowledgments enabled")

    examples = [
        name
        for name, enabled in (
            ("ping", config.run_ping_example),
            ("echo", config.run_echo_example),
            ("file", config.run_file_example),
        )
        if enabled
    ]
    if examples:
        logger.info("Plugin examples selected: %s", ", ".join(examples))

    if config.input_xml_filenames:
        for index, path in enumerate(config.input_xml_filenames, start=1):
            logger.info("Scenario %d: %s", index, path)
    elif not examples:
        logger.warning("No scenario files or plugin examples given; nothing to simulate")


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv

    config = parse(args)
    if config is None:
        return EXIT_USAGE

    try:
        if config.show_help:
            print(config.help_text)
            return EXIT_OK
        if config.print_software_version:
            print(f"netsim {__version__}")
            return EXIT_OK

        setup_logging(config)
        log_summary(config)
        return EXIT_OK
    finally:
        config.free()


if __name__ == "__main__":
    sys.exit(main())
