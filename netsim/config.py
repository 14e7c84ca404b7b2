"""
Command line configuration for the simulator.

:func:`parse` turns the process argument vector into a :class:`Configuration`,
the single read-only settings object that the engine, the logging setup, the
plugin loader and the scenario loader all receive.  Options are grouped the
same way they are listed in ``--help``: core, network and plugin examples.
Trailing positional arguments are the XML scenario files, kept in the order
they were given.

A :class:`Configuration` is guarded by the canary in :mod:`netsim.canary`.
Calling :meth:`Configuration.free` releases it; any later access raises
:class:`~netsim.errors.LivenessViolation`.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Mapping, Optional, Sequence, TextIO, Tuple

from .canary import Canary, magic_assert, magic_clear, magic_init
from .errors import (
    ConfigParseError,
    MalformedOptionError,
    MissingRequiredValueError,
    UnknownOptionError,
)
from .simtime import SIMTIME_ONE_HOUR, SIMTIME_ONE_MILLISECOND, SimulationTime
from .vnet import DEFAULT_RECV_BUFFER_SIZE, DEFAULT_SEND_BUFFER_SIZE, VNETWORK_MIN_SD


logger = logging.getLogger(__name__)

MESSAGE_LEVEL = 25
logging.addLevelName(MESSAGE_LEVEL, "MESSAGE")


class LogLevel(IntEnum):
    """Verbosity levels understood by the logging setup.

    Values are the matching :mod:`logging` levels, with ``MESSAGE`` sitting
    between ``INFO`` and ``WARNING``.
    """

    CRITICAL = logging.CRITICAL
    ERROR = logging.ERROR
    WARNING = logging.WARNING
    MESSAGE = MESSAGE_LEVEL
    INFO = logging.INFO
    DEBUG = logging.DEBUG

    def to_logging_level(self) -> int:
        return int(self)


DEFAULT_LOG_LEVELS: Mapping[str, LogLevel] = {
    "error": LogLevel.ERROR,
    "critical": LogLevel.CRITICAL,
    "warning": LogLevel.WARNING,
    "message": LogLevel.MESSAGE,
    "info": LogLevel.INFO,
    "debug": LogLevel.DEBUG,
}

DEFAULT_LOG_LEVEL = "message"
DEFAULT_MIN_RUN_AHEAD = 10  # milliseconds
MAX_MIN_RUN_AHEAD = SIMTIME_ONE_HOUR // SIMTIME_ONE_MILLISECOND
MAX_WORKER_THREADS = VNETWORK_MIN_SD - 1


@dataclass(frozen=True)
class ConfigurationOptions:
    """
    Values parsed from the command line.
    """
    # Core
    log_level_input: str = DEFAULT_LOG_LEVEL
    n_worker_threads: int = 0  # 0 = single-threaded
    print_software_version: bool = False
    show_help: bool = False

    # Network
    min_run_ahead: int = DEFAULT_MIN_RUN_AHEAD
    send_buffer_size: int = DEFAULT_SEND_BUFFER_SIZE
    recv_buffer_size: int = DEFAULT_RECV_BUFFER_SIZE
    force_buffer_sizes: bool = False  # True disables TCP autotuning
    delayed_acks: bool = False

    # Plugin examples
    run_ping_example: bool = False
    run_echo_example: bool = False
    run_file_example: bool = False

    # Scenario inputs, in load order
    input_xml_filenames: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        """Apply the same range checks as the command line parser."""
        if not 0 <= self.n_worker_threads <= MAX_WORKER_THREADS:
            raise MalformedOptionError(
                f"n_worker_threads must be between 0 and {MAX_WORKER_THREADS}, got {self.n_worker_threads}",
                option="--workers",
            )
        if not 1 <= self.min_run_ahead <= MAX_MIN_RUN_AHEAD:
            raise MalformedOptionError(
                f"min_run_ahead must be between 1 and {MAX_MIN_RUN_AHEAD}, got {self.min_run_ahead}",
                option="--min-runahead",
            )
        if self.send_buffer_size < 1:
            raise MalformedOptionError(f"send_buffer_size must be >= 1, got {self.send_buffer_size}")
        if self.recv_buffer_size < 1:
            raise MalformedOptionError(f"recv_buffer_size must be >= 1, got {self.recv_buffer_size}")
        object.__setattr__(self, "log_level_input", self.log_level_input.lower())
        object.__setattr__(self, "input_xml_filenames", tuple(self.input_xml_filenames))

    @property
    def min_run_ahead_time(self) -> SimulationTime:
        """Minimum run-ahead interval as simulation time."""
        return self.min_run_ahead * SIMTIME_ONE_MILLISECOND


class _StrictArgumentParser(argparse.ArgumentParser):
    """Argument parser that raises instead of exiting the process."""

    def error(self, message: str):
        raise MalformedOptionError(message)


def _int_option(minimum: int, maximum: Optional[int] = None):
    def convert(text: str) -> int:
        try:
            value = int(text)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid integer value: {text!r}") from None
        if value < minimum:
            raise argparse.ArgumentTypeError(f"value must be >= {minimum}, got {value}")
        if maximum is not None and value > maximum:
            raise argparse.ArgumentTypeError(f"value must be <= {maximum}, got {value}")
        return value

    return convert


def normalize_log_levels(log_levels: Mapping[str, LogLevel]) -> Dict[str, LogLevel]:
    """Lowercase the level names so lookups are case-insensitive."""
    return {name.lower(): level for name, level in log_levels.items()}


def build_parser(log_levels: Mapping[str, LogLevel] = DEFAULT_LOG_LEVELS) -> argparse.ArgumentParser:
    """Create the argument parser with the core, network and plugin option groups."""
    log_levels = normalize_log_levels(log_levels)

    parser = _StrictArgumentParser(
        prog="netsim",
        description="Discrete-event network simulator",
        add_help=False,
        allow_abbrev=False,
        exit_on_error=False,
    )

    core = parser.add_argument_group("core options")
    core.add_argument("-h", "--help", dest="show_help", action="store_true", help="Show this help and exit")
    core.add_argument(
        "-l",
        "--log-level",
        dest="log_level_input",
        default=DEFAULT_LOG_LEVEL,
        metavar="LEVEL",
        help=f"Log verbosity, one of: {', '.join(log_levels)} (default: {DEFAULT_LOG_LEVEL})",
    )
    core.add_argument(
        "-w",
        "--workers",
        dest="n_worker_threads",
        type=_int_option(0, MAX_WORKER_THREADS),
        default=0,
        metavar="N",
        help="Number of worker threads; 0 runs single-threaded (default: 0)",
    )
    core.add_argument(
        "-v", "--version", dest="print_software_version", action="store_true", help="Print version and exit"
    )

    network = parser.add_argument_group("network options")
    network.add_argument(
        "--min-runahead",
        dest="min_run_ahead",
        type=_int_option(1, MAX_MIN_RUN_AHEAD),
        default=DEFAULT_MIN_RUN_AHEAD,
        metavar="MS",
        help=(
            "Minimum time window in milliseconds between event queue synchronizations, "
            f"at most {MAX_MIN_RUN_AHEAD} (default: {DEFAULT_MIN_RUN_AHEAD})"
        ),
    )
    network.add_argument(
        "--send-buffer-size",
        type=_int_option(1),
        default=DEFAULT_SEND_BUFFER_SIZE,
        metavar="BYTES",
        help=f"Socket send buffer size when autotuning is off (default: {DEFAULT_SEND_BUFFER_SIZE})",
    )
    network.add_argument(
        "--recv-buffer-size",
        type=_int_option(1),
        default=DEFAULT_RECV_BUFFER_SIZE,
        metavar="BYTES",
        help=f"Socket receive buffer size when autotuning is off (default: {DEFAULT_RECV_BUFFER_SIZE})",
    )
    network.add_argument(
        "--force-buffer-sizes",
        action="store_true",
        help="Use the fixed buffer sizes instead of TCP autotuning",
    )
    network.add_argument("--delayed-acks", action="store_true", help="Enable delayed TCP acknowledgments")

    plugins = parser.add_argument_group("plugin example options")
    plugins.add_argument("--run-ping-example", action="store_true", help="Run the built-in ping example")
    plugins.add_argument("--run-echo-example", action="store_true", help="Run the built-in echo example")
    plugins.add_argument("--run-file-example", action="store_true", help="Run the built-in file transfer example")

    parser.add_argument(
        "input_xml_filenames",
        nargs="*",
        default=[],
        metavar="XML_FILE",
        help="Scenario files to load, in order",
    )
    return parser


def _parse_options(
    parser: argparse.ArgumentParser, args: Sequence[str], log_levels: Mapping[str, LogLevel]
) -> ConfigurationOptions:
    try:
        namespace, extras = parser.parse_known_intermixed_args(list(args))
    except argparse.ArgumentError as exc:
        if exc.message.startswith("expected"):
            raise MissingRequiredValueError(str(exc), option=exc.argument_name) from None
        raise MalformedOptionError(str(exc), option=exc.argument_name) from None

    if extras:
        raise UnknownOptionError(f"unrecognized option: {extras[0]}", option=extras[0])

    level = namespace.log_level_input.lower()
    if level not in log_levels:
        raise MalformedOptionError(
            f"argument -l/--log-level: unknown log level {namespace.log_level_input!r} "
            f"(choose from {', '.join(log_levels)})",
            option="-l/--log-level",
        )

    return ConfigurationOptions(
        log_level_input=level,
        n_worker_threads=namespace.n_worker_threads,
        print_software_version=namespace.print_software_version,
        show_help=namespace.show_help,
        min_run_ahead=namespace.min_run_ahead,
        send_buffer_size=namespace.send_buffer_size,
        recv_buffer_size=namespace.recv_buffer_size,
        force_buffer_sizes=namespace.force_buffer_sizes,
        delayed_acks=namespace.delayed_acks,
        run_ping_example=namespace.run_ping_example,
        run_echo_example=namespace.run_echo_example,
        run_file_example=namespace.run_file_example,
        input_xml_filenames=tuple(getattr(namespace, "input_xml_filenames", None) or ()),
    )


class Configuration(Canary):
    """
    Read-only simulator settings parsed from the command line.

    Instances are created with :meth:`from_args` (or :func:`parse`) and
    released with :meth:`free`.  Every accessor checks that the object has not
    been released.  Reading from several threads is safe; :meth:`free` must
    only run once all readers are done.
    """

    def __init__(
        self,
        options: ConfigurationOptions,
        parser: Optional[argparse.ArgumentParser] = None,
        log_levels: Mapping[str, LogLevel] = DEFAULT_LOG_LEVELS,
    ) -> None:
        log_levels = normalize_log_levels(log_levels)
        if options.log_level_input not in log_levels:
            raise MalformedOptionError(f"unknown log level {options.log_level_input!r}", option="--log-level")
        self._options = options
        self._parser = parser if parser is not None else build_parser(log_levels)
        self._log_levels = log_levels
        magic_init(self)

    @classmethod
    def from_args(
        cls, args: Sequence[str], log_levels: Mapping[str, LogLevel] = DEFAULT_LOG_LEVELS
    ) -> "Configuration":
        """Parse ``args`` (without the program name).

        :raises ConfigParseError: on unknown flags, malformed values or
            missing values.
        """
        log_levels = normalize_log_levels(log_levels)
        parser = build_parser(log_levels)
        options = _parse_options(parser, args, log_levels)
        logger.debug("Parsed configuration: %s", options)
        return cls(options, parser, log_levels)

    def free(self) -> None:
        """Release the configuration.  Any later use is a liveness violation."""
        magic_assert(self)
        magic_clear(self)
        self._options = None
        self._parser = None
        self._log_levels = None

    def get_log_level(self) -> LogLevel:
        magic_assert(self)
        return self._log_levels[self._options.log_level_input]

    @property
    def options(self) -> ConfigurationOptions:
        magic_assert(self)
        return self._options

    @property
    def help_text(self) -> str:
        magic_assert(self)
        return self._parser.format_help()

    @property
    def log_level_input(self) -> str:
        magic_assert(self)
        return self._options.log_level_input

    @property
    def n_worker_threads(self) -> int:
        magic_assert(self)
        return self._options.n_worker_threads

    @property
    def print_software_version(self) -> bool:
        magic_assert(self)
        return self._options.print_software_version

    @property
    def show_help(self) -> bool:
        magic_assert(self)
        return self._options.show_help

    @property
    def min_run_ahead(self) -> int:
        magic_assert(self)
        return self._options.min_run_ahead

    @property
    def min_run_ahead_time(self) -> SimulationTime:
        magic_assert(self)
        return self._options.min_run_ahead_time

    @property
    def send_buffer_size(self) -> int:
        magic_assert(self)
        return self._options.send_buffer_size

    @property
    def recv_buffer_size(self) -> int:
        magic_assert(self)
        return self._options.recv_buffer_size

    @property
    def force_buffer_sizes(self) -> bool:
        magic_assert(self)
        return self._options.force_buffer_sizes

    @property
    def delayed_acks(self) -> bool:
        magic_assert(self)
        return self._options.delayed_acks

    @property
    def run_ping_example(self) -> bool:
        magic_assert(self)
        return self._options.run_ping_example

    @property
    def run_echo_example(self) -> bool:
        magic_assert(self)
        return self._options.run_echo_example

    @property
    def run_file_example(self) -> bool:
        magic_assert(self)
        return self._options.run_file_example

    @property
    def input_xml_filenames(self) -> Tuple[str, ...]:
        magic_assert(self)
        return self._options.input_xml_filenames

    def __repr__(self) -> str:
        if not self.is_live or self._options is None:
            return f"<{type(self).__name__} (released)>"
        return f"<{type(self).__name__} {self._options!r}>"


def parse(
    args: Sequence[str],
    log_levels: Mapping[str, LogLevel] = DEFAULT_LOG_LEVELS,
    stderr: Optional[TextIO] = None,
) -> Optional[Configuration]:
    """Parse ``args`` into a :class:`Configuration`.

    Errors are printed to ``stderr`` together with the usage line and
    ``None`` is returned; the caller decides how to exit.
    """
    stream = stderr if stderr is not None else sys.stderr
    try:
        return Configuration.from_args(args, log_levels)
    except ConfigParseError as exc:
        logger.debug("Command line rejected: %s", exc)
        usage = build_parser(log_levels).format_usage()
        stream.write(usage)
        stream.write(f"netsim: error: {exc.message}\n")
        return None


def free(config: Configuration) -> None:
    """Release ``config``; see :meth:`Configuration.free`."""
    magic_assert(config)
    config.free()


def get_log_level(config: Configuration) -> LogLevel:
    """Return the log level selected on the command line."""
    magic_assert(config)
    return config.get_log_level()


__all__ = [
    "LogLevel",
    "MESSAGE_LEVEL",
    "DEFAULT_LOG_LEVELS",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_MIN_RUN_AHEAD",
    "MAX_MIN_RUN_AHEAD",
    "MAX_WORKER_THREADS",
    "normalize_log_levels",
    "ConfigurationOptions",
    "Configuration",
    "build_parser",
    "parse",
    "free",
    "get_log_level",
]
