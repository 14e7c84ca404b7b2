"""
netsim configuration core

Command line configuration, simulation time units and the liveness canary
shared by the components of the discrete-event network simulator.
"""

__version__ = "0.1.0"

from .canary import Canary, MAGIC_VALUE, magic_assert, magic_clear, magic_init
from .config import Configuration, ConfigurationOptions, LogLevel, free, get_log_level, parse
from .errors import (
    ConfigParseError,
    LivenessViolation,
    MalformedOptionError,
    MissingRequiredValueError,
    UnknownOptionError,
)
from .simtime import SIMTIME_INVALID, SimulationTime

__all__ = [
    'Canary',
    'MAGIC_VALUE',
    'magic_init',
    'magic_assert',
    'magic_clear',
    'Configuration',
    'ConfigurationOptions',
    'LogLevel',
    'parse',
    'free',
    'get_log_level',
    'ConfigParseError',
    'LivenessViolation',
    'MalformedOptionError',
    'MissingRequiredValueError',
    'UnknownOptionError',
    'SIMTIME_INVALID',
    'SimulationTime',
]
