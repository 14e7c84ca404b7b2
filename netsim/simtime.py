"""Simulation time representation.

Simulation time is a count of nanoseconds since the start of the simulation,
stored as an unsigned 64-bit quantity.  Every component of the simulator
uses the same representation so that times can be compared and summed
without unit conversions.  The maximum 64-bit value is reserved as
:data:`SIMTIME_INVALID` and must be checked for before a time is used.

Conversions to and from :class:`pandas.Timedelta` are provided for reporting,
since both share nanosecond resolution.
"""

from __future__ import annotations

from typing import TypeAlias

import numpy as np
import pandas as pd


SimulationTime: TypeAlias = int

SIMTIME_INVALID: SimulationTime = int(np.iinfo(np.uint64).max)

SIMTIME_ONE_NANOSECOND: SimulationTime = 1
SIMTIME_ONE_MICROSECOND: SimulationTime = 1_000
SIMTIME_ONE_MILLISECOND: SimulationTime = 1_000_000
SIMTIME_ONE_SECOND: SimulationTime = 1_000_000_000
SIMTIME_ONE_MINUTE: SimulationTime = 60_000_000_000
SIMTIME_ONE_HOUR: SimulationTime = 3_600_000_000_000


def is_valid_simtime(value: SimulationTime) -> bool:
    """Return ``True`` if ``value`` is a usable simulation time."""

    return isinstance(value, (int, np.integer)) and 0 <= int(value) < SIMTIME_INVALID


def simtime_to_timedelta(value: SimulationTime) -> pd.Timedelta:
    """Convert a simulation time to a :class:`pandas.Timedelta`.

    :raises ValueError: if ``value`` is the invalid sentinel or out of range.
    """
    if not is_valid_simtime(value):
        raise ValueError(f"Cannot convert invalid simulation time {value!r}")
    # pandas stores nanoseconds in a signed 64-bit integer
    if int(value) > np.iinfo(np.int64).max:
        raise ValueError(f"Simulation time {value} exceeds the Timedelta range")
    return pd.Timedelta(int(value), unit="ns")


def simtime_from_timedelta(delta: pd.Timedelta | str) -> SimulationTime:
    """Convert a :class:`pandas.Timedelta` (or a string pandas understands,
    such as ``"10ms"``) into simulation time."""

    td = pd.Timedelta(delta)
    if td is pd.NaT:
        raise ValueError("Cannot convert NaT to simulation time")
    value = int(td.value)
    if value < 0:
        raise ValueError(f"Simulation time cannot be negative: {td}")
    return value


__all__ = [
    "SimulationTime",
    "SIMTIME_INVALID",
    "SIMTIME_ONE_NANOSECOND",
    "SIMTIME_ONE_MICROSECOND",
    "SIMTIME_ONE_MILLISECOND",
    "SIMTIME_ONE_SECOND",
    "SIMTIME_ONE_MINUTE",
    "SIMTIME_ONE_HOUR",
    "is_valid_simtime",
    "simtime_to_timedelta",
    "simtime_from_timedelta",
]
