"""Process-wide conventions shared with the virtual network stack."""

import ipaddress
import socket


# Descriptors handed out for virtual sockets start here; anything lower is a
# real OS file.  Must stay above the ``ulimit -n`` of large simulations.
VNETWORK_MIN_SD = 30000

# Socket buffer defaults used when TCP autotuning is disabled (see ``man tcp``).
DEFAULT_SEND_BUFFER_SIZE = 131072
DEFAULT_RECV_BUFFER_SIZE = 174760


def is_virtual_descriptor(sd: int) -> bool:
    """Return ``True`` if ``sd`` belongs to a virtual socket."""
    return sd >= VNETWORK_MIN_SD


def ntoa(ip: int) -> str:
    """Format an IPv4 address held in network byte order as dotted-quad text."""
    return str(ipaddress.IPv4Address(socket.ntohl(ip)))


__all__ = [
    "VNETWORK_MIN_SD",
    "DEFAULT_SEND_BUFFER_SIZE",
    "DEFAULT_RECV_BUFFER_SIZE",
    "is_virtual_descriptor",
    "ntoa",
]
