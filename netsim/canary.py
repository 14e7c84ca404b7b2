"""Memory magic for detecting use of released objects.

A guarded class carries a ``magic`` attribute.  It is set to
:data:`MAGIC_VALUE` with :func:`magic_init` once construction is complete,
checked with :func:`magic_assert` at the start of every public operation and
reset with :func:`magic_clear` when the object is released.  A failed check
raises :class:`~netsim.errors.LivenessViolation`, which is a bug in the
caller and is never handled by library code.

The checks follow ``__debug__``: running Python with ``-O`` turns all three
helpers into no-ops.
"""

from typing import Any

from .errors import LivenessViolation


MAGIC_VALUE = 0xAABBCCDD
MAGIC_CLEARED = 0


class Canary:
    """Mixin declaring the magic marker.

    Subclasses call :func:`magic_init` at the end of ``__init__`` and
    :func:`magic_clear` when they are released.
    """

    magic: int = MAGIC_CLEARED

    @property
    def is_live(self) -> bool:
        """Non-asserting liveness test for observers that do not own the object."""
        return not __debug__ or self.magic == MAGIC_VALUE


def magic_init(obj: Any) -> None:
    if __debug__:
        object.__setattr__(obj, "magic", MAGIC_VALUE)


def magic_assert(obj: Any) -> None:
    if __debug__:
        if obj is None:
            raise LivenessViolation("Liveness check on a None reference")
        magic = getattr(obj, "magic", None)
        if magic != MAGIC_VALUE:
            raise LivenessViolation(
                f"{type(obj).__name__} at {id(obj):#x} failed its liveness check "
                f"(magic={magic!r}); it was released or never initialized"
            )


def magic_clear(obj: Any) -> None:
    if __debug__:
        object.__setattr__(obj, "magic", MAGIC_CLEARED)


__all__ = [
    "MAGIC_VALUE",
    "Canary",
    "magic_init",
    "magic_assert",
    "magic_clear",
]
