"""Tests for the liveness canary."""

import pytest

from netsim.canary import MAGIC_VALUE, Canary, magic_assert, magic_clear, magic_init
from netsim.errors import LivenessViolation


class Widget(Canary):
    def __init__(self, name):
        self.name = name
        magic_init(self)

    def release(self):
        magic_assert(self)
        magic_clear(self)

    def describe(self):
        magic_assert(self)
        return self.name


def test_initialized_object_passes_checks():
    widget = Widget("w")
    assert widget.magic == MAGIC_VALUE
    assert widget.is_live
    magic_assert(widget)
    assert widget.describe() == "w"


def test_use_after_release_is_detected():
    widget = Widget("w")
    widget.release()
    assert widget.magic == 0
    assert not widget.is_live
    with pytest.raises(LivenessViolation):
        widget.describe()


def test_double_release_is_detected():
    widget = Widget("w")
    widget.release()
    with pytest.raises(LivenessViolation):
        widget.release()


def test_none_reference_fails():
    with pytest.raises(LivenessViolation):
        magic_assert(None)


def test_uninitialized_object_fails():
    class Bare(Canary):
        pass

    with pytest.raises(LivenessViolation):
        magic_assert(Bare())


def test_object_without_marker_fails():
    with pytest.raises(LivenessViolation):
        magic_assert(object())


def test_liveness_violation_is_an_assertion_error():
    """Violations are programming errors, not input errors."""
    assert issubclass(LivenessViolation, AssertionError)
    assert not issubclass(LivenessViolation, ValueError)
