"""Shared pytest fixtures for the tlvlog test suite."""

import pytest

FIXED_TIME = 1458304571


class FailingSink:
    """Binary sink whose *fail_on*-th write (1-based) raises OSError."""

    def __init__(self, fail_on: int, error: OSError | None = None):
        self.fail_on = fail_on
        self.error = error or OSError(28, "No space left on device")
        self.calls = 0
        self.data = bytearray()

    def write(self, data: bytes) -> int:
        self.calls += 1
        if self.calls >= self.fail_on:
            raise self.error
        self.data += data
        return len(data)


@pytest.fixture()
def fixed_clock():
    """Clock that always reports the same epoch second."""
    return lambda: FIXED_TIME


@pytest.fixture()
def failing_sink():
    """Factory for sinks that fail on the Nth write."""
    return FailingSink
