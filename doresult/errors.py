"""Exceptions raised when the carrier/frame contract is misused.

Error *values* never travel as exceptions: they live in a carrier's slot. The
types below signal programming mistakes such as dereferencing an error
carrier or writing a slot twice.
"""

from __future__ import annotations

from typing import Any


class DoResultError(Exception):
    """Base class for doresult contract violations."""


class CarrierAccessError(DoResultError, LookupError):
    """Raised when a carrier is read through the wrong accessor."""

    def __init__(self, accessor: str, state: Any) -> None:
        self.accessor = accessor
        self.state = state
        super().__init__(
            f"Cannot call {accessor} on a carrier in state {state!r}\n"
            "Hint: test the carrier first: `if carrier: carrier.value else: carrier.error()`"
        )


class SlotAlreadyFinalizedError(DoResultError, RuntimeError):
    """Raised on a second write to a write-once slot."""

    def __init__(self, current: Any, attempted: Any) -> None:
        self.current = current
        self.attempted = attempted
        super().__init__(
            f"Slot already finalized as {current!r}; refusing to overwrite with {attempted!r}"
        )


class FrameStateError(DoResultError, RuntimeError):
    """Raised when a frame is asked to make an illegal lifecycle transition."""

    def __init__(self, frame_name: str, current: Any, target: Any) -> None:
        self.frame_name = frame_name
        self.current = current
        self.target = target
        super().__init__(
            f"Frame {frame_name!r} cannot move from {current.name} to {target.name}"
        )


class InvalidErrorCodeError(DoResultError, ValueError):
    """Raised when an error code falls outside the unsigned 64-bit range."""

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(
            f"Error code {code} is out of range; expected an integer in [0, 2**64 - 1]"
        )


__all__ = [
    "CarrierAccessError",
    "DoResultError",
    "FrameStateError",
    "InvalidErrorCodeError",
    "SlotAlreadyFinalizedError",
]
