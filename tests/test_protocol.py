"""Tests for the three-step suspension protocol."""

from __future__ import annotations

import errno

import pytest

from doresult import Carrier, Frame, FrameState, Suspension, propagate


class RecordingFrame:
    """Stand-in awaiting frame that records what the protocol does to it."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []

    def finalize_error(self, code: int) -> None:
        self.calls.append(("finalize_error", code))

    def destroy(self) -> None:
        self.calls.append(("destroy", None))


def test_ready_is_always_false() -> None:
    assert Suspension(Carrier.of(1)).ready() is False
    assert Suspension(Carrier.failure(1)).ready() is False


def test_value_resumes_without_touching_the_frame() -> None:
    frame = RecordingFrame()
    suspension = Suspension(Carrier.of("payload"))

    assert suspension.suspend(frame) is False  # type: ignore[arg-type]
    assert suspension.resume() == "payload"
    assert frame.calls == []


def test_error_finalizes_then_destroys_the_awaiting_frame() -> None:
    frame = RecordingFrame()
    suspension = Suspension(Carrier.failure(errno.ENOENT))

    assert suspension.suspend(frame) is True  # type: ignore[arg-type]
    assert frame.calls == [("finalize_error", errno.ENOENT), ("destroy", None)]


def test_suspend_on_real_frame_forwards_the_code() -> None:
    stopped_at: list[str] = []

    def body():
        try:
            yield Carrier.of(None)
            stopped_at.append("resumed")
            yield Carrier.failure(errno.EPIPE)
            stopped_at.append("after")
        finally:
            stopped_at.append("closed")

    frame: Frame[int] = Frame("body")

    assert frame.run(body) is frame.carrier
    assert frame.state is FrameState.DESTROYED_ON_PROPAGATED_ERROR
    assert frame.carrier.error() == errno.EPIPE
    assert frame.position == 2
    assert stopped_at == ["resumed", "closed"]


def test_propagate_wraps_carrier() -> None:
    carrier = Carrier.of(5)
    suspension = propagate(carrier)

    assert isinstance(suspension, Suspension)
    assert suspension.carrier is carrier
    assert repr(suspension) == "Suspension(Carrier(value=5))"


def test_propagate_rejects_non_carriers() -> None:
    with pytest.raises(TypeError, match="Carrier"):
        propagate(5)  # type: ignore[arg-type]
