"""
The suspension protocol run at every propagation point.

When a frame body yields a carrier, the frame wraps it in a
:class:`Suspension` and drives the three steps in order:

1. ``ready()`` is always ``False``, so the decision step always runs.
2. ``suspend(frame)`` forwards an error into the awaiting frame's own slot and
   destroys that frame, returning ``True``; a value returns ``False``.
3. ``resume()`` hands the value back as the result of the ``yield``.

Every step resolves synchronously; "suspended" here means "the frame has been
torn down and control goes back to its caller", never a yield to a loop.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, TypeVar

from doresult.carrier import Carrier

if TYPE_CHECKING:
    from doresult.frame import Frame

T = TypeVar("T")


class Suspension(Generic[T]):
    """Awaiter binding one carrier to the propagation point that yields it."""

    __slots__ = ("carrier",)

    def __init__(self, carrier: Carrier[T]) -> None:
        if not isinstance(carrier, Carrier):
            raise TypeError(f"propagate() expects a Carrier, got {type(carrier).__name__}")
        self.carrier = carrier

    def ready(self) -> bool:
        return False

    def suspend(self, frame: Frame) -> bool:
        """Decide whether ``frame`` resumes (``False``) or stays down (``True``)."""

        if self.carrier:
            return False
        frame.finalize_error(self.carrier.error())
        frame.destroy()
        return True

    def resume(self) -> T:
        return self.carrier.value

    def __repr__(self) -> str:
        return f"Suspension({self.carrier!r})"


def propagate(carrier: Carrier[T]) -> Suspension[T]:
    """Mark ``carrier`` as a propagation point: ``value = yield propagate(f())``.

    Yielding a bare carrier is equivalent; this spelling makes the early
    return visible at the call site.
    """

    return Suspension(carrier)


__all__ = ["Suspension", "propagate"]
