"""
Per-invocation frame controller.

A :class:`Frame` owns one call of a ``@do`` function: it allocates the slot,
hands out the carrier, runs the body eagerly, and settles into exactly one
terminal :class:`FrameState`.

The body is a generator. Resources it constructs live in its own ``with``
and ``try/finally`` blocks, so destroying the frame is ``generator.close()``:
``GeneratorExit`` is raised at the propagation point and Python unwinds those
blocks innermost first, i.e. in reverse construction order. Nothing after the
propagation point runs.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Generator
from enum import Enum
from typing import Any, Generic, TypeVar

from doresult.carrier import Carrier, Err, Ok, Slot, SlotState
from doresult.config import RESERVED_FAULT_CODE, FaultPolicy
from doresult.errors import CarrierAccessError, FrameStateError
from doresult.protocol import Suspension

T = TypeVar("T")

logger = logging.getLogger(__name__)


class FrameState(Enum):
    CREATED = "created"
    RUNNING = "running"
    COMPLETED_WITH_VALUE = "completed_with_value"
    COMPLETED_WITH_ERROR = "completed_with_error"
    DESTROYED_ON_PROPAGATED_ERROR = "destroyed_on_propagated_error"
    FAULTED = "faulted"

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self]


_TRANSITIONS: dict[FrameState, frozenset[FrameState]] = {
    FrameState.CREATED: frozenset({FrameState.RUNNING}),
    FrameState.RUNNING: frozenset(
        {
            FrameState.COMPLETED_WITH_VALUE,
            FrameState.COMPLETED_WITH_ERROR,
            FrameState.DESTROYED_ON_PROPAGATED_ERROR,
            FrameState.FAULTED,
        }
    ),
    FrameState.COMPLETED_WITH_VALUE: frozenset(),
    FrameState.COMPLETED_WITH_ERROR: frozenset(),
    FrameState.DESTROYED_ON_PROPAGATED_ERROR: frozenset(),
    FrameState.FAULTED: frozenset(),
}


class Frame(Generic[T]):
    """Lifecycle of a single invocation of a carrier-returning function."""

    def __init__(
        self,
        name: str,
        *,
        fault_policy: FaultPolicy = FaultPolicy.PROPAGATE,
        debug: bool = False,
    ) -> None:
        self.name = name
        self.slot: Slot[T] = Slot()
        self.carrier: Carrier[T] = Carrier(self.slot)
        self.state = FrameState.CREATED
        # Number of propagation points reached so far.
        self.position = 0
        # Source line of the propagation point the body is parked at, if any.
        self.suspended_at: int | None = None
        self.fault_policy = fault_policy
        self._debug = debug
        self._generator: Generator[Any, Any, Any] | None = None

    def run(self, body: Callable[..., Any], *args: Any, **kwargs: Any) -> Carrier[T]:
        """Invoke ``body`` immediately and drive it until the frame terminates."""

        self._transition(FrameState.RUNNING)
        try:
            outcome = body(*args, **kwargs)
        except Exception as exc:
            self.unhandled_fault(exc)
            return self.carrier

        if inspect.isgenerator(outcome):
            self._generator = outcome
            self._drive(outcome)
        else:
            self._complete(outcome)
        return self.carrier

    def _drive(self, gen: Generator[Any, Any, Any]) -> None:
        send_value: Any = None
        pending: BaseException | None = None
        while True:
            try:
                if pending is not None:
                    exc, pending = pending, None
                    yielded = gen.throw(exc)
                else:
                    yielded = gen.send(send_value)
            except StopIteration as stop:
                self._release_generator()
                self._complete(stop.value)
                return
            except Exception as exc:
                self._release_generator()
                self.unhandled_fault(exc)
                return

            send_value = None
            self.position += 1
            frame = gen.gi_frame
            self.suspended_at = frame.f_lineno if frame is not None else None

            suspension = _as_suspension(yielded)
            if suspension is None:
                pending = TypeError(
                    f"{self.name} yielded {type(yielded).__name__}; "
                    "only carriers (or propagate(carrier)) may be yielded"
                )
                continue
            if not suspension.carrier.is_finalized:
                pending = CarrierAccessError("propagate", suspension.carrier.slot)
                continue

            if self._debug:
                logger.debug(
                    "frame %s awaiting %r at propagation point %d (line %s)",
                    self.name,
                    suspension.carrier,
                    self.position,
                    self.suspended_at,
                )

            if suspension.ready():
                send_value = suspension.resume()
                continue
            if suspension.suspend(self):
                return
            send_value = suspension.resume()
            self.suspended_at = None

    def _complete(self, result: Any) -> None:
        if isinstance(result, Carrier):
            if not result.is_finalized:
                self.unhandled_fault(CarrierAccessError("return", result.slot))
                return
            result = Ok(result.value) if result else Err(result.error())

        if isinstance(result, Err):
            self.finalize_error(result.code)
            self._transition(FrameState.COMPLETED_WITH_ERROR)
        else:
            self.finalize_value(result.value if isinstance(result, Ok) else result)
            self._transition(FrameState.COMPLETED_WITH_VALUE)

    def finalize_value(self, value: T) -> None:
        self.slot.write_value(value)

    def finalize_error(self, code: int) -> None:
        self.slot.write_error(code)

    def destroy(self) -> None:
        """Tear the frame down after its slot was finalized with a propagated error."""

        if self.slot.state is not SlotState.ERROR:
            raise FrameStateError(
                self.name, self.state, FrameState.DESTROYED_ON_PROPAGATED_ERROR
            )
        self._transition(FrameState.DESTROYED_ON_PROPAGATED_ERROR)
        gen, self._generator = self._generator, None
        if gen is None:
            return
        try:
            gen.close()
        except Exception as exc:
            self._teardown_fault(exc)

    def _teardown_fault(self, exc: Exception) -> None:
        # The slot already holds the propagated error; it is never rewritten.
        if self.fault_policy is FaultPolicy.CONVERT:
            logger.warning(
                "frame %s raised %s while unwinding; keeping propagated error %d",
                self.name,
                type(exc).__name__,
                self.slot.payload,
                exc_info=exc,
            )
            return
        logger.debug("frame %s raised %r while unwinding; re-raising", self.name, exc)
        raise exc

    def unhandled_fault(self, exc: Exception) -> None:
        """Apply the fault policy to an exception that escaped the body."""

        self._transition(FrameState.FAULTED)
        if self.fault_policy is FaultPolicy.CONVERT:
            logger.warning(
                "frame %s faulted with %s; finalizing with reserved code %d",
                self.name,
                type(exc).__name__,
                RESERVED_FAULT_CODE,
                exc_info=exc,
            )
            self.slot.write_error(RESERVED_FAULT_CODE)
            return
        logger.debug("frame %s faulted with %r; re-raising", self.name, exc)
        raise exc

    def _release_generator(self) -> None:
        self._generator = None
        self.suspended_at = None

    def _transition(self, target: FrameState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise FrameStateError(self.name, self.state, target)
        logger.debug("frame %s: %s -> %s", self.name, self.state.value, target.value)
        self.state = target

    def __repr__(self) -> str:
        return f"Frame({self.name!r}, state={self.state.value}, slot={self.slot!r})"


def _as_suspension(yielded: Any) -> Suspension[Any] | None:
    if isinstance(yielded, Suspension):
        return yielded
    if isinstance(yielded, Carrier):
        return Suspension(yielded)
    return None


__all__ = ["Frame", "FrameState"]
