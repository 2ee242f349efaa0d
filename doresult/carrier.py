"""
Value-or-error carriers and the write-once slot they observe.

A :class:`Slot` is the cell a frame writes its outcome into, exactly once.
A :class:`Carrier` is the handle callers hold on that cell; any number of
carriers may share one slot and all of them observe the single write.

:class:`Ok` and :class:`Err` are what a frame body *returns* to finalize
itself, mirroring the split between a value and an "unexpected" code.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, NoReturn, TypeVar

from doresult.config import MAX_ERROR_CODE
from doresult.errors import (
    CarrierAccessError,
    InvalidErrorCodeError,
    SlotAlreadyFinalizedError,
)

# =========================================================
# Type Vars
# =========================================================
T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)
U = TypeVar("U")


def validate_code(code: Any) -> int:
    """Return ``code`` if it is a valid unsigned 64-bit error code."""

    if isinstance(code, bool) or not isinstance(code, int):
        raise TypeError(f"Error codes must be int, got {type(code).__name__}")
    if code < 0 or code > MAX_ERROR_CODE:
        raise InvalidErrorCodeError(code)
    return code


# =========================================================
# Return markers
# =========================================================
@dataclass(frozen=True)
class Ok(Generic[T]):
    """Explicit success marker for a frame body's ``return``."""

    value: T


@dataclass(frozen=True)
class Err:
    """Leaf error marker: ``return Err(errno.ENOENT)``."""

    code: int

    def __post_init__(self) -> None:
        validate_code(self.code)


# =========================================================
# Slot
# =========================================================
class SlotState(Enum):
    UNSET = "unset"
    VALUE = "value"
    ERROR = "error"


class Slot(Generic[T]):
    """Write-once cell holding a value, an error code, or nothing yet."""

    __slots__ = ("_state", "_payload")

    def __init__(self) -> None:
        self._state = SlotState.UNSET
        self._payload: Any = None

    @property
    def state(self) -> SlotState:
        return self._state

    @property
    def payload(self) -> Any:
        return self._payload

    def write_value(self, value: T) -> None:
        self._write(SlotState.VALUE, value)

    def write_error(self, code: int) -> None:
        self._write(SlotState.ERROR, validate_code(code))

    def _write(self, state: SlotState, payload: Any) -> None:
        if self._state is not SlotState.UNSET:
            raise SlotAlreadyFinalizedError(
                (self._state.value, self._payload), (state.value, payload)
            )
        self._payload = payload
        self._state = state

    def __repr__(self) -> str:
        if self._state is SlotState.UNSET:
            return "Slot(<unset>)"
        return f"Slot({self._state.value}={self._payload!r})"


# =========================================================
# Carrier
# =========================================================
class Carrier(Generic[T_co]):
    """Boolean-testable handle over a shared :class:`Slot`.

    Truthiness reports whether the slot holds a value. ``value`` is only
    meaningful when the carrier is truthy, ``error()`` only when it is falsy;
    the wrong accessor raises :class:`CarrierAccessError`.
    """

    __slots__ = ("_slot",)

    def __init__(self, slot: Slot[T_co]) -> None:
        self._slot = slot

    @classmethod
    def of(cls, value: T) -> Carrier[T]:
        """Return a carrier already finalized with ``value``."""

        slot: Slot[T] = Slot()
        slot.write_value(value)
        return cls(slot)

    @classmethod
    def failure(cls, code: int) -> Carrier[NoReturn]:
        """Return a carrier already finalized with error ``code``."""

        slot: Slot[NoReturn] = Slot()
        slot.write_error(code)
        return cls(slot)

    @property
    def slot(self) -> Slot[T_co]:
        return self._slot

    @property
    def is_finalized(self) -> bool:
        return self._slot.state is not SlotState.UNSET

    def __bool__(self) -> bool:
        return self._slot.state is SlotState.VALUE

    @property
    def value(self) -> T_co:
        """The held value. Test the carrier first."""

        if self._slot.state is not SlotState.VALUE:
            raise CarrierAccessError("value", self._slot)
        return self._slot.payload

    def error(self) -> int:
        """The held error code. Test the carrier first."""

        if self._slot.state is not SlotState.ERROR:
            raise CarrierAccessError("error()", self._slot)
        return self._slot.payload

    def unwrap(self) -> T_co:
        """Return the value or raise :class:`CarrierAccessError` naming the code."""

        return self.value

    def unwrap_or(self, default: U) -> T_co | U:
        """Return the value, or ``default`` when the carrier holds an error."""

        if self:
            return self._slot.payload
        return default

    def unwrap_or_else(self, default_fn: Callable[[int], U]) -> T_co | U:
        """Return the value, or compute a default from the error code."""

        if self:
            return self._slot.payload
        return default_fn(self.error())

    def map(self, f: Callable[[T_co], U]) -> Carrier[U]:
        """Apply ``f`` to the value; an error is forwarded unchanged."""

        if self:
            return Carrier.of(f(self._slot.payload))
        return Carrier.failure(self.error())

    def __repr__(self) -> str:
        state = self._slot.state
        if state is SlotState.VALUE:
            return f"Carrier(value={self._slot.payload!r})"
        if state is SlotState.ERROR:
            return f"Carrier(error={self._slot.payload})"
        return "Carrier(<unset>)"


__all__ = [
    "Carrier",
    "Err",
    "Ok",
    "Slot",
    "SlotState",
    "validate_code",
]
