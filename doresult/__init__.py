"""
doresult - early-return error propagation for Python generators.

Decorate a generator function with ``@do`` and it returns a boolean-testable
:class:`Carrier` holding either a value or an unsigned error code. Inside the
body, ``yield`` on another carrier is a propagation point: a value resumes
the body, an error finalizes the caller with the same code and tears the body
down through its own ``with``/``finally`` blocks.

Example:
    >>> import errno
    >>> from doresult import Err, do
    >>>
    >>> @do
    ... def parse_port(raw: str):
    ...     if not raw.isdigit():
    ...         return Err(errno.EINVAL)
    ...     return int(raw)
    >>>
    >>> @do
    ... def endpoint(host: str, raw_port: str):
    ...     port = yield parse_port(raw_port)
    ...     return f"{host}:{port}"
    >>>
    >>> endpoint("localhost", "80").value
    'localhost:80'
    >>> endpoint("localhost", "eighty").error() == errno.EINVAL
    True
"""

from doresult.carrier import Carrier, Err, Ok, Slot, SlotState
from doresult.config import RESERVED_FAULT_CODE, FaultPolicy, Settings, load_settings
from doresult.do import CarrierFunction, do
from doresult.errors import (
    CarrierAccessError,
    DoResultError,
    FrameStateError,
    InvalidErrorCodeError,
    SlotAlreadyFinalizedError,
)
from doresult.frame import Frame, FrameState
from doresult.protocol import Suspension, propagate

__version__ = "0.1.0"

__all__ = [
    # Carriers
    "Carrier",
    "Err",
    "Ok",
    "Slot",
    "SlotState",
    # Protocol and frames
    "Frame",
    "FrameState",
    "Suspension",
    "propagate",
    # Decorator
    "CarrierFunction",
    "do",
    # Configuration
    "FaultPolicy",
    "RESERVED_FAULT_CODE",
    "Settings",
    "load_settings",
    # Errors
    "CarrierAccessError",
    "DoResultError",
    "FrameStateError",
    "InvalidErrorCodeError",
    "SlotAlreadyFinalizedError",
]
