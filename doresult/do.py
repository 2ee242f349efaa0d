"""
The do decorator for doresult.

This module provides the @do decorator that turns generator functions into
carrier-returning functions whose ``yield`` statements are early-return
propagation points.
"""

from __future__ import annotations

import inspect
import types
from collections.abc import Callable
from typing import Any, Generic, ParamSpec, TypeVar, overload

from doresult.carrier import Carrier
from doresult.config import FaultPolicy, debug_from_env, fault_policy_from_env
from doresult.frame import Frame

P = ParamSpec("P")
T = TypeVar("T")


class CarrierFunction(Generic[P, T]):
    """Callable wrapper that runs each invocation in a fresh :class:`Frame`."""

    def __init__(
        self,
        func: Callable[P, Any],
        *,
        fault_policy: FaultPolicy | None = None,
        debug: bool = False,
    ) -> None:
        self.original_func = func
        # None defers to $DORESULT_FAULT_POLICY, resolved on first access.
        self._fault_policy = fault_policy
        self.debug = debug

        for attr in ("__doc__", "__module__", "__name__", "__qualname__", "__annotations__"):
            value = getattr(func, attr, None)
            if value is not None:
                setattr(self, attr, value)
        self.__wrapped__ = func

        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError):
            signature = None
        if signature is not None:
            self.__signature__ = signature

    @property
    def fault_policy(self) -> FaultPolicy:
        if self._fault_policy is None:
            self._fault_policy = fault_policy_from_env()
        return self._fault_policy

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> Carrier[T]:
        frame: Frame[T] = Frame(
            getattr(self, "__qualname__", "<do>"),
            fault_policy=self.fault_policy,
            debug=self.debug,
        )
        return frame.run(self.original_func, *args, **kwargs)

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def __repr__(self) -> str:
        policy = "env" if self._fault_policy is None else self._fault_policy.value
        return f"<do function {getattr(self, '__qualname__', '?')} policy={policy}>"


@overload
def do(func: Callable[P, Any], /) -> CarrierFunction[P, Any]: ...


@overload
def do(
    *, on_fault: FaultPolicy | str | None = None
) -> Callable[[Callable[P, Any]], CarrierFunction[P, Any]]: ...


def do(
    func: Callable[P, Any] | None = None,
    /,
    *,
    on_fault: FaultPolicy | str | None = None,
) -> Any:
    """
    Decorator that turns a generator function into a carrier-returning function.

    Calling the decorated function starts its body immediately and returns a
    :class:`~doresult.carrier.Carrier` once the body has finished, returned
    early with ``Err``, or been torn down by a propagated error.

    Inside the body, ``value = yield other()`` is a propagation point: if
    ``other()`` holds a value the body resumes with it; if it holds an error,
    the same code becomes this function's result, the body's ``with`` and
    ``finally`` blocks unwind, and no later statement runs.

    Usage:
        @do
        def read_config(path: str):
            text = yield read_from_file(path, encoding="utf-8")
            if not text:
                return Err(errno.ENODATA)
            return text.splitlines()

        carrier = read_config("app.cfg")
        if carrier:
            print(carrier.value)
        else:
            print("failed with", carrier.error())

    Args:
        func: A generator function (or plain function) returning a value,
            ``Ok(value)``, ``Err(code)`` or a finalized carrier.
        on_fault: Fault policy for exceptions escaping the body. Defaults to
            ``$DORESULT_FAULT_POLICY`` (read on the first call), else
            ``FaultPolicy.PROPAGATE``.
    """

    if on_fault is None or isinstance(on_fault, FaultPolicy):
        policy = on_fault
    else:
        policy = FaultPolicy.parse(on_fault)
    debug = debug_from_env()

    def decorate(target: Callable[P, Any]) -> CarrierFunction[P, Any]:
        return CarrierFunction(target, fault_policy=policy, debug=debug)

    if func is None:
        return decorate
    return decorate(func)


__all__ = ["CarrierFunction", "do"]
