"""
Environment-driven settings for doresult.

``DORESULT_DEBUG`` turns on per-propagation-point debug logging and
``DORESULT_FAULT_POLICY`` picks what a frame does with an exception escaping
its body. The debug flag is read when a function is decorated. The fault
policy is read on the first call of a function decorated without
``on_fault=``, so a bad value never breaks an import.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Final

DEBUG_ENV_VAR: Final[str] = "DORESULT_DEBUG"
FAULT_POLICY_ENV_VAR: Final[str] = "DORESULT_FAULT_POLICY"

MAX_ERROR_CODE: Final[int] = 2**64 - 1
# Code written by FaultPolicy.CONVERT; never produced by the OS.
RESERVED_FAULT_CODE: Final[int] = MAX_ERROR_CODE

_TRUTHY = ("1", "true", "yes")


class FaultPolicy(str, Enum):
    """What the fault hook does with an exception raised inside a frame body."""

    PROPAGATE = "propagate"
    CONVERT = "convert"

    @classmethod
    def parse(cls, raw: str) -> FaultPolicy:
        normalized = raw.strip().lower()
        for policy in cls:
            if policy.value == normalized:
                return policy
        choices = ", ".join(policy.value for policy in cls)
        raise ValueError(
            f"Unknown fault policy {raw!r} in ${FAULT_POLICY_ENV_VAR}; expected one of: {choices}"
        )


@dataclass(frozen=True)
class Settings:
    debug: bool = False
    fault_policy: FaultPolicy = FaultPolicy.PROPAGATE


def debug_from_env(environ: Mapping[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    return env.get(DEBUG_ENV_VAR, "").lower() in _TRUTHY


def fault_policy_from_env(environ: Mapping[str, str] | None = None) -> FaultPolicy:
    env = os.environ if environ is None else environ
    raw_policy = env.get(FAULT_POLICY_ENV_VAR, "")
    return FaultPolicy.parse(raw_policy) if raw_policy.strip() else FaultPolicy.PROPAGATE


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from ``environ`` (defaults to ``os.environ``)."""

    return Settings(
        debug=debug_from_env(environ), fault_policy=fault_policy_from_env(environ)
    )


__all__ = [
    "DEBUG_ENV_VAR",
    "FAULT_POLICY_ENV_VAR",
    "FaultPolicy",
    "MAX_ERROR_CODE",
    "RESERVED_FAULT_CODE",
    "Settings",
    "debug_from_env",
    "fault_policy_from_env",
    "load_settings",
]
