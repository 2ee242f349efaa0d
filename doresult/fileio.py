"""File access expressed as carrier-returning functions.

OS failures become their ``errno`` value; everything else in the module is
ordinary ``@do`` code showing how a collaborator adopts carriers.
"""

from __future__ import annotations

import errno
import os
from collections.abc import Callable
from typing import IO, Any, Final

from frozendict import frozendict

from doresult.carrier import Err
from doresult.config import RESERVED_FAULT_CODE
from doresult.do import do

DEFAULT_CHUNK_SIZE: Final[int] = 4096

ERRNO_NAMES: Final[frozendict[int, str]] = frozendict(errno.errorcode)

Opener = Callable[[str | os.PathLike[str], str], IO[Any]]


def _os_code(exc: OSError) -> int:
    return exc.errno if exc.errno is not None and exc.errno >= 0 else errno.EIO


def describe_error(code: int) -> str:
    """Return ``"ENOENT: No such file or directory"`` style text for ``code``."""

    if code == RESERVED_FAULT_CODE:
        return "internal fault"
    name = ERRNO_NAMES.get(code)
    if name is None:
        return f"unknown error {code}"
    return f"{name}: {os.strerror(code)}"


@do
def open_file(
    path: str | os.PathLike[str],
    mode: str = "rb",
    *,
    opener: Opener = open,
):
    try:
        return opener(path, mode)
    except OSError as exc:
        return Err(_os_code(exc))


@do
def read_from_file(
    path: str | os.PathLike[str],
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    encoding: str | None = None,
    opener: Opener = open,
):
    """Read the whole file at ``path``.

    Yields ``bytes``, or ``str`` when ``encoding`` is given. The open error is
    forwarded unchanged; a failing read finalizes with the read's errno and
    undecodable content with ``EILSEQ``. A ``chunk_size`` below 1 is
    rejected with ``EINVAL`` before the file is opened.
    """

    if chunk_size < 1:
        return Err(errno.EINVAL)

    handle = yield open_file(path, "rb", opener=opener)
    chunks: list[bytes] = []
    with handle:
        while True:
            try:
                chunk = handle.read(chunk_size)
            except OSError as exc:
                return Err(_os_code(exc))
            if not chunk:
                break
            chunks.append(chunk)

    content = b"".join(chunks)
    if encoding is None:
        return content
    try:
        return content.decode(encoding)
    except UnicodeDecodeError:
        return Err(errno.EILSEQ)


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "ERRNO_NAMES",
    "describe_error",
    "open_file",
    "read_from_file",
]
