"""Tests for the ``python -m doresult`` entry point."""

from __future__ import annotations

import errno
import logging
from pathlib import Path

import pytest

from doresult.__main__ import InterceptHandler, build_parser, handle_read, main
from doresult.config import FAULT_POLICY_ENV_VAR


@pytest.fixture(autouse=True)
def _restore_package_logger():
    package_logger = logging.getLogger("doresult")
    saved = (package_logger.handlers[:], package_logger.level, package_logger.propagate)
    yield
    package_logger.handlers = saved[0]
    package_logger.setLevel(saved[1])
    package_logger.propagate = saved[2]


def test_read_existing_file_prints_content(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    target = tmp_path / "existing_file.txt"
    target.write_text("hello from disk", encoding="utf-8")

    exit_code = main(["read", str(target), "--encoding", "utf-8"])

    assert exit_code == 0
    assert capsys.readouterr().out == "hello from disk\n"


def test_read_binary_writes_raw_bytes(
    tmp_path: Path, capsysbinary: pytest.CaptureFixture[bytes]
) -> None:
    target = tmp_path / "raw.bin"
    target.write_bytes(b"\x00\x01raw")

    assert main(["read", str(target)]) == 0
    assert capsysbinary.readouterr().out == b"\x00\x01raw"


def test_read_missing_file_reports_the_code(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = main(["read", str(tmp_path / "nope.txt")])

    assert exit_code == 1
    out = capsys.readouterr().out
    assert out.startswith(f"Failed to read file with error {errno.ENOENT} (ENOENT:")


def test_parser_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_verbose_routes_package_logs_through_loguru(tmp_path: Path) -> None:
    target = tmp_path / "f.txt"
    target.write_text("x")

    assert main(["-v", "read", str(target)]) == 0

    package_logger = logging.getLogger("doresult")
    assert package_logger.level == logging.DEBUG
    assert any(isinstance(handler, InterceptHandler) for handler in package_logger.handlers)


@pytest.mark.parametrize("raw", ["0", "-4", "many"])
def test_chunk_size_must_be_a_positive_int(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], raw: str
) -> None:
    target = tmp_path / "f.txt"
    target.write_text("hello")

    with pytest.raises(SystemExit) as excinfo:
        main(["read", str(target), "--chunk-size", raw])

    assert excinfo.value.code == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "--chunk-size" in captured.err


def test_read_dispatches_through_the_subcommand_handler() -> None:
    args = build_parser().parse_args(["read", "some/path"])

    assert args.func is handle_read
    assert args.chunk_size == 4096


def test_invalid_fault_policy_environment_is_a_usage_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv(FAULT_POLICY_ENV_VAR, "abort")
    target = tmp_path / "f.txt"
    target.write_text("hello")

    with pytest.raises(SystemExit) as excinfo:
        main(["read", str(target)])

    assert excinfo.value.code == 2
    assert "Unknown fault policy 'abort'" in capsys.readouterr().err
