from __future__ import annotations

import logging
from typing import Iterator

import pytest

from toolscope.core import logging_config
from toolscope.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    SIMPLE_FORMAT,
    get_logger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _console_format() -> str:
    [handler] = logging.getLogger().handlers
    return handler.formatter._fmt  # type: ignore[union-attr]


@pytest.mark.parametrize(
    "fmt,expected",
    [("simple", SIMPLE_FORMAT), ("json", JSON_FORMAT), ("detailed", DETAILED_FORMAT), ("other", DETAILED_FORMAT)],
)
def test_setup_logging_formats(fmt: str, expected: str) -> None:
    setup_logging(log_level="warning", log_format=fmt, enable_file=False)
    assert _console_format() == expected
    assert logging.getLogger().handlers[0].level == logging.WARNING


def test_setup_logging_replaces_handlers() -> None:
    setup_logging(enable_file=False)
    setup_logging(enable_file=False)
    assert len(logging.getLogger().handlers) == 1


def test_module_levels_applied() -> None:
    setup_logging(enable_file=False)
    for name, level in logging_config.MODULE_LOG_LEVELS.items():
        assert logging.getLogger(name).level == logging.getLevelName(level)


def test_file_logging(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(logging_config, "ENABLE_FILE_LOGGING", True)
    monkeypatch.setattr(logging_config, "LOG_FILE_DIR", str(tmp_path / "logs"))

    setup_logging(enable_file=True)
    file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
    try:
        assert len(file_handlers) == 1
        assert (tmp_path / "logs" / "toolscope.log").exists()
    finally:
        for h in file_handlers:
            h.close()


def test_get_logger() -> None:
    assert get_logger("toolscope.x") is logging.getLogger("toolscope.x")
