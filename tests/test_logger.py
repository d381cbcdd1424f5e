"""Tests for scriptscope.utils.logger — buffer, timers and file output."""

from __future__ import annotations

import contextvars
import pathlib

import pytest

from scriptscope.utils import logger


@pytest.fixture(autouse=True)
def _fresh_buffer() -> None:
    logger.clear_log_buffer()


class TestLogger:
    """Tests for Logger output."""

    def test_lines_are_buffered_without_ansi(self) -> None:
        logger.create_logger("Test").info("hello", {"count": 3, "ok": True})
        line = logger.get_log_buffer()[-1]
        assert "\033[" not in line
        assert "[Test] hello" in line
        assert "count=3" in line
        assert "ok=True" in line

    def test_writes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger.create_logger("Test").warn("careful")
        assert "careful" in capsys.readouterr().err

    def test_timer_round_trip(self) -> None:
        log = logger.create_logger("Test")
        log.start_timer("step")
        assert log.end_timer("step") >= 0
        assert "Completed: step" in logger.get_log_buffer()[-1]

    def test_unstarted_timer(self) -> None:
        assert logger.create_logger("Test").end_timer("never") == 0.0
        assert 'Timer "never" was not started' in logger.get_log_buffer()[-1]

    def test_clear(self) -> None:
        logger.create_logger("Test").debug("x")
        logger.clear_log_buffer()
        assert logger.get_log_buffer() == []

    def test_clear_in_copied_context_leaves_parent_alone(self) -> None:
        log = logger.create_logger("Test")
        log.info("server")

        def request() -> list[str]:
            logger.clear_log_buffer()
            log.info("request")
            return logger.get_log_buffer()

        child = contextvars.copy_context().run(request)

        assert len(child) == 1
        assert "request" in child[0]
        parent = logger.get_log_buffer()
        assert len(parent) == 1
        assert "server" in parent[0]


class TestFormatDuration:
    """Tests for format_duration()."""

    @pytest.mark.parametrize(
        ("ms", "expected"),
        [(250, "250ms"), (1500, "1.50s"), (90000, "1m 30.0s")],
    )
    def test_format(self, ms: float, expected: str) -> None:
        assert logger.format_duration(ms) == expected


class TestLogFile:
    """Tests for start_log_file() and end_log_file()."""

    def test_disabled_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("WRITE_TO_FILE", raising=False)
        assert logger.start_log_file("example.com") is None

    def test_writes_clean_lines(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        monkeypatch.setenv("WRITE_TO_FILE", "true")
        monkeypatch.chdir(tmp_path)
        path = logger.start_log_file("www.example.com")
        assert path is not None
        logger.create_logger("Test").info("to file")
        logger.end_log_file()

        text = pathlib.Path(path).read_text(encoding="utf-8")
        assert "Script Elements - www.example.com" in text
        assert "[Test] to file" in text
        assert "\033[" not in text
