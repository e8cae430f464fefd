import logging as stdlib_logging

import pytest
from loguru import logger

from v0_mcp.config import Settings
from v0_mcp.logging import log_tool_call, setup_logging


def test_default_log_level():
    s = Settings()
    assert s.log_level == "INFO"


def test_log_level_override(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    s = Settings()
    assert s.log_level == "WARNING"


def test_setup_logging_writes_to_stderr_only(capsys):
    setup_logging("DEBUG")
    logger.info("test message")
    captured = capsys.readouterr()
    assert "test message" in captured.err
    assert captured.out == ""


def test_setup_logging_intercepts_stdlib(capsys):
    setup_logging("DEBUG")
    stdlib_logger = stdlib_logging.getLogger("test.stdlib")
    stdlib_logger.info("stdlib forwarded")
    captured = capsys.readouterr()
    assert "stdlib forwarded" in captured.err


def test_setup_logging_respects_level(capsys):
    setup_logging("WARNING")
    logger.info("quiet")
    logger.warning("loud")
    captured = capsys.readouterr()
    assert "quiet" not in captured.err
    assert "loud" in captured.err


def test_setup_logging_quiets_http_libraries():
    setup_logging("DEBUG")
    assert stdlib_logging.getLogger("httpx").level == stdlib_logging.WARNING


def test_log_tool_call_logs_success(capsys):
    setup_logging("DEBUG")
    with log_tool_call("list_templates"):
        pass
    err = capsys.readouterr().err
    assert "tool list_templates called" in err
    assert "tool list_templates -> ok" in err


def test_log_tool_call_logs_and_reraises_failure(capsys):
    setup_logging("DEBUG")
    with pytest.raises(RuntimeError):
        with log_tool_call("generate_component"):
            raise RuntimeError("boom")
    err = capsys.readouterr().err
    assert "tool generate_component -> FAILED" in err
    assert "boom" in err


def test_log_tool_call_binds_tool_and_request_id(capsys):
    setup_logging("DEBUG")
    with log_tool_call("improve_component"):
        logger.info("inside the call")
    lines = [line for line in capsys.readouterr().err.splitlines() if "inside the call" in line]
    assert lines
    assert "| improve_component#" in lines[0]
    assert "| -#- |" not in lines[0]


def test_log_lines_outside_tool_calls_use_placeholders(capsys):
    setup_logging("DEBUG")
    logger.info("startup line")
    (line,) = [line for line in capsys.readouterr().err.splitlines() if "startup line" in line]
    assert "| -#- |" in line
