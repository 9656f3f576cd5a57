import json
import logging

from utils.logger import JsonFormatter, setup_logger


def test_setup_logger_is_idempotent(tmp_path):
    log_file = tmp_path / "logs" / "bot.log"
    first = setup_logger("test.idempotent", log_file=str(log_file))
    second = setup_logger("test.idempotent", log_file=str(log_file))

    assert first is second
    assert len(first.handlers) == 2
    assert log_file.parent.is_dir()


def test_file_handler_uses_env(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "from_env.log"))
    logger = setup_logger("test.env_file", to_console=False)

    logger.info("hello")
    for h in logger.handlers:
        h.flush()

    assert "hello" in (tmp_path / "from_env.log").read_text()


def test_console_only(monkeypatch):
    logger = setup_logger("test.console_only", log_file=None, level="debug")

    assert [type(h) for h in logger.handlers] == [logging.StreamHandler]
    assert logger.level == logging.DEBUG


def test_json_formatter():
    record = logging.LogRecord("bot", logging.INFO, __file__, 1, "SUI momentum: %.2f%%", (3.0,), None)

    entry = json.loads(JsonFormatter().format(record))

    assert entry["level"] == "info"
    assert entry["logger"] == "bot"
    assert entry["message"] == "SUI momentum: 3.00%"
