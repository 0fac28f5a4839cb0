import logging
from logging.handlers import RotatingFileHandler

import pytest

from sshhop.config import Config
from sshhop.log_setup import LOG_FILE_NAME, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_logs_go_to_rotating_file(tmp_path, restore_root_logger):
    log_path = setup_logging(log_dir=str(tmp_path / "logs"))

    assert log_path == str(tmp_path / "logs" / LOG_FILE_NAME)
    handlers = restore_root_logger.handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], RotatingFileHandler)
    assert restore_root_logger.level == logging.INFO

    logging.getLogger("sshhop.test").info("hello from the test")
    handlers[0].flush()
    with open(log_path, encoding="utf-8") as f:
        assert "sshhop.test - INFO - hello from the test" in f.read()


def test_debug_setting_enables_verbose_logging(tmp_path, monkeypatch, restore_root_logger):
    monkeypatch.setenv("SSHHOP_DEBUG", "1")

    setup_logging(Config(config_dir=str(tmp_path)), log_dir=str(tmp_path))

    assert restore_root_logger.level == logging.DEBUG
    assert logging.getLogger("textual").level == logging.INFO
