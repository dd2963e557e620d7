import pytest
import logging
import logging.handlers
from pathlib import Path
from unittest import mock
from rich.logging import RichHandler
from treecopy.core import logger_setup

pytestmark = pytest.mark.usefixtures("restore_root_logger")

@pytest.fixture
def tmp_log_dir(tmp_path):
    d = tmp_path / "logs"
    d.mkdir()
    return d

# --- setup_logging: basic file and console handler ---
def test_setup_logging_file_and_console(tmp_log_dir):
    logger = logger_setup.setup_logging(log_dir=tmp_log_dir, log_level=logging.INFO)
    assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers)
    assert any(isinstance(h, RichHandler) for h in logger.handlers)
    logger.info("test message")
    log_files = list(tmp_log_dir.glob("treecopy_*.log"))
    assert len(log_files) == 1

# --- setup_logging: default directory ---
def test_setup_logging_default_dir(tmp_log_dir, monkeypatch):
    monkeypatch.setattr(logger_setup, "get_default_log_dir", lambda: tmp_log_dir)
    logger_setup.setup_logging(log_level=logging.INFO)
    assert list(tmp_log_dir.glob("treecopy_*.log"))

# --- setup_logging: fallback to home dir on PermissionError ---
def test_setup_logging_fallback_home(monkeypatch, tmp_path):
    real_mkdir = Path.mkdir
    blocked = tmp_path / "blocked"

    def fail_blocked(self, *a, **k):
        if self == blocked:
            raise PermissionError("denied")
        return real_mkdir(self, *a, **k)

    monkeypatch.setattr(Path, "mkdir", fail_blocked)
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    logger = logger_setup.setup_logging(log_dir=blocked, log_level=logging.INFO)
    assert isinstance(logger, logging.Logger)
    assert list((tmp_path / "treecopy_logs").glob("treecopy_*.log"))

# --- setup_logging: no file logging on OSError ---
def test_setup_logging_without_file(monkeypatch, tmp_path):
    def fail_mkdir(*a, **k): raise OSError("fail")
    monkeypatch.setattr(Path, "mkdir", fail_mkdir)
    logger = logger_setup.setup_logging(log_dir=tmp_path / "fail", log_level=logging.INFO)
    assert not any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    assert logger.handlers

# --- setup_logging: Rich failure falls back to a stream handler ---
def test_setup_logging_rich_error(monkeypatch, tmp_log_dir):
    monkeypatch.setattr(logger_setup, "Console", mock.Mock(side_effect=Exception("fail")))
    logger = logger_setup.setup_logging(log_dir=tmp_log_dir, log_level=logging.INFO)
    assert not any(isinstance(h, RichHandler) for h in logger.handlers)
    assert any(type(h) is logging.StreamHandler for h in logger.handlers)

# --- setup_logging: levels and rotation settings ---
def test_setup_logging_levels_and_rotation(tmp_log_dir):
    logger = logger_setup.setup_logging(log_dir=tmp_log_dir, log_level=logging.DEBUG,
                                        console_level=logging.WARNING,
                                        log_file_rotation=2, log_file_max_size=1)
    file_handler = next(h for h in logger.handlers
                        if isinstance(h, logging.handlers.RotatingFileHandler))
    rich_handler = next(h for h in logger.handlers if isinstance(h, RichHandler))
    assert file_handler.backupCount == 2
    assert file_handler.maxBytes == 1024 * 1024
    assert file_handler.level == logging.DEBUG
    assert rich_handler.level == logging.WARNING
    assert logger.level == logging.DEBUG

def test_setup_logging_replaces_handlers(tmp_log_dir):
    logger_setup.setup_logging(log_dir=tmp_log_dir)
    logger = logger_setup.setup_logging(log_dir=tmp_log_dir)
    assert len(logger.handlers) == 2
