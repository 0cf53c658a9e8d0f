"""
Tests for logging setup.
"""
import logging

import pytest

from volume_seeder import logger as seeder_logger
from volume_seeder.logger import get_log_file_path, setup_logging


def test_named_logger_level_from_string():
    log = setup_logging("volume_seeder.test_named", level="debug")
    assert log.level == logging.DEBUG


def test_invalid_level_rejected():
    with pytest.raises(ValueError):
        setup_logging("volume_seeder.test_invalid", level="LOUD")


def test_absolute_log_file_used_as_given(tmp_path):
    log_file = tmp_path / "nested" / "seeder.log"
    assert get_log_file_path(str(log_file)) == str(log_file)
    assert log_file.parent.is_dir()


def test_relative_log_file_goes_to_local_logs_outside_production(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(seeder_logger, "is_production", lambda: False)

    assert get_log_file_path("seeder.log") == str(tmp_path / "logs" / "seeder.log")
    assert (tmp_path / "logs").is_dir()


def test_unwritable_production_dir_falls_back(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(seeder_logger, "is_production", lambda: True)
    monkeypatch.setattr(seeder_logger, "PRODUCTION_LOG_DIR", tmp_path / "file" / "logs")
    (tmp_path / "file").write_text("blocks mkdir")

    assert seeder_logger.get_log_directory() == tmp_path / "logs"


def test_root_logger_writes_file(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    log_file = tmp_path / "seeder.log"
    try:
        setup_logging(level="INFO", log_filename=str(log_file), include_console=False)
        logging.getLogger("volume_seeder.test").info("models: seeded")
        for handler in root.handlers:
            handler.flush()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    assert "volume_seeder.test - INFO - models: seeded" in log_file.read_text()
