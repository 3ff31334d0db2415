# File: tests/test_logger.py
import logging

import pytest

from page_scout.logger import LOGGER_NAME, configure, get_logger


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    configure(level="INFO")


def test_child_loggers_share_handlers(tmp_path):
    log_file = tmp_path / "logs" / "scout.log"
    configure(level="DEBUG", log_file=log_file)

    get_logger("crawler").debug("visited %s", "https://example.com/a")
    for handler in logging.getLogger(LOGGER_NAME).handlers:
        handler.flush()

    text = log_file.read_text(encoding="utf-8")
    assert "PageScout.crawler" in text
    assert "visited https://example.com/a" in text


def test_level_from_environment(monkeypatch):
    monkeypatch.setenv("PAGE_SCOUT_LOG_LEVEL", "warning")
    lg = configure()
    assert lg.level == logging.WARNING
    assert logging.getLogger("aiohttp.access").level == logging.WARNING


def test_debug_level_unmutes_aiohttp():
    configure(level=logging.DEBUG)
    assert logging.getLogger("aiohttp.client").level == logging.DEBUG


def test_unknown_level_rejected():
    with pytest.raises(ValueError):
        configure(level="LOUD")


def test_get_logger_names():
    assert get_logger().name == "PageScout"
    assert get_logger("sitemap").name == "PageScout.sitemap"
    assert not get_logger().propagate
