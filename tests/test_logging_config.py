import logging

import pytest

from intent_packet import build_packet
from intent_packet.composer import document_number
from intent_packet.logging_config import document_context, setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger("intent_packet")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)


def test_repeated_setup_does_not_stack_handlers(package_logger):
    setup_logging()
    setup_logging(logging.DEBUG)
    assert len(package_logger.handlers) == 1
    assert package_logger.level == logging.DEBUG


def test_level_names_and_env_default(package_logger, monkeypatch):
    setup_logging("warning")
    assert package_logger.level == logging.WARNING

    monkeypatch.setattr("intent_packet.config.LOG_LEVEL", "DEBUG")
    setup_logging()
    assert package_logger.level == logging.DEBUG

    setup_logging("not-a-level")
    assert package_logger.level == logging.INFO


def test_records_are_stamped_with_document_number(package_logger, tmp_path):
    log_file = tmp_path / "packet.log"
    setup_logging(log_file=str(log_file))
    assert len(package_logger.handlers) == 2

    child = logging.getLogger("intent_packet.composer")
    child.info("outside")
    with document_context("DOC-00000042"):
        child.info("inside")
    for handler in package_logger.handlers:
        handler.flush()

    content = log_file.read_text(encoding="utf-8")
    assert "Logging initialized at INFO." in content
    assert "intent_packet.composer - INFO - [-] outside" in content
    assert "intent_packet.composer - INFO - [DOC-00000042] inside" in content


def test_packet_generation_logs_under_its_document(package_logger, tmp_path, packet_args,
                                                   no_images):
    log_file = tmp_path / "packet.log"
    setup_logging(log_file=str(log_file))
    build_packet(**packet_args, image_fetcher=no_images)
    for handler in package_logger.handlers:
        handler.flush()

    doc = document_number(packet_args["generated_at"])
    content = log_file.read_text(encoding="utf-8")
    assert f"[{doc}] Composed packet {doc}" in content
