from __future__ import annotations

import logging
from io import StringIO

from skusync.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_finding,
    log_summary,
    setup_logging,
)
from skusync.models.finding import DuplicateSkuFinding, MissingValueFinding


def test_setup_logging_creates_logger_with_labeled_formatter():
    logger = setup_logging()
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_logging_labeled_prefixes():
    captured_output = StringIO()
    logger = logging.getLogger("test_skusync_labels")
    logger.setLevel(logging.INFO)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    handler = logging.StreamHandler(captured_output)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(SUMMARY_LEVEL, "Test summary message")

    lines = captured_output.getvalue().strip().split("\n")
    assert lines == [
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY Test summary message",
    ]


def test_setup_logging_idempotent():
    logger1 = setup_logging()
    logger2 = setup_logging()
    assert logger1 is logger2
    assert len(logger1.handlers) == 1
    assert get_logger() is logger1


def test_module_loggers_propagate_into_app_logger(capsys):
    setup_logging()
    logging.getLogger("skusync.services.workbook").info("child message")
    assert "INFO child message" in capsys.readouterr().out


def test_log_summary_convenience_function(capsys):
    log_summary("sheets=1 rows=2")
    assert capsys.readouterr().out.strip() == "SUMMARY sheets=1 rows=2"


def test_debug_raises_logger_and_handler_levels():
    logger = setup_logging()
    assert logger.level == logging.INFO
    assert setup_logging(debug=True) is logger
    assert logger.level == logging.DEBUG
    assert all(h.level == logging.DEBUG for h in logger.handlers)
    assert len(logger.handlers) == 1


def test_debug_records_hidden_by_default(capsys):
    setup_logging()
    logging.getLogger("skusync.services.reactivity").debug("diffing")
    assert capsys.readouterr().out == ""


def test_log_finding_formats_location_and_type(capsys):
    log_finding("Products", MissingValueFinding(row=4, column=2, spec_name="Size", offending_value="XL"))
    log_finding("Products", DuplicateSkuFinding(row=1, column=0, sku="R-S", rows=(1, 3)))
    lines = capsys.readouterr().out.strip().split("\n")
    assert lines == [
        'WARN sheet=Products row=4 col=2 missing-value Value "XL" does not exist in specification "Size"',
        'WARN sheet=Products row=1 col=0 duplicate-sku Duplicate SKU "R-S" (also in rows 3)',
    ]
