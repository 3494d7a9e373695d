"""
Tests for the JSON line logger.
"""

import json
import logging

from embedded_postgres import EmbeddedPostgresLogger


def test_log_line_carries_caller(caplog):
    logger = EmbeddedPostgresLogger()

    with caplog.at_level(logging.INFO, logger="embedded_postgres"):
        logger.log("fetching\npostgres", logging.WARNING)

    record = caplog.records[-1]
    line = json.loads(record.getMessage())
    assert record.levelno == logging.WARNING
    assert line["caller_name"] == "test_log_line_carries_caller"
    assert line["caller_file"] == "test_logger.py"
    assert line["level"] == "WARNING"
    assert line["message"] == "fetching postgres"
