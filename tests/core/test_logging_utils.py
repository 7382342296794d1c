import json
import logging

import pytest
from loguru import logger as loguru_logger

from myfc.core.logging_utils import generate_correlation_id, setup_json_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    loguru_logger.remove()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_stdlib_records_reach_loguru_file_sink_with_extras(tmp_path, restore_logging):
    log_file = tmp_path / "myfc.log"
    setup_json_logging("INFO", str(log_file))

    logging.getLogger("myfc.tests").info("bookmark_toggled", extra={"workout_id": "42"})
    logging.getLogger("myfc.tests").debug("below_threshold")
    # Removing the sinks drains the queue and closes the file
    loguru_logger.remove()

    records = [json.loads(line)["record"] for line in log_file.read_text().splitlines()]
    toggled = [r for r in records if r["message"] == "bookmark_toggled"]
    assert len(toggled) == 1
    assert toggled[0]["extra"]["workout_id"] == "42"
    assert toggled[0]["extra"]["logger_name"] == "myfc.tests"
    assert not any(r["message"] == "below_threshold" for r in records)


def test_generate_correlation_id_is_short_and_unique():
    first = generate_correlation_id()

    assert len(first) == 12
    assert first != generate_correlation_id()
