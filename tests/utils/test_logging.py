import logging

from src.utils.logging import Logger, get_logger
from src.utils.logging.app_logger import ContextFormatter


def test_get_logger_is_namespaced_under_src():
    assert get_logger("workers.review").name == "src.workers.review"
    assert get_logger("src.services.github").name == "src.services.github"


def test_formatter_renders_extra_fields():
    formatter = ContextFormatter("%(levelname)s %(message)s")
    record = logging.LogRecord("src.test", logging.INFO, __file__, 1, "Review done", (), None)
    record.review_id = "abc"
    record.tokens_used = 42

    assert formatter.format(record) == "INFO Review done | review_id=abc tokens_used=42"


def test_bind_extends_context_without_mutating_parent():
    parent = Logger("tests.binding", {"request_id": "r1"})
    child = parent.bind(review_id="v1")

    assert parent.request_context == {"request_id": "r1"}
    assert child.request_context == {"request_id": "r1", "review_id": "v1"}

    records = []
    handler = logging.Handler()
    handler.emit = records.append
    child.base_logger.addHandler(handler)
    try:
        child.info("started", extra={"pr_number": 7})
    finally:
        child.base_logger.removeHandler(handler)

    assert records[-1].request_id == "r1"
    assert records[-1].review_id == "v1"
    assert records[-1].pr_number == 7
