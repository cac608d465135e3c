from loguru import logger

from genstudio import logging_utils


def test_configure_logging_injects_session_id(monkeypatch) -> None:
    monkeypatch.setattr(logging_utils, "_CONFIGURED_PROFILE", None)
    logging_utils.configure_logging(level="DEBUG")
    seen: list[str] = []
    sink_id = logger.add(lambda message: seen.append(message.record["extra"]["session"]), level="DEBUG")
    try:
        logging_utils.bind_session("abc123")
        logger.info("session.test")
    finally:
        logger.remove(sink_id)

    assert seen == ["abc123"]
    assert logging_utils.current_session() == "abc123"

