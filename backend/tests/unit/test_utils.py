import logging

from utils import humanize_milliseconds, ratelimited_log


def test_humanize_milliseconds():
    assert humanize_milliseconds(11) == "11 ms."
    assert humanize_milliseconds(30 * 1000) == '30"'
    assert humanize_milliseconds(65 * 1000) == "1'5\""


def test_ratelimited_log_calls_once_per_message(mocker):
    log = mocker.Mock()
    ratelimited_log(3600)(log, "same message")
    ratelimited_log(3600)(log, "same message")
    ratelimited_log(3600)(log, "another message")
    assert log.call_count == 2


def test_ratelimited_log_with_a_logger_method(caplog):
    logger = logging.getLogger("habitpals.test")
    with caplog.at_level(logging.WARNING, logger="habitpals.test"):
        ratelimited_log(logger.warning, "once only")
        ratelimited_log(logger.warning, "once only")
    assert caplog.text.count("once only") == 1
