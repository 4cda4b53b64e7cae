import logging
import sys

from utils.logger import bind_run_id, get_logger


def test_console_handler_uses_current_stderr():
    logger = get_logger("cli", "INFO", None)

    console = [h for h in logger.handlers if type(h) is logging.StreamHandler]
    assert len(console) == 1
    assert console[0].stream is sys.stderr


def test_get_logger_attaches_handlers_once():
    first = get_logger("cli", "INFO", None)
    second = get_logger("cli", "WARNING", None)

    assert first is second
    assert len(second.handlers) == 1
    assert second.level == logging.WARNING


def test_bound_logger_filters_at_its_own_level():
    shared = get_logger("validator.vin", "DEBUG", None)
    quiet = bind_run_id(shared, "quiet", "warning")
    inherit = bind_run_id(shared, "inherit")

    assert not quiet.isEnabledFor(logging.INFO)
    assert quiet.isEnabledFor(logging.WARNING)
    assert inherit.isEnabledFor(logging.DEBUG)
    assert shared.level == logging.DEBUG
