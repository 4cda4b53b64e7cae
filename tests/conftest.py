import logging

import pytest

PROJECT_LOGGERS = ("cli", "config_loader", "engine.orchestrator", "validator.network", "validator.vin")


@pytest.fixture(autouse=True)
def reset_project_loggers():
    """
    Drop handlers attached during a test.

    get_logger binds its console handler to the sys.stderr of the moment;
    once pytest closes that capture stream the handler would keep writing to it.
    """
    yield
    for name in PROJECT_LOGGERS:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
