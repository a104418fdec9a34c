import logging

from fifachat.src.utils.logger import LOG_FORMAT, ROOT_LOGGER_NAME, get_logger, resolve_level, uvicorn_log_config


def test_module_loggers_share_the_package_handler():
    first = get_logger("fifachat.src.core.retrieval")
    second = get_logger("fifachat.src.api.routes")
    root = logging.getLogger(ROOT_LOGGER_NAME)

    assert first.handlers == [] and second.handlers == []
    assert len(root.handlers) == 1
    assert root.propagate is False
    assert root.handlers[0].formatter._fmt == LOG_FORMAT


def test_outside_names_are_reparented():
    assert get_logger("__main__").name == "fifachat.__main__"
    assert get_logger(ROOT_LOGGER_NAME).name == ROOT_LOGGER_NAME


def test_prod_env_defaults_to_warning():
    assert resolve_level() == logging.WARNING


def test_explicit_level_narrows_one_logger():
    logger = get_logger("fifachat.tests.verbose", level=logging.DEBUG)
    assert logger.level == logging.DEBUG
    assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.WARNING


def test_uvicorn_config_uses_the_same_format():
    config = uvicorn_log_config()

    assert config["formatters"]["fifachat"]["format"] == LOG_FORMAT
    assert config["loggers"]["uvicorn.access"]["level"] == "WARNING"
