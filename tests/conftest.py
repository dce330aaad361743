import io
import logging

import pytest


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("semverstore")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream  # Yield the stream to the test function

    # Cleanup after the test
    logger.removeHandler(handler)
    log_stream.close()


@pytest.fixture(autouse=True)
def reset_semverstore_logger():
    """CLI runs attach a stderr handler; drop it so later tests don't log to a closed stream."""
    logger = logging.getLogger("semverstore")
    level = logger.level
    handlers = list(logger.handlers)

    yield

    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
    logger.setLevel(level)


@pytest.fixture
def user_config_dir(tmp_path, monkeypatch):
    """Point the user configuration at an empty temporary directory."""
    config_dir = tmp_path / "config"
    monkeypatch.setattr("semverstore.config.config_dir", config_dir)
    return config_dir
