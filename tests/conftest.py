"""Shared pytest fixtures and configuration for pytest."""

import logging

import pytest

from restgate.server.auth import Credentials, encode_basic_auth

TEST_USERNAME = "TestUsername"
TEST_PASSWORD = "TestPassword"


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "network: test opens real loopback sockets"
    )


@pytest.fixture
def credentials() -> Credentials:
    """The well-known local testing credential pair."""
    return Credentials(username=TEST_USERNAME, password=TEST_PASSWORD)


@pytest.fixture
def auth_header() -> str:
    """A valid Authorization header value for the testing pair."""
    return encode_basic_auth(TEST_USERNAME, TEST_PASSWORD)


@pytest.fixture(autouse=True)
def _isolate_credential_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's RESTGATE_* variables from leaking into tests."""
    monkeypatch.delenv("RESTGATE_USERNAME", raising=False)
    monkeypatch.delenv("RESTGATE_PASSWORD", raising=False)


@pytest.fixture
def restgate_logger():
    """The "restgate" namespace logger, restored to its prior state afterwards."""
    logger = logging.getLogger("restgate")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield logger
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
