import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Sets the config environment and the application settings every test relies on.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")
    os.environ.setdefault("PAYMENT_WEBHOOK_SECRET", "test-webhook-secret")
    os.environ.setdefault("GATEWAY_KEY_ID", "rzp_test_key")
    os.environ["GATEWAY_PROVIDER"] = "fake"


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path or "/bdd/" in test_path:
            # HTTP and Gherkin suites drive the whole engine
            item.add_marker(pytest.mark.integration if "/integration/" in test_path else pytest.mark.bdd)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
