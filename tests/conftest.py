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

    Select the Protean config overlay before any domain module is imported.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def reset_checkout_adapters():
    """Give every test fresh adapters and writes that land synchronously."""
    from checkout.config import get_settings
    from checkout.payment.gateway import reset_gateway
    from checkout.payment.processor import reset_processor
    from checkout.persistence.adapter import PersistenceAdapter, reset_persistence, set_persistence
    from checkout.persistence.storage import MemorySessionStorage, reset_storage
    from checkout.pricing.catalog import reset_catalog
    from checkout.submission import reset_submitter

    get_settings.cache_clear()
    set_persistence(PersistenceAdapter(storage=MemorySessionStorage(), debounce_seconds=0))

    yield

    reset_processor()
    reset_persistence()
    reset_storage()
    reset_gateway()
    reset_catalog()
    reset_submitter()
    get_settings.cache_clear()
