"""
Pytest markers and collection hooks for the hospital API tests.

Markers are added from the test file location so that
``pytest -m services`` or ``pytest -m integration`` select the right tests
without decorating every test by hand.
"""

import pytest


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "services: mark test as service layer test")
    config.addinivalue_line("markers", "controllers: mark test as controller-related")
    config.addinivalue_line("markers", "repositories: mark test as repository test")
    config.addinivalue_line("markers", "core: mark test as core utilities test")


def pytest_collection_modifyitems(config, items):
    """Modify test items during collection."""
    for item in items:
        path = str(item.fspath)

        if "unit" in path:
            item.add_marker(pytest.mark.unit)

        if "integration" in path:
            item.add_marker(pytest.mark.integration)

        if "service" in path:
            item.add_marker(pytest.mark.services)

        if "api" in path or "controller" in path:
            item.add_marker(pytest.mark.controllers)

        if "repositor" in path:
            item.add_marker(pytest.mark.repositories)

        if "core" in path:
            item.add_marker(pytest.mark.core)
