import os

import pytest

# Test directory -> marker applied to everything collected beneath it
DIRECTORY_MARKERS = {
    "domain": "domain",
    "application": "application",
    "bdd": "bdd",
    "integration": "integration",
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="domain.toml environment overlay to run the suite against",
    )


def pytest_sessionstart(session):
    """Pick the domain.toml overlay before medtrack.domain is first imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    for item in items:
        parts = item.path.parts
        for directory, marker in DIRECTORY_MARKERS.items():
            if directory in parts:
                item.add_marker(getattr(pytest.mark, marker))
                break

        # HTTP round trips are slow unless a test opts out
        if "integration" in parts and item.get_closest_marker("fast") is None:
            item.add_marker(pytest.mark.slow)
