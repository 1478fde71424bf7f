"""Shared fixtures for the test-suite."""

import json
import logging
import os

import pytest

TESTDATA_DIR = os.path.join(os.path.dirname(__file__), "testdata")


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def read_testdata():
    """Return a loader for raw files under ``tests/testdata``."""

    def _read(name: str) -> bytes:
        with open(os.path.join(TESTDATA_DIR, name), "rb") as f:
            return f.read()

    return _read


@pytest.fixture
def mcpm_manifest(read_testdata) -> bytes:
    return read_testdata("mcpm_servers.json")


@pytest.fixture
def mozilla_manifest(read_testdata) -> bytes:
    return read_testdata("mozilla_registry.json")


@pytest.fixture
def mozilla_records(mozilla_manifest) -> dict:
    return json.loads(mozilla_manifest)


@pytest.fixture
def restore_logging():
    """Undo ``dictConfig`` side effects so later tests see default logging."""
    root = logging.getLogger()
    saved_level, saved_handlers = root.level, list(root.handlers)
    yield
    for name in ("mcp_discovery", "httpx"):
        lg = logging.getLogger(name)
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()
        lg.propagate = True
        lg.setLevel(logging.NOTSET)
    for handler in list(root.handlers):
        if handler not in saved_handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in saved_handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(saved_level)
