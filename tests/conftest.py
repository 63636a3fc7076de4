"""
Shared test fixtures for apiary-cli tests.
Patches the config module so no test reads the real .env or process keys.
"""

import pytest


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch):
    """Ensure every test starts with a clean config state."""
    from apiary_cli import config

    monkeypatch.setattr(config, "env", {})
    monkeypatch.setattr(config, "HTTP_LOG_ENABLED", False)
    monkeypatch.setattr(config, "RUNTIME_QUIET", False)
    for key in config.KNOWN_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
