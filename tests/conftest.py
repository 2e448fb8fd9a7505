import pytest


@pytest.fixture(autouse=True)
def isolate_release_environment(monkeypatch):
    """Remove release scope/stage variables set by the surrounding build.

    The CLI reads ``RELEASE_SCOPE`` and ``RELEASE_STAGE`` from the
    environment; tests expect to start without them.
    """
    monkeypatch.delenv("RELEASE_SCOPE", raising=False)
    monkeypatch.delenv("RELEASE_STAGE", raising=False)
    yield
