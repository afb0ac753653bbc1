import os

import pytest


@pytest.fixture(autouse=True)
def clean_reconcile_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove RECONCILE_* variables inherited from the developer's shell."""
    for key in list(os.environ):
        if key.startswith("RECONCILE_"):
            monkeypatch.delenv(key)
