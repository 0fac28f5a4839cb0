import os
import sys

import pytest

# Ensure project root is on sys.path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


@pytest.fixture(autouse=True)
def _isolated_dirs(tmp_path, monkeypatch):
    """Keep settings, logs and ~/.ssh lookups inside the test's tmp dir."""
    monkeypatch.setenv("SSHHOP_CONFIG_DIR", str(tmp_path / "cfg"))
    monkeypatch.setenv("SSHHOP_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("SSHHOP_SSH_DIR", str(tmp_path / "ssh"))
    monkeypatch.delenv("SSHHOP_DEBUG", raising=False)
