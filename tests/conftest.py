from __future__ import annotations

from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection,
# so `import flatstore` works without installing the package first.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


FLATSTORE_ENV_VARS = (
    "FLATSTORE_FORMAT",
    "FLATSTORE_FLUSH_ON_WRITE",
    "FLATSTORE_REPLACE_STRATEGY",
    "FLATSTORE_FSYNC",
    "FLATSTORE_SORT_KEYS",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """
    Remove FLATSTORE_* variables for the test and restore the environment afterwards,
    including anything a dotenv file loads into it.
    """
    for name in FLATSTORE_ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture
def json_path(tmp_path: Path) -> Path:
    return tmp_path / "records.json"


@pytest.fixture
def yaml_path(tmp_path: Path) -> Path:
    return tmp_path / "records.yaml"
