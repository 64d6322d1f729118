from __future__ import annotations

import sys
from pathlib import Path

import pytest

# pytest may run without installing the project; ensure repo root is importable.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from eventlog.core.config import Config  # noqa: E402


@pytest.fixture()
def temp_dir(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture()
def test_config(temp_dir: Path) -> Config:
    """Config fixture that points data_dir to a temp directory."""

    c = Config.from_yaml(REPO_ROOT / "config" / "default.yaml")
    return c.model_copy(update={"data_dir": temp_dir / "data", "public_dir": temp_dir / "public"})


@pytest.fixture()
def anyio_backend() -> str:
    # The code under test is built on asyncio (asyncio.Future, aiofiles).
    return "asyncio"
