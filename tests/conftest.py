from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from tests._fixtures.workspace import FIXTURES_DIR, Workspace


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    """Provide an application root with the library and first-pass outputs on disk."""
    return Workspace(tmp_path).seed()


@pytest.fixture
def metadata_document() -> Dict[str, Any]:
    return json.loads((FIXTURES_DIR / "metadata.json").read_text(encoding="utf-8"))
