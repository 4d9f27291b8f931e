"""Test configuration helpers to ensure package imports work from the repository root."""
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

ROOT = Path(__file__).resolve().parents[1]
REPO_ROOT = ROOT.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

FIXTURES = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def petstore_v2_path() -> Path:
    return FIXTURES / "petstore_v2.json"


@pytest.fixture
def petstore_v3_path() -> Path:
    return FIXTURES / "petstore_v3.yaml"


@pytest.fixture
def petstore_v2(petstore_v2_path: Path) -> Dict[str, Any]:
    return json.loads(petstore_v2_path.read_text(encoding="utf-8"))


@pytest.fixture
def minimal_v2() -> Dict[str, Any]:
    return {
        "swagger": "2.0",
        "host": "old.example",
        "basePath": "/api",
        "paths": {"/pets": {"get": {"responses": {"200": {"description": "ok"}}}}},
    }
