from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from ingress_errors.config import Settings
from ingress_errors.main import create_app

FILES_DIR = Path(__file__).resolve().parents[1] / "files"


@pytest.fixture()
def files_dir() -> Path:
    return FILES_DIR


@pytest.fixture()
def settings(files_dir: Path) -> Settings:
    return Settings(templates_dir=files_dir)


@pytest.fixture()
def client(settings: Settings):
    with TestClient(create_app(settings)) as c:
        yield c
