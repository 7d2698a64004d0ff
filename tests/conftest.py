from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from imgredirect.core.config import Settings
from imgredirect.main import create_app

ENV_VARS = ("IMAGES_PATH", "FAST_GLOB", "FINAL_GLOB", "HTTP_ADDRESS", "LOG_LEVEL")


def write_image(root: Path, relative: str, data: bytes = b"\xff\xd8\xff\xe0fake-jpeg") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def images_root(tmp_path) -> Path:
    root = tmp_path / "images"
    write_image(root, "top.jpg")
    write_image(root, "2023/old/c.jpg")
    write_image(root, "2024/a.jpg", b"image-a")
    write_image(root, "2024/B.JPG")
    write_image(root, "2024/notes.txt", b"not an image")
    return root


@pytest.fixture
def settings(images_root) -> Settings:
    return Settings(images_path=images_root, fast_glob="2024", final_glob="", _env_file=None)


@pytest.fixture
def client(settings) -> TestClient:
    return TestClient(create_app(settings))
