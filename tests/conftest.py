"""Shared pytest fixtures for all tests."""

import io
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from diary.config import Settings, get_settings
from diary.main import app
from diary.types import BatchLimits, IncomingFile

API_KEY = "diary_test-key"
USER_ID = "user-123"


def _list_assets(directory: Path) -> set:
    if not directory.exists():
        return set()
    return {p.name for p in directory.iterdir()}


@pytest.fixture
def list_assets():
    """
    List file names in an asset directory.

    Returns:
        Callable(directory) returning a set of names, empty if the directory does not exist
    """
    return _list_assets


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def asset_root(tmp_path):
    """
    Create temporary asset root directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to the asset root
    """
    root = tmp_path / 'assets'
    root.mkdir()
    return root


@pytest.fixture
def user_dir(asset_root):
    """
    Asset directory of the test user (not created).
    """
    return asset_root / USER_ID


@pytest.fixture
def limits():
    """
    Limits used by scenario tests.
    """
    return BatchLimits(max_files=5, max_per_file_bytes=1000, max_total_bytes=1000)


@pytest.fixture
def make_file():
    """
    Factory for IncomingFile instances backed by in-memory bytes.

    Returns:
        Callable(name, data=b"0123456789", declared_size=<len(data)>, content_type="image/jpeg")
    """
    def _make(name, data=b"0123456789", declared_size=-1, content_type="image/jpeg"):
        size = len(data) if declared_size == -1 else declared_size
        return IncomingFile(
            original_name=name,
            declared_size=size,
            content_type=content_type,
            open_stream=lambda: io.BytesIO(data),
        )
    return _make


@pytest.fixture
def settings(asset_root):
    """
    Settings pointing at the temporary asset root.
    """
    return Settings(
        asset_path=str(asset_root),
        max_batch_files=5,
        max_per_file_bytes=1000,
        max_batch_total_bytes=1000,
        api_keys={API_KEY: USER_ID},
    )


@pytest.fixture
def client(settings):
    """
    Create FastAPI test client using the temporary settings.
    """
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {'Authorization': f'Bearer {API_KEY}'}
