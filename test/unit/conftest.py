"""Test fixtures for robyn-upload-api unit tests."""

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from upload_api.core.lifespan import State
from upload_api.core.settings import UploadConfig
from upload_api.uploads.storage import UploadsNamespace


# -----------------------------------------------------------------------------
# Mock classes for Robyn Request
# -----------------------------------------------------------------------------


@dataclass
class MockHeaders:
    """Mock Headers object for Robyn Request."""

    _data: dict = field(default_factory=dict)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._data.get(key.lower(), default)

    def set(self, key: str, value: str) -> None:
        self._data[key.lower()] = value

    def __getitem__(self, key: str) -> str:
        return self._data[key.lower()]

    def __setitem__(self, key: str, value: str) -> None:
        self._data[key.lower()] = value


@dataclass
class MockRequest:
    """Mock Request object for Robyn."""

    body: bytes | str = b""
    headers: MockHeaders = field(default_factory=MockHeaders)
    method: str = "POST"
    path: str = "/"


# -----------------------------------------------------------------------------
# Upload fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def uploads_path(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def upload_config(uploads_path: Path) -> UploadConfig:
    """Small limits so size checks are cheap to exercise."""
    return UploadConfig(
        uploads_path=uploads_path,
        max_file_size=64 * 1024,
        max_request_size=256 * 1024,
        chunk_size=4096,
        allowed_content_types=("image/*",),
    )


@pytest.fixture
def namespace(uploads_path: Path) -> UploadsNamespace:
    return UploadsNamespace(uploads_path).ensure()


# -----------------------------------------------------------------------------
# State fixture
# -----------------------------------------------------------------------------


@pytest.fixture
def test_state(upload_config: UploadConfig, namespace: UploadsNamespace) -> State:
    """Create a test state container shaped like the one built at startup."""
    state = State()
    state.config = upload_config
    state.uploads = namespace
    return state


@pytest.fixture
def global_dependencies(test_state: State) -> dict:
    """Setup global dependencies for tests."""
    yield {"state": test_state}
    test_state.clear()


@pytest.fixture
def make_mock_request():
    """Factory fixture to create mock requests."""

    def _make(body: bytes = b"", headers: dict | None = None, method: str = "POST") -> MockRequest:
        return MockRequest(body=body, headers=MockHeaders({k.lower(): v for k, v in (headers or {}).items()}), method=method)

    return _make
