import os
import tempfile

# keep the module-level app's upload dir out of the working tree
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="fileshare-test-"))

import pytest
from fastapi.testclient import TestClient

from fileshare.main import create_app
from fileshare.shared.config import Settings

@pytest.fixture
def settings(tmp_path):
    return Settings(ENV="development", UPLOAD_DIR=tmp_path / "uploads", MAX_UPLOAD_BYTES=1024)

@pytest.fixture
def app(settings):
    return create_app(settings)

@pytest.fixture
def client(app):
    return TestClient(app)

@pytest.fixture
def upload_dir(app):
    return app.state.store.root

@pytest.fixture
def anyio_backend():
    return "asyncio"
