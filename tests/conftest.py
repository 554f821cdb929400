import pytest
from fastapi.testclient import TestClient

from csrfguard.config import CSRFConfig
from csrfguard.main import create_app


@pytest.fixture(autouse=True)
def log_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))


@pytest.fixture(scope="function")
def config():
    return CSRFConfig()


@pytest.fixture(scope="function")
def client(config):
    app = create_app(config)
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


@pytest.fixture(scope="function")
def debug_client():
    app = create_app(CSRFConfig(debug=True))
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c
