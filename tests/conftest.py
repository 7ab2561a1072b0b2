from fastapi.testclient import TestClient
import pytest
from readcoach.main import app


@pytest.fixture
def client():
    return TestClient(app)
