import pytest

BACKEND_URL = "http://backend.test"


@pytest.fixture
def backend_config():
    return {
        "base_url": BACKEND_URL,
        "token": "test-token",
    }


@pytest.fixture
def backend_client(backend_config):
    from ats_import.backend_client import BackendClient

    return BackendClient(**backend_config)


@pytest.fixture
def sample_job_seeker():
    return {
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "Jane@Co.com",
        "phone": "555-0100",
        "Favorite Color": "green",
    }


@pytest.fixture
def sample_organization():
    return {
        "name": "Acme Corp",
        "website": "https://acme.com",
        "status": "Active",
    }
