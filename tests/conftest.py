import pytest

from study_companion import create_app
from tests.support import FakeGenerationClient, FakeStorage, make_config


@pytest.fixture()
def fake_generation_client():
    return FakeGenerationClient()


@pytest.fixture()
def fake_storage():
    return FakeStorage()


@pytest.fixture()
def app(fake_generation_client, fake_storage):
    flask_app = create_app(
        make_config(),
        generation_client=fake_generation_client,
        storage=fake_storage,
    )
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture()
def client(app):
    with app.test_client() as test_client:
        yield test_client
