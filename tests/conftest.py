import json

import mongomock
import pytest
from fastapi.testclient import TestClient
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from config import Settings
from database import Database
from main import create_app

WEBHOOK_SECRET = "whsec_test"


class FakeChatModels:
    """Chat model factory handing out canned replies in order."""

    def __init__(self):
        self.responses = []
        self.temperatures = []
        self.models = []

    def reply_with(self, *replies):
        self.responses = [r if isinstance(r, str) else json.dumps(r) for r in replies]

    def __call__(self, temperature):
        self.temperatures.append(temperature)
        model = FakeListChatModel(responses=list(self.responses) or ["[]"])
        self.models.append(model)
        return model


@pytest.fixture
def settings(tmp_path):
    return Settings(
        mongodb_uri="mongodb://localhost:27017/",
        mongodb_db="studybuddy_test",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        openai_api_key="sk-test",
        stripe_secret_key="sk_test_stripe",
        stripe_webhook_secret=WEBHOOK_SECRET,
        stripe_price_id_paid="price_paid",
        notion_client_id="notion-id",
        notion_client_secret="notion-secret",
        notion_authorization_url="https://api.notion.com/v1/oauth/authorize?client_id=notion-id&response_type=code",
        notion_redirect_uri="http://localhost:8000/api/notion/callback",
        rate_limit_enabled=False,
        upload_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def chat_models():
    return FakeChatModels()


@pytest.fixture
def database(settings):
    return Database(settings.mongodb_uri, settings.mongodb_db, client_factory=mongomock.MongoClient)


@pytest.fixture
def app(settings, database, chat_models):
    return create_app(settings=settings, database=database, chat_model_factory=chat_models)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def register(client, email="ada@studybuddy.dev", password="secret123"):
    resp = client.post("/api/auth/register", json={
        "email": email,
        "password": password,
        "firstName": "Ada",
        "lastName": "Lovelace",
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def auth_headers(client):
    token = register(client)["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_headers(client):
    token = register(client, email="grace@studybuddy.dev")["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def upload_id(client, auth_headers):
    resp = client.post("/api/uploads/text", headers=auth_headers, json={
        "transcript": "Photosynthesis converts light into chemical energy.",
        "fileName": "biology.txt",
    })
    assert resp.status_code == 201, resp.text
    return resp.json()["upload"]["id"]


@pytest.fixture
def limited_settings(settings):
    return settings.model_copy(update={"rate_limit_enabled": True})


@pytest.fixture
def limited_client(limited_settings, database, chat_models):
    app = create_app(settings=limited_settings, database=database, chat_model_factory=chat_models)
    with TestClient(app) as test_client:
        yield test_client
