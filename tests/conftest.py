"""
Shared fixtures for the plant care backend tests.

Provides:
- Tortoise ORM on an in-memory SQLite database, fresh for every test
- Factories for users, plants and environment readings
- A scripted text generator and fake HTTP sessions for the external services
- An httpx client driving the FastAPI app with signed identity tokens
"""

import logging
from datetime import datetime, timezone

import httpx
import pytest
import requests
from tortoise import Tortoise

from core.security import create_identity_token
from init_db import MODEL_MODULES
from models.environment import EnvironmentReading
from models.plant import Plant
from models.user import User
from services.text_generator import TextGenerator
from services.weather import WeatherClient

logging.getLogger("database").setLevel(logging.WARNING)
logging.getLogger("external").setLevel(logging.WARNING)
logging.getLogger("app").setLevel(logging.WARNING)

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
async def db():
    await Tortoise.init(config={
        "connections": {"default": "sqlite://:memory:"},
        "apps": {"models": {"models": MODEL_MODULES, "default_connection": "default"}},
        "use_tz": True,
        "timezone": "UTC",
    })
    await Tortoise.generate_schemas()
    yield
    await Tortoise._drop_databases()


# ========================== Factories ======================================


@pytest.fixture()
def make_user():
    counter = {"n": 0}

    async def _make(**kwargs) -> User:
        counter["n"] += 1
        n = counter["n"]
        data = {
            "external_id": f"idp|user-{n}",
            "username": f"user{n}",
            "email": f"user{n}@example.com",
            "name": f"User {n}",
        }
        data.update(kwargs)
        return await User.create(**data)

    return _make


@pytest.fixture()
async def user(make_user) -> User:
    return await make_user()


@pytest.fixture()
def make_plant():
    async def _make(owner: User, **kwargs) -> Plant:
        data = {"name": "Monstera", "species": "Monstera deliciosa"}
        data.update(kwargs)
        return await Plant.create(user=owner, **data)

    return _make


@pytest.fixture()
def make_reading():
    async def _make(owner: User, **kwargs) -> EnvironmentReading:
        data = {"temperature": 22.0, "humidity": 60.0, "light_level": "medium", "soil_moisture": 0.3}
        data.update(kwargs)
        return await EnvironmentReading.create(user=owner, **data)

    return _make


# ========================== External services ==============================


class FakeTextGenerator(TextGenerator):
    """Returns scripted answers in order; an Exception in the script is raised."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.prompts = []

    async def complete(self, prompt: str, expect_json: bool = False) -> str:
        self.prompts.append((prompt, expect_json))
        answer = self.answers.pop(0) if self.answers else ""
        if isinstance(answer, Exception):
            raise answer
        return answer


class FakeResponse:

    def __init__(self, payload=None, status_code: int = 200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    """requests.Session stand-in: maps a URL suffix to a response or an exception."""

    def __init__(self, routes: dict):
        self.routes = routes
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        for suffix, response in self.routes.items():
            if url.endswith(suffix):
                if isinstance(response, Exception):
                    raise response
                return response
        raise requests.ConnectionError(f"no route for {url}")


WEATHER_PAYLOAD = {
    "current": {
        "time": "2024-06-15T12:00",
        "temperature_2m": 24.5,
        "relative_humidity_2m": 40,
        "soil_moisture_0_to_1cm": 0.21,
    }
}


@pytest.fixture()
def weather_client() -> WeatherClient:
    return WeatherClient(session=FakeSession({"forecast": FakeResponse(WEATHER_PAYLOAD)}))


@pytest.fixture()
def broken_weather_client() -> WeatherClient:
    return WeatherClient(session=FakeSession({"forecast": requests.Timeout("timed out")}))


@pytest.fixture()
def generator() -> FakeTextGenerator:
    return FakeTextGenerator()


# ========================== HTTP client ====================================


def auth_headers(external_id: str, **claims) -> dict:
    return {"Authorization": f"Bearer {create_identity_token(external_id, **claims)}"}


@pytest.fixture()
async def client(weather_client, generator):
    from main import app
    from services.text_generator import get_text_generator
    from services.weather import get_weather_client

    app.dependency_overrides[get_weather_client] = lambda: weather_client
    app.dependency_overrides[get_text_generator] = lambda: generator

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture()
def alice_headers() -> dict:
    return auth_headers("idp|alice", email="alice@example.com", name="Alice")


@pytest.fixture()
def bob_headers() -> dict:
    return auth_headers("idp|bob", email="bob@example.com", name="Bob")
