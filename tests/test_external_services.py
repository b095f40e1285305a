from datetime import date, timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import requests
from openai import APIConnectionError

from conftest import NOW, WEATHER_PAYLOAD, FakeResponse, FakeSession, FakeTextGenerator
from core.exceptions import ExternalServiceError, NotFoundError
from models.species import SpeciesProfile
from services.care_tips import CareTipService, season_for
from services.species import PerenualClient, SpeciesService
from services.text_generator import OpenAITextGenerator
from services.weather import WeatherClient, WeatherSnapshot


# ========================== Weather =========================================


async def test_weather_current(weather_client):
    weather = await weather_client.current(48.1, 11.6)

    assert weather == WeatherSnapshot(
        latitude=48.1,
        longitude=11.6,
        temperature=24.5,
        humidity=40,
        soil_moisture=0.21,
        observed_at="2024-06-15T12:00",
    )
    url, params, timeout = weather_client.session.calls[0]
    assert params["current"] == "temperature_2m,relative_humidity_2m,soil_moisture_0_to_1cm"
    assert timeout is not None


async def test_weather_uses_default_location(weather_client):
    weather = await weather_client.current()
    assert (weather.latitude, weather.longitude) == (52.52, 13.41)


@pytest.mark.parametrize("response", [
    requests.Timeout("timed out"),
    FakeResponse({"error": True}, status_code=500),
    FakeResponse(ValueError("not json")),
    FakeResponse({"hourly": {}}),
])
async def test_weather_failures(response):
    client = WeatherClient(session=FakeSession({"forecast": response}))
    with pytest.raises(ExternalServiceError) as e:
        await client.current()
    assert e.value.details["service"] == "weather"


# ========================== Species =========================================


def species_client(search=None, details=None, api_key="test-key"):
    session = FakeSession({
        "species-list": search if search is not None else FakeResponse({"data": [{"id": 728}]}),
        "species/details/728": details if details is not None else FakeResponse({"id": 728, "watering": "Average"}),
    })
    return PerenualClient(session=session, base_url="https://plants.example.com/api/v2", api_key=api_key)


async def test_species_details_are_fetched_and_cached(user, make_plant):
    plant = await make_plant(user, species="Monstera deliciosa")
    client = species_client()
    service = SpeciesService(client=client, cache_days=7)

    lookup = await service.details_for(plant)
    assert lookup.stale is False
    assert lookup.profile.external_id == 728
    assert lookup.profile.details["watering"] == "Average"
    assert len(client.session.calls) == 2

    again = await service.details_for(plant)
    assert again.profile.id == lookup.profile.id
    assert len(client.session.calls) == 2


async def test_expired_cache_is_refreshed(user, make_plant):
    plant = await make_plant(user, species="Monstera deliciosa")
    await SpeciesProfile.create(
        plant=plant, external_id=1, query="Monstera deliciosa", details={"old": True},
        synced_at=NOW - timedelta(days=365),
    )

    lookup = await SpeciesService(client=species_client()).details_for(plant)

    assert lookup.profile.external_id == 728
    assert await SpeciesProfile.filter(plant_id=plant.id).count() == 1


async def test_stale_cache_served_when_service_fails(user, make_plant):
    plant = await make_plant(user, species="Monstera deliciosa")
    await SpeciesProfile.create(
        plant=plant, external_id=1, query="Monstera deliciosa", details={"old": True},
        synced_at=NOW - timedelta(days=365),
    )
    client = species_client(search=requests.ConnectionError("down"))

    lookup = await SpeciesService(client=client).details_for(plant)

    assert lookup.stale is True
    assert lookup.profile.details == {"old": True}


async def test_species_failure_without_cache(user, make_plant):
    plant = await make_plant(user)
    with pytest.raises(ExternalServiceError):
        await SpeciesService(client=species_client(api_key="")).details_for(plant)


@pytest.mark.parametrize("payload", [{"data": ["Monstera"]}, {"data": {"id": 728}}])
async def test_species_search_with_unexpected_shape(user, make_plant, payload):
    plant = await make_plant(user, species="Monstera deliciosa")
    client = species_client(search=FakeResponse(payload))
    with pytest.raises(ExternalServiceError):
        await SpeciesService(client=client).details_for(plant)

    await SpeciesProfile.create(
        plant=plant, external_id=1, query="Monstera deliciosa", details={"old": True},
        synced_at=NOW - timedelta(days=365),
    )
    lookup = await SpeciesService(client=client).details_for(plant)
    assert lookup.stale is True


async def test_species_without_match(user, make_plant):
    plant = await make_plant(user, species="Nothing like it")
    client = species_client(search=FakeResponse({"data": []}))
    with pytest.raises(NotFoundError):
        await SpeciesService(client=client).details_for(plant)


# ========================== Care tips =======================================


@pytest.mark.parametrize("day, season", [
    (date(2024, 1, 10), "Winter"),
    (date(2024, 4, 10), "Spring"),
    (date(2024, 7, 10), "Summer"),
    (date(2024, 10, 10), "Autumn"),
    (date(2024, 12, 31), "Winter"),
])
def test_season_for(day, season):
    assert season_for(day) == season


WEATHER = WeatherSnapshot(52.52, 13.41, temperature=24.5, humidity=40, soil_moisture=0.21)


async def test_plant_tips(user, make_plant):
    plant = await make_plant(user, water_frequency_days=7)
    generator = FakeTextGenerator('{"tips": [{"category": "Watering", "tip": " Water less. "}, {"tip": "Dust leaves."}]}')

    tips = await CareTipService(generator).plant_tips(plant, WEATHER, "Summer")

    assert tips == [
        {"category": "Watering", "tip": "Water less."},
        {"category": "General", "tip": "Dust leaves."},
    ]
    prompt, expect_json = generator.prompts[0]
    assert expect_json is True
    assert "Season: Summer" in prompt
    assert "24.5°C" in prompt


@pytest.mark.parametrize("answer", ["garbage", ExternalServiceError("text-generation")])
async def test_plant_tips_fallback(user, make_plant, answer):
    plant = await make_plant(user)
    tips = await CareTipService(FakeTextGenerator(answer)).plant_tips(plant, WEATHER, "Summer")
    assert len(tips) == 1
    assert tips[0]["category"] == "General"


async def test_general_tip():
    service = CareTipService(FakeTextGenerator('"Mist your ferns in the morning."\n'))
    assert await service.general_tip(WEATHER, "Summer") == "Mist your ferns in the morning."

    fallback = await CareTipService(FakeTextGenerator("  ")).general_tip(WEATHER, "Winter")
    assert "winter" in fallback


# ========================== Text generation =================================


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


async def test_openai_generator_requests_json():
    client = MagicMock()
    client.chat.completions.create.return_value = completion('{"tips": []}')

    content = await OpenAITextGenerator(client=client, model="test-model").complete("prompt", expect_json=True)

    assert content == '{"tips": []}'
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["messages"][-1] == {"role": "user", "content": "prompt"}


async def test_openai_generator_errors():
    client = MagicMock()
    client.chat.completions.create.side_effect = APIConnectionError(request=MagicMock())
    with pytest.raises(ExternalServiceError):
        await OpenAITextGenerator(client=client).complete("prompt")

    client.chat.completions.create.side_effect = None
    client.chat.completions.create.return_value = completion(None)
    with pytest.raises(ExternalServiceError):
        await OpenAITextGenerator(client=client).complete("prompt")
