import time
from dataclasses import asdict, dataclass
from typing import Optional

import requests
from fastapi.concurrency import run_in_threadpool

from core.config import settings
from core.exceptions import ExternalServiceError
from core.logger import external_logger

CURRENT_FIELDS = "temperature_2m,relative_humidity_2m,soil_moisture_0_to_1cm"


@dataclass(frozen=True)
class WeatherSnapshot:
    latitude: float
    longitude: float
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    soil_moisture: Optional[float] = None
    observed_at: Optional[str] = None

    def to_dict(self):
        return asdict(self)


class WeatherClient:
    """Current conditions from the Open-Meteo forecast API."""

    service_name = "weather"

    def __init__(self, session: requests.Session | None = None, base_url: str = settings.WEATHER_API_URL):
        self.session = session or requests.Session()
        self.base_url = base_url

    def _fetch(self, latitude: float, longitude: float) -> dict:
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": CURRENT_FIELDS,
        }
        external_logger.log_request(self.service_name, self.base_url, params)
        started = time.monotonic()
        try:
            response = self.session.get(self.base_url, params=params, timeout=settings.HTTP_TIMEOUT_SECONDS)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            external_logger.log_error(self.service_name, e)
            raise ExternalServiceError(self.service_name, "Weather data is unavailable", {"reason": str(e)})
        external_logger.log_response(self.service_name, response.status_code, (time.monotonic() - started) * 1000)
        return payload

    async def current(self, latitude: float | None = None, longitude: float | None = None) -> WeatherSnapshot:
        latitude = settings.DEFAULT_LATITUDE if latitude is None else latitude
        longitude = settings.DEFAULT_LONGITUDE if longitude is None else longitude

        payload = await run_in_threadpool(self._fetch, latitude, longitude)
        current = payload.get("current") if isinstance(payload, dict) else None
        if not isinstance(current, dict):
            raise ExternalServiceError(self.service_name, "Unexpected weather response", {"payload": payload})

        return WeatherSnapshot(
            latitude=latitude,
            longitude=longitude,
            temperature=current.get("temperature_2m"),
            humidity=current.get("relative_humidity_2m"),
            soil_moisture=current.get("soil_moisture_0_to_1cm"),
            observed_at=current.get("time"),
        )


_default_client: WeatherClient | None = None


def get_weather_client() -> WeatherClient:
    global _default_client
    if _default_client is None:
        _default_client = WeatherClient()
    return _default_client
