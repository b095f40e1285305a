import time
from dataclasses import dataclass

import requests
from fastapi.concurrency import run_in_threadpool

from core.clock import days_between, utc_now
from core.config import settings
from core.exceptions import ExternalServiceError, NotFoundError
from core.logger import app_logger, db_logger, external_logger
from models.plant import Plant
from models.species import SpeciesProfile


@dataclass
class SpeciesLookup:
    profile: SpeciesProfile
    stale: bool = False


class PerenualClient:
    service_name = "plant-data"

    def __init__(
            self,
            session: requests.Session | None = None,
            base_url: str = settings.PERENUAL_API_URL,
            api_key: str = settings.PERENUAL_API_KEY,
    ):
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

    def _get(self, path: str, params: dict | None = None) -> dict:
        if not self.api_key:
            raise ExternalServiceError(self.service_name, "Plant-data API key is not configured")

        url = f"{self.base_url}/{path.lstrip('/')}"
        external_logger.log_request(self.service_name, url, params)
        started = time.monotonic()
        try:
            response = self.session.get(
                url,
                params={"key": self.api_key, **(params or {})},
                timeout=settings.HTTP_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            external_logger.log_error(self.service_name, e)
            raise ExternalServiceError(self.service_name, details={"reason": str(e)})
        external_logger.log_response(self.service_name, response.status_code, (time.monotonic() - started) * 1000)
        return payload

    def search(self, query: str) -> int | None:
        payload = self._get("species-list", {"q": query})
        matches = payload.get("data") if isinstance(payload, dict) else None
        if not matches:
            return None
        if not isinstance(matches, list) or not isinstance(matches[0], dict):
            raise ExternalServiceError(self.service_name, "Unexpected species search response")
        return matches[0].get("id")

    def details(self, species_id: int) -> dict:
        payload = self._get(f"species/details/{species_id}")
        if not isinstance(payload, dict):
            raise ExternalServiceError(self.service_name, "Unexpected species details response")
        return payload


class SpeciesService:
    """Species details per plant, cached locally and re-synced after SPECIES_CACHE_DAYS."""

    def __init__(self, client: PerenualClient | None = None, cache_days: int = settings.SPECIES_CACHE_DAYS):
        self.client = client or PerenualClient()
        self.cache_days = cache_days

    def is_fresh(self, profile: SpeciesProfile, query: str) -> bool:
        return profile.query == query and days_between(profile.synced_at, utc_now()) < self.cache_days

    def _lookup(self, query: str) -> tuple[int, dict] | None:
        species_id = self.client.search(query)
        if species_id is None:
            return None
        return species_id, self.client.details(species_id)

    async def details_for(self, plant: Plant) -> SpeciesLookup:
        query = (plant.species or plant.name).strip()
        cached = await SpeciesProfile.get_or_none(plant_id=plant.id)
        if cached and self.is_fresh(cached, query):
            return SpeciesLookup(cached)

        try:
            found = await run_in_threadpool(self._lookup, query)
        except ExternalServiceError:
            if cached:
                app_logger.warning(f"Serving stale species details for plant {plant.id}")
                return SpeciesLookup(cached, stale=True)
            raise

        if found is None:
            raise NotFoundError("Species", query)

        species_id, details = found
        profile, created = await SpeciesProfile.update_or_create(
            defaults={
                "external_id": species_id,
                "query": query,
                "details": details,
                "synced_at": utc_now(),
            },
            plant_id=plant.id,
        )
        if created:
            db_logger.log_create("SpeciesProfile", {"plant_id": plant.id, "external_id": species_id})
        else:
            db_logger.log_update("SpeciesProfile", profile.id, {"external_id": species_id, "query": query})
        return SpeciesLookup(profile)


_default_service: SpeciesService | None = None


def get_species_service() -> SpeciesService:
    global _default_service
    if _default_service is None:
        _default_service = SpeciesService()
    return _default_service
