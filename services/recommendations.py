import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from tortoise.transactions import in_transaction

from core.clock import utc_now
from core.exceptions import AuthorizationError, ExternalServiceError, NotFoundError
from core.logger import app_logger, db_logger
from models.care import CareHistory
from models.environment import EnvironmentReading
from models.plant import MAX_WATER_FREQUENCY_DAYS, LightRequirement, Plant
from models.recommendation import Recommendation, RecommendationType
from services.health_calculator import HealthCalculator
from services.text_generator import TextGenerator

LOW_HUMIDITY_THRESHOLD = 50
FREQUENT_WATERING_DAYS = 10
DRY_AIR_WATERING_DAYS = 9

DAY_COUNT_PATTERN = re.compile(r"(\d+)\s*days\b", re.IGNORECASE)


@dataclass(frozen=True)
class Suggestion:
    recommendation_type: RecommendationType
    message: str


def parse_day_count(message: str) -> Optional[int]:
    """First "N days" in a recommendation message, or None when absent or not a usable frequency."""
    match = DAY_COUNT_PATTERN.search(message or "")
    if not match:
        return None
    days = int(match.group(1))
    return days if 0 < days <= MAX_WATER_FREQUENCY_DAYS else None


class RecommendationStrategy(ABC):
    name: str

    @abstractmethod
    async def suggest(self, plant: Plant, reading: EnvironmentReading) -> List[Suggestion]:
        ...


class ThresholdStrategy(RecommendationStrategy):
    """Deterministic rules over the latest environment reading."""

    name = "threshold"

    async def suggest(self, plant: Plant, reading: EnvironmentReading) -> List[Suggestion]:
        suggestions = []

        if (
            reading.humidity is not None
            and reading.humidity < LOW_HUMIDITY_THRESHOLD
            and plant.water_frequency_days
            and plant.water_frequency_days < FREQUENT_WATERING_DAYS
            and plant.water_frequency_days != DRY_AIR_WATERING_DAYS
        ):
            suggestions.append(Suggestion(
                RecommendationType.WATER,
                f"Your {plant.name} may need less frequent watering. Based on the current "
                f"humidity of {reading.humidity:.0f}%, consider watering once every "
                f"{DRY_AIR_WATERING_DAYS} days instead of every {plant.water_frequency_days} days."
            ))

        requirement = LightRequirement(plant.light_requirement) if plant.light_requirement else None
        level = LightRequirement(reading.light_level) if reading.light_level else None

        if level == LightRequirement.LOW and requirement in (LightRequirement.MEDIUM, LightRequirement.HIGH):
            suggestions.append(Suggestion(
                RecommendationType.LIGHT,
                f"Your {plant.name} is not getting enough light. Consider moving it closer to "
                f"an east-facing window for more indirect sunlight."
            ))
        elif level == LightRequirement.HIGH and requirement in (LightRequirement.LOW, LightRequirement.MEDIUM):
            suggestions.append(Suggestion(
                RecommendationType.LIGHT,
                f"Your {plant.name} is getting more light than it prefers. Consider moving it "
                f"away from direct sun or filtering the light with a sheer curtain."
            ))

        return suggestions


class GenerativeStrategy(RecommendationStrategy):
    """Delegates to a text generator and falls back to a generic tip on bad output."""

    name = "ai"

    def __init__(self, generator: TextGenerator):
        self.generator = generator

    @staticmethod
    def build_prompt(plant: Plant, reading: EnvironmentReading) -> str:
        frequency = f"Every {plant.water_frequency_days} days" if plant.water_frequency_days else "Unknown"
        last_watered = plant.last_watered.date().isoformat() if plant.last_watered else "Unknown"
        temperature = f"{reading.temperature}°C" if reading.temperature is not None else "Unknown"
        humidity = f"{reading.humidity}%" if reading.humidity is not None else "Unknown"
        soil = f"{reading.soil_moisture} m³/m³" if reading.soil_moisture is not None else "Unknown"

        return (
            "As a plant care expert, give specific care recommendations for the following plant "
            "based on its current environment.\n\n"
            "Plant Information:\n"
            f"- Name: {plant.name}\n"
            f"- Species: {plant.species or 'Unknown'}\n"
            f"- Current watering frequency: {frequency}\n"
            f"- Last watered: {last_watered}\n\n"
            "Current Environment:\n"
            f"- Temperature: {temperature}\n"
            f"- Humidity: {humidity}\n"
            f"- Soil Moisture (0-10cm): {soil}\n\n"
            "Give 1-2 actionable recommendations about watering or light only. "
            "For watering, state the new frequency as \"every X days\". "
            "For light, suggest a specific placement change. "
            "Each message is at most 2 sentences.\n\n"
            "Answer with a JSON object only, in this shape:\n"
            "{\n"
            "  \"recommendations\": [\n"
            "    {\"recommendationType\": \"water\", \"message\": \"...\"},\n"
            "    {\"recommendationType\": \"light\", \"message\": \"...\"}\n"
            "  ]\n"
            "}"
        )

    @staticmethod
    def fallback(plant: Plant) -> List[Suggestion]:
        return [Suggestion(
            RecommendationType.WATER,
            f"Could not generate AI recommendations for {plant.name}. "
            f"Monitor soil moisture and adjust watering as needed."
        )]

    @staticmethod
    def parse(content: str) -> List[Suggestion]:
        try:
            data = json.loads(content)
        except (TypeError, ValueError):
            # some models wrap the JSON in prose or code fences
            match = re.search(r"\{[\s\S]*\}|\[[\s\S]*\]", content or "")
            if not match:
                return []
            try:
                data = json.loads(match.group(0))
            except ValueError:
                return []

        items = data.get("recommendations") if isinstance(data, dict) else data
        if not isinstance(items, list):
            return []

        suggestions = []
        for item in items:
            if not isinstance(item, dict):
                continue
            message = str(item.get("message") or "").strip()
            try:
                kind = RecommendationType(str(item.get("recommendationType", "")).lower())
            except ValueError:
                continue
            if message:
                suggestions.append(Suggestion(kind, message))
        return suggestions

    async def suggest(self, plant: Plant, reading: EnvironmentReading) -> List[Suggestion]:
        try:
            content = await self.generator.complete(self.build_prompt(plant, reading), expect_json=True)
        except ExternalServiceError as e:
            app_logger.warning(f"AI recommendations unavailable for plant {plant.id}: {e.message}")
            return self.fallback(plant)

        suggestions = self.parse(content)
        if not suggestions:
            app_logger.warning(f"Unusable AI recommendation answer for plant {plant.id}: {content!r}")
            return self.fallback(plant)
        return suggestions


class RecommendationService:

    @staticmethod
    async def latest_reading(user_id: int) -> Optional[EnvironmentReading]:
        return await EnvironmentReading.filter(user_id=user_id).order_by("-reading_timestamp", "-id").first()

    @staticmethod
    async def generate_for_user(user_id: int, strategy: RecommendationStrategy) -> List[Recommendation]:
        reading = await RecommendationService.latest_reading(user_id)
        if reading is None:
            app_logger.info(f"No environment reading for user {user_id}, skipping recommendations")
            return []

        created = []
        plants = await Plant.filter(user_id=user_id).order_by("id")
        for plant in plants:
            for suggestion in await strategy.suggest(plant, reading):
                duplicate = await Recommendation.filter(
                    user_id=user_id,
                    plant_id=plant.id,
                    recommendation_type=suggestion.recommendation_type,
                    message=suggestion.message,
                    applied=False,
                ).exists()
                if duplicate:
                    continue

                recommendation = await Recommendation.create(
                    user_id=user_id,
                    plant_id=plant.id,
                    recommendation_type=suggestion.recommendation_type,
                    message=suggestion.message,
                )
                db_logger.log_create("Recommendation", {
                    "id": recommendation.id,
                    "plant_id": plant.id,
                    "type": suggestion.recommendation_type.value,
                    "strategy": strategy.name,
                })
                created.append(recommendation)
        return created

    @staticmethod
    async def list_for_user(user_id: int, include_applied: bool = False) -> List[Recommendation]:
        query = Recommendation.filter(user_id=user_id)
        if not include_applied:
            query = query.filter(applied=False)
        return await query.order_by("-created_at", "-id")

    @staticmethod
    async def apply(recommendation_id: int, user_id: int) -> Recommendation:
        recommendation = await Recommendation.get_or_none(id=recommendation_id)
        if recommendation is None:
            raise NotFoundError("Recommendation", recommendation_id)
        if recommendation.user_id != user_id:
            raise AuthorizationError()

        async with in_transaction():
            updated = await Recommendation.filter(id=recommendation_id, applied=False).update(applied=True)
            if updated and (
                recommendation.recommendation_type == RecommendationType.WATER
                and recommendation.plant_id
            ):
                await RecommendationService._apply_watering(recommendation)

        if updated:
            db_logger.log_update("Recommendation", recommendation_id, {"applied": True})
        # already applied when no row was updated
        recommendation.applied = True
        return recommendation

    @staticmethod
    async def _apply_watering(recommendation: Recommendation):
        now = utc_now()
        changes = {"last_watered": now}
        days = parse_day_count(recommendation.message)
        if days is not None:
            changes["water_frequency_days"] = days

        await Plant.filter(id=recommendation.plant_id).update(**changes)
        await CareHistory.create(
            plant_id=recommendation.plant_id,
            action_type="water_recommended",
            notes=recommendation.message,
            performed_at=now,
        )
        db_logger.log_update("Plant", recommendation.plant_id, changes)
        await HealthCalculator.recompute(recommendation.plant_id, now=now)
