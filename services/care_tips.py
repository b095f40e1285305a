import json
import re
from datetime import date
from typing import Dict, List

from core.exceptions import ExternalServiceError
from core.logger import app_logger
from models.plant import Plant
from services.text_generator import TextGenerator
from services.weather import WeatherSnapshot

SEASONS = {
    12: "Winter", 1: "Winter", 2: "Winter",
    3: "Spring", 4: "Spring", 5: "Spring",
    6: "Summer", 7: "Summer", 8: "Summer",
    9: "Autumn", 10: "Autumn", 11: "Autumn",
}


def season_for(day: date) -> str:
    """Meteorological season, northern hemisphere."""
    return SEASONS[day.month]


def _weather_line(weather: WeatherSnapshot) -> str:
    temperature = f"{weather.temperature}°C" if weather.temperature is not None else "Not available"
    humidity = f"{weather.humidity}%" if weather.humidity is not None else "Not available"
    soil = f"{weather.soil_moisture} m³/m³" if weather.soil_moisture is not None else "Not available"
    return f"- Temperature: {temperature}\n- Humidity: {humidity}\n- Soil Moisture: {soil}\n"


class CareTipService:

    def __init__(self, generator: TextGenerator):
        self.generator = generator

    @staticmethod
    def plant_tips_prompt(plant: Plant, weather: WeatherSnapshot, season: str) -> str:
        frequency = f"Every {plant.water_frequency_days} days" if plant.water_frequency_days else "Unknown"
        last_watered = plant.last_watered.date().isoformat() if plant.last_watered else "Unknown"
        kind = plant.species or plant.name
        return (
            "Give practical care tips for the following plant, considering its type, "
            "the current weather and the season.\n\n"
            "Plant Information:\n"
            f"- Name: {plant.name}\n"
            f"- Species/Type: {kind}\n"
            f"- Current watering frequency: {frequency}\n"
            f"- Last watered: {last_watered}\n\n"
            "Weather Conditions:\n"
            f"{_weather_line(weather)}\n"
            f"Season: {season}\n\n"
            "Give 2-3 tips. Each has a category (Watering, Sunlight, Fertilizing, Pest Control, "
            "Temperature/Humidity Adjustment or Seasonal Care) and a tip of at most 3 sentences.\n"
            "Answer with a JSON object only, in this shape:\n"
            "{\"tips\": [{\"category\": \"Watering\", \"tip\": \"...\"}]}"
        )

    @staticmethod
    def parse_tips(content: str) -> List[Dict[str, str]]:
        try:
            data = json.loads(content)
        except (TypeError, ValueError):
            match = re.search(r"\{[\s\S]*\}|\[[\s\S]*\]", content or "")
            if not match:
                return []
            try:
                data = json.loads(match.group(0))
            except ValueError:
                return []

        items = data.get("tips") if isinstance(data, dict) else data
        if not isinstance(items, list):
            return []
        return [
            {"category": str(item.get("category") or "General"), "tip": str(item["tip"]).strip()}
            for item in items
            if isinstance(item, dict) and str(item.get("tip") or "").strip()
        ]

    async def plant_tips(self, plant: Plant, weather: WeatherSnapshot, season: str) -> List[Dict[str, str]]:
        try:
            content = await self.generator.complete(
                self.plant_tips_prompt(plant, weather, season), expect_json=True
            )
        except ExternalServiceError as e:
            app_logger.warning(f"AI care tips unavailable for plant {plant.id}: {e.message}")
            return [{
                "category": "General",
                "tip": f"Could not generate AI tips for {plant.name} right now. "
                       f"Check its soil and light and try again later.",
            }]

        tips = self.parse_tips(content)
        if not tips:
            return [{
                "category": "General",
                "tip": "Unable to generate specific tips at this moment. "
                       "Please make sure your plant's basic needs are met.",
            }]
        return tips

    async def general_tip(self, weather: WeatherSnapshot, season: str) -> str:
        prompt = (
            "Write only one short, encouraging and actionable plant care tip (1-2 sentences) "
            "for a dashboard. It must apply to a mixed collection of common house plants. "
            "Output only the tip text.\n"
            f"Current conditions:\n{_weather_line(weather)}Season: {season}"
        )
        try:
            content = await self.generator.complete(prompt)
        except ExternalServiceError as e:
            app_logger.warning(f"AI general tip unavailable: {e.message}")
            content = ""

        tip = content.strip().strip('"').strip()
        if not tip:
            return (
                f"Could not generate a tip right now. Remember to check your plants' "
                f"needs for the current {season.lower()} conditions!"
            )
        return tip
