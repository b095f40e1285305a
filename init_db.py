from tortoise import Tortoise

from core.config import settings

MODEL_MODULES = [
    "models.user",
    "models.plant",
    "models.environment",
    "models.care",
    "models.recommendation",
    "models.health",
    "models.species",
]

TORTOISE_ORM = {
    "connections": {
        "default": settings.DATABASE_URL
    },
    "apps": {
        "models": {
            "models": [*MODEL_MODULES, "aerich.models"],
            "default_connection": "default",
        }
    },
    "use_tz": True,
    "timezone": "UTC",
}


async def init_db():
    await Tortoise.init(config=TORTOISE_ORM)
    await Tortoise.generate_schemas()


async def close_db():
    await Tortoise.close_connections()
