from enum import Enum

from tortoise import fields, models

MAX_WATER_FREQUENCY_DAYS = 365


class PlantStatus(str, Enum):
    HEALTHY = "healthy"
    NEEDS_CARE = "needs_care"
    NEEDS_ATTENTION = "needs_attention"


class LightRequirement(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Plant(models.Model):
    id = fields.IntField(pk=True)
    user = fields.ForeignKeyField("models.User", related_name="plants")

    name = fields.CharField(max_length=255)
    species = fields.CharField(max_length=255, null=True)
    description = fields.TextField(null=True)
    image_url = fields.CharField(max_length=1000, null=True)
    acquired_date = fields.DatetimeField(null=True)
    status = fields.CharEnumField(PlantStatus, default=PlantStatus.HEALTHY)

    last_watered = fields.DatetimeField(null=True)
    water_frequency_days = fields.IntField(null=True)
    light_requirement = fields.CharEnumField(LightRequirement, null=True)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "plants"
        ordering = ["id"]

    def __str__(self):
        return self.name
