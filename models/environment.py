from tortoise import fields, models

from models.plant import LightRequirement


class EnvironmentReading(models.Model):
    """Append only. The newest reading of a user is their current environment."""

    id = fields.IntField(pk=True)
    user = fields.ForeignKeyField("models.User", related_name="environment_readings")

    temperature = fields.FloatField(null=True)
    humidity = fields.FloatField(null=True)
    light_level = fields.CharEnumField(LightRequirement, null=True)
    soil_moisture = fields.FloatField(null=True)

    reading_timestamp = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "environment_readings"
