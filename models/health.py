from tortoise import fields, models


class PlantHealthMetric(models.Model):
    id = fields.IntField(pk=True)
    plant = fields.OneToOneField(
        "models.Plant",
        related_name="health_metric",
        on_delete=fields.CASCADE
    )

    # all three are 0-100
    water_level = fields.IntField(default=100)
    light_level = fields.IntField(default=100)
    overall_health = fields.IntField(default=100)

    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "plant_health_metrics"
