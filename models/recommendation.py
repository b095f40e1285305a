from enum import Enum

from tortoise import fields, models


class RecommendationType(str, Enum):
    WATER = "water"
    LIGHT = "light"
    PRUNING = "pruning"


class Recommendation(models.Model):
    id = fields.IntField(pk=True)
    user = fields.ForeignKeyField("models.User", related_name="recommendations")
    plant = fields.ForeignKeyField(
        "models.Plant",
        related_name="recommendations",
        on_delete=fields.CASCADE,
        null=True
    )

    recommendation_type = fields.CharEnumField(RecommendationType)
    message = fields.TextField()
    # flips once from False to True
    applied = fields.BooleanField(default=False)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "recommendations"
