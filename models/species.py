from tortoise import fields, models


class SpeciesProfile(models.Model):
    """Plant-data API details cached per plant, re-synced once stale."""

    id = fields.IntField(pk=True)
    plant = fields.OneToOneField(
        "models.Plant",
        related_name="species_profile",
        on_delete=fields.CASCADE
    )

    external_id = fields.IntField(null=True)
    query = fields.CharField(max_length=255)
    details = fields.JSONField(default=dict)

    synced_at = fields.DatetimeField()

    class Meta:
        table = "species_profiles"
