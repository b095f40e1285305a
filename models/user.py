from tortoise import fields, models


class User(models.Model):
    id = fields.IntField(pk=True)
    # subject claim of the identity provider token
    external_id = fields.CharField(max_length=255, unique=True)
    username = fields.CharField(max_length=150, unique=True)
    email = fields.CharField(max_length=255, null=True)
    name = fields.CharField(max_length=255)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "users"

    def __str__(self):
        return f"{self.username} ({self.external_id})"
