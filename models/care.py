from enum import Enum

from tortoise import fields, models


class TaskType(str, Enum):
    WATER = "water"
    PRUNE = "prune"
    FERTILIZE = "fertilize"
    LIGHT = "light"


class CareTask(models.Model):
    id = fields.IntField(pk=True)
    plant = fields.ForeignKeyField(
        "models.Plant",
        related_name="care_tasks",
        on_delete=fields.CASCADE
    )

    task_type = fields.CharEnumField(TaskType)
    due_date = fields.DatetimeField()

    # pending -> completed | skipped, both terminal
    completed = fields.BooleanField(default=False)
    completed_date = fields.DatetimeField(null=True)
    skipped = fields.BooleanField(default=False)

    class Meta:
        table = "care_tasks"

    @property
    def is_pending(self) -> bool:
        return not self.completed and not self.skipped


class CareHistory(models.Model):
    id = fields.IntField(pk=True)
    plant = fields.ForeignKeyField(
        "models.Plant",
        related_name="care_history",
        on_delete=fields.CASCADE
    )

    action_type = fields.CharField(max_length=64)
    notes = fields.TextField(null=True)
    performed_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "care_history"
