from datetime import timedelta

import pytest

from conftest import NOW
from models.care import CareHistory, TaskType
from models.health import PlantHealthMetric
from services.care_tasks import CareTaskService
from services.dashboard import DashboardAggregator, health_status, needs_water


@pytest.mark.parametrize("average, expected", [
    (None, None),
    (10, "Poor"),
    (49, "Poor"),
    (50, "Fair"),
    (74, "Fair"),
    (75, "Good"),
    (100, "Good"),
])
def test_health_status(average, expected):
    assert health_status(average) == expected


async def test_needs_water_honours_grace(user, make_plant):
    plant = await make_plant(user, water_frequency_days=7, last_watered=NOW - timedelta(days=8))

    assert needs_water(plant, NOW) is True
    assert needs_water(plant, NOW, grace_days=2) is False

    unscheduled = await make_plant(user, name="Cactus", last_watered=NOW - timedelta(days=80))
    assert needs_water(unscheduled, NOW) is False


async def test_empty_dashboard(user):
    snapshot = await DashboardAggregator().stats(user.id, now=NOW)

    assert snapshot.total_plants == 0
    assert snapshot.plants_needing_water == 0
    assert snapshot.upcoming_tasks == []
    assert snapshot.recent_activity == []
    assert snapshot.average_health is None
    assert snapshot.health_status is None


async def test_dashboard_aggregates_user_data(user, make_user, make_plant):
    thirsty = await make_plant(user, name="Thirsty", water_frequency_days=3, last_watered=NOW - timedelta(days=5))
    fine = await make_plant(user, name="Fine", water_frequency_days=10, last_watered=NOW - timedelta(days=1))
    await PlantHealthMetric.create(plant=thirsty, water_level=0, light_level=75, overall_health=40)
    await PlantHealthMetric.create(plant=fine, water_level=90, light_level=75, overall_health=83)

    tasks = [
        await CareTaskService.create(fine, TaskType.WATER, NOW + timedelta(days=d))
        for d in range(1, 8)
    ]
    await CareTaskService.create(fine, TaskType.PRUNE, NOW - timedelta(days=1))

    for d in range(7):
        await CareHistory.create(plant=thirsty, action_type="completed_water", performed_at=NOW - timedelta(days=d))

    stranger = await make_plant(await make_user(), name="Not mine", water_frequency_days=1,
                                last_watered=NOW - timedelta(days=30))
    await PlantHealthMetric.create(plant=stranger, overall_health=0)

    snapshot = await DashboardAggregator(grace_days=0, limit=5).stats(user.id, now=NOW)

    assert snapshot.total_plants == 2
    assert snapshot.plants_needing_water == 1
    assert [t.id for t in snapshot.upcoming_tasks] == [t.id for t in tasks[:5]]
    assert all(t.plant.name == "Fine" for t in snapshot.upcoming_tasks)
    assert len(snapshot.recent_activity) == 5
    assert snapshot.recent_activity[0].performed_at >= snapshot.recent_activity[-1].performed_at
    assert snapshot.recent_activity[0].plant.name == "Thirsty"
    assert snapshot.average_health == 62
    assert snapshot.health_status == "Fair"


@pytest.mark.parametrize("scores, average, status", [
    ((49, 50), 50, "Poor"),
    ((74, 75, 75), 75, "Fair"),
])
async def test_health_status_uses_unrounded_mean(user, make_plant, scores, average, status):
    for n, score in enumerate(scores):
        plant = await make_plant(user, name=f"Plant {n}")
        await PlantHealthMetric.create(plant=plant, overall_health=score)

    snapshot = await DashboardAggregator().stats(user.id, now=NOW)

    assert snapshot.average_health == average
    assert snapshot.health_status == status
