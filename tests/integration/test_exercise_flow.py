"""Integration tests for the end-to-end exercise logging workflow"""
import asyncio
import json

import pytest

from extflex import app, config
from extflex.models.progression import NewUnlockType
from extflex.services.progression_service import ProgressionService
from extflex.storage.exercise_storage import LEGACY_EXERCISES_KEY
from extflex.storage.json_file_store import JsonFileStore
from extflex.storage.memory_store import InMemoryStore
from extflex.storage.streak_storage import STREAK_KEY


@pytest.fixture(autouse=True)
def memory_backend(monkeypatch):
    """Validate against the in-memory backend unless a test says otherwise"""
    monkeypatch.setattr(config, "STORE_BACKEND", "memory")


class YieldingStore(InMemoryStore):
    """In-memory store whose reads give other tasks a chance to run"""

    async def get(self, key):
        await asyncio.sleep(0)
        return await super().get(key)


# ============================================================================
# Full workflow
# ============================================================================

@pytest.mark.asyncio
async def test_week_of_training(clock):
    """Test a user logging across several days, with a freeze and a level-up"""
    container = await app.create_container(store=InMemoryStore(), clock=clock)
    log = container.exercise_log_service
    progression = container.progression_service
    streak = container.streak_service

    # Day 1: first set
    pb = await log.log_exercise("pushups", 20)
    assert pb.is_new_pb is True
    assert progression.dismiss_unlock().id == "first_rep"
    assert await streak.get_current_streak() == 1

    # Day 2: skipped, freeze spent
    clock.advance(days=1)
    assert (await streak.use_freeze()).success is True

    # Day 3: big session crosses level 2
    clock.advance(days=1)
    await log.log_exercise("pushups", 180)
    pb = await log.log_exercise("pushups", 15)

    assert pb.is_new_pb is False
    assert pb.previous_pb.value == 180
    assert await streak.get_current_streak() == 2
    assert await progression.is_unlocked("dumbbell_curls")

    queued = list(progression.unlock_queue)
    assert queued[0].type == NewUnlockType.LEVEL_UP
    assert {u.id for u in queued if u.type == NewUnlockType.EXERCISE} == {
        "dumbbell_curls", "high_knees", "shoulder_stretch",
    }

    # Day 3: weighted exercise just unlocked
    await log.log_exercise("dumbbell_curls", 10, weight=20)
    await log.log_exercise("dumbbell_curls", 8, weight=25)
    weighted = await container.personal_best_service.get_weighted_pbs("dumbbell_curls")
    assert {k: v.value for k, v in weighted.items()} == {"20": 10, "25": 8}

    totals = await log.get_all_time_totals()
    assert totals.set_count == 5
    assert totals.total_value == 233


@pytest.mark.asyncio
async def test_lapsed_streak_is_broken_on_open(clock):
    """Test create_container validates the streak"""
    store = InMemoryStore()
    first = await app.create_container(store=store, clock=clock)
    await first.exercise_log_service.log_exercise("jumping_jacks", 30)

    clock.advance(days=3)
    second = await app.create_container(store=store, clock=clock)

    assert (await store.get(STREAK_KEY))["current"] == 0
    assert await second.streak_service.get_current_streak() == 0
    assert (await second.streak_service.get_streak()).longest == 1


@pytest.mark.asyncio
async def test_legacy_entries_are_migrated_on_open(clock):
    """Test legacy trainer_* keys are picked up by a new container"""
    store = InMemoryStore({
        LEGACY_EXERCISES_KEY: [
            {"id": "old", "exerciseId": "pushups", "value": 12, "timestamp": 1710000000000},
        ],
    })

    container = await app.create_container(store=store, clock=clock)

    entries = await container.exercise_log_service.get_all_entries()
    assert [e.id for e in entries] == ["old"]


@pytest.mark.asyncio
async def test_progress_survives_restart_with_file_store(clock, tmp_path):
    """Test JSON file persistence across containers"""
    path = tmp_path / "store.json"
    first = await app.create_container(store=JsonFileStore(path), clock=clock)
    await first.exercise_log_service.log_exercise("neck_rolls", 45)
    exported = await first.data_transfer_service.export_data()

    second = await app.create_container(store=JsonFileStore(path), clock=clock)

    assert await second.data_transfer_service.export_data() == exported
    assert (await second.progression_service.get_exercise_progress("neck_rolls")).xp >= 45
    assert json.loads(path.read_text(encoding="utf-8"))["extFlex_last_exercise"] > 0


@pytest.mark.asyncio
async def test_backup_restores_into_fresh_store(clock):
    """Test export from one store and import into another"""
    source = await app.create_container(store=InMemoryStore(), clock=clock)
    await source.exercise_log_service.log_exercise("pushups", 25)
    backup = await source.data_transfer_service.export_data()

    target = await app.create_container(store=InMemoryStore(), clock=clock)
    summary = await target.data_transfer_service.import_data(backup)

    assert summary.entries_imported == 1
    assert summary.streak_imported is True
    assert await target.streak_service.get_current_streak() == 1
    assert (await target.personal_best_service.get_current_pb("pushups")).value == 25


# ============================================================================
# Concurrency (best effort)
# ============================================================================

@pytest.mark.asyncio
async def test_concurrent_add_xp_is_best_effort(clock):
    """
    Two overlapping add_xp calls on one store race on the progression record.

    Nothing serializes them, so one update may be lost. Only the bounds are
    checked here, not a particular outcome.
    """
    store = YieldingStore()
    first = ProgressionService(store, clock=clock, achievements=[])
    second = ProgressionService(store, clock=clock, achievements=[])

    await asyncio.gather(first.add_xp("pushups", 20), second.add_xp("pushups", 20))

    total = (await first.get_progression()).total_xp
    assert total in (20, 40)


def test_create_store_follows_backend(monkeypatch, tmp_path):
    """Test backend selection from configuration"""
    assert isinstance(app.create_store(), InMemoryStore)

    monkeypatch.setattr(config, "STORE_BACKEND", "json")
    monkeypatch.setattr(config, "DATA_PATH", tmp_path)
    store = app.create_store()

    assert isinstance(store, JsonFileStore)
    assert store.path == tmp_path / "store.json"
