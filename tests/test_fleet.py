import asyncio
import random

import pytest

from greenhome.errors import NotFoundError
from greenhome.fleet import SEED_VEHICLES, FleetTracker
from greenhome.schemas import VehicleState


def _vehicle(vehicle_id: str, progress: float, status: str = "on_route") -> VehicleState:
    return VehicleState(
        id=vehicle_id,
        vehicle_number=f"WM-{vehicle_id}",
        route="Test Route",
        current_location="Elm Street",
        next_stop="Birch Road",
        estimated_arrival="09:00 AM",
        status=status,
        progress=progress,
    )


@pytest.mark.asyncio
async def test_progress_never_decreases():
    fleet = FleetTracker(rng=random.Random(11))
    previous = {v.id: v.progress for v in await fleet.advance_all()}
    for _ in range(50):
        current = {v.id: v.progress for v in await fleet.advance_all()}
        for vehicle_id, progress in current.items():
            assert progress >= previous[vehicle_id]
            assert progress <= 100
        previous = current


@pytest.mark.asyncio
async def test_completion_is_terminal():
    fleet = FleetTracker(seed=[_vehicle("a", 99.5)], max_step=10.0, rng=random.Random(0))
    while True:
        (state,) = await fleet.advance_all()
        if state.status == "completed":
            break
    assert state.progress == 100
    assert state.estimated_arrival == "Completed"
    for _ in range(20):
        (again,) = await fleet.advance_all()
        assert again.progress == 100
        assert again.status == "completed"
        assert again.estimated_arrival == "Completed"


@pytest.mark.asyncio
async def test_completed_vehicle_is_not_incremented():
    class Recorder(random.Random):
        calls = 0

        def random(self):
            Recorder.calls += 1
            return 0.5

    fleet = FleetTracker(seed=[_vehicle("done", 100.0)], rng=Recorder())
    (state,) = await fleet.advance_all()
    assert state.status == "completed"
    assert Recorder.calls == 0


@pytest.mark.asyncio
async def test_identity_fields_pass_through():
    fleet = FleetTracker(rng=random.Random(5))
    for state, seed in zip(await fleet.advance_all(), SEED_VEHICLES):
        assert state.id == seed.id
        assert state.vehicle_number == seed.vehicle_number
        assert state.current_location == seed.current_location
        assert state.route == seed.route


@pytest.mark.asyncio
async def test_seed_set_is_not_mutated():
    before = [v.progress for v in SEED_VEHICLES]
    fleet = FleetTracker(rng=random.Random(2))
    for _ in range(5):
        await fleet.advance_all()
    assert [v.progress for v in SEED_VEHICLES] == before


@pytest.mark.asyncio
async def test_snapshots_are_detached_from_state():
    fleet = FleetTracker(seed=[_vehicle("a", 10.0)], rng=random.Random(4))
    (snapshot,) = await fleet.advance_all()
    snapshot.progress = 0.0
    (state,) = await fleet.advance_all()
    assert state.progress >= 10.0


@pytest.mark.asyncio
async def test_concurrent_reads_apply_every_increment_once():
    class FixedStep(random.Random):
        def random(self):
            return 0.1

    fleet = FleetTracker(seed=[_vehicle("a", 0.0)], max_step=10.0, rng=FixedStep())
    await asyncio.gather(*(fleet.advance_all() for _ in range(20)))
    (state,) = await fleet.advance_all()
    assert state.progress == pytest.approx(21.0)


@pytest.mark.asyncio
async def test_advance_one_only_moves_that_vehicle():
    fleet = FleetTracker(seed=[_vehicle("a", 10.0), _vehicle("b", 10.0)], rng=random.Random(9))
    moved = await fleet.advance_one("a")
    assert moved.id == "a"
    states = {v.id: v.progress for v in await fleet.advance_all()}
    assert states["a"] >= moved.progress
    with pytest.raises(NotFoundError):
        await fleet.advance_one("missing")


def test_duplicate_seed_ids_rejected():
    with pytest.raises(ValueError):
        FleetTracker(seed=[_vehicle("a", 1.0), _vehicle("a", 2.0)])


def test_tracker_size_matches_seed():
    assert len(FleetTracker()) == len(SEED_VEHICLES)
