"""In-memory fleet progress for collection vehicles.

Every read of the tracking feed moves each active vehicle further along its
route. A vehicle that reaches 100% is ``completed`` and stays that way for the
lifetime of the tracker.
"""
import asyncio
import collections
import logging
import random
from typing import Iterable, List, Optional

from .errors import NotFoundError
from .schemas import VehicleState

logger = logging.getLogger("greenhome.fleet")

COMPLETED = "completed"
COMPLETED_ARRIVAL = "Completed"
MAX_PROGRESS = 100.0

SEED_VEHICLES: List[VehicleState] = [
    VehicleState(
        id="1",
        vehicle_number="WM-001",
        route="Downtown Route A",
        current_location="Oak Street",
        next_stop="Pine Avenue",
        estimated_arrival="10:30 AM",
        status="on_route",
        progress=65,
    ),
    VehicleState(
        id="2",
        vehicle_number="WM-002",
        route="Residential Route B",
        current_location="Maple Drive",
        next_stop="Cedar Lane",
        estimated_arrival="11:15 AM",
        status="collecting",
        progress=40,
    ),
]


class FleetTracker:
    def __init__(
        self,
        seed: Iterable[VehicleState] = SEED_VEHICLES,
        max_step: float = 10.0,
        rng: Optional[random.Random] = None,
    ):
        self.max_step = max_step
        self.rng = rng or random.Random()
        self._lock = asyncio.Lock()
        # VEHICLES[vehicle_id] = VehicleState, in seed order
        self._vehicles: collections.OrderedDict = collections.OrderedDict()
        for vehicle in seed:
            if vehicle.id in self._vehicles:
                raise ValueError(f"Duplicate vehicle id in seed: {vehicle.id}")
            # Private copies so the seed set is never mutated.
            state = vehicle.model_copy()
            if state.progress >= MAX_PROGRESS:
                self._complete(state)
            self._vehicles[vehicle.id] = state

    def _complete(self, state: VehicleState) -> None:
        state.progress = MAX_PROGRESS
        state.status = COMPLETED
        state.estimated_arrival = COMPLETED_ARRIVAL

    def _advance(self, state: VehicleState) -> None:
        if state.status == COMPLETED:
            return
        step = self.rng.random() * self.max_step
        state.progress = min(state.progress + step, MAX_PROGRESS)
        if state.progress >= MAX_PROGRESS:
            self._complete(state)
            logger.info(f"Vehicle {state.vehicle_number} completed {state.route}")

    async def advance_all(self) -> List[VehicleState]:
        """Advance every vehicle once and return snapshots of the new states."""
        async with self._lock:
            for state in self._vehicles.values():
                self._advance(state)
            return [state.model_copy() for state in self._vehicles.values()]

    async def advance_one(self, vehicle_id: str) -> VehicleState:
        async with self._lock:
            state = self._vehicles.get(vehicle_id)
            if state is None:
                raise NotFoundError("Vehicle not found")
            self._advance(state)
            return state.model_copy()

    def __len__(self) -> int:
        return len(self._vehicles)
