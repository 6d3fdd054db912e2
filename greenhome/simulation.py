"""Simulated stand-ins for the external waste classifier, QR lookup and
notification dispatch.

Each backend is an async callable object. A real implementation only has to
satisfy the matching protocol to be swapped in behind the API.
"""
import asyncio
import logging
import random
import uuid
from typing import List, Optional, Protocol, Sequence, runtime_checkable

from .schemas import (
    IdentificationResult,
    NotificationAck,
    ScanCandidate,
    ScanResult,
    WasteItem,
    utc_timestamp,
)

logger = logging.getLogger("greenhome.simulation")

# --- Reference data ---
WASTE_CATALOG: List[WasteItem] = [
    WasteItem(
        id="1",
        name="Plastic Bottle",
        category="recyclable",
        description="Clear plastic water bottle",
        disposal_instructions="Remove cap and label, rinse clean, place in recycling bin",
        points=5,
    ),
    WasteItem(
        id="2",
        name="Banana Peel",
        category="organic",
        description="Organic fruit waste",
        disposal_instructions="Place in organic waste bin or compost",
        points=3,
    ),
    WasteItem(
        id="3",
        name="Battery",
        category="hazardous",
        description="Used AA battery",
        disposal_instructions="Take to designated battery collection point - never put in regular trash",
        points=10,
    ),
]

SCAN_CANDIDATES: List[ScanCandidate] = [
    ScanCandidate(id="QR001", waste_type="Recyclable Plastic", points=15,
                  location="Main Street Collection Point", verified=True),
    ScanCandidate(id="QR002", waste_type="Organic Waste", points=10,
                  location="Park Avenue Bin", verified=True),
    ScanCandidate(id="QR003", waste_type="Hazardous Battery", points=25,
                  location="Electronics Store Drop-off", verified=True),
    ScanCandidate(id="QR004", waste_type="General Waste", points=5,
                  location="Shopping Center", verified=False),
]

# Shown to clients; not a measurement.
IDENTIFY_TIME_LABEL = "1.2s"
QR_SCAN_TIME_LABEL = "0.8s"

CONFIDENCE_MIN = 80
CONFIDENCE_MAX = 99


@runtime_checkable
class Classifier(Protocol):
    async def __call__(self, image: str) -> IdentificationResult:
        ...


@runtime_checkable
class ScanLookup(Protocol):
    async def __call__(self, qr_data: str) -> ScanResult:
        ...


@runtime_checkable
class Notifier(Protocol):
    async def __call__(self, vehicle_id: str, notification_type: str) -> NotificationAck:
        ...


class SimulatedClassifier:
    def __init__(
        self,
        delay: float = 1.5,
        catalog: Sequence[WasteItem] = WASTE_CATALOG,
        rng: Optional[random.Random] = None,
    ):
        if not catalog:
            raise ValueError("catalog must not be empty")
        self.delay = delay
        self.catalog = list(catalog)
        self.rng = rng or random.Random()

    async def __call__(self, image: str) -> IdentificationResult:
        await asyncio.sleep(self.delay)
        item = self.rng.choice(self.catalog)
        confidence = self.rng.randint(CONFIDENCE_MIN, CONFIDENCE_MAX)
        logger.debug(f"Identified {item.name} with confidence {confidence}")
        return IdentificationResult(
            item=item,
            confidence=confidence,
            timestamp=utc_timestamp(),
            processing_time=IDENTIFY_TIME_LABEL,
        )


class SimulatedScanLookup:
    def __init__(
        self,
        delay: float = 1.0,
        candidates: Sequence[ScanCandidate] = SCAN_CANDIDATES,
        rng: Optional[random.Random] = None,
    ):
        if not candidates:
            raise ValueError("candidates must not be empty")
        self.delay = delay
        self.candidates = list(candidates)
        self.rng = rng or random.Random()

    async def __call__(self, qr_data: str) -> ScanResult:
        # The code itself is not decoded; any non-empty payload maps to a candidate.
        await asyncio.sleep(self.delay)
        candidate = self.rng.choice(self.candidates)
        return ScanResult(
            **candidate.model_dump(),
            timestamp=utc_timestamp(),
            processing_time=QR_SCAN_TIME_LABEL,
        )


class SimulatedNotifier:
    def __init__(self, delay: float = 0.5):
        self.delay = delay

    async def __call__(self, vehicle_id: str, notification_type: str) -> NotificationAck:
        await asyncio.sleep(self.delay)
        ack = NotificationAck(
            notification_id=uuid.uuid4().hex,
            message=f"{notification_type} notification set for vehicle {vehicle_id}",
        )
        logger.info(f"Notification {ack.notification_id} registered for vehicle {vehicle_id}")
        return ack
