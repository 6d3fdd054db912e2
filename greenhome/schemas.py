from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ApiModel(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class WasteItem(ApiModel):
    id: str
    name: str
    category: Literal["organic", "recyclable", "hazardous", "general"]
    description: str
    disposal_instructions: str = Field(..., alias="disposalInstructions")
    points: int


class IdentificationResult(ApiModel):
    item: WasteItem
    confidence: int = Field(..., ge=80, le=99)
    timestamp: str
    processing_time: str = Field(..., alias="processingTime")


class ScanCandidate(ApiModel):
    id: str
    waste_type: str = Field(..., alias="wasteType")
    points: int
    location: str
    verified: bool


class ScanResult(ScanCandidate):
    timestamp: str
    processing_time: str = Field(..., alias="processingTime")


class VehicleState(ApiModel):
    id: str
    vehicle_number: str = Field(..., alias="vehicleNumber")
    route: str
    current_location: str = Field(..., alias="currentLocation")
    next_stop: str = Field(..., alias="nextStop")
    estimated_arrival: str = Field(..., alias="estimatedArrival")
    status: str
    progress: float = Field(..., ge=0.0, le=100.0)


class Report(ApiModel):
    id: str
    title: str
    description: str
    category: str
    location: str
    priority: str
    status: Literal["pending", "in_progress", "resolved"] = "pending"
    reported_at: str = Field(..., alias="reportedAt")
    reported_by: str = Field(..., alias="reportedBy")
    image_url: Optional[str] = Field(None, alias="imageUrl")


class NotificationAck(ApiModel):
    success: bool = True
    notification_id: str = Field(..., alias="notificationId")
    message: str
