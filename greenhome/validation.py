from typing import Any, Dict, Optional, Sequence

from .errors import ValidationError

# Declaration order decides which field is reported when several are missing.
REPORT_FIELDS = ("title", "description", "category", "location", "priority")
IDENTIFY_FIELDS = ("image",)
QR_SCAN_FIELDS = ("qrData",)
NOTIFICATION_FIELDS = ("vehicleId", "notificationType")


def first_missing(payload: Dict[str, Any], fields: Sequence[str]) -> Optional[str]:
    """Return the first field in ``fields`` that is absent or falsy, else None."""
    for field in fields:
        if not payload.get(field):
            return field
    return None


def require_fields(payload: Dict[str, Any], fields: Sequence[str]) -> None:
    missing = first_missing(payload, fields)
    if missing is not None:
        raise ValidationError(missing)
