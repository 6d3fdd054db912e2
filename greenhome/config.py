import os

from pydantic import BaseModel, Field

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
CORS_ALLOW_ORIGINS = os.environ.get("CORS_ALLOW_ORIGINS", "*").split(",")
VERSION = "1.0.0"


def _get_env_float(key: str, default: float) -> float:
    try:
        return float(os.environ.get(key, str(default)))
    except ValueError:
        return default


class SimulationSettings(BaseModel):
    """Latencies and limits for the simulated backends, in seconds where timed."""

    identify_delay: float = Field(1.5, ge=0.0)
    qr_scan_delay: float = Field(1.0, ge=0.0)
    report_delay: float = Field(1.0, ge=0.0)
    notify_delay: float = Field(0.5, ge=0.0)
    max_progress_step: float = Field(10.0, ge=0.0)

    @classmethod
    def from_env(cls) -> "SimulationSettings":
        return cls(
            identify_delay=_get_env_float("IDENTIFY_DELAY_SECONDS", 1.5),
            qr_scan_delay=_get_env_float("QR_SCAN_DELAY_SECONDS", 1.0),
            report_delay=_get_env_float("REPORT_DELAY_SECONDS", 1.0),
            notify_delay=_get_env_float("NOTIFY_DELAY_SECONDS", 0.5),
            max_progress_step=_get_env_float("MAX_PROGRESS_STEP", 10.0),
        )
