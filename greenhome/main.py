import time
import uuid
import logging
import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from . import schemas
from .config import CORS_ALLOW_ORIGINS, LOG_LEVEL, VERSION, SimulationSettings
from .errors import NotFoundError, ValidationError
from .fleet import FleetTracker
from .reports import ReportStore
from .simulation import (
    Classifier,
    Notifier,
    ScanLookup,
    SimulatedClassifier,
    SimulatedNotifier,
    SimulatedScanLookup,
)
from .validation import IDENTIFY_FIELDS, NOTIFICATION_FIELDS, QR_SCAN_FIELDS, require_fields

# --- Logging Setup ---
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger("greenhome")

# --- App Setup ---
app = FastAPI(
    title="GreenHome Operations API",
    version=VERSION,
    description="Citizen reports, waste identification, QR scans and vehicle tracking."
)

@app.on_event("startup")
async def startup_event():
    settings = SimulationSettings.from_env()
    app.state.settings = settings
    app.state.reports = ReportStore(delay=settings.report_delay)
    app.state.fleet = FleetTracker(max_step=settings.max_progress_step)
    classifier: Classifier = SimulatedClassifier(delay=settings.identify_delay)
    scan_lookup: ScanLookup = SimulatedScanLookup(delay=settings.qr_scan_delay)
    notifier: Notifier = SimulatedNotifier(delay=settings.notify_delay)
    app.state.classifier = classifier
    app.state.scan_lookup = scan_lookup
    app.state.notifier = notifier
    logger.info(f"Starting GreenHome API. CORS_ALLOW_ORIGINS={CORS_ALLOW_ORIGINS}")
    logger.info(f"Tracking {len(app.state.fleet)} vehicles. Settings: {settings.model_dump()}")

# --- Middleware ---
# Note: Middleware is added LIFO. The last added middleware is the first to execute.
# We want: CORS -> Logging -> Path Normalization -> App

@app.middleware("http")
async def normalize_path_middleware(request: Request, call_next):
    # Collapse double slashes
    if "//" in request.url.path:
        request.scope["path"] = re.sub('/+', '/', request.url.path)
    return await call_next(request)

@app.middleware("http")
async def structured_logging_middleware(request: Request, call_next):
    trace_id = str(uuid.uuid4())
    request.state.trace_id = trace_id

    start_time = time.time()

    try:
        response = await call_next(request)
        process_time_ms = round((time.time() - start_time) * 1000, 2)

        log_entry = {
            "trace_id": trace_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "latency_ms": process_time_ms
        }
        logger.info(json.dumps(log_entry))
        return response

    except Exception as e:
        process_time_ms = round((time.time() - start_time) * 1000, 2)
        log_entry = {
            "trace_id": trace_id,
            "method": request.method,
            "path": request.url.path,
            "status": 500,
            "latency_ms": process_time_ms,
            "error": str(e)
        }
        logger.error(json.dumps(log_entry))
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "trace_id": trace_id}
        )

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception Handlers ---

@app.exception_handler(ValidationError)
async def missing_field_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": exc.message},
    )

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": exc.message},
    )

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected request body on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request body"},
    )

def _internal_error(message: str) -> JSONResponse:
    # The cause is logged by the caller; clients only see the message.
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": message},
    )

# --- Endpoints ---

@app.get("/healthz")
async def healthz():
    return {"status": "ok"}

@app.get("/version")
async def version():
    return {
        "version": VERSION,
        "build_time": datetime.now(timezone.utc).isoformat()
    }

@app.get("/community-reports", response_model=List[schemas.Report])
async def list_reports(request: Request):
    try:
        return await request.app.state.reports.list()
    except Exception:
        logger.error("Error fetching community reports", exc_info=True)
        return _internal_error("Failed to fetch reports")

@app.post("/community-reports", response_model=schemas.Report, status_code=status.HTTP_201_CREATED)
async def create_report(request: Request, payload: Dict[str, Any]):
    try:
        return await request.app.state.reports.create(payload)
    except ValidationError:
        raise
    except Exception:
        logger.error("Error creating community report", exc_info=True)
        return _internal_error("Failed to create report")

@app.get("/community-reports/{report_id}", response_model=schemas.Report)
async def get_report(request: Request, report_id: str):
    try:
        return await request.app.state.reports.get(report_id)
    except NotFoundError:
        raise
    except Exception:
        logger.error(f"Error fetching community report {report_id}", exc_info=True)
        return _internal_error("Failed to fetch report")

@app.post("/identify-waste", response_model=schemas.IdentificationResult)
async def identify_waste(request: Request, payload: Dict[str, Any]):
    require_fields(payload, IDENTIFY_FIELDS)
    classifier: Classifier = request.app.state.classifier
    try:
        return await classifier(payload["image"])
    except Exception:
        logger.error("Error identifying waste", exc_info=True)
        return _internal_error("Failed to identify waste")

@app.post("/qr-scan", response_model=schemas.ScanResult)
async def qr_scan(request: Request, payload: Dict[str, Any]):
    require_fields(payload, QR_SCAN_FIELDS)
    scan_lookup: ScanLookup = request.app.state.scan_lookup
    try:
        return await scan_lookup(payload["qrData"])
    except Exception:
        logger.error("Error processing QR scan", exc_info=True)
        return _internal_error("Failed to process QR scan")

@app.get("/vehicle-tracking", response_model=List[schemas.VehicleState])
async def vehicle_tracking(request: Request):
    try:
        return await request.app.state.fleet.advance_all()
    except Exception:
        logger.error("Error fetching vehicle tracking data", exc_info=True)
        return _internal_error("Failed to fetch vehicle data")

@app.get("/vehicle-tracking/{vehicle_id}", response_model=schemas.VehicleState)
async def vehicle_detail(request: Request, vehicle_id: str):
    try:
        return await request.app.state.fleet.advance_one(vehicle_id)
    except NotFoundError:
        raise
    except Exception:
        logger.error(f"Error fetching vehicle {vehicle_id}", exc_info=True)
        return _internal_error("Failed to fetch vehicle data")

@app.post("/vehicle-tracking", response_model=schemas.NotificationAck, status_code=status.HTTP_201_CREATED)
async def set_vehicle_notification(request: Request, payload: Dict[str, Any]):
    require_fields(payload, NOTIFICATION_FIELDS)
    notifier: Notifier = request.app.state.notifier
    try:
        return await notifier(payload["vehicleId"], payload["notificationType"])
    except Exception:
        logger.error("Error setting up notification", exc_info=True)
        return _internal_error("Failed to set up notification")
