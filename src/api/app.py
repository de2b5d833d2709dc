"""FastAPI application for the business card lead capture API.

Provides endpoints for processing card photos into leads, listing and
creating leads, triggering CRM sync, and health checks.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Annotated

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    FastAPI,
    File,
    HTTPException,
    Query,
    Request,
    UploadFile,
)
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from src.crm.providers import CRMProvider
from src.crm.sync import CRMSyncError, run_background_sync
from src.extraction.record import ContactRecord
from src.ocr.card_reader import InvalidImageError, NoTextDetectedError
from src.ocr.tesseract_engine import OCRError, OCRResult
from src.services import Services, build_services
from src.storage.lead_store import LeadNotFoundError, PersistenceError, StoredLead
from src.storage.models import SyncStatus
from src.utils.config import AppConfig, load_config
from src.utils.logger import get_logger

from .schemas import (
    CRMSyncRequest,
    CRMSyncResponse,
    HealthResponse,
    LeadCreateRequest,
    LeadCreateResponse,
    LeadListResponse,
    LeadResponse,
    ProcessCardResponse,
    SyncStatusResponse,
)

logger = get_logger(__name__)

VERSION = "1.0.0"

_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/tiff",
    "image/webp",
    "image/bmp",
    "application/octet-stream",
}


def get_services(request: Request) -> Services:
    """Return the services owned by the running application."""
    return request.app.state.services


ServicesDep = Annotated[Services, Depends(get_services)]

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check(services: ServicesDep) -> HealthResponse:
    """Return system health status."""
    return HealthResponse(
        status="healthy",
        version=VERSION,
        tesseract_available=services.reader.engine.is_available(),
    )


def _capture_lead(
    services: Services, content: bytes, filename: str
) -> tuple[OCRResult, StoredLead]:
    """OCR, parse, and store one card. Blocks; called through the threadpool."""
    try:
        ocr_result = services.reader.read(content, filename)
    except InvalidImageError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except NoTextDetectedError as exc:
        raise HTTPException(
            status_code=400, detail="No text detected in image"
        ) from exc
    except OCRError as exc:
        logger.error("Processing failed for %s: %s", filename, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    record = services.parser.parse(ocr_result.text)
    source = f"{services.config.ocr.source_label} - {datetime.now():%Y-%m-%d %H:%M:%S}"

    try:
        lead = services.store.create_lead(record, source)
        if services.config.crm.enabled:
            lead = services.store.update_sync_status(lead.id, SyncStatus.PENDING)
    except PersistenceError as exc:
        raise HTTPException(
            status_code=500, detail="Failed to store lead data"
        ) from exc
    return ocr_result, lead


@router.post("/process-card", response_model=ProcessCardResponse)
async def process_card(
    services: ServicesDep,
    background_tasks: BackgroundTasks,
    image: Annotated[UploadFile | None, File()] = None,
    crm_provider: Annotated[CRMProvider | None, Query()] = None,
) -> ProcessCardResponse:
    """Turn an uploaded business card photo into a stored lead.

    OCR and storage run in the threadpool. The CRM sync is scheduled as a
    background task and runs after the response has been sent; its
    outcome never changes this response.

    Args:
        services: Application services.
        background_tasks: FastAPI background task queue.
        image: Uploaded card photo.
        crm_provider: CRM to sync to; defaults to the configured provider.

    Returns:
        The stored lead and the raw OCR text.
    """
    if image is None:
        raise HTTPException(status_code=400, detail="No image provided")

    if image.content_type and image.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {image.content_type}",
        )

    content = await image.read()
    if not content:
        raise HTTPException(status_code=400, detail="No image provided")

    filename = image.filename or "image"
    ocr_result, lead = await run_in_threadpool(
        _capture_lead, services, content, filename
    )

    if services.config.crm.enabled:
        provider = crm_provider or services.config.crm.default_provider
        background_tasks.add_task(run_background_sync, services.crm, lead.id, provider)
        logger.info("Scheduled %s sync for lead %s", provider.value, lead.id)

    return ProcessCardResponse(
        success=True,
        lead=LeadResponse.from_stored(lead),
        raw_text=ocr_result.text,
    )


@router.get("/leads", response_model=LeadListResponse)
def list_leads(
    services: ServicesDep,
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> LeadListResponse:
    """List stored leads, newest first."""
    try:
        page = services.store.list_leads(limit=limit, offset=offset)
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail="Failed to fetch leads") from exc

    return LeadListResponse(
        success=True,
        leads=[LeadResponse.from_stored(lead) for lead in page.leads],
        total=page.total,
        limit=limit,
        offset=offset,
    )


@router.post("/leads", response_model=LeadCreateResponse)
def create_lead(services: ServicesDep, payload: LeadCreateRequest) -> LeadCreateResponse:
    """Create a lead from manually entered contact details."""
    if not (payload.name or payload.email or payload.company):
        raise HTTPException(
            status_code=400,
            detail="At least one of name, email, or company is required",
        )

    record = ContactRecord(**payload.model_dump(exclude={"source"}))
    try:
        lead = services.store.create_lead(record, payload.source or "Manual Entry")
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail="Failed to create lead") from exc

    return LeadCreateResponse(
        success=True,
        lead=LeadResponse.from_stored(lead),
        message="Lead created successfully",
    )


@router.post("/crm-sync", response_model=CRMSyncResponse)
def sync_lead(services: ServicesDep, payload: CRMSyncRequest) -> CRMSyncResponse:
    """Push a stored lead to a CRM."""
    try:
        outcome = services.crm.sync_lead(
            payload.lead_id, payload.crm_provider, payload.retry_attempt
        )
    except LeadNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Lead not found") from exc
    except (CRMSyncError, PersistenceError) as exc:
        logger.error("CRM sync error for lead %s: %s", payload.lead_id, exc)
        raise HTTPException(
            status_code=500, detail=f"CRM sync failed: {exc}"
        ) from exc

    return CRMSyncResponse(
        success=outcome.success,
        message=outcome.message,
        crm_id=outcome.crm_id,
        crm_provider=outcome.provider,
        synced_at=outcome.synced_at,
        retry_in=outcome.retry_in,
    )


@router.get("/crm-sync", response_model=SyncStatusResponse)
def get_sync_status(
    services: ServicesDep,
    lead_id: Annotated[str | None, Query()] = None,
) -> SyncStatusResponse:
    """Return the CRM sync state of a lead."""
    if not lead_id:
        raise HTTPException(status_code=400, detail="Lead ID is required")

    try:
        report = services.crm.get_status(lead_id)
    except LeadNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Lead not found") from exc

    return SyncStatusResponse(
        is_synced=report.is_synced,
        crm_id=report.crm_id,
        crm_provider=report.crm_provider,
        synced_at=report.synced_at,
        last_sync_status=report.last_sync_status,
    )


def create_app(
    services: Services | None = None, config: AppConfig | None = None
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        services: Pre-built services. When omitted, services are built
            from ``config`` on startup and closed on shutdown.
        config: Configuration; loaded from the default path when omitted.

    Returns:
        Configured application.
    """
    if config is None:
        config = services.config if services is not None else load_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned: Services | None = None
        if app.state.services is None:
            owned = build_services(config)
            app.state.services = owned
        yield
        if owned is not None:
            owned.close()
            app.state.services = None

    app = FastAPI(
        title="Business Card Lead Capture API",
        description="Extract contact leads from business card photos",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()
