"""Pydantic request/response schemas for the FastAPI endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.crm.providers import CRMProvider
from src.storage.lead_store import StoredLead


class LeadResponse(BaseModel):
    """A stored lead."""

    id: str
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    job_title: str | None = None
    website: str | None = None
    source: str | None = None
    crm_id: str | None = None
    crm_provider: str | None = None
    crm_synced_at: datetime | None = None
    last_crm_sync_status: str | None = None
    created_at: datetime

    @classmethod
    def from_stored(cls, lead: StoredLead) -> "LeadResponse":
        return cls(
            id=lead.id,
            name=lead.name,
            email=lead.email,
            phone=lead.phone,
            company=lead.company,
            job_title=lead.job_title,
            website=lead.website,
            source=lead.source,
            crm_id=lead.crm_id,
            crm_provider=lead.crm_provider,
            crm_synced_at=lead.crm_synced_at,
            last_crm_sync_status=lead.last_crm_sync_status,
            created_at=lead.created_at,
        )


class ProcessCardResponse(BaseModel):
    """Response schema for a processed business card."""

    success: bool
    lead: LeadResponse
    raw_text: str


class LeadListResponse(BaseModel):
    """Response schema for a page of leads."""

    success: bool
    leads: list[LeadResponse]
    total: int
    limit: int
    offset: int


class LeadCreateRequest(BaseModel):
    """Request schema for entering a lead by hand."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    job_title: str | None = None
    website: str | None = None
    source: str | None = None


class LeadCreateResponse(BaseModel):
    """Response schema for a manually created lead."""

    success: bool
    lead: LeadResponse
    message: str


class CRMSyncRequest(BaseModel):
    """Request schema for a CRM sync."""

    lead_id: str
    crm_provider: CRMProvider = CRMProvider.HUBSPOT
    retry_attempt: int = Field(default=0, ge=0)


class CRMSyncResponse(BaseModel):
    """Response schema for a CRM sync attempt."""

    success: bool
    message: str
    crm_id: str | None = None
    crm_provider: CRMProvider
    synced_at: datetime | None = None
    retry_in: float | None = None


class SyncStatusResponse(BaseModel):
    """Response schema describing a lead's CRM sync state."""

    is_synced: bool
    crm_id: str | None = None
    crm_provider: str | None = None
    synced_at: datetime | None = None
    last_sync_status: str | None = None


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
