"""SQLAlchemy table definitions for captured leads."""

import uuid
from datetime import datetime, timezone
from enum import StrEnum

from sqlalchemy import CheckConstraint, Column, DateTime, Index, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class SyncStatus(StrEnum):
    """CRM synchronization state of a lead."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    RETRY = "retry"


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_lead_id() -> str:
    return str(uuid.uuid4())


class Lead(Base):
    """A contact captured from a business card or entered by hand."""

    __tablename__ = "leads"

    id = Column(String(36), primary_key=True, default=new_lead_id)
    name = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    company = Column(Text, nullable=True)
    job_title = Column(Text, nullable=True)
    website = Column(Text, nullable=True)
    source = Column(Text, nullable=True)
    crm_id = Column(Text, nullable=True)
    crm_provider = Column(Text, nullable=True)
    crm_synced_at = Column(DateTime, nullable=True)
    last_crm_sync_status = Column(String(16), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "last_crm_sync_status IS NULL OR last_crm_sync_status IN "
            "('pending', 'success', 'failed', 'retry')",
            name="chk_leads_crm_sync_status",
        ),
        Index("idx_leads_email", "email"),
        Index("idx_leads_created_at", "created_at"),
        Index("idx_leads_company", "company"),
        Index("idx_leads_crm_sync_status", "last_crm_sync_status", "crm_synced_at"),
        Index("idx_leads_crm_provider_id", "crm_provider", "crm_id"),
        Index("idx_leads_source", "source", "created_at"),
    )
