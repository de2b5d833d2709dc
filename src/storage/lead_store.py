"""Lead persistence backed by SQLAlchemy.

``LeadStore`` owns one engine and session factory. It is built once by
the service composition and passed to whoever needs it; nothing here is
a module-level singleton.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from datetime import datetime

from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.extraction.record import ContactRecord
from src.utils.logger import get_logger

from .models import Base, Lead, SyncStatus, new_lead_id, utcnow

logger = get_logger(__name__)


class PersistenceError(RuntimeError):
    """Raised when the lead database rejects an operation."""


class LeadNotFoundError(LookupError):
    """Raised when a lead id does not exist."""

    def __init__(self, lead_id: str) -> None:
        super().__init__(f"Lead not found: {lead_id}")
        self.lead_id = lead_id


@dataclass(frozen=True)
class StoredLead:
    """Detached snapshot of a row in the ``leads`` table."""

    id: str
    name: str | None
    email: str | None
    phone: str | None
    company: str | None
    job_title: str | None
    website: str | None
    source: str | None
    created_at: datetime
    crm_id: str | None = None
    crm_provider: str | None = None
    crm_synced_at: datetime | None = None
    last_crm_sync_status: str | None = None

    @classmethod
    def from_row(cls, row: Lead) -> "StoredLead":
        return cls(
            id=row.id,
            name=row.name,
            email=row.email,
            phone=row.phone,
            company=row.company,
            job_title=row.job_title,
            website=row.website,
            source=row.source,
            created_at=row.created_at,
            crm_id=row.crm_id,
            crm_provider=row.crm_provider,
            crm_synced_at=row.crm_synced_at,
            last_crm_sync_status=row.last_crm_sync_status,
        )

    @property
    def contact(self) -> ContactRecord:
        return ContactRecord(
            name=self.name,
            email=self.email,
            phone=self.phone,
            company=self.company,
            job_title=self.job_title,
            website=self.website,
        )

    def to_dict(self) -> dict[str, object]:
        data = asdict(self)
        for key in ("created_at", "crm_synced_at"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data


@dataclass(frozen=True)
class LeadPage:
    """One page of leads plus the total row count."""

    leads: list[StoredLead]
    total: int


def _create_engine(database_url: str, echo: bool = False):
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)

    if database_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)
    return create_engine(database_url, echo=echo)


class LeadStore:
    """Creates, reads, and updates leads.

    Args:
        database_url: SQLAlchemy database URL.
        echo: Log every SQL statement.
    """

    def __init__(self, database_url: str, echo: bool = False) -> None:
        self.database_url = database_url
        self.engine = _create_engine(database_url, echo=echo)
        self._session_factory = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )
        Base.metadata.create_all(bind=self.engine)
        logger.info("Lead store ready (%s)", self.engine.url.get_backend_name())

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Lead database error: %s", exc)
            raise PersistenceError(str(exc)) from exc
        finally:
            session.close()

    def create_lead(
        self,
        record: ContactRecord,
        source: str,
        created_at: datetime | None = None,
    ) -> StoredLead:
        """Store a contact record as a new lead.

        Args:
            record: Parsed or manually entered contact.
            source: Provenance label, e.g. the OCR engine and capture time.
            created_at: Creation timestamp; defaults to now (UTC).

        Returns:
            The stored lead, including its generated id.

        Raises:
            PersistenceError: If the insert fails.
        """
        with self._session() as session:
            row = Lead(
                id=new_lead_id(),
                source=source,
                created_at=created_at or utcnow(),
                **record.to_dict(),
            )
            session.add(row)
            session.flush()
            stored = StoredLead.from_row(row)

        logger.info("Stored lead %s from %s", stored.id, source)
        return stored

    def get_lead(self, lead_id: str) -> StoredLead | None:
        with self._session() as session:
            row = session.get(Lead, lead_id)
            return StoredLead.from_row(row) if row is not None else None

    def list_leads(self, limit: int = 50, offset: int = 0) -> LeadPage:
        """Return leads newest first.

        Args:
            limit: Maximum number of leads to return.
            offset: Number of leads to skip.

        Returns:
            The requested page and the total number of leads.
        """
        with self._session() as session:
            total = session.scalar(select(func.count()).select_from(Lead)) or 0
            rows = session.scalars(
                select(Lead)
                .order_by(Lead.created_at.desc(), Lead.id)
                .offset(offset)
                .limit(limit)
            ).all()
            return LeadPage(leads=[StoredLead.from_row(r) for r in rows], total=total)

    def update_sync_status(
        self,
        lead_id: str,
        status: SyncStatus,
        crm_id: str | None = None,
        crm_provider: str | None = None,
        synced_at: datetime | None = None,
    ) -> StoredLead:
        """Record the outcome of a CRM sync attempt.

        Only the arguments that are given overwrite stored values, except
        ``status`` which is always written.

        Raises:
            LeadNotFoundError: If ``lead_id`` does not exist.
            PersistenceError: If the update fails.
        """
        with self._session() as session:
            row = session.get(Lead, lead_id)
            if row is None:
                raise LeadNotFoundError(lead_id)
            row.last_crm_sync_status = SyncStatus(status).value
            if crm_id is not None:
                row.crm_id = crm_id
            if crm_provider is not None:
                row.crm_provider = crm_provider
            if synced_at is not None:
                row.crm_synced_at = synced_at
            session.flush()
            stored = StoredLead.from_row(row)

        logger.debug("Lead %s sync status -> %s", lead_id, status)
        return stored

    def close(self) -> None:
        self.engine.dispose()
