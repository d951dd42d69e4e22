"""ORM tables for the database-backed repository."""

from typing import Any

from sqlalchemy import JSON, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cloudguard.database import Base
from cloudguard.models.alert import Alert


class AlertRow(Base):
    """Persisted alert."""

    __tablename__ = "alerts"
    __table_args__ = (
        Index("ix_alerts_created_at", "created_at"),
        Index("ix_alerts_status", "status"),
    )

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    severity: Mapped[str] = mapped_column(String(32))
    category: Mapped[str] = mapped_column(String(32))
    status: Mapped[str] = mapped_column(String(32))
    description: Mapped[str] = mapped_column(Text)
    alert_metadata: Mapped[dict[str, Any]] = mapped_column("metadata", JSON)
    created_at: Mapped[str] = mapped_column(String(40))
    updated_at: Mapped[str] = mapped_column(String(40))

    @classmethod
    def from_entity(cls, alert: Alert) -> "AlertRow":
        """Build a row from an alert entity.

        Parameters
        ----------
        alert : Alert
            Entity to persist.

        Returns
        -------
        AlertRow
            Unsaved ORM row.
        """
        return cls(
            id=alert.id,
            severity=alert.severity,
            category=alert.category,
            status=alert.status,
            description=alert.description,
            alert_metadata=dict(alert.metadata),
            created_at=alert.created_at,
            updated_at=alert.updated_at,
        )

    def to_entity(self) -> Alert:
        """Return the row as a detached alert entity.

        Returns
        -------
        Alert
            Entity carrying the row values.
        """
        return Alert(
            id=self.id,
            severity=self.severity,
            category=self.category,
            status=self.status,
            description=self.description,
            metadata=dict(self.alert_metadata or {}),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
