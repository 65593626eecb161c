"""ActivityLog SQLAlchemy model"""

from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, Index, Text, Uuid, event

from .base import Base, PortableJSONB, UTCDateTime, enum_column_type, utc_now


class ActivityEntityType(str, Enum):
    JOB = "job"
    DOCUMENT = "document"


class ActivityLogImmutableError(RuntimeError):
    """Raised when code tries to update or delete an activity log entry."""
    pass


class ActivityLog(Base):
    """Append-only activity record for a job or a document.

    Entries are written inside the same transaction as the change they
    describe and are never updated or deleted afterwards.
    """
    __tablename__ = "activity_log"
    __table_args__ = (
        Index("ix_activity_log_entity", "entity_type", "entity_id", "created_at"),
        Index("ix_activity_log_action", "action"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    entity_type = Column(enum_column_type(ActivityEntityType, "activity_entity_type"), nullable=False)
    entity_id = Column(Uuid, nullable=False)
    action = Column(Text, nullable=False)
    actor_description = Column(Text, nullable=False)
    metadata_json = Column(PortableJSONB, nullable=True)
    ip_address = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    def to_dict(self):
        """Convert activity entry to dictionary representation"""
        return {
            "id": str(self.id),
            "entity_type": self.entity_type.value,
            "entity_id": str(self.entity_id),
            "action": self.action,
            "actor_description": self.actor_description,
            "metadata": self.metadata_json,
            "ip_address": self.ip_address,
            "created_at": self.created_at.isoformat(),
        }


@event.listens_for(ActivityLog, "before_update")
def _reject_activity_update(mapper, connection, target):
    raise ActivityLogImmutableError(f"Activity log entry {target.id} is append-only")


@event.listens_for(ActivityLog, "before_delete")
def _reject_activity_delete(mapper, connection, target):
    raise ActivityLogImmutableError(f"Activity log entry {target.id} is append-only")
