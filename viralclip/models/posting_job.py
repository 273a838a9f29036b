"""PostingJob model - one ledger entry per posting attempt."""
import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Enum, Text, JSON

from viralclip.db.database import Base


class PostingJobStatus(str, enum.Enum):
    """Posting job status enumeration."""
    PENDING = "pending"
    POSTED = "posted"
    FAILED = "failed"


class PostingJob(Base):
    """Posting attempt (scheduled or manual) for one clip on one or more platforms."""

    __tablename__ = "posting_jobs"

    id = Column(String(64), primary_key=True, index=True)

    # Fixed when the job is created
    clip_id = Column(String(64), nullable=False, index=True)
    platforms = Column(JSON, nullable=False, default=list)
    scheduled_time = Column(DateTime, nullable=False, index=True)

    # Outcome
    status = Column(Enum(PostingJobStatus), default=PostingJobStatus.PENDING, nullable=False)
    attempts = Column(Integer, default=0, nullable=False)
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.now, nullable=False)

    def __repr__(self):
        return f"<PostingJob(id={self.id}, clip={self.clip_id}, status={self.status})>"

    def to_dict(self):
        """Convert to dictionary."""
        return {
            "id": self.id,
            "clip_id": self.clip_id,
            "platforms": list(self.platforms or []),
            "scheduled_time": self.scheduled_time.isoformat() if self.scheduled_time else None,
            "status": self.status.value if self.status else None,
            "attempts": self.attempts,
            "error_message": self.error_message,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
