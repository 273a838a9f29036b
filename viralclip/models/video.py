"""Video and ProcessingRun models - source videos and their pipeline runs."""
import enum
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Enum, Integer, Text

from viralclip.db.database import Base


class VideoStatus(str, enum.Enum):
    """Video processing status."""
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ProcessingRunStatus(str, enum.Enum):
    """Processing run status enumeration."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Video(Base):
    """A source video clips are cut from."""

    __tablename__ = "videos"

    id = Column(String(255), primary_key=True, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    source_url = Column(String(4096), nullable=True)
    status = Column(Enum(VideoStatus), default=VideoStatus.UPLOADED, nullable=False)

    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    def __repr__(self):
        return f"<Video(id={self.id}, status={self.status})>"

    def to_dict(self):
        """Convert to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "source_url": self.source_url,
            "status": self.status.value if self.status else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class ProcessingRun(Base):
    """One pass of the clip pipeline over a video, with its progress."""

    __tablename__ = "processing_runs"

    id = Column(String(64), primary_key=True, index=True)
    video_id = Column(String(255), nullable=False, index=True)
    user_id = Column(String(255), nullable=False, index=True)

    status = Column(Enum(ProcessingRunStatus), default=ProcessingRunStatus.PENDING, nullable=False)
    current_step = Column(String(255), nullable=True)
    progress = Column(Integer, default=0, nullable=False)  # 0 to 100
    error_message = Column(Text, nullable=True)
    transcript = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    def __repr__(self):
        return f"<ProcessingRun(id={self.id}, video={self.video_id}, status={self.status})>"

    def to_dict(self):
        """Convert to dictionary."""
        return {
            "id": self.id,
            "video_id": self.video_id,
            "user_id": self.user_id,
            "status": self.status.value if self.status else None,
            "current_step": self.current_step,
            "progress": self.progress,
            "error_message": self.error_message,
            "transcript": self.transcript,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
