"""Clip model - a scored, captioned transcript segment ready for posting."""
import enum
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Enum, Float, Text, JSON

from viralclip.db.database import Base


class ClipStatus(str, enum.Enum):
    """Clip lifecycle status."""
    GENERATED = "generated"
    POSTED = "posted"
    FAILED = "failed"


class Clip(Base):
    """Clip model representing one generated short-form clip."""

    __tablename__ = "clips"

    id = Column(String(64), primary_key=True, index=True)
    video_id = Column(String(255), nullable=False, index=True)
    user_id = Column(String(255), nullable=False, index=True)

    # Generated metadata (editable in review)
    title = Column(String(512), nullable=False)
    caption = Column(Text, nullable=False, default="")
    hashtags = Column(JSON, nullable=False, default=list)
    transcript = Column(Text, nullable=True)

    # Timing in source video (seconds)
    start_time = Column(Float, nullable=False)
    end_time = Column(Float, nullable=False)
    duration = Column(Float, nullable=False)

    # Fixed at generation time
    virality_score = Column(Float, nullable=False)

    # Posting state
    status = Column(Enum(ClipStatus), default=ClipStatus.GENERATED, nullable=False)
    posted_platforms = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=datetime.now, nullable=False)

    def __repr__(self):
        return f"<Clip(id={self.id}, score={self.virality_score}, status={self.status})>"

    def to_dict(self):
        """Convert to dictionary."""
        return {
            "id": self.id,
            "video_id": self.video_id,
            "user_id": self.user_id,
            "title": self.title,
            "caption": self.caption,
            "hashtags": list(self.hashtags or []),
            "transcript": self.transcript,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration,
            "virality_score": self.virality_score,
            "status": self.status.value if self.status else None,
            "posted_platforms": list(self.posted_platforms or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
