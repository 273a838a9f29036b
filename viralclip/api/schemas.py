"""Pydantic schemas for API requests and responses.

All payloads use camelCase field names on the wire.
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from viralclip.models.clip import ClipStatus
from viralclip.models.posting_job import PostingJobStatus
from viralclip.models.video import ProcessingRunStatus, VideoStatus
from viralclip.services.settings_service import PostingHours


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, snake_case attributes."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# Video Processing Schemas
# =============================================================================

class ProcessVideoRequest(CamelModel):
    """Request to generate clips for a video."""
    video_url: Optional[str] = Field(None, description="Uploaded file URL or YouTube URL")
    video_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    title: Optional[str] = None


class GeneratedClipResponse(CamelModel):
    """Clip as returned by the processing endpoint."""
    id: str
    start_time: float
    end_time: float
    duration: float
    transcript: str
    virality_score: float
    title: str
    caption: str
    hashtags: List[str]


class ProcessVideoResponse(CamelModel):
    """Successful processing response."""
    success: bool = True
    video_id: str
    transcript: str
    clips: List[GeneratedClipResponse]
    processing_time: int
    total_clips: int


class ProcessVideoError(CamelModel):
    """Failed processing response."""
    success: bool = False
    error: str


class VideoResponse(CamelModel):
    """Stored video response."""
    id: str
    user_id: str
    title: str
    source_url: Optional[str] = None
    status: VideoStatus
    created_at: datetime
    updated_at: datetime


class ProcessingRunResponse(CamelModel):
    """Latest processing run of a video."""
    id: str
    video_id: str
    user_id: str
    status: ProcessingRunStatus
    current_step: Optional[str] = None
    progress: int
    error_message: Optional[str] = None
    transcript: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ActivityItemResponse(CamelModel):
    """Dashboard activity feed entry."""
    id: str
    type: str
    title: str
    description: str
    status: str
    timestamp: datetime
    time: str


# =============================================================================
# Clip Schemas
# =============================================================================

class ClipResponse(CamelModel):
    """Stored clip response."""
    id: str
    video_id: str
    user_id: str
    title: str
    caption: str
    hashtags: List[str]
    transcript: Optional[str] = None
    start_time: float
    end_time: float
    duration: float
    virality_score: float
    virality_tier: str
    status: ClipStatus
    posted_platforms: List[str]
    created_at: datetime


class ClipUpdate(CamelModel):
    """Review edits; the virality score is not editable."""
    title: Optional[str] = Field(None, min_length=1)
    caption: Optional[str] = None
    hashtags: Optional[List[str]] = None


class ClipStatsResponse(CamelModel):
    """Dashboard totals."""
    total_videos: int
    total_clips: int
    avg_virality_score: float
    posts_published: int


# =============================================================================
# Automation Schemas
# =============================================================================

class AutomationSettingsUpdate(CamelModel):
    """Partial update of automation settings."""
    enabled: Optional[bool] = None
    posting_interval: Optional[int] = Field(None, ge=1)
    platforms: Optional[List[str]] = None
    min_virality_score: Optional[float] = Field(None, ge=0.0, le=10.0)
    max_posts_per_day: Optional[int] = Field(None, ge=0)
    posting_hours: Optional[PostingHours] = None
    auto_approve: Optional[bool] = None


class PostNowRequest(CamelModel):
    """Request to post a clip immediately."""
    clip_id: str
    platforms: Optional[List[str]] = Field(None, description="Defaults to the configured platforms")


class PostingJobResponse(CamelModel):
    """Posting ledger entry."""
    id: str
    clip_id: str
    platforms: List[str]
    scheduled_time: datetime
    status: PostingJobStatus
    attempts: int
    error_message: Optional[str] = None
    created_at: datetime


class PostNowResponse(CamelModel):
    """Outcome of a manual post."""
    success: bool
    job: PostingJobResponse


class AutomationStatsResponse(CamelModel):
    """Today's posting activity."""
    posts_today: int
    failed_today: int
    success_rate: int
    queue_size: int
    next_post_time: str
    is_active: bool


class PlatformTestResponse(CamelModel):
    """Platform connection test result."""
    platform: str
    connected: bool


# =============================================================================
# Health Check
# =============================================================================

class HealthResponse(CamelModel):
    """Health check response."""
    status: str
    database_open: bool
    automation_active: bool
