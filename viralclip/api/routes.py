"""API routes."""
import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse

from viralclip.container import Services
from viralclip.models.clip import Clip, ClipStatus
from viralclip.models.posting_job import PostingJobStatus
from viralclip.pipeline.scoring import virality_tier
from viralclip.services.settings_service import AutomationSettings
from viralclip.workers.automation import ClipAlreadyPostedError
from viralclip.api.schemas import (
    ProcessVideoRequest,
    ProcessVideoResponse,
    ProcessVideoError,
    VideoResponse,
    ProcessingRunResponse,
    ActivityItemResponse,
    GeneratedClipResponse,
    ClipResponse,
    ClipUpdate,
    ClipStatsResponse,
    AutomationSettingsUpdate,
    PostNowRequest,
    PostNowResponse,
    PostingJobResponse,
    AutomationStatsResponse,
    PlatformTestResponse,
    HealthResponse,
)

router = APIRouter()
process_router = APIRouter()
logger = logging.getLogger(__name__)

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def get_services(request: Request) -> Services:
    """Dependency to get the application's services."""
    return request.app.state.services


def _clip_to_response(clip: Clip) -> ClipResponse:
    return ClipResponse(
        id=clip.id,
        video_id=clip.video_id,
        user_id=clip.user_id,
        title=clip.title,
        caption=clip.caption or "",
        hashtags=list(clip.hashtags or []),
        transcript=clip.transcript,
        start_time=clip.start_time,
        end_time=clip.end_time,
        duration=clip.duration,
        virality_score=clip.virality_score,
        virality_tier=virality_tier(clip.virality_score),
        status=clip.status,
        posted_platforms=list(clip.posted_platforms or []),
        created_at=clip.created_at,
    )


# =============================================================================
# Video Processing
# =============================================================================

@process_router.options("/process-video")
async def process_video_preflight():
    """CORS preflight for the processing endpoint."""
    return Response(status_code=200, headers=PREFLIGHT_HEADERS)


@process_router.post("/process-video")
async def process_video(request: Request, services: Services = Depends(get_services)):
    """
    Transcribe a video, score its segments and return the top clips.

    Any failure, including a malformed body, is reported as
    {success: false, error} with status 500.
    """
    cors = {"Access-Control-Allow-Origin": "*"}
    try:
        data = ProcessVideoRequest.model_validate(await request.json())
        result = await services.video_service.process_video(
            video_url=data.video_url,
            video_id=data.video_id,
            user_id=data.user_id,
            title=data.title,
        )
        response = ProcessVideoResponse(
            video_id=result.video_id,
            transcript=result.transcript,
            clips=[GeneratedClipResponse.model_validate(c) for c in result.clips],
            processing_time=result.processing_time,
            total_clips=result.total_clips,
        )
        return JSONResponse(response.model_dump(mode="json", by_alias=True), headers=cors)

    except Exception as e:
        logger.exception("Video processing error")
        error = ProcessVideoError(error=str(e) or "Processing failed")
        return JSONResponse(error.model_dump(by_alias=True), status_code=500, headers=cors)


# =============================================================================
# Videos
# =============================================================================

@router.get("/videos", response_model=List[VideoResponse])
async def list_videos(
    user_id: Optional[str] = Query(None, alias="userId"),
    services: Services = Depends(get_services),
):
    """Videos, newest first."""
    videos = await services.video_store.list_videos(user_id)
    return [VideoResponse.model_validate(v) for v in videos]


@router.get("/videos/{video_id}", response_model=VideoResponse)
async def get_video(video_id: str, services: Services = Depends(get_services)):
    """Get a video by ID."""
    video = await services.video_store.get_video(video_id)
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")
    return VideoResponse.model_validate(video)


@router.get("/videos/{video_id}/processing", response_model=ProcessingRunResponse)
async def get_processing_run(video_id: str, services: Services = Depends(get_services)):
    """Latest processing run of a video, with its step, progress and error."""
    run = await services.video_store.latest_run(video_id)
    if not run:
        raise HTTPException(status_code=404, detail="No processing run for this video")
    return ProcessingRunResponse.model_validate(run)


@router.get("/activity", response_model=List[ActivityItemResponse])
async def get_recent_activity(
    user_id: Optional[str] = Query(None, alias="userId"),
    limit: int = Query(10, ge=1, le=100),
    services: Services = Depends(get_services),
):
    """Recent videos, clips and in-progress runs, newest first."""
    items = await services.video_service.get_recent_activity(user_id, limit)
    return [ActivityItemResponse.model_validate(item) for item in items]


# =============================================================================
# Health
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check(services: Services = Depends(get_services)):
    """Check API health."""
    db_open = services.db.is_open
    return HealthResponse(
        status="healthy" if db_open else "degraded",
        database_open=db_open,
        automation_active=services.engine.is_active,
    )


# =============================================================================
# Clips
# =============================================================================

@router.get("/clips", response_model=List[ClipResponse])
async def list_clips(
    user_id: Optional[str] = Query(None, alias="userId"),
    video_id: Optional[str] = Query(None, alias="videoId"),
    status: Optional[ClipStatus] = Query(None),
    search: Optional[str] = Query(None),
    sort_by: Literal["virality", "date", "duration"] = Query("virality", alias="sortBy"),
    services: Services = Depends(get_services),
):
    """List clips for the review queue."""
    clips = await services.clip_store.list_clips(
        user_id=user_id,
        video_id=video_id,
        status=status,
        search=search,
        sort_by=sort_by,
    )
    return [_clip_to_response(c) for c in clips]


@router.get("/clips/{clip_id}", response_model=ClipResponse)
async def get_clip(clip_id: str, services: Services = Depends(get_services)):
    """Get a clip by ID."""
    clip = await services.clip_store.get_clip(clip_id)
    if not clip:
        raise HTTPException(status_code=404, detail="Clip not found")
    return _clip_to_response(clip)


@router.patch("/clips/{clip_id}", response_model=ClipResponse)
async def update_clip(
    clip_id: str,
    data: ClipUpdate,
    services: Services = Depends(get_services),
):
    """Edit a clip's title, caption or hashtags."""
    if not await services.clip_store.get_clip(clip_id):
        raise HTTPException(status_code=404, detail="Clip not found")
    try:
        clip = await services.clip_store.update_metadata(
            clip_id,
            title=data.title,
            caption=data.caption,
            hashtags=data.hashtags,
        )
        return _clip_to_response(clip)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/stats", response_model=ClipStatsResponse)
async def get_clip_stats(
    user_id: Optional[str] = Query(None, alias="userId"),
    services: Services = Depends(get_services),
):
    """Clip totals for the dashboard."""
    return ClipStatsResponse(**await services.clip_store.get_stats(user_id))


# =============================================================================
# Automation
# =============================================================================

@router.get("/automation/settings", response_model=AutomationSettings)
async def get_automation_settings(services: Services = Depends(get_services)):
    """Current automation settings."""
    return services.engine.get_settings()


@router.put("/automation/settings", response_model=AutomationSettings)
async def update_automation_settings(
    data: AutomationSettingsUpdate,
    services: Services = Depends(get_services),
):
    """Update automation settings; enabling starts the scheduler, disabling stops it."""
    try:
        return await services.engine.update_settings(data.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/automation/post-now", response_model=PostNowResponse)
async def post_clip_now(
    data: PostNowRequest,
    services: Services = Depends(get_services),
):
    """Post a clip right away, outside the schedule."""
    try:
        job = await services.engine.post_clip_now(data.clip_id, data.platforms)
    except ClipAlreadyPostedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return PostNowResponse(
        success=job.status == PostingJobStatus.POSTED,
        job=PostingJobResponse.model_validate(job),
    )


@router.get("/automation/stats", response_model=AutomationStatsResponse)
async def get_automation_stats(services: Services = Depends(get_services)):
    """Today's posting activity."""
    return AutomationStatsResponse(**await services.engine.get_stats())


@router.get("/automation/jobs", response_model=List[PostingJobResponse])
async def list_posting_jobs(
    limit: Optional[int] = Query(None, ge=1, le=500),
    services: Services = Depends(get_services),
):
    """Most recent posting jobs, newest first."""
    jobs = await services.engine.get_recent_jobs(limit or services.config.recent_jobs_limit)
    return [PostingJobResponse.model_validate(job) for job in jobs]


@router.post("/automation/platforms/{platform}/test", response_model=PlatformTestResponse)
async def test_platform_connection(platform: str, services: Services = Depends(get_services)):
    """Check whether a platform poster can reach its backend."""
    if platform not in services.engine.posters:
        raise HTTPException(status_code=404, detail=f"Unknown platform: {platform}")
    connected = await services.engine.test_platform_connection(platform)
    return PlatformTestResponse(platform=platform, connected=connected)


@router.get("/platforms", response_model=List[str])
async def list_platforms(services: Services = Depends(get_services)):
    """Platforms that have a poster configured."""
    return list(services.engine.posters)
