"""Video processing - transcript in, stored clips out, with run tracking."""
import logging
import random
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from viralclip.db.database import Database
from viralclip.models.clip import Clip, ClipStatus
from viralclip.models.video import ProcessingRun, ProcessingRunStatus, Video, VideoStatus
from viralclip.pipeline.clip_processor import ClipCandidate, generate_clips
from viralclip.services.clip_service import ClipStore
from viralclip.services.transcript_service import TranscriptSource

logger = logging.getLogger(__name__)

PROCESSING_STEPS = (
    "Fetching transcript...",
    "Scoring virality...",
    "Saving clips...",
)
COMPLETE_STEP = "Processing complete!"

RECENT_ACTIVITY_LIMIT = 10


def relative_time(then: datetime, now: datetime) -> str:
    """Human-readable age of a timestamp."""
    minutes = int((now - then).total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} minutes ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours} hours ago"
    return f"{hours // 24} days ago"


@dataclass
class ProcessingResult:
    """Outcome of processing one video."""
    video_id: str
    run_id: str
    transcript: str
    clips: List[ClipCandidate] = field(default_factory=list)
    processing_time: int = 0  # Completion time, epoch milliseconds

    @property
    def total_clips(self) -> int:
        return len(self.clips)


@dataclass
class ActivityItem:
    """One entry of the dashboard activity feed."""
    id: str
    type: str  # video, clip or processing
    title: str
    description: str
    status: str
    timestamp: datetime
    time: str


class VideoStore:
    """Service for video records and their processing runs."""

    def __init__(self, db: Database):
        self.db = db

    async def register_video(
        self,
        video_id: str,
        user_id: str,
        title: str,
        source_url: Optional[str] = None,
    ) -> Video:
        """Create the video, or refresh title and source of an existing one."""
        now = datetime.now()
        statement = sqlite_insert(Video).values(
            id=video_id,
            user_id=user_id,
            title=title,
            source_url=source_url,
            status=VideoStatus.UPLOADED,
            created_at=now,
            updated_at=now,
        )
        statement = statement.on_conflict_do_update(
            index_elements=[Video.id],
            set_={
                "title": statement.excluded.title,
                "source_url": statement.excluded.source_url,
                "updated_at": statement.excluded.updated_at,
            },
        )
        async with self.db.session() as session:
            await session.execute(statement)
        return await self.get_video(video_id)

    async def get_video(self, video_id: str) -> Optional[Video]:
        """Get a video by ID."""
        async with self.db.session() as session:
            return await session.get(Video, video_id)

    async def list_videos(self, user_id: Optional[str] = None) -> List[Video]:
        """Videos, newest first."""
        query = select(Video).order_by(Video.created_at.desc())
        if user_id is not None:
            query = query.where(Video.user_id == user_id)

        async with self.db.session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def set_status(self, video_id: str, status: VideoStatus) -> Video:
        async with self.db.session() as session:
            video = await session.get(Video, video_id)
            if not video:
                raise ValueError(f"Video {video_id} not found")
            video.status = status
        return video

    async def start_run(self, video_id: str, user_id: str) -> ProcessingRun:
        """Open a new processing run for a video."""
        run = ProcessingRun(
            id=f"run_{uuid.uuid4().hex[:16]}",
            video_id=video_id,
            user_id=user_id,
            status=ProcessingRunStatus.PROCESSING,
            current_step="Starting...",
            progress=0,
        )
        async with self.db.session() as session:
            session.add(run)
        return run

    async def update_run(self, run_id: str, **fields) -> ProcessingRun:
        """Set status, current_step, progress, error_message or transcript."""
        async with self.db.session() as session:
            run = await session.get(ProcessingRun, run_id)
            if not run:
                raise ValueError(f"Processing run {run_id} not found")
            for key, value in fields.items():
                setattr(run, key, value)
        return run

    async def latest_run(self, video_id: str) -> Optional[ProcessingRun]:
        """Most recently started run for a video."""
        async with self.db.session() as session:
            result = await session.execute(
                select(ProcessingRun)
                .where(ProcessingRun.video_id == video_id)
                .order_by(ProcessingRun.created_at.desc())
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def list_runs(
        self,
        user_id: Optional[str] = None,
        status: Optional[ProcessingRunStatus] = None,
    ) -> List[ProcessingRun]:
        query = select(ProcessingRun).order_by(ProcessingRun.updated_at.desc())
        if user_id is not None:
            query = query.where(ProcessingRun.user_id == user_id)
        if status is not None:
            query = query.where(ProcessingRun.status == status)

        async with self.db.session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def count_videos(self, user_id: Optional[str] = None) -> int:
        query = select(func.count(Video.id))
        if user_id is not None:
            query = query.where(Video.user_id == user_id)

        async with self.db.session() as session:
            result = await session.execute(query)
            return result.scalar_one()


class VideoService:
    """Runs the clip pipeline for a video, tracks the run and stores the clips."""

    def __init__(
        self,
        transcript_source: TranscriptSource,
        clip_store: ClipStore,
        video_store: VideoStore,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.transcript_source = transcript_source
        self.clip_store = clip_store
        self.video_store = video_store
        self.rng = rng
        self.clock = clock

    async def process_video(
        self,
        video_url: Optional[str],
        video_id: str,
        user_id: str,
        title: Optional[str] = None,
    ) -> ProcessingResult:
        """
        Transcribe a video, generate ranked clips and persist them.

        The video moves to processing, then to completed or failed; the
        processing run records each step and any error message. Errors are
        re-raised after being recorded.

        Args:
            video_url: Where the transcript source finds the video
            video_id: Caller's video identifier
            user_id: Owner of the generated clips
            title: Display title of the video

        Returns:
            ProcessingResult with the stored clips
        """
        logger.info(f"Processing video: {video_id} for user: {user_id}")

        await self.video_store.register_video(video_id, user_id, title or "Video", video_url)
        await self.video_store.set_status(video_id, VideoStatus.PROCESSING)
        run = await self.video_store.start_run(video_id, user_id)

        try:
            await self._advance(run.id, 0)
            lines = await self.transcript_source.fetch(video_url)

            await self._advance(run.id, 1)
            candidates = generate_clips(lines, title or "Video", rng=self.rng)

            await self._advance(run.id, 2)
            if candidates:
                await self.clip_store.add_clips(
                    self._to_clip(candidate, video_id, user_id) for candidate in candidates
                )

        except Exception as e:
            error_message = str(e) or "Unknown error"
            logger.error(f"Processing video {video_id} failed: {error_message}")
            await self.video_store.update_run(
                run.id,
                status=ProcessingRunStatus.FAILED,
                error_message=error_message,
            )
            await self.video_store.set_status(video_id, VideoStatus.FAILED)
            raise

        transcript = " ".join(line.text for line in lines)
        await self.video_store.update_run(
            run.id,
            status=ProcessingRunStatus.COMPLETED,
            current_step=COMPLETE_STEP,
            progress=100,
            transcript=transcript,
        )
        await self.video_store.set_status(video_id, VideoStatus.COMPLETED)

        logger.info(f"Generated {len(candidates)} clips for video {video_id}")

        return ProcessingResult(
            video_id=video_id,
            run_id=run.id,
            transcript=transcript,
            clips=candidates,
            processing_time=int(time.time() * 1000),
        )

    async def _advance(self, run_id: str, step: int):
        await self.video_store.update_run(
            run_id,
            current_step=PROCESSING_STEPS[step],
            progress=round(step / len(PROCESSING_STEPS) * 100),
        )

    @staticmethod
    def _to_clip(candidate: ClipCandidate, video_id: str, user_id: str) -> Clip:
        return Clip(
            id=candidate.id,
            video_id=video_id,
            user_id=user_id,
            title=candidate.title,
            caption=candidate.caption,
            hashtags=list(candidate.hashtags),
            transcript=candidate.transcript,
            start_time=candidate.start_time,
            end_time=candidate.end_time,
            duration=candidate.duration,
            virality_score=candidate.virality_score,
            status=ClipStatus.GENERATED,
            posted_platforms=[],
        )

    async def get_recent_activity(
        self,
        user_id: Optional[str] = None,
        limit: int = RECENT_ACTIVITY_LIMIT,
    ) -> List[ActivityItem]:
        """Videos, clips and in-progress runs, newest first."""
        now = self.clock()
        videos = await self.video_store.list_videos(user_id)
        clips = await self.clip_store.list_clips(user_id=user_id, sort_by="date")
        runs = await self.video_store.list_runs(user_id, status=ProcessingRunStatus.PROCESSING)

        items = [
            ActivityItem(
                id=v.id,
                type="video",
                title=f'Video "{v.title}" uploaded',
                description=f"Status: {v.status.value}",
                status=v.status.value,
                timestamp=v.created_at,
                time=relative_time(v.created_at, now),
            )
            for v in videos
        ]
        items += [
            ActivityItem(
                id=c.id,
                type="clip",
                title=f'Clip "{c.title}" generated',
                description=f"Virality score: {c.virality_score}",
                status="completed",
                timestamp=c.created_at,
                time=relative_time(c.created_at, now),
            )
            for c in clips
        ]
        items += [
            ActivityItem(
                id=r.id,
                type="processing",
                title=r.current_step or "Processing...",
                description=f"Progress: {r.progress}%",
                status=r.status.value,
                timestamp=r.updated_at,
                time=relative_time(r.updated_at, now),
            )
            for r in runs
        ]

        items.sort(key=lambda item: item.timestamp, reverse=True)
        return items[:limit]
