"""Automated posting engine - a timer-driven scheduler using asyncio."""
import asyncio
import logging
import uuid
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional

from viralclip.models.clip import Clip, ClipStatus
from viralclip.models.posting_job import PostingJob, PostingJobStatus
from viralclip.services.clip_service import ClipStore
from viralclip.services.ledger_service import PostingLedger
from viralclip.services.publish_service import PlatformPoster
from viralclip.services.settings_service import AutomationSettings, SettingsStore

logger = logging.getLogger(__name__)


class PostingError(Exception):
    """A posting job could not be completed on every platform."""
    pass


class ClipAlreadyPostedError(PostingError):
    """A manual post was requested for a clip that was already posted."""
    pass


class AutomationEngine:
    """
    Periodically posts the best eligible clip within the configured limits.

    Each tick checks, in order: enabled, day rollover, posting hours, daily
    cap, interval since the last successful post, then picks the top
    eligible clip and posts it. Ticks never overlap, and a posting job
    always runs to completion once started.
    """

    def __init__(
        self,
        clip_store: ClipStore,
        ledger: PostingLedger,
        settings_store: SettingsStore,
        posters: Dict[str, PlatformPoster],
        tick_seconds: float = 60.0,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.clip_store = clip_store
        self.ledger = ledger
        self.settings_store = settings_store
        self.posters = posters
        self.tick_seconds = tick_seconds
        self.clock = clock

        self.settings = AutomationSettings()
        self.posts_today = 0
        self.last_post_date: Optional[date] = None

        self._loop_task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._tick_lock = asyncio.Lock()
        # Held while the loop task or the settings are being replaced
        self._lifecycle_lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self):
        """Load persisted settings and start the loop if enabled."""
        async with self._lifecycle_lock:
            self.settings = await self.settings_store.load()
            await self._restore_daily_count()
            await self._restart_loop()

    async def shutdown(self):
        """Stop the loop and wait for any in-flight tick."""
        await self.stop_automation()

    async def start_automation(self):
        """(Re)start the recurring tick; missed ticks are not replayed."""
        async with self._lifecycle_lock:
            await self._restart_loop()

    async def stop_automation(self):
        """Stop the recurring tick and wait until the loop has exited."""
        async with self._lifecycle_lock:
            await self._stop_loop()

    async def _restart_loop(self):
        await self._stop_loop()

        if not self.settings.enabled:
            return

        self._stop_event = asyncio.Event()
        self._loop_task = asyncio.create_task(self._run_loop(self._stop_event))
        logger.info("Automation started")

    async def _stop_loop(self):
        task = self._loop_task
        if task is None:
            return

        self._stop_event.set()
        await task

        self._loop_task = None
        self._stop_event = None
        logger.info("Automation stopped")

    @property
    def is_active(self) -> bool:
        return (
            self.settings.enabled
            and self._loop_task is not None
            and not self._loop_task.done()
        )

    async def _run_loop(self, stop_event: asyncio.Event):
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.tick_seconds)
            except asyncio.TimeoutError:
                await self.tick()

    async def _restore_daily_count(self):
        today = self.clock().date()
        jobs = await self.ledger.jobs_for_day(today)
        self.posts_today = sum(1 for job in jobs if job.status == PostingJobStatus.POSTED)
        self.last_post_date = today

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def get_settings(self) -> AutomationSettings:
        return self.settings.model_copy(deep=True)

    async def update_settings(self, changes: dict) -> AutomationSettings:
        """
        Apply, persist and act on a settings change.

        Args:
            changes: Field values to override (snake_case names)

        Returns:
            Copy of the new settings
        """
        async with self._lifecycle_lock:
            new_settings = self.settings.merged(changes)
            await self.settings_store.save(new_settings)
            self.settings = new_settings

            if new_settings.enabled:
                await self._restart_loop()
            else:
                await self._stop_loop()

            return self.get_settings()

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    async def tick(self) -> Optional[PostingJob]:
        """
        Run one scheduling pass.

        Returns:
            The job created this tick, or None for a no-op
        """
        if self._tick_lock.locked():
            logger.warning("Posting already in progress, skipping tick")
            return None

        async with self._tick_lock:
            try:
                return await self._check_for_posting_opportunity()
            except Exception:
                logger.exception("Error in automated posting")
                return None

    def _roll_daily_counter(self, today: date):
        if self.last_post_date != today:
            self.posts_today = 0
            self.last_post_date = today

    async def _check_for_posting_opportunity(self) -> Optional[PostingJob]:
        settings = self.settings
        if not settings.enabled:
            return None

        now = self.clock()
        self._roll_daily_counter(now.date())

        current_time = now.strftime("%H:%M")
        if not settings.posting_hours.contains(current_time):
            logger.debug(f"Outside posting hours at {current_time}")
            return None

        if self.posts_today >= settings.max_posts_per_day:
            logger.debug(f"Daily limit reached ({self.posts_today}/{settings.max_posts_per_day})")
            return None

        last_job = await self.ledger.last_successful()
        if last_job and now - last_job.scheduled_time < timedelta(minutes=settings.posting_interval):
            logger.debug(f"Last post at {last_job.scheduled_time}, waiting for interval")
            return None

        clip = await self._next_eligible_clip(settings)
        if clip is None:
            logger.info("No eligible clips found for posting")
            return None

        job = self._new_job("job", clip.id, settings.platforms, now)
        await self.ledger.append(job)
        await self.execute_job(job, clip)
        return job

    async def _next_eligible_clip(self, settings: AutomationSettings) -> Optional[Clip]:
        clips = await self.eligible_clips(settings)
        return clips[0] if clips else None

    async def eligible_clips(self, settings: Optional[AutomationSettings] = None) -> List[Clip]:
        """Generated clips above the posting bar that were never posted successfully."""
        settings = settings or self.settings
        posted_ids = await self.ledger.posted_clip_ids()
        return await self.clip_store.list_eligible(
            settings.min_virality_score,
            exclude_ids=posted_ids,
        )

    def _new_job(
        self,
        prefix: str,
        clip_id: str,
        platforms: List[str],
        now: datetime,
    ) -> PostingJob:
        return PostingJob(
            id=f"{prefix}_{uuid.uuid4().hex[:16]}",
            clip_id=clip_id,
            platforms=list(dict.fromkeys(platforms)),
            scheduled_time=now,
            status=PostingJobStatus.PENDING,
            attempts=0,
            created_at=now,
        )

    # -------------------------------------------------------------------------
    # Posting
    # -------------------------------------------------------------------------

    async def post_clip_now(
        self,
        clip_id: str,
        platforms: Optional[List[str]] = None,
    ) -> PostingJob:
        """
        Post a clip immediately, bypassing the schedule checks.

        Still leaves a ledger entry and counts toward today's posts. Waits
        for a running tick to finish so the same clip is never posted twice.

        Args:
            clip_id: Clip to post
            platforms: Target platforms (defaults to the configured ones)

        Returns:
            The resolved job; job.status tells whether it posted

        Raises:
            ValueError: The clip does not exist
            ClipAlreadyPostedError: The clip already has a successful job
        """
        async with self._tick_lock:
            clip = await self.clip_store.get_clip(clip_id)
            if not clip:
                raise ValueError(f"Clip {clip_id} not found")

            if clip.id in await self.ledger.posted_clip_ids():
                raise ClipAlreadyPostedError(f"Clip {clip_id} has already been posted")

            now = self.clock()
            self._roll_daily_counter(now.date())

            if platforms is None:
                platforms = self.settings.platforms

            job = self._new_job("manual", clip.id, platforms, now)
            await self.ledger.append(job)
            await self.execute_job(job, clip)
            return job

    async def execute_job(self, job: PostingJob, clip: Clip) -> bool:
        """
        Post a clip to every platform of a job concurrently.

        The job succeeds only if every platform succeeds. On failure the clip
        is left untouched so a later attempt can pick it up again.

        Returns:
            True if the clip was posted everywhere
        """
        job.attempts = (job.attempts or 0) + 1

        try:
            if not job.platforms:
                raise PostingError("No platforms selected")

            results = await asyncio.gather(
                *(self._post_to_platform(clip, platform) for platform in job.platforms),
                return_exceptions=True,
            )

            failed = []
            for platform, result in zip(job.platforms, results):
                if isinstance(result, Exception):
                    logger.error(f"Posting clip {clip.id} to {platform} raised: {result}")
                    failed.append(platform)
                elif result is not True:
                    failed.append(platform)

            if failed:
                raise PostingError(f"Failed to post to: {', '.join(failed)}")

            await self.clip_store.update_status(clip.id, ClipStatus.POSTED, job.platforms)

            job.status = PostingJobStatus.POSTED
            job.error_message = None
            self.posts_today += 1
            logger.info(f'Successfully posted clip "{clip.title}" to {", ".join(job.platforms)}')
            success = True

        except Exception as e:
            job.status = PostingJobStatus.FAILED
            job.error_message = str(e) or "Unknown error"
            logger.error(f"Posting job {job.id} failed: {job.error_message}")
            success = False

        await self.ledger.record_outcome(job)
        return success

    async def _post_to_platform(self, clip: Clip, platform: str) -> bool:
        poster = self.posters.get(platform)
        if poster is None:
            logger.error(f"No poster registered for platform: {platform}")
            return False

        result = await poster.post(clip)
        if not result:
            logger.warning(f"{platform} rejected clip {clip.id}")
        return bool(result)

    async def test_platform_connection(self, platform: str) -> bool:
        """Check that a platform's poster can reach its backend."""
        poster = self.posters.get(platform)
        if poster is None:
            return False

        try:
            return await poster.test_connection()
        except Exception:
            logger.exception(f"Connection test for {platform} failed")
            return False

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    async def get_recent_jobs(self, limit: int = 10) -> List[PostingJob]:
        return await self.ledger.recent(limit)

    async def get_queue_size(self) -> int:
        try:
            return len(await self.eligible_clips())
        except Exception:
            logger.exception("Could not compute posting queue size")
            return 0

    async def get_stats(self) -> dict:
        """Today's posting activity and scheduler state."""
        now = self.clock()
        today_jobs = await self.ledger.jobs_for_day(now.date())

        successful = sum(1 for job in today_jobs if job.status == PostingJobStatus.POSTED)
        failed = sum(1 for job in today_jobs if job.status == PostingJobStatus.FAILED)
        success_rate = round(successful / len(today_jobs) * 100) if today_jobs else 0

        return {
            "posts_today": successful,
            "failed_today": failed,
            "success_rate": success_rate,
            "queue_size": await self.get_queue_size(),
            "next_post_time": await self._next_post_time(now),
            "is_active": self.is_active,
        }

    async def _next_post_time(self, now: datetime) -> str:
        if not self.settings.enabled:
            return "Paused"

        next_post = now
        last_job = await self.ledger.last_successful()
        if last_job:
            next_post = max(now, last_job.scheduled_time + timedelta(minutes=self.settings.posting_interval))
        return next_post.strftime("%H:%M")
