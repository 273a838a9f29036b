"""Posting ledger - append-only record of every posting attempt."""
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Set

from sqlalchemy import select

from viralclip.db.database import Database
from viralclip.models.posting_job import PostingJob, PostingJobStatus


class PostingLedger:
    """Service for posting jobs.

    Jobs are appended once and only their outcome fields (status, attempts,
    error_message) change afterwards. There is no delete; callers bound
    what they read with `since` and `limit`.
    """

    def __init__(self, db: Database):
        self.db = db

    async def append(self, job: PostingJob) -> PostingJob:
        """Add a new job to the ledger."""
        async with self.db.session() as session:
            session.add(job)
        return job

    async def record_outcome(self, job: PostingJob) -> PostingJob:
        """Persist status, attempts and error_message of an existing job."""
        async with self.db.session() as session:
            stored = await session.get(PostingJob, job.id)
            if not stored:
                raise ValueError(f"Posting job {job.id} not found")
            stored.status = job.status
            stored.attempts = job.attempts
            stored.error_message = job.error_message
        return job

    async def get(self, job_id: str) -> Optional[PostingJob]:
        """Get a job by ID."""
        async with self.db.session() as session:
            return await session.get(PostingJob, job_id)

    async def query(
        self,
        status: Optional[PostingJobStatus] = None,
        clip_id: Optional[str] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[PostingJob]:
        """Jobs matching all given filters, newest scheduled_time first."""
        query = select(PostingJob)
        if status is not None:
            query = query.where(PostingJob.status == status)
        if clip_id is not None:
            query = query.where(PostingJob.clip_id == clip_id)
        if since is not None:
            query = query.where(PostingJob.scheduled_time >= since)
        if until is not None:
            query = query.where(PostingJob.scheduled_time < until)
        query = query.order_by(PostingJob.scheduled_time.desc(), PostingJob.created_at.desc())
        if limit is not None:
            query = query.limit(limit)

        async with self.db.session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def recent(self, limit: int = 10) -> List[PostingJob]:
        return await self.query(limit=limit)

    async def jobs_for_day(self, day: date) -> List[PostingJob]:
        """Jobs scheduled on a local calendar day."""
        start = datetime.combine(day, time.min)
        return await self.query(since=start, until=start + timedelta(days=1))

    async def last_successful(self) -> Optional[PostingJob]:
        """Most recent posted job by scheduled_time."""
        jobs = await self.query(status=PostingJobStatus.POSTED, limit=1)
        return jobs[0] if jobs else None

    async def posted_clip_ids(self) -> Set[str]:
        """IDs of clips that have at least one successful job."""
        async with self.db.session() as session:
            result = await session.execute(
                select(PostingJob.clip_id)
                .where(PostingJob.status == PostingJobStatus.POSTED)
                .distinct()
            )
            return set(result.scalars().all())
