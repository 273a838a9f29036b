"""Clip store - persistence and queries over generated clips."""
from typing import Iterable, List, Optional

from sqlalchemy import func, select

from viralclip.db.database import Database
from viralclip.models.clip import Clip, ClipStatus
from viralclip.models.video import Video

SORT_ORDERS = {
    "virality": (Clip.virality_score.desc(), Clip.created_at.asc(), Clip.start_time.asc()),
    "date": (Clip.created_at.desc(), Clip.start_time.asc()),
    "duration": (Clip.duration.desc(), Clip.virality_score.desc()),
}


class ClipStore:
    """Service for clip records.

    Score and timing are fixed at creation; only posting state and the
    editable metadata fields change afterwards.
    """

    def __init__(self, db: Database):
        self.db = db

    async def add_clips(self, clips: Iterable[Clip]) -> List[Clip]:
        """Insert newly generated clips."""
        clips = list(clips)
        async with self.db.session() as session:
            session.add_all(clips)
        return clips

    async def get_clip(self, clip_id: str) -> Optional[Clip]:
        """Get a clip by ID."""
        async with self.db.session() as session:
            return await session.get(Clip, clip_id)

    async def list_clips(
        self,
        user_id: Optional[str] = None,
        video_id: Optional[str] = None,
        status: Optional[ClipStatus] = None,
        search: Optional[str] = None,
        sort_by: str = "virality",
    ) -> List[Clip]:
        """
        List clips for the review queue.

        Args:
            user_id: Only clips owned by this user
            video_id: Only clips cut from this video
            status: Only clips in this status
            search: Case-insensitive match on title, caption or any hashtag
            sort_by: One of "virality", "date", "duration"

        Returns:
            Matching clips in the requested order
        """
        if sort_by not in SORT_ORDERS:
            raise ValueError(f"Unknown sort order: {sort_by}")

        query = select(Clip)
        if user_id is not None:
            query = query.where(Clip.user_id == user_id)
        if video_id is not None:
            query = query.where(Clip.video_id == video_id)
        if status is not None:
            query = query.where(Clip.status == status)
        query = query.order_by(*SORT_ORDERS[sort_by])

        async with self.db.session() as session:
            result = await session.execute(query)
            clips = list(result.scalars().all())

        if search:
            needle = search.lower()
            clips = [
                c for c in clips
                if needle in c.title.lower()
                or needle in (c.caption or "").lower()
                or any(needle in tag.lower() for tag in c.hashtags or [])
            ]

        return clips

    async def list_eligible(
        self,
        min_score: float,
        exclude_ids: Iterable[str] = (),
    ) -> List[Clip]:
        """Generated clips at or above min_score, best first, oldest first on ties."""
        query = (
            select(Clip)
            .where(Clip.status == ClipStatus.GENERATED)
            .where(Clip.virality_score >= min_score)
            .order_by(*SORT_ORDERS["virality"])
        )
        excluded = set(exclude_ids)
        if excluded:
            query = query.where(Clip.id.not_in(sorted(excluded)))

        async with self.db.session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def update_status(
        self,
        clip_id: str,
        status: ClipStatus,
        posted_platforms: List[str],
    ) -> Clip:
        """Record the posting outcome on a clip."""
        if status == ClipStatus.POSTED and not posted_platforms:
            raise ValueError("A posted clip needs at least one platform")

        async with self.db.session() as session:
            clip = await session.get(Clip, clip_id)
            if not clip:
                raise ValueError(f"Clip {clip_id} not found")
            clip.status = status
            clip.posted_platforms = list(posted_platforms)
        return clip

    async def update_metadata(
        self,
        clip_id: str,
        title: Optional[str] = None,
        caption: Optional[str] = None,
        hashtags: Optional[List[str]] = None,
    ) -> Clip:
        """
        Apply review edits to a clip.

        Only title, caption and hashtags are editable; the virality score
        stays as generated.
        """
        async with self.db.session() as session:
            clip = await session.get(Clip, clip_id)
            if not clip:
                raise ValueError(f"Clip {clip_id} not found")

            if title is not None:
                if not title.strip():
                    raise ValueError("Title cannot be empty")
                clip.title = title
            if caption is not None:
                clip.caption = caption
            if hashtags is not None:
                clip.hashtags = list(hashtags)
        return clip

    async def get_stats(self, user_id: Optional[str] = None) -> dict:
        """Totals for the dashboard."""
        clips = await self.list_clips(user_id=user_id)

        avg_score = 0.0
        if clips:
            avg_score = round(sum(c.virality_score for c in clips) / len(clips), 1)

        video_query = select(func.count(Video.id))
        if user_id is not None:
            video_query = video_query.where(Video.user_id == user_id)
        async with self.db.session() as session:
            total_videos = (await session.execute(video_query)).scalar_one()

        return {
            "total_videos": total_videos,
            "total_clips": len(clips),
            "avg_virality_score": avg_score,
            "posts_published": sum(len(c.posted_platforms or []) for c in clips),
        }
