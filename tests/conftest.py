"""Shared test fixtures."""
import asyncio
from datetime import datetime, timedelta
from typing import List, Optional

import pytest
import pytest_asyncio

from viralclip.db.database import Database
from viralclip.models.clip import Clip, ClipStatus
from viralclip.pipeline.segments import TranscriptLine
from viralclip.services.clip_service import ClipStore
from viralclip.services.ledger_service import PostingLedger
from viralclip.services.publish_service import PlatformPoster
from viralclip.services.settings_service import AutomationSettings, SettingsStore
from viralclip.services.transcript_service import SAMPLE_TRANSCRIPT
from viralclip.services.video_service import VideoStore
from viralclip.workers.automation import AutomationEngine

# Tuesday mid-morning, inside the default 09:00-21:00 window
BASE_TIME = datetime(2026, 3, 10, 10, 0, 0)


class FakeClock:
    """Settable replacement for datetime.now."""

    def __init__(self, now: datetime = BASE_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)

    def set_time(self, hour: int, minute: int):
        self.now = self.now.replace(hour=hour, minute=minute)


class FakePoster(PlatformPoster):
    """Records calls and returns a fixed result."""

    def __init__(
        self,
        platform: str,
        result: bool = True,
        delay: float = 0.0,
        error: Optional[Exception] = None,
    ):
        super().__init__(platform)
        self.result = result
        self.delay = delay
        self.error = error
        self.calls: List[str] = []
        self.completed: List[str] = []

    async def post(self, clip: Clip) -> bool:
        self.calls.append(clip.id)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        self.completed.append(clip.id)
        return self.result

    async def test_connection(self) -> bool:
        return self.result


def make_clip(
    clip_id: str,
    score: float,
    status: ClipStatus = ClipStatus.GENERATED,
    created_at: Optional[datetime] = None,
    **kwargs,
) -> Clip:
    """Build a Clip row with sensible defaults."""
    fields = dict(
        id=clip_id,
        video_id="video_1",
        user_id="user_1",
        title=f"Title {clip_id}",
        caption="🔥 Everyone needs to know about this! Let me know what you think!",
        hashtags=["#AI", "#Technology", "#Future", "#Innovation"],
        transcript="sample text",
        start_time=0.0,
        end_time=75.0,
        duration=75.0,
        virality_score=score,
        status=status,
        posted_platforms=[],
        created_at=created_at or BASE_TIME - timedelta(days=1),
    )
    fields.update(kwargs)
    return Clip(**fields)


@pytest.fixture
def sample_lines() -> List[TranscriptLine]:
    """The 12-line reference transcript, 25 seconds per line."""
    return [
        TranscriptLine(text=text, start=i * 25.0, end=(i + 1) * 25.0)
        for i, text in enumerate(SAMPLE_TRANSCRIPT)
    ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def db(tmp_path):
    """Open SQLite database in a temp directory."""
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await database.open()
    yield database
    await database.close()


@pytest.fixture
def clip_store(db) -> ClipStore:
    return ClipStore(db)


@pytest.fixture
def ledger(db) -> PostingLedger:
    return PostingLedger(db)


@pytest.fixture
def settings_store(db) -> SettingsStore:
    return SettingsStore(db)


@pytest.fixture
def video_store(db) -> VideoStore:
    return VideoStore(db)


@pytest.fixture
def posters():
    return {
        "TikTok": FakePoster("TikTok"),
        "Twitter": FakePoster("Twitter"),
    }


@pytest_asyncio.fixture
async def engine(clip_store, ledger, settings_store, posters, clock):
    """Engine with automation enabled in memory but no running loop."""
    automation = AutomationEngine(
        clip_store=clip_store,
        ledger=ledger,
        settings_store=settings_store,
        posters=posters,
        tick_seconds=0.01,
        clock=clock,
    )
    automation.settings = AutomationSettings(
        enabled=True,
        posting_interval=60,
        platforms=["TikTok", "Twitter"],
        min_virality_score=8.0,
        max_posts_per_day=10,
    )
    yield automation
    await automation.shutdown()
