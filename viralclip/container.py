"""Service wiring - builds every store and service from Settings."""
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from viralclip.config import Settings
from viralclip.db.database import Database
from viralclip.services.clip_service import ClipStore
from viralclip.services.ledger_service import PostingLedger
from viralclip.services.publish_service import PlatformPoster, build_platform_posters
from viralclip.services.settings_service import SettingsStore
from viralclip.services.transcript_service import SampleTranscriptSource, TranscriptSource
from viralclip.services.video_service import VideoService, VideoStore
from viralclip.workers.automation import AutomationEngine

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the API needs, with one open/close lifecycle."""
    config: Settings
    db: Database
    clip_store: ClipStore
    ledger: PostingLedger
    settings_store: SettingsStore
    video_store: VideoStore
    video_service: VideoService
    engine: AutomationEngine

    async def open(self):
        await self.db.open()
        await self.engine.start()
        logger.info("Services started")

    async def close(self):
        await self.engine.shutdown()
        await self.db.close()
        logger.info("Services closed")


def build_services(
    config: Settings,
    posters: Optional[Dict[str, PlatformPoster]] = None,
    transcript_source: Optional[TranscriptSource] = None,
    **engine_kwargs,
) -> Services:
    """
    Construct (but do not open) the service graph.

    Args:
        config: Application settings
        posters: Platform posters; built from config when omitted
        transcript_source: Transcript provider; the sample source when omitted
        **engine_kwargs: Extra AutomationEngine arguments (e.g. clock)
    """
    db = Database(config.database_url, echo=config.debug)
    clip_store = ClipStore(db)
    ledger = PostingLedger(db)
    settings_store = SettingsStore(db)
    video_store = VideoStore(db)

    engine_kwargs.setdefault("tick_seconds", config.automation_tick_seconds)
    engine = AutomationEngine(
        clip_store=clip_store,
        ledger=ledger,
        settings_store=settings_store,
        posters=posters if posters is not None else build_platform_posters(config),
        **engine_kwargs,
    )

    return Services(
        config=config,
        db=db,
        clip_store=clip_store,
        ledger=ledger,
        settings_store=settings_store,
        video_store=video_store,
        video_service=VideoService(
            transcript_source or SampleTranscriptSource(),
            clip_store,
            video_store,
        ),
        engine=engine,
    )
