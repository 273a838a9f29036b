"""Platform posters - the pluggable capability that publishes a clip."""
import asyncio
import logging
import random
from typing import Dict, Optional

import httpx

from viralclip.config import Settings
from viralclip.models.clip import Clip

logger = logging.getLogger(__name__)


def build_post_payload(clip: Clip, platform: str) -> dict:
    """Content sent to a platform for one clip."""
    return {
        "platform": platform,
        "clipId": clip.id,
        "title": clip.title,
        "caption": clip.caption,
        "hashtags": list(clip.hashtags or []),
        "duration": clip.duration,
        "viralityScore": clip.virality_score,
    }


class PlatformPoster:
    """Posts clips to one social platform.

    Implementations may be slow and are called concurrently for the
    platforms of a single job.
    """

    def __init__(self, platform: str):
        self.platform = platform

    async def post(self, clip: Clip) -> bool:
        raise NotImplementedError

    async def test_connection(self) -> bool:
        raise NotImplementedError


class SimulatedPlatformPoster(PlatformPoster):
    """Stands in for a platform API: random latency and success."""

    def __init__(
        self,
        platform: str,
        min_delay: float = 1.0,
        max_delay: float = 3.0,
        success_rate: float = 0.95,
        connection_success_rate: float = 0.9,
        rng: Optional[random.Random] = None,
    ):
        super().__init__(platform)
        self.min_delay = min_delay
        self.max_delay = max(min_delay, max_delay)
        self.success_rate = success_rate
        self.connection_success_rate = connection_success_rate
        self.rng = rng or random.Random()

    async def post(self, clip: Clip) -> bool:
        logger.info(f"Posting to {self.platform}: {build_post_payload(clip, self.platform)}")
        await asyncio.sleep(self.rng.uniform(self.min_delay, self.max_delay))
        return self.rng.random() < self.success_rate

    async def test_connection(self) -> bool:
        logger.info(f"Testing connection to {self.platform}...")
        await asyncio.sleep(self.min_delay)
        return self.rng.random() < self.connection_success_rate


class WebhookPlatformPoster(PlatformPoster):
    """Delivers clips to an HTTP endpoint that fronts a platform."""

    def __init__(self, platform: str, url: str, timeout: float = 30.0):
        super().__init__(platform)
        self.url = url
        self.timeout = timeout

    async def post(self, clip: Clip) -> bool:
        payload = build_post_payload(clip, self.platform)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Webhook post to {self.platform} failed: {e}")
            return False

        if response.is_success:
            return True

        logger.error(
            f"Webhook post to {self.platform} rejected: "
            f"{response.status_code} {response.text[:200]}"
        )
        return False

    async def test_connection(self) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.url)
        except httpx.HTTPError as e:
            logger.warning(f"Webhook for {self.platform} unreachable: {e}")
            return False
        return response.status_code < 500


def build_platform_posters(
    config: Settings,
    rng: Optional[random.Random] = None,
) -> Dict[str, PlatformPoster]:
    """One poster per supported platform; webhook when a URL is configured."""
    posters: Dict[str, PlatformPoster] = {}
    platforms = list(dict.fromkeys([*config.supported_platforms, *config.platform_webhook_urls]))

    for platform in platforms:
        url = config.platform_webhook_urls.get(platform)
        if url:
            posters[platform] = WebhookPlatformPoster(
                platform, url, timeout=config.webhook_timeout_seconds
            )
        else:
            posters[platform] = SimulatedPlatformPoster(
                platform,
                min_delay=config.simulated_post_min_delay,
                max_delay=config.simulated_post_max_delay,
                success_rate=config.simulated_post_success_rate,
                connection_success_rate=config.simulated_connection_success_rate,
                rng=rng,
            )
    return posters
