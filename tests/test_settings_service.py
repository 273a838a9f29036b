"""Tests for automation settings and their persistence."""
import asyncio

import pytest
from pydantic import ValidationError

from viralclip.models.setting import AutomationSettingRow
from viralclip.services.settings_service import AutomationSettings, PostingHours


class TestAutomationSettings:
    """Tests for the settings model."""

    def test_defaults(self):
        settings = AutomationSettings()
        assert settings.enabled is False
        assert settings.posting_interval == 60
        assert settings.platforms == []
        assert settings.min_virality_score == 8.0
        assert settings.max_posts_per_day == 10
        assert settings.posting_hours.model_dump() == {"start": "09:00", "end": "21:00"}
        assert settings.auto_approve is False

    def test_accepts_camel_case(self):
        settings = AutomationSettings.model_validate({
            "postingInterval": 30,
            "minViralityScore": 7.5,
            "postingHours": {"start": "08:00", "end": "22:30"},
        })
        assert settings.posting_interval == 30
        assert settings.min_virality_score == 7.5
        assert settings.posting_hours.end == "22:30"

    def test_platforms_deduplicated(self):
        settings = AutomationSettings(platforms=["TikTok", "Twitter", "TikTok"])
        assert settings.platforms == ["TikTok", "Twitter"]

    @pytest.mark.parametrize("changes", [
        {"posting_interval": 0},
        {"max_posts_per_day": -1},
        {"min_virality_score": 11},
        {"posting_hours": {"start": "9:00", "end": "21:00"}},
        {"posting_hours": {"start": "09:00", "end": "24:00"}},
    ])
    def test_invalid_values(self, changes):
        with pytest.raises(ValidationError):
            AutomationSettings().merged(changes)

    def test_merged_leaves_original(self):
        original = AutomationSettings(platforms=["TikTok"])
        updated = original.merged({"enabled": True, "platforms": ["Instagram"]})

        assert updated.enabled is True
        assert updated.platforms == ["Instagram"]
        assert original.enabled is False
        assert original.platforms == ["TikTok"]


class TestPostingHours:
    """Tests for the posting window."""

    @pytest.mark.parametrize("hhmm,inside", [
        ("08:59", False),
        ("09:00", True),
        ("15:30", True),
        ("21:00", True),
        ("21:01", False),
    ])
    def test_contains_is_inclusive(self, hhmm, inside):
        assert PostingHours().contains(hhmm) is inside


class TestSettingsStore:
    """Tests for SettingsStore."""

    @pytest.mark.asyncio
    async def test_load_defaults_when_empty(self, settings_store):
        assert (await settings_store.load()).model_dump() == AutomationSettings().model_dump()

    @pytest.mark.asyncio
    async def test_save_and_load(self, settings_store):
        settings = AutomationSettings(
            enabled=True,
            platforms=["TikTok", "YouTube Shorts"],
            posting_hours=PostingHours(start="07:00", end="23:00"),
        )
        await settings_store.save(settings)

        assert (await settings_store.load()).model_dump() == settings.model_dump()

    @pytest.mark.asyncio
    async def test_save_overwrites(self, settings_store):
        await settings_store.save(AutomationSettings(max_posts_per_day=3))
        await settings_store.save(AutomationSettings(max_posts_per_day=5))

        assert (await settings_store.load()).max_posts_per_day == 5

    @pytest.mark.asyncio
    async def test_concurrent_saves_on_empty_store(self, settings_store):
        settings = AutomationSettings(enabled=True, platforms=["TikTok"])

        await asyncio.gather(settings_store.save(settings), settings_store.save(settings))

        assert (await settings_store.load()).model_dump() == settings.model_dump()

    @pytest.mark.asyncio
    async def test_unreadable_rows_are_skipped(self, settings_store, db):
        await settings_store.save(AutomationSettings(posting_interval=15))
        async with db.session() as session:
            session.add(AutomationSettingRow(key="legacy_option", value="true"))
            row = await session.get(AutomationSettingRow, "enabled")
            row.value = "{not json"

        loaded = await settings_store.load()
        assert loaded.enabled is False
        assert loaded.posting_interval == 15
