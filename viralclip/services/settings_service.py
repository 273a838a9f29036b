"""Automation settings and their key-value persistence."""
import json
import logging
from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from viralclip.db.database import Database
from viralclip.models.setting import AutomationSettingRow

logger = logging.getLogger(__name__)

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class PostingHours(BaseModel):
    """Local time-of-day window for automated posts (inclusive, HH:MM)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    start: str = Field("09:00", pattern=HHMM_PATTERN)
    end: str = Field("21:00", pattern=HHMM_PATTERN)

    def contains(self, hhmm: str) -> bool:
        # Zero-padded HH:MM strings order the same way as times of day
        return self.start <= hhmm <= self.end


class AutomationSettings(BaseModel):
    """Process-wide automation configuration owned by the engine."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    enabled: bool = False
    posting_interval: int = Field(60, ge=1, description="Minutes between successful posts")
    platforms: List[str] = Field(default_factory=list)
    min_virality_score: float = Field(8.0, ge=0.0, le=10.0)
    max_posts_per_day: int = Field(10, ge=0)
    posting_hours: PostingHours = Field(default_factory=PostingHours)
    auto_approve: bool = False

    @model_validator(mode="after")
    def _dedupe_platforms(self):
        self.platforms = list(dict.fromkeys(self.platforms))
        return self

    def merged(self, changes: dict) -> "AutomationSettings":
        """Return a validated copy with `changes` applied on top."""
        data = self.model_dump()
        data.update(changes)
        return AutomationSettings.model_validate(data)


class SettingsStore:
    """Loads and saves AutomationSettings as one row per field."""

    def __init__(self, db: Database):
        self.db = db

    async def load(self) -> AutomationSettings:
        """Stored values layered over defaults."""
        async with self.db.session() as session:
            result = await session.execute(select(AutomationSettingRow))
            rows = result.scalars().all()

        stored = {}
        for row in rows:
            try:
                stored[row.key] = json.loads(row.value)
            except json.JSONDecodeError:
                logger.warning(f"Ignoring unreadable automation setting '{row.key}'")

        settings = AutomationSettings()
        if stored:
            settings = settings.merged(
                {k: v for k, v in stored.items() if k in AutomationSettings.model_fields}
            )
        return settings

    async def save(self, settings: AutomationSettings):
        """Upsert every field in one statement, replacing previous values."""
        rows = [
            {"key": key, "value": json.dumps(value), "updated_at": datetime.now()}
            for key, value in settings.model_dump().items()
        ]
        statement = sqlite_insert(AutomationSettingRow).values(rows)
        statement = statement.on_conflict_do_update(
            index_elements=[AutomationSettingRow.key],
            set_={
                "value": statement.excluded.value,
                "updated_at": statement.excluded.updated_at,
            },
        )
        async with self.db.session() as session:
            await session.execute(statement)
