"""Key-value rows backing the persisted automation settings."""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text

from viralclip.db.database import Base


class AutomationSettingRow(Base):
    """One automation setting, value stored as JSON text."""

    __tablename__ = "automation_settings"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    def __repr__(self):
        return f"<AutomationSettingRow(key='{self.key}')>"
