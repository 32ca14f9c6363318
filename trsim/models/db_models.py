"""SQLAlchemy ORM models for the sheet: roster, table state, session log."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Enum, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

DEFAULT_TABLE_ID = "default"


def _uuid() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class CharacterRow(Base):
    """One character sheet in the roster."""

    __tablename__ = "characters"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_uuid)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    name: Mapped[str] = mapped_column(String(128), nullable=False)

    position: Mapped[str] = mapped_column(String(64), default="Alice")
    class_type: Mapped[str] = mapped_column(String(64), default="Stacy")
    reinforce_type: Mapped[str] = mapped_column(String(64), default="Weapons")
    reinforce_text: Mapped[str] = mapped_column(Text, default="")

    treasure: Mapped[str] = mapped_column(String(64), default="Photo")
    treasure_intact: Mapped[bool] = mapped_column(Boolean, default=True)

    temperament: Mapped[str] = mapped_column(String(32), default="apathetic")
    speech: Mapped[str] = mapped_column(String(32), default="Blunt")
    trust: Mapped[str] = mapped_column(String(32), default="neutral")

    madness: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    def __str__(self) -> str:
        return f"{self.name} ({self.id[:8]})"

    __table_args__ = (Index("ix_character_order", "sort_order"),)


class TableState(Base):
    """Shared play-table state: parts, sim mode, current scene and turn."""

    __tablename__ = "table_state"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=DEFAULT_TABLE_ID)
    parts_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    sim_mode: Mapped[str] = mapped_column(
        Enum("observe", "intervene", name="sim_mode"), default="observe"
    )
    scene_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    choices_json: Mapped[str | None] = mapped_column(Text, nullable=True)  # current beat's candidates
    active_index: Mapped[int] = mapped_column(Integer, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


class LogEntry(Base):
    """Session log line shown newest first."""

    __tablename__ = "log_entries"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_uuid)
    seq: Mapped[int] = mapped_column(Integer, nullable=False)
    ts: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    category: Mapped[str] = mapped_column(String(16), default="system")
    text: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (Index("ix_log_seq", "seq"),)
