from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stagelog.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Venue(Base):
    __tablename__ = "venues"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str] = mapped_column(Text, nullable=False)
    state: Mapped[str] = mapped_column(Text, nullable=False)
    zip_code: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    venue_type: Mapped[str] = mapped_column(Text, default="theater")  # "theater", "comedy-club", "multi-purpose", ...
    website: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    submitted_by: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)


class Performance(Base):
    __tablename__ = "performances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    performance_types: Mapped[str] = mapped_column(Text, nullable=False)  # JSON array of tag strings
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes
    intermissions: Mapped[int] = mapped_column(Integer, default=0)
    languages: Mapped[str] = mapped_column(Text, default='["English"]')  # JSON array
    company_name: Mapped[str] = mapped_column(Text, nullable=False)
    company_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    venue_id: Mapped[int] = mapped_column(Integer, ForeignKey("venues.id"), nullable=False)

    submitted_by: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)

    venue: Mapped["Venue"] = relationship()
    showings: Mapped[List["Showing"]] = relationship(
        back_populates="performance", cascade="all, delete-orphan"
    )

    @property
    def performance_type_list(self) -> list[str]:
        return json.loads(self.performance_types) if self.performance_types else []

    @property
    def language_list(self) -> list[str]:
        return json.loads(self.languages) if self.languages else []


class Showing(Base):
    __tablename__ = "showings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    performance_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("performances.id"), nullable=False
    )
    venue_id: Mapped[int] = mapped_column(Integer, ForeignKey("venues.id"), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    time: Mapped[str] = mapped_column(Text, nullable=False)  # display time, e.g. "7:00 PM"
    ticket_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sold_out: Mapped[bool] = mapped_column(Boolean, default=False)

    performance: Mapped["Performance"] = relationship(back_populates="showings")
