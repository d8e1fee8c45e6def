"""Catalog store: the only four storage operations the pipeline performs.

Each operation runs in its own session and commits on its own, so a failed
write never rolls back performances stored earlier in the same run.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stagelog.errors import CatalogStoreError
from stagelog.models import Performance, Showing, Venue
from stagelog.schemas import PerformanceFields, VenueDescriptor

logger = logging.getLogger(__name__)


class CatalogStore(ABC):
    @abstractmethod
    async def find_venue_by_slug(self, slug: str) -> Venue | None: ...

    @abstractmethod
    async def create_venue(self, descriptor: VenueDescriptor, actor_id: str) -> Venue: ...

    @abstractmethod
    async def find_performance(self, title: str, date: datetime, venue_id: int) -> Performance | None: ...

    @abstractmethod
    async def create_performance(self, fields: PerformanceFields) -> Performance: ...


class SqlCatalogStore(CatalogStore):
    """SQLAlchemy-backed store. Raises CatalogStoreError on database failures."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find_venue_by_slug(self, slug: str) -> Venue | None:
        try:
            async with self._session_factory() as session:
                return (
                    await session.execute(select(Venue).where(Venue.slug == slug))
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise CatalogStoreError(f"venue lookup failed for '{slug}': {e}") from e

    async def create_venue(self, descriptor: VenueDescriptor, actor_id: str) -> Venue:
        venue = Venue(**descriptor.model_dump(), submitted_by=actor_id)
        try:
            async with self._session_factory() as session:
                session.add(venue)
                await session.commit()
        except SQLAlchemyError as e:
            raise CatalogStoreError(f"venue create failed for '{descriptor.slug}': {e}") from e
        logger.info("Created venue '%s' (id=%d)", descriptor.slug, venue.id)
        return venue

    async def find_performance(self, title: str, date: datetime, venue_id: int) -> Performance | None:
        try:
            async with self._session_factory() as session:
                return (
                    await session.execute(
                        select(Performance)
                        .join(Showing, Showing.performance_id == Performance.id)
                        .where(
                            Performance.title == title,
                            Showing.date == date,
                            Showing.venue_id == venue_id,
                        )
                        .limit(1)
                    )
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise CatalogStoreError(f"performance lookup failed for '{title}': {e}") from e

    async def create_performance(self, fields: PerformanceFields) -> Performance:
        performance = Performance(
            title=fields.title,
            description=fields.description,
            performance_types=json.dumps(fields.performance_types),
            duration=fields.duration,
            intermissions=fields.intermissions,
            languages=json.dumps(fields.languages),
            company_name=fields.company_name,
            company_description=fields.company_description,
            venue_id=fields.venue_id,
            submitted_by=fields.submitted_by,
            showings=[Showing(**fields.showing.model_dump())],
        )
        try:
            async with self._session_factory() as session:
                session.add(performance)
                await session.commit()
        except SQLAlchemyError as e:
            raise CatalogStoreError(f"performance write failed: {e}") from e
        return performance
